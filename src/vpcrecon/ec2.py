from __future__ import annotations

import logging
import typing

import boto3
from botocore.exceptions import BotoCoreError, ClientError

import vpcrecon
import vpcrecon.errors
import vpcrecon.provider
import vpcrecon.tags
import vpcrecon.wait

logger = logging.getLogger(__name__)


def error_code(e: Exception) -> str:
    if isinstance(e, ClientError):
        return e.response.get("Error", {}).get("Code", "")

    return e.__class__.__name__


def is_not_found_code(code: str) -> bool:
    # e.g. InvalidVpcID.NotFound, InvalidRouteTableID.NotFound, NatGatewayNotFound
    return code.endswith("NotFound")


class EC2Client(vpcrecon.provider.NetworkAPI):
    """boto3-backed implementation of the network capability surface.

    Every failed call is re-raised as a ``ReconcileError`` of kind
    ``PROVIDER_CALL_FAILURE`` naming the operation and resource. Describe calls
    made with explicit ids treat EC2's ``*.NotFound`` codes as an empty result.
    """

    def __init__(self, client: typing.Any):
        self.client = client

    @classmethod
    def from_env(cls, region: str = vpcrecon.DEFAULT_REGION, exe_env: dict[str, str] | None = None) -> EC2Client:
        session = boto3.Session(
            aws_access_key_id=exe_env.get("AWS_ACCESS_KEY_ID") if exe_env else None,
            aws_secret_access_key=exe_env.get("AWS_SECRET_ACCESS_KEY") if exe_env else None,
            aws_session_token=exe_env.get("AWS_SESSION_TOKEN") if exe_env else None,
            region_name=region,
        )

        return cls(session.client("ec2"))

    def _call(self, operation: str, resource_id: str | None, msg: str, fn: typing.Callable, **kwargs) -> typing.Any:
        try:
            return fn(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise vpcrecon.errors.provider_failure(msg, operation=operation, resource_id=resource_id) from e

    def _describe(
        self,
        operation: str,
        fn: typing.Callable,
        result_key: str,
        ids_key: str,
        ids: list[str] | None,
        filters: list[vpcrecon.EC2Filter] | None,
        filters_key: str = "Filters",
    ) -> list[typing.Any]:
        kwargs: dict[str, typing.Any] = {}
        if ids:
            kwargs[ids_key] = ids
        if filters:
            kwargs[filters_key] = filters

        resource_id = ",".join(ids) if ids else None

        try:
            response = fn(**kwargs)
        except ClientError as e:
            if ids and is_not_found_code(error_code(e)):
                logger.debug("%s: %s reported %s", operation, resource_id, error_code(e))
                return []

            msg = f"failed to {operation.replace('-', ' ')}"
            raise vpcrecon.errors.provider_failure(msg, operation=operation, resource_id=resource_id) from e
        except BotoCoreError as e:
            msg = f"failed to {operation.replace('-', ' ')}"
            raise vpcrecon.errors.provider_failure(msg, operation=operation, resource_id=resource_id) from e

        return list(response.get(result_key, []))

    # VPCs

    def describe_vpcs(
        self,
        ids: list[str] | None = None,
        filters: list[vpcrecon.EC2Filter] | None = None,
    ) -> list[vpcrecon.EC2Vpc]:
        return self._describe("describe-vpcs", self.client.describe_vpcs, "Vpcs", "VpcIds", ids, filters)

    def create_vpc(self, cidr_block: str) -> vpcrecon.EC2Vpc:
        response = self._call(
            "create-vpc",
            None,
            f"failed to create vpc with cidr {cidr_block!r}",
            self.client.create_vpc,
            CidrBlock=cidr_block,
        )

        return response["Vpc"]

    def wait_until_vpc_available(self, vpc_id: str, cfg: vpcrecon.WaitConfig) -> vpcrecon.EC2Vpc:
        def probe() -> vpcrecon.EC2Vpc | None:
            for vpc in self.describe_vpcs(ids=[vpc_id]):
                if vpc.get("State") == vpcrecon.VPC_STATE_AVAILABLE:
                    return vpc

            return None

        return vpcrecon.wait.poll_until(probe, cfg, operation="wait-vpc-available", resource_id=vpc_id)

    def create_tags(self, resource_id: str, tags: dict[str, str]) -> None:
        self._call(
            "create-tags",
            resource_id,
            f"failed to tag {resource_id!r}",
            self.client.create_tags,
            Resources=[resource_id],
            Tags=vpcrecon.tags.to_ec2_tags(tags),
        )

    def delete_vpc(self, vpc_id: str) -> None:
        self._call("delete-vpc", vpc_id, f"failed to delete vpc {vpc_id!r}", self.client.delete_vpc, VpcId=vpc_id)

    # Route tables

    def describe_route_tables(self, vpc_id: str) -> list[vpcrecon.EC2RouteTable]:
        try:
            paginator = self.client.get_paginator("describe_route_tables")
            route_tables: list[vpcrecon.EC2RouteTable] = []
            for page in paginator.paginate(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}]):
                route_tables.extend(page.get("RouteTables", []))
        except (ClientError, BotoCoreError) as e:
            msg = f"failed to describe route tables in vpc {vpc_id!r}"
            raise vpcrecon.errors.provider_failure(msg, operation="describe-route-tables", resource_id=vpc_id) from e

        return route_tables

    def create_route_table(self, vpc_id: str, tags: dict[str, str] | None = None) -> vpcrecon.EC2RouteTable:
        kwargs: dict[str, typing.Any] = {"VpcId": vpc_id}
        if tags:
            kwargs["TagSpecifications"] = [
                {"ResourceType": "route-table", "Tags": vpcrecon.tags.to_ec2_tags(tags)},
            ]

        response = self._call(
            "create-route-table",
            vpc_id,
            f"failed to create route table in vpc {vpc_id!r}",
            self.client.create_route_table,
            **kwargs,
        )

        return response["RouteTable"]

    def create_route(self, route_table_id: str, route: vpcrecon.Route) -> None:
        self._call(
            "create-route",
            route_table_id,
            f"failed to create route in route table {route_table_id!r}: "
            f"{route.destination_cidr_block} -> {route.target}",
            self.client.create_route,
            RouteTableId=route_table_id,
            **route.create_kwargs(),
        )

    def associate_route_table(self, route_table_id: str, subnet_id: str) -> str:
        response = self._call(
            "associate-route-table",
            route_table_id,
            f"failed to associate route table {route_table_id!r} to subnet {subnet_id!r}",
            self.client.associate_route_table,
            RouteTableId=route_table_id,
            SubnetId=subnet_id,
        )

        return response.get("AssociationId", "")

    def delete_route_table(self, route_table_id: str) -> None:
        self._call(
            "delete-route-table",
            route_table_id,
            f"failed to delete route table {route_table_id!r}",
            self.client.delete_route_table,
            RouteTableId=route_table_id,
        )

    # Gateways

    def describe_internet_gateways(
        self,
        ids: list[str] | None = None,
        filters: list[vpcrecon.EC2Filter] | None = None,
    ) -> list[vpcrecon.EC2InternetGateway]:
        return self._describe(
            "describe-internet-gateways",
            self.client.describe_internet_gateways,
            "InternetGateways",
            "InternetGatewayIds",
            ids,
            filters,
        )

    def describe_nat_gateways(
        self,
        ids: list[str] | None = None,
        filters: list[vpcrecon.EC2Filter] | None = None,
    ) -> list[vpcrecon.EC2NatGateway]:
        # DescribeNatGateways spells its filter parameter in the singular.
        return self._describe(
            "describe-nat-gateways",
            self.client.describe_nat_gateways,
            "NatGateways",
            "NatGatewayIds",
            ids,
            filters,
            filters_key="Filter",
        )
