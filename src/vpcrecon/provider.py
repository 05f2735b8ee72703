"""Capability interfaces consumed by the reconcilers.

Each resource kind gets its own narrow interface so that a reconciler only
depends on the calls it makes. ``vpcrecon.ec2.EC2Client`` implements all of
them against boto3; tests substitute in-memory doubles.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import vpcrecon


class VpcAPI(ABC):
    @abstractmethod
    def describe_vpcs(
        self,
        ids: list[str] | None = None,
        filters: list[vpcrecon.EC2Filter] | None = None,
    ) -> list[vpcrecon.EC2Vpc]:
        pass

    @abstractmethod
    def create_vpc(self, cidr_block: str) -> vpcrecon.EC2Vpc:
        pass

    @abstractmethod
    def wait_until_vpc_available(self, vpc_id: str, cfg: vpcrecon.WaitConfig) -> vpcrecon.EC2Vpc:
        pass

    @abstractmethod
    def create_tags(self, resource_id: str, tags: dict[str, str]) -> None:
        pass

    @abstractmethod
    def delete_vpc(self, vpc_id: str) -> None:
        pass


class RouteTableAPI(ABC):
    @abstractmethod
    def describe_route_tables(self, vpc_id: str) -> list[vpcrecon.EC2RouteTable]:
        pass

    @abstractmethod
    def create_route_table(self, vpc_id: str, tags: dict[str, str] | None = None) -> vpcrecon.EC2RouteTable:
        pass

    @abstractmethod
    def create_route(self, route_table_id: str, route: vpcrecon.Route) -> None:
        pass

    @abstractmethod
    def associate_route_table(self, route_table_id: str, subnet_id: str) -> str:
        pass

    @abstractmethod
    def delete_route_table(self, route_table_id: str) -> None:
        pass


class GatewayAPI(ABC):
    @abstractmethod
    def describe_internet_gateways(
        self,
        ids: list[str] | None = None,
        filters: list[vpcrecon.EC2Filter] | None = None,
    ) -> list[vpcrecon.EC2InternetGateway]:
        pass

    @abstractmethod
    def describe_nat_gateways(
        self,
        ids: list[str] | None = None,
        filters: list[vpcrecon.EC2Filter] | None = None,
    ) -> list[vpcrecon.EC2NatGateway]:
        pass


class NetworkAPI(VpcAPI, RouteTableAPI, GatewayAPI):
    """Everything the network pipeline needs from a provider."""
