"""Shared pytest fixtures for vpcrecon tests.

This module provides common fixtures used across test files:
- vpcrecon_root: Sets VPCRECON_ROOT environment variable
- fake_ec2: In-memory provider double recording every call
- desired_network: Two-zone network with one public and one private subnet per zone
"""

from __future__ import annotations

import copy
import itertools
import pathlib
import typing

import pytest

import vpcrecon
import vpcrecon.errors
import vpcrecon.provider
import vpcrecon.tags

CLUSTER_NAME = "bologna01"

# ============================================================================
# Provider Double
# ============================================================================


def _field_values(resource: dict[str, typing.Any], name: str) -> list[str]:
    if name.startswith("tag:"):
        tags = vpcrecon.tags.from_ec2_tags(resource.get("Tags"))
        key = name[len("tag:") :]
        return [tags[key]] if key in tags else []

    if name == "tag-key":
        return list(vpcrecon.tags.from_ec2_tags(resource.get("Tags")))

    if name == "attachment.vpc-id":
        return [a["VpcId"] for a in resource.get("Attachments", [])]

    key = {"vpc-id": "VpcId", "subnet-id": "SubnetId", "state": "State"}[name]
    return [resource[key]] if key in resource else []


def _matches(resource: dict[str, typing.Any], filters: list[vpcrecon.EC2Filter] | None) -> bool:
    for f in filters or []:
        if not set(_field_values(resource, f["Name"])) & set(f["Values"]):
            return False

    return True


class FakeEC2(vpcrecon.provider.NetworkAPI):
    """In-memory stand-in for EC2.

    Resources live in plain dicts shaped like boto3 responses. Every call is
    appended to ``calls`` as ``(operation, kwargs)``. ``fail(operation, when)``
    makes matching calls raise a PROVIDER_CALL_FAILURE instead of running.
    Setting ``gateway_for_new_vpcs`` attaches that internet gateway to every VPC
    created through ``create_vpc``, as an upstream gateway stage would.
    """

    def __init__(self):
        self.vpcs: dict[str, dict[str, typing.Any]] = {}
        self.route_tables: dict[str, dict[str, typing.Any]] = {}
        self.internet_gateways: dict[str, dict[str, typing.Any]] = {}
        self.nat_gateways: dict[str, dict[str, typing.Any]] = {}
        self.calls: list[tuple[str, dict[str, typing.Any]]] = []
        self.failures: list[tuple[str, typing.Callable[..., bool]]] = []
        self.gateway_for_new_vpcs: str | None = None
        self._ids = itertools.count(1)

    # -- test helpers --------------------------------------------------------

    def fail(self, operation: str, when: typing.Callable[..., bool] = lambda **_: True) -> None:
        self.failures.append((operation, when))

    def calls_to(self, operation: str) -> list[dict[str, typing.Any]]:
        return [kwargs for op, kwargs in self.calls if op == operation]

    def mutating_calls(self) -> list[tuple[str, dict[str, typing.Any]]]:
        return [(op, kw) for op, kw in self.calls if op.startswith(("create_", "associate_", "delete_"))]

    def add_vpc(self, cidr_block: str = "10.1.0.0/16", owner: str | None = None, state: str = "available") -> str:
        vpc_id = self._new_id("vpc")
        tags = vpcrecon.tags.build_tags(owner) if owner else {}
        self.vpcs[vpc_id] = {
            "VpcId": vpc_id,
            "CidrBlock": cidr_block,
            "State": state,
            "Tags": vpcrecon.tags.to_ec2_tags(tags),
        }
        return vpc_id

    def add_internet_gateway(self, vpc_id: str | None, igw_id: str | None = None) -> str:
        igw_id = igw_id or self._new_id("igw")
        self.internet_gateways[igw_id] = {"InternetGatewayId": igw_id, "Attachments": []}
        if vpc_id:
            self.attach_internet_gateway(igw_id, vpc_id)
        return igw_id

    def attach_internet_gateway(self, igw_id: str, vpc_id: str) -> None:
        self.internet_gateways[igw_id]["Attachments"] = [{"VpcId": vpc_id, "State": "available"}]

    def add_nat_gateway(
        self, vpc_id: str, subnet_id: str, state: str = "available", ngw_id: str | None = None
    ) -> str:
        ngw_id = ngw_id or self._new_id("nat")
        self.nat_gateways[ngw_id] = {
            "NatGatewayId": ngw_id,
            "VpcId": vpc_id,
            "SubnetId": subnet_id,
            "State": state,
        }
        return ngw_id

    def add_route_table(self, vpc_id: str, subnet_ids: list[str]) -> str:
        rt_id = self._new_id("rtb")
        self.route_tables[rt_id] = {
            "RouteTableId": rt_id,
            "VpcId": vpc_id,
            "Associations": [{"RouteTableId": rt_id, "SubnetId": sn, "Main": False} for sn in subnet_ids],
            "Routes": [],
        }
        return rt_id

    def routes_of(self, route_table_id: str) -> list[dict[str, str]]:
        return self.route_tables[route_table_id]["Routes"]

    def subnets_of(self, route_table_id: str) -> list[str]:
        return [a["SubnetId"] for a in self.route_tables[route_table_id]["Associations"] if a.get("SubnetId")]

    # -- internals -----------------------------------------------------------

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids):08x}"

    def _record(self, operation: str, **kwargs) -> None:
        self.calls.append((operation, kwargs))
        for op, when in self.failures:
            if op == operation and when(**kwargs):
                msg = f"injected failure for {operation}"
                raise vpcrecon.errors.provider_failure(msg, operation=operation, resource_id=kwargs.get("resource_id"))

    @staticmethod
    def _describe(store: dict[str, dict[str, typing.Any]], ids, filters) -> list[typing.Any]:
        if ids:
            return [copy.deepcopy(store[i]) for i in ids if i in store]

        return [copy.deepcopy(r) for r in store.values() if _matches(r, filters)]

    # -- VpcAPI --------------------------------------------------------------

    def describe_vpcs(self, ids=None, filters=None):
        self._record("describe_vpcs", ids=ids, filters=filters)
        return self._describe(self.vpcs, ids, filters)

    def create_vpc(self, cidr_block):
        self._record("create_vpc", cidr_block=cidr_block)
        vpc_id = self.add_vpc(cidr_block, state="pending")
        if self.gateway_for_new_vpcs:
            self.attach_internet_gateway(self.gateway_for_new_vpcs, vpc_id)
        return copy.deepcopy(self.vpcs[vpc_id])

    def wait_until_vpc_available(self, vpc_id, cfg):
        self._record("wait_until_vpc_available", resource_id=vpc_id)
        self.vpcs[vpc_id]["State"] = vpcrecon.VPC_STATE_AVAILABLE
        return copy.deepcopy(self.vpcs[vpc_id])

    def create_tags(self, resource_id, tags):
        self._record("create_tags", resource_id=resource_id, tags=tags)
        for store in (self.vpcs, self.route_tables):
            if resource_id in store:
                merged = vpcrecon.tags.from_ec2_tags(store[resource_id].get("Tags")) | tags
                store[resource_id]["Tags"] = vpcrecon.tags.to_ec2_tags(merged)

    def delete_vpc(self, vpc_id):
        self._record("delete_vpc", resource_id=vpc_id)
        self.vpcs.pop(vpc_id)

    # -- RouteTableAPI -------------------------------------------------------

    def describe_route_tables(self, vpc_id):
        self._record("describe_route_tables", resource_id=vpc_id)
        return self._describe(self.route_tables, None, [{"Name": "vpc-id", "Values": [vpc_id]}])

    def create_route_table(self, vpc_id, tags=None):
        self._record("create_route_table", resource_id=vpc_id, tags=tags)
        rt_id = self.add_route_table(vpc_id, [])
        self.route_tables[rt_id]["Tags"] = vpcrecon.tags.to_ec2_tags(tags or {})
        return copy.deepcopy(self.route_tables[rt_id])

    def create_route(self, route_table_id, route):
        self._record("create_route", resource_id=route_table_id, route=route)
        self.route_tables[route_table_id]["Routes"].append(route.create_kwargs())

    def associate_route_table(self, route_table_id, subnet_id):
        self._record("associate_route_table", resource_id=route_table_id, subnet_id=subnet_id)
        for rt in self.route_tables.values():
            if any(a.get("SubnetId") == subnet_id for a in rt["Associations"]):
                msg = f"subnet {subnet_id!r} is already associated"
                raise vpcrecon.errors.provider_failure(
                    msg, operation="associate_route_table", resource_id=route_table_id
                )

        association_id = self._new_id("rtbassoc")
        self.route_tables[route_table_id]["Associations"].append(
            {"RouteTableAssociationId": association_id, "RouteTableId": route_table_id, "SubnetId": subnet_id}
        )
        return association_id

    def delete_route_table(self, route_table_id):
        self._record("delete_route_table", resource_id=route_table_id)
        self.route_tables.pop(route_table_id)

    # -- GatewayAPI ----------------------------------------------------------

    def describe_internet_gateways(self, ids=None, filters=None):
        self._record("describe_internet_gateways", ids=ids, filters=filters)
        return self._describe(self.internet_gateways, ids, filters)

    def describe_nat_gateways(self, ids=None, filters=None):
        self._record("describe_nat_gateways", ids=ids, filters=filters)
        return self._describe(self.nat_gateways, ids, filters)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def vpcrecon_root(monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path) -> pathlib.Path:
    """Set VPCRECON_ROOT to a temporary directory and clear any region override."""
    monkeypatch.setenv("VPCRECON_ROOT", str(tmp_path))
    monkeypatch.delenv("VPCRECON_REGION", raising=False)
    return tmp_path


@pytest.fixture
def cluster_name() -> str:
    return CLUSTER_NAME


@pytest.fixture
def fake_ec2() -> FakeEC2:
    return FakeEC2()


@pytest.fixture
def desired_network() -> vpcrecon.Network:
    """A network with no VPC yet and a public/private subnet pair in each of two zones.

    The public subnets already host NAT gateways, as the upstream gateway step would
    leave them.
    """
    return vpcrecon.Network(
        vpc=vpcrecon.VPC(),
        internet_gateway_id="igw-upstream",
        subnets=[
            vpcrecon.Subnet(id="subnet-pub-a", is_public=True, availability_zone="us-east-2a", nat_gateway_id="nat-a"),
            vpcrecon.Subnet(id="subnet-priv-a", availability_zone="us-east-2a"),
            vpcrecon.Subnet(id="subnet-pub-b", is_public=True, availability_zone="us-east-2b", nat_gateway_id="nat-b"),
            vpcrecon.Subnet(id="subnet-priv-b", availability_zone="us-east-2b"),
        ],
    )
