from __future__ import annotations

import dataclasses
import enum
import typing

ANYWHERE_IPV4 = "0.0.0.0/0"
DEFAULT_REGION = "us-east-2"
DEFAULT_VPC_CIDR = "10.0.0.0/16"
NAME = "Name"

VPC_STATE_AVAILABLE = "available"
NAT_GATEWAY_STATE_AVAILABLE = "available"


class TagKeys(enum.StrEnum):
    VPCRECON_CLUSTER_PREFIX = "vpcrecon.io/cluster/"
    VPCRECON_ROLE = "vpcrecon.io/role"


class ResourceLifecycle(enum.StrEnum):
    OWNED = "owned"


class ResourceKind(enum.StrEnum):
    VPC = "vpc"
    INTERNET_GATEWAY = "internet-gateway"
    NAT_GATEWAY = "nat-gateway"


class EC2Tag(typing.TypedDict):
    Key: str
    Value: str


class EC2Filter(typing.TypedDict):
    Name: str
    Values: list[str]


class EC2Vpc(typing.TypedDict, total=False):
    VpcId: str
    CidrBlock: str
    State: str
    Tags: list[EC2Tag]


class EC2RouteTableAssociation(typing.TypedDict, total=False):
    RouteTableAssociationId: str
    RouteTableId: str
    SubnetId: str
    Main: bool


class EC2Route(typing.TypedDict, total=False):
    DestinationCidrBlock: str
    GatewayId: str
    NatGatewayId: str
    State: str


class EC2RouteTable(typing.TypedDict, total=False):
    RouteTableId: str
    VpcId: str
    Associations: list[EC2RouteTableAssociation]
    Routes: list[EC2Route]
    Tags: list[EC2Tag]


class EC2InternetGateway(typing.TypedDict, total=False):
    InternetGatewayId: str
    Attachments: list[dict[str, str]]
    Tags: list[EC2Tag]


class EC2NatGateway(typing.TypedDict, total=False):
    NatGatewayId: str
    SubnetId: str
    VpcId: str
    State: str
    Tags: list[EC2Tag]


@dataclasses.dataclass(frozen=True)
class WaitConfig:
    timeout_seconds: float = 300.0
    interval_seconds: float = 5.0
    backoff: float = 1.5
    max_interval_seconds: float = 30.0

    def __post_init__(self):
        if self.timeout_seconds <= 0:
            msg = f"timeout_seconds must be positive, got {self.timeout_seconds}"
            raise ValueError(msg)

        if self.interval_seconds <= 0:
            msg = f"interval_seconds must be positive, got {self.interval_seconds}"
            raise ValueError(msg)

        if self.backoff < 1:
            msg = f"backoff must be at least 1, got {self.backoff}"
            raise ValueError(msg)


@dataclasses.dataclass(frozen=True)
class VPC:
    id: str = ""
    cidr_block: str = ""


@dataclasses.dataclass(frozen=True)
class Subnet:
    id: str
    is_public: bool = False
    availability_zone: str = ""
    cidr_block: str = ""
    route_table_id: str | None = None
    # Only meaningful on public subnets: the NAT gateway hosted in this subnet.
    nat_gateway_id: str | None = None


@dataclasses.dataclass(frozen=True)
class Route:
    destination_cidr_block: str
    gateway_id: str | None = None
    nat_gateway_id: str | None = None

    def __post_init__(self):
        targets = [t for t in (self.gateway_id, self.nat_gateway_id) if t]
        if len(targets) != 1:
            msg = (
                f"route to {self.destination_cidr_block!r} must target exactly one of "
                f"an internet gateway or a NAT gateway, got {len(targets)}"
            )
            raise ValueError(msg)

    @property
    def target(self) -> str:
        return typing.cast(str, self.gateway_id or self.nat_gateway_id)

    def create_kwargs(self) -> dict[str, str]:
        """Render the CreateRoute arguments for this route (route table id excluded)."""
        kwargs = {"DestinationCidrBlock": self.destination_cidr_block}

        if self.gateway_id:
            kwargs["GatewayId"] = self.gateway_id
        else:
            kwargs["NatGatewayId"] = typing.cast(str, self.nat_gateway_id)

        return kwargs


@dataclasses.dataclass(frozen=True)
class RouteTable:
    id: str
    routes: tuple[Route, ...] = ()


@dataclasses.dataclass(frozen=True)
class Network:
    vpc: VPC = dataclasses.field(default_factory=VPC)
    subnets: list[Subnet] = dataclasses.field(default_factory=list)
    internet_gateway_id: str | None = None

    def subnet(self, subnet_id: str) -> Subnet | None:
        for sn in self.subnets:
            if sn.id == subnet_id:
                return sn

        return None

    def public_subnets(self) -> list[Subnet]:
        return [sn for sn in self.subnets if sn.is_public]

    def private_subnets(self) -> list[Subnet]:
        return [sn for sn in self.subnets if not sn.is_public]

    def to_dict(self) -> dict[str, typing.Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, d: dict[str, typing.Any]) -> Network:
        vpc = d.get("vpc") or {}
        subnet_fields = {f.name for f in dataclasses.fields(Subnet)}

        subnets: list[Subnet] = []
        for i, sn in enumerate(d.get("subnets") or []):
            unknown = sorted(set(sn) - subnet_fields)
            if unknown:
                name = sn.get("id") or f"#{i}"
                msg = f"Subnet {name!r} has unsupported keys {unknown}, expected {sorted(subnet_fields)}"
                raise ValueError(msg)

            subnets.append(Subnet(**sn))

        return cls(
            vpc=VPC(id=vpc.get("id") or "", cidr_block=vpc.get("cidr_block") or ""),
            subnets=subnets,
            internet_gateway_id=d.get("internet_gateway_id"),
        )
