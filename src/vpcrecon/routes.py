"""Default route policy per subnet class.

Public subnets route everything through the VPC's internet gateway; private
subnets route through the NAT gateway living in a public subnet of the same
availability zone. Only the default route is synthesized.
"""

from __future__ import annotations

import vpcrecon
import vpcrecon.errors


def default_public_routes(internet_gateway_id: str) -> list[vpcrecon.Route]:
    return [
        vpcrecon.Route(
            destination_cidr_block=vpcrecon.ANYWHERE_IPV4,
            gateway_id=internet_gateway_id,
        ),
    ]


def default_private_routes(nat_gateway_id: str) -> list[vpcrecon.Route]:
    return [
        vpcrecon.Route(
            destination_cidr_block=vpcrecon.ANYWHERE_IPV4,
            nat_gateway_id=nat_gateway_id,
        ),
    ]


def nat_gateway_for_subnet(subnets: list[vpcrecon.Subnet], subnet: vpcrecon.Subnet) -> str:
    if subnet.is_public:
        msg = f"cannot get NAT gateway for a public subnet, got id {subnet.id!r}"
        raise vpcrecon.errors.precondition_missing(msg, resource_id=subnet.id)

    for sn in subnets:
        if not sn.is_public or sn.availability_zone != subnet.availability_zone:
            continue

        if sn.nat_gateway_id:
            return sn.nat_gateway_id

    msg = f"no NAT gateway found for subnet {subnet.id!r} in availability zone {subnet.availability_zone!r}"
    raise vpcrecon.errors.precondition_missing(msg, resource_id=subnet.id)


def routes_for_subnet(network: vpcrecon.Network, subnet: vpcrecon.Subnet) -> list[vpcrecon.Route]:
    if subnet.is_public:
        if not network.internet_gateway_id:
            msg = f"failed to create routing tables: internet gateway for {network.vpc.id!r} is missing"
            raise vpcrecon.errors.precondition_missing(msg, resource_id=network.vpc.id)

        return default_public_routes(network.internet_gateway_id)

    return default_private_routes(nat_gateway_for_subnet(network.subnets, subnet))
