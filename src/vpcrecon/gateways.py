"""Adopt-only gateway steps.

Gateways are provisioned outside this package. These steps only look up what
already exists: the internet gateway attached to the VPC, and the NAT gateway
sitting in each public subnet. Nothing is created; a missing gateway surfaces
later as a PRECONDITION_MISSING from the route policy, and only if a subnet
needs it. An internet gateway named by id must be attached to the VPC being
reconciled.
"""

from __future__ import annotations

import dataclasses
import logging

import vpcrecon
import vpcrecon.errors
import vpcrecon.locator
import vpcrecon.provider

logger = logging.getLogger(__name__)


class InternetGatewayReconciler:
    api: vpcrecon.provider.GatewayAPI

    def __init__(self, api: vpcrecon.provider.GatewayAPI):
        self.api = api

    def reconcile(self, network: vpcrecon.Network) -> vpcrecon.Network:
        logger.info("Reconciling internet gateways")

        igw = vpcrecon.locator.locate_optional(
            vpcrecon.ResourceKind.INTERNET_GATEWAY,
            self.api.describe_internet_gateways,
            network.internet_gateway_id,
            [{"Name": "attachment.vpc-id", "Values": [network.vpc.id]}],
            describe_candidate=lambda g: g.get("InternetGatewayId", "?"),
        )

        if igw is None:
            if network.public_subnets():
                logger.warning("No internet gateway found for vpc %r", network.vpc.id)
            return dataclasses.replace(network, internet_gateway_id=None)

        igw_id = igw["InternetGatewayId"]
        attached = [a.get("VpcId") for a in igw.get("Attachments", [])]
        if network.vpc.id not in attached:
            msg = f"internet gateway {igw_id!r} is attached to {attached or 'no vpc'}, not to vpc {network.vpc.id!r}"
            raise vpcrecon.errors.precondition_missing(msg, resource_id=igw_id)

        logger.debug("Using internet gateway %r", igw_id)
        return dataclasses.replace(network, internet_gateway_id=igw_id)


class NatGatewayReconciler:
    api: vpcrecon.provider.GatewayAPI

    def __init__(self, api: vpcrecon.provider.GatewayAPI):
        self.api = api

    def reconcile(self, network: vpcrecon.Network) -> vpcrecon.Network:
        logger.info("Reconciling NAT gateways")

        subnets: list[vpcrecon.Subnet] = []
        for sn in network.subnets:
            if not sn.is_public or sn.nat_gateway_id:
                subnets.append(sn)
                continue

            ngw = vpcrecon.locator.locate_optional(
                vpcrecon.ResourceKind.NAT_GATEWAY,
                self.api.describe_nat_gateways,
                None,
                [
                    {"Name": "subnet-id", "Values": [sn.id]},
                    {"Name": "state", "Values": [vpcrecon.NAT_GATEWAY_STATE_AVAILABLE]},
                ],
                describe_candidate=lambda g: g.get("NatGatewayId", "?"),
            )

            if ngw is None:
                logger.debug("No NAT gateway in public subnet %r", sn.id)
                subnets.append(sn)
                continue

            logger.debug("Subnet %r hosts NAT gateway %r", sn.id, ngw["NatGatewayId"])
            subnets.append(dataclasses.replace(sn, nat_gateway_id=ngw["NatGatewayId"]))

        return dataclasses.replace(network, subnets=subnets)
