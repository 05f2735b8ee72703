from __future__ import annotations

import dataclasses
import logging
import typing

import vpcrecon
import vpcrecon.gateways
import vpcrecon.provider
import vpcrecon.route_tables
import vpcrecon.subnets
import vpcrecon.vpc

logger = logging.getLogger(__name__)

Step = typing.Callable[[vpcrecon.Network], vpcrecon.Network]


class NetworkStep(typing.Protocol):
    def reconcile(self, network: vpcrecon.Network) -> vpcrecon.Network: ...


STEP_NAMES = (
    "vpc",
    "subnets",
    "internet-gateways",
    "nat-gateways",
    "route-tables",
)


class NetworkReconciler:
    """
    Drives a cluster network to its desired state in a fixed order.

    The order follows the provider's dependencies: the VPC first, then its subnets,
    then the gateways routes point at, then the route tables themselves. Each step
    receives the network produced by the previous one. The first error stops the
    pass and is raised unchanged; nothing done by earlier steps is rolled back, and
    nothing is retried here. Re-running the whole pass is safe because every step
    adopts what already exists.
    """

    cluster_name: str

    def __init__(
        self,
        cluster_name: str,
        vpcs: vpcrecon.vpc.VpcReconciler,
        subnets: NetworkStep,
        internet_gateways: NetworkStep,
        nat_gateways: NetworkStep,
        route_tables: NetworkStep,
    ):
        self.cluster_name = cluster_name
        self.vpcs = vpcs
        self.subnets = subnets
        self.internet_gateways = internet_gateways
        self.nat_gateways = nat_gateways
        self.route_tables = route_tables

    @classmethod
    def for_provider(
        cls,
        cluster_name: str,
        api: vpcrecon.provider.NetworkAPI,
        wait: vpcrecon.WaitConfig | None = None,
    ) -> NetworkReconciler:
        return cls(
            cluster_name,
            vpcs=vpcrecon.vpc.VpcReconciler(cluster_name, api, wait=wait),
            subnets=vpcrecon.subnets.ResolvedSubnets(),
            internet_gateways=vpcrecon.gateways.InternetGatewayReconciler(api),
            nat_gateways=vpcrecon.gateways.NatGatewayReconciler(api),
            route_tables=vpcrecon.route_tables.RouteTableReconciler(cluster_name, api),
        )

    def _reconcile_vpc(self, network: vpcrecon.Network) -> vpcrecon.Network:
        return dataclasses.replace(network, vpc=self.vpcs.reconcile(network.vpc))

    def steps(self) -> list[tuple[str, Step]]:
        return list(
            zip(
                STEP_NAMES,
                (
                    self._reconcile_vpc,
                    self.subnets.reconcile,
                    self.internet_gateways.reconcile,
                    self.nat_gateways.reconcile,
                    self.route_tables.reconcile,
                ),
                strict=True,
            )
        )

    def reconcile(self, desired: vpcrecon.Network) -> vpcrecon.Network:
        logger.info("Reconciling network for cluster %r", self.cluster_name)

        network = desired
        for name, step in self.steps():
            logger.debug("Running step %r", name)
            network = step(network)

        logger.info("Reconcile network completed successfully")
        return network


def reconcile_network(
    cluster_name: str,
    desired: vpcrecon.Network,
    api: vpcrecon.provider.NetworkAPI,
    wait: vpcrecon.WaitConfig | None = None,
) -> vpcrecon.Network:
    """Reconcile ``desired`` against ``api`` and return the observed network."""
    return NetworkReconciler.for_provider(cluster_name, api, wait=wait).reconcile(desired)
