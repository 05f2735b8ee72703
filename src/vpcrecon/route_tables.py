from __future__ import annotations

import dataclasses
import logging

import vpcrecon
import vpcrecon.provider
import vpcrecon.routes
import vpcrecon.tags

logger = logging.getLogger(__name__)


class RouteTableReconciler:
    cluster_name: str
    api: vpcrecon.provider.RouteTableAPI

    def __init__(self, cluster_name: str, api: vpcrecon.provider.RouteTableAPI):
        self.cluster_name = cluster_name
        self.api = api

    def reconcile(self, network: vpcrecon.Network) -> vpcrecon.Network:
        """
        Give every subnet of the network a route table carrying its default route.

        Subnets already associated with a route table are left as they are, whatever
        routes that table holds. Every other subnet gets a fresh table with the routes
        chosen by ``vpcrecon.routes.routes_for_subnet``, associated to it. The first
        failure aborts the pass; tables created before it are kept.
        :return: the network with ``route_table_id`` filled in on every subnet
        """
        logger.info("Reconciling routing tables")

        subnet_route_map = self.describe_vpc_route_tables_by_subnet(network.vpc.id)

        subnets: list[vpcrecon.Subnet] = []
        for sn in network.subnets:
            existing = subnet_route_map.get(sn.id)
            if existing is not None:
                logger.debug("Subnet %r is already associated with route table %r", sn.id, existing["RouteTableId"])
                # TODO: replace the association when sn.route_table_id names a different table.
                subnets.append(dataclasses.replace(sn, route_table_id=existing["RouteTableId"]))
                continue

            routes = vpcrecon.routes.routes_for_subnet(network, sn)

            rt = self.create_route_table_with_routes(network.vpc, sn, routes)
            self.api.associate_route_table(rt.id, sn.id)

            logger.info("Subnet %r has been associated with route table %r", sn.id, rt.id)
            subnets.append(dataclasses.replace(sn, route_table_id=rt.id))

        return dataclasses.replace(network, subnets=subnets)

    def describe_vpc_route_tables_by_subnet(self, vpc_id: str) -> dict[str, vpcrecon.EC2RouteTable]:
        res: dict[str, vpcrecon.EC2RouteTable] = {}

        # EC2 lets a subnet be associated with a single route table only.
        for rt in self.api.describe_route_tables(vpc_id):
            for association in rt.get("Associations", []):
                subnet_id = association.get("SubnetId")
                if not subnet_id:
                    continue

                res[subnet_id] = rt

        return res

    def create_route_table_with_routes(
        self,
        vpc: vpcrecon.VPC,
        subnet: vpcrecon.Subnet,
        routes: list[vpcrecon.Route],
    ) -> vpcrecon.RouteTable:
        access = "public" if subnet.is_public else "private"
        out = self.api.create_route_table(
            vpc.id,
            tags=vpcrecon.tags.build_tags(
                self.cluster_name,
                name=f"{self.cluster_name}-rt-{access}-{subnet.availability_zone or subnet.id}",
                role=access,
            ),
        )
        route_table_id = out["RouteTableId"]

        for route in routes:
            # TODO: delete the route table when a route fails so the next pass recreates it.
            self.api.create_route(route_table_id, route)

        return vpcrecon.RouteTable(id=route_table_id, routes=tuple(routes))
