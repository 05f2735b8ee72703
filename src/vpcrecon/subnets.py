from __future__ import annotations

import logging

import vpcrecon
import vpcrecon.errors

logger = logging.getLogger(__name__)


class ResolvedSubnets:
    """Subnets step for networks whose subnets were created and described upstream.

    The subnets are passed through unchanged once each one is known to carry an id,
    since every later step keys its work on subnet ids.
    """

    def reconcile(self, network: vpcrecon.Network) -> vpcrecon.Network:
        logger.info("Reconciling subnets")

        for i, sn in enumerate(network.subnets):
            if not sn.id:
                msg = f"subnet #{i} in vpc {network.vpc.id!r} has no id; subnets must be resolved before routing"
                raise vpcrecon.errors.precondition_missing(msg, resource_id=network.vpc.id)

        logger.debug(
            "Using %d public and %d private subnets",
            len(network.public_subnets()),
            len(network.private_subnets()),
        )

        return network
