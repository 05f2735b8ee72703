from __future__ import annotations

import logging

import vpcrecon
import vpcrecon.errors
import vpcrecon.locator
import vpcrecon.provider
import vpcrecon.tags

logger = logging.getLogger(__name__)


def _describe_candidate(vpc: vpcrecon.EC2Vpc) -> str:
    return f"{vpc.get('VpcId')} ({vpc.get('CidrBlock')})"


class VpcReconciler:
    """Ensures exactly one VPC exists for a cluster, adopting or creating it."""

    cluster_name: str
    api: vpcrecon.provider.VpcAPI
    wait: vpcrecon.WaitConfig

    def __init__(
        self,
        cluster_name: str,
        api: vpcrecon.provider.VpcAPI,
        wait: vpcrecon.WaitConfig | None = None,
    ):
        self.cluster_name = cluster_name
        self.api = api
        self.wait = wait or vpcrecon.WaitConfig()

    def reconcile(self, desired: vpcrecon.VPC) -> vpcrecon.VPC:
        logger.info("Reconciling VPC")

        try:
            vpc = self.describe(desired.id)
        except vpcrecon.errors.ReconcileError as err:
            match err.kind:
                case vpcrecon.errors.ErrorKind.NOT_FOUND:
                    vpc = self.create(desired)
                case _:
                    raise
        else:
            logger.debug("Adopting existing VPC %r", vpc.id)

        logger.info("Working on VPC %r", vpc.id)
        return vpc

    def describe(self, vpc_id: str = "") -> vpcrecon.VPC:
        found = vpcrecon.locator.locate(
            vpcrecon.ResourceKind.VPC,
            self.api.describe_vpcs,
            vpc_id,
            vpcrecon.tags.ownership_filters(self.cluster_name),
            describe_candidate=_describe_candidate,
        )

        return vpcrecon.VPC(id=found["VpcId"], cidr_block=found.get("CidrBlock", ""))

    def create(self, desired: vpcrecon.VPC) -> vpcrecon.VPC:
        cidr_block = desired.cidr_block or vpcrecon.DEFAULT_VPC_CIDR

        out = self.api.create_vpc(cidr_block)
        vpc_id = out["VpcId"]

        self.api.wait_until_vpc_available(vpc_id, self.wait)

        self.api.create_tags(
            vpc_id,
            vpcrecon.tags.build_tags(self.cluster_name, name=self.cluster_name, role="common"),
        )

        logger.info("Created new VPC %r with cidr %r", vpc_id, out.get("CidrBlock", cidr_block))

        return vpcrecon.VPC(id=vpc_id, cidr_block=out.get("CidrBlock", cidr_block))

    def delete(self, vpc: vpcrecon.VPC) -> None:
        """Delete the VPC. Not part of the reconcile pipeline; teardown ordering is left to the caller."""
        # TODO: check the VPC carries this cluster's owned tag before deleting it.
        self.api.delete_vpc(vpc.id)
        logger.info("Deleted VPC %r", vpc.id)
