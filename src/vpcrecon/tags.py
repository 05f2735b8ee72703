from __future__ import annotations

import vpcrecon


def cluster_tag_key(cluster_name: str) -> str:
    return f"{vpcrecon.TagKeys.VPCRECON_CLUSTER_PREFIX}{cluster_name}"


def build_tags(
    cluster_name: str,
    name: str | None = None,
    role: str | None = None,
    additional: dict[str, str] | None = None,
) -> dict[str, str]:
    tags = {cluster_tag_key(cluster_name): str(vpcrecon.ResourceLifecycle.OWNED)}

    if name:
        tags[vpcrecon.NAME] = name

    if role:
        tags[str(vpcrecon.TagKeys.VPCRECON_ROLE)] = role

    return tags | (additional or {})


def to_ec2_tags(tags: dict[str, str]) -> list[vpcrecon.EC2Tag]:
    return [{"Key": k, "Value": v} for k, v in sorted(tags.items())]


def from_ec2_tags(tags: list[vpcrecon.EC2Tag] | None) -> dict[str, str]:
    return {t["Key"]: t["Value"] for t in tags or []}


def ownership_filters(cluster_name: str) -> list[vpcrecon.EC2Filter]:
    return [
        {"Name": f"tag:{cluster_tag_key(cluster_name)}", "Values": [str(vpcrecon.ResourceLifecycle.OWNED)]},
    ]
