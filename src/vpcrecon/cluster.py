from __future__ import annotations

import copy
import dataclasses
import os
import pathlib
import typing

import deepmerge  # type: ignore
import yaml

import vpcrecon
import vpcrecon.paths

API_VERSION = "v1beta1"
KIND = "Network"

DEFAULT_SPEC: dict[str, typing.Any] = {
    "region": vpcrecon.DEFAULT_REGION,
    "vpc": {"id": "", "cidr_block": ""},
    "internet_gateway_id": None,
    "subnets": [],
    "wait": dataclasses.asdict(vpcrecon.WaitConfig()),
}


@dataclasses.dataclass(frozen=True)
class ClusterConfig:
    cluster_name: str
    region: str = vpcrecon.DEFAULT_REGION
    network: vpcrecon.Network = dataclasses.field(default_factory=vpcrecon.Network)
    wait: vpcrecon.WaitConfig = dataclasses.field(default_factory=vpcrecon.WaitConfig)

    def desired_network(self) -> vpcrecon.Network:
        return self.network


def _underscore_keys(d: typing.Any) -> typing.Any:
    if isinstance(d, dict):
        return {str(k).replace("-", "_"): _underscore_keys(v) for k, v in d.items()}

    if isinstance(d, list):
        return [_underscore_keys(v) for v in d]

    return d


def load_cluster_config(cluster_name: str, cfg_dict: dict[str, typing.Any]) -> ClusterConfig:
    kind = cfg_dict.get("kind", KIND)
    if kind != KIND:
        msg = f"Kind {kind!r} is not supported, expected {KIND!r}"
        raise ValueError(msg)

    spec = copy.deepcopy(DEFAULT_SPEC)
    deepmerge.always_merger.merge(spec, _underscore_keys(cfg_dict.get("spec") or {}))

    if os.environ.get("VPCRECON_REGION"):
        spec["region"] = os.environ["VPCRECON_REGION"]

    return ClusterConfig(
        cluster_name=cluster_name,
        region=spec["region"],
        network=vpcrecon.Network.from_dict(spec),
        wait=vpcrecon.WaitConfig(**(spec["wait"] or {})),
    )


class Cluster:
    d: pathlib.Path
    cfg: ClusterConfig

    def __init__(self, name: str, paths: vpcrecon.paths.Paths | None = None, *, load_yaml=True):
        self.name = name
        self.d = (paths or vpcrecon.paths.Paths()).cluster(name)
        self.cfg = ClusterConfig(cluster_name=name)

        if not load_yaml:
            return

        if not self.network_yaml.exists():
            msg = f"No network config for cluster {name!r} at {self.network_yaml}"
            raise FileNotFoundError(msg)

        self.cfg = load_cluster_config(name, yaml.safe_load(self.network_yaml.read_text()) or {})

    @property
    def network_yaml(self) -> pathlib.Path:
        return self.d / "network.yaml"
