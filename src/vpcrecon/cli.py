from __future__ import annotations

import logging
import typing

import click
import yaml

import vpcrecon
import vpcrecon.cluster
import vpcrecon.ec2
import vpcrecon.errors
import vpcrecon.network


def print_steps(steps: list[tuple[str, typing.Any]]):
    click.secho(
        "∙ " + ("\n∙ ".join([name for name, _ in steps])) + "\n",
        fg="white",
        bold=True,
    )


def dump_network(network: vpcrecon.Network) -> str:
    return yaml.safe_dump(network.to_dict(), default_flow_style=False, sort_keys=False)


def load_cluster(cluster_name: str) -> vpcrecon.cluster.Cluster:
    try:
        return vpcrecon.cluster.Cluster(cluster_name)
    except (FileNotFoundError, RuntimeError, ValueError) as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
def cli(verbose: bool):
    """Reconcile cluster networks against EC2."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
def steps():
    """List the reconcile pipeline steps in order."""
    print_steps([(name, None) for name in vpcrecon.network.STEP_NAMES])


@cli.command()
@click.argument("cluster_name")
def show(cluster_name: str):
    """Print the desired network of CLUSTER_NAME."""
    cluster = load_cluster(cluster_name)
    click.echo(dump_network(cluster.cfg.desired_network()), nl=False)


@cli.command()
@click.argument("cluster_name")
@click.option("--region", default=None, help="Override the region from the cluster config.")
def reconcile(cluster_name: str, region: str | None):
    """Converge the network of CLUSTER_NAME and print what was observed."""
    cfg = load_cluster(cluster_name).cfg
    api = vpcrecon.ec2.EC2Client.from_env(region=region or cfg.region)

    click.secho(f"Reconciling network for {cluster_name} in {region or cfg.region}", bold=True)

    try:
        observed = vpcrecon.network.reconcile_network(cluster_name, cfg.desired_network(), api, wait=cfg.wait)
    except vpcrecon.errors.ReconcileError as err:
        click.secho(f"{err.kind}: {err}", fg="red", err=True)
        raise SystemExit(1) from err

    click.secho("Network reconciled", fg="green")
    click.echo(dump_network(observed), nl=False)


def main():
    cli(prog_name="vpcrecon")
