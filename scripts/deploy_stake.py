#!/usr/bin/python3
from pathlib import Path

import click
from ape import project
from ape.cli import ConnectedProviderCommand, account_option

from venti_deployment.constants import CONSTRUCTOR_PARAMS_DIR
from venti_deployment.options import autosign_option
from venti_deployment.params import Deployer

CONSTRUCTOR_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "mainnet" / "stake-v2.yml"


@click.command(cls=ConnectedProviderCommand)
@account_option()
@click.option(
    "--constructor-params",
    "-p",
    help="Constructor parameters YAML file",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=CONSTRUCTOR_PARAMS_FILEPATH,
)
@click.option("--verify", help="Publish source to the block explorer", is_flag=True)
@autosign_option
def cli(account, constructor_params, verify, autosign):
    """Deploy the VentiStakeV2 token staking pool."""
    deployer = Deployer.from_yaml(
        filepath=constructor_params, verify=verify, account=account, autosign=autosign
    )
    stake = deployer.deploy(project.VentiStakeV2)
    deployer.finalize(deployments=[stake])


if __name__ == "__main__":
    cli()
