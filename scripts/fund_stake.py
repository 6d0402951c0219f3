#!/usr/bin/python3

import click
from ape import networks, project
from ape.cli import ConnectedProviderCommand, account_option

from venti_deployment.constants import ARTIFACTS_DIR, VST
from venti_deployment.operations import fund_stake
from venti_deployment.options import autosign_option, stake_address_option
from venti_deployment.params import Transactor
from venti_deployment.registry import get_registry_address
from venti_deployment.tokens import erc20
from venti_deployment.types import MinInt
from venti_deployment.utils import check_plugins

REGISTRY_FILEPATH = ARTIFACTS_DIR / "mainnet.json"


@click.command(cls=ConnectedProviderCommand)
@account_option()
@stake_address_option
@click.option(
    "--rewards",
    "-r",
    help="Reward tokens to fund, as reported by close_legacy_stake",
    type=MinInt(0),
    required=True,
)
@autosign_option
def cli(account, stake_address, rewards, autosign):
    """Fund the migrated pool with principal and rewards and enable staking."""
    check_plugins()
    if not stake_address:
        stake_address = get_registry_address(
            filepath=REGISTRY_FILEPATH,
            chain_id=networks.provider.network.chain_id,
            contract_name="VentiStakeV2",
        )
    if not stake_address:
        raise click.BadOptionUsage("stake_address", "VentiStakeV2 is not in the registry.")

    transactor = Transactor(account=account, autosign=autosign)
    stake = project.VentiStakeV2.at(stake_address)
    fund_stake(transactor=transactor, stake=stake, token=erc20(VST), rewards=rewards)


if __name__ == "__main__":
    cli()
