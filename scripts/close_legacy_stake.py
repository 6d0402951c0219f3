#!/usr/bin/python3

import click
from ape import project
from ape.cli import ConnectedProviderCommand, account_option

from venti_deployment.constants import LEGACY_STAKE, VST
from venti_deployment.operations import close_legacy_stake
from venti_deployment.options import autosign_option
from venti_deployment.params import Transactor
from venti_deployment.tokens import erc20
from venti_deployment.types import ChecksumAddress
from venti_deployment.utils import check_plugins


@click.command(cls=ConnectedProviderCommand)
@account_option()
@click.option(
    "--legacy-address",
    "-l",
    help="Address of the legacy staking pool",
    type=ChecksumAddress(),
    default=LEGACY_STAKE,
)
@autosign_option
def cli(account, legacy_address, autosign):
    """Close rewards on the legacy pool and withdraw every token it holds."""
    check_plugins()
    transactor = Transactor(account=account, autosign=autosign)
    legacy = project.IVentiSwapStakingV2.at(legacy_address)
    rewards = close_legacy_stake(transactor=transactor, legacy=legacy, token=erc20(VST))
    print(f"Carry {rewards} reward tokens over with: ape run fund_stake --rewards {rewards}")


if __name__ == "__main__":
    cli()
