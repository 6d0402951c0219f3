#!/usr/bin/python3
import sys

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, account_option

from venti_deployment.config import MigrationConfig
from venti_deployment.errors import MigrationError
from venti_deployment.operations import check_migrated_supply, run_migration
from venti_deployment.options import (
    autosign_option,
    batch_count_option,
    deposits_option,
    export_option,
    max_batch_size_option,
    params_option,
    stake_address_option,
    stakers_option,
    start_batch_option,
    unmatched_option,
)
from venti_deployment.params import Transactor
from venti_deployment.registry import get_registry_address
from venti_deployment.utils import check_plugins, get_contract_container, validate_chain_id


@click.command(cls=ConnectedProviderCommand)
@account_option()
@params_option
@stakers_option
@deposits_option
@export_option
@max_batch_size_option
@batch_count_option
@start_batch_option
@unmatched_option
@stake_address_option
@autosign_option
def cli(
    account,
    params_filepath,
    stakers_filepath,
    deposits_filepath,
    export_filepath,
    max_batch_size,
    batch_count,
    start_batch,
    unmatched,
    stake_address,
    autosign,
):
    """Re-create staker balances in a new staking pool from CSV snapshots."""
    check_plugins()
    config = MigrationConfig.from_yaml(params_filepath)
    overrides = dict(
        stakers_filepath=stakers_filepath,
        deposits_filepath=deposits_filepath,
        max_batch_size=max_batch_size,
        batch_count=batch_count,
        unmatched=unmatched,
    )
    config = config._replace(**{k: v for k, v in overrides.items() if v is not None})
    validate_chain_id(config.chain_id)

    if not stake_address and config.registry_filepath:
        stake_address = get_registry_address(
            filepath=config.registry_filepath,
            chain_id=networks.provider.network.chain_id,
            contract_name=config.contract,
        )
    if not stake_address:
        raise click.BadOptionUsage(
            "stake_address", f"No {config.contract} address given or found in the registry."
        )

    transactor = Transactor(account=account, autosign=autosign)
    stake = get_contract_container(config.contract).at(stake_address)
    try:
        report = run_migration(
            transactor=transactor,
            stake=stake,
            config=config,
            start_batch=start_batch,
            autosign=autosign,
            export_filepath=export_filepath,
        )
    except (MigrationError, ValueError, OSError) as e:
        click.echo(f"Migration aborted: {e}", err=True)
        sys.exit(1)

    check_migrated_supply(stake=stake, report=report)


if __name__ == "__main__":
    cli()
