from pathlib import Path
from typing import Optional

import click
from ape.contracts import ContractInstance

from venti_deployment.config import MigrationConfig
from venti_deployment.confirm import _confirm_migration, print_migration_plan
from venti_deployment.errors import MigrationError, PartialMigrationError
from venti_deployment.migration import MigrationReport, StakeSubmitter, StakerMigration
from venti_deployment.params import Transactor
from venti_deployment.snapshot import write_stakers
from venti_deployment.tokens import MAX_UINT256, get_balance


def close_legacy_stake(
    transactor: Transactor, legacy: ContractInstance, token: ContractInstance
) -> int:
    """
    Shuts the legacy pool down and drains it to the transactor.
    Returns the reward balance to carry over to the new pool.
    """
    transactor.transact(legacy.closeRewards)
    rewards = legacy.totalRewards()
    print(f"Legacy reward balance: {rewards}")
    transactor.transact(legacy.withdrawRewardTokens)

    # park the remaining principal on the admin so the emergency withdrawal returns it
    principal = get_balance(legacy.address, token)
    admin = transactor.get_account().address
    transactor.transact(legacy.stakeOnBehalfOf, admin, principal, 0, 1)
    transactor.transact(legacy.emergencyWithdrawal)

    remaining = get_balance(legacy.address, token)
    if remaining != 0:
        raise ValueError(f"Legacy pool still holds {remaining} tokens after withdrawal.")
    if legacy.isActive():
        raise ValueError("Legacy pool is still active after closing rewards.")
    return rewards


def fund_stake(
    transactor: Transactor, stake: ContractInstance, token: ContractInstance, rewards: int
) -> None:
    """Backs the migrated stakes with tokens, funds rewards and opens the pool."""
    total_supply = stake.totalSupply()
    transactor.transact(token.transfer, stake.address, total_supply)
    transactor.transact(token.approve, stake.address, MAX_UINT256)
    transactor.transact(stake.fundStaking, rewards)
    transactor.transact(stake.enableStaking)
    print(f"Funded {stake.address} with {total_supply} principal and {rewards} rewards.")


def check_migrated_supply(stake: ContractInstance, report: MigrationReport) -> bool:
    """Compares the pool's total supply against the total of the migrated snapshot."""
    total_supply = stake.totalSupply()
    if total_supply != report.total_staked:
        click.echo(
            f"WARNING: {stake.address} total supply is {total_supply}, "
            f"migrated snapshot totals {report.total_staked}",
            err=True,
        )
        return False
    print(f"Total supply matches migrated snapshot: {total_supply}")
    return True


def _print_failure(migration: Optional[StakerMigration], error: Exception) -> None:
    stage = migration.state if migration else "setup"
    click.echo(f"Migration failed during {stage}: {error}", err=True)
    if isinstance(error, PartialMigrationError):
        for result in error.committed:
            click.echo(
                f"\tcommitted batch {result.index} ({result.size} stakers) tx={result.tx_hash}",
                err=True,
            )
        click.echo(
            f"{error.committed_records} stakers are on-chain, {error.remaining_records} are not. "
            f"Resume with --start-batch {error.batch_index}",
            err=True,
        )


def run_migration(
    transactor: Transactor,
    stake: ContractInstance,
    config: MigrationConfig,
    start_batch: int = 0,
    autosign: bool = False,
    report_filepath: Optional[Path] = None,
    export_filepath: Optional[Path] = None,
) -> MigrationReport:
    """
    Runs the snapshot migration into stake.

    Setup failures (bad ABI, unreadable or inconsistent snapshots) are reported on stderr
    and re-raised before anything is submitted; no report is written for them. Once
    submission starts, the report is written whether or not every batch succeeds.
    The merged records are written to export_filepath, when given, before anything is submitted.
    """
    report_filepath = report_filepath or config.report_filepath

    migration = None
    try:
        migration = StakerMigration(
            submit=StakeSubmitter(transactor=transactor, contract=stake),
            max_batch_size=config.max_batch_size,
            batch_count=config.batch_count,
            unmatched=config.unmatched,
            start_batch=start_batch,
        )
        batches = migration.prepare(config.stakers_filepath, config.deposits_filepath)
    except (MigrationError, ValueError, OSError) as e:
        _print_failure(migration, e)
        raise

    if export_filepath:
        write_stakers(migration.records, export_filepath)
        print(f"(i) Merged snapshot written to {export_filepath}")

    if autosign:
        print_migration_plan(batches, start_batch=start_batch)
    else:
        _confirm_migration(batches, start_batch=start_batch)

    try:
        migration.submit_batches()
    except MigrationError as e:
        _print_failure(migration, e)
        migration.report().write(report_filepath)
        raise

    report = migration.report()
    report.write(report_filepath)
    print("State migration is complete")
    return report
