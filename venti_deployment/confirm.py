from collections import OrderedDict
from typing import List, Sequence

from ape.utils import ZERO_ADDRESS

from venti_deployment.constants import LockTier
from venti_deployment.snapshot import StakerRecord


def _abort() -> None:
    print("Aborting deployment!")
    exit(-1)


def _confirm_deployment(contract_name: str) -> None:
    """Asks the user to confirm the deployment of a single contract."""
    answer = input(f"Deploy {contract_name} Y/N? ")
    if answer.lower().strip() == "n":
        _abort()


def _continue() -> None:
    """Asks the user to continue."""
    answer = input("Continue Y/N? ")
    if answer.lower().strip() == "n":
        _abort()


def _confirm_zero_address() -> None:
    answer = input("Zero Address detected for deployment parameter; Continue? Y/N? ")
    if answer.lower().strip() == "n":
        _abort()


def _confirm_resolution(resolved_params: OrderedDict, contract_name: str) -> None:
    """Asks the user to confirm the resolved constructor parameters for a single contract."""
    if len(resolved_params) == 0:
        print(f"\n(i) No constructor parameters for {contract_name}")
        _confirm_deployment(contract_name)
        return

    print(f"\nConstructor parameters for {contract_name}")
    contains_zero_address = False
    for name, resolved_value in resolved_params.items():
        print(f"\t{name}={resolved_value}")
        if not contains_zero_address:
            contains_zero_address = resolved_value == ZERO_ADDRESS
    _confirm_deployment(contract_name)
    if contains_zero_address:
        _confirm_zero_address()


def _lock_tier_name(code: int) -> str:
    try:
        return LockTier(code).name
    except ValueError:
        return f"UNKNOWN({code})"


def print_migration_plan(batches: Sequence[List[StakerRecord]], start_batch: int = 0) -> None:
    """Prints the batch layout and per-tier totals of a pending migration."""
    records = [record for batch in batches for record in batch]
    print(f"\nMigrating {len(records)} stakers in {len(batches)} batch(es)")
    for index, batch in enumerate(batches):
        status = "skip (already committed)" if index < start_batch else "submit"
        print(
            f"\tBatch {index + 1}: {len(batch)} stakers "
            f"{batch[0].account} .. {batch[-1].account} [{status}]"
        )

    tiers = OrderedDict()
    for record in sorted(records, key=lambda r: r.lock):
        count, staked = tiers.get(record.lock, (0, 0))
        tiers[record.lock] = (count + 1, staked + record.staked)
    for lock, (count, staked) in tiers.items():
        print(f"\tLock {lock} ({_lock_tier_name(lock)}): {count} stakers, {staked} staked")
    print(f"\tTotal staked: {sum(record.staked for record in records)}")


def _confirm_migration(batches: Sequence[List[StakerRecord]], start_batch: int = 0) -> None:
    print_migration_plan(batches, start_batch=start_batch)
    _continue()
