from collections import OrderedDict
from enum import Enum
from typing import Dict, Iterable, List

import click

from venti_deployment.errors import MergeConsistencyError
from venti_deployment.snapshot import PrimaryRow, StakerRecord, SupplementalRow


class UnmatchedDeposits(Enum):
    """What to do with supplemental deposits whose account is not a listed staker."""

    WARN = "warn"
    FAIL = "fail"


def _accumulate_deposits(supplemental: Iterable[SupplementalRow]) -> Dict[str, int]:
    """Sums supplemental deposits per account, keeping first-seen order."""
    deposits = OrderedDict()
    for deposit in supplemental:
        deposits[deposit.account] = deposits.get(deposit.account, 0) + deposit.extra
    return deposits


def merge(
    primary: Iterable[PrimaryRow],
    supplemental: Iterable[SupplementalRow],
    unmatched: UnmatchedDeposits = UnmatchedDeposits.WARN,
) -> List[StakerRecord]:
    """
    Folds supplemental deposits into the primary staker list.
    Output order follows the primary snapshot.
    """
    deposits = _accumulate_deposits(supplemental)

    records = list()
    seen = dict()
    for staker in primary:
        if staker.account in seen:
            raise MergeConsistencyError(
                f"Staker {staker.account} is listed twice (rows {seen[staker.account]} "
                f"and {staker.row})",
                accounts=[staker.account],
            )
        seen[staker.account] = staker.row

        records.append(
            StakerRecord(
                account=staker.account,
                staked=staker.staked + deposits.get(staker.account, 0),
                timestamp=staker.timestamp,
                lock=staker.lock,
                paid=staker.paid,
            )
        )

    orphans = [account for account in deposits if account not in seen]
    if orphans:
        dropped = sum(deposits[account] for account in orphans)
        message = (
            f"{len(orphans)} supplemental deposit account(s) totalling {dropped} "
            f"have no matching staker: {', '.join(orphans)}"
        )
        if unmatched is UnmatchedDeposits.FAIL:
            raise MergeConsistencyError(message, accounts=orphans)
        click.echo(f"WARNING: {message}. Dropping them.", err=True)

    return records


def total_staked(records: Iterable[StakerRecord]) -> int:
    return sum(record.staked for record in records)
