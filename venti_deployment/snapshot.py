import csv
import re
from pathlib import Path
from typing import Iterable, Iterator, List, NamedTuple

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from venti_deployment.errors import InputParseError

STAKER_COLUMNS = ("account", "staked", "timestamp", "lock", "paid")
DEPOSIT_COLUMNS = ("account", "extra")

_UNSIGNED_INTEGER = re.compile(r"^[0-9]+$")


class PrimaryRow(NamedTuple):
    """A staker as exported from the legacy pool."""

    account: ChecksumAddress
    staked: int
    timestamp: int
    lock: int
    paid: int
    row: int = 0


class SupplementalRow(NamedTuple):
    """An additional deposit made by an already listed staker."""

    account: ChecksumAddress
    extra: int
    row: int = 0


class StakerRecord(NamedTuple):
    """Staker state to re-establish in the new pool."""

    account: ChecksumAddress
    staked: int
    timestamp: int
    lock: int
    paid: int

    def as_struct(self, field_names: Iterable[str]) -> tuple:
        """Orders the record by the struct component names of the contract ABI."""
        try:
            return tuple(getattr(self, name) for name in field_names)
        except AttributeError as e:
            raise ValueError(f"Unknown staker struct component: {e}") from e


def _parse_account(value: str, filepath: Path, row: int) -> ChecksumAddress:
    if not is_address(value):
        raise InputParseError(filepath, row, f"'{value}' is not a valid address")
    return to_checksum_address(value)


def _parse_amount(value: str, column: str, filepath: Path, row: int) -> int:
    if not _UNSIGNED_INTEGER.match(value):
        raise InputParseError(
            filepath, row, f"{column} '{value}' is not a non-negative integer"
        )
    return int(value)


def _read_rows(filepath: Path, columns: tuple) -> Iterator[tuple]:
    """Yields (row number, stripped fields) for each non-blank line; no header is expected."""
    with open(filepath, "r", newline="", encoding="utf-8") as file:
        reader = csv.reader(file)
        try:
            for fields in reader:
                if not fields or all(not field.strip() for field in fields):
                    continue
                if len(fields) != len(columns):
                    raise InputParseError(
                        filepath,
                        reader.line_num,
                        f"expected {len(columns)} columns ({','.join(columns)}), got {len(fields)}",
                    )
                yield reader.line_num, [field.strip() for field in fields]
        except csv.Error as e:
            raise InputParseError(filepath, reader.line_num, f"malformed CSV: {e}") from e
        except UnicodeDecodeError as e:
            # decoding fails before the offending line is counted
            raise InputParseError(
                filepath, reader.line_num + 1, f"not valid UTF-8 text: {e.reason}"
            ) from e


def read_stakers(filepath: Path) -> Iterator[PrimaryRow]:
    """Streams the primary staker snapshot (account,staked,timestamp,lock,paid)."""
    filepath = Path(filepath)
    for row, fields in _read_rows(filepath, STAKER_COLUMNS):
        account, *amounts = fields
        staked, timestamp, lock, paid = (
            _parse_amount(value, column, filepath, row)
            for value, column in zip(amounts, STAKER_COLUMNS[1:])
        )
        yield PrimaryRow(
            account=_parse_account(account, filepath, row),
            staked=staked,
            timestamp=timestamp,
            lock=lock,
            paid=paid,
            row=row,
        )


def read_deposits(filepath: Path) -> Iterator[SupplementalRow]:
    """Streams the supplemental deposits snapshot (account,extra)."""
    filepath = Path(filepath)
    for row, (account, extra) in _read_rows(filepath, DEPOSIT_COLUMNS):
        yield SupplementalRow(
            account=_parse_account(account, filepath, row),
            extra=_parse_amount(extra, "extra", filepath, row),
            row=row,
        )


def write_stakers(records: List[StakerRecord], filepath: Path) -> Path:
    """Writes staker records in the primary snapshot format."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", newline="", encoding="utf-8") as file:
        writer = csv.writer(file)
        for record in records:
            writer.writerow(
                [record.account, record.staked, record.timestamp, record.lock, record.paid]
            )
    return filepath
