from pathlib import Path
from typing import List, Sequence


class MigrationError(Exception):
    """Base class for all staker migration failures."""


class InputParseError(MigrationError):
    """Raised when a snapshot CSV row cannot be parsed."""

    def __init__(self, filepath: Path, row: int, message: str):
        self.filepath = filepath
        self.row = row
        super().__init__(f"{filepath}, row {row}: {message}")


class MergeConsistencyError(MigrationError):
    """Raised when the snapshot sources do not agree with each other."""

    def __init__(self, message: str, accounts: Sequence[str] = ()):
        self.accounts = list(accounts)
        super().__init__(message)


class MigrationStateError(MigrationError):
    """Raised on an illegal migration stage transition."""


class SubmissionError(MigrationError):
    """Raised when a batch transaction is rejected or cannot be confirmed."""

    def __init__(self, batch_index: int, reason: str):
        self.batch_index = batch_index
        self.reason = reason
        super().__init__(f"Batch {batch_index} failed: {reason}")


class PartialMigrationError(SubmissionError):
    """
    Raised when a batch fails after earlier batches of the same run were committed.
    Committed batches stay on-chain; nothing is rolled back.
    """

    def __init__(
        self,
        batch_index: int,
        reason: str,
        committed: List,
        committed_records: int,
        remaining_records: int,
    ):
        super().__init__(batch_index, reason)
        self.committed = committed
        self.committed_records = committed_records
        self.remaining_records = remaining_records
