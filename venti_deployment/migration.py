import json
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from venti_deployment.batching import plan_batches
from venti_deployment.constants import (
    DEFAULT_MAX_BATCH_SIZE,
    STAKE_ON_BEHALF_METHOD,
    STANDARD_REGISTRY_JSON_FORMAT,
)
from venti_deployment.errors import (
    MigrationError,
    MigrationStateError,
    PartialMigrationError,
    SubmissionError,
)
from venti_deployment.merge import UnmatchedDeposits, merge, total_staked
from venti_deployment.snapshot import StakerRecord, read_deposits, read_stakers

Batch = List[StakerRecord]
Submit = Callable[[Batch], Any]


class MigrationStage(Enum):
    NOT_STARTED = "NotStarted"
    LOADING = "Loading"
    MERGING = "Merging"
    PARTITIONING = "Partitioning"
    SUBMITTING = "Submitting"
    COMPLETED = "Completed"
    FAILED = "Failed"


_TRANSITIONS = {
    MigrationStage.NOT_STARTED: {MigrationStage.LOADING},
    MigrationStage.LOADING: {MigrationStage.MERGING, MigrationStage.FAILED},
    MigrationStage.MERGING: {MigrationStage.PARTITIONING, MigrationStage.FAILED},
    # straight to completed when every batch was committed by an earlier run
    MigrationStage.PARTITIONING: {
        MigrationStage.SUBMITTING,
        MigrationStage.COMPLETED,
        MigrationStage.FAILED,
    },
    MigrationStage.SUBMITTING: {
        MigrationStage.SUBMITTING,
        MigrationStage.COMPLETED,
        MigrationStage.FAILED,
    },
    MigrationStage.COMPLETED: set(),
    MigrationStage.FAILED: set(),
}


class MigrationState(NamedTuple):
    stage: MigrationStage
    batch_index: Optional[int] = None
    reason: Optional[str] = None

    def __str__(self) -> str:
        if self.stage is MigrationStage.FAILED:
            return f"{self.stage.value}({self.batch_index}, {self.reason})"
        if self.stage is MigrationStage.SUBMITTING:
            return f"{self.stage.value}({self.batch_index})"
        return self.stage.value


class BatchResult(NamedTuple):
    """A batch committed on-chain."""

    index: int
    size: int
    first_account: str
    last_account: str
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None

    @classmethod
    def from_receipt(cls, index: int, batch: Batch, receipt: Any) -> "BatchResult":
        return cls(
            index=index,
            size=len(batch),
            first_account=batch[0].account,
            last_account=batch[-1].account,
            tx_hash=getattr(receipt, "txn_hash", None),
            block_number=getattr(receipt, "block_number", None),
        )


def _print_batch(result: BatchResult, total: int) -> None:
    print(
        f"Batch {result.index + 1}/{total} completed: {result.size} stakers "
        f"({result.first_account} .. {result.last_account}) tx={result.tx_hash}"
    )


class MigrationReport:
    """Outcome of a migration run, written next to the deployment artifacts."""

    def __init__(
        self,
        state: MigrationState,
        batches: Sequence[Batch],
        committed: List[BatchResult],
        skipped: List[int],
    ):
        self.state = state
        self.batch_sizes = [len(batch) for batch in batches]
        self.committed = committed
        self.skipped = skipped
        self.total_records = sum(self.batch_sizes)
        self.total_staked = sum(total_staked(batch) for batch in batches)

    @property
    def next_batch(self) -> int:
        """Index to pass as start batch when resuming."""
        done = set(self.skipped) | {result.index for result in self.committed}
        index = 0
        while index in done:
            index += 1
        return index

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": str(self.state),
            "total_records": self.total_records,
            "total_staked": str(self.total_staked),
            "batch_sizes": self.batch_sizes,
            "skipped": self.skipped,
            "next_batch": self.next_batch,
            "committed": [result._asdict() for result in self.committed],
        }

    def write(self, filepath: Path) -> Path:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w") as file:
            json.dump(self.to_dict(), file, **STANDARD_REGISTRY_JSON_FORMAT)
        print(f"(i) Migration report written to {filepath}")
        return filepath


class StakerMigration:
    """
    Loads the staker snapshots, folds in extra deposits, partitions the result
    and submits each batch in order through an injected submit callable.

    The callable receives a list of StakerRecord and returns a receipt once the
    batch is confirmed; raising means the batch was not committed.
    """

    def __init__(
        self,
        submit: Submit,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        batch_count: Optional[int] = None,
        unmatched: UnmatchedDeposits = UnmatchedDeposits.WARN,
        start_batch: int = 0,
        on_batch: Optional[Callable[[BatchResult, int], None]] = _print_batch,
    ):
        if start_batch < 0:
            raise ValueError(f"start_batch cannot be negative, got {start_batch}")
        self._submit = submit
        self.max_batch_size = max_batch_size
        self.batch_count = batch_count
        self.unmatched = unmatched
        self.start_batch = start_batch
        self._on_batch = on_batch

        self.state = MigrationState(MigrationStage.NOT_STARTED)
        self.records: List[StakerRecord] = list()
        self.batches: List[Batch] = list()
        self.committed: List[BatchResult] = list()
        self.skipped: List[int] = list()

    def _transition(
        self, stage: MigrationStage, batch_index: Optional[int] = None, reason: Optional[str] = None
    ) -> None:
        if stage not in _TRANSITIONS[self.state.stage]:
            raise MigrationStateError(f"Cannot move from {self.state} to {stage.value}")
        self.state = MigrationState(stage, batch_index, reason)

    def prepare(self, stakers_filepath: Path, deposits_filepath: Path) -> List[Batch]:
        """Runs the loading, merging and partitioning stages."""
        self._transition(MigrationStage.LOADING)
        try:
            stakers = list(read_stakers(stakers_filepath))
            deposits = list(read_deposits(deposits_filepath))

            self._transition(MigrationStage.MERGING)
            self.records = merge(stakers, deposits, unmatched=self.unmatched)

            self._transition(MigrationStage.PARTITIONING)
            self.batches = plan_batches(
                self.records, max_batch_size=self.max_batch_size, batch_count=self.batch_count
            )
            if self.start_batch > len(self.batches):
                raise ValueError(
                    f"Start batch {self.start_batch} is beyond the last batch "
                    f"({len(self.batches) - 1})"
                )
        except Exception as e:
            self._transition(MigrationStage.FAILED, reason=str(e) or type(e).__name__)
            raise
        return self.batches

    def _start_from_batches(self, batches: List[Batch]) -> None:
        """Walks the setup stages for batches that were partitioned elsewhere."""
        self._transition(MigrationStage.LOADING)
        self._transition(MigrationStage.MERGING)
        self.records = [record for batch in batches for record in batch]
        self._transition(MigrationStage.PARTITIONING)
        self.batches = list(batches)

    def submit_batches(self, batches: Optional[List[Batch]] = None) -> List[BatchResult]:
        """Submits batches strictly in order, stopping at the first failure."""
        if self.state.stage is not MigrationStage.PARTITIONING:
            raise MigrationStateError(f"Cannot submit batches from {self.state}")
        if batches is not None:
            self.batches = list(batches)
        if self.start_batch > len(self.batches):
            raise ValueError(f"Start batch {self.start_batch} is beyond the last batch")

        total = len(self.batches)
        for index, batch in enumerate(self.batches):
            if index < self.start_batch:
                self.skipped.append(index)
                continue

            self._transition(MigrationStage.SUBMITTING, batch_index=index)
            try:
                receipt = self._submit(batch)
            except Exception as e:
                reason = str(e) or type(e).__name__
                self._transition(MigrationStage.FAILED, batch_index=index, reason=reason)
                if index == 0:
                    raise SubmissionError(index, reason) from e
                raise PartialMigrationError(
                    index,
                    reason,
                    committed=list(self.committed),
                    committed_records=sum(len(b) for b in self.batches[:index]),
                    remaining_records=sum(len(b) for b in self.batches[index:]),
                ) from e

            result = BatchResult.from_receipt(index, batch, receipt)
            self.committed.append(result)
            if self._on_batch:
                self._on_batch(result, total)

        self._transition(MigrationStage.COMPLETED)
        return self.committed

    def run(self, stakers_filepath: Path, deposits_filepath: Path) -> "MigrationReport":
        self.prepare(stakers_filepath, deposits_filepath)
        self.submit_batches()
        return self.report()

    def report(self) -> MigrationReport:
        return MigrationReport(
            state=self.state,
            batches=self.batches,
            committed=self.committed,
            skipped=self.skipped,
        )


def migrate(batches: List[Batch], submit: Submit, start_batch: int = 0) -> List[BatchResult]:
    """Submits already partitioned batches in order."""
    migration = StakerMigration(submit=submit, start_batch=start_batch, on_batch=None)
    migration._start_from_batches(batches)
    return migration.submit_batches()


def _struct_field_names(method) -> List[str]:
    for abi in method.abis:
        if len(abi.inputs) == 1 and abi.inputs[0].components:
            return [component.name for component in abi.inputs[0].components]
    raise ValueError(f"{method} does not take a single array of staker structs")


class StakeSubmitter:
    """Submits a batch to the staking contract through a Transactor."""

    def __init__(self, transactor, contract, method_name: str = STAKE_ON_BEHALF_METHOD):
        self.transactor = transactor
        self.method = getattr(contract, method_name)
        self.field_names = _struct_field_names(self.method)

    def __call__(self, batch: Batch) -> Any:
        stakers = [record.as_struct(self.field_names) for record in batch]
        receipt = self.transactor.transact(self.method, stakers)
        if getattr(receipt, "failed", False):
            raise MigrationError(f"Transaction {receipt.txn_hash} reverted")
        return receipt
