from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def partition(records: Sequence[T], batch_count: int) -> List[List[T]]:
    """
    Splits records into contiguous chunks of ceil(n / batch_count) items.

    Only the last chunk may be smaller, so fewer than batch_count chunks
    are returned when the records run out early (5 records in 4 batches
    gives [2, 2, 1]). No chunk is ever empty.
    """
    if batch_count < 1:
        raise ValueError(f"batch_count must be at least 1, got {batch_count}")

    records = list(records)
    if not records:
        return []

    size = _ceil_div(len(records), batch_count)
    return [records[start : start + size] for start in range(0, len(records), size)]


def batch_count_for(total: int, max_batch_size: int) -> int:
    """Smallest number of batches that keeps every batch within max_batch_size."""
    if max_batch_size < 1:
        raise ValueError(f"max_batch_size must be at least 1, got {max_batch_size}")
    return max(1, _ceil_div(total, max_batch_size))


def plan_batches(
    records: Sequence[T], max_batch_size: int, batch_count: Optional[int] = None
) -> List[List[T]]:
    """Partitions records, deriving the batch count from the per-transaction limit if not given."""
    minimum = batch_count_for(len(records), max_batch_size)
    if batch_count is None:
        batch_count = minimum
    elif batch_count < minimum:
        raise ValueError(
            f"{batch_count} batches would put more than {max_batch_size} records in a "
            f"transaction; at least {minimum} batches are needed for {len(records)} records"
        )
    return partition(records, batch_count)
