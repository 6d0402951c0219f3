import pytest

from tests.conftest import make_records
from venti_deployment.batching import batch_count_for, partition, plan_batches


def sizes(batches):
    return [len(batch) for batch in batches]


@pytest.mark.parametrize(
    "total, batch_count, expected",
    [
        (100, 4, [25, 25, 25, 25]),
        (102, 4, [26, 26, 26, 24]),
        (101, 4, [26, 26, 26, 23]),
        (7, 4, [2, 2, 2, 1]),
        (5, 4, [2, 2, 1]),
        (3, 4, [1, 1, 1]),
        (1, 4, [1]),
        (10, 1, [10]),
        (0, 4, []),
    ],
)
def test_chunk_sizes(total, batch_count, expected):
    assert sizes(partition(make_records(total), batch_count)) == expected


def test_chunks_are_contiguous_and_ordered():
    records = make_records(102)

    batches = partition(records, 4)

    assert [record for batch in batches for record in batch] == records
    assert batches[1][0] == records[26]


@pytest.mark.parametrize("total", [0, 1, 5, 99, 100, 102, 257])
@pytest.mark.parametrize("batch_count", [1, 3, 4, 7])
def test_repartitioning_is_idempotent(total, batch_count):
    batches = partition(make_records(total), batch_count)

    flattened = [record for batch in batches for record in batch]
    assert partition(flattened, batch_count) == batches


def test_partition_is_deterministic():
    records = make_records(57)

    assert partition(records, 4) == partition(list(records), 4)


@pytest.mark.parametrize("batch_count", [0, -1])
def test_invalid_batch_count(batch_count):
    with pytest.raises(ValueError, match="batch_count must be at least 1"):
        partition(make_records(3), batch_count)


@pytest.mark.parametrize(
    "total, max_batch_size, expected",
    [(0, 150, 1), (1, 150, 1), (150, 150, 1), (151, 150, 2), (600, 150, 4), (601, 150, 5)],
)
def test_batch_count_for(total, max_batch_size, expected):
    assert batch_count_for(total, max_batch_size) == expected


def test_batch_count_for_rejects_empty_batches():
    with pytest.raises(ValueError, match="max_batch_size must be at least 1"):
        batch_count_for(10, 0)


def test_plan_batches_respects_limit():
    batches = plan_batches(make_records(301), max_batch_size=100)

    assert sizes(batches) == [76, 76, 76, 73]
    assert max(sizes(batches)) <= 100


def test_plan_batches_with_explicit_count():
    assert sizes(plan_batches(make_records(102), max_batch_size=150, batch_count=4)) == [
        26,
        26,
        26,
        24,
    ]


def test_plan_batches_rejects_oversized_batches():
    with pytest.raises(ValueError, match="at least 3 batches are needed for 250 records"):
        plan_batches(make_records(250), max_batch_size=100, batch_count=2)
