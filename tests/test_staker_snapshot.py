import pytest

from tests.conftest import ALICE, BOB, CAROL, make_records
from venti_deployment.constants import VST
from venti_deployment.errors import InputParseError
from venti_deployment.merge import merge
from venti_deployment.snapshot import (
    PrimaryRow,
    StakerRecord,
    SupplementalRow,
    read_deposits,
    read_stakers,
    write_stakers,
)


def test_read_stakers(stakers_csv):
    stakers = list(read_stakers(stakers_csv))

    assert [s.account for s in stakers] == [ALICE, BOB, CAROL]
    assert stakers[0] == PrimaryRow(
        account=ALICE, staked=100, timestamp=1650000000, lock=3, paid=0, row=1
    )
    assert stakers[1].paid == 5
    assert stakers[2].row == 3


def test_read_deposits(deposits_csv):
    deposits = list(read_deposits(deposits_csv))

    assert deposits == [
        SupplementalRow(account=ALICE, extra=50, row=1),
        SupplementalRow(account=CAROL, extra=7, row=2),
        SupplementalRow(account=ALICE, extra=25, row=3),
    ]


def test_first_row_is_data(write_csv):
    filepath = write_csv("stakers.csv", [("account", "staked", "timestamp", "lock", "paid")])

    with pytest.raises(InputParseError) as error:
        list(read_stakers(filepath))

    assert error.value.row == 1
    assert "not a valid address" in str(error.value)


def test_blank_lines_are_skipped(tmp_path):
    filepath = tmp_path / "stakers.csv"
    filepath.write_text(f"\n{ALICE},1,2,3,4\n\n{BOB},5,6,1,7\n,,,,\n")

    stakers = list(read_stakers(filepath))

    assert [(s.account, s.row) for s in stakers] == [(ALICE, 2), (BOB, 4)]


def test_whitespace_around_fields(tmp_path):
    filepath = tmp_path / "deposits.csv"
    filepath.write_text(f" {ALICE} , 42 \n")

    assert list(read_deposits(filepath)) == [SupplementalRow(account=ALICE, extra=42, row=1)]


def test_lowercase_address_is_checksummed(write_csv):
    filepath = write_csv("deposits.csv", [(VST.lower(), 1)])

    (deposit,) = read_deposits(filepath)

    assert deposit.account == VST


def test_amounts_beyond_uint64(write_csv):
    amount = 2**200 + 1
    filepath = write_csv("stakers.csv", [(ALICE, amount, 1650000000, 1, amount)])

    (staker,) = read_stakers(filepath)

    assert staker.staked == amount
    assert staker.paid == amount


@pytest.mark.parametrize(
    "row, problem",
    [
        ((ALICE, 100, 1650000000, 3), "expected 5 columns"),
        ((ALICE, 100, 1650000000, 3, 0, 9), "expected 5 columns"),
        ((ALICE, "1e18", 1650000000, 3, 0), "staked '1e18'"),
        ((ALICE, -5, 1650000000, 3, 0), "staked '-5'"),
        ((ALICE, "", 1650000000, 3, 0), "staked ''"),
        ((ALICE, 100, "soon", 3, 0), "timestamp 'soon'"),
        ((ALICE, 100, 1650000000, "1.5", 0), "lock '1.5'"),
        ((ALICE, 100, 1650000000, 3, "NaN"), "paid 'NaN'"),
        (("0x1234", 100, 1650000000, 3, 0), "not a valid address"),
    ],
)
def test_malformed_staker_row(write_csv, row, problem):
    filepath = write_csv("stakers.csv", [(BOB, 1, 1650000000, 1, 0), row])

    with pytest.raises(InputParseError) as error:
        list(read_stakers(filepath))

    assert error.value.row == 2
    assert error.value.filepath == filepath
    assert problem in str(error.value)


def test_bad_checksum_is_rejected(write_csv):
    # VST with the case of its first letter flipped
    bad_checksum = VST[:2] + VST[2].upper() + VST[3:]
    filepath = write_csv("deposits.csv", [(bad_checksum, 1)])

    with pytest.raises(InputParseError, match="not a valid address"):
        list(read_deposits(filepath))


def test_malformed_deposit_row(write_csv):
    filepath = write_csv("deposits.csv", [(ALICE, 1), (BOB, 2, 3)])

    with pytest.raises(InputParseError, match="row 2: expected 2 columns"):
        list(read_deposits(filepath))


def test_oversized_field(tmp_path):
    filepath = tmp_path / "stakers.csv"
    filepath.write_text(f"{ALICE},1,2,3,4\n{BOB},{'1' * 200000},2,3,4\n")

    with pytest.raises(InputParseError, match="malformed CSV") as error:
        list(read_stakers(filepath))

    assert error.value.row == 2
    assert error.value.filepath == filepath


def test_file_that_is_not_utf8(tmp_path):
    filepath = tmp_path / "deposits.csv"
    filepath.write_bytes(b"\xff\xfe" + f"{ALICE},1\n".encode())

    with pytest.raises(InputParseError, match="not valid UTF-8") as error:
        list(read_deposits(filepath))

    assert error.value.row == 1


def test_reading_is_lazy(write_csv):
    filepath = write_csv("stakers.csv", [(ALICE, 1, 2, 3, 4), (BOB, "x", 2, 3, 4)])

    stakers = read_stakers(filepath)

    assert next(stakers).account == ALICE
    with pytest.raises(InputParseError):
        next(stakers)


def test_exported_records_merge_back_unchanged(tmp_path):
    records = make_records(10)
    filepath = write_stakers(records, tmp_path / "export" / "merged.csv")

    reloaded = merge(read_stakers(filepath), [])

    assert reloaded == records


def test_as_struct_orders_by_field_names():
    record = StakerRecord(account=ALICE, staked=1, timestamp=2, lock=3, paid=4)

    assert record.as_struct(["account", "lock", "staked", "paid", "timestamp"]) == (
        ALICE,
        3,
        1,
        4,
        2,
    )
    with pytest.raises(ValueError, match="Unknown staker struct component"):
        record.as_struct(["account", "rewards"])
