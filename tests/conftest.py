from types import SimpleNamespace
from typing import NamedTuple

import pytest

from venti_deployment.snapshot import StakerRecord

# digit-only addresses are already in checksum form
ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
CAROL = "0x3333333333333333333333333333333333333333"
DAVE = "0x4444444444444444444444444444444444444444"
ADMIN = "0x9999999999999999999999999999999999999999"

STAKER_STRUCT_FIELDS = ("account", "staked", "timestamp", "lock", "paid")

ONE_TOKEN = 10**18


def address(i: int) -> str:
    return f"0x{i:040d}"


def make_records(count: int, start: int = 1):
    return [
        StakerRecord(
            account=address(i),
            staked=i * ONE_TOKEN,
            timestamp=1650000000 + i,
            lock=i % 4,
            paid=i,
        )
        for i in range(start, start + count)
    ]


class FakeReceipt(NamedTuple):
    txn_hash: str
    block_number: int
    failed: bool = False


class FakeTransactor:
    """Stands in for venti_deployment.params.Transactor; records calls instead of signing."""

    def __init__(self, account_address: str = ADMIN, fail_on_call: int = None, failed_receipt=False):
        self.account = SimpleNamespace(address=account_address)
        self.calls = list()
        self.fail_on_call = fail_on_call
        self.failed_receipt = failed_receipt

    def get_account(self):
        return self.account

    def transact(self, method, *args):
        index = len(self.calls)
        self.calls.append((method, args))
        if index == self.fail_on_call:
            raise RuntimeError("execution reverted: Ownable: caller is not the owner")
        return FakeReceipt(
            txn_hash=f"0x{index + 1:064x}", block_number=100 + index, failed=self.failed_receipt
        )


def staker_method(field_names=STAKER_STRUCT_FIELDS):
    """A contract method whose ABI takes a single array of staker structs."""
    components = [SimpleNamespace(name=name) for name in field_names]
    abi = SimpleNamespace(name="stakeOnBehalfOfAll", inputs=[SimpleNamespace(components=components)])
    return SimpleNamespace(abis=[abi])


@pytest.fixture
def write_csv(tmp_path):
    def _write(name, rows):
        filepath = tmp_path / name
        lines = [",".join(str(field) for field in row) for row in rows]
        filepath.write_text("\n".join(lines) + "\n")
        return filepath

    return _write


@pytest.fixture
def stakers_csv(write_csv):
    return write_csv(
        "stakers.csv",
        [
            (ALICE, 100, 1650000000, 3, 0),
            (BOB, 200, 1650000100, 2, 5),
            (CAROL, 300, 1650000200, 1, 0),
        ],
    )


@pytest.fixture
def deposits_csv(write_csv):
    return write_csv("deposits.csv", [(ALICE, 50), (CAROL, 7), (ALICE, 25)])


@pytest.fixture
def transactor():
    return FakeTransactor()


@pytest.fixture
def stake_contract():
    return SimpleNamespace(address=address(777), stakeOnBehalfOfAll=staker_method())
