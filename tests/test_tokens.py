from types import SimpleNamespace
from unittest.mock import MagicMock

from tests.conftest import ALICE, BOB
from venti_deployment import tokens
from venti_deployment.constants import UNISWAP_V2_ROUTER, VST, WETH
from venti_deployment.tokens import (
    ERC20_ABI,
    MAX_UINT256,
    SWAP_DEADLINE,
    UNISWAP_V2_ROUTER_ABI,
    approve,
    erc20,
    get_balance,
    make_swap,
)


def test_make_swap():
    account = SimpleNamespace(address=ALICE)
    router = MagicMock()

    make_swap(account, [WETH, VST], "5 ether", router=router)

    router.swapExactETHForTokens.assert_called_once_with(
        0, [WETH, VST], ALICE, SWAP_DEADLINE, sender=account, value="5 ether"
    )


def test_make_swap_uses_uniswap_router(monkeypatch):
    created = list()

    def contract(address, abi):
        created.append((address, abi))
        return MagicMock()

    monkeypatch.setattr(tokens, "Contract", contract)

    make_swap(SimpleNamespace(address=ALICE), [WETH, VST], 1)

    assert created == [(UNISWAP_V2_ROUTER, UNISWAP_V2_ROUTER_ABI)]


def test_erc20_from_address(monkeypatch):
    token = MagicMock()
    monkeypatch.setattr(tokens, "Contract", lambda address, abi: token)
    token.balanceOf.return_value = 42

    assert get_balance(ALICE, VST) == 42
    token.balanceOf.assert_called_once_with(ALICE)


def test_erc20_passes_instances_through():
    token = MagicMock()

    assert erc20(token) is token


def test_approve():
    owner = SimpleNamespace(address=ALICE)
    token = MagicMock()

    approve(owner, BOB, token)
    approve(owner, BOB, token, amount=10)

    assert token.approve.call_args_list[0].args == (BOB, MAX_UINT256)
    assert token.approve.call_args_list[0].kwargs == {"sender": owner}
    assert token.approve.call_args_list[1].args == (BOB, 10)


def test_erc20_abi_functions():
    assert [function["name"] for function in ERC20_ABI] == ["approve", "transfer", "balanceOf"]
