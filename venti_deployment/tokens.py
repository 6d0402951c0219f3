from typing import List, Union

from ape import Contract
from ape.api import AccountAPI, ReceiptAPI
from ape.contracts import ContractInstance

from venti_deployment.constants import UNISWAP_V2_ROUTER

MAX_UINT256 = 2**256 - 1

# far enough in the future for any fork session
SWAP_DEADLINE = 9999999999

ERC20_ABI = [
    {
        "type": "function",
        "name": "approve",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

UNISWAP_V2_ROUTER_ABI = [
    {
        "type": "function",
        "name": "swapExactETHForTokens",
        "stateMutability": "payable",
        "inputs": [
            {"name": "amountOutMin", "type": "uint256"},
            {"name": "path", "type": "address[]"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
]

TokenLike = Union[str, ContractInstance]


def erc20(token: TokenLike) -> ContractInstance:
    if isinstance(token, str):
        return Contract(token, abi=ERC20_ABI)
    return token


def uniswap_router(address: str = UNISWAP_V2_ROUTER) -> ContractInstance:
    return Contract(address, abi=UNISWAP_V2_ROUTER_ABI)


def make_swap(account: AccountAPI, path: List[str], value: str, router=None) -> ReceiptAPI:
    """Swaps ETH for the last token of path, sending the output to account."""
    router = router or uniswap_router()
    return router.swapExactETHForTokens(
        0, path, account.address, SWAP_DEADLINE, sender=account, value=value
    )


def get_balance(account: str, token: TokenLike) -> int:
    return erc20(token).balanceOf(account)


def approve(
    owner: AccountAPI, spender: str, token: TokenLike, amount: int = MAX_UINT256
) -> ReceiptAPI:
    return erc20(token).approve(spender, amount, sender=owner)
