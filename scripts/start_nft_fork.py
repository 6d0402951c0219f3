# Usage:
#  > ape run start_nft_fork --network ethereum:mainnet-fork:foundry

from ape import accounts, chain, project

from venti_deployment.constants import (
    CONSTRUCTOR_PARAMS_DIR,
    NFT_REWARD_PERIOD,
    SECONDS_PER_MONTH,
    VST,
    WETH,
)
from venti_deployment.params import Deployer
from venti_deployment.tokens import approve, get_balance, make_swap

CONSTRUCTOR_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "local" / "nft-stake.yml"

SWAP_VALUE = "5 ether"
NFT_HOLDERS = 5
MINTS_PER_HOLDER = 2
FAST_FORWARD = SECONDS_PER_MONTH * 14


def main():
    owner = accounts.test_accounts[0]
    deployer = Deployer.from_yaml(
        filepath=CONSTRUCTOR_PARAMS_FILEPATH, verify=False, account=owner, autosign=True
    )
    nft = deployer.deploy(project.TestNFT)
    stake = deployer.deploy(project.VentiHeadzStake)
    deployer.finalize()

    # buy reward tokens on the forked DEX and hand them to the pool
    make_swap(owner, [WETH, VST], SWAP_VALUE)
    reward_balance = get_balance(owner.address, VST)
    approve(owner, stake.address, VST)
    stake.addRewardTokens(reward_balance, sender=owner)
    stake.setActive(sender=owner)
    print(f"VentiHeadzStake funded with {reward_balance} VST at {stake.address}")

    for holder in accounts.test_accounts[:NFT_HOLDERS]:
        for _ in range(MINTS_PER_HOLDER):
            nft.mint(sender=holder)
        nft.setApprovalForAll(stake.address, True, sender=holder)

    # token ids start at 1; the owner minted the first two
    stake.stakeToken(2, sender=owner)

    chain.pending_timestamp += FAST_FORWARD
    chain.mine()

    periods = FAST_FORWARD // NFT_REWARD_PERIOD
    print(f"Advanced {periods} reward periods; earned: {stake.earned(owner.address)}")
