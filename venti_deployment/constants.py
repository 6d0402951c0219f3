from enum import IntEnum
from pathlib import Path

import venti_deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(venti_deployment.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
MIGRATION_PARAMS_DIR = DEPLOYMENT_DIR / "migration_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}

#
# Mainnet
#

VST = "0xb7C2fcD6d7922eddd2A7A9B0524074A60D5b472C"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
UNISWAP_V2_ROUTER = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"

LEGACY_STAKE = "0x281A39d6db514F159E87FD17275E981d42292b2a"
LEGACY_STAKE_ADMIN = "0x7FBF79Ebd2E57EdC8673edbcb41662676ba9eD5a"

#
# Staking
#

# one month as counted by the staking contracts
SECONDS_PER_MONTH = 2628000

# NFT pool reward period (3 months)
NFT_REWARD_PERIOD = SECONDS_PER_MONTH * 3


# lock-tier codes of the staking contracts; monthly reward rates are 1%, 2% and 3%
class LockTier(IntEnum):
    NONE = 0
    ONE_MONTH = 1
    THREE_MONTHS = 2
    SIX_MONTHS = 3


#
# Migration
#

STAKE_ON_BEHALF_METHOD = "stakeOnBehalfOfAll"

# records per stakeOnBehalfOfAll transaction; each record costs several storage writes
DEFAULT_MAX_BATCH_SIZE = 150
