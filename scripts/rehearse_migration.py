# Usage:
#  > ape run rehearse_migration --network ethereum:mainnet-fork:foundry

from ape import accounts, networks, project

from venti_deployment.config import MigrationConfig
from venti_deployment.constants import (
    CONSTRUCTOR_PARAMS_DIR,
    LEGACY_STAKE,
    LEGACY_STAKE_ADMIN,
    MIGRATION_PARAMS_DIR,
    VST,
)
from venti_deployment.operations import (
    check_migrated_supply,
    close_legacy_stake,
    fund_stake,
    run_migration,
)
from venti_deployment.params import Deployer, Transactor
from venti_deployment.tokens import erc20

CONSTRUCTOR_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "local" / "stake-v2.yml"
MIGRATION_PARAMS_FILEPATH = MIGRATION_PARAMS_DIR / "fork.yml"


def main():
    admin = accounts.test_accounts.impersonate_account(LEGACY_STAKE_ADMIN)
    networks.active_provider.set_balance(admin.address, 100 * 10**18)

    config = MigrationConfig.from_yaml(MIGRATION_PARAMS_FILEPATH)
    vst = erc20(VST)

    deployer = Deployer.from_yaml(
        filepath=CONSTRUCTOR_PARAMS_FILEPATH, verify=False, account=admin, autosign=True
    )
    stake = deployer.deploy(project.VentiStakeV2)
    deployer.finalize(deployments=[stake])

    transactor = Transactor(account=admin, autosign=True)
    legacy = project.IVentiSwapStakingV2.at(LEGACY_STAKE)
    rewards = close_legacy_stake(transactor=transactor, legacy=legacy, token=vst)
    assert legacy.totalRewards() == 0

    report = run_migration(transactor=transactor, stake=stake, config=config, autosign=True)
    assert check_migrated_supply(stake=stake, report=report)

    fund_stake(transactor=transactor, stake=stake, token=vst, rewards=rewards)
    assert stake.isActive()
