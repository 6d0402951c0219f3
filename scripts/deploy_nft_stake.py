#!/usr/bin/python3

from ape import accounts, project

from venti_deployment.constants import CONSTRUCTOR_PARAMS_DIR
from venti_deployment.params import Deployer

VERIFY = False
CONSTRUCTOR_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "local" / "nft-stake.yml"


def main():
    deployer = Deployer.from_yaml(
        filepath=CONSTRUCTOR_PARAMS_FILEPATH,
        verify=VERIFY,
        account=accounts.test_accounts[0],
        autosign=True,
    )

    deployer.deploy(project.TestNFT)
    deployer.deploy(project.VentiHeadzStake)
    deployer.finalize()
