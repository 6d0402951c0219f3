from pathlib import Path

import pytest
import yaml

from venti_deployment.config import MigrationConfig
from venti_deployment.constants import ARTIFACTS_DIR, DEFAULT_MAX_BATCH_SIZE, MIGRATION_PARAMS_DIR
from venti_deployment.merge import UnmatchedDeposits


def params(**overrides):
    migration = {
        "chain_id": 1,
        "contract": "VentiStakeV2",
        "registry": "mainnet.json",
        "snapshot": {"stakers": "snapshots/stakers.csv", "deposits": "snapshots/deposits.csv"},
        "max_batch_size": 100,
        "unmatched_deposits": "fail",
    }
    migration.update(overrides)
    return {
        "migration": migration,
        "artifacts": {"dir": "./artifacts/", "filename": "mainnet-migration.json"},
    }


@pytest.fixture
def write_params(tmp_path):
    def _write(config):
        filepath = tmp_path / "params" / "mainnet.yml"
        filepath.parent.mkdir(exist_ok=True)
        filepath.write_text(yaml.safe_dump(config))
        return filepath

    return _write


def test_from_yaml(write_params, tmp_path):
    config = MigrationConfig.from_yaml(write_params(params()))

    assert config.chain_id == 1
    assert config.contract == "VentiStakeV2"
    assert config.stakers_filepath == tmp_path / "params" / "snapshots" / "stakers.csv"
    assert config.deposits_filepath == tmp_path / "params" / "snapshots" / "deposits.csv"
    assert config.report_filepath == Path("./artifacts/") / "mainnet-migration.json"
    assert config.registry_filepath == ARTIFACTS_DIR / "mainnet.json"
    assert config.max_batch_size == 100
    assert config.batch_count is None
    assert config.unmatched is UnmatchedDeposits.FAIL


def test_defaults():
    config = params()
    del config["migration"]["max_batch_size"]
    del config["migration"]["unmatched_deposits"]
    del config["migration"]["registry"]

    config = MigrationConfig.from_config(config, base_dir=Path("."))

    assert config.max_batch_size == DEFAULT_MAX_BATCH_SIZE
    assert config.unmatched is UnmatchedDeposits.WARN
    assert config.registry_filepath is None


def test_batch_count():
    config = MigrationConfig.from_config(params(batch_count="4"), base_dir=Path("."))

    assert config.batch_count == 4


@pytest.mark.parametrize(
    "config, message",
    [
        ({"artifacts": {"filename": "x.json"}}, "migration is not set"),
        (params(chain_id=None), "chain_id is not set"),
        (params(contract=""), "contract is not set"),
        (params(snapshot={"stakers": "stakers.csv"}), "snapshot.deposits is not set"),
        (params(snapshot=None), "snapshot.stakers is not set"),
        (params(max_batch_size=0), "max_batch_size must be positive"),
        (params(unmatched_deposits="ignore"), "unmatched_deposits must be one of warn, fail"),
        ({"migration": params()["migration"]}, "artifact filename is not set"),
    ],
)
def test_invalid_params(config, message):
    with pytest.raises(ValueError, match=message):
        MigrationConfig.from_config(config, base_dir=Path("."))


@pytest.mark.parametrize("name", ["mainnet.yml", "fork.yml"])
def test_shipped_params_files(name):
    config = MigrationConfig.from_yaml(MIGRATION_PARAMS_DIR / name)

    assert config.contract == "VentiStakeV2"
    assert config.stakers_filepath.name == "new.csv"
    assert config.deposits_filepath.name == "multiple_deposits.csv"


def test_mainnet_params_refuse_unmatched_deposits():
    config = MigrationConfig.from_yaml(MIGRATION_PARAMS_DIR / "mainnet.yml")

    assert config.unmatched is UnmatchedDeposits.FAIL
    assert config.max_batch_size == DEFAULT_MAX_BATCH_SIZE
