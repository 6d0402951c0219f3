from pathlib import Path
from typing import Dict, NamedTuple, Optional

from venti_deployment.constants import ARTIFACTS_DIR, DEFAULT_MAX_BATCH_SIZE
from venti_deployment.merge import UnmatchedDeposits
from venti_deployment.utils import _load_yaml, get_artifact_filepath

MIGRATION_KEY = "migration"


class MigrationConfig(NamedTuple):
    """Parameters of a staker migration, usually read from a migration params YAML."""

    chain_id: int
    contract: str
    stakers_filepath: Path
    deposits_filepath: Path
    report_filepath: Path
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE
    batch_count: Optional[int] = None
    unmatched: UnmatchedDeposits = UnmatchedDeposits.WARN
    registry_filepath: Optional[Path] = None

    @classmethod
    def from_config(cls, config: Dict, base_dir: Path) -> "MigrationConfig":
        migration = config.get(MIGRATION_KEY)
        if not migration:
            raise ValueError("migration is not set in params file.")

        chain_id = migration.get("chain_id")
        if not chain_id:
            raise ValueError("chain_id is not set in params file.")

        contract = migration.get("contract")
        if not contract:
            raise ValueError("contract is not set in params file.")

        snapshot = migration.get("snapshot") or dict()
        for key in ("stakers", "deposits"):
            if not snapshot.get(key):
                raise ValueError(f"snapshot.{key} is not set in params file.")

        max_batch_size = int(migration.get("max_batch_size", DEFAULT_MAX_BATCH_SIZE))
        if max_batch_size < 1:
            raise ValueError(f"max_batch_size must be positive, got {max_batch_size}.")

        batch_count = migration.get("batch_count")
        if batch_count is not None:
            batch_count = int(batch_count)

        policy = migration.get("unmatched_deposits", UnmatchedDeposits.WARN.value)
        try:
            unmatched = UnmatchedDeposits(policy)
        except ValueError:
            choices = ", ".join(p.value for p in UnmatchedDeposits)
            raise ValueError(f"unmatched_deposits must be one of {choices}, got '{policy}'.")

        # registry holding the address of the contract to migrate into
        registry_filepath = None
        registry = migration.get("registry")
        if registry:
            registry_filepath = ARTIFACTS_DIR / registry

        return cls(
            chain_id=int(chain_id),
            contract=contract,
            stakers_filepath=base_dir / snapshot["stakers"],
            deposits_filepath=base_dir / snapshot["deposits"],
            report_filepath=get_artifact_filepath(config=config),
            max_batch_size=max_batch_size,
            batch_count=batch_count,
            unmatched=unmatched,
            registry_filepath=registry_filepath,
        )

    @classmethod
    def from_yaml(cls, filepath: Path) -> "MigrationConfig":
        """Snapshot paths in the file are relative to the file itself."""
        filepath = Path(filepath)
        config = _load_yaml(filepath)
        return cls.from_config(config, base_dir=filepath.parent)
