"""Load [package.metadata.rust-compliance] from Cargo.toml. Infrastructure I/O only."""

import sys
from pathlib import Path
from typing import Optional

from rust_compliance_scanner.domain.errors import ConfigurationError

if sys.version_info >= (3, 11):
    import tomllib as toml_lib
else:
    import tomli as toml_lib

TABLE_NAME = "rust-compliance"


class ConfigFileLoader:
    """
    Loads scanner settings from TOML. No top-level functions.
    """

    @staticmethod
    def load_config_from_fs(start: Optional[str] = None) -> dict[str, object]:
        """Walk up from start (default: cwd) to the nearest Cargo.toml carrying scanner settings."""
        current_path = Path(start).resolve() if start else Path.cwd()
        if current_path.is_file():
            current_path = current_path.parent
        root_path = Path(current_path.anchor)
        while True:
            config_file = current_path / "Cargo.toml"
            if config_file.exists():
                try:
                    with config_file.open("rb") as f:
                        data = toml_lib.load(f)
                except (OSError, toml_lib.TOMLDecodeError):
                    data = {}
                config_dict = ConfigFileLoader.metadata_table(data)
                if config_dict:
                    return config_dict
            if current_path == root_path:
                break
            current_path = current_path.parent
        return {}

    @staticmethod
    def metadata_table(data: dict[str, object]) -> dict[str, object]:
        """``[package.metadata.rust-compliance]``, else the workspace equivalent."""
        for section in ("package", "workspace"):
            table = data.get(section)
            if not isinstance(table, dict):
                continue
            metadata = table.get("metadata")
            if isinstance(metadata, dict) and isinstance(metadata.get(TABLE_NAME), dict):
                return dict(metadata[TABLE_NAME])
        return {}

    @staticmethod
    def load_config_file(path: str) -> dict[str, object]:
        """Standalone settings file: top-level keys, or a [rust-compliance] table."""
        config_file = Path(path)
        try:
            with config_file.open("rb") as f:
                data = toml_lib.load(f)
        except OSError as exc:
            raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
        except toml_lib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc
        table = data.get(TABLE_NAME)
        if isinstance(table, dict):
            return dict(table)
        if config_file.name == "Cargo.toml":
            return ConfigFileLoader.metadata_table(data)
        return dict(data)
