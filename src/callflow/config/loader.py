"""Config loader for YAML flow definition files."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from callflow.config.models import CallflowConfig
from callflow.core.errors import ConfigError

MASTER_FILES = ("callflow.yaml", "config.yaml")


class ConfigLoader:
    """Load CallflowConfig from YAML files."""

    @staticmethod
    def load(path: Path | str) -> CallflowConfig:
        """Load configuration from a YAML file or directory.

        A directory is read through its master file (callflow.yaml or
        config.yaml) when present; otherwise every *.yaml file in it is
        merged in name order.

        Args:
            path: Path to a config directory or YAML file

        Returns:
            Parsed CallflowConfig instance

        Raises:
            FileNotFoundError: If the path or the directory's YAML files are missing
            ConfigError: If the YAML is malformed or fails model validation
        """
        config_path = Path(path)

        if config_path.is_dir():
            master = next(
                (config_path / name for name in MASTER_FILES if (config_path / name).exists()),
                None,
            )
            if master is not None:
                data = ConfigLoader._read(master)
            else:
                files = sorted(config_path.glob("*.yaml"))
                if not files:
                    raise FileNotFoundError(f"No config files found in {config_path}")
                data = {"flows": {}, "settings": {}, "resources": {}}
                for fpath in files:
                    ConfigLoader._merge(data, ConfigLoader._read(fpath))
        else:
            if not config_path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
            data = ConfigLoader._read(config_path)

        return ConfigLoader.from_dict(data, source=str(config_path))

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "<dict>") -> CallflowConfig:
        """Validate an already parsed definition."""
        try:
            return CallflowConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid flow definition in {source}:\n{e}") from e

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Top level of {path} must be a mapping")
        return data

    @staticmethod
    def _merge(data: dict[str, Any], chunk: dict[str, Any]) -> None:
        for key, value in chunk.items():
            if key in ("flows", "settings") and isinstance(value, dict):
                data[key].update(value)
            elif key == "resources" and isinstance(value, dict):
                # Merge per resource kind (queues, functions, ...)
                for kind, addresses in value.items():
                    if isinstance(addresses, dict):
                        data["resources"].setdefault(kind, {}).update(addresses)
                    else:
                        data["resources"][kind] = addresses
            else:
                # Overwrite other top-level keys (e.g. version)
                data[key] = value
