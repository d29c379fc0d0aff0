"""YAML configuration file handling."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .models import ConfigModel, FetchConfig

CONFIG_ENV_VAR = "COUNCILFEED_CONFIG"


def default_config_path() -> Path:
    """Config path from the environment, else the per-user default."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".config" / "councilfeed" / "config.yaml"


class Config:
    """Lazily loaded configuration file."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self.config_path = config_path or default_config_path()
        self._config: Optional[ConfigModel] = None

    @property
    def config(self) -> ConfigModel:
        """Parsed configuration, read on first access."""
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @property
    def fetch(self) -> FetchConfig:
        """The ``fetch`` section."""
        return self.config.fetch

    def get_db_config(self) -> Dict[str, Any]:
        """The ``postgres`` section with the password resolved from the environment."""
        postgres = self.config.postgres
        db_config = postgres.model_dump()
        if postgres.password_env and os.environ.get(postgres.password_env):
            db_config["password"] = os.environ[postgres.password_env]
        return db_config


def load_config(config_path: Path) -> ConfigModel:
    """Read and validate a YAML config file.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if the YAML is malformed or a value is invalid
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        return ConfigModel.model_validate(data)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def save_config(config: ConfigModel, config_path: Path) -> None:
    """Write ``config`` as YAML, creating parent directories."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
