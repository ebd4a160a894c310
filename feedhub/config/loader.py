"""Configuration loader."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from .models import ConfigModel, FetchConfig, RuleConfig, SourceConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "feedhub" / "config.yaml"


class Config:
    """Configuration manager."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """Initialize config manager."""
        if config_path is None:
            env_path = os.environ.get("FEEDHUB_CONFIG")
            config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
        self.config_path = config_path
        self._config: Optional[ConfigModel] = None

    @property
    def config(self) -> ConfigModel:
        """Get loaded config."""
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @property
    def workspace_root(self) -> Path:
        """Get workspace root path."""
        path = Path(self.config.workspace_root).expanduser()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def scripts_dir(self) -> Path:
        """Get the directory feed scripts must live in."""
        scripts_dir = self.workspace_root / "scripts"
        scripts_dir.mkdir(parents=True, exist_ok=True)
        return scripts_dir

    @property
    def sources_path(self) -> Path:
        """Get the default sources.yaml path next to the config file."""
        return self.config_path.parent / "sources.yaml"

    @property
    def fetch(self) -> FetchConfig:
        """Get feed fetching configuration."""
        return self.config.fetch

    @property
    def rules(self) -> List[RuleConfig]:
        """Get configured article rules."""
        return self.config.rules

    def get_db_config(self) -> Dict[str, Any]:
        """Get database configuration dict."""
        db_config = self.config.postgres.model_dump()

        # Handle password from environment if specified
        if db_config.get("password_env"):
            password = os.environ.get(db_config["password_env"])
            if password:
                db_config["password"] = password

        return db_config


def load_config(config_path: Path) -> ConfigModel:
    """Load configuration from YAML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}

        return ConfigModel(**config_data)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}")


def load_sources(sources_path: Path) -> List[SourceConfig]:
    """Load sources from YAML file."""
    if not sources_path.exists():
        raise FileNotFoundError(f"Sources file not found: {sources_path}")

    try:
        with open(sources_path) as f:
            sources_data = yaml.safe_load(f)

        if sources_data is None or "sources" not in sources_data:
            return []

        sources = []
        for source_data in sources_data["sources"]:
            try:
                sources.append(SourceConfig(**source_data))
            except ValidationError as e:
                logger.warning(f"Skipping invalid source {source_data.get('name', 'unknown')}: {e}")

        return sources
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in sources file: {e}")


def save_config(config: ConfigModel, config_path: Path) -> None:
    """Save configuration to YAML file."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)


def save_sources(sources: List[SourceConfig], sources_path: Path) -> None:
    """Save sources to YAML file."""
    sources_path.parent.mkdir(parents=True, exist_ok=True)

    sources_data = {"sources": [s.model_dump() for s in sources]}

    with open(sources_path, "w") as f:
        yaml.dump(sources_data, f, default_flow_style=False, sort_keys=False)
