"""Configuration management for feedhub."""

from .loader import Config, load_config, load_sources, save_config, save_sources
from .models import ConfigModel, FetchConfig, PostgresConfig, RuleConfig, SourceConfig

__all__ = [
    "Config",
    "ConfigModel",
    "FetchConfig",
    "PostgresConfig",
    "RuleConfig",
    "SourceConfig",
    "load_config",
    "load_sources",
    "save_config",
    "save_sources",
]
