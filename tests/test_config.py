"""Unit tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from feedhub.config import (
    Config,
    ConfigModel,
    SourceConfig,
    load_config,
    load_sources,
    save_config,
    save_sources,
)


def write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data))
    return path


def test_defaults_for_empty_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("")

    config = load_config(config_path)

    assert config.fetch.script_timeout == 30.0
    assert config.fetch.request_timeout is None
    assert config.postgres.database == "feedhub"
    assert config.rules == []


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "content",
    [
        "fetch: [unclosed",
        "fetch:\n  script_timeout: 0\n",
        "rules:\n  - name: r\n    keywords: [x]\n    action: explode\n",
    ],
)
def test_invalid_config(tmp_path, content):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(content)

    with pytest.raises(ValueError):
        load_config(config_path)


def test_round_trip_keeps_rules(tmp_path):
    config_path = tmp_path / "nested" / "config.yaml"
    config = ConfigModel(
        workspace_root=str(tmp_path / "ws"),
        rules=[{"name": "py", "keywords": ["python"], "action": "favorite"}],
    )

    save_config(config, config_path)

    assert load_config(config_path) == config


def test_config_from_environment(tmp_path, monkeypatch):
    config_path = write_yaml(
        tmp_path / "config.yaml",
        {
            "workspace_root": str(tmp_path / "workspace"),
            "postgres": {"password_env": "TEST_FEEDHUB_PASSWORD"},
        },
    )
    monkeypatch.setenv("FEEDHUB_CONFIG", str(config_path))
    monkeypatch.setenv("TEST_FEEDHUB_PASSWORD", "hunter2")

    config = Config()

    assert config.config_path == config_path
    assert config.get_db_config()["password"] == "hunter2"
    assert config.scripts_dir == tmp_path / "workspace" / "scripts"
    assert config.scripts_dir.is_dir()
    assert config.sources_path == tmp_path / "sources.yaml"


def test_load_sources_skips_invalid_entries(tmp_path):
    sources_path = write_yaml(
        tmp_path / "sources.yaml",
        {
            "sources": [
                {"name": "Good", "url": "https://good.example.com/rss", "category": "tech"},
                {"name": "No URL"},
            ]
        },
    )

    sources = load_sources(sources_path)

    assert sources == [
        SourceConfig(name="Good", url="https://good.example.com/rss", category="tech")
    ]


def test_sources_round_trip(tmp_path):
    sources = [
        SourceConfig(name="One", url="https://one.example.com/feed"),
        SourceConfig(name="Two", url="https://two.example.com/feed", category="news"),
    ]
    sources_path = tmp_path / "sources.yaml"

    save_sources(sources, sources_path)

    assert load_sources(sources_path) == sources


def test_sources_file_without_list(tmp_path):
    sources_path = write_yaml(tmp_path / "sources.yaml", {"other": 1})
    assert load_sources(sources_path) == []


def test_pool_size_is_not_configurable(tmp_path):
    config_path = write_yaml(tmp_path / "config.yaml", {"fetch": {"max_concurrent": 40}})

    config = load_config(config_path)

    assert not hasattr(config.fetch, "max_concurrent")
