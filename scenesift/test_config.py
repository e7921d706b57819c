from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from scenesift.config import ConfigError, SceneSiftConfig, build_config, load_config


def test_build_config_defaults_for_empty_document():
    config = build_config({})

    assert isinstance(config, SceneSiftConfig)
    assert config.matching.ai_enabled is False
    assert config.matching.ai_threshold == 0.7
    assert config.matching.grouping_threshold == 0.7
    assert config.matching.levenshtein_threshold == 0.7
    assert config.selection.min_group_members == 2
    assert config.embedding.model == "all-MiniLM-L6-v2"
    assert config.embedding.enabled is False
    assert config.log_file is None
    assert config.debug is False


def test_build_config_reads_all_sections():
    config = build_config(
        {
            "general": {"log_file": "logs/run.log", "debug": True},
            "matching": {"ai_enabled": True, "ai_threshold": 0.8, "levenshtein_threshold": 0.6},
            "embedding": {"url": "http://localhost:8080/v1", "api_key": "secret"},
            "selection": {"min_group_members": 3},
        },
        config_path=Path("config.toml"),
    )

    assert config.matching.ai_enabled is True
    assert config.matching.ai_threshold == 0.8
    assert config.matching.levenshtein_threshold == 0.6
    assert config.embedding.enabled is True
    assert config.embedding.api_key == "secret"
    assert config.selection.min_group_members == 3
    assert config.log_file == Path("logs/run.log")
    assert config.debug is True
    assert config.config_path == Path("config.toml")


def test_build_config_rejects_non_string_log_file():
    with pytest.raises(ConfigError, match="log_file"):
        build_config({"general": {"log_file": 42}})


def test_threshold_outside_unit_interval_is_rejected():
    with pytest.raises(ValidationError):
        build_config({"matching": {"ai_threshold": 1.5}})


def test_min_group_members_must_be_positive():
    with pytest.raises(ValidationError):
        build_config({"selection": {"min_group_members": 0}})


def test_load_config_missing_file_exits(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        load_config(tmp_path / "missing.toml")

    assert excinfo.value.code == 1


def test_load_config_invalid_toml_exits(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[matching\nai_enabled = true\n", encoding="utf-8")

    with pytest.raises(SystemExit):
        load_config(path)


def test_load_config_parses_toml_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        "[matching]\n"
        "ai_enabled = true\n"
        "grouping_threshold = 0.75\n"
        "\n"
        "[selection]\n"
        "min_group_members = 4\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.matching.ai_enabled is True
    assert config.matching.grouping_threshold == 0.75
    assert config.selection.min_group_members == 4
    assert config.config_path == path
