"""Tests for configuration loading from the environment and config files."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from crdlint.config import (
    DEFAULT_COST_BUDGET,
    Config,
    get_config,
    load_config_from_env,
    load_config_from_file,
    reset_config,
)
from crdlint.exceptions import ConfigurationError


class TestDefaults:
    def test_defaults(self) -> None:
        config = Config()
        assert config.cost_budget == DEFAULT_COST_BUDGET == 10_000_000
        assert config.per_call_limit is None
        assert config.max_request_size_bytes == 3 * 1024 * 1024
        assert config.max_rule_length == 4096
        assert config.check_limits and config.check_cost
        assert not config.parallel

    def test_frozen(self) -> None:
        with pytest.raises(Exception):
            Config().cost_budget = 5  # type: ignore[misc]

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(Exception):
            Config(budget=5)  # type: ignore[call-arg]


class TestEnvironment:
    """CRDLINT_* variables."""

    def test_load_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRDLINT_COST_BUDGET", "5000")
        monkeypatch.setenv("CRDLINT_PER_CALL_LIMIT", "1_000_000")
        monkeypatch.setenv("CRDLINT_CHECK_LIMITS", "false")
        monkeypatch.setenv("CRDLINT_PARALLEL", "yes")

        config = load_config_from_env()

        assert config.cost_budget == 5000
        assert config.per_call_limit == 1_000_000
        assert config.check_limits is False
        assert config.check_cost is True
        assert config.parallel is True

    def test_unparseable_value_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRDLINT_COST_BUDGET", "lots")
        assert load_config_from_env().cost_budget == DEFAULT_COST_BUDGET

    def test_out_of_range_value_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRDLINT_COST_BUDGET", "-1")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_env()
        assert exc_info.value.config_key == "cost_budget"


class TestConfigFile:
    """YAML and JSON config files."""

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "crdlint.yaml"
        path.write_text("cost_budget: 1234\ncheck_cost: false\n")

        config = load_config_from_file(path)

        assert config.cost_budget == 1234
        assert config.check_cost is False

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "crdlint.json"
        path.write_text(json.dumps({"max_rule_length": 100}))
        assert load_config_from_file(path).max_rule_length == 100

    def test_missing_file_falls_back_to_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRDLINT_COST_BUDGET", "42")
        assert load_config_from_file(tmp_path / "missing.yaml").cost_budget == 42

    def test_undecodable_file_falls_back_to_env(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        assert load_config_from_file(path) == load_config_from_env()

    def test_invalid_setting_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "crdlint.yaml"
        path.write_text("max_rule_length: 0\n")
        with pytest.raises(ConfigurationError):
            load_config_from_file(path)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "crdlint.yaml"
        path.write_text("- cost_budget\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config_from_file(path)

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "crdlint.yaml"
        path.write_text("")
        assert load_config_from_file(path) == Config()


class TestGlobalConfig:
    def test_cached(self) -> None:
        assert get_config() is get_config()

    def test_config_file_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "crdlint.yaml"
        path.write_text("cost_budget: 77\n")
        monkeypatch.setenv("CRDLINT_CONFIG_FILE", str(path))
        reset_config()
        assert get_config().cost_budget == 77

    def test_reset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_config()
        monkeypatch.setenv("CRDLINT_COST_BUDGET", "99")
        assert get_config() is first
        reset_config()
        assert get_config().cost_budget == 99


class TestOverrides:
    def test_none_values_ignored(self) -> None:
        config = Config()
        assert config.with_overrides(cost_budget=None) is config

    def test_applies_overrides(self) -> None:
        config = Config().with_overrides(cost_budget=5, check_limits=False)
        assert config.cost_budget == 5
        assert config.check_limits is False

    def test_invalid_override(self) -> None:
        with pytest.raises(ConfigurationError):
            Config().with_overrides(cost_budget=-5)
