"""
Configuration system for crdlint.

Settings come from environment variables, optionally overlaid by a YAML or
JSON config file named in CRDLINT_CONFIG_FILE. Command-line options override
both.

Usage:
    from crdlint.config import get_config

    config = get_config()
    analyzer = Analyzer(cost_budget=config.cost_budget)

Environment variables:
    CRDLINT_COST_BUDGET=10000000
    CRDLINT_PER_CALL_LIMIT=1000000
    CRDLINT_MAX_REQUEST_SIZE_BYTES=3145728
    CRDLINT_MAX_RULE_LENGTH=4096
    CRDLINT_CHECK_LIMITS=true
    CRDLINT_CHECK_COST=true
    CRDLINT_PARALLEL=false
    CRDLINT_CONFIG_FILE=crdlint.yaml
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crdlint.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Kubernetes StaticEstimatedCRDRuleCostLimit
DEFAULT_COST_BUDGET = 10_000_000
DEFAULT_MAX_REQUEST_SIZE_BYTES = 3 * 1024 * 1024
DEFAULT_MAX_RULE_LENGTH = 4096

ENV_PREFIX = "CRDLINT_"


class Config(BaseModel):
    """
    crdlint configuration.

    Loaded from environment variables and an optional config file.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cost_budget: int = Field(
        default=DEFAULT_COST_BUDGET,
        ge=0,
        description="Maximum estimated cost of a single validation rule",
    )
    per_call_limit: int | None = Field(
        default=None,
        ge=0,
        description="Reject rules whose single-evaluation cost exceeds this",
    )
    max_request_size_bytes: int = Field(
        default=DEFAULT_MAX_REQUEST_SIZE_BYTES,
        gt=0,
        description="Request size used to estimate unbounded lengths",
    )
    max_rule_length: int = Field(
        default=DEFAULT_MAX_RULE_LENGTH,
        gt=0,
        description="Longest accepted validation rule, in characters",
    )
    check_limits: bool = Field(default=True, description="Run the size limit check")
    check_cost: bool = Field(default=True, description="Run the rule cost check")
    parallel: bool = Field(default=False, description="Run checks on worker threads")

    def with_overrides(self, **overrides: Any) -> "Config":
        """Return a copy with the non-None overrides applied and validated."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        return _build_config({**self.model_dump(), **updates})


def _build_config(values: dict[str, Any]) -> Config:
    try:
        return Config(**values)
    except ValidationError as e:
        error = e.errors()[0]
        key = ".".join(str(part) for part in error["loc"])
        raise ConfigurationError(f"Invalid value for {key}: {error['msg']}", config_key=key) from e


def _parse_env_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_env_int(value: str | None, default: int | None) -> int | None:
    """Parse integer from environment variable."""
    if value is None:
        return default
    try:
        return int(value.replace("_", ""))
    except ValueError:
        logger.warning("Could not parse integer %r, using default %s", value, default)
        return default


def load_config_from_env() -> Config:
    """
    Load configuration from CRDLINT_* environment variables.

    Unparseable values fall back to their defaults with a warning; values
    that parse but are out of range raise ConfigurationError.
    """
    env = os.environ
    return _build_config({
        "cost_budget": _parse_env_int(
            env.get(f"{ENV_PREFIX}COST_BUDGET"), DEFAULT_COST_BUDGET
        ),
        "per_call_limit": _parse_env_int(
            env.get(f"{ENV_PREFIX}PER_CALL_LIMIT"), None
        ),
        "max_request_size_bytes": _parse_env_int(
            env.get(f"{ENV_PREFIX}MAX_REQUEST_SIZE_BYTES"), DEFAULT_MAX_REQUEST_SIZE_BYTES
        ),
        "max_rule_length": _parse_env_int(
            env.get(f"{ENV_PREFIX}MAX_RULE_LENGTH"), DEFAULT_MAX_RULE_LENGTH
        ),
        "check_limits": _parse_env_bool(env.get(f"{ENV_PREFIX}CHECK_LIMITS"), True),
        "check_cost": _parse_env_bool(env.get(f"{ENV_PREFIX}CHECK_COST"), True),
        "parallel": _parse_env_bool(env.get(f"{ENV_PREFIX}PARALLEL"), False),
    })


def load_config_from_file(path: Path) -> Config:
    """
    Load configuration from a JSON or YAML file.

    A missing or unreadable file falls back to environment variables. A file
    that decodes but holds invalid settings raises ConfigurationError.
    """
    if not path.exists():
        logger.warning("Config file not found: %s, using environment", path)
        return load_config_from_env()

    try:
        with open(path) as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        return load_config_from_env()

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping, got {type(data).__name__}",
            config_key=str(path),
        )
    return _build_config(data)


@lru_cache(maxsize=1)
def get_config() -> Config:
    """
    Get the global configuration instance.

    Loads from:
    1. CRDLINT_CONFIG_FILE environment variable (if set)
    2. Environment variables (default)

    Result is cached for the lifetime of the process.
    """
    config_file = os.environ.get(f"{ENV_PREFIX}CONFIG_FILE")

    if config_file:
        return load_config_from_file(Path(config_file))

    return load_config_from_env()


def reset_config() -> None:
    """Reset the cached configuration (mainly for testing)."""
    get_config.cache_clear()
