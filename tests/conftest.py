"""Shared fixtures: configuration isolation and a stub expression compiler."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from crdlint.compiler.protocol import CompilationResult
from crdlint.config import reset_config
from crdlint.exceptions import ExpressionCompileError

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class StubCompiler:
    """
    Expression compiler returning canned figures.

    Rules listed in `failures` raise ExpressionCompileError with the given
    message; every other rule compiles to `costs.get(rule, default_cost)`.
    """

    def __init__(
        self,
        costs: dict[str, int] | None = None,
        default_cost: int = 1,
        intrinsic_cardinality: int = 1,
        failures: dict[str, str] | None = None,
    ) -> None:
        self.costs = costs or {}
        self.default_cost = default_cost
        self.intrinsic_cardinality = intrinsic_cardinality
        self.failures = failures or {}
        self.calls: list[str] = []

    def compile(self, rule, node):
        self.calls.append(rule)
        if rule in self.failures:
            raise ExpressionCompileError(self.failures[rule], rule=rule)
        return CompilationResult(
            base_cost=self.costs.get(rule, self.default_cost),
            intrinsic_cardinality=self.intrinsic_cardinality,
        )


@pytest.fixture
def stub_compiler_factory():
    """Build StubCompiler instances with custom figures."""
    return StubCompiler


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch):
    """Drop CRDLINT_* variables and the cached config around every test."""
    for key in list(os.environ):
        if key.startswith("CRDLINT_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR
