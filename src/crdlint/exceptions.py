"""
Package-level exception hierarchy for crdlint.

All exceptions inherit from CrdLintError, enabling:
- Catching all crdlint errors with a single except clause
- Rich context fields for debugging (source, config_key, rule, etc.)
- Structured serialization via to_dict() for JSON error output

Findings (missing bounds, excessive cost, compile failures) are NOT
exceptions. They are returned as data by the checkers. Exceptions are
reserved for inputs the tool cannot work with at all.

Hierarchy:
    CrdLintError
    ├── AnalyzerError          – Errors during analysis orchestration
    │   └── ConfigurationError – Invalid configuration
    ├── ParseError             – Document cannot be decoded into a schema
    └── ExpressionCompileError – A validation rule was rejected by a compiler
"""

from __future__ import annotations

from typing import Any


class CrdLintError(Exception):
    """
    Base exception for all crdlint errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON error output."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
        }


# ── Analysis Errors ──────────────────────────────────────────────────────


class AnalyzerError(CrdLintError):
    """Errors during analysis orchestration."""
    pass


class ConfigurationError(AnalyzerError):
    """
    A setting failed validation, wherever it was read from.

    Attributes:
        config_key: Offending setting, or the config file path when the file
            itself has the wrong shape.
    """

    def __init__(self, message: str, config_key: str | None = None) -> None:
        self.config_key = config_key
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["config_key"] = self.config_key
        return result


# ── Parse Errors ─────────────────────────────────────────────────────────


class ParseError(CrdLintError):
    """
    Raised when a CRD or schema document cannot be decoded.

    Attributes:
        message: Human-readable error description
        detail: Technical details for debugging (optional)
        source: Where the error occurred (e.g., "yaml_decode", "structure")
    """

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        source: str = "unknown",
    ) -> None:
        self.detail = detail
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}\n\nDetails: {self.detail}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["detail"] = self.detail
        result["source"] = self.source
        return result


# ── Compile Errors ───────────────────────────────────────────────────────


class ExpressionCompileError(CrdLintError):
    """
    A validation expression could not be compiled.

    Raised by ExpressionCompiler implementations. The cost checker catches it
    and records a CompileFinding, so it never escapes a traversal.

    Attributes:
        rule: The rule text that failed (if known).
    """

    def __init__(self, message: str, rule: str | None = None) -> None:
        self.rule = rule
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["rule"] = self.rule
        return result
