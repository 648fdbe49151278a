"""
JSON Schema definitions for stable output.

Provides a versioned schema for:
- CI/CD integration
- Documentation generation

The schema is stable across minor versions.
Breaking changes only in major versions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LimitFindingSchema(BaseModel):
    """Schema for a missing size limit."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Field path of the unbounded node")
    schema_type: str = Field(..., description="list, map or string")
    missing: str = Field(..., description="The limit that should be set")
    message: str = Field(..., description="Human-readable description")


class CostFindingSchema(BaseModel):
    """Schema for a validation rule over budget."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Field path of the node carrying the rule")
    location: str = Field(..., description="Field path of the rule itself")
    rule: str = Field(..., description="Rule text")
    cost: int = Field(..., description="Estimated worst-case cost")
    budget: int = Field(..., description="Budget the cost was compared against")
    exceed_factor: float = Field(..., description="cost / budget")
    message: str = Field(..., description="Human-readable description")


class CompileFindingSchema(BaseModel):
    """Schema for a validation rule that failed to compile."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Field path of the node carrying the rule")
    location: str = Field(..., description="Field path of the rule itself")
    rule: str = Field(..., description="Rule text")
    error: str = Field(..., description="Compiler error")
    message: str = Field(..., description="Human-readable description")


class SummarySchema(BaseModel):
    """Schema for finding counts."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(0, description="Total findings")
    limits: int = Field(0, description="Missing size limits")
    cost: int = Field(0, description="Rules over budget")
    compile: int = Field(0, description="Rules that failed to compile")


class MetadataSchema(BaseModel):
    """Schema for execution metadata."""

    model_config = ConfigDict(frozen=True)

    node_count: int = Field(0, description="Schema nodes visited")
    rule_count: int = Field(0, description="Validation rules found")
    cost_budget: int = Field(0, description="Cost budget in effect")
    checks_run: list[str] = Field(default_factory=list, description="Checks that ran")
    analysis_duration_ms: float | None = Field(None, description="Analysis duration")


class VersionResultSchema(BaseModel):
    """Schema for the findings of one CRD version."""

    model_config = ConfigDict(frozen=True)

    version: str | None = Field(None, description="CRD version name")
    summary: SummarySchema = Field(..., description="Finding counts")
    limit_findings: list[LimitFindingSchema] = Field(default_factory=list)
    cost_findings: list[CostFindingSchema] = Field(default_factory=list)
    compile_findings: list[CompileFindingSchema] = Field(default_factory=list)
    metadata: MetadataSchema = Field(..., description="Execution metadata")


class DocumentResultSchema(BaseModel):
    """
    Complete lint result schema.

    This is the top-level schema for `crdlint lint --output json`.
    """

    model_config = ConfigDict(frozen=True)

    schema_version: str = Field(..., description="Output schema version")
    name: str | None = Field(None, description="CRD name")
    has_findings: bool = Field(..., description="Whether any check reported a defect")
    summary: SummarySchema = Field(..., description="Finding counts across versions")
    versions: list[VersionResultSchema] = Field(default_factory=list)


def get_json_schema() -> dict[str, Any]:
    """Get the JSON Schema of the lint output."""
    return DocumentResultSchema.model_json_schema()


# Schema version - increment on breaking changes
SCHEMA_VERSION = "1.0"
