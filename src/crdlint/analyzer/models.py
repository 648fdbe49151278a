"""
Data models for the analyzer module.

These models represent the output of the two checks - the defects detected
in a structural schema. They're designed to be:
- Immutable (frozen=True): Findings don't change after creation
- Serializable: Easy JSON output for --output json
- Path-addressed: Every finding carries the SchemaPath of its node

Three finding types exist:
- LimitFinding: a list/map/string lacks a declared maximum size
- CostFinding: a validation rule's worst-case cost exceeds the budget
- CompileFinding: the expression compiler rejected a validation rule
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from crdlint.analyzer.path import SchemaPath


class SchemaType(str, Enum):
    """Which kind of unbounded node a LimitFinding refers to."""

    LIST = "list"
    MAP = "map"
    STRING = "string"

    @property
    def limit_field(self) -> str:
        """The OpenAPI field that would bound this node."""
        return _LIMIT_FIELDS[self]


_LIMIT_FIELDS = {
    SchemaType.LIST: "maxItems",
    SchemaType.MAP: "maxProperties",
    SchemaType.STRING: "maxLength",
}


class LimitFinding(BaseModel):
    """
    A list, map or string without a user-set size limit.

    For lists this means maxItems is not set, for maps maxProperties, and for
    strings maxLength.

    Example:
        LimitFinding(path=SchemaPath.root().property("tags"), schema_type=SchemaType.LIST)
        # list "openAPIV3Schema.properties[tags]" missing maxItems
    """

    model_config = ConfigDict(frozen=True)

    path: SchemaPath = Field(..., description="Path to the unbounded node")
    schema_type: SchemaType = Field(..., description="list, map or string")

    @property
    def message(self) -> str:
        return f'{self.schema_type.value} "{self.path}" missing {self.schema_type.limit_field}'

    def __str__(self) -> str:
        return self.message


class CostFinding(BaseModel):
    """
    A validation rule whose estimated cost exceeds the budget.

    `cost` is the base cost of one evaluation scaled by how many times the
    node can occur, saturated at MAX_UINT64 rather than overflowing.
    """

    model_config = ConfigDict(frozen=True)

    path: SchemaPath = Field(..., description="Path to the node carrying the rule")
    rule_index: int = Field(..., ge=0, description="Position in x-kubernetes-validations")
    rule: str = Field(..., description="The rule text")
    cost: int = Field(..., ge=0, description="Estimated worst-case cost")
    budget: int = Field(..., ge=0, description="Budget the cost was compared against")

    @property
    def location(self) -> str:
        return self.path.rule(self.rule_index)

    @property
    def exceed_factor(self) -> float:
        """How many times over budget the rule is."""
        if self.budget == 0:
            return float("inf")
        return self.cost / self.budget

    @property
    def message(self) -> str:
        return (
            f'expression at "{self.location}" exceeded budget: '
            f"estimated cost {self.cost}, budget {self.budget}"
        )

    @property
    def human_readable_message(self) -> str:
        return (
            f'expression at "{self.location}" exceeded budget '
            f"by factor of {self.exceed_factor:.1f}x"
        )

    def __str__(self) -> str:
        return self.message


class CompileFinding(BaseModel):
    """
    A validation rule the expression compiler rejected.

    The compiler's error message is preserved verbatim.
    """

    model_config = ConfigDict(frozen=True)

    path: SchemaPath = Field(..., description="Path to the node carrying the rule")
    rule_index: int = Field(..., ge=0, description="Position in x-kubernetes-validations")
    rule: str = Field(..., description="The rule text")
    error: str = Field(..., description="Compiler error message")

    @property
    def location(self) -> str:
        return self.path.rule(self.rule_index)

    @property
    def message(self) -> str:
        return f'error compiling expression at "{self.location}": {self.error}'

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class CostReport:
    """Output of the expression cost check: cost and compile findings."""

    cost_findings: tuple[CostFinding, ...] = ()
    compile_findings: tuple[CompileFinding, ...] = ()

    def __iter__(self):
        # Allows `costs, compile_errors = check_expression_cost(...)`
        return iter((self.cost_findings, self.compile_findings))


class ExecutionMetadata(BaseModel):
    """
    Metadata about analysis execution.

    Separated from AnalysisResult to keep the results clean and allow
    execution metadata to grow independently.
    """

    model_config = ConfigDict(frozen=True)

    node_count: int = Field(default=0, description="Total number of schema nodes")
    rule_count: int = Field(default=0, description="Total number of validation rules")
    cost_budget: int = Field(default=0, description="Budget rules were checked against")
    checks_run: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Which checks ran (limits, cost)",
    )
    analysis_duration_ms: float | None = Field(
        default=None,
        description="Total analysis duration in milliseconds",
    )


class AnalysisResult(BaseModel):
    """
    Complete result of analyzing one schema.

    Contains:
    - limit_findings: nodes without size limits, in depth-first order
    - cost_findings: rules over budget, in depth-first order
    - compile_findings: rules that failed to compile
    - metadata: execution statistics
    """

    model_config = ConfigDict(frozen=True)

    version: str | None = Field(default=None, description="CRD version analyzed")
    limit_findings: tuple[LimitFinding, ...] = Field(default_factory=tuple)
    cost_findings: tuple[CostFinding, ...] = Field(default_factory=tuple)
    compile_findings: tuple[CompileFinding, ...] = Field(default_factory=tuple)
    metadata: ExecutionMetadata = Field(default_factory=ExecutionMetadata)

    @property
    def has_findings(self) -> bool:
        return bool(self.limit_findings or self.cost_findings or self.compile_findings)

    @property
    def total(self) -> int:
        return len(self.limit_findings) + len(self.cost_findings) + len(self.compile_findings)

    def summary(self) -> dict[str, Any]:
        """Counts per finding type."""
        return {
            "total": self.total,
            "limits": len(self.limit_findings),
            "cost": len(self.cost_findings),
            "compile": len(self.compile_findings),
        }


@dataclass
class DocumentResult:
    """Results for every analyzed version of one CRD document."""

    name: str | None = None
    results: list[AnalysisResult] = field(default_factory=list)

    @property
    def has_findings(self) -> bool:
        return any(r.has_findings for r in self.results)

    def summary(self) -> dict[str, Any]:
        totals = {"total": 0, "limits": 0, "cost": 0, "compile": 0}
        for result in self.results:
            for key, count in result.summary().items():
                totals[key] += count
        totals["versions"] = len(self.results)
        return totals
