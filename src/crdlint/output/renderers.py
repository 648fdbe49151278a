"""
Output renderers for different formats.

Separates presentation logic from analysis logic.
Uses schema.py Pydantic models as the single source of truth
for JSON serialization - no manual dict construction.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING

from crdlint.output.schema import (
    SCHEMA_VERSION,
    CompileFindingSchema,
    CostFindingSchema,
    DocumentResultSchema,
    LimitFindingSchema,
    MetadataSchema,
    SummarySchema,
    VersionResultSchema,
)

if TYPE_CHECKING:
    from crdlint.analyzer.models import (
        AnalysisResult,
        CompileFinding,
        CostFinding,
        DocumentResult,
        LimitFinding,
    )


class OutputFormat(str, Enum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"


def render(
    result: "DocumentResult",
    format: OutputFormat = OutputFormat.TEXT,
    human_readable: bool = True,
) -> str:
    """
    Render lint results in the specified format.

    Args:
        result: Results for every analyzed version
        format: Output format (text, json)
        human_readable: Report cost findings as a factor over budget
            instead of raw figures (text only)

    Returns:
        Formatted string
    """
    if format == OutputFormat.TEXT:
        return render_text(result, human_readable=human_readable)
    elif format == OutputFormat.JSON:
        return render_json(result)
    else:
        raise ValueError(f"Unknown output format: {format}")


# =============================================================================
# Schema-based serialization (single source of truth)
# =============================================================================


def _limit_to_schema(finding: "LimitFinding") -> LimitFindingSchema:
    return LimitFindingSchema(
        path=str(finding.path),
        schema_type=finding.schema_type.value,
        missing=finding.schema_type.limit_field,
        message=finding.message,
    )


def _cost_to_schema(finding: "CostFinding") -> CostFindingSchema:
    return CostFindingSchema(
        path=str(finding.path),
        location=finding.location,
        rule=finding.rule,
        cost=finding.cost,
        budget=finding.budget,
        exceed_factor=finding.exceed_factor,
        message=finding.message,
    )


def _compile_to_schema(finding: "CompileFinding") -> CompileFindingSchema:
    return CompileFindingSchema(
        path=str(finding.path),
        location=finding.location,
        rule=finding.rule,
        error=finding.error,
        message=finding.message,
    )


def _summary_to_schema(summary: dict[str, int]) -> SummarySchema:
    return SummarySchema(
        total=summary["total"],
        limits=summary["limits"],
        cost=summary["cost"],
        compile=summary["compile"],
    )


def _version_to_schema(result: "AnalysisResult") -> VersionResultSchema:
    """Convert AnalysisResult to the Pydantic schema model."""
    return VersionResultSchema(
        version=result.version,
        summary=_summary_to_schema(result.summary()),
        limit_findings=[_limit_to_schema(f) for f in result.limit_findings],
        cost_findings=[_cost_to_schema(f) for f in result.cost_findings],
        compile_findings=[_compile_to_schema(f) for f in result.compile_findings],
        metadata=MetadataSchema(
            node_count=result.metadata.node_count,
            rule_count=result.metadata.rule_count,
            cost_budget=result.metadata.cost_budget,
            checks_run=list(result.metadata.checks_run),
            analysis_duration_ms=result.metadata.analysis_duration_ms,
        ),
    )


def result_to_schema(result: "DocumentResult") -> DocumentResultSchema:
    """Convert DocumentResult to the Pydantic schema model."""
    return DocumentResultSchema(
        schema_version=SCHEMA_VERSION,
        name=result.name,
        has_findings=result.has_findings,
        summary=_summary_to_schema(result.summary()),
        versions=[_version_to_schema(r) for r in result.results],
    )


# =============================================================================
# Text renderer (terminal)
# =============================================================================


def finding_lines(result: "AnalysisResult", human_readable: bool = True) -> list[str]:
    """One line per finding: limits first, then cost, then compile errors."""
    lines = [f.message for f in result.limit_findings]
    for finding in result.cost_findings:
        lines.append(finding.human_readable_message if human_readable else finding.message)
    lines.extend(f.message for f in result.compile_findings)
    return lines


def render_text(result: "DocumentResult", human_readable: bool = True) -> str:
    """
    Render lint results as plain terminal text.

    Each finding is one line. Versions are headed by their name when the
    document has more than one.
    """
    lines: list[str] = []
    multiple = len(result.results) > 1

    for version_result in result.results:
        findings = finding_lines(version_result, human_readable=human_readable)
        if multiple:
            lines.append(f"version {version_result.version or '<unnamed>'}:")
            prefix = "  "
        else:
            prefix = ""
        if not findings and multiple:
            lines.append(f"{prefix}no issues found")
        lines.extend(f"{prefix}{line}" for line in findings)

    summary = result.summary()
    if summary["total"]:
        lines.append(
            f"{summary['total']} finding(s): {summary['limits']} missing limit(s), "
            f"{summary['cost']} over budget, {summary['compile']} compile error(s)"
        )
    else:
        lines.append("✓ No issues found")

    return "\n".join(lines)


# =============================================================================
# JSON renderer (uses schema models)
# =============================================================================


def render_json(result: "DocumentResult", indent: int = 2) -> str:
    """
    Render lint results as stable JSON.

    Uses Pydantic schema models for guaranteed consistency.
    """
    return json.dumps(result_to_schema(result).model_dump(mode="json"), indent=indent)
