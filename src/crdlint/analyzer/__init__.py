"""
Schema analysis: cardinality propagation and the limits and cost checks.
"""

from crdlint.analyzer.cardinality import (
    MAX_UINT64,
    ROOT_CARDINALITY,
    Cardinality,
    max_elements,
    multiply_with_overflow_guard,
    propagate,
)
from crdlint.analyzer.path import SchemaPath
from crdlint.analyzer.models import (
    AnalysisResult,
    CompileFinding,
    CostFinding,
    CostReport,
    DocumentResult,
    ExecutionMetadata,
    LimitFinding,
    SchemaType,
)
from crdlint.analyzer.limits import check_max_limits
from crdlint.analyzer.cost import check_expression_cost, expression_cost
from crdlint.analyzer.analyzer import Analyzer

__all__ = [
    "MAX_UINT64",
    "ROOT_CARDINALITY",
    "AnalysisResult",
    "Analyzer",
    "Cardinality",
    "CompileFinding",
    "CostFinding",
    "CostReport",
    "DocumentResult",
    "ExecutionMetadata",
    "LimitFinding",
    "SchemaPath",
    "SchemaType",
    "check_expression_cost",
    "check_max_limits",
    "expression_cost",
    "max_elements",
    "multiply_with_overflow_guard",
    "propagate",
]
