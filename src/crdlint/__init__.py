"""crdlint - Structural schema linter for Kubernetes CustomResourceDefinitions."""

__version__ = "0.1.0"
__license__ = "MIT"

# Exception hierarchy (import first so other modules can use it)
from crdlint.exceptions import (
    CrdLintError,
    AnalyzerError,
    ConfigurationError,
    ParseError,
    ExpressionCompileError,
)

from crdlint.schema import (
    CRDDocument,
    CRDVersion,
    SchemaKind,
    SchemaNode,
    ValidationRule,
    parse_crd,
    parse_schema,
)
from crdlint.analyzer import (
    AnalysisResult,
    Analyzer,
    CompileFinding,
    CostFinding,
    DocumentResult,
    LimitFinding,
    SchemaPath,
    check_expression_cost,
    check_max_limits,
    multiply_with_overflow_guard,
)
from crdlint.compiler import (
    CelCostEstimator,
    CompilationResult,
    ExpressionCompiler,
)
from crdlint.config import Config, get_config

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "CrdLintError",
    "AnalyzerError",
    "ConfigurationError",
    "ParseError",
    "ExpressionCompileError",
    # Schema
    "CRDDocument",
    "CRDVersion",
    "SchemaKind",
    "SchemaNode",
    "ValidationRule",
    "parse_crd",
    "parse_schema",
    # Analysis
    "Analyzer",
    "AnalysisResult",
    "DocumentResult",
    "LimitFinding",
    "CostFinding",
    "CompileFinding",
    "SchemaPath",
    "check_max_limits",
    "check_expression_cost",
    "multiply_with_overflow_guard",
    # Compilers
    "CelCostEstimator",
    "CompilationResult",
    "ExpressionCompiler",
    # Config
    "Config",
    "get_config",
]
