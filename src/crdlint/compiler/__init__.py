"""Expression compilers used by the cost check."""

from crdlint.compiler.protocol import CompilationResult, ExpressionCompiler
from crdlint.compiler.cel import CelCostEstimator

__all__ = [
    "CelCostEstimator",
    "CompilationResult",
    "ExpressionCompiler",
]
