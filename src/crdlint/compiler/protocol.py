"""
Expression compiler protocol.

The cost check does not understand the expression language. It hands each
rule to a compiler and only consumes two numbers back: the cost of one
evaluation and the compiler's own estimate of how often the expression may
run. Keeping the interface this narrow lets the traversal be tested with a
stub that returns canned figures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from crdlint.schema.models import SchemaNode


@dataclass(frozen=True)
class CompilationResult:
    """
    Static cost figures for one compiled rule.

    Attributes:
        base_cost: Estimated cost of a single evaluation of the rule.
        intrinsic_cardinality: How many times the compiler expects the rule
            may run when the schema's ancestors give no usable bound.
    """

    base_cost: int
    intrinsic_cardinality: int

    def __post_init__(self) -> None:
        if self.base_cost < 0 or self.intrinsic_cardinality < 0:
            raise ValueError("Compilation figures must be non-negative")


@runtime_checkable
class ExpressionCompiler(Protocol):
    """
    Anything that can compile a validation rule in the context of its node.

    Implementations must be deterministic and synchronous, and must signal a
    rejected rule by raising ExpressionCompileError (nothing else).

    Example:
        class FixedCost:
            def compile(self, rule: str, node: SchemaNode) -> CompilationResult:
                return CompilationResult(base_cost=10, intrinsic_cardinality=1)
    """

    def compile(self, rule: str, node: "SchemaNode") -> CompilationResult:
        """
        Compile `rule` as attached to `node`.

        Raises:
            ExpressionCompileError: If the rule cannot be compiled.
        """
        ...
