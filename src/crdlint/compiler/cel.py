"""
Static cost estimation for CEL validation rules.

Parsing is delegated to cel-python (celpy); this module only walks the parse
tree it returns. The estimate follows the shape of the Kubernetes static cost
estimator without reproducing its exact numbers:

- every operator, call and field selection costs 1
- comprehension macros (all, exists, exists_one, map, filter) cost their body
  times the number of elements they iterate over
- reading a string value costs one unit per ten characters
- sizes that the schema does not bound are derived from the largest request
  the API server accepts, divided by the smallest serialized element

Walking the tree is generic (any subtree with two or more children is one
operation) so that small grammar differences between celpy releases do not
change which rules compile.
"""

from __future__ import annotations

import logging
from typing import Any

import celpy
import lark
from celpy.celparser import CELParseError

from crdlint.analyzer.cardinality import MAX_UINT64, multiply_with_overflow_guard
from crdlint.compiler.protocol import CompilationResult
from crdlint.config import DEFAULT_MAX_REQUEST_SIZE_BYTES, DEFAULT_MAX_RULE_LENGTH, Config
from crdlint.exceptions import ExpressionCompileError
from crdlint.schema.models import SchemaKind, SchemaNode

logger = logging.getLogger(__name__)

MACROS = frozenset({"all", "exists", "exists_one", "map", "filter"})

# Smallest JSON encoding of a value of each kind
_MIN_SERIALIZED_SIZE = {
    SchemaKind.STRING: 2,    # ""
    SchemaKind.INTEGER: 1,   # 0
    SchemaKind.NUMBER: 1,    # 0
    SchemaKind.BOOLEAN: 4,   # true
    SchemaKind.NULL: 4,      # null
    SchemaKind.OBJECT: 2,    # {}
    SchemaKind.ARRAY: 2,     # []
}


def _add(*values: int) -> int:
    return min(sum(values), MAX_UINT64)


def min_serialized_size(node: SchemaNode | None) -> int:
    if node is None or node.kind is None:
        return 1
    return _MIN_SERIALIZED_SIZE[node.kind]


class CelCostEstimator:
    """
    ExpressionCompiler for CEL rules attached to structural schema nodes.

    Example:
        estimator = CelCostEstimator()
        result = estimator.compile("self.all(x, x.size() < 10)", node)
        result.base_cost, result.intrinsic_cardinality
    """

    def __init__(
        self,
        max_request_size_bytes: int = DEFAULT_MAX_REQUEST_SIZE_BYTES,
        max_rule_length: int = DEFAULT_MAX_RULE_LENGTH,
        per_call_limit: int | None = None,
    ) -> None:
        """
        Args:
            max_request_size_bytes: Size used to bound undeclared lengths and
                counts.
            max_rule_length: Longer rules are rejected outright.
            per_call_limit: If set, rules whose single-evaluation cost exceeds
                it are rejected as uncompilable.
        """
        self.max_request_size_bytes = max_request_size_bytes
        self.max_rule_length = max_rule_length
        self.per_call_limit = per_call_limit
        self._env = celpy.Environment()

    @classmethod
    def from_config(cls, config: Config) -> "CelCostEstimator":
        return cls(
            max_request_size_bytes=config.max_request_size_bytes,
            max_rule_length=config.max_rule_length,
            per_call_limit=config.per_call_limit,
        )

    # =========================================================================
    # ExpressionCompiler
    # =========================================================================

    def compile(self, rule: str, node: SchemaNode) -> CompilationResult:
        if not rule.strip():
            raise ExpressionCompileError("rule is empty", rule=rule)
        if len(rule) > self.max_rule_length:
            raise ExpressionCompileError(
                f"rule is {len(rule)} characters long (max {self.max_rule_length})",
                rule=rule,
            )

        try:
            tree = self._env.compile(rule)
            base_cost = max(self._cost(tree, node, {}), 1)
        except (CELParseError, lark.exceptions.LarkError) as e:
            raise ExpressionCompileError(f"syntax error: {e}", rule=rule) from e
        except RecursionError as e:
            raise ExpressionCompileError("expression nested too deeply", rule=rule) from e

        logger.debug("Estimated base cost %d for rule %r", base_cost, rule)

        if self.per_call_limit is not None and base_cost > self.per_call_limit:
            raise ExpressionCompileError(
                "estimated rule cost exceeds per-call budget by factor of "
                f"{base_cost / self.per_call_limit:.1f}x",
                rule=rule,
            )

        return CompilationResult(
            base_cost=base_cost,
            intrinsic_cardinality=self.intrinsic_cardinality(node),
        )

    # =========================================================================
    # Size estimates
    # =========================================================================

    def intrinsic_cardinality(self, node: SchemaNode) -> int:
        """How many instances of `node` could fit in one request."""
        return self.max_request_size_bytes // (min_serialized_size(node) + 1)

    def max_string_length(self, node: SchemaNode) -> int:
        if node.max_length is not None:
            return node.max_length
        return max(self.max_request_size_bytes - 2, 0)

    def element_count(self, node: SchemaNode) -> int:
        """Number of elements a comprehension over `node` visits."""
        if node.kind == SchemaKind.ARRAY:
            if node.max_items is not None:
                return node.max_items
            return self.max_request_size_bytes // (min_serialized_size(node.items) + 1)
        if node.is_map:
            if node.max_properties is not None:
                return node.max_properties
            # "": value,
            entry_size = 3 + min_serialized_size(node.additional_properties) + 1
            return self.max_request_size_bytes // entry_size
        if node.kind == SchemaKind.OBJECT:
            return len(node.properties)
        return self.max_request_size_bytes // 2

    def value_cost(self, node: SchemaNode | None) -> int:
        """Cost of reading a value of the given schema."""
        if node is not None and node.kind == SchemaKind.STRING:
            return max((self.max_string_length(node) + 9) // 10, 1)
        return 1

    # =========================================================================
    # Tree walk
    # =========================================================================

    def _cost(self, tree: Any, node: SchemaNode, scope: dict[str, SchemaNode | None]) -> int:
        if not isinstance(tree, lark.Tree):
            return 0

        if tree.data == "member_dot_arg":
            return self._call_cost(tree, node, scope)

        if tree.data == "ident":
            name = _ident_name(tree)
            if name == "self":
                return self.value_cost(node)
            if name in scope:
                return self.value_cost(scope[name])
            return 1

        children = [c for c in tree.children if c is not None]
        own = 1 if len(children) >= 2 else 0
        return _add(own, *(self._cost(child, node, scope) for child in children))

    def _call_cost(self, tree: lark.Tree, node: SchemaNode, scope: dict[str, SchemaNode | None]) -> int:
        target = tree.children[0]
        method = _method_name(tree)
        args = _call_args(tree)

        if method not in MACROS:
            return _add(1, self._cost(target, node, scope), *(self._cost(a, node, scope) for a in args))

        expected = (2, 3) if method == "map" else (2,)
        if len(args) not in expected:
            raise ExpressionCompileError(
                f"macro '{method}' expects {' or '.join(map(str, expected))} arguments, got {len(args)}"
            )
        variable = _ident_name(_unwrap(args[0]))
        if variable is None:
            raise ExpressionCompileError(f"macro '{method}' requires a simple name as its first argument")

        count, element = self._iteration(target, method, node, scope)
        inner_scope = {**scope, variable: element}
        body = _add(1, *(self._cost(a, node, inner_scope) for a in args[1:]))

        return _add(
            1,
            self._cost(target, node, scope),
            multiply_with_overflow_guard(body, count),
        )

    def _iteration(
        self,
        target: Any,
        method: str,
        node: SchemaNode,
        scope: dict[str, SchemaNode | None],
    ) -> tuple[int, SchemaNode | None]:
        """Return (element count, element schema) for a comprehension target."""
        literal = _find_list_literal(target)
        if literal is not None:
            return len(_list_elements(literal)), None
        unwrapped = _unwrap(target)

        schema, resolved = self._resolve(unwrapped, node, scope)
        if not resolved:
            return self.max_request_size_bytes // 2, None
        if schema is None or schema.kind is None:
            return self.max_request_size_bytes // 2, None

        if schema.kind == SchemaKind.ARRAY:
            return self.element_count(schema), schema.items
        if schema.kind == SchemaKind.OBJECT:
            # Comprehensions over maps and objects iterate their (string) keys
            return self.element_count(schema), None

        raise ExpressionCompileError(
            f"found no matching overload for '{method}' applied to '{schema.kind.value}'"
        )

    def _resolve(
        self,
        tree: Any,
        node: SchemaNode,
        scope: dict[str, SchemaNode | None],
    ) -> tuple[SchemaNode | None, bool]:
        """
        Resolve an expression to the schema of the value it denotes.

        Returns (schema, resolved); resolved is False when the expression is
        not a path rooted at self or a comprehension variable.
        """
        if not isinstance(tree, lark.Tree):
            return None, False

        if tree.data == "ident":
            name = _ident_name(tree)
            if name == "self":
                return node, True
            if name in scope:
                return scope[name], True
            return None, False

        if tree.data == "member_dot":
            parent, resolved = self._resolve(_unwrap(tree.children[0]), node, scope)
            field = _method_name(tree)
            if not resolved or parent is None or field is None:
                return None, False
            if field in parent.properties:
                return parent.properties[field], True
            if parent.additional_properties is not None:
                return parent.additional_properties, True
            return None, False

        return None, False


# =============================================================================
# Parse tree helpers
# =============================================================================


def _unwrap(tree: Any) -> Any:
    """Descend through single-child wrapper rules (expr -> ... -> primary)."""
    while isinstance(tree, lark.Tree):
        children = [c for c in tree.children if c is not None]
        if len(children) != 1 or not isinstance(children[0], lark.Tree):
            break
        tree = children[0]
    return tree


def _find_list_literal(tree: Any) -> lark.Tree | None:
    """Return the list literal a wrapper chain reduces to, if any."""
    while isinstance(tree, lark.Tree):
        if tree.data == "list_lit":
            return tree
        children = [c for c in tree.children if c is not None]
        if len(children) != 1:
            return None
        tree = children[0]
    return None


def _ident_name(tree: Any) -> str | None:
    if isinstance(tree, lark.Tree) and tree.data == "ident":
        for child in tree.children:
            if isinstance(child, lark.Token):
                return str(child)
    return None


def _method_name(tree: lark.Tree) -> str | None:
    tokens = [c for c in tree.children if isinstance(c, lark.Token)]
    return str(tokens[-1]) if tokens else None


def _call_args(tree: lark.Tree) -> list[Any]:
    for child in tree.children[1:]:
        if isinstance(child, lark.Tree) and child.data == "exprlist":
            return [c for c in child.children if c is not None]
    return []


def _list_elements(tree: lark.Tree) -> list[Any]:
    for child in tree.children:
        if isinstance(child, lark.Tree) and child.data == "exprlist":
            return [c for c in child.children if c is not None]
    return []
