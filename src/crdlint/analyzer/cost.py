"""
Check: validation rule cost.

Each validation rule is compiled to a base cost for one evaluation. Because a
rule attached to a node runs once per occurrence of that node, the base cost
is scaled by the node's cardinality (see cardinality.py). When the ancestors
declare no usable bound, the compiler's own cardinality estimate is used
instead. Rules whose scaled cost exceeds the budget are reported.

Compile failures are reported separately and never stop the traversal.
"""

from __future__ import annotations

import logging

from crdlint.analyzer.cardinality import (
    ROOT_CARDINALITY,
    Cardinality,
    multiply_with_overflow_guard,
    propagate,
)
from crdlint.analyzer.models import CompileFinding, CostFinding, CostReport
from crdlint.analyzer.path import SchemaPath
from crdlint.compiler.protocol import CompilationResult, ExpressionCompiler
from crdlint.exceptions import ExpressionCompileError
from crdlint.schema.models import SchemaKind, SchemaNode

logger = logging.getLogger(__name__)


def expression_cost(result: CompilationResult, cardinality: Cardinality) -> int:
    """
    Worst-case cost of a compiled rule on a node with the given cardinality.

    A concrete structural bound takes precedence over the compiler's estimate.
    """
    if cardinality is not None:
        return multiply_with_overflow_guard(result.base_cost, cardinality)
    return multiply_with_overflow_guard(result.base_cost, result.intrinsic_cardinality)


def check_expression_cost(
    schema: SchemaNode,
    compiler: ExpressionCompiler,
    budget: int,
) -> CostReport:
    """
    Check every validation rule in `schema` against the cost budget.

    Args:
        schema: Root of the structural schema
        compiler: Compiles each rule to a base cost and intrinsic cardinality
        budget: Maximum allowed cost of a single rule

    Returns:
        CostReport with cost findings and compile findings, each in
        depth-first order and, within a node, in rule order.
    """
    cost_findings: list[CostFinding] = []
    compile_findings: list[CompileFinding] = []
    _check_node(
        schema,
        SchemaPath.root(),
        ROOT_CARDINALITY,
        compiler,
        budget,
        cost_findings,
        compile_findings,
    )
    logger.debug(
        "Cost check produced %d cost finding(s), %d compile finding(s)",
        len(cost_findings),
        len(compile_findings),
    )
    return CostReport(
        cost_findings=tuple(cost_findings),
        compile_findings=tuple(compile_findings),
    )


def _check_node(
    node: SchemaNode,
    path: SchemaPath,
    cardinality: Cardinality,
    compiler: ExpressionCompiler,
    budget: int,
    cost_findings: list[CostFinding],
    compile_findings: list[CompileFinding],
) -> None:
    for index, rule in enumerate(node.validation_rules):
        try:
            result = compiler.compile(rule.rule, node)
        except ExpressionCompileError as e:
            logger.debug("Rule %d at %s failed to compile: %s", index, path, e.message)
            compile_findings.append(
                CompileFinding(path=path, rule_index=index, rule=rule.rule, error=e.message)
            )
            continue

        cost = expression_cost(result, cardinality)
        if cost > budget:
            cost_findings.append(
                CostFinding(
                    path=path,
                    rule_index=index,
                    rule=rule.rule,
                    cost=cost,
                    budget=budget,
                )
            )

    child_cardinality = propagate(node, cardinality)

    if node.kind == SchemaKind.ARRAY:
        if node.items is not None:
            _check_node(
                node.items, path.element(), child_cardinality,
                compiler, budget, cost_findings, compile_findings,
            )
    elif node.kind == SchemaKind.OBJECT:
        for name, prop in node.properties.items():
            _check_node(
                prop, path.property(name), child_cardinality,
                compiler, budget, cost_findings, compile_findings,
            )
        if node.additional_properties is not None:
            _check_node(
                node.additional_properties, path.map_value(), child_cardinality,
                compiler, budget, cost_findings, compile_findings,
            )
