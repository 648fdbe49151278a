"""
Cardinality propagation through a structural schema.

The cardinality of a node is the maximum number of times its data can occur
within one instance of the root document, given the size limits declared on
every ancestor. The root occurs exactly once. Each array or map multiplies the
cardinality of its children by its declared maxItems / maxProperties; fixed
fields and leaves do not multiply it. A single undeclared limit anywhere above
a node makes it unbounded, and unboundedness is absorbing.

Cardinalities are plain ints, with None meaning unbounded.
"""

from __future__ import annotations

from crdlint.schema.models import SchemaKind, SchemaNode

# Largest value an estimate may take; products saturate here instead of growing
MAX_UINT64 = 2**64 - 1

ROOT_CARDINALITY = 1

# A cardinality bound: a non-negative int, or None for unbounded
Cardinality = int | None


def multiply_with_overflow_guard(base: int, factor: int) -> int:
    """
    Return base * factor, saturating at MAX_UINT64.

    A zero base short-circuits to 0 so that an empty rule stays free however
    often it repeats.
    """
    if base == 0:
        return 0
    if MAX_UINT64 // base < factor:
        return MAX_UINT64
    return base * factor


def max_elements(node: SchemaNode) -> Cardinality:
    """
    Return the factor by which `node` multiplies the cardinality of its children.

    - array: maxItems, or unbounded when undeclared
    - object used as a map: maxProperties, or unbounded when undeclared
    - object with fixed fields: 1 (each field exists once per object)
    - everything else: 1 (leaves have no children to multiply)
    """
    if node.kind == SchemaKind.ARRAY:
        return node.max_items
    if node.kind == SchemaKind.OBJECT and node.additional_properties is not None:
        return node.max_properties
    return 1


def propagate(node: SchemaNode | None, cardinality: Cardinality) -> Cardinality:
    """
    Compute the cardinality handed to the children of `node`.

    Args:
        node: Schema whose children are being entered. None is accepted and
            yields unbounded, since a missing item/value schema is reported
            elsewhere and says nothing about size.
        cardinality: Cardinality of `node` itself.

    Returns:
        The children's cardinality, or None when unbounded.
    """
    if node is None or cardinality is None:
        return None
    factor = max_elements(node)
    if factor is None:
        return None
    return multiply_with_overflow_guard(cardinality, factor)


def chain_cardinality(nodes: list[SchemaNode]) -> Cardinality:
    """
    Cardinality of the children of the last node in an ancestor chain.

    `nodes` runs from the root downwards. Equivalent to applying propagate()
    node by node starting from ROOT_CARDINALITY.
    """
    cardinality: Cardinality = ROOT_CARDINALITY
    for node in nodes:
        cardinality = propagate(node, cardinality)
    return cardinality
