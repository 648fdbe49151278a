"""
Check: missing size limits.

Every list, map and string in a schema should declare a maximum size
(maxItems, maxProperties, maxLength). Without one, the cost of any validation
rule that touches the data cannot be bounded, and the API server has to assume
the worst case allowed by the request size.

A missing bound is always reported, never inferred.
"""

from __future__ import annotations

import logging

from crdlint.analyzer.models import LimitFinding, SchemaType
from crdlint.analyzer.path import SchemaPath
from crdlint.schema.models import SchemaKind, SchemaNode

logger = logging.getLogger(__name__)


def check_max_limits(schema: SchemaNode) -> list[LimitFinding]:
    """
    Return one finding for every list/map/string lacking a declared limit.

    Findings come back in depth-first pre-order: a node's own finding precedes
    its children's, and a map's value schema is visited before the object's
    declared properties.

    Example:
        for finding in check_max_limits(document.versions[0].root):
            print(finding)   # list "openAPIV3Schema.properties[tags]" missing maxItems
    """
    findings: list[LimitFinding] = []
    _check_node(schema, SchemaPath.root(), findings)
    logger.debug("Limit check produced %d finding(s)", len(findings))
    return findings


def _check_node(node: SchemaNode, path: SchemaPath, findings: list[LimitFinding]) -> None:
    if node.kind == SchemaKind.ARRAY:
        if node.max_items is None:
            findings.append(LimitFinding(path=path, schema_type=SchemaType.LIST))
        if node.items is not None:
            _check_node(node.items, path.element(), findings)

    elif node.kind == SchemaKind.STRING:
        if node.max_length is None:
            findings.append(LimitFinding(path=path, schema_type=SchemaType.STRING))

    elif node.kind == SchemaKind.OBJECT:
        if node.additional_properties is not None:
            if node.max_properties is None:
                findings.append(LimitFinding(path=path, schema_type=SchemaType.MAP))
            # Map values are reported at the map's own path
            _check_node(node.additional_properties, path, findings)
        for name, prop in node.properties.items():
            _check_node(prop, path.property(name), findings)
