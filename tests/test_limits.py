"""
Tests for the missing size limit check.

Every list, map and string must declare maxItems, maxProperties or
maxLength. Findings are path-addressed and come back in depth-first
pre-order.
"""

from __future__ import annotations

from crdlint.analyzer.limits import check_max_limits
from crdlint.analyzer.models import SchemaType
from crdlint.analyzer.path import SchemaPath
from crdlint.schema.models import SchemaKind, SchemaNode

from builders import (
    array_schema,
    integer_schema,
    map_schema,
    object_schema,
    root_with,
    string_schema,
)

ROOT = SchemaPath.root()


def _paths(findings) -> list[str]:
    return [str(f.path) for f in findings]


class TestSingleNodes:
    """One node, one verdict."""

    def test_unbounded_string(self) -> None:
        findings = check_max_limits(string_schema())
        assert len(findings) == 1
        assert findings[0].schema_type == SchemaType.STRING
        assert findings[0].path == ROOT
        assert str(findings[0]) == 'string "openAPIV3Schema" missing maxLength'

    def test_bounded_string(self) -> None:
        assert check_max_limits(string_schema(max_length=10)) == []

    def test_unbounded_array_with_bounded_items(self) -> None:
        findings = check_max_limits(array_schema(string_schema(max_length=1)))
        assert [(str(f.path), f.schema_type) for f in findings] == [
            ("openAPIV3Schema", SchemaType.LIST),
        ]
        assert findings[0].message == 'list "openAPIV3Schema" missing maxItems'

    def test_unbounded_map(self) -> None:
        findings = check_max_limits(map_schema(integer_schema()))
        assert [f.schema_type for f in findings] == [SchemaType.MAP]
        assert findings[0].message == 'map "openAPIV3Schema" missing maxProperties'

    def test_scalars_need_no_bound(self) -> None:
        for kind in (SchemaKind.INTEGER, SchemaKind.NUMBER, SchemaKind.BOOLEAN, SchemaKind.NULL, None):
            assert check_max_limits(SchemaNode(kind=kind)) == []

    def test_fixed_field_object_needs_no_bound(self) -> None:
        assert check_max_limits(object_schema({"count": integer_schema()})) == []

    def test_array_without_items(self) -> None:
        """A missing item schema is not itself a finding."""
        findings = check_max_limits(array_schema(None, max_items=3))
        assert findings == []


class TestBoundPresence:
    """A present bound silences only its own node."""

    def test_bounded_array_still_reports_items(self) -> None:
        schema = root_with("array", array_schema(string_schema(), max_items=5))
        findings = check_max_limits(schema)
        assert _paths(findings) == ["openAPIV3Schema.properties[array].items"]
        assert findings[0].schema_type == SchemaType.STRING

    def test_bounded_map_still_reports_values(self) -> None:
        schema = map_schema(string_schema(), max_properties=5)
        findings = check_max_limits(schema)
        assert [f.schema_type for f in findings] == [SchemaType.STRING]


class TestTraversal:
    """Paths and ordering across nested schemas."""

    def test_unbounded_array_of_unbounded_strings(self) -> None:
        schema = root_with("array", array_schema(string_schema()))
        findings = check_max_limits(schema)
        assert [(str(f.path), f.schema_type) for f in findings] == [
            ("openAPIV3Schema.properties[array]", SchemaType.LIST),
            ("openAPIV3Schema.properties[array].items", SchemaType.STRING),
        ]

    def test_map_values_share_the_map_path(self) -> None:
        schema = root_with("labels", map_schema(string_schema()))
        findings = check_max_limits(schema)
        assert [(str(f.path), f.schema_type) for f in findings] == [
            ("openAPIV3Schema.properties[labels]", SchemaType.MAP),
            ("openAPIV3Schema.properties[labels]", SchemaType.STRING),
        ]

    def test_map_values_before_properties(self) -> None:
        schema = SchemaNode(
            kind=SchemaKind.OBJECT,
            additional_properties=string_schema(),
            properties={"fixed": array_schema(integer_schema())},
        )
        findings = check_max_limits(schema)
        assert [f.schema_type for f in findings] == [
            SchemaType.MAP,
            SchemaType.STRING,
            SchemaType.LIST,
        ]
        assert _paths(findings)[2] == "openAPIV3Schema.properties[fixed]"

    def test_properties_in_declaration_order(self) -> None:
        schema = object_schema({
            "zeta": string_schema(),
            "alpha": string_schema(),
            "mid": string_schema(max_length=3),
            "beta": array_schema(integer_schema()),
        })
        assert _paths(check_max_limits(schema)) == [
            "openAPIV3Schema.properties[zeta]",
            "openAPIV3Schema.properties[alpha]",
            "openAPIV3Schema.properties[beta]",
        ]

    def test_deep_nesting(self) -> None:
        leaf = string_schema()
        node = leaf
        for _ in range(20):
            node = array_schema(node, max_items=2)
        findings = check_max_limits(root_with("deep", node))
        assert len(findings) == 1
        assert str(findings[0].path) == "openAPIV3Schema.properties[deep]" + ".items" * 20

    def test_property_named_items(self) -> None:
        """A property called "items" is not the element marker."""
        schema = object_schema({"items": array_schema(string_schema(max_length=1))})
        findings = check_max_limits(schema)
        assert _paths(findings) == ["openAPIV3Schema.properties[items]"]
        assert findings[0].path != ROOT.element()

    def test_idempotent(self) -> None:
        schema = root_with("tags", array_schema(map_schema(string_schema())))
        assert check_max_limits(schema) == check_max_limits(schema)
