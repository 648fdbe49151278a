"""
Tests for the CRD decoder.

Test philosophy:
- Test the happy path (v1 CRDs, legacy v1beta1 CRDs and bare schemas decode)
- Test edge cases (multi-document bundles, untyped nodes, boolean maps)
- Test error cases (invalid YAML, negative bounds, oversized input)

Each fixture is a CRD shape seen in real clusters.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from crdlint.schema import (
    DEFAULT_CONFIG,
    CRDDocument,
    ParseError,
    ParserConfig,
    SchemaKind,
    SchemaNode,
    parse_crd,
    parse_schema,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    """Load a fixture file as text."""
    return (FIXTURES_DIR / name).read_text()


# =============================================================================
# Happy Path Tests
# =============================================================================


class TestParseCRD:
    """Decoding apiextensions.k8s.io CustomResourceDefinitions."""

    def test_parse_v1_from_path(self) -> None:
        document = parse_crd(FIXTURES_DIR / "widgets_crd.yaml")

        assert isinstance(document, CRDDocument)
        assert document.name == "widgets.example.com"
        assert document.kind == "Widget"
        assert [v.name for v in document.versions] == ["v1alpha1", "v1"]

    def test_parse_from_string_path(self) -> None:
        document = parse_crd(str(FIXTURES_DIR / "gadgets_crd.yaml"))
        assert document.name == "gadgets.example.com"

    def test_parse_from_yaml_content(self) -> None:
        document = parse_crd(load_fixture("gadgets_crd.yaml"))
        assert len(document.versions) == 1

    def test_parse_from_mapping(self) -> None:
        data = {
            "apiVersion": "apiextensions.k8s.io/v1",
            "kind": "CustomResourceDefinition",
            "metadata": {"name": "things.example.com"},
            "spec": {
                "names": {"kind": "Thing"},
                "versions": [
                    {"name": "v1", "schema": {"openAPIV3Schema": {"type": "object"}}},
                ],
            },
        }
        document = parse_crd(data)
        assert document.versions[0].root.kind == SchemaKind.OBJECT

    def test_schema_tree(self) -> None:
        document = parse_crd(FIXTURES_DIR / "gadgets_crd.yaml")
        spec = document.versions[0].root.properties["spec"]

        tags = spec.properties["tags"]
        assert tags.kind == SchemaKind.ARRAY
        assert tags.max_items == 10
        assert tags.items.max_length == 63
        assert tags.rules == ["self.all(t, t.size() > 0)"]

        labels = spec.properties["labels"]
        assert labels.is_map
        assert labels.max_properties == 16
        assert labels.additional_properties.max_length == 128

    def test_property_order_preserved(self) -> None:
        document = parse_crd(FIXTURES_DIR / "gadgets_crd.yaml")
        spec = document.versions[0].root.properties["spec"]
        assert list(spec.properties) == ["replicas", "tags", "labels"]

    def test_rule_messages_kept(self) -> None:
        document = parse_crd(FIXTURES_DIR / "widgets_crd.yaml")
        name = document.get_version("v1").root.properties["spec"].properties["name"]
        assert name.validation_rules[0].message == "iterating a string is not allowed"

    def test_legacy_v1beta1(self) -> None:
        document = parse_crd(FIXTURES_DIR / "legacy_v1beta1_crd.yaml")

        assert document.name == "crontabs.stable.example.com"
        assert [v.name for v in document.versions] == ["v1beta1"]
        cron = document.versions[0].root.properties["spec"].properties["cronSpec"]
        assert cron.kind == SchemaKind.STRING

    def test_multi_document_bundle(self) -> None:
        document = parse_crd(FIXTURES_DIR / "bundle.yaml")
        assert document.name == "sprockets.example.com"

    def test_get_version(self) -> None:
        document = parse_crd(FIXTURES_DIR / "widgets_crd.yaml")
        assert document.get_version("v1").name == "v1"
        assert document.get_version("v2") is None


class TestParseBareSchema:
    """Documents that are just an OpenAPI schema."""

    def test_bare_json_schema(self) -> None:
        document = parse_crd(FIXTURES_DIR / "bare_schema.json")

        assert document.name is None
        assert len(document.versions) == 1
        root = document.versions[0].root
        assert root.properties["items"].kind == SchemaKind.ARRAY

    def test_json_content(self) -> None:
        content = json.dumps({"type": "string", "maxLength": 4})
        root = parse_crd(content).versions[0].root
        assert root.max_length == 4

    def test_open_api_v3_schema_wrapper(self) -> None:
        document = parse_crd({"openAPIV3Schema": {"type": "array", "items": {"type": "integer"}}})
        assert document.versions[0].root.items.kind == SchemaKind.INTEGER


# =============================================================================
# Edge Cases
# =============================================================================


class TestSchemaNodeEdgeCases:
    """Schema shapes with unusual keys."""

    def test_untyped_node_is_leaf(self) -> None:
        node = parse_schema({"x-kubernetes-int-or-string": True})
        assert node.kind is None
        assert list(node.children()) == []

    def test_unknown_type_is_leaf(self) -> None:
        assert parse_schema({"type": "date"}).kind is None

    def test_boolean_additional_properties_is_not_a_map(self) -> None:
        node = parse_schema({"type": "object", "additionalProperties": True})
        assert node.additional_properties is None
        assert not node.is_map

    def test_irrelevant_keys_ignored(self) -> None:
        node = parse_schema({"type": "string", "description": "name", "format": "dns1123", "maxLength": 3})
        assert node.max_length == 3

    def test_count_nodes_and_rules(self) -> None:
        root = parse_crd(FIXTURES_DIR / "gadgets_crd.yaml").versions[0].root
        # root, spec, replicas, tags, tags.items, labels, labels value
        assert root.count_nodes() == 7
        assert root.count_rules() == 2

    def test_snake_case_construction(self) -> None:
        node = SchemaNode(kind=SchemaKind.ARRAY, max_items=2, validation_rules=["size(self) > 0"])
        assert node.rules == ["size(self) > 0"]


# =============================================================================
# Error Cases
# =============================================================================


class TestParseErrors:
    """Inputs that cannot be linted."""

    def test_invalid_yaml(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_crd(FIXTURES_DIR / "malformed.yaml")
        assert exc_info.value.source == "yaml_decode"

    def test_negative_bound(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_crd(FIXTURES_DIR / "negative_bound.yaml")
        assert exc_info.value.source == "validation"
        assert "maxItems" in exc_info.value.detail

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError, match="File not found"):
            parse_crd(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("   \n")
        with pytest.raises(ParseError, match="empty"):
            parse_crd(path)

    def test_not_a_schema(self) -> None:
        with pytest.raises(ParseError, match="neither"):
            parse_crd({"apiVersion": "v1", "kind": "ConfigMap", "data": {}})

    def test_crd_without_schemas(self) -> None:
        data = {
            "kind": "CustomResourceDefinition",
            "metadata": {"name": "empty.example.com"},
            "spec": {"versions": [{"name": "v1"}]},
        }
        with pytest.raises(ParseError, match="No version"):
            parse_crd(data)

    def test_bundle_with_two_crds(self) -> None:
        crd = load_fixture("gadgets_crd.yaml")
        with pytest.raises(ParseError, match="single CustomResourceDefinition"):
            parse_crd(crd + "\n---\n" + crd)

    def test_schema_must_be_mapping(self) -> None:
        with pytest.raises(ParseError):
            parse_schema(["type", "object"])


class TestResourceLimits:
    """Parser limits protect the traversals."""

    def test_depth_limit(self) -> None:
        schema: dict = {"type": "string"}
        for _ in range(30):
            schema = {"type": "array", "items": schema}
        with pytest.raises(ParseError) as exc_info:
            parse_crd(schema, config=ParserConfig(max_depth=20))
        assert exc_info.value.source == "resource_limit"

    def test_node_limit(self) -> None:
        schema = {"type": "object", "properties": {f"f{i}": {"type": "integer"} for i in range(50)}}
        with pytest.raises(ParseError, match="Schema too large"):
            parse_crd(schema, config=ParserConfig(max_nodes=10))

    def test_file_size_limit(self, tmp_path: Path) -> None:
        path = tmp_path / "big.yaml"
        path.write_text("type: string\n" + "# padding\n" * 20_000)
        with pytest.raises(ParseError, match="File too large"):
            parse_crd(path, config=ParserConfig(max_file_size_mb=0.1))

    def test_defaults_accept_real_crds(self, fixtures_dir: Path) -> None:
        assert DEFAULT_CONFIG == ParserConfig()
        assert parse_crd(fixtures_dir / "widgets_crd.yaml", config=DEFAULT_CONFIG).versions

    def test_config_is_frozen(self) -> None:
        with pytest.raises(Exception):
            DEFAULT_CONFIG.max_depth = 1  # type: ignore[misc]
