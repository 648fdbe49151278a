"""
Pydantic models for structural schemas.

A structural schema is the normalized OpenAPI v3 tree embedded in a
CustomResourceDefinition. The structure is:
- SchemaNode: recursive node (type, children, size bounds, validation rules)
- ValidationRule: one entry of x-kubernetes-validations
- CRDDocument / CRDVersion: the schemas found in one decoded document

OpenAPI uses camelCase keys (and "x-kubernetes-*" extensions), which we map to
snake_case via Pydantic aliases for Pythonic access. Keys that play no part in
bound or cost analysis (description, format, enum, ...) are ignored.

Reference: https://kubernetes.io/docs/tasks/extend-kubernetes/custom-resources/custom-resource-definitions/
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class SchemaKind(str, Enum):
    """
    The closed set of structural schema types.

    Nodes whose "type" is missing or not in this set (e.g. int-or-string
    fields, preserve-unknown-fields blobs) get kind=None and are treated as
    leaves by every checker.
    """
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"


class ValidationRule(BaseModel):
    """A single x-kubernetes-validations entry."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    rule: str = Field(..., description="CEL expression evaluated against self")
    message: str | None = Field(default=None, description="Message shown on failure")


class SchemaNode(BaseModel):
    """
    A single node of a structural schema tree.

    This is a recursive, immutable structure: arrays own their `items`,
    objects own their `properties` and (for open maps) their
    `additional_properties` value schema. The tree is acyclic because the
    source format cannot express self-reference.

    Example:
        node = SchemaNode(
            kind=SchemaKind.ARRAY,
            max_items=5,
            items=SchemaNode(kind=SchemaKind.STRING, max_length=64),
            validation_rules=["self.all(x, x != '')"],
        )
    """

    model_config = ConfigDict(
        populate_by_name=True,  # Allow both alias and field name
        extra="ignore",
        frozen=True,
    )

    kind: SchemaKind | None = Field(
        default=None,
        alias="type",
        description="Schema type; None when missing or unrecognized",
    )

    items: SchemaNode | None = Field(
        default=None,
        description="Element schema (arrays)",
    )

    properties: dict[str, SchemaNode] = Field(
        default_factory=dict,
        description="Fixed fields (objects), in declaration order",
    )

    additional_properties: SchemaNode | None = Field(
        default=None,
        alias="additionalProperties",
        description="Value schema when the object is used as a map",
    )

    max_items: int | None = Field(default=None, alias="maxItems", ge=0)
    max_properties: int | None = Field(default=None, alias="maxProperties", ge=0)
    max_length: int | None = Field(default=None, alias="maxLength", ge=0)

    validation_rules: tuple[ValidationRule, ...] = Field(
        default_factory=tuple,
        alias="x-kubernetes-validations",
        description="Validation rules attached to this node, in declared order",
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> Any:
        if value is None or isinstance(value, SchemaKind):
            return value
        try:
            return SchemaKind(value)
        except ValueError:
            logger.debug("Unrecognized schema type %r treated as a leaf", value)
            return None

    @field_validator("additional_properties", mode="before")
    @classmethod
    def _drop_boolean_additional_properties(cls, value: Any) -> Any:
        # additionalProperties: true/false carries no value schema
        if isinstance(value, bool):
            return None
        return value

    @field_validator("validation_rules", mode="before")
    @classmethod
    def _coerce_rules(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        return tuple(
            {"rule": item} if isinstance(item, str) else item
            for item in value
        )

    # =========================================================================
    # Computed properties
    # =========================================================================

    @property
    def is_map(self) -> bool:
        """True for objects used as open-ended maps (additionalProperties set)."""
        return self.kind == SchemaKind.OBJECT and self.additional_properties is not None

    @property
    def rules(self) -> list[str]:
        """Rule texts in declared order."""
        return [r.rule for r in self.validation_rules]

    def children(self) -> Iterator[SchemaNode]:
        """Yield direct child schemas (items, additionalProperties, properties)."""
        if self.items is not None:
            yield self.items
        if self.additional_properties is not None:
            yield self.additional_properties
        yield from self.properties.values()

    def iter_nodes(self) -> Iterator[SchemaNode]:
        """Iterate over this node and all descendants (depth-first)."""
        yield self
        for child in self.children():
            yield from child.iter_nodes()

    def count_nodes(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def count_rules(self) -> int:
        return sum(len(node.validation_rules) for node in self.iter_nodes())


class CRDVersion(BaseModel):
    """One served version of a CRD and its decoded schema."""

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, description="Version name (e.g. v1alpha1); None for bare schemas")
    root: SchemaNode = Field(..., description="openAPIV3Schema root")


class CRDDocument(BaseModel):
    """
    A decoded input document.

    For a CustomResourceDefinition, `name` is metadata.name and `versions`
    lists every version carrying a schema. A bare schema document yields a
    single unnamed version.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, description="metadata.name of the CRD")
    kind: str | None = Field(default=None, description="Resource kind (spec.names.kind)")
    versions: tuple[CRDVersion, ...] = Field(default_factory=tuple)

    def get_version(self, name: str) -> CRDVersion | None:
        for version in self.versions:
            if version.name == name:
                return version
        return None


SchemaNode.model_rebuild()
