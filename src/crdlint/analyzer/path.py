"""
SchemaPath: First-class type for schema tree addressing.

Provides type-safe, consistent path representation across both checkers.
Ensures paths are formatted identically regardless of which check reports them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import CoreSchema, core_schema

ROOT_NAME = "openAPIV3Schema"


class SegmentKind(str, Enum):
    """What a path segment steps into."""

    PROPERTY = "property"
    ELEMENT = "element"
    MAP_VALUE = "map_value"


class Segment(NamedTuple):
    """One step from a schema node to a child schema."""

    kind: SegmentKind
    name: str | None = None

    def render(self) -> str:
        if self.kind == SegmentKind.ELEMENT:
            return "items"
        if self.kind == SegmentKind.MAP_VALUE:
            return "additionalProperties"
        return f"properties[{self.name}]"


ELEMENT = Segment(SegmentKind.ELEMENT)
MAP_VALUE = Segment(SegmentKind.MAP_VALUE)


class SchemaPath:
    """
    Immutable path to a node in a structural schema.

    Paths are sequences of segments from the root schema to the node. A
    segment is a property name, the array element marker or the map value
    marker. Paths carry no identity beyond their segments; they exist only to
    address findings.

    Example:
        path = SchemaPath.root()                # openAPIV3Schema
        spec = path.property("spec")            # openAPIV3Schema.properties[spec]
        item = spec.element()                   # ...properties[spec].items
        str(item.rule(0))                       # ...items.x-kubernetes-validations[0].rule
    """

    __slots__ = ("_segments",)

    def __init__(self, segments: tuple[Segment, ...] = ()) -> None:
        """
        Create a path from segments.

        Prefer using SchemaPath.root() and the navigation helpers.
        """
        self._segments: tuple[Segment, ...] = tuple(segments)

    @classmethod
    def root(cls) -> "SchemaPath":
        """Create a path pointing to the root schema."""
        return cls()

    @property
    def segments(self) -> tuple[Segment, ...]:
        return self._segments

    def property(self, name: str) -> "SchemaPath":
        """Navigate to the schema of a named property."""
        return SchemaPath(self._segments + (Segment(SegmentKind.PROPERTY, name),))

    def element(self) -> "SchemaPath":
        """Navigate to the element schema of an array."""
        return SchemaPath(self._segments + (ELEMENT,))

    def map_value(self) -> "SchemaPath":
        """Navigate to the value schema of a map."""
        return SchemaPath(self._segments + (MAP_VALUE,))

    def rule(self, index: int) -> str:
        """Render the location of the index-th validation rule of this node."""
        return f"{self}.x-kubernetes-validations[{index}].rule"

    def to_list(self) -> list[str]:
        """Rendered segments, root first."""
        return [ROOT_NAME] + [segment.render() for segment in self._segments]

    def __str__(self) -> str:
        """Field-path format: 'openAPIV3Schema.properties[spec].items'."""
        return ".".join(self.to_list())

    def __repr__(self) -> str:
        return f"SchemaPath({self})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SchemaPath):
            return self._segments == other._segments
        return False

    def __hash__(self) -> int:
        return hash(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    # Pydantic v2 serialization support
    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        """Define how Pydantic validates and serializes SchemaPath."""
        return core_schema.no_info_after_validator_function(
            cls._validate,
            core_schema.is_instance_schema(cls),
            serialization=core_schema.plain_serializer_function_ser_schema(
                str,
                info_arg=False,
            ),
        )

    @classmethod
    def _validate(cls, value: Any) -> "SchemaPath":
        if isinstance(value, cls):
            return value
        raise ValueError(f"Cannot convert {type(value)} to SchemaPath")

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        """JSON schema representation."""
        return {
            "type": "string",
            "description": "Field path from the schema root to the node",
            "example": "openAPIV3Schema.properties[spec].items",
        }
