"""CRD decoding and structural schema models."""

from crdlint.exceptions import ParseError
from crdlint.schema.config import DEFAULT_CONFIG, ParserConfig
from crdlint.schema.models import (
    CRDDocument,
    CRDVersion,
    SchemaKind,
    SchemaNode,
    ValidationRule,
)
from crdlint.schema.parser import parse_crd, parse_schema

__all__ = [
    "CRDDocument",
    "CRDVersion",
    "SchemaKind",
    "SchemaNode",
    "ValidationRule",
    "parse_crd",
    "parse_schema",
    "ParseError",
    "ParserConfig",
    "DEFAULT_CONFIG",
]
