"""
Parser for CustomResourceDefinition documents.

This module handles:
- Loading CRDs from files, YAML/JSON strings, or already-decoded mappings
- Locating the OpenAPI v3 schema of each version (v1 and legacy v1beta1)
- Converting schemas to typed SchemaNode trees
- Enforcing resource limits to prevent OOM crashes and runaway recursion

Error handling philosophy: Fail fast with clear messages. If we can't decode
the input, tell the user exactly what's wrong rather than linting garbage.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from crdlint.exceptions import ParseError
from crdlint.schema.config import DEFAULT_CONFIG, ParserConfig
from crdlint.schema.models import CRDDocument, CRDVersion, SchemaNode

logger = logging.getLogger(__name__)

CRD_KIND = "CustomResourceDefinition"

Source = str | Path | Mapping[str, Any]


def parse_crd(
    source: Source,
    config: ParserConfig | None = None,
) -> CRDDocument:
    """
    Parse a CustomResourceDefinition (or a bare OpenAPI schema) into models.

    Accepts multiple input formats for convenience:
    - File path (str or Path): Reads and parses the file (YAML or JSON)
    - YAML/JSON string: Parses the string
    - Mapping: An already-decoded document

    Args:
        source: The document in any of the supported formats
        config: Parser configuration with resource limits. If None,
            uses DEFAULT_CONFIG.

    Returns:
        CRDDocument with one CRDVersion per version that carries a schema

    Raises:
        ParseError: If input cannot be decoded, validated, or exceeds limits

    Example:
        >>> document = parse_crd("crontab-crd.yaml")
        >>> for version in document.versions:
        ...     print(version.name, version.root.kind)
    """
    config = config or DEFAULT_CONFIG

    _check_file_size(source, config)

    data = _load_source(source)
    _check_tree_depth(data, config)

    if data.get("kind") == CRD_KIND:
        document = _parse_crd_document(data)
    elif "openAPIV3Schema" in data:
        document = CRDDocument(versions=(CRDVersion(root=parse_schema(data["openAPIV3Schema"])),))
    elif _looks_like_schema(data):
        document = CRDDocument(versions=(CRDVersion(root=parse_schema(data)),))
    else:
        raise ParseError(
            "Document is neither a CustomResourceDefinition nor an OpenAPI schema",
            detail=f"Top-level keys: {', '.join(sorted(map(str, data))) or '(none)'}",
            source="structure",
        )

    if not document.versions:
        raise ParseError(
            "No version of the CustomResourceDefinition declares a schema",
            detail="Expected spec.versions[*].schema.openAPIV3Schema",
            source="structure",
        )

    for version in document.versions:
        _check_node_count(version.root, config)

    logger.debug(
        "Parsed %s with %d version(s)",
        document.name or "schema document",
        len(document.versions),
    )
    return document


def parse_schema(data: Any) -> SchemaNode:
    """
    Validate one OpenAPI schema mapping into a SchemaNode tree.

    Converts Pydantic validation errors into user-friendly ParseErrors.
    """
    if not isinstance(data, Mapping):
        raise ParseError(
            f"Expected schema object, got {type(data).__name__}",
            source="structure",
        )

    try:
        return SchemaNode.model_validate(dict(data))
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = " -> ".join(str(x) for x in error["loc"])
            errors.append(f"  {loc}: {error['msg']}")

        raise ParseError(
            "Schema validation failed",
            detail="\n".join(errors),
            source="validation",
        ) from e


def _parse_crd_document(data: Mapping[str, Any]) -> CRDDocument:
    """Extract every versioned schema from a CRD object."""
    metadata = data.get("metadata") or {}
    spec = data.get("spec")
    if not isinstance(spec, Mapping):
        raise ParseError(
            "CustomResourceDefinition has no spec",
            source="structure",
        )

    names = spec.get("names") or {}
    versions: list[CRDVersion] = []

    # apiextensions.k8s.io/v1beta1: one schema shared by every version
    shared = (spec.get("validation") or {}).get("openAPIV3Schema")

    for entry in spec.get("versions") or []:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("name")
        raw_schema = (entry.get("schema") or {}).get("openAPIV3Schema", shared)
        if raw_schema is None:
            logger.debug("Version %s declares no schema, skipping", name)
            continue
        versions.append(CRDVersion(name=name, root=parse_schema(raw_schema)))

    if not versions and shared is not None:
        versions.append(CRDVersion(name=spec.get("version"), root=parse_schema(shared)))

    return CRDDocument(
        name=metadata.get("name") if isinstance(metadata, Mapping) else None,
        kind=names.get("kind") if isinstance(names, Mapping) else None,
        versions=tuple(versions),
    )


def _looks_like_schema(data: Mapping[str, Any]) -> bool:
    return any(key in data for key in ("type", "properties", "items", "additionalProperties"))


def _load_source(source: Source) -> dict[str, Any]:
    """
    Load source into a Python dict.

    Handles file paths, YAML/JSON strings, and already-decoded data.
    """
    if isinstance(source, Mapping):
        return dict(source)

    if isinstance(source, Path):
        return _load_file(source)

    if isinstance(source, str):
        # Multi-line or bracketed input is document content, anything else a path
        stripped = source.strip()
        if "\n" in stripped or stripped.startswith(("{", "[")):
            return _parse_content(stripped)
        return _load_file(Path(source))

    raise ParseError(
        f"Unsupported source type: {type(source).__name__}",
        detail="Expected file path, YAML/JSON string, or mapping",
        source="type_check",
    )


def _load_file(path: Path) -> dict[str, Any]:
    """Load and parse a YAML or JSON file."""
    if not path.exists():
        raise ParseError(
            f"File not found: {path}",
            source="file_read",
        )

    if not path.is_file():
        raise ParseError(
            f"Path is not a file: {path}",
            source="file_read",
        )

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ParseError(
            f"Cannot read file: {path}",
            detail=str(e),
            source="file_read",
        ) from e

    if not content.strip():
        raise ParseError(
            f"File is empty: {path}",
            source="file_read",
        )

    return _parse_content(content)


def _parse_content(content: str) -> dict[str, Any]:
    """
    Parse YAML (or JSON) content into a single document.

    Multi-document streams are accepted when exactly one document is a
    CustomResourceDefinition (e.g. a bundle with a Namespace in front).
    """
    if content.lstrip().startswith("{"):
        try:
            documents = [json.loads(content)]
        except json.JSONDecodeError as e:
            raise ParseError(
                "Invalid JSON format",
                detail=f"Line {e.lineno}, column {e.colno}: {e.msg}",
                source="json_decode",
            ) from e
    else:
        try:
            documents = [doc for doc in yaml.safe_load_all(content) if doc is not None]
        except yaml.YAMLError as e:
            raise ParseError(
                "Invalid YAML format",
                detail=str(e),
                source="yaml_decode",
            ) from e

    if not documents:
        raise ParseError(
            "Empty document - no CustomResourceDefinition found",
            source="structure",
        )

    if len(documents) > 1:
        crds = [d for d in documents if isinstance(d, dict) and d.get("kind") == CRD_KIND]
        if len(crds) != 1:
            raise ParseError(
                f"Expected a single CustomResourceDefinition, found {len(crds)} "
                f"among {len(documents)} documents",
                detail="Lint one CRD at a time.",
                source="structure",
            )
        documents = crds

    data = documents[0]
    if not isinstance(data, dict):
        raise ParseError(
            f"Expected a mapping at the top level, got {type(data).__name__}",
            source="structure",
        )
    return data


def _check_file_size(source: Source, config: ParserConfig) -> None:
    """Check file size before loading into memory."""
    path: Path | None = None

    if isinstance(source, Path):
        path = source
    elif isinstance(source, str):
        stripped = source.strip()
        if "\n" not in stripped and not stripped.startswith(("{", "[")):
            path = Path(source)

    if path is not None and path.is_file():
        size_mb = path.stat().st_size / (1024 * 1024)
        if size_mb > config.max_file_size_mb:
            raise ParseError(
                f"File too large: {size_mb:.1f}MB (max {config.max_file_size_mb}MB)",
                detail="Increase max_file_size_mb in the parser config if this is intended",
                source="resource_limit",
            )


def _check_tree_depth(data: Any, config: ParserConfig) -> None:
    """
    Check document depth before model validation.

    Uses an explicit stack so the check itself cannot overflow.
    """
    stack: list[tuple[Any, int]] = [(data, 1)]
    while stack:
        value, depth = stack.pop()
        if depth > config.max_depth:
            raise ParseError(
                f"Document too deeply nested (max depth {config.max_depth})",
                detail="Increase max_depth in the parser config if this is intended",
                source="resource_limit",
            )
        if isinstance(value, Mapping):
            stack.extend((child, depth + 1) for child in value.values())
        elif isinstance(value, list):
            stack.extend((child, depth + 1) for child in value)


def _check_node_count(root: SchemaNode, config: ParserConfig) -> None:
    count = root.count_nodes()
    if count > config.max_nodes:
        raise ParseError(
            f"Schema too large: {count} nodes (max {config.max_nodes})",
            detail="Increase max_nodes in the parser config if this is intended",
            source="resource_limit",
        )
