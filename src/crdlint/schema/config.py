"""
Decoding limits for CRD documents.

A CustomResourceDefinition is stored as a single etcd object, so anything the
API server accepts is at most a couple of MB. Bundles produced by `kubectl
kustomize` or Helm can hold many CRDs, hence the more generous file limit.
Schema nesting in practice stays well under 50 levels; the depth limit exists
because the decoder and both checkers recurse once per level.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ParserConfig(BaseModel):
    """
    Size limits applied while decoding a CRD or bare schema.

    Attributes:
        max_file_size_mb: Largest file read from disk, bundles included.
        max_nodes: Most schema nodes allowed in one version's
            openAPIV3Schema.
        max_depth: Deepest nesting of the raw YAML/JSON document. Checked
            before model validation, so a hostile document fails with
            ParseError instead of exhausting the interpreter stack.

    Example:
        # A single CRD taken from an untrusted pull request
        config = ParserConfig(max_file_size_mb=3, max_nodes=5_000)
        parse_crd("crd.yaml", config=config)
    """

    model_config = ConfigDict(frozen=True)

    max_file_size_mb: float = Field(
        default=50.0,
        gt=0,
        description="Largest CRD file or bundle, in megabytes",
    )

    max_nodes: int = Field(
        default=100_000,
        gt=0,
        description="Most schema nodes in one openAPIV3Schema",
    )

    max_depth: int = Field(
        default=200,
        gt=0,
        description="Deepest nesting of the decoded document",
    )


DEFAULT_CONFIG = ParserConfig()
