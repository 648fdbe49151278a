"""
Output module - Separates rendering from analysis.

Provides two output formats:
- render_text: one line per finding, for terminals and CI logs
- render_json: stable JSON schema for tooling

Usage:
    from crdlint.output import render_text, render_json

    result = analyzer.analyze_document(document)
    print(render_text(result))
"""

from crdlint.output.renderers import (
    OutputFormat,
    render,
    render_json,
    render_text,
)
from crdlint.output.schema import (
    DocumentResultSchema,
    VersionResultSchema,
    get_json_schema,
)

__all__ = [
    "OutputFormat",
    "render",
    "render_text",
    "render_json",
    "DocumentResultSchema",
    "VersionResultSchema",
    "get_json_schema",
]
