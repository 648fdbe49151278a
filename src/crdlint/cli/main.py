"""
crdlint CLI - structural schema linter for Kubernetes CustomResourceDefinitions.

Usage:
    crdlint lint crd.yaml
    crdlint lint --output json --budget 5000000 crd.yaml
    crdlint lint --help

Exit codes:
    0  no findings
    1  at least one missing limit, rule over budget, or compile error
    2  the input or configuration could not be used
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape

from crdlint import __version__
from crdlint.analyzer import Analyzer
from crdlint.config import get_config
from crdlint.exceptions import AnalyzerError, ConfigurationError, ParseError
from crdlint.output import OutputFormat, render_json, render_text
from crdlint.schema import parse_crd

EXIT_FINDINGS = 1
EXIT_USAGE = 2

app = typer.Typer(
    name="crdlint",
    help="Structural schema linter for Kubernetes CustomResourceDefinitions",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"crdlint version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """crdlint - find unbounded fields and expensive validation rules."""
    pass


@app.command()
def lint(
    crd_file: Annotated[
        Path,
        typer.Argument(
            help="Path to a CustomResourceDefinition or bare OpenAPI schema (YAML or JSON)",
            exists=True,
            readable=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    output: Annotated[
        OutputFormat,
        typer.Option(
            "--output",
            "-o",
            help="Output format",
        ),
    ] = OutputFormat.TEXT,
    human_readable: Annotated[
        bool,
        typer.Option(
            "--human-readable/--raw",
            help="Report rule costs as a factor over budget, or as raw figures",
        ),
    ] = True,
    budget: Annotated[
        Optional[int],
        typer.Option(
            "--budget",
            "-b",
            min=0,
            help="Cost budget for a single validation rule",
        ),
    ] = None,
    crd_version: Annotated[
        Optional[str],
        typer.Option(
            "--version",
            help="Only check this CRD version",
        ),
    ] = None,
    no_limits: Annotated[
        bool,
        typer.Option(
            "--no-limits",
            help="Skip the missing size limit check",
        ),
    ] = False,
    no_cost: Annotated[
        bool,
        typer.Option(
            "--no-cost",
            help="Skip the validation rule cost check",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Enable debug logging",
        ),
    ] = False,
) -> None:
    """
    Check a CRD for missing size limits and over-budget validation rules.

    Examples:

        $ crdlint lint config/crd/bases/example.com_widgets.yaml

        $ crdlint lint --output json --no-limits widgets.yaml
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        config = get_config().with_overrides(
            cost_budget=budget,
            check_limits=False if no_limits else None,
            check_cost=False if no_cost else None,
        )
        document = parse_crd(crd_file)
        analyzer = Analyzer(config=config)
        result = analyzer.analyze_document(document, version=crd_version)

    except ParseError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}", highlight=False, emoji=False)
        if e.detail:
            error_console.print(e.detail, markup=False, highlight=False, emoji=False)
        raise typer.Exit(code=EXIT_USAGE)
    except ConfigurationError as e:
        error_console.print(f"[red]Configuration error:[/red] {escape(e.message)}", highlight=False, emoji=False)
        raise typer.Exit(code=EXIT_USAGE)
    except AnalyzerError as e:
        error_console.print(f"[red]Error:[/red] {escape(e.message)}", highlight=False, emoji=False)
        raise typer.Exit(code=EXIT_USAGE)

    if output == OutputFormat.JSON:
        console.print_json(render_json(result))
    else:
        error_console.print(
            render_text(result, human_readable=human_readable),
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )

    if result.has_findings:
        raise typer.Exit(code=EXIT_FINDINGS)


if __name__ == "__main__":
    app()
