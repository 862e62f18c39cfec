"""
Typer CLI entry point and orchestration of the analysis pipeline.

- Accepts a file or directory path
- Finds JS/TS sources (traversal.find_source_files for directories)
- Runs the leak detection engine on each file
- Prints findings as rich tables, or as JSON diagnostics with --format json

Exit status is 1 when any finding is reported, 0 otherwise.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from leakwatch.config import DEFAULT_MAX_NODES, Config, get_default_registry, get_enabled_rules
from leakwatch.context import load_contexts
from leakwatch.engine import LeakDetectionEngine
from leakwatch.errors import ConfigurationError
from leakwatch.findings.models import FileReport
from leakwatch.parser import create_parser
from leakwatch.reporting.console import display_path, print_reports, print_rules, reports_to_json
from leakwatch.traversal import find_source_files, is_source_file

logger = logging.getLogger(__name__)

app = typer.Typer(help="leakwatch - detect leaked timers, subscriptions and effect cleanups in JS/TS code.")


class OutputFormat(str, Enum):
    text = "text"
    json = "json"


class LogLevel(str, Enum):
    debug = "DEBUG"
    info = "INFO"
    warning = "WARNING"
    error = "ERROR"
    critical = "CRITICAL"


def _collect_source_files(target: Path) -> List[Path]:
    """
    Resolve a target path into a list of source files to analyze.

    - A JS/TS file: [target]
    - A directory: every JS/TS file under it
    """
    if target.is_file():
        if not is_source_file(target):
            raise typer.BadParameter(f"Target file must be a JavaScript/TypeScript file, got: {target}")
        return [target]

    if target.is_dir():
        files = find_source_files(target)
        if not files:
            logger.warning("No JavaScript/TypeScript files found under %s", target)
        return files

    raise typer.BadParameter(f"Target path is neither a file nor a directory: {target}")


def _build_config(disable: List[str], no_patterns: bool, max_nodes: Optional[int]) -> Config:
    try:
        registry = get_default_registry().without(disable)
        return Config(registry=registry, max_nodes=max_nodes, run_patterns=not no_patterns)
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def analyze(
    target: Path = typer.Argument(
        ...,
        exists=True,
        readable=True,
        resolve_path=True,
        help="Source file or directory to analyze.",
    ),
    output_format: OutputFormat = typer.Option(OutputFormat.text, "--format", "-f", help="Output format."),
    disable: List[str] = typer.Option([], "--disable", "-d", help="Rule id to skip (repeatable)."),
    no_patterns: bool = typer.Option(False, "--no-patterns", help="Run structural rules only."),
    max_nodes: Optional[int] = typer.Option(DEFAULT_MAX_NODES, "--max-nodes", min=1, help="Maximum AST nodes visited per file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show fix suggestions."),
    log_level: LogLevel = typer.Option(
        LogLevel.warning, "--log-level", case_sensitive=False, help="Logging level for diagnostics on stderr."
    ),
) -> None:
    """Analyze a single file, or every JS/TS file under a directory."""
    logging.basicConfig(level=log_level.value, format="%(levelname)s %(name)s: %(message)s")

    config = _build_config(disable, no_patterns, max_nodes)
    if not get_enabled_rules(config):
        typer.echo("No rules are enabled in the current configuration.")
        raise typer.Exit(code=1)

    engine = LeakDetectionEngine(config=config)
    base = target if target.is_dir() else target.parent
    # Unreadable files are dropped (and logged) by load_contexts
    contexts = load_contexts(
        _collect_source_files(target),
        parser=create_parser(),
        max_nodes=config.max_nodes,
        max_source_bytes=config.max_source_bytes,
    )

    reports: List[FileReport] = [
        FileReport(
            path=display_path(context.path, base),
            findings=engine.analyze_context(context),
            parse_error=context.parse_error.message if context.parse_error else None,
        )
        for context in contexts
    ]

    if output_format is OutputFormat.json:
        typer.echo(reports_to_json(reports))
    else:
        print_reports(reports, verbose=verbose)

    if any(report.findings for report in reports):
        raise typer.Exit(code=1)


@app.command()
def rules() -> None:
    """List the built-in rules."""
    print_rules(list(get_default_registry()))


def main() -> None:
    """Entry point for the `leakwatch` console script and `python -m leakwatch.main`."""
    app()


if __name__ == "__main__":
    main()
