# Rich console output: format leak findings for terminal display, plus a JSON dump.

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from pydantic import TypeAdapter
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from leakwatch.findings.models import FileReport, Finding
from leakwatch.rules.base import PatternRule, Rule

_REPORT_LIST = TypeAdapter(list[FileReport])

# Severity -> Rich style
SEVERITY_STYLE = {
    "error": "bold red",
    "warning": "bold yellow",
    "information": "bold blue",
    "hint": "bold dim",
}

DEFAULT_SEVERITY_STYLE = "bold white"


def _severity_style(severity: str) -> str:
    return SEVERITY_STYLE.get(severity.lower(), DEFAULT_SEVERITY_STYLE)


def _summary_line(finding: Finding) -> str:
    """First line of the message; pattern messages carry their suggestion on line two."""
    return finding.message.split("\n", 1)[0]


def _suggestion(finding: Finding) -> Optional[str]:
    _, _, rest = finding.message.partition("\nSuggestion: ")
    return rest or None


def _location(finding: Finding) -> tuple[str, str]:
    """1-based (line, col) for display; '-' for line-precision findings."""
    span = finding.span
    col = "-" if span.is_line_precision else str(span.start_column + 1)
    return str(span.start_line + 1), col


def print_reports(
    reports: Sequence[FileReport],
    verbose: bool = False,
    console: Optional[Console] = None,
) -> None:
    """
    Print findings grouped by file, colored by severity.

    Files that failed to parse are listed with their parse error. With verbose,
    pattern-rule suggestions are shown under each table.
    """
    console = console or Console()
    findings = [f for r in reports for f in r.findings]

    if not findings and not any(r.parse_error for r in reports):
        console.print(
            Panel(
                "[green]No leak patterns found.[/green]",
                title="leakwatch",
                border_style="green",
                box=box.ROUNDED,
            )
        )
        return

    for report in sorted(reports, key=lambda r: str(r.path)):
        if not report.findings and not report.parse_error:
            continue

        console.print()
        console.print(Panel(
            f"[bold cyan]{escape(str(report.path))}[/bold cyan]",
            box=box.SIMPLE_HEAD,
            border_style="blue",
            padding=(0, 1),
        ))
        if report.parse_error:
            console.print(f"  [yellow]Parse failed, structural rules skipped:[/yellow] {escape(report.parse_error)}")

        if not report.findings:
            continue

        table = Table(
            show_header=True,
            header_style="bold magenta",
            box=box.SIMPLE,
            padding=(0, 1),
            expand=False,
        )
        table.add_column("Line", justify="right", style="dim", width=5)
        table.add_column("Col", justify="right", style="dim", width=4)
        table.add_column("Severity", width=10)
        table.add_column("Rule", width=28)
        table.add_column("Message", style="white")

        ordered = sorted(report.findings, key=lambda f: (f.span.start_line, f.span.start_column))
        for f in ordered:
            line, col = _location(f)
            table.add_row(
                line,
                col,
                Text(f.severity.value.upper(), style=_severity_style(f.severity.value)),
                Text(f"[{f.rule_id}]", style="dim"),
                Text(_summary_line(f)),
            )
        console.print(table)

        if verbose:
            seen_rules: set[str] = set()
            for f in ordered:
                suggestion = _suggestion(f)
                if suggestion and f.rule_id not in seen_rules:
                    seen_rules.add(f.rule_id)
                    console.print(f"  [dim]\\[Fix][/dim] {escape(f'[{f.rule_id}]')} {escape(suggestion)}")
            if seen_rules:
                console.print()

    _print_summary(findings, len(reports), console)


def _print_summary(findings: Sequence[Finding], file_count: int, console: Console) -> None:
    """Print a compact summary of findings."""
    by_severity: dict[str, int] = {}
    for f in findings:
        by_severity[f.severity.value] = by_severity.get(f.severity.value, 0) + 1

    total = len(findings)
    summary_parts = [
        f"[bold]{total} finding{'s' if total != 1 else ''}[/bold] in "
        f"{file_count} file{'s' if file_count != 1 else ''}"
    ]
    for sev in ("error", "warning", "information", "hint"):
        if sev in by_severity:
            summary_parts.append(f"[{_severity_style(sev)}]{by_severity[sev]} {sev}[/]")

    console.print()
    console.print(
        Panel(
            " | ".join(summary_parts),
            title="Summary",
            border_style="yellow" if total > 0 else "green",
            box=box.ROUNDED,
        )
    )


def reports_to_json(reports: Sequence[FileReport]) -> str:
    """Serialize reports as JSON: one entry per file with LSP-shaped diagnostics."""
    return _REPORT_LIST.dump_json(list(reports), indent=2, by_alias=True).decode("utf-8")


def print_rules(rules: Sequence[Rule], console: Optional[Console] = None) -> None:
    """Print the rule registry as a table."""
    console = console or Console()
    table = Table(title="Rules", header_style="bold cyan", box=box.ROUNDED)
    table.add_column("Id", style="bold")
    table.add_column("Kind", width=10)
    table.add_column("Name")
    table.add_column("Description", style="dim")
    for rule in rules:
        kind = "pattern" if isinstance(rule, PatternRule) else "structural"
        table.add_row(rule.id, kind, rule.name, rule.description)
    console.print(table)


def display_path(path: Path, base: Optional[Path] = None) -> Path:
    """path relative to base when it lies under it, else unchanged."""
    if base is None:
        return path
    try:
        return path.relative_to(base)
    except ValueError:
        return path
