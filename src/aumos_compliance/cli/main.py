"""CLI entry point for aumos-compliance.

Invoked as::

    aumos-compliance [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m aumos_compliance.cli.main

Commands
--------
- check            Run the rule check for a jurisdiction
- scan             Detect and mask sensitive data
- validate         Compose a full verdict (rule check + AI opinion when enabled)
- rules stats      Show rule counts by jurisdiction and severity
- rules list       List rules, optionally for one jurisdiction
- rules lint       Validate a rule file without loading it anywhere
- audit show       Display recent audit entries
- version          Show version information
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from aumos_compliance.config import ComplianceConfig, ConfigLoader
from aumos_compliance.pipeline import CompliancePipeline

console = Console()
err_console = Console(stderr=True)

_DEFAULT_CONFIG = Path("compliance.yaml")

_SEVERITY_STYLES = {"HIGH": "red", "MEDIUM": "yellow", "LOW": "green"}


def _load_config(config_path: str) -> ComplianceConfig:
    loader = ConfigLoader()
    cfg_path = Path(config_path)
    return loader.load(cfg_path) if cfg_path.exists() else loader.defaults()


def _build_pipeline(config_path: str) -> CompliancePipeline:
    return CompliancePipeline.from_config(_load_config(config_path))


def _read_document(text: str | None, input_file: str | None) -> str:
    if input_file is not None:
        return Path(input_file).read_text(encoding="utf-8")
    if text is not None:
        return text
    if not sys.stdin.isatty():
        return sys.stdin.read()
    err_console.print("[red]Provide document text with --text, --file, or stdin.[/red]")
    sys.exit(2)


def _severity(value: str) -> str:
    style = _SEVERITY_STYLES.get(value, "white")
    return f"[{style}]{value}[/{style}]"


_config_option = click.option(
    "--config",
    "-c",
    "config_path",
    default=str(_DEFAULT_CONFIG),
    type=click.Path(),
    help="Path to compliance.yaml.",
)
_text_option = click.option("--text", "-t", default=None, help="Document text.")
_file_option = click.option(
    "--file",
    "-f",
    "input_file",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Read the document from a file.",
)


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="aumos-compliance")
def cli() -> None:
    """Compliance CLI: rule checks, sensitive-data scans, and verdicts."""


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from aumos_compliance import __version__

    console.print(
        Panel(
            f"[bold]aumos-compliance[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Rule-based and AI-assisted compliance validation for documents.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# check / scan / validate
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.option("--jurisdiction", "-j", required=True, help="Jurisdiction code, e.g. EU or US-CA.")
@_text_option
@_file_option
@_config_option
def check_command(jurisdiction: str, text: str | None, input_file: str | None, config_path: str) -> None:
    """Run the rule check for a jurisdiction.  Exits 1 when rules fire."""
    document = _read_document(text, input_file)
    pipeline = _build_pipeline(config_path)
    violations = pipeline.check(document, jurisdiction)

    if not violations:
        console.print(Panel("[green]NO VIOLATIONS[/green]", title=f"Rule Check ({jurisdiction})", border_style="blue"))
        sys.exit(0)

    table = Table(title=f"Rule Violations ({jurisdiction})", box=box.SIMPLE)
    table.add_column("Rule", style="cyan")
    table.add_column("Severity")
    table.add_column("Offset", justify="right")
    table.add_column("Matched")
    for violation in violations:
        table.add_row(
            violation.rule_name,
            _severity(violation.severity.value),
            str(violation.offset),
            escape(violation.matched_text),
        )
    console.print(table)
    sys.exit(1)


@cli.command(name="scan")
@_text_option
@_file_option
@click.option("--json", "as_json", is_flag=True, help="Print the scan report as JSON.")
@_config_option
def scan_command(text: str | None, input_file: str | None, as_json: bool, config_path: str) -> None:
    """Detect and mask sensitive data."""
    document = _read_document(text, input_file)
    pipeline = _build_pipeline(config_path)
    report = pipeline.scan(document)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    if report.matches:
        table = Table(title="Sensitive Data", box=box.SIMPLE)
        table.add_column("Category", style="magenta")
        table.add_column("Offset", justify="right")
        table.add_column("Matched")
        for match in report.matches:
            table.add_row(match.category.value, str(match.offset), escape(match.matched_text))
        console.print(table)
    else:
        console.print("[green]No sensitive data found.[/green]")
    console.print(Panel(escape(report.masked_text), title="Masked Text", border_style="blue"))


@cli.command(name="validate")
@click.option("--jurisdiction", "-j", required=True, help="Jurisdiction code, e.g. EU or US-CA.")
@_text_option
@_file_option
@click.option("--json", "as_json", is_flag=True, help="Print the verdict as JSON.")
@_config_option
def validate_command(
    jurisdiction: str,
    text: str | None,
    input_file: str | None,
    as_json: bool,
    config_path: str,
) -> None:
    """Compose a full compliance verdict.  Exits 1 when non-compliant."""
    document = _read_document(text, input_file)
    pipeline = _build_pipeline(config_path)
    verdict = pipeline.validate_sync(document, jurisdiction)

    if as_json:
        click.echo(json.dumps(verdict.to_dict(), indent=2))
        sys.exit(0 if verdict.overall_compliant else 1)

    status_str = "[green]COMPLIANT[/green]" if verdict.overall_compliant else "[red]NON-COMPLIANT[/red]"
    console.print(Panel(status_str, title=f"Compliance Verdict ({jurisdiction})", border_style="blue"))
    console.print(f"  Summary: {escape(verdict.summary)}")
    if not verdict.ai_review_completed:
        console.print(f"  [yellow]AI review unavailable:[/yellow] {verdict.ai_error}")

    if verdict.failing_checks:
        table = Table(title="Failing Checks", box=box.SIMPLE)
        table.add_column("Requirement", style="cyan")
        table.add_column("Severity")
        table.add_column("Source", style="dim")
        table.add_column("Details")
        for fail in verdict.failing_checks:
            table.add_row(escape(fail.requirement), _severity(fail.severity), fail.source, escape(fail.details))
        console.print(table)

    if verdict.sensitive_matches:
        console.print(f"  Sensitive data items: [magenta]{len(verdict.sensitive_matches)}[/magenta]")

    sys.exit(0 if verdict.overall_compliant else 1)


# ---------------------------------------------------------------------------
# rules group
# ---------------------------------------------------------------------------


@cli.group(name="rules")
def rules_group() -> None:
    """Rule inspection commands."""


@rules_group.command(name="stats")
@_config_option
def rules_stats_command(config_path: str) -> None:
    """Show rule counts by jurisdiction and severity."""
    stats = _build_pipeline(config_path).admin.statistics()

    console.print(
        f"  Total: [cyan]{stats.total}[/cyan]  "
        f"Active: [green]{stats.active}[/green]  "
        f"Inactive: [yellow]{stats.inactive}[/yellow]"
    )

    table = Table(title="Rules by Jurisdiction", box=box.SIMPLE)
    table.add_column("Jurisdiction", style="cyan")
    table.add_column("Rules", justify="right")
    for jurisdiction, count in sorted(stats.by_jurisdiction.items()):
        table.add_row(jurisdiction, str(count))
    console.print(table)

    table = Table(title="Rules by Severity", box=box.SIMPLE)
    table.add_column("Severity")
    table.add_column("Rules", justify="right")
    for severity, count in sorted(stats.by_severity.items()):
        table.add_row(_severity(severity), str(count))
    console.print(table)


@rules_group.command(name="list")
@click.option("--jurisdiction", "-j", default=None, help="Only list rules of this jurisdiction.")
@_config_option
def rules_list_command(jurisdiction: str | None, config_path: str) -> None:
    """List rules with their severity and active flag."""
    rules = _build_pipeline(config_path).admin.list_rules(jurisdiction)
    if not rules:
        console.print("[yellow]No rules found.[/yellow]")
        return

    table = Table(title="Compliance Rules", box=box.SIMPLE)
    table.add_column("Jurisdiction", style="cyan")
    table.add_column("Rule", style="bold")
    table.add_column("Severity")
    table.add_column("Active")
    table.add_column("Description")
    for rule in rules:
        table.add_row(
            rule.jurisdiction,
            rule.name,
            _severity(rule.severity.value),
            "[green]yes[/green]" if rule.active else "[dim]no[/dim]",
            rule.description,
        )
    console.print(table)


@rules_group.command(name="lint")
@click.argument("rules_file", type=click.Path(exists=True, dir_okay=False))
def rules_lint_command(rules_file: str) -> None:
    """Validate a rule file.  Exits 1 when any record is rejected."""
    from aumos_compliance.rules.loader import RuleLoader
    from aumos_compliance.rules.store import RuleStore

    report = RuleLoader(RuleStore()).load_from(Path(rules_file))

    for warning in report.warnings:
        err_console.print(f"[yellow]WARN[/yellow] {warning}")
    console.print(
        f"  Valid rules: [green]{report.applied}[/green]  "
        f"Rejected: [red]{report.skipped}[/red]  "
        f"Jurisdictions: {', '.join(sorted(report.jurisdictions)) or '-'}"
    )
    sys.exit(1 if report.warnings else 0)


# ---------------------------------------------------------------------------
# audit group
# ---------------------------------------------------------------------------


@cli.group(name="audit")
def audit_group() -> None:
    """Audit trail commands."""


@audit_group.command(name="show")
@click.option("--last", "-n", default=20, show_default=True, type=int, help="Number of recent entries to show.")
@_config_option
def audit_show_command(last: int, config_path: str) -> None:
    """Show recent audit log entries."""
    config = _load_config(config_path)
    if config.audit.log_path is None:
        console.print("[yellow]No audit.log_path configured; events go to the log.[/yellow]")
        return

    from aumos_compliance.audit.logger import AuditLogger

    audit = AuditLogger(log_path=config.audit.log_path)
    records = audit.last_n(last)
    if not records:
        console.print("[yellow]No audit entries found.[/yellow]")
        return

    table = Table(title=f"Last {last} Audit Events", box=box.SIMPLE)
    table.add_column("Timestamp", style="dim", no_wrap=True)
    table.add_column("Event", style="cyan", no_wrap=True)
    table.add_column("Details")
    for record in records:
        ts = str(record.get("timestamp", ""))[:19].replace("T", " ")
        details = ", ".join(
            f"{key}={value}"
            for key, value in record.items()
            if key not in {"timestamp", "event", "session_id"}
        )
        table.add_row(ts, str(record.get("event", "")), escape(details))
    console.print(table)
    console.print(f"  Total audit records: [cyan]{audit.count()}[/cyan]")


if __name__ == "__main__":
    cli()
