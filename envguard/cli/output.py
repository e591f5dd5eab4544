"""Terminal output helpers shared by the envguard commands."""

import json
from typing import Iterable, List

import click

from envguard.core.models import Finding, Severity

_SEVERITY_COLORS = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "yellow",
    Severity.MEDIUM: "bright_black",
}


def print_success(message: str) -> None:
    click.echo(f"{click.style('✓', fg='green')} {message}")


def print_error(message: str) -> None:
    click.echo(f"{click.style('✗', fg='red')} {message}")


def print_warning(message: str) -> None:
    click.echo(f"{click.style('⚠', fg='yellow')} {message}")


def print_info(message: str) -> None:
    click.echo(f"{click.style('ℹ', fg='blue')} {message}")


def print_detail(message: str) -> None:
    click.echo(click.style(message, fg="bright_black"))


def print_section(title: str) -> None:
    click.echo(f"\n{click.style(title, bold=True)}")
    click.echo(click.style("─" * 50, fg="bright_black"))


def print_findings(findings: Iterable[Finding]) -> None:
    """Display findings with their line, reason and confidence."""
    for finding in findings:
        color = _SEVERITY_COLORS[finding.severity]
        print_warning(f"{finding.key} = {finding.masked_value}")
        print_detail(f"   Line {finding.line_number}: {finding.reason}")
        click.echo(click.style(f"   Confidence: {finding.confidence_percent}%", fg=color))


def output_findings_json(findings: List[Finding], source: str) -> None:
    """Output findings as JSON."""
    data = {
        "file": source,
        "total_findings": len(findings),
        "findings": [f.to_dict() for f in findings],
    }
    click.echo(json.dumps(data, indent=2))


def split_names(value: str) -> List[str]:
    """Split a comma-separated option value into names."""
    return [name.strip() for name in value.split(",") if name.strip()]
