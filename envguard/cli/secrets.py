"""CLI command for scanning a single env file for secrets."""

from pathlib import Path
from typing import Optional

import click

from envguard.cli.output import (
    output_findings_json,
    print_findings,
    print_section,
    print_success,
    print_error,
    split_names,
)
from envguard.core.classifier import SecretClassifier
from envguard.core.exceptions import EnvGuardError
from envguard.core.models import ClassifierConfig
from envguard.core.parser import parse_env_file
from envguard.core.patterns import DetectionRules
from envguard.utils.config import ConfigManager


@click.command("secrets")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--min-confidence",
    type=click.FloatRange(0.0, 1.0),
    help="Secret detection threshold between 0 and 1 (default: 0.7)"
)
@click.option("--secret-allowlist", help="Variables never reported (comma-separated)")
@click.option(
    "--patterns",
    type=click.Path(exists=True, dir_okay=False),
    help="Custom detection rules YAML file"
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format"
)
@click.pass_context
def secrets(
    ctx,
    file: str,
    min_confidence: Optional[float],
    secret_allowlist: Optional[str],
    patterns: Optional[str],
    output_format: str,
):
    """
    Scan one env file for values that look like secrets.

    Settings are read from .envguardrc.json next to the file.

    \b
    Examples:
      envguard secrets .env
      envguard secrets .env.production --min-confidence 0.9 --format json
      envguard secrets .env --secret-allowlist SENTRY_DSN,PUBLIC_KEY
    """
    path = Path(file)

    try:
        settings = ConfigManager(path.parent).load()
        config = ClassifierConfig.build(
            allow_list=split_names(secret_allowlist) if secret_allowlist else settings.secret_allowlist,
            min_confidence=min_confidence if min_confidence is not None else settings.min_secret_confidence,
        )
        rules = DetectionRules.from_file(patterns) if patterns else None
        findings = SecretClassifier(rules).classify(parse_env_file(path), config)
    except EnvGuardError as e:
        print_error(e.message)
        ctx.exit(2)

    if output_format == "json":
        output_findings_json(findings, str(path))
    elif findings:
        print_section(f"Potential Secrets in {path.name}")
        print_findings(findings)
    else:
        print_success(f"No secrets detected in {path.name}")

    if findings:
        ctx.exit(1)
