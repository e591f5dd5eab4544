"""
envguard CLI - Check command

Validates an env file against its example:
- Variables missing from either side
- Duplicate definitions
- Values that look like committed secrets
"""
import json
import re
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click

from envguard.cli.output import (
    print_detail,
    print_error,
    print_findings,
    print_info,
    print_section,
    print_success,
    print_warning,
    split_names,
)
from envguard.core.exceptions import EnvGuardError
from envguard.core.models import ClassifierConfig
from envguard.core.validator import (
    LintOptions,
    ValidationResult,
    has_errors,
    remove_duplicates,
    validate_env,
)
from envguard.utils.config import ConfigManager, LintSettings
from envguard.utils.logger import get_logger

logger = get_logger(__name__)

# Preferred env file when .env itself is missing
PRIORITY_ENV_FILES = [
    ".env.local",
    ".env.development",
    ".env.dev",
    ".env.docker",
    ".env.prod",
    ".env.production",
]

COMPARE_USAGE = [
    "Usage: --compare .env.staging,.env.production  (comma-separated)",
    "   or: --compare .env.staging .env.production  (space-separated)",
]


class CompareCommand(click.Command):
    """Command accepting ``--compare A B`` as well as ``--compare A,B``."""

    def parse_args(self, ctx, args):
        args = list(args)
        for index, arg in enumerate(args[:-2]):
            if arg in ("-c", "--compare"):
                first, second = args[index + 1], args[index + 2]
                if "," not in first and not first.startswith("-") and not second.startswith("-"):
                    args[index + 1:index + 3] = [f"{first},{second}"]
                break
        return super().parse_args(ctx, args)


def discover_env_files(directory: Path) -> List[str]:
    """List env files in a directory, excluding example/sample templates."""
    return sorted(
        p.name
        for p in directory.iterdir()
        if p.is_file()
        and (p.name == ".env" or p.name.startswith(".env."))
        and not p.name.endswith((".example", ".sample"))
    )


def pick_env_file(candidates: List[str]) -> Optional[str]:
    """Choose which env file to validate when .env is missing."""
    for name in PRIORITY_ENV_FILES:
        if name in candidates:
            return name
    return candidates[0] if candidates else None


def _resolve(directory: Path, name: str) -> Path:
    path = Path(name)
    return path if path.is_absolute() else directory / path


@click.command("check", cls=CompareCommand)
@click.argument("directory", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--env", "-e", "env_file", help="Env file to validate (default: .env)")
@click.option("--example", "-x", "example_file", help="Example file (default: .env.example)")
@click.option("--strict", "-s", is_flag=True, help="Fail on variables missing from the example")
@click.option(
    "--compare", "-c",
    help="Compare two env files instead of env and example (comma or space separated)"
)
@click.option("--exclude", help="Variables to skip (comma-separated)")
@click.option("--exclude-pattern", help="Skip variables matching this regex")
@click.option("--only", help="Only check these variables (comma-separated)")
@click.option("--secret-allowlist", help="Variables never reported as secrets (comma-separated)")
@click.option(
    "--min-confidence",
    type=click.FloatRange(0.0, 1.0),
    help="Secret detection threshold between 0 and 1 (default: 0.7)"
)
@click.option("--no-secrets", is_flag=True, help="Skip secret detection")
@click.option("--fix", is_flag=True, help="Remove duplicate definitions, keeping the first one")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format"
)
@click.pass_context
def check(
    ctx,
    directory: str,
    env_file: Optional[str],
    example_file: Optional[str],
    strict: bool,
    compare: Optional[str],
    exclude: Optional[str],
    exclude_pattern: Optional[str],
    only: Optional[str],
    secret_allowlist: Optional[str],
    min_confidence: Optional[float],
    no_secrets: bool,
    fix: bool,
    output_format: str,
):
    """
    Validate an env file against its example.

    Options given on the command line override .envguardrc.json.

    \b
    Examples:
      envguard check                          # .env vs .env.example
      envguard check --env .env.docker        # Different env file
      envguard check -c .env.staging .env.prod --exclude NODE_ENV,PORT
      envguard check -c .env.staging,.env.prod
      envguard check --min-confidence 0.9     # Only high-confidence secrets
      envguard check --fix                    # Remove duplicate definitions
    """
    target_dir = Path(directory).resolve()
    text_output = output_format == "text"

    compare_files = None
    if compare is not None:
        compare_files = split_names(compare)
        if len(compare_files) != 2:
            _fail(ctx, text_output, 1, "--compare requires exactly 2 files", COMPARE_USAGE)

    try:
        settings = ConfigManager(target_dir).load()
        options = _build_options(
            target_dir,
            settings,
            env_file=env_file,
            example_file=example_file,
            strict=strict,
            compare=compare_files,
            exclude=exclude,
            exclude_pattern=exclude_pattern,
            only=only,
            secret_allowlist=secret_allowlist,
            min_confidence=min_confidence,
            no_secrets=no_secrets,
        )
    except EnvGuardError as e:
        _fail(ctx, text_output, 2, e.message)

    if text_output:
        if ConfigManager(target_dir).exists():
            print_info("Using .envguardrc.json configuration")
        print_detail(f"Directory: {target_dir}\n")
        _print_filters(options)

    if not options.compare_mode and not options.env_path.exists() and env_file is None:
        candidates = discover_env_files(target_dir)
        chosen = pick_env_file(candidates)
        if chosen is not None:
            if text_output:
                print_info(f"Found {len(candidates)} .env file(s): {', '.join(candidates)}")
                print_info(f"Auto-selecting: {chosen}")
            options.env_path = target_dir / chosen

    problem = _find_missing_files(options)
    if problem is not None:
        message, hints, warning_only = problem
        _fail(ctx, text_output, 1, message, hints, warning=warning_only)

    try:
        result = validate_env(options)
        fixes = _fix_duplicates(result, options) if fix else []
    except EnvGuardError as e:
        _fail(ctx, text_output, 2, e.message)

    if fix:
        if fixes:
            _output_fixes(fixes, text_output)
            ctx.exit(0)
        if text_output:
            print_info("No fixable issues found")
            click.echo()

    failed = has_errors(result, options.strict)
    if text_output:
        _output_text(result, options.strict)
    else:
        data = result.to_dict()
        data["passed"] = not failed
        click.echo(json.dumps(data, indent=2))

    if failed:
        ctx.exit(1)


def _fail(
    ctx,
    text_output: bool,
    exit_code: int,
    message: str,
    hints: Sequence[str] = (),
    warning: bool = False,
) -> None:
    """Report a problem that stops the run, then exit."""
    if text_output:
        (print_warning if warning else print_error)(message)
        for hint in hints:
            print_info(hint)
    else:
        click.echo(json.dumps({"passed": False, "error": message, "hints": list(hints)}, indent=2))
    ctx.exit(exit_code)


def _build_options(
    target_dir: Path,
    settings: LintSettings,
    env_file: Optional[str],
    example_file: Optional[str],
    strict: bool,
    compare: Optional[List[str]],
    exclude: Optional[str],
    exclude_pattern: Optional[str],
    only: Optional[str],
    secret_allowlist: Optional[str],
    min_confidence: Optional[float],
    no_secrets: bool,
) -> LintOptions:
    """Merge command line options over file settings."""
    if compare:
        env_path = _resolve(target_dir, compare[0])
        example_path = _resolve(target_dir, compare[1])
    else:
        env_path = _resolve(target_dir, env_file or settings.env_file)
        example_path = _resolve(target_dir, example_file or settings.example_file)

    if exclude_pattern is not None:
        try:
            pattern = re.compile(exclude_pattern)
        except re.error as e:
            raise click.BadParameter(f"invalid regular expression: {e}", param_hint="--exclude-pattern")
    else:
        pattern = settings.compiled_exclude_pattern()

    allow_list = split_names(secret_allowlist) if secret_allowlist else settings.secret_allowlist
    return LintOptions(
        env_path=env_path,
        example_path=example_path,
        check_secrets=settings.check_secrets and not no_secrets,
        strict=strict or settings.strict,
        exclude=split_names(exclude) if exclude else (settings.exclude or None),
        exclude_pattern=pattern,
        only=split_names(only) if only else (settings.only or None),
        compare_mode=bool(compare),
        classifier_config=ClassifierConfig.build(
            allow_list=allow_list,
            min_confidence=min_confidence if min_confidence is not None else settings.min_secret_confidence,
        ),
    )


def _print_filters(options: LintOptions) -> None:
    shown = False
    if options.compare_mode:
        print_info(f"Compare mode: {options.env_path.name} ↔ {options.example_path.name}")
        shown = True
    if options.exclude:
        print_info(f"Excluding variables: {', '.join(options.exclude)}")
        shown = True
    if options.exclude_pattern is not None:
        print_info(f"Excluding pattern: {options.exclude_pattern.pattern}")
        shown = True
    if options.only:
        print_info(f"Only checking: {', '.join(options.only)}")
        shown = True
    config = options.classifier_config
    if options.check_secrets:
        if config.allow_list:
            print_info(f"Secret detection allow-list: {', '.join(sorted(config.allow_list))}")
        print_info(f"Secret detection confidence threshold: {int(round(config.min_confidence * 100))}%")
        shown = True
    if shown:
        click.echo()


def _find_missing_files(options: LintOptions) -> Optional[Tuple[str, List[str], bool]]:
    """Describe missing input files as (message, hints, warning only), or None."""
    env_exists = options.env_path.exists()
    example_exists = options.example_path.exists()

    if not env_exists and not example_exists:
        if options.compare_mode:
            return (
                "Both comparison files not found",
                [f"File 1: {options.env_path}", f"File 2: {options.example_path}"],
                False,
            )
        return "No .env files found", ["Create a .env file or point --env at one"], False

    if not env_exists:
        if options.compare_mode:
            return f"File not found: {options.env_path}", [], False
        return (
            f"{options.env_path.name} file not found",
            [f"Create it from {options.example_path.name}"],
            True,
        )

    if not example_exists:
        if options.compare_mode:
            return f"File not found: {options.example_path}", [], False
        return f"{options.example_path.name} not found", [], True

    return None


def _fix_duplicates(result: ValidationResult, options: LintOptions) -> List[Tuple[str, int, List[str]]]:
    """Remove duplicate definitions from both files, returning what was removed per file."""
    fixes = []
    for path, duplicates in (
        (options.env_path, result.duplicates_in_env),
        (options.example_path, result.duplicates_in_example),
    ):
        if not duplicates:
            continue
        removed, keys = remove_duplicates(path)
        if removed:
            fixes.append((path.name, removed, keys))
    return fixes


def _output_fixes(fixes: List[Tuple[str, int, List[str]]], text_output: bool) -> None:
    if not text_output:
        data = {
            "fixed": [{"file": name, "removed": removed, "keys": keys} for name, removed, keys in fixes],
            "total_removed": sum(removed for _, removed, _ in fixes),
        }
        click.echo(json.dumps(data, indent=2))
        return

    print_section("Fixing Issues")
    for name, removed, keys in fixes:
        print_success(f"Removed {removed} duplicate variable(s) from {name}")
        for key in keys:
            print_detail(f"  • {key}")
    click.echo()
    print_info("Re-run envguard check to verify fixes")


def _output_text(result: ValidationResult, strict: bool) -> None:
    """Print validation results grouped by issue type."""
    if result.missing_in_env:
        print_section(f"Missing in {result.env_file_name}")
        for key in result.missing_in_env:
            print_error(
                f"{key} (defined in {result.example_file_name} but missing in {result.env_file_name})"
            )

    for file_name, duplicates in (
        (result.env_file_name, result.duplicates_in_env),
        (result.example_file_name, result.duplicates_in_example),
    ):
        if duplicates:
            print_section(f"Duplicate Variables in {file_name}")
            for key, lines in duplicates.items():
                print_error(f"{key} (defined on lines: {', '.join(str(n) for n in lines)})")

    if result.potential_secrets:
        print_section("Potential Secrets Detected")
        print_findings(result.potential_secrets)
        click.echo(
            "\n" + click.style("WARNING: ", fg="yellow", bold=True)
            + click.style("Ensure these secrets are not committed to version control!", fg="yellow")
        )

    if result.missing_in_example:
        if strict:
            print_section(f"Missing in {result.example_file_name} (Strict Mode)")
            for key in result.missing_in_example:
                print_error(
                    f"{key} (exists in {result.env_file_name} but not documented in {result.example_file_name})"
                )
        else:
            print_section("Undocumented Variables")
            for key in result.missing_in_example:
                print_info(f"{key} (exists in {result.env_file_name} but not in {result.example_file_name})")

    click.echo()
    click.echo(click.style("═" * 50, fg="bright_black"))

    issue_count = result.issue_count(strict)
    if issue_count == 0:
        print_success("All checks passed! Your .env files are clean.")
        return

    print_error(f"Found {issue_count} issue(s)")
    if result.missing_in_example and not strict:
        print_info("Run with --strict to enforce example file documentation")
