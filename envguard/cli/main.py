"""
envguard CLI - Main entry point
"""
from pathlib import Path

import click

from envguard import __version__
from envguard.cli import check, secrets
from envguard.cli.output import print_error, print_info, print_success
from envguard.core.exceptions import ConfigurationError
from envguard.utils.config import ConfigManager
from envguard.utils.logger import set_log_level


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, verbose):
    """
    envguard - Validate .env files and catch committed secrets

    \b
    WORKFLOW:
    1. Create a config file (optional):
       envguard init
    2. Check .env against .env.example:
       envguard check
    3. Scan any env file for secrets:
       envguard secrets .env.production
    """
    ctx.ensure_object(dict)
    if verbose:
        set_log_level("DEBUG")


@cli.command("init")
@click.argument("directory", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_context
def init(ctx, directory, force):
    """Create a default .envguardrc.json."""
    manager = ConfigManager(Path(directory))
    try:
        config_path = manager.create_default(overwrite=force)
    except ConfigurationError as e:
        print_error(e.message)
        print_info("Use --force to overwrite it")
        ctx.exit(1)

    print_success(f".envguardrc.json created at {config_path}")
    print_info("Edit it to customize your settings, then run 'envguard check'")


# Register subcommands
cli.add_command(check.check)
cli.add_command(secrets.secrets)


if __name__ == '__main__':
    cli()
