"""
CLI entry point for space_backup.

Each positional argument falls back to an environment variable and then to
the optional YAML config file.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from .config import ENV_VARS, MissingConfigError, resolve_config
from .syncer import BackupSyncer

console = Console(soft_wrap=True)

MISSING_CONFIG_MESSAGE = (
    "Missing required information. Please provide all necessary arguments "
    "or set the appropriate environment variables."
)


@click.command(
    epilog="Environment variables: " + ", ".join(ENV_VARS.values())
)
@click.version_option(package_name="space-backup")
@click.argument("space_url", required=False)
@click.argument("bearer_token", required=False)
@click.argument(
    "clone_directory",
    required=False,
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
)
@click.argument("email_for_pull", required=False)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file providing any setting not given as argument or environment variable",
)
@click.option(
    "--timeout",
    "-t",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds allowed for each API request and git operation (default: 300)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show which repositories would be cloned or pulled without changing anything",
)
def cli(
    space_url: str | None,
    bearer_token: str | None,
    clone_directory: Path | None,
    email_for_pull: str | None,
    config_path: Path | None,
    timeout: float | None,
    dry_run: bool,
):
    """Back up every repository of every Space project.

    Clones repositories missing under CLONE_DIRECTORY/<project> and pulls the
    ones already there.
    """
    try:
        config = resolve_config(
            space_url=space_url,
            bearer_token=bearer_token,
            clone_directory=clone_directory,
            email_for_pull=email_for_pull,
            config_file=config_path,
            timeout=timeout,
            dry_run=dry_run,
        )
    except MissingConfigError as e:
        console.print(f"[red]{MISSING_CONFIG_MESSAGE}[/red]")
        console.print(f"  {escape(str(e))}")
        raise SystemExit(1)
    except Exception as e:
        console.print(f"[red]Error loading config: {escape(str(e))}[/red]")
        raise SystemExit(1)

    syncer = BackupSyncer(config)
    syncer.sync()


if __name__ == "__main__":
    cli()
