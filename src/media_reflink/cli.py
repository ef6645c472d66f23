"""CLI entry point for media-reflink."""

from pathlib import Path

import click
from loguru import logger

from .config import ReflinkConfig
from .errors import ReflinkError
from .models import Action
from .runner import ReflinkRunner

log = logger.bind(stage="cli")


@click.command()
@click.argument("action", required=False, default="test")
@click.argument("map_file", required=False, type=click.Path(dir_okay=False))
@click.argument("source_dir", required=False, type=click.Path(file_okay=False))
@click.argument("library_dir", required=False, type=click.Path(file_okay=False))
@click.option(
    "--dry-run", is_flag=True, help="Show what would happen without doing it."
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to .env file.",
)
def main(
    action: str,
    map_file: str | None,
    source_dir: str | None,
    library_dir: str | None,
    dry_run: bool,
    verbose: bool,
    config_file: str | None,
) -> None:
    """Map downloaded folders to library folders and reflink them.

    ACTION is one of test, renew or reflink (unknown values run test).
    """
    run_action = Action.parse(action)

    # Pass CLI values as kwargs so they win over env and .env
    config_kwargs: dict[str, object] = {"dry_run": dry_run, "verbose": verbose}
    if map_file:
        config_kwargs["map_file"] = Path(map_file)
    if source_dir:
        config_kwargs["source_dir"] = Path(source_dir)
    if library_dir:
        config_kwargs["library_dir"] = Path(library_dir)
    if verbose:
        config_kwargs["log_level"] = "DEBUG"
    if config_file:
        config_kwargs["_env_file"] = config_file

    config = ReflinkConfig(**config_kwargs)  # type: ignore[arg-type]
    config.setup_logging()

    log.info(f"Run for {run_action}")
    log.info(f"In file {config.map_file}")
    log.info(f"In source {config.source_dir}")
    log.info(f"In library {config.library_dir}")

    try:
        ReflinkRunner(config=config, action=run_action).run()
    except ReflinkError as e:
        raise click.ClickException(str(e)) from e
