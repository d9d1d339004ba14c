# src/bacify/cli.py

import logging
import os
import sys
import time
from pathlib import Path

import click

from bacify import __version__
from bacify.config import parse_duration
from bacify.errors import BacifyError
from bacify.restic import ResticRepository
from bacify.verify_backup import verify_latest_snapshot

logger = logging.getLogger("bacify.cli")

DEFAULT_LOG_LEVEL = "info"
DEFAULT_PROGRESS_FPS = "0.5"


def _setup_logging() -> None:
    """Log to stdout at LOG_LEVEL (default: info)."""
    level_name = os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(message)s", stream=sys.stdout)


def _max_age_option(ctx, param, value):
    if value is None:
        return None
    try:
        return parse_duration(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@click.command()
@click.version_option(__version__)
@click.option("--relative-path", "-r", is_flag=True,
              help="Snapshot was taken from a relative path; strip the source directory when locating restored files.")
@click.option("--max-age", "-m", callback=_max_age_option, metavar="DURATION",
              help="Fail if the latest snapshot is older than this (e.g. 36h, 2days, 1w 3d).")
@click.option("--exclude-file", type=click.Path(dir_okay=False), default=None,
              help="Exclude list, one path per line (default: ~/.backup_exclude).")
@click.option("--workers", "-j", type=click.IntRange(min=1), default=1, show_default=True,
              help="Threads used to compare files.")
@click.option("--progress", is_flag=True, help="Show a progress bar while comparing files.")
@click.option("--restic", "restic_bin", default="restic", show_default=True, envvar="BACIFY_RESTIC",
              help="restic executable.")
def cli(relative_path, max_age, exclude_file, workers, progress, restic_bin):
    """Bacify — restore the latest restic snapshot and verify it against the live files."""
    _setup_logging()
    logger.debug("bacify v%s @ %s", __version__, time.strftime("%Y-%m-%dT%H:%M:%S%z"))

    # restic only shows restore progress on a non-tty when this is set
    if os.environ.get("RESTIC_PROGRESS_FPS") is None:
        os.environ["RESTIC_PROGRESS_FPS"] = DEFAULT_PROGRESS_FPS

    try:
        verify_latest_snapshot(
            ResticRepository(restic_bin),
            relative_path=relative_path,
            max_age=max_age,
            exclude_file=Path(exclude_file) if exclude_file else None,
            workers=workers,
            progress=progress,
        )
    except (BacifyError, OSError) as e:
        logger.error("Error: %s", e)
        sys.exit(1)

    logger.info("Verification succeeded.")


if __name__ == "__main__":
    cli()
