"""
excludes.py — Decide which live paths are out of scope for verification.

Patterns are plain paths, not globs: a path is excluded when it equals a
pattern or sits below one, compared by whole path components. restic's own
exclude syntax is richer, so a glob in ~/.backup_exclude only matches a path
literally named like the glob.
"""

import logging
from pathlib import Path, PurePath
from typing import Iterable, List

from bacify.errors import ConfigError

logger = logging.getLogger(__name__)

EXCLUDE_FILE_NAME = ".backup_exclude"


def is_excluded(path, patterns: Iterable[str]) -> bool:
    """Return True if PATH equals or is nested under any of PATTERNS."""
    p = PurePath(path)
    for pattern in patterns:
        if p.is_relative_to(pattern):
            return True
    return False


def default_exclude_file() -> Path:
    """Return ~/.backup_exclude."""
    try:
        home = Path.home()
    except RuntimeError as e:
        raise ConfigError(f"Could not find home directory: {e}") from e
    return home / EXCLUDE_FILE_NAME


def load_excludes(exclude_file: Path) -> List[str]:
    """
    Read exclude patterns, one per line.

    A missing file means no excludes. Blank lines and lines starting with
    '#' are ignored, like in restic's --exclude-file.
    """
    try:
        text = Path(exclude_file).read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No exclude file at %s", exclude_file)
        return []
    except UnicodeDecodeError as e:
        raise ConfigError(f"Exclude file {exclude_file} is not valid UTF-8: {e}") from e

    patterns = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    logger.debug("Loaded %d exclude pattern(s) from %s", len(patterns), exclude_file)
    return patterns
