"""Translate live paths into their location inside the restored tree."""

from pathlib import Path, PurePath
from typing import Optional

from bacify.errors import PathError
from bacify.model import VerificationConfig


def to_relpath(path: Path, root: Path) -> Optional[Path]:
    """Return relative path from root, or None if path is not under root."""
    try:
        return path.relative_to(root)
    except ValueError:
        return None


def strip_anchor(path: PurePath) -> PurePath:
    """Drop a leading root ('/' on POSIX) so the path can be joined under another directory."""
    if path.anchor:
        return path.relative_to(path.anchor)
    return path


def counterpart_path(live_path: Path, config: VerificationConfig) -> Path:
    """
    Return where LIVE_PATH should be found in the restored tree.

    restic restores absolute snapshot paths below the target directory, so
    /home/me/a.txt ends up at <backup_root>/home/me/a.txt. Snapshots taken
    from a relative path restore straight into the target; for those, the
    source root prefix is stripped instead.
    """
    live_path = Path(live_path)
    if config.relative_path:
        rel = to_relpath(live_path, config.source_root)
        if rel is None:
            raise PathError(
                f"{live_path} is not under source directory {config.source_root}"
            )
    else:
        rel = strip_anchor(live_path)
    return config.backup_root / rel
