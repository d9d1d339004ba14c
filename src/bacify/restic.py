"""
restic.py — The two restic operations bacify needs: list the latest
snapshot and restore a snapshot into a directory.

Repository location and password come from the environment
(RESTIC_REPOSITORY, RESTIC_PASSWORD, ...) and are read by restic itself.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Sequence

from bacify.config import parse_rfc3339
from bacify.errors import ConfigError, RestoreError, SnapshotError
from bacify.model import SnapshotInfo

logger = logging.getLogger(__name__)

NO_SNAPSHOTS_HINT = (
    "Couldn't find any snapshots. Did you set RESTIC_REPOSITORY and "
    "RESTIC_PASSWORD? Is restic installed?"
)


def parse_snapshot_metadata(raw) -> SnapshotInfo:
    """
    Parse `restic snapshots --json` output and return the first snapshot.

    Raises:
        ConfigError: output is not JSON, empty, or lacks time/id/paths
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not parse snapshot metadata: {e}") from e

    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        raise ConfigError("No snapshot data available")
    snapshot = data[0]

    backup_time = parse_rfc3339(snapshot.get("time"))

    snapshot_id = snapshot.get("id")
    if not isinstance(snapshot_id, str) or not snapshot_id:
        raise ConfigError("Invalid snapshot id")

    paths = snapshot.get("paths")
    if not isinstance(paths, list) or not paths or not all(isinstance(p, str) for p in paths):
        raise ConfigError("Invalid source directory")

    return SnapshotInfo(id=snapshot_id, time=backup_time, paths=tuple(paths))


class ResticRepository:
    """
    Thin wrapper around the restic binary.

    Attributes:
        restic: Name or path of the restic executable
    """

    def __init__(self, restic: str = "restic"):
        self.restic = restic

    def _command(self, *args: str) -> Sequence[str]:
        return [self.restic, *args]

    def latest_snapshot(self) -> SnapshotInfo:
        """
        Return metadata of the most recent snapshot.

        Raises:
            SnapshotError: restic is missing or printed nothing
            ConfigError: the metadata is malformed
        """
        cmd = self._command("snapshots", "--json", "--latest", "1")
        try:
            result = subprocess.run(cmd, capture_output=True)
        except FileNotFoundError as e:
            raise SnapshotError(NO_SNAPSHOTS_HINT) from e

        if not result.stdout.strip():
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            if stderr:
                logger.debug("restic snapshots: %s", stderr)
            raise SnapshotError(NO_SNAPSHOTS_HINT)

        return parse_snapshot_metadata(result.stdout)

    def stats(self, snapshot_id: str) -> None:
        """Let restic print statistics for the snapshot. Failures are only logged."""
        try:
            result = subprocess.run(self._command("stats", snapshot_id), check=False)
        except FileNotFoundError as e:
            logger.warning("Could not run restic stats: %s", e)
            return
        if result.returncode != 0:
            logger.warning("restic stats exited with status %d", result.returncode)

    def restore(self, snapshot_id: str, target: Path) -> None:
        """
        Restore SNAPSHOT_ID into TARGET. restic's progress goes to the terminal.

        Raises:
            RestoreError: restic is missing or exited non-zero
        """
        cmd = self._command("restore", snapshot_id, "--target", str(target))
        logger.info("Restoring snapshot %s to %s", snapshot_id, target)
        try:
            result = subprocess.run(cmd, check=False)
        except FileNotFoundError as e:
            raise RestoreError(f"Could not run restic: {e}") from e
        if result.returncode != 0:
            raise RestoreError(
                f"restic restore of {snapshot_id} exited with status {result.returncode}"
            )
