# src/bacify/verify_backup.py
"""
verify_backup.py — Restore the latest snapshot to a scratch directory and
check it against the live source tree.
"""

import logging
import tempfile
from datetime import timedelta
from pathlib import Path
from typing import Optional

from rich.console import Console

from bacify.config import build_config, check_max_age, source_root_of
from bacify.excludes import default_exclude_file, load_excludes
from bacify.model import RunResult
from bacify.report import report
from bacify.restic import ResticRepository
from bacify.walk import run_verification

logger = logging.getLogger(__name__)
console = Console()

TEMP_PREFIX = "bacify-"


def verify_latest_snapshot(
    repository: ResticRepository,
    relative_path: bool = False,
    max_age: Optional[timedelta] = None,
    exclude_file: Optional[Path] = None,
    workers: int = 1,
    progress: bool = False,
) -> RunResult:
    """
    Verify the latest snapshot of REPOSITORY against the live filesystem.

    Returns the (clean) RunResult on success.

    Raises:
        SnapshotError, ConfigError: snapshot metadata unavailable or unusable
        BackupTooOldError: snapshot older than MAX_AGE
        RestoreError: restic could not restore the snapshot
        PathError: live paths do not map into the restored tree
        OSError: the source tree or restored tree could not be read
        VerificationFailure: files are missing from or corrupt in the backup
    """
    snapshot = repository.latest_snapshot()
    source_root = source_root_of(snapshot)
    check_max_age(snapshot.time, max_age)

    if exclude_file is None:
        exclude_file = default_exclude_file()
    excludes = load_excludes(exclude_file)

    console.rule("🔍 Backup Verification")
    console.print(f"🗂️  Snapshot: {snapshot.id}")
    console.print(f"🕒 Taken: {snapshot.time.isoformat()}")
    console.print(f"📂 Source: {source_root}")
    console.print(f"🚫 Excludes: {len(excludes)} pattern(s) from {exclude_file}")
    console.print(f"🔧 Paths: {'relative' if relative_path else 'absolute'}, Workers: {workers}")

    repository.stats(snapshot.id)

    with tempfile.TemporaryDirectory(prefix=TEMP_PREFIX) as tmp:
        backup_root = Path(tmp)
        repository.restore(snapshot.id, backup_root)
        config = build_config(snapshot, backup_root, relative_path, excludes)
        result = run_verification(config, workers=workers, progress=progress)

    report(result)
    return result
