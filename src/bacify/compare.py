# src/bacify/compare.py
"""
compare.py — Classify one live file against its restored counterpart.

The policy, in order:

1. No counterpart in the restored tree:
   - created at or before the snapshot time -> MISSING
   - created after the snapshot             -> SKIPPED_TOO_NEW
2. Counterpart present:
   - modification times differ -> MATCHED, without hashing
   - modification times equal  -> hash both; equal -> MATCHED, else CORRUPT

A restored file whose mtime differs from the live one is never hashed, so
corruption in such a file goes unnoticed. That gap is known and kept: only
a preserved mtime with different bytes is reported as corrupt.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from bacify.hashing import sha256_file
from bacify.model import FileRecord, Verdict, VerificationConfig
from bacify.pathing import counterpart_path

logger = logging.getLogger(__name__)

Hasher = Callable[[Path], bytes]


def created_time(st: os.stat_result) -> datetime:
    """
    Best available creation time of a file, as an aware UTC datetime.

    st_birthtime exists on macOS, the BSDs and Windows. Elsewhere the earlier
    of mtime and ctime is the closest stand-in.
    """
    birthtime = getattr(st, "st_birthtime", None)
    if birthtime is None:
        birthtime = min(st.st_mtime, st.st_ctime)
    return datetime.fromtimestamp(birthtime, tz=timezone.utc)


def build_record(live_path: Path, config: VerificationConfig) -> FileRecord:
    """Stat a live file and locate its counterpart. Raises OSError or PathError."""
    live_path = Path(live_path)
    st = os.stat(live_path)
    return FileRecord(
        live_path=live_path,
        live_modified=st.st_mtime_ns,
        live_created=created_time(st),
        counterpart_path=counterpart_path(live_path, config),
    )


def classify(record: FileRecord, config: VerificationConfig, hasher: Hasher = sha256_file) -> Verdict:
    counterpart = record.counterpart_path

    if not counterpart.is_file():
        if record.live_created <= config.backup_time:
            logger.debug("Missing in backup: %s", record.live_path)
            return Verdict.MISSING
        logger.debug("Not in backup (too new): %s", record.live_path)
        return Verdict.SKIPPED_TOO_NEW

    counterpart_modified = os.stat(counterpart).st_mtime_ns
    if counterpart_modified != record.live_modified:
        logger.debug("Modified time differs from backup, not hashed: %s", record.live_path)
        return Verdict.MATCHED

    if hasher(record.live_path) == hasher(counterpart):
        logger.debug("Same content in backup: %s", record.live_path)
        return Verdict.MATCHED

    logger.warning("Same modified timestamp but different content in backup: %s", record.live_path)
    return Verdict.CORRUPT
