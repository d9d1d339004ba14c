import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from bacify.model import VerificationConfig

# 2023-11-14T22:13:20Z
FIXED_MTIME_NS = 1_700_000_000_000_000_000


def write_file(path: Path, content: bytes = b"x", mtime_ns: int = FIXED_MTIME_NS) -> Path:
    """Create PATH with CONTENT and pin its modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    os.utime(path, ns=(mtime_ns, mtime_ns))
    return path


@pytest.fixture
def trees(tmp_path):
    """(source_root, backup_root) pair of empty directories."""
    src = tmp_path / "src"
    backup = tmp_path / "backup"
    src.mkdir()
    backup.mkdir()
    return src, backup


@pytest.fixture
def future_config(trees):
    """Relative-path config whose snapshot is newer than any file in the test."""
    src, backup = trees
    return VerificationConfig(
        source_root=src,
        backup_root=backup,
        backup_time=datetime.now(timezone.utc) + timedelta(days=1),
        relative_path=True,
    )
