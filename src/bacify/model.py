"""
model.py — Value types shared by the verification engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Set, Tuple


class Verdict(Enum):
    """Outcome of checking one live file against the restored tree."""
    MATCHED = "matched"
    CORRUPT = "corrupt"
    MISSING = "missing"
    SKIPPED_TOO_NEW = "skipped_too_new"
    EXCLUDED = "excluded"


@dataclass(frozen=True)
class SnapshotInfo:
    """Metadata of one restic snapshot."""
    id: str
    time: datetime
    paths: Tuple[str, ...]


@dataclass(frozen=True)
class VerificationConfig:
    """Everything one verification run needs. Never changes during a run."""
    source_root: Path
    backup_root: Path
    backup_time: datetime
    relative_path: bool = False
    excludes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FileRecord:
    """A live file paired with the place its restored copy should be."""
    live_path: Path
    live_modified: int  # st_mtime_ns
    live_created: datetime
    counterpart_path: Path


@dataclass
class RunResult:
    """
    Missing and corrupt paths collected during a run.

    A path is in at most one of the two sets. Partial results produced by
    workers are combined with merge(), which does not depend on the order
    in which they arrive.
    """
    missing: Set[Path] = field(default_factory=set)
    corrupt: Set[Path] = field(default_factory=set)

    def record(self, path: Path, verdict: Verdict) -> None:
        """Fold one verdict in. Verdicts other than MISSING/CORRUPT are not kept."""
        if verdict is Verdict.MISSING:
            self.missing.add(path)
        elif verdict is Verdict.CORRUPT:
            self.corrupt.add(path)

    def update(self, other: "RunResult") -> "RunResult":
        """Fold OTHER into this result in place and return self."""
        self.missing |= other.missing
        self.corrupt |= other.corrupt
        return self

    def merge(self, other: "RunResult") -> "RunResult":
        """Return a new result holding both. Associative and order independent."""
        return RunResult(set(self.missing), set(self.corrupt)).update(other)

    @property
    def ok(self) -> bool:
        return not self.missing and not self.corrupt
