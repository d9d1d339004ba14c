"""
errors.py — Exception types raised by bacify.

Filesystem problems are not wrapped: they surface as plain OSError.
"""

from pathlib import Path
from typing import Iterable


class BacifyError(Exception):
    """Base class for every error bacify raises on purpose."""


class ConfigError(BacifyError):
    """Snapshot metadata, exclude file or environment is unusable."""


class PathError(BacifyError):
    """A live path cannot be translated into its restored counterpart."""


class SnapshotError(BacifyError):
    """Listing snapshots through restic failed."""


class RestoreError(BacifyError):
    """Restoring a snapshot through restic failed."""


class BackupTooOldError(BacifyError):
    """The latest snapshot is older than the allowed maximum age."""


class VerificationFailure(BacifyError):
    """
    The restored snapshot does not hold the live tree.

    Carries every missing and every corrupt path so the operator can act on
    the whole list at once.
    """

    def __init__(self, missing: Iterable[Path] = (), corrupt: Iterable[Path] = ()):
        self.missing = frozenset(missing)
        self.corrupt = frozenset(corrupt)
        super().__init__(
            f"Verification failed: {len(self.missing)} missing, {len(self.corrupt)} corrupt"
        )
