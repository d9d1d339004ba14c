"""
config.py — Build the run configuration from snapshot metadata and CLI flags.
"""

import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional

from bacify.errors import BackupTooOldError, ConfigError
from bacify.model import SnapshotInfo, VerificationConfig

_RFC3339_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?"
    r"(?P<tz>[Zz]|[+-]\d{2}:\d{2})$"
)

# Unit names accepted by --max-age. A month is 30.44 days, a year 365.25 days.
_DURATION_UNITS = {
    # below timedelta resolution
    "nsec": timedelta(0), "ns": timedelta(0),
    "usec": timedelta(microseconds=1), "us": timedelta(microseconds=1),
    "msec": timedelta(milliseconds=1), "ms": timedelta(milliseconds=1),
    "seconds": timedelta(seconds=1), "second": timedelta(seconds=1),
    "sec": timedelta(seconds=1), "s": timedelta(seconds=1),
    "minutes": timedelta(minutes=1), "minute": timedelta(minutes=1),
    "min": timedelta(minutes=1), "m": timedelta(minutes=1),
    "hours": timedelta(hours=1), "hour": timedelta(hours=1),
    "hr": timedelta(hours=1), "h": timedelta(hours=1),
    "days": timedelta(days=1), "day": timedelta(days=1), "d": timedelta(days=1),
    "weeks": timedelta(weeks=1), "week": timedelta(weeks=1), "w": timedelta(weeks=1),
    "months": timedelta(seconds=2_630_016), "month": timedelta(seconds=2_630_016),
    "M": timedelta(seconds=2_630_016),
    "years": timedelta(seconds=31_557_600), "year": timedelta(seconds=31_557_600),
    "y": timedelta(seconds=31_557_600),
}
_DURATION_PART_RE = re.compile(r"(\d+)\s*([A-Za-z]+)")


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware datetime.

    restic writes nanosecond fractions; anything past microseconds is dropped.
    """
    if not isinstance(value, str):
        raise ConfigError(f"Invalid snapshot time: {value!r}")
    m = _RFC3339_RE.match(value.strip())
    if not m:
        raise ConfigError(f"Invalid snapshot time: {value!r}")
    frac = (m.group("frac") or "0")[:6].ljust(6, "0")
    tz = m.group("tz")
    if tz in ("Z", "z"):
        tz = "+00:00"
    base = m.group("base").replace("t", "T").replace(" ", "T")
    try:
        return datetime.fromisoformat(f"{base}.{frac}{tz}")
    except ValueError as e:
        raise ConfigError(f"Invalid snapshot time: {value!r} ({e})") from e


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration such as '36h', '1d 12h' or '2weeks3days'.

    Raises ValueError on anything else.
    """
    text = text.strip()
    if not text:
        raise ValueError("empty duration")
    total = timedelta()
    pos = 0
    for m in _DURATION_PART_RE.finditer(text):
        if text[pos:m.start()].strip():
            raise ValueError(f"invalid duration: {text!r}")
        unit = _DURATION_UNITS.get(m.group(2))
        if unit is None:
            raise ValueError(f"unknown time unit {m.group(2)!r} in {text!r}")
        total += int(m.group(1)) * unit
        pos = m.end()
    if pos == 0 or text[pos:].strip():
        raise ValueError(f"invalid duration: {text!r}")
    return total


def check_max_age(backup_time: datetime, max_age: Optional[timedelta], now: Optional[datetime] = None):
    """Raise BackupTooOldError if the snapshot is older than MAX_AGE."""
    if max_age is None:
        return
    now = now or datetime.now().astimezone()
    age = now - backup_time
    if age > max_age:
        raise BackupTooOldError(f"Backup is too old: taken {age} ago, allowed {max_age}")


def source_root_of(snapshot: SnapshotInfo) -> Path:
    """First backed-up path of the snapshot; must be an existing directory."""
    if not snapshot.paths:
        raise ConfigError("Invalid source directory: snapshot has no paths")
    source_root = Path(snapshot.paths[0])
    if not source_root.is_dir():
        raise ConfigError(f"Couldn't find source directory {source_root}")
    return source_root


def build_config(
    snapshot: SnapshotInfo,
    backup_root: Path,
    relative_path: bool = False,
    excludes: Iterable[str] = (),
) -> VerificationConfig:
    return VerificationConfig(
        source_root=source_root_of(snapshot),
        backup_root=Path(backup_root),
        backup_time=snapshot.time,
        relative_path=relative_path,
        excludes=tuple(excludes),
    )
