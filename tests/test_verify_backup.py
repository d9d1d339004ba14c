"""
End-to-end verification of a snapshot restored by a stand-in repository.

The stand-in "restores" by copying a prepared directory into the target,
keeping modification times like restic does.
"""

import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from bacify.errors import BackupTooOldError, RestoreError, VerificationFailure
from bacify.model import SnapshotInfo
from bacify.verify_backup import verify_latest_snapshot
from conftest import write_file


class FakeRepository:

    def __init__(self, snapshot, image: Path, fail_restore=False):
        self.snapshot = snapshot
        self.image = image
        self.fail_restore = fail_restore
        self.restored_to = None
        self.stats_for = None

    def latest_snapshot(self):
        return self.snapshot

    def stats(self, snapshot_id):
        self.stats_for = snapshot_id

    def restore(self, snapshot_id, target):
        assert snapshot_id == self.snapshot.id
        self.restored_to = Path(target)
        if self.fail_restore:
            raise RestoreError("restic restore exited with status 1")
        shutil.copytree(self.image, target, dirs_exist_ok=True)


@pytest.fixture
def setup(tmp_path):
    src = tmp_path / "src"
    image = tmp_path / "image"
    src.mkdir()
    image.mkdir()

    def make(backup_time):
        snapshot = SnapshotInfo(id="snap1", time=backup_time, paths=(str(src),))
        return FakeRepository(snapshot, image)

    return src, image, make, tmp_path / "no-excludes"


NOW = datetime.now(timezone.utc)


def test_identical_file_passes(setup):
    src, image, make, excludes = setup
    write_file(src / "doc.txt", b"hello")
    write_file(image / "doc.txt", b"hello")
    repo = make(NOW + timedelta(hours=1))

    result = verify_latest_snapshot(repo, relative_path=True, exclude_file=excludes)

    assert result.ok
    assert repo.stats_for == "snap1"
    assert not repo.restored_to.exists()


def test_missing_file_fails(setup):
    src, image, make, excludes = setup
    doc = write_file(src / "doc.txt", b"hello")
    repo = make(NOW + timedelta(hours=1))

    with pytest.raises(VerificationFailure) as excinfo:
        verify_latest_snapshot(repo, relative_path=True, exclude_file=excludes)

    assert excinfo.value.missing == {doc}
    assert not excinfo.value.corrupt
    assert not repo.restored_to.exists()


def test_corrupt_file_fails(setup):
    src, image, make, excludes = setup
    doc = write_file(src / "doc.txt", b"hello")
    write_file(image / "doc.txt", b"jello")
    repo = make(NOW + timedelta(hours=1))

    with pytest.raises(VerificationFailure) as excinfo:
        verify_latest_snapshot(repo, relative_path=True, exclude_file=excludes)

    assert excinfo.value.corrupt == {doc}
    assert not excinfo.value.missing


def test_file_newer_than_backup_passes(setup):
    src, image, make, excludes = setup
    (src / "new.txt").write_bytes(b"fresh")
    repo = make(datetime(2000, 1, 1, tzinfo=timezone.utc))

    assert verify_latest_snapshot(repo, relative_path=True, exclude_file=excludes).ok


def test_absolute_snapshot_paths(setup):
    src, image, make, excludes = setup
    write_file(src / "a" / "doc.txt", b"hello")
    write_file(image / src.relative_to(src.anchor) / "a" / "doc.txt", b"hello")
    repo = make(NOW + timedelta(hours=1))

    assert verify_latest_snapshot(repo, relative_path=False, exclude_file=excludes).ok


def test_exclude_file_is_honoured(setup, tmp_path):
    src, image, make, _ = setup
    write_file(src / "cache" / "blob.bin", b"not backed up")
    write_file(src / "doc.txt", b"hello")
    write_file(image / "doc.txt", b"hello")
    exclude_file = tmp_path / ".backup_exclude"
    exclude_file.write_text(f"{src / 'cache'}\n", encoding="utf-8")
    repo = make(NOW + timedelta(hours=1))

    assert verify_latest_snapshot(repo, relative_path=True, exclude_file=exclude_file).ok


def test_parallel_workers(setup):
    src, image, make, excludes = setup
    for i in range(25):
        write_file(src / f"f{i}.txt", str(i).encode())
        write_file(image / f"f{i}.txt", str(i).encode())
    missing = write_file(src / "extra.txt")
    repo = make(NOW + timedelta(hours=1))

    with pytest.raises(VerificationFailure) as excinfo:
        verify_latest_snapshot(repo, relative_path=True, exclude_file=excludes, workers=4)
    assert excinfo.value.missing == {missing}


def test_too_old_backup_is_rejected_before_restore(setup):
    src, image, make, excludes = setup
    repo = make(NOW - timedelta(days=3))

    with pytest.raises(BackupTooOldError):
        verify_latest_snapshot(repo, max_age=timedelta(days=1), exclude_file=excludes)
    assert repo.restored_to is None


def test_restore_failure_propagates_and_cleans_up(setup):
    src, image, make, excludes = setup
    repo = make(NOW)
    repo.fail_restore = True

    with pytest.raises(RestoreError):
        verify_latest_snapshot(repo, exclude_file=excludes)
    assert not repo.restored_to.exists()
