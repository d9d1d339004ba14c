"""
walk.py — Walk the live source tree and classify every regular file.

Only regular files are verified; symlinks, directories and special files
are skipped. Directories matching an exclude pattern are not descended into.
Any error while walking or classifying aborts the run: a partially
inspected tree is never reported as a result.
"""

import logging
import os
import stat
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_COMPLETED
from pathlib import Path
from typing import Iterable, Iterator

from tqdm import tqdm

from bacify.compare import build_record, classify
from bacify.excludes import is_excluded
from bacify.model import RunResult, Verdict, VerificationConfig

logger = logging.getLogger(__name__)


def _raise_walk_error(err: OSError):
    raise err


def iter_source_files(root: Path, excludes: Iterable[str] = ()) -> Iterator[Path]:
    """Yield every regular file under ROOT, skipping excluded directories."""
    excludes = tuple(excludes)
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        if excludes:
            kept = []
            for name in dirnames:
                if is_excluded(os.path.join(dirpath, name), excludes):
                    logger.debug("Excluded directory: %s", os.path.join(dirpath, name))
                else:
                    kept.append(name)
            dirnames[:] = kept
        for filename in filenames:
            file_path = os.path.join(dirpath, filename)
            if stat.S_ISREG(os.lstat(file_path).st_mode):
                yield Path(file_path)


def verify_file(file_path: Path, config: VerificationConfig) -> Verdict:
    """Verdict for one live file, EXCLUDED included."""
    if is_excluded(file_path, config.excludes):
        logger.debug("Excluded: %s", file_path)
        return Verdict.EXCLUDED
    return classify(build_record(file_path, config), config)


def _verify_partial(file_path: Path, config: VerificationConfig) -> RunResult:
    partial = RunResult()
    partial.record(file_path, verify_file(file_path, config))
    return partial


def run_verification(config: VerificationConfig, workers: int = 1, progress: bool = False) -> RunResult:
    """
    Verify every file under config.source_root against config.backup_root.

    Args:
        config: Run configuration
        workers: Number of threads classifying files (1 = sequential)
        progress: Show a tqdm progress bar

    Returns:
        RunResult with the missing and corrupt paths

    Raises:
        OSError: the tree could not be walked or a file could not be read
        PathError: a live path does not map into the restored tree
    """
    files = iter(iter_source_files(config.source_root, config.excludes))
    result = RunResult()

    if workers <= 1:
        for file_path in tqdm(files, desc="🔍 Verifying", unit="file", disable=not progress):
            result.record(file_path, verify_file(file_path, config))
        return result

    # Results are folded in by this thread only; workers return partials.
    max_inflight = workers * 10
    pending = set()

    def refill(executor):
        while len(pending) < max_inflight:
            try:
                file_path = next(files)
            except StopIteration:
                return
            pending.add(executor.submit(_verify_partial, file_path, config))

    with ThreadPoolExecutor(max_workers=workers) as executor:
        with tqdm(desc="🔍 Verifying", unit="file", disable=not progress) as pbar:
            try:
                refill(executor)
                while pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for fut in done:
                        result.update(fut.result())
                        pbar.update(1)
                    refill(executor)
            except BaseException:
                for fut in pending:
                    fut.cancel()
                raise

    return result
