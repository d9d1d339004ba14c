import logging

from bacify.errors import VerificationFailure
from bacify.model import RunResult

logger = logging.getLogger(__name__)


def report(result: RunResult) -> None:
    """
    Turn a finished run into a verdict.

    Returns quietly when nothing is missing or corrupt. Otherwise every
    offending path is logged and a single VerificationFailure is raised.
    """
    if result.missing:
        logger.warning(
            "Missing files that should be in the backup, the backup was created after the files were:"
        )
        for path in sorted(result.missing):
            logger.warning("%s", path)

    if result.corrupt:
        logger.warning("Changed files found that have the same modified time:")
        for path in sorted(result.corrupt):
            logger.warning("%s", path)

    if not result.ok:
        raise VerificationFailure(missing=result.missing, corrupt=result.corrupt)
