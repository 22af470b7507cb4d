"""
Sync cursor derived from local file modification times.

There is no manifest: the mtime of each written file records the moment
the issue was last mirrored, and the newest Markdown file bounds the next
listing query.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path

from .models import Issue

logger = logging.getLogger(__name__)

DOCUMENT_PATTERN = "*.md"


def file_mtime(path: Path) -> datetime:
    """Modification time of ``path`` as an aware UTC datetime."""
    return datetime.fromtimestamp(path.stat().st_mtime, UTC)


def compute_since(directory: Path | str) -> datetime | None:
    """
    Find the newest Markdown document in ``directory``.

    Args:
        directory: Destination directory of a previous sync

    Returns:
        Latest mtime among ``*.md`` files, or None if there are none
    """
    directory = Path(directory)
    if not directory.is_dir():
        return None

    mtimes = [file_mtime(path) for path in directory.glob(DOCUMENT_PATTERN) if path.is_file()]
    if not mtimes:
        logger.debug(f"No documents in {directory}, fetching everything")
        return None
    return max(mtimes)


def is_stale(path: Path, issue: Issue) -> bool:
    """Check if ``path`` is missing or older than the issue's last update."""
    if not path.exists():
        return True
    return file_mtime(path) < issue.updated_at
