"""
Repository identifier validation and discovery from git remotes.
"""

import logging
import re
from pathlib import Path

from .exceptions import InvalidRepositoryError, RepositoryNotFoundError

logger = logging.getLogger(__name__)

GITHUB_REMOTE = re.compile(r"github\.com[:/](.+?)/(.+?)(\.git)?$")


def validate_repo(repo: str) -> tuple[str, str]:
    """
    Split an owner/repo identifier.

    Raises:
        InvalidRepositoryError: If repo is not exactly ``owner/name``
    """
    if repo.count("/") != 1:
        raise InvalidRepositoryError(repo)

    owner, name = repo.split("/")
    if not owner or not name:
        raise InvalidRepositoryError(repo)
    return owner, name


def discover_repo(git_config: Path | str = Path(".git/config")) -> str:
    """
    Find the first GitHub remote in a git config file.

    Args:
        git_config: Path to the repository's git config

    Returns:
        Repository in owner/repo format

    Raises:
        RepositoryNotFoundError: If no remote points at github.com
    """
    git_config = Path(git_config)
    try:
        lines = git_config.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        logger.debug(f"Cannot read {git_config}: {e}")
        raise RepositoryNotFoundError(str(git_config)) from e

    for line in lines:
        match = GITHUB_REMOTE.search(line.strip())
        if match:
            repo = f"{match.group(1)}/{match.group(2)}"
            logger.debug(f"Discovered repository {repo} in {git_config}")
            return repo

    raise RepositoryNotFoundError(str(git_config))
