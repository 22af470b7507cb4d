"""
Main sync orchestrator.

This module coordinates the sync process:
1. Derive the "since" cursor from the destination directory
2. Fetch issues changed since then
3. Re-render every stale issue document, with its comments
4. Download patches of open pull requests whose patch file is stale
"""

import logging
from pathlib import Path

from .api_client import ApiClient
from .exceptions import WriteError
from .fetchers import CommentFetcher, IssueFetcher
from .formatter import IssueFormatter
from .models import Issue, SyncResult
from .repository import validate_repo
from .staleness import compute_since, is_stale

logger = logging.getLogger(__name__)


def write_atomic(path: Path, content: bytes) -> None:
    """
    Replace ``path`` with ``content`` via a temporary file and rename.

    Raises:
        WriteError: If the file cannot be written
    """
    temp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        temp_path.write_bytes(content)
        temp_path.replace(path)
    except OSError as e:
        if temp_path.exists():
            temp_path.unlink()
        raise WriteError(str(path), str(e)) from e


class IssueSync:
    """
    Mirrors the issues of one repository into a directory.

    Any error aborts the run; files written so far stay in place and the
    next run picks up from them.
    """

    def __init__(
        self,
        client: ApiClient,
        formatter: IssueFormatter | None = None,
    ) -> None:
        """
        Initialize the sync orchestrator.

        Args:
            client: GitHub API client
            formatter: Document formatter; defaults to IssueFormatter
        """
        self.client = client
        self.issue_fetcher = IssueFetcher(client)
        self.comment_fetcher = CommentFetcher(client)
        self.formatter = formatter or IssueFormatter()

    def run(self, repo: str, dest: Path | str, dry_run: bool = False) -> SyncResult:
        """
        Sync the issues of ``repo`` into ``dest``.

        Args:
            repo: Repository in owner/repo format
            dest: Destination directory, created if missing
            dry_run: If True, only report which files would be written

        Returns:
            SyncResult with statistics about the run

        Raises:
            InvalidRepositoryError: If repo format is invalid
            ApiError: If the GitHub API fails
            WriteError: If the directory or a file cannot be written
        """
        validate_repo(repo)
        dest = Path(dest).expanduser()

        try:
            dest.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteError(str(dest), str(e)) from e

        since = compute_since(dest)
        if since is None:
            logger.info(f"Starting full sync: {repo} -> {dest}")
        else:
            logger.info(f"Starting sync: {repo} -> {dest} (changes since {since.isoformat()})")

        issues = self.issue_fetcher(repo, since)
        result = SyncResult(repo=repo, since=since, dry_run=dry_run, total_issues=len(issues))

        for issue in issues:
            self.sync_document(issue, dest / f"{issue.number}.md", result)
            if issue.patch_url and issue.is_open:
                self.sync_patch(issue, issue.patch_url, dest / f"{issue.number}.patch", result)

        logger.info(
            f"Wrote {result.documents_written} documents and {result.patches_written} patches"
        )
        return result

    def sync_document(self, issue: Issue, path: Path, result: SyncResult) -> None:
        if not is_stale(path, issue):
            result.record_document(str(path), written=False)
            return

        if not result.dry_run:
            comments = self.comment_fetcher(issue)
            document = self.formatter.format(issue, comments)
            write_atomic(path, document.encode("utf-8"))
            logger.debug(f"Wrote #{issue.number} with {len(comments)} comments to {path}")
        result.record_document(str(path), written=True)

    def sync_patch(self, issue: Issue, patch_url: str, path: Path, result: SyncResult) -> None:
        if not is_stale(path, issue):
            result.record_patch(str(path), written=False)
            return

        if not result.dry_run:
            response = self.client.get_raw(patch_url)
            write_atomic(path, response.content)
            logger.debug(f"Wrote patch of #{issue.number} to {path}")
        result.record_patch(str(path), written=True)


def run_sync(
    repo: str,
    dest: Path | str,
    client: ApiClient | None = None,
    dry_run: bool = False,
) -> SyncResult:
    """
    Convenience wrapper that owns the API client for one run.

    Args:
        repo: Repository in owner/repo format
        dest: Destination directory
        client: API client; a default unauthenticated one is created if None
        dry_run: Don't write files

    Returns:
        SyncResult with sync statistics
    """
    if client is not None:
        return IssueSync(client).run(repo, dest, dry_run=dry_run)
    with ApiClient() as owned:
        return IssueSync(owned).run(repo, dest, dry_run=dry_run)
