"""
Fetchers that turn API listings into issue and comment models.
"""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar
from urllib.parse import urlencode

from pydantic import BaseModel, ValidationError

from .api_client import ApiClient
from .exceptions import DecodeError
from .models import Comment, Issue, IssueState

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def format_since(since: datetime) -> str:
    """Format a timestamp as UTC ISO-8601, e.g. 2024-01-15T10:30:00Z."""
    if since.tzinfo is None:
        since = since.replace(tzinfo=UTC)
    return since.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class Fetcher(Generic[T]):
    """Fetch a JSON listing and validate each element into ``item_type``."""

    def __init__(self, client: ApiClient, item_type: type[T]) -> None:
        self.client = client
        self.item_type = item_type

    def _decode(self, entry: Any, source: str) -> T:
        if not isinstance(entry, Mapping):
            raise DecodeError(f"expected an object, got {type(entry).__name__}", source)
        try:
            return self.item_type.model_validate(entry)
        except ValidationError as e:
            name = self.item_type.__name__.lower()
            raise DecodeError(f"invalid {name}: {e}", source) from e

    def fetch(self, path: str) -> list[T]:
        return [self._decode(entry, path) for entry in self.client.get(path)]


class IssueFetcher(Fetcher[Issue]):
    """Lists open, then closed, issues of a repository, most recently updated first."""

    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, Issue)

    def issues(self, repo: str, state: IssueState, since: datetime | None) -> list[Issue]:
        params = {"state": state.value, "sort": "updated"}
        if since is not None:
            params["since"] = format_since(since)
        return self.fetch(f"/repos/{repo}/issues?{urlencode(params)}")

    def __call__(self, repo: str, since: datetime | None = None) -> list[Issue]:
        """
        Fetch the issues of ``repo`` updated since ``since``.

        Args:
            repo: Repository in owner/repo format
            since: Only list issues updated at or after this time

        Returns:
            Open issues followed by closed issues
        """
        open_issues = self.issues(repo, IssueState.OPEN, since)
        closed_issues = self.issues(repo, IssueState.CLOSED, since)
        logger.info(
            f"Fetched {len(open_issues)} open and {len(closed_issues)} closed issues from {repo}"
        )
        return open_issues + closed_issues


class CommentFetcher(Fetcher[Comment]):
    """Lists the comments of an issue in chronological order."""

    def __init__(self, client: ApiClient) -> None:
        super().__init__(client, Comment)

    def __call__(self, issue: Issue) -> list[Comment]:
        if not issue.has_comments:
            return []
        return self.fetch(issue.comments_url)
