"""Tests for issue and comment fetchers."""

from datetime import datetime, timedelta, timezone

import pytest

from issuesync.exceptions import DecodeError
from issuesync.fetchers import CommentFetcher, IssueFetcher, format_since
from issuesync.models import Issue

from .conftest import API, FakeGitHub, raw_comment, raw_issue


def test_format_since_converts_to_utc() -> None:
    since = datetime(2024, 1, 15, 12, 30, 45, 123456, tzinfo=timezone(timedelta(hours=2)))
    assert format_since(since) == "2024-01-15T10:30:45Z"


class TestIssueFetcher:
    """Tests for IssueFetcher."""

    def test_open_then_closed(self, fake_github: FakeGitHub) -> None:
        fake_github.add_issues(
            "owner/repo",
            open_issues=[raw_issue(9), raw_issue(4)],
            closed_issues=[raw_issue(7, state="closed"), raw_issue(2, state="closed")],
        )

        with fake_github.client() as client:
            issues = IssueFetcher(client)("owner/repo")

        assert [issue.number for issue in issues] == [9, 4, 7, 2]
        assert all(isinstance(issue, Issue) for issue in issues)

    def test_query_without_since(self, fake_github: FakeGitHub) -> None:
        fake_github.add_issues("owner/repo")

        with fake_github.client() as client:
            IssueFetcher(client)("owner/repo")

        open_request, closed_request = fake_github.requests
        assert open_request.url.path == "/repos/owner/repo/issues"
        assert dict(open_request.url.params) == {"state": "open", "sort": "updated"}
        assert dict(closed_request.url.params) == {"state": "closed", "sort": "updated"}

    def test_query_with_since(self, fake_github: FakeGitHub) -> None:
        fake_github.add_issues("owner/repo")
        since = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

        with fake_github.client() as client:
            IssueFetcher(client)("owner/repo", since)

        for request in fake_github.requests:
            assert request.url.params["since"] == "2024-01-15T10:00:00Z"
            assert request.url.params["sort"] == "updated"

    def test_invalid_issue(self, fake_github: FakeGitHub) -> None:
        broken = raw_issue(1)
        del broken["user"]
        fake_github.add_issues("owner/repo", open_issues=[broken])

        with fake_github.client() as client, pytest.raises(DecodeError) as exc_info:
            IssueFetcher(client)("owner/repo")

        assert "/repos/owner/repo/issues?state=open" in exc_info.value.message

    def test_non_object_element(self, fake_github: FakeGitHub) -> None:
        fake_github.add_issues("owner/repo", open_issues=["not an issue"])  # type: ignore

        with fake_github.client() as client, pytest.raises(DecodeError) as exc_info:
            IssueFetcher(client)("owner/repo")

        assert "/repos/owner/repo/issues" in exc_info.value.message


class TestCommentFetcher:
    """Tests for CommentFetcher."""

    def test_no_request_without_comments(self, fake_github: FakeGitHub) -> None:
        issue = Issue.model_validate(raw_issue(1, comments=0))

        with fake_github.client() as client:
            assert CommentFetcher(client)(issue) == []

        assert fake_github.requests == []

    def test_fetches_in_order(self, fake_github: FakeGitHub) -> None:
        issue = Issue.model_validate(raw_issue(3, comments=2))
        fake_github.add(
            f"{API}/repos/owner/repo/issues/3/comments",
            json=[raw_comment("first", "One"), raw_comment("second", "Two")],
        )

        with fake_github.client() as client:
            comments = CommentFetcher(client)(issue)

        assert [(c.user, c.body) for c in comments] == [("first", "One"), ("second", "Two")]
        assert fake_github.paths() == ["/repos/owner/repo/issues/3/comments"]
