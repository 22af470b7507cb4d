"""Pytest configuration and fixtures."""

import os
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx
import pytest

from issuesync.api_client import ApiClient
from issuesync.models import ClientConfig

API = "https://api.github.com"
ISSUE_UPDATED = "2024-01-15T14:30:00Z"


def raw_issue(
    number: int,
    title: str = "Test Issue",
    state: str = "open",
    comments: int = 0,
    labels: tuple[str, ...] = (),
    body: str | None = "Issue body.",
    login: str = "testuser",
    patch_url: str | None = None,
    updated_at: str = ISSUE_UPDATED,
    repo: str = "owner/repo",
) -> dict[str, Any]:
    """Build an issue payload shaped like the GitHub issues endpoint returns."""
    data: dict[str, Any] = {
        "number": number,
        "title": title,
        "body": body,
        "user": {"login": login, "id": 1},
        "url": f"{API}/repos/{repo}/issues/{number}",
        "comments": comments,
        "state": state,
        "labels": [{"name": name, "color": "d73a4a"} for name in labels],
        "updated_at": updated_at,
        "created_at": "2024-01-10T09:00:00Z",
    }
    if patch_url is not None:
        data["pull_request"] = {
            "url": f"{API}/repos/{repo}/pulls/{number}",
            "patch_url": patch_url,
        }
    return data


def raw_comment(login: str, body: str, updated_at: str = ISSUE_UPDATED) -> dict[str, Any]:
    """Build a comment payload."""
    return {
        "id": 1,
        "user": {"login": login},
        "body": body,
        "created_at": updated_at,
        "updated_at": updated_at,
    }


def set_mtime(path: Path, when: datetime) -> None:
    """Set both atime and mtime of a file."""
    timestamp = when.timestamp()
    os.utime(path, (timestamp, timestamp))


class FakeGitHub:
    """
    Canned HTTP responses served through httpx.MockTransport.

    Routes match on host, path and a subset of query parameters; the route
    with the most matching parameters wins. Unknown URLs answer 404.
    """

    def __init__(self) -> None:
        self.routes: list[tuple[httpx.URL, dict[str, str], dict[str, Any]]] = []
        self.requests: list[httpx.Request] = []

    def add(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        status: int = 200,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        response: dict[str, Any] = {"status_code": status, "headers": headers or {}}
        if content is not None:
            response["content"] = content
        else:
            response["json"] = json
        self.routes.append((httpx.URL(url), params or {}, response))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        candidates = [
            (params, response)
            for url, params, response in self.routes
            if url.host == request.url.host
            and url.path == request.url.path
            and all(request.url.params.get(k) == v for k, v in params.items())
        ]
        if not candidates:
            return httpx.Response(404, json={"message": "Not Found"})
        _, response = max(candidates, key=lambda c: len(c[0]))
        return httpx.Response(**response)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self, **config: Any) -> ApiClient:
        return ApiClient(ClientConfig(**config), transport=self.transport)

    def urls(self) -> list[str]:
        return [str(request.url) for request in self.requests]

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def add_issues(
        self,
        repo: str,
        open_issues: list[dict[str, Any]] | None = None,
        closed_issues: list[dict[str, Any]] | None = None,
    ) -> None:
        """Serve single-page open and closed issue listings."""
        self.add(f"{API}/repos/{repo}/issues", params={"state": "open"}, json=open_issues or [])
        self.add(
            f"{API}/repos/{repo}/issues", params={"state": "closed"}, json=closed_issues or []
        )


@pytest.fixture
def fake_github() -> FakeGitHub:
    """Create an empty fake GitHub."""
    return FakeGitHub()


@pytest.fixture
def sample_issue_data() -> dict[str, Any]:
    """Raw payload of an open issue with labels and comments."""
    return raw_issue(
        123,
        title="  Test Issue Title ",
        comments=2,
        labels=("bug", "enhancement"),
        body="This is the issue body.\r\n\r\nWith multiple paragraphs.\r\n",
    )


@pytest.fixture
def sample_pull_request_data() -> dict[str, Any]:
    """Raw payload of an open pull request."""
    return raw_issue(
        7,
        title="Add feature",
        patch_url="https://github.com/owner/repo/pull/7.patch",
    )
