"""
Pydantic models for GitHub API payloads and sync bookkeeping.

The issue and comment models are read-only views validated straight from
the decoded JSON the API returns. Optional fields default to empty values;
a missing required field fails validation.
"""

import re
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import __version__

DEFAULT_BASE_URL = "https://api.github.com"

# Lines of a quoted block: blank or ">"-prefixed, up to the first unquoted line.
QUOTED_LINES = r"(?:[ \t]*(?:>[^\n]*)?\n|[ \t]*>[^\n]*\Z)*"

# Quoted "On <date>, <someone> <reply@reply.github.com> wrote:" block left
# behind by replies sent through email, plus the quoted lines under it.
REPLY_ATTRIBUTION = re.compile(
    r"^[> ]*On (?:[^\n]|\n(?!\n))+?<reply@reply\.github\.com>[>\s]+wrote:[^\n]*(?:\n|\Z)"
    + QUOTED_LINES,
    re.MULTILINE,
)

# Quoted "-- Reply to this email directly or view it on GitHub" footer.
REPLY_FOOTER = re.compile(
    r"^(?:>+\n)?>+ --\n>+ Reply to this email .+?https://github\.com/[^\n]*(?:\n|\Z)"
    + QUOTED_LINES,
    re.MULTILINE | re.DOTALL,
)


def normalize_body(text: str | None) -> str:
    """Trim a body and convert CRLF line endings to LF."""
    if not text:
        return ""
    return text.strip().replace("\r\n", "\n")


def strip_reply_noise(text: str) -> str:
    """
    Remove the quoted attribution and footer added by email replies.

    Each pattern is applied at most once.
    """
    text = REPLY_ATTRIBUTION.sub("", text, count=1)
    text = REPLY_FOOTER.sub("", text, count=1)
    return text.strip()


def _login(value: Any) -> Any:
    if isinstance(value, Mapping):
        return value.get("login")
    return value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class IssueState(str, Enum):
    """GitHub issue state."""

    OPEN = "open"
    CLOSED = "closed"


class PullRequestRef(BaseModel):
    """The ``pull_request`` stub GitHub embeds in issues that are PRs."""

    model_config = ConfigDict(frozen=True)

    patch_url: str | None = None


class Issue(BaseModel):
    """
    GitHub issue or pull request, as listed by the issues endpoint.

    Validated from one element of the API response; the raw mapping is
    never modified.
    """

    model_config = ConfigDict(frozen=True)

    number: int = Field(gt=0)
    title: str
    body: str = ""
    user: str
    url: str
    comments: int = 0
    state: IssueState
    labels: list[str] = Field(default_factory=list)
    pull_request: PullRequestRef | None = None
    updated_at: datetime

    @field_validator("body", mode="before")
    @classmethod
    def _normalize_body(cls, value: Any) -> Any:
        return normalize_body(value)

    @field_validator("user", mode="before")
    @classmethod
    def _user_login(cls, value: Any) -> Any:
        return _login(value)

    @field_validator("comments", mode="before")
    @classmethod
    def _comment_count(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("labels", mode="before")
    @classmethod
    def _label_names(cls, value: Any) -> Any:
        if not value:
            return []
        return [label.get("name") if isinstance(label, Mapping) else label for label in value]

    @field_validator("updated_at")
    @classmethod
    def _updated_at_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @property
    def comments_url(self) -> str:
        """URL of the issue's comment listing."""
        return self.url.rstrip("/") + "/comments"

    @property
    def is_open(self) -> bool:
        return self.state == IssueState.OPEN

    @property
    def is_closed(self) -> bool:
        return not self.is_open

    @property
    def has_comments(self) -> bool:
        return self.comments != 0

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None

    @property
    def patch_url(self) -> str | None:
        """Patch download URL; only open pull requests have one."""
        if self.pull_request is None or not self.is_open:
            return None
        return self.pull_request.patch_url


class Comment(BaseModel):
    """GitHub issue comment with email reply noise removed from the body."""

    model_config = ConfigDict(frozen=True)

    user: str
    body: str = ""
    updated_at: datetime

    @field_validator("body", mode="before")
    @classmethod
    def _clean_body(cls, value: Any) -> Any:
        return strip_reply_noise(normalize_body(value))

    @field_validator("user", mode="before")
    @classmethod
    def _user_login(cls, value: Any) -> Any:
        return _login(value)

    @field_validator("updated_at")
    @classmethod
    def _updated_at_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


def _getenv(environ: Mapping[str, str], name: str) -> str | None:
    """
    Look up an environment variable, ignoring the case of its name.

    An exact-case match is preferred; empty values are skipped.
    """
    if environ.get(name):
        return environ[name]
    wanted = name.lower()
    for key, value in environ.items():
        if key.lower() == wanted and value:
            return value
    return None


class ClientConfig(BaseModel):
    """Configuration for the GitHub API client."""

    model_config = ConfigDict(frozen=True)

    token: str | None = None
    base_url: str = DEFAULT_BASE_URL
    proxy: str | None = None
    no_proxy: tuple[str, ...] = ()
    verbose: bool = False
    debug: bool = False
    timeout: float = Field(default=60.0, gt=0)
    user_agent: str = f"issuesync/{__version__}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str], **overrides: Any) -> "ClientConfig":
        """
        Build a configuration from an environment mapping.

        Reads GITHUB_TOKEN (or GH_TOKEN), https_proxy or http_proxy, and
        no_proxy; variable names are matched case-insensitively. Keyword
        overrides whose value is None are ignored.

        Args:
            environ: Environment mapping, usually ``os.environ``
            **overrides: Explicit field values, e.g. from CLI options

        Returns:
            ClientConfig instance
        """
        no_proxy = _getenv(environ, "no_proxy") or ""
        values: dict[str, Any] = {
            "token": _getenv(environ, "GITHUB_TOKEN") or _getenv(environ, "GH_TOKEN"),
            "proxy": _getenv(environ, "https_proxy") or _getenv(environ, "http_proxy"),
            "no_proxy": tuple(host.strip() for host in no_proxy.split(",") if host.strip()),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def api_host(self) -> str | None:
        """Host name of the API endpoint."""
        return urlsplit(self.base_url).hostname

    @property
    def proxy_url(self) -> str | None:
        """The proxy to use, or None for a direct connection."""
        if not self.proxy or "*" in self.no_proxy:
            return None
        if "://" not in self.proxy:
            return f"http://{self.proxy}"
        return self.proxy


class SyncResult(BaseModel):
    """Result of a sync run."""

    model_config = ConfigDict(frozen=False)

    repo: str
    since: datetime | None = None
    dry_run: bool = False
    total_issues: int = 0
    documents_written: int = 0
    documents_skipped: int = 0
    patches_written: int = 0
    patches_skipped: int = 0
    written: list[str] = Field(default_factory=list)

    def record_document(self, path: str, written: bool) -> None:
        """Count a document as written or skipped."""
        if written:
            self.documents_written += 1
            self.written.append(path)
        else:
            self.documents_skipped += 1

    def record_patch(self, path: str, written: bool) -> None:
        """Count a patch as written or skipped."""
        if written:
            self.patches_written += 1
            self.written.append(path)
        else:
            self.patches_skipped += 1

    @property
    def has_changes(self) -> bool:
        """Check if any file was (or would be) written."""
        return self.documents_written > 0 or self.patches_written > 0

    def summary(self) -> str:
        """Generate human-readable summary."""
        since = self.since.isoformat() if self.since else "the beginning"
        lines = [
            f"Sync of {self.repo}: {self.total_issues} issues changed since {since}",
            f"  Documents written: {self.documents_written}",
            f"  Documents up to date: {self.documents_skipped}",
            f"  Patches written: {self.patches_written}",
            f"  Patches up to date: {self.patches_skipped}",
        ]
        return "\n".join(lines)
