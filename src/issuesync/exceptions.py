"""
Exception hierarchy for issuesync.

This module defines custom exceptions with clear messages and
actionable guidance for users.
"""


class IssueSyncError(Exception):
    """Base exception for all issuesync errors."""

    def __init__(self, message: str, hint: str | None = None) -> None:
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\n\nHint: {self.hint}"
        return self.message


# API Errors


class ApiError(IssueSyncError):
    """Base class for errors talking to the GitHub API."""


class TransportError(ApiError):
    """The API answered with a non-2xx, non-redirect response."""

    def __init__(
        self,
        status_code: int,
        body: str = "",
        url: str | None = None,
        hint: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.url = url
        location = f" for {url}" if url else ""
        super().__init__(
            f"GitHub API returned HTTP {status_code}{location}",
            hint or "Check that the repository exists and you have access to it",
        )


class RateLimitError(TransportError):
    """GitHub API rate limit exceeded."""

    def __init__(
        self,
        status_code: int,
        body: str = "",
        url: str | None = None,
        reset_time: str | None = None,
    ) -> None:
        hint = "Wait an hour, then run the sync again; it continues where it left off"
        if reset_time:
            hint = f"Rate limit resets at {reset_time}. Run the sync again after that."
        self.reset_time = reset_time
        super().__init__(status_code, body, url, hint)


class NetworkError(ApiError):
    """Network error communicating with GitHub."""

    def __init__(self, details: str = "") -> None:
        message = "Network error connecting to GitHub"
        if details:
            message = f"{message}: {details}"
        super().__init__(
            message,
            "Check your internet connection and proxy settings, then try again",
        )


class ApiTimeoutError(ApiError):
    """A request to GitHub timed out."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            f"GitHub API request timed out after {timeout_seconds:g} seconds",
            "Raise --timeout or check your network",
        )


class DecodeError(ApiError):
    """A response could not be decoded into the expected shape."""

    def __init__(self, details: str, url: str | None = None) -> None:
        location = f" from {url}" if url else ""
        super().__init__(f"Unexpected API response{location}: {details}")


# File Errors


class FileError(IssueSyncError):
    """Base class for local file related errors."""


class WriteError(FileError):
    """Failed to create a directory or write a file."""

    def __init__(self, file_path: str, details: str = "") -> None:
        message = f"Failed to write '{file_path}'"
        if details:
            message = f"{message}: {details}"
        super().__init__(
            message,
            "Check that you have write permissions for the destination directory",
        )


# Configuration Errors


class ConfigError(IssueSyncError):
    """Configuration error."""


class InvalidRepositoryError(ConfigError):
    """Invalid repository format."""

    def __init__(self, repo: str) -> None:
        super().__init__(
            f"Invalid repository format: '{repo}'",
            "Use format 'owner/repo', e.g., 'octocat/Hello-World'",
        )


class RepositoryNotFoundError(ConfigError):
    """No GitHub repository could be found among the git remotes."""

    def __init__(self, source: str) -> None:
        super().__init__(
            f"No GitHub repo found among git remotes in '{source}'",
            "Pass the repository explicitly as owner/repo",
        )
