"""
Markdown rendering of an issue and its comments.
"""

from collections.abc import Sequence

from .models import Comment, Issue


def format_header(issue: Issue) -> str:
    """
    Format the title line of an issue document.

    Returns:
        Header like ``#12: Crash on start [bug] [CLOSED]``
    """
    parts = [f"#{issue.number}: {issue.title.strip()}"]
    parts.extend(f"[{label}]" for label in issue.labels)
    if issue.is_closed:
        parts.append("[CLOSED]")
    return " ".join(parts).rstrip()


class IssueFormatter:
    """Renders one issue with its comments as a Markdown document."""

    def format(self, issue: Issue, comments: Sequence[Comment] = ()) -> str:
        lines = self.format_body(issue)
        for comment in comments:
            lines.extend(self.format_comment(comment))
        return "\n".join(lines) + "\n"

    def format_body(self, issue: Issue) -> list[str]:
        header = format_header(issue)
        return [
            header,
            "=" * len(header),
            "",
            f"## {issue.user}",
            "",
            issue.body,
        ]

    def format_comment(self, comment: Comment) -> list[str]:
        return [
            "",
            f"## {comment.user}",
            "",
            comment.body,
        ]
