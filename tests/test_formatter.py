"""Tests for the Markdown document formatter."""

import pytest

from issuesync.formatter import IssueFormatter, format_header
from issuesync.models import Comment, Issue

from .conftest import raw_comment, raw_issue


class TestFormatHeader:
    """Tests for format_header."""

    def test_plain(self) -> None:
        issue = Issue.model_validate(raw_issue(12, title="Crash on start"))
        assert format_header(issue) == "#12: Crash on start"

    def test_labels_and_closed(self) -> None:
        issue = Issue.model_validate(
            raw_issue(12, title=" Crash on start  ", state="closed", labels=("bug", "ui"))
        )
        assert format_header(issue) == "#12: Crash on start [bug] [ui] [CLOSED]"

    def test_empty_title_has_no_trailing_space(self) -> None:
        issue = Issue.model_validate(raw_issue(4, title="   "))
        assert format_header(issue) == "#4:"


class TestIssueFormatter:
    """Tests for IssueFormatter."""

    @pytest.fixture
    def formatter(self) -> IssueFormatter:
        return IssueFormatter()

    def test_issue_without_comments(self, formatter: IssueFormatter) -> None:
        issue = Issue.model_validate(
            raw_issue(5, title="Bug", labels=("bug",), body="It crashes.", login="alice")
        )

        assert formatter.format(issue, []) == (
            "#5: Bug [bug]\n"
            "=============\n"
            "\n"
            "## alice\n"
            "\n"
            "It crashes.\n"
        )

    def test_issue_with_comments(self, formatter: IssueFormatter) -> None:
        issue = Issue.model_validate(
            raw_issue(3, title="Fix", state="closed", comments=2, body="Please fix.", login="bob")
        )
        comments = [
            Comment.model_validate(raw_comment("carol", "On it.")),
            Comment.model_validate(raw_comment("bob", "Thanks!\r\n")),
        ]

        assert formatter.format(issue, comments) == (
            "#3: Fix [CLOSED]\n"
            "================\n"
            "\n"
            "## bob\n"
            "\n"
            "Please fix.\n"
            "\n"
            "## carol\n"
            "\n"
            "On it.\n"
            "\n"
            "## bob\n"
            "\n"
            "Thanks!\n"
        )

    def test_underline_matches_header(self, formatter: IssueFormatter) -> None:
        issue = Issue.model_validate(raw_issue(1234, title="Ünïcode title", labels=("a b",)))
        header, underline = formatter.format(issue).splitlines()[:2]
        assert underline == "=" * len(header)

    def test_empty_body(self, formatter: IssueFormatter) -> None:
        issue = Issue.model_validate(raw_issue(1, title="T", body=None, login="u"))
        assert formatter.format(issue).endswith("## u\n\n\n")
