"""
issuesync: Mirror GitHub issues into a directory of Markdown files.

Each issue becomes ``<number>.md`` and each open pull request also gets
``<number>.patch``. File modification times serve as the sync cursor, so
repeated runs only fetch what changed since the last one.
"""

__version__ = "1.0.0"
