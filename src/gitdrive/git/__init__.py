"""Git command execution, repository handles and output parsing."""

from .bare import BareRepository
from .diff_parser import DiffParser, parse_diff
from .locator import find_root
from .log_parser import LogParser, parse_log
from .matcher import DiffMatch, match_hunks
from .models import (
    AuthOptions,
    ChangeType,
    CloneOptions,
    Commit,
    File,
    FileDiffDetail,
    Hunk,
    RepositoryOptions,
    SSHKey,
)
from .repository import Repository
from .runner import CommandRunner
from .urls import trim_url, with_credentials

__all__ = [
    "AuthOptions",
    "BareRepository",
    "ChangeType",
    "CloneOptions",
    "CommandRunner",
    "Commit",
    "DiffMatch",
    "DiffParser",
    "File",
    "FileDiffDetail",
    "Hunk",
    "LogParser",
    "Repository",
    "RepositoryOptions",
    "SSHKey",
    "find_root",
    "match_hunks",
    "parse_diff",
    "parse_log",
    "trim_url",
    "with_credentials",
]
