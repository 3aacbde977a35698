"""Structured access to git repositories through the git executable."""

__version__ = "0.1.0"

# Import main components
from .exceptions import (
    CancelledError,
    ConfigError,
    ExecutionError,
    GitDriveError,
    NotFoundError,
    ParseError,
)
from .git import (
    BareRepository,
    CommandRunner,
    Commit,
    DiffParser,
    File,
    FileDiffDetail,
    Hunk,
    LogParser,
    Repository,
    RepositoryOptions,
    find_root,
    match_hunks,
    trim_url,
)
from .logging import configure_logging, get_logger

__all__ = [
    "BareRepository",
    "CancelledError",
    "CommandRunner",
    "Commit",
    "ConfigError",
    "DiffParser",
    "ExecutionError",
    "File",
    "FileDiffDetail",
    "GitDriveError",
    "Hunk",
    "LogParser",
    "NotFoundError",
    "ParseError",
    "Repository",
    "RepositoryOptions",
    "find_root",
    "configure_logging",
    "get_logger",
    "match_hunks",
    "trim_url",
]
