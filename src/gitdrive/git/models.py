"""Data models for commits, files and diffs."""

from datetime import datetime
from enum import Enum
from re import Pattern
from typing import Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ChangeType(str, Enum):
    """Types of file changes in git commits."""
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    TYPE_CHANGED = "T"
    UNMERGED = "U"
    UNKNOWN = "X"
    BROKEN = "B"

    @classmethod
    def from_status(cls, status: str) -> "ChangeType":
        """Map a git status code such as ``M`` or ``R100`` to a change type."""
        if not status:
            return cls.UNKNOWN
        try:
            return cls(status[0].upper())
        except ValueError:
            return cls.UNKNOWN


class Hunk(BaseModel):
    """One ``@@`` section of a unified diff."""
    model_config = ConfigDict(frozen=True)

    header: str
    content: str = ""
    added_lines: List[str] = Field(default_factory=list)
    removed_lines: List[str] = Field(default_factory=list)


class FileDiffDetail(BaseModel):
    """Parsed hunks of a single file diff, in diff order."""
    model_config = ConfigDict(frozen=True)

    hunks: List[Hunk] = Field(default_factory=list)

    def matches(self, pattern: Union[str, Pattern[str]]):
        """Search added and removed lines for ``pattern``.

        Returns a ``DiffMatch`` of the matching hunks and whether any added
        or removed line matched.
        """
        from .matcher import match_hunks

        return match_hunks(self, pattern)


class File(BaseModel):
    """A file touched by a commit."""
    model_config = ConfigDict(frozen=True)

    filename: str
    status: ChangeType = ChangeType.UNKNOWN
    diff: str = ""
    diff_detail: FileDiffDetail = Field(default_factory=FileDiffDetail)


class Commit(BaseModel):
    """Represents git commit information."""
    model_config = ConfigDict(frozen=True)

    long_hash: str
    hash: str
    author: str
    subject: str
    body: str = ""
    date: datetime
    files: Dict[str, File] = Field(default_factory=dict)


class SSHKey(BaseModel):
    """Private key material injected into git's ssh transport."""
    model_config = ConfigDict(frozen=True)

    filename: str = "id_rsa"
    content: bytes


class AuthOptions(BaseModel):
    """Credentials used when cloning."""
    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None
    password: Optional[SecretStr] = None
    private_key: Optional[SSHKey] = None


class CloneOptions(BaseModel):
    """Optional settings for ``git clone``."""
    model_config = ConfigDict(frozen=True)

    recursive: bool = False
    no_strict_host_key_checking: bool = False
    auth: Optional[AuthOptions] = None


class RepositoryOptions(BaseModel):
    """Configuration of a repository handle, fixed at construction."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    url: Optional[str] = None
    ssh_key: Optional[SSHKey] = None
    verbose: bool = False
    logger: Optional[Callable[[str], None]] = None
    auth_username: Optional[str] = None
    auth_password: Optional[SecretStr] = None
    strict_host_key_checking: bool = True
    timeout: Optional[float] = Field(default=None, gt=0)
