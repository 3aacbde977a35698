"""Custom exceptions for gitdrive."""

from typing import Any, Dict, List, Optional


class GitDriveError(Exception):
    """Base exception for gitdrive errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """Initialize with message, optional details, and cause."""
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

        # Set the cause for proper exception chaining
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """String representation with details."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message

    @classmethod
    def from_exception(cls, message: str, cause: Exception, details: Optional[Dict[str, Any]] = None):
        """Create exception with proper chaining from another exception."""
        return cls(message, details, cause)


class ExecutionError(GitDriveError):
    """Raised when the git executable exits with a nonzero status."""

    def __init__(
        self,
        message: str,
        exit_code: int,
        stderr: str,
        command: Optional[List[str]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            details={"exit_code": exit_code, "command": command or [], "stderr": stderr},
            cause=cause,
        )
        self.exit_code = exit_code
        self.stderr = stderr
        self.command = command or []

    def mentions(self, *needles: str) -> bool:
        """Check whether stderr contains any of ``needles`` (case-insensitive)."""
        stderr = self.stderr.lower()
        return any(needle.lower() in stderr for needle in needles)


class ParseError(GitDriveError):
    """Raised when git output does not have the expected shape."""
    pass


class NotFoundError(GitDriveError):
    """Raised when a file, branch, tag, revision or repository root is absent."""
    pass


class ConfigError(GitDriveError):
    """Raised for invalid repositories or invalid configuration."""
    pass


class CancelledError(GitDriveError):
    """Raised when a git command is cancelled or exceeds its deadline."""
    pass
