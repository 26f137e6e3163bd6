"""Error types."""

from typing import Optional


class DeadwoodError(Exception):
    """Base error."""


class ConfigError(DeadwoodError):
    """Invalid or incomplete configuration. Aborts the whole run."""


class StalenessError(DeadwoodError):
    """The staleness cutoff cannot be computed."""


class GitError(DeadwoodError):
    """Git operation error."""


class GitHubError(DeadwoodError):
    """GitHub API error."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        """Initialize error.

        Args:
            message: Error message, usually the ``message`` field of the API payload
            status: HTTP status code, if a response was received
        """
        super().__init__(message)
        self.message = message
        self.status = status


class SelectionError(DeadwoodError):
    """Selection input that cannot be interpreted."""


class MissingToolError(DeadwoodError):
    """A required external program is not installed."""
