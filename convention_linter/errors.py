"""Error taxonomy for linter runs."""

from __future__ import annotations

from collections.abc import Sequence


class LinterError(RuntimeError):
    """Base class for errors that end a linter run with a failing exit code."""


class ConfigurationError(LinterError):
    """Raised when environment, provider, credential or template setup is invalid."""


class GitCommandError(LinterError):
    """Raised when a git command needed for diff retrieval fails."""

    def __init__(self, message: str, *, command: Sequence[str], stderr: str = "") -> None:
        super().__init__(message)
        self.command = tuple(command)
        self.stderr = stderr


class RemoteServiceError(LinterError):
    """Raised when a review or GitHub endpoint returns a non-success response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None,
        endpoint: str,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint
        self.body = body


class MalformedResponseError(LinterError):
    """Raised when a provider response lacks the expected reply text."""

    def __init__(self, message: str, *, endpoint: str) -> None:
        super().__init__(message)
        self.endpoint = endpoint
