"""Error taxonomy for blocklist operations."""

from __future__ import annotations


class ExtensionBoundsError(ValueError):
    """Extension name length or custom count bound violated before any request."""


class ConfigError(ValueError):
    """Configuration file or override could not be loaded."""


class TransportError(OSError):
    """Request to the extension store failed or returned an error status."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return self.message


class StructuredServerError(TransportError):
    """Error response whose body carried a human-readable `statusMessage`."""

    def __init__(self, message: str, *, status_message: str, status: int | None = None) -> None:
        super().__init__(message, status=status)
        self.status_message = status_message
