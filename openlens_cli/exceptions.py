"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class OpenLensError(Exception):
    """Base exception for all application-specific errors."""


class TransportError(OpenLensError):
    """
    Raised when the job service cannot be reached or answers with a body
    that cannot be understood.
    """


class RemoteRejected(OpenLensError):
    """Raised when the job service answers with a non-success status code."""

    def __init__(self, code: int, message: str | None = None):
        self.code = code
        super().__init__(message or f"Service rejected the request (HTTP {code})")


class PollError(OpenLensError):
    """Raised when a job status query fails. Never retried."""


class DownloadError(OpenLensError):
    """Raised when the finished artifact cannot be transferred to local storage."""


class PermissionDenied(OpenLensError):
    """Raised when the user refuses access to the media library."""


class PersistenceError(OpenLensError):
    """Raised when the artifact cannot be copied into or registered with the media library."""


class ConfigurationError(OpenLensError):
    """Raised for issues related to configuration loading or validation."""
