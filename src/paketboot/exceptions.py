"""
Custom exceptions for paketboot.

This module defines domain-specific exceptions that provide better error
categorization and more informative error messages for users and developers.
"""

import requests


class PaketBootError(Exception):
    """
    Base exception for all paketboot errors.

    All custom exceptions in paketboot should inherit from this class
    to allow for easy catching of all application-specific errors.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PaketBootError):
    """
    Exception raised when configuration is invalid.

    This includes:
    - Strategies wired into an invalid fallback arrangement
    - Configuration file parsing errors
    - Invalid configuration values
    """

    pass


# =============================================================================
# Download Errors
# =============================================================================


class DownloadError(PaketBootError):
    """
    Base exception for download-related errors.

    Attributes:
        url: The URL that was being accessed when the error occurred.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url


class NetworkError(DownloadError):
    """
    Exception raised for network-class failures.

    Covers unreachable sources and remote-service errors during version
    lookup or download. These are the failures a fallback strategy or the
    local cache may recover from.
    """

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(PaketBootError):
    """
    Exception raised when validation fails.

    Attributes:
        field: The name of the field that failed validation.
        value: The value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


class VersionError(ValidationError):
    """Exception raised when a version string cannot be parsed."""

    pass


# Failures a caching strategy may answer from the local cache.
NETWORK_ERRORS = (requests.RequestException, NetworkError)

# Failures that let a fallback chain move on to its next strategy.
RECOVERABLE_ERRORS = (requests.RequestException, DownloadError, OSError)
