"""Domain-specific exceptions for salon metrics.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from SalonMetricsError for easy catching.
"""

from __future__ import annotations


class SalonMetricsError(Exception):
    """Base exception for all salon metrics errors.

    Users can catch this exception to handle any error raised by the
    package.
    """

    pass


class ConfigError(SalonMetricsError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Required connection settings are missing
    - Configuration values cannot be parsed
    """

    pass


class DataQualityError(SalonMetricsError):
    """Raised when input rows are unusable.

    This exception is raised when:
    - Required columns are missing from fetched rows
    """

    pass


class FetchFailure(SalonMetricsError):
    """Raised when a read from the record source fails.

    A failed read aborts the whole facet: no partial metrics are returned.

    Attributes:
        facet: Name of the facet being loaded when the read failed, if any.
        status_code: HTTP status of the failed response, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        facet: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.facet = facet
        self.status_code = status_code


class BookingError(SalonMetricsError):
    """Raised when a public booking request is incomplete."""

    pass
