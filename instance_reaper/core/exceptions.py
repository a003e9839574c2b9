"""
Custom Exceptions for Instance Reaper
=====================================

This module defines the hierarchy of exceptions raised by the API client,
the expiry evaluator and the command line layer.

Exception Hierarchy
-------------------
::

    ReaperError (base)
    ├── ConfigurationError
    ├── AuthenticationError
    ├── InvalidTimestampError
    └── CloudFoundryError
        ├── TransportError
        ├── UnexpectedStatusError
        ├── MissingBodyError
        ├── UnreadableBodyError
        └── MalformedResponseError

Example
-------
>>> from instance_reaper.core.exceptions import CloudFoundryError
>>>
>>> try:
...     services = client.list_services_by_name("p-mysql")
... except CloudFoundryError as e:
...     print(f"API error: {e}")
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ReaperError(Exception):
    """
    Base exception for all Instance Reaper errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    details : dict, optional
        Additional context about the error.

    Attributes
    ----------
    message : str
        The error message.
    details : dict
        Additional error details.

    Example
    -------
    >>> raise ReaperError("Something went wrong", details={"code": 500})
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns
        -------
        dict
            Dictionary representation of the error.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(ReaperError):
    """
    Raised when the run configuration is invalid.

    Example
    -------
    >>> raise ConfigurationError("Page size must be between 1 and 100")
    """

    pass


class AuthenticationError(ReaperError):
    """
    Raised when an OAuth access token cannot be obtained.

    Example
    -------
    >>> raise AuthenticationError("/v2/info failure: HTTP status 503")
    """

    pass


class InvalidTimestampError(ReaperError):
    """
    Raised when a resource creation time is not a valid RFC 3339 timestamp.

    Example
    -------
    >>> raise InvalidTimestampError(
    ...     "invalid service instance creation time: 'yesterday'"
    ... )
    """

    pass


# =============================================================================
# Cloud Foundry API Exceptions
# =============================================================================


class CloudFoundryError(ReaperError):
    """
    Base exception for failed calls to the Cloud Foundry API.

    The endpoint is kept as an attribute rather than a detail because
    the message already names it.

    Parameters
    ----------
    message : str
        Human-readable error message.
    endpoint : str, optional
        The API endpoint that was being called.
    details : dict, optional
        Additional context about the error.
    """

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.endpoint = endpoint
        super().__init__(message, details)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["endpoint"] = self.endpoint
        return data


class TransportError(CloudFoundryError):
    """
    Raised when a request could not be sent or no response was received.

    Example
    -------
    >>> raise TransportError(
    ...     "GET /v2/services failed: connection refused",
    ...     endpoint="/v2/services",
    ... )
    """

    pass


class UnexpectedStatusError(CloudFoundryError):
    """
    Raised when the API answers with a status code other than the expected one.

    Parameters
    ----------
    message : str
        Human-readable error message.
    status_code : int
        HTTP status code that was received.
    endpoint : str, optional
        The API endpoint that was being called.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        endpoint: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, endpoint=endpoint)


class MissingBodyError(CloudFoundryError):
    """Raised when a successful response carries no body."""

    pass


class UnreadableBodyError(CloudFoundryError):
    """Raised when a response body cannot be read to the end."""

    pass


class MalformedResponseError(CloudFoundryError):
    """
    Raised when a response body is not the JSON document that was expected.

    Example
    -------
    >>> raise MalformedResponseError(
    ...     "invalid GET /v2/services response JSON: missing 'resources'"
    ... )
    """

    pass
