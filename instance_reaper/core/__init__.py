"""
Core Infrastructure Components
==============================

Foundational pieces shared by the API client and the pipeline:

- :class:`ReaperConfig` - Validated configuration of one run
- :class:`Channel` - Bounded, closable queue between pipeline stages
- :class:`AuthenticatedClient` - Bearer-token HTTP transport
- Exception hierarchy for error handling
- Logging setup

Exceptions
----------
ReaperError
    Base exception for all Instance Reaper errors.
ConfigurationError
    Raised when the run configuration is invalid.
AuthenticationError
    Raised when no access token can be obtained.
InvalidTimestampError
    Raised when a creation time cannot be parsed.
CloudFoundryError
    Base exception for failed API calls, with one subclass per failure kind.

See Also
--------
instance_reaper.cloudfoundry : API client built on these components.
instance_reaper.reaper : The reap pipeline.
"""

from instance_reaper.core.channel import Channel, ChannelClosedError
from instance_reaper.core.config import (
    MAXIMUM_RESULTS_PER_PAGE,
    PAGE_SIZE_LIMIT,
    ReaperConfig,
)
from instance_reaper.core.exceptions import (
    AuthenticationError,
    CloudFoundryError,
    ConfigurationError,
    InvalidTimestampError,
    MalformedResponseError,
    MissingBodyError,
    ReaperError,
    TransportError,
    UnexpectedStatusError,
    UnreadableBodyError,
)
from instance_reaper.core.http_client import (
    AuthenticatedClient,
    ResponseBody,
    build_session,
)

__all__ = [
    # Configuration
    "ReaperConfig",
    "MAXIMUM_RESULTS_PER_PAGE",
    "PAGE_SIZE_LIMIT",
    # Channels
    "Channel",
    "ChannelClosedError",
    # HTTP
    "AuthenticatedClient",
    "ResponseBody",
    "build_session",
    # Exceptions - Base
    "ReaperError",
    "ConfigurationError",
    "AuthenticationError",
    "InvalidTimestampError",
    # Exceptions - API
    "CloudFoundryError",
    "TransportError",
    "UnexpectedStatusError",
    "MissingBodyError",
    "UnreadableBodyError",
    "MalformedResponseError",
]
