"""
Run Configuration
=================

Holds the values that drive one reap run, as collected by the command line.

Classes
-------
ReaperConfig
    Validated configuration for a single run.

Example
-------
>>> from datetime import timedelta
>>> from instance_reaper.core.config import ReaperConfig
>>>
>>> config = ReaperConfig(
...     api_url="https://api.example.com",
...     username="admin",
...     password="secret",
...     service_name="p-mysql",
...     expiry_interval=timedelta(hours=24),
... )
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from instance_reaper.core.exceptions import ConfigurationError

MAXIMUM_RESULTS_PER_PAGE = 50

# The v2 API rejects results-per-page above 100.
PAGE_SIZE_LIMIT = 100


@dataclass(frozen=True)
class ReaperConfig:
    """
    Configuration for a single reap run.

    Attributes:
        api_url: Base URL of the Cloud Foundry API (https)
        username: User to authenticate as
        password: Password for the user
        service_name: Label of the service whose instances are reaped
        expiry_interval: Age after which an instance is expired
        reap: Delete expired instances; otherwise only report them
        recursive: Also delete bindings, keys and routes of reaped instances
        skip_ssl_validation: Disable TLS certificate verification
        page_size: Results per page, also the capacity of stage channels
    """

    api_url: str
    username: str
    password: str
    service_name: str
    expiry_interval: timedelta
    reap: bool = False
    recursive: bool = False
    skip_ssl_validation: bool = False
    page_size: int = MAXIMUM_RESULTS_PER_PAGE

    def __post_init__(self) -> None:
        if not self.service_name:
            raise ConfigurationError("Service name must not be empty")
        if self.expiry_interval < timedelta(0):
            raise ConfigurationError(
                f"Expiry interval must not be negative: {self.expiry_interval}"
            )
        if not 1 <= self.page_size <= PAGE_SIZE_LIMIT:
            raise ConfigurationError(
                f"Page size must be between 1 and {PAGE_SIZE_LIMIT}",
                details={"page_size": self.page_size},
            )

    @property
    def dry_run(self) -> bool:
        """True when expired instances are only reported."""
        return not self.reap

    def __repr__(self) -> str:
        return (
            f"ReaperConfig(api_url='{self.api_url}', "
            f"username='{self.username}', "
            f"service_name='{self.service_name}', "
            f"expiry_interval={self.expiry_interval!r}, "
            f"reap={self.reap}, recursive={self.recursive})"
        )
