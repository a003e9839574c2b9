"""
Cloud Foundry Resource Models
=============================

Read-only views of the v2 API resources the reaper works with, built
from deserialized JSON responses.

Every v2 resource has the shape::

    {
      "metadata": {"guid": "...", "created_at": "2015-01-01T10:00:00Z"},
      "entity": {...}
    }

and every list response::

    {"next_url": "/v2/...?page=2" | null, "resources": [...]}

Classes
-------
Metadata
    Identity and creation time of a resource.
Service
    A service offering.
ServicePlan
    A pricing plan of a service.
ServiceInstance
    A provisioned instance of a plan.
Page
    One page of a paginated list response.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

T = TypeVar("T")


class ResourceFormatError(ValueError):
    """Raised when a JSON document does not have the expected shape."""


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ResourceFormatError(f"{what} is not an object")
    return data


def _string(data: Mapping[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ResourceFormatError(f"{what} has no string '{key}'")
    return value


@dataclass(frozen=True)
class Metadata:
    """
    Identity and creation time of an API resource.

    Attributes:
        id: Resource GUID, unique within its resource type
        created_at: Creation time as sent by the API (RFC 3339), or an
            empty string when the API sent none
    """

    id: str
    created_at: str

    @classmethod
    def from_dict(cls, data: Any) -> "Metadata":
        """Build from a ``metadata`` object."""
        data = _mapping(data, "metadata")
        created_at = data.get("created_at")
        if created_at is None:
            created_at = ""
        elif not isinstance(created_at, str):
            raise ResourceFormatError("metadata 'created_at' is not a string")
        return cls(id=_string(data, "guid", "metadata"), created_at=created_at)


def _entity(data: Mapping[str, Any]) -> Mapping[str, Any]:
    return _mapping(data.get("entity"), "entity")


@dataclass(frozen=True)
class Service:
    """A service offering, e.g. ``p-mysql``."""

    metadata: Metadata

    @classmethod
    def from_dict(cls, data: Any) -> "Service":
        data = _mapping(data, "service")
        return cls(metadata=Metadata.from_dict(data.get("metadata")))


@dataclass(frozen=True)
class ServicePlan:
    """
    A pricing plan of a service.

    Only free plans are eligible for reaping.
    """

    metadata: Metadata
    name: str
    is_free: bool

    @classmethod
    def from_dict(cls, data: Any) -> "ServicePlan":
        data = _mapping(data, "service plan")
        entity = _entity(data)
        is_free = entity.get("free", False)
        if not isinstance(is_free, bool):
            raise ResourceFormatError("service plan 'free' is not a boolean")
        return cls(
            metadata=Metadata.from_dict(data.get("metadata")),
            name=_string(entity, "name", "service plan"),
            is_free=is_free,
        )


@dataclass(frozen=True)
class ServiceInstance:
    """A provisioned instance of a service plan; the unit of reaping."""

    metadata: Metadata
    name: str

    @classmethod
    def from_dict(cls, data: Any) -> "ServiceInstance":
        data = _mapping(data, "service instance")
        return cls(
            metadata=Metadata.from_dict(data.get("metadata")),
            name=_string(_entity(data), "name", "service instance"),
        )

    @property
    def id(self) -> str:
        return self.metadata.id

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary."""
        return {
            "id": self.metadata.id,
            "name": self.name,
            "created_at": self.metadata.created_at,
        }


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    One page of a list response.

    Attributes:
        items: Resources on this page, in API order
        next_page_token: ``next_url`` of the response, or None on the last page
    """

    items: List[T]
    next_page_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, parse: Callable[[Any], T]) -> "Page[T]":
        """
        Build a page, parsing each resource with ``parse``.

        An absent, null or empty ``next_url`` marks the last page.
        """
        data = _mapping(data, "response")
        resources = data.get("resources")
        if not isinstance(resources, list):
            raise ResourceFormatError("response has no 'resources' list")
        next_url = data.get("next_url")
        if next_url is not None and not isinstance(next_url, str):
            raise ResourceFormatError("response 'next_url' is not a string")
        return cls(
            items=[parse(resource) for resource in resources],
            next_page_token=next_url or None,
        )
