"""
Cloud Foundry API Client
========================

Typed access to the v2 endpoints the reaper needs, built on the
paginated fetcher and the authenticated HTTP client.

Classes
-------
CloudFoundryClient
    Lists services, plans and instances and deletes instances.

Example
-------
>>> from instance_reaper.core.http_client import AuthenticatedClient, build_session
>>> from instance_reaper.cloudfoundry.client import CloudFoundryClient
>>>
>>> cf = CloudFoundryClient(
...     AuthenticatedClient(build_session()),
...     api_url="https://api.example.com",
...     access_token=token,
... )
>>> services = cf.list_services_by_name("p-mysql")
>>> plans = cf.list_plans(services[0].metadata.id)

Notes
-----
All operations except :meth:`CloudFoundryClient.delete_instance` are
idempotent reads. Nothing is retried.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Tuple
from urllib.parse import quote

from instance_reaper.cloudfoundry.models import Service, ServiceInstance, ServicePlan
from instance_reaper.cloudfoundry.paginator import fetch_all, fetch_streaming
from instance_reaper.core.channel import Channel
from instance_reaper.core.config import MAXIMUM_RESULTS_PER_PAGE
from instance_reaper.core.exceptions import (
    MalformedResponseError,
    MissingBodyError,
    TransportError,
    UnexpectedStatusError,
    UnreadableBodyError,
)
from instance_reaper.core.http_client import AuthenticatedClient

# Module logger
logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_ACCEPTED = 202
HTTP_NO_CONTENT = 204

# Asynchronous deletes answer 202; synchronous ones 204.
DELETE_SUCCESS_CODES = frozenset({HTTP_ACCEPTED, HTTP_NO_CONTENT})


class CloudFoundryClient:
    """
    Client for the Cloud Foundry v2 API.

    Parameters
    ----------
    auth_client : AuthenticatedClient
        Transport used for every request.
    api_url : str
        Base URL of the API, e.g. ``https://api.example.com``.
    access_token : str
        OAuth access token obtained by :func:`get_oauth_token`.
    page_size : int, default=50
        ``results-per-page`` of list requests, and capacity of the
        channels returned by :meth:`stream_instances`.

    Notes
    -----
    Safe for concurrent use by the pipeline threads: each call is an
    independent request.
    """

    def __init__(
        self,
        auth_client: AuthenticatedClient,
        api_url: str,
        access_token: str,
        page_size: int = MAXIMUM_RESULTS_PER_PAGE,
    ) -> None:
        self.auth_client = auth_client
        self.api_url = api_url.rstrip("/")
        self.access_token = access_token
        self.page_size = page_size

    # =========================================================================
    # Resource Operations
    # =========================================================================

    def list_services_by_name(self, service_name: str) -> List[Service]:
        """
        List services whose label is ``service_name``.

        Returns
        -------
        list of Service
            Matching services, in API order.

        Raises
        ------
        CloudFoundryError
            If any page cannot be fetched.
        """
        endpoint = (
            f"/v2/services?q=label:{quote(service_name, safe='')}"
            f"&results-per-page={self.page_size}"
        )
        services = fetch_all(self.get_json, endpoint, Service.from_dict)
        logger.debug(f"Found {len(services)} services labelled '{service_name}'")
        return services

    def list_plans(self, service_id: str) -> List[ServicePlan]:
        """
        List every plan of a service.

        Raises
        ------
        CloudFoundryError
            If any page cannot be fetched.
        """
        endpoint = (
            f"/v2/services/{service_id}/service_plans"
            f"?results-per-page={self.page_size}"
        )
        plans = fetch_all(self.get_json, endpoint, ServicePlan.from_dict)
        logger.debug(f"Found {len(plans)} plans of service {service_id}")
        return plans

    def stream_instances(self, plan_id: str) -> Tuple[Channel, Channel]:
        """
        Stream the instances of a plan as pages arrive.

        Returns
        -------
        tuple
            (channel of ServiceInstance, channel of at most one
            CloudFoundryError). See :func:`fetch_streaming`.
        """
        endpoint = (
            f"/v2/service_plans/{plan_id}/service_instances"
            f"?results-per-page={self.page_size}"
        )
        return fetch_streaming(
            self.get_json,
            endpoint,
            ServiceInstance.from_dict,
            buffer_size=self.page_size,
        )

    def delete_instance(self, instance_id: str, recursive: bool) -> None:
        """
        Delete a service instance without waiting for completion.

        Parameters
        ----------
        instance_id : str
            GUID of the instance.
        recursive : bool
            Also delete the instance's bindings, service keys and routes.

        Raises
        ------
        TransportError
            If the request cannot be sent.
        UnexpectedStatusError
            If the API answers anything but 202 or 204.
        """
        endpoint = (
            f"/v2/service_instances/{instance_id}"
            f"?accepts_incomplete=true&async=true"
            f"&recursive={'true' if recursive else 'false'}"
        )
        try:
            status = self.auth_client.do_authenticated_delete(
                self._url(endpoint), self.access_token
            )
        except TransportError as e:
            raise TransportError(
                f"DELETE {endpoint} failed: {e}", endpoint=endpoint
            ) from e

        if status not in DELETE_SUCCESS_CODES:
            raise UnexpectedStatusError(
                f"DELETE {endpoint} failed: HTTP status {status}",
                status_code=status,
                endpoint=endpoint,
            )
        logger.info(f"Deleted service instance {instance_id} (HTTP {status})")

    # =========================================================================
    # Request Helpers
    # =========================================================================

    def _url(self, endpoint: str) -> str:
        """Resolve an API-relative ``endpoint``; absolute URLs pass through."""
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return self.api_url + endpoint

    def get_json(self, endpoint: str) -> Any:
        """
        GET one endpoint and decode its JSON body.

        Raises
        ------
        TransportError
            If the request cannot be sent.
        UnexpectedStatusError
            If the status is not 200.
        MissingBodyError
            If the response has no body.
        UnreadableBodyError
            If the body cannot be read.
        MalformedResponseError
            If the body is not valid JSON.
        """
        try:
            body, status = self.auth_client.do_authenticated_get(
                self._url(endpoint), self.access_token
            )
        except TransportError as e:
            raise TransportError(
                f"GET {endpoint} failed: {e}", endpoint=endpoint
            ) from e

        if status != HTTP_OK:
            if body is not None:
                body.close()
            raise UnexpectedStatusError(
                f"GET {endpoint} failed: HTTP status {status}",
                status_code=status,
                endpoint=endpoint,
            )

        if body is None:
            raise MissingBodyError(
                f"GET {endpoint} response body missing", endpoint=endpoint
            )

        try:
            content = body.read()
        except OSError as e:
            raise UnreadableBodyError(
                f"cannot read GET {endpoint} response body: {e}",
                endpoint=endpoint,
            ) from e

        try:
            return json.loads(content)
        except ValueError as e:
            raise MalformedResponseError(
                f"invalid GET {endpoint} response JSON: {e}",
                endpoint=endpoint,
            ) from e

    def __repr__(self) -> str:
        return (
            f"CloudFoundryClient(api_url='{self.api_url}', "
            f"page_size={self.page_size})"
        )
