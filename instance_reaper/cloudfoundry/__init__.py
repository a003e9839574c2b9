"""
Cloud Foundry API
=================

Models, pagination, client and login for the Cloud Foundry v2 API.

Classes
-------
CloudFoundryClient
    Lists services, plans and instances; deletes instances.
Service, ServicePlan, ServiceInstance, Metadata, Page
    Read-only resource models.

Functions
---------
get_oauth_token
    Obtain an access token from the API's UAA server.
fetch_all, fetch_streaming, iter_pages
    Follow ``next_url`` pagination.
"""

from instance_reaper.cloudfoundry.client import CloudFoundryClient
from instance_reaper.cloudfoundry.login import get_oauth_token
from instance_reaper.cloudfoundry.models import (
    Metadata,
    Page,
    Service,
    ServiceInstance,
    ServicePlan,
)
from instance_reaper.cloudfoundry.paginator import fetch_all, fetch_streaming, iter_pages

__all__ = [
    "CloudFoundryClient",
    "get_oauth_token",
    "Metadata",
    "Page",
    "Service",
    "ServiceInstance",
    "ServicePlan",
    "fetch_all",
    "fetch_streaming",
    "iter_pages",
]
