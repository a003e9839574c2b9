"""
Instance Reaper: Expired Service Instance Cleaner
=================================================

Finds instances of the free plans of a Cloud Foundry service that are
older than a given age, and deletes them or reports them.

Modules
-------
core
    Shared infrastructure (configuration, channels, HTTP client, errors, logging)
cloudfoundry
    Cloud Foundry v2 API models, pagination, client and login
reaper
    Expiry evaluation and the concurrent reap pipeline
reporters
    Output formatters (plain-text report, Rich terminal, JSON)

Example
-------
>>> from datetime import timedelta
>>> from instance_reaper import CloudFoundryClient, Reaper
>>> from instance_reaper.core.http_client import AuthenticatedClient, build_session
>>>
>>> cf = CloudFoundryClient(AuthenticatedClient(build_session()), api_url, token)
>>> result = Reaper(cf).reap("p-mysql", timedelta(hours=24))
>>> print(f"Found {len(result.expired)} expired instances")
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

# Public API
from instance_reaper.cloudfoundry.client import CloudFoundryClient
from instance_reaper.core.config import ReaperConfig
from instance_reaper.core.exceptions import ReaperError
from instance_reaper.reaper.pipeline import Reaper
from instance_reaper.reaper.result import PipelineError, ReapResult, Stage

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Core classes
    "CloudFoundryClient",
    "Reaper",
    "ReaperConfig",
    "ReapResult",
    "PipelineError",
    "Stage",
    "ReaperError",
]
