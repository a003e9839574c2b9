"""
Reap Pipeline
=============

Expiry evaluation and the four-stage pipeline that finds and deletes
expired service instances.

See Also
--------
instance_reaper.reaper.pipeline : Stage layout and error aggregation.
"""

from instance_reaper.reaper.expiry import is_expired, parse_timestamp, utc_now
from instance_reaper.reaper.pipeline import Reaper
from instance_reaper.reaper.result import PipelineError, ReapResult, Stage

__all__ = [
    "Reaper",
    "ReapResult",
    "PipelineError",
    "Stage",
    "is_expired",
    "parse_timestamp",
    "utc_now",
]
