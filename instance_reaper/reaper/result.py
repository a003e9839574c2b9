"""
Results of a reap run.

Provides the error record shared by all pipeline stages and the summary
returned to the caller once the pipeline has drained.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from instance_reaper.cloudfoundry.models import ServiceInstance


class Stage(Enum):
    """Pipeline stage an error originated in."""

    SOURCE = "source"
    PLAN_FILTER = "plan_filter"
    INSTANCE_FILTER = "instance_filter"
    SINK = "sink"


@dataclass(frozen=True)
class PipelineError:
    """
    A failure recorded by one pipeline stage.

    Attributes:
        stage: Stage that recorded the failure
        message: Human-readable description, as written to the report
    """

    stage: Stage
    message: str

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"stage": self.stage.value, "message": self.message}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ReapResult:
    """
    Summary of one reap run.

    Attributes:
        service_name: Service whose instances were considered
        reap: Whether expired instances were deleted
        recursive: Whether deletes cascaded to bindings, keys and routes
        expired: Expired instances in the order they reached the sink
        deleted: IDs of instances whose delete was accepted
        errors: Every error recorded by any stage
        start_time: When the run started
        end_time: When the pipeline drained
    """

    service_name: str
    reap: bool
    recursive: bool
    expired: List[ServiceInstance] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    errors: List[PipelineError] = field(default_factory=list)
    start_time: datetime = field(default_factory=_utcnow)
    end_time: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        """True iff no stage recorded an error."""
        return not self.errors

    @property
    def failed_deletes(self) -> int:
        """Number of expired instances a delete was attempted for but failed."""
        if not self.reap:
            return 0
        return len(self.expired) - len(self.deleted)

    def complete(self) -> None:
        """Mark the run as complete."""
        self.end_time = _utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "service_name": self.service_name,
            "reap": self.reap,
            "recursive": self.recursive,
            "succeeded": self.succeeded,
            "expired": [instance.to_dict() for instance in self.expired],
            "deleted": list(self.deleted),
            "errors": [error.to_dict() for error in self.errors],
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }
