"""
Reap Pipeline Module
====================

Finds expired instances of the free plans of a service and deletes or
reports them, as four concurrently running stages::

    source ──> plan filter ──> instance filter ──> sink
       │            │                │               │
       └────────────┴─── errors ─────┴───────────────┘ (closed by the sink)

- **source** resolves the service name; only the first match is used.
- **plan filter** lists the service's plans and passes the free ones.
- **instance filter** streams each free plan's instances and passes
  those older than the expiry interval.
- **sink** deletes each expired instance when reaping, and reports it
  either way.

Every stage records its failures on the shared error channel instead of
raising them. The calling thread reads that channel until the sink
closes it, writing each error to the report; the run fails iff at least
one error was recorded.

Classes
-------
Reaper
    Runs the pipeline against a :class:`CloudFoundryClient`.

Example
-------
>>> reaper = Reaper(cf_client, report=ReportWriter(sys.stdout))
>>> result = reaper.reap("p-mysql", timedelta(hours=24), reap=False)
>>> print("ok" if result.succeeded else "failed")

Notes
-----
There is no cancellation. An error does not stop the other stages, and
a stalled API call blocks its stage indefinitely.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Callable, Optional

from instance_reaper.cloudfoundry.models import ServicePlan
from instance_reaper.core.channel import Channel
from instance_reaper.core.config import MAXIMUM_RESULTS_PER_PAGE, ReaperConfig
from instance_reaper.core.exceptions import CloudFoundryError, InvalidTimestampError
from instance_reaper.reaper.expiry import is_expired, utc_now
from instance_reaper.reaper.result import PipelineError, ReapResult, Stage
from instance_reaper.reporters.report_writer import ReportWriter

# Module logger
logger = logging.getLogger(__name__)

STAGE_COUNT = len(Stage)


class Reaper:
    """
    Reaps expired instances of the free plans of a service.

    Parameters
    ----------
    cf_client : CloudFoundryClient
        API client; shared by all stages.
    now : callable, default=utc_now
        Clock returning an aware datetime, injected so runs are
        deterministic under test.
    report : ReportWriter, optional
        Destination of the plain-text report. Defaults to stdout.
    page_size : int, default=50
        Capacity of the channels between stages.

    Examples
    --------
    Dry run:

    >>> result = Reaper(cf).reap("p-mysql", timedelta(hours=24))

    Delete expired instances and their bindings:

    >>> result = Reaper(cf).reap(
    ...     "p-mysql", timedelta(hours=24), reap=True, recursive=True
    ... )
    >>> print(f"Deleted {len(result.deleted)} of {len(result.expired)}")
    """

    def __init__(
        self,
        cf_client,
        now: Callable[[], datetime] = utc_now,
        report: Optional[ReportWriter] = None,
        page_size: int = MAXIMUM_RESULTS_PER_PAGE,
    ) -> None:
        self.cf_client = cf_client
        self.now = now
        self.report = report or ReportWriter()
        self.page_size = page_size

    def reap(
        self,
        service_name: str,
        expiry_interval: timedelta,
        reap: bool = False,
        recursive: bool = False,
    ) -> ReapResult:
        """
        Run the pipeline once.

        Parameters
        ----------
        service_name : str
            Label of the service.
        expiry_interval : timedelta
            Instances older than this are expired.
        reap : bool, default=False
            Delete expired instances; otherwise only report them.
        recursive : bool, default=False
            Also delete bindings, service keys and routes of deleted
            instances.

        Returns
        -------
        ReapResult
            Expired and deleted instances and every recorded error.
            ``succeeded`` is False iff any stage recorded an error.
        """
        logger.info(
            f"Reaping '{service_name}' instances older than {expiry_interval} "
            f"(reap={reap}, recursive={recursive})"
        )
        run = _ReapRun(self, service_name, expiry_interval, reap, recursive)
        result = run.execute()
        logger.info(
            f"Reap complete: {len(result.expired)} expired, "
            f"{len(result.deleted)} deleted, {len(result.errors)} errors"
        )
        return result

    def run(self, config: ReaperConfig) -> ReapResult:
        """Run the pipeline with the values of ``config``."""
        return self.reap(
            config.service_name,
            config.expiry_interval,
            reap=config.reap,
            recursive=config.recursive,
        )

    def __repr__(self) -> str:
        return f"Reaper(cf_client={self.cf_client!r}, page_size={self.page_size})"


class _ReapRun:
    """State of one pipeline run, shared by its stage threads."""

    def __init__(
        self,
        reaper: Reaper,
        service_name: str,
        expiry_interval: timedelta,
        reap: bool,
        recursive: bool,
    ) -> None:
        self.cf = reaper.cf_client
        self.now = reaper.now
        self.report = reaper.report
        self.page_size = reaper.page_size
        self.service_name = service_name
        self.expiry_interval = expiry_interval
        self.reap = reap
        self.recursive = recursive
        self.result = ReapResult(service_name, reap=reap, recursive=recursive)
        self.errors: Channel = Channel()

    def execute(self) -> ReapResult:
        services: Channel = Channel(maxsize=1)
        plans: Channel = Channel(maxsize=self.page_size)
        instances: Channel = Channel(maxsize=self.page_size)

        with ThreadPoolExecutor(
            max_workers=STAGE_COUNT, thread_name_prefix="reap-stage"
        ) as executor:
            futures = [
                executor.submit(
                    self._run_stage, Stage.SOURCE,
                    self._services_with_name, None, services,
                ),
                executor.submit(
                    self._run_stage, Stage.PLAN_FILTER,
                    self._free_plans_of, services, plans,
                ),
                executor.submit(
                    self._run_stage, Stage.INSTANCE_FILTER,
                    self._expired_instances_of, plans, instances,
                ),
                executor.submit(
                    self._run_stage, Stage.SINK,
                    self._delete, instances, self.errors,
                ),
            ]

            for error in self.errors:
                self.report.write_line(str(error))
                self.result.errors.append(error)

            for future in futures:
                future.result()

        self.result.complete()
        return self.result

    # =========================================================================
    # Stage Plumbing
    # =========================================================================

    def _record(self, stage: Stage, message: str) -> None:
        logger.debug(f"{stage.value} error: {message}")
        self.errors.put(PipelineError(stage, message))

    def _run_stage(
        self,
        stage: Stage,
        body: Callable,
        source: Optional[Channel],
        output: Channel,
    ) -> None:
        """
        Run one stage body and always close its output.

        A stage that fails unexpectedly records the failure and drains
        its input so that upstream stages can still finish.
        """
        try:
            if source is None:
                body(output)
            else:
                body(source, output)
        except Exception as e:
            logger.exception(f"{stage.value} stage failed")
            self._record(stage, f"{stage.value} stage failed unexpectedly: {e}")
            if source is not None:
                for _ in source:
                    pass
        finally:
            output.close()

    # =========================================================================
    # Stages
    # =========================================================================

    def _services_with_name(self, output: Channel) -> None:
        try:
            services = self.cf.list_services_by_name(self.service_name)
        except CloudFoundryError as e:
            self._record(Stage.SOURCE, str(e))
            return

        if not services:
            self.report.write_line(
                f"No services of type '{self.service_name}' found"
            )
            return

        if len(services) > 1:
            logger.warning(
                f"{len(services)} services labelled '{self.service_name}'; "
                f"using {services[0].metadata.id}"
            )
        output.put(services[0])

    def _free_plans_of(self, services: Channel, output: Channel) -> None:
        for service in services:
            try:
                plans = self.cf.list_plans(service.metadata.id)
            except CloudFoundryError as e:
                self._record(Stage.PLAN_FILTER, str(e))
                continue

            for plan in plans:
                if plan.is_free:
                    output.put(plan)
                else:
                    logger.debug(f"Skipping non-free plan {plan.name}")

    def _expired_instances_of(self, plans: Channel, output: Channel) -> None:
        for plan in plans:
            instances, fetch_errors = self.cf.stream_instances(plan.metadata.id)
            if not self._pass_expired(plan, instances, output):
                instances.discard()
                fetch_errors.discard()
                continue

            for error in fetch_errors:
                self._record(Stage.INSTANCE_FILTER, str(error))

    def _pass_expired(
        self,
        plan: ServicePlan,
        instances: Channel,
        output: Channel,
    ) -> bool:
        """
        Pass the expired instances of one plan downstream.

        Returns False if an instance could not be evaluated; the caller
        then discards the rest of that plan's stream.
        """
        for instance in instances:
            try:
                expired = is_expired(
                    instance.metadata.created_at, self.expiry_interval, self.now
                )
            except InvalidTimestampError as e:
                self._record(Stage.INSTANCE_FILTER, str(e))
                logger.debug(f"Abandoning instances of plan {plan.name}")
                return False

            if expired:
                output.put(instance)
        return True

    def _delete(self, instances: Channel, _errors: Channel) -> None:
        for instance in instances:
            if self.reap:
                try:
                    self.cf.delete_instance(instance.id, self.recursive)
                except CloudFoundryError as e:
                    self._record(
                        Stage.SINK,
                        f"unable to delete service instance: "
                        f"{instance.name} {instance.id} ({e})",
                    )
                else:
                    self.result.deleted.append(instance.id)

            self.result.expired.append(instance)
            self.report.write_line(f"{instance.name} {instance.id}")
