"""Concurrent per-region availability probing for a single service."""

import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, wait
from contextlib import closing
from typing import Dict, List, Optional, Sequence

from ..core.error_handling import RemoteQueryError
from ..data_sources.aws_ssm_client import services_path
from ..progress import NullProgressSink, ProgressSink
from .base import (BaseProcessor, ProcessingContext, ProcessingError,
                   ProcessingValidationError)


class AvailabilityProbeError(ProcessingError):
    """One or more regions could not be probed.

    Attributes:
        service: Service that was being probed
        failures: Region -> RemoteQueryError for every failed probe
        partial: Results for regions that completed successfully
        cancelled: Regions never probed (or stopped mid-probe) after a failure
    """

    def __init__(
        self,
        service: str,
        failures: Dict[str, RemoteQueryError],
        partial: Dict[str, bool],
        cancelled: List[str],
    ):
        self.service = service
        self.failures = failures
        self.partial = partial
        self.cancelled = cancelled
        details = ", ".join(f"{region} ({err.cause or err})" for region, err in failures.items())
        super().__init__(
            f"Failed to probe {len(failures)} region(s) for service {service}: {details}"
        )


class AvailabilityProber(BaseProcessor):
    """Checks in which regions a service is published.

    Regions are probed on a thread pool of ``config.max_concurrency`` workers.
    The dispatch loop emits a progress event for a region, then waits for a free
    slot, then submits that region's probe; at most ``max_concurrency`` probes
    are ever in flight.

    A page failure inside a probe does not end the process. With ``fail_fast``
    (default) the first failure cancels outstanding work: running probes stop
    at their next page and no further regions are dispatched. Without it every
    region is still probed. Either way the call raises AvailabilityProbeError
    carrying the per-region failures and the partial results.
    """

    def __init__(self, context: ProcessingContext):
        super().__init__(context)
        self.max_concurrency = context.config.max_concurrency

    def validate_input(self, input_data) -> bool:
        """Validate a ``(service, regions)`` pair.

        Raises:
            ProcessingValidationError: On an empty service name or a region list
                that is not a sequence of unique strings
        """
        service, regions = input_data

        if not isinstance(service, str) or not service:
            raise ProcessingValidationError("Service name must be a non-empty string")
        if isinstance(regions, str):
            raise ProcessingValidationError("Regions must be a sequence of region codes")
        if not all(isinstance(region, str) and region for region in regions):
            raise ProcessingValidationError("Region codes must be non-empty strings")

        duplicates = sorted(r for r, count in Counter(regions).items() if count > 1)
        if duplicates:
            raise ProcessingValidationError(f"Duplicate regions: {duplicates}")

        return True

    def process(
        self,
        service: str,
        regions: Sequence[str],
        progress: Optional[ProgressSink] = None,
        fail_fast: bool = True,
    ) -> Dict[str, bool]:
        """Probe every region for ``service``.

        Args:
            service: Service code, e.g. "lambda"
            regions: Region codes to probe, in dispatch order (callers pass them sorted)
            progress: Sink receiving each region just before its probe is submitted
            fail_fast: Cancel outstanding probes after the first failure

        Returns:
            Region -> availability, one entry per input region, in input order

        Raises:
            ProcessingValidationError: If the input is invalid
            AvailabilityProbeError: If any region could not be probed
        """
        self.validate_input((service, regions))
        regions = list(regions)
        sink = progress if progress is not None else NullProgressSink()

        if not regions:
            return {}

        availability: Dict[str, bool] = {}
        availability_lock = threading.Lock()
        cancel = threading.Event() if fail_fast else None
        slots = threading.BoundedSemaphore(self.max_concurrency)

        def release_slot(_future):
            slots.release()

        def probe(region: str):
            try:
                available = self._probe_region(service, region, cancel)
            except RemoteQueryError:
                if cancel is not None:
                    cancel.set()
                raise
            if available is not None:
                with availability_lock:
                    availability[region] = available

        futures = {}
        with self.logger.timer(f"availability probe for {service}"):
            with ThreadPoolExecutor(
                max_workers=self.max_concurrency, thread_name_prefix="probe"
            ) as executor:
                for region in regions:
                    if cancel is not None and cancel.is_set():
                        break

                    sink.emit(region)

                    slots.acquire()
                    if cancel is not None and cancel.is_set():
                        slots.release()
                        break

                    future = executor.submit(probe, region)
                    future.add_done_callback(release_slot)
                    futures[future] = region

                wait(futures)

        failures: Dict[str, RemoteQueryError] = {}
        for future, region in futures.items():
            error = future.exception()
            if error is None:
                continue
            if not isinstance(error, RemoteQueryError):
                raise error
            failures[region] = error

        result = {region: availability[region] for region in regions if region in availability}

        if failures:
            self._record_outcome(False)
            cancelled = [r for r in regions if r not in result and r not in failures]
            self.logger.error(
                f"Availability probe for {service} failed",
                failed_regions=",".join(sorted(failures)),
                cancelled_regions=len(cancelled),
            )
            raise AvailabilityProbeError(service, failures, result, cancelled)

        self._record_outcome(True)
        self.logger.info(
            f"Probed {len(result)} regions for {service}",
            available=sum(1 for v in result.values() if v),
        )
        return result

    def _probe_region(
        self, service: str, region: str, cancel: Optional[threading.Event]
    ) -> Optional[bool]:
        """Check one region's services path for ``service``.

        Returns:
            True/False, or None if cancelled before the answer was known

        Raises:
            RemoteQueryError: If a page cannot be fetched
        """
        if cancel is not None and cancel.is_set():
            return None

        self.logger.debug(f"Probing {region} for {service}")
        pages = self.ssm_client.iter_children_pages(services_path(region))
        with closing(pages):
            for page in pages:
                if service in page:
                    self.logger.debug(f"{service} available in {region}")
                    return True
                if cancel is not None and cancel.is_set():
                    self.logger.debug(f"Probe of {region} cancelled")
                    return None

        return False
