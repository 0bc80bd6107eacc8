"""
DuplicateScanService -- Background duplicate detection with last-write-wins publishing.

Contract:
    The caller reports every change to its entity collections through
    ``notify_changed(snapshot)``.  When the trigger policy says the
    snapshot differs from the last one seen, a scan is submitted to a
    worker thread.  Completed scans publish a ``DuplicateReport`` to
    ``latest_report`` (and ``on_report``) unless a newer scan has already
    published.

Trigger policies:
    COLLECTION_SIZE -- rescan only when one of the four collection sizes
        changes.  In-place edits that keep every size the same do NOT
        trigger a rescan; the published report stays stale until the next
        size change.
    CONTENT -- rescan when the snapshot's content fingerprint changes,
        which closes that window at the cost of hashing every entity.

Non-goals:
    - No cancellation: a scan in flight always runs to completion.
    - No queueing or strict ordering: overlapping scans may run
      concurrently (max_workers > 1) and stale results are discarded.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from uuid import uuid4

from inventory_config.bridges import build_duplicate_detector
from inventory_config.schema import EngineSettings
from inventory_engines.duplicates import DuplicateDetector, DuplicateReport
from inventory_kernel.domain.entities import InventorySnapshot
from inventory_kernel.exceptions import ScanServiceStoppedError
from inventory_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.duplicate_scan")


class TriggerPolicy(str, Enum):
    """What counts as "the collections changed"."""

    COLLECTION_SIZE = "collection_size"
    CONTENT = "content"


class DuplicateScanService:
    """Runs ``DuplicateDetector.scan`` off the caller's thread.

    Contract:
        - ``notify_changed()`` returns True iff it scheduled a scan.
        - ``latest_report`` only ever moves forward in scan generation.
        - A failing scan is logged and publishes nothing; the service
          keeps accepting work.
    """

    def __init__(
        self,
        detector: DuplicateDetector | None = None,
        trigger_policy: TriggerPolicy = TriggerPolicy.COLLECTION_SIZE,
        max_workers: int = 1,
        on_report: Callable[[DuplicateReport], None] | None = None,
    ):
        self._detector = detector or DuplicateDetector()
        self._trigger_policy = TriggerPolicy(trigger_policy)
        self._on_report = on_report
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="duplicate-scan",
        )

        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._generation = 0
        self._published_generation = 0
        self._in_flight = 0
        self._last_signature: Hashable | None = None
        self._latest_report: DuplicateReport | None = None
        self._stopped = False

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        on_report: Callable[[DuplicateReport], None] | None = None,
    ) -> DuplicateScanService:
        return cls(
            detector=build_duplicate_detector(settings),
            trigger_policy=TriggerPolicy(settings.scan.trigger_policy),
            max_workers=settings.scan.max_workers,
            on_report=on_report,
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    @property
    def trigger_policy(self) -> TriggerPolicy:
        return self._trigger_policy

    @property
    def latest_report(self) -> DuplicateReport | None:
        with self._lock:
            return self._latest_report

    @property
    def is_scanning(self) -> bool:
        with self._lock:
            return self._in_flight > 0

    def notify_changed(self, snapshot: InventorySnapshot) -> bool:
        """Schedule a scan if ``snapshot`` differs under the trigger policy.

        The signature is recorded and the generation reserved in one
        critical section, so the newest signature always carries the
        highest generation.

        Raises:
            ScanServiceStoppedError: If ``shutdown()`` has been called.
        """
        signature = self._signature(snapshot)
        with self._lock:
            if signature == self._last_signature:
                logger.debug("duplicate_scan_not_triggered", extra={
                    "trigger_policy": self._trigger_policy.value,
                })
                return False
            generation = self._reserve_generation()
            self._last_signature = signature

        self._submit(generation, snapshot)
        return True

    def request_scan(self, snapshot: InventorySnapshot) -> Future:
        """Schedule a scan unconditionally.

        Raises:
            ScanServiceStoppedError: If ``shutdown()`` has been called.
        """
        with self._lock:
            generation = self._reserve_generation()
        return self._submit(generation, snapshot)

    def wait_for_idle(self, timeout: float | None = None) -> bool:
        """Block until no scan is in flight.  Returns False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: self._in_flight == 0, timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._stopped = True
        self._executor.shutdown(wait=wait)
        logger.info("duplicate_scan_service_stopped")

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _reserve_generation(self) -> int:
        # Caller holds self._lock
        if self._stopped:
            raise ScanServiceStoppedError()
        self._generation += 1
        self._in_flight += 1
        return self._generation

    def _submit(self, generation: int, snapshot: InventorySnapshot) -> Future:
        logger.info("duplicate_scan_scheduled", extra={
            "generation": generation,
            "trigger_policy": self._trigger_policy.value,
        })
        try:
            return self._executor.submit(self._run, generation, snapshot)
        except RuntimeError:
            # Executor shut down after the generation was reserved
            self._finish()
            raise ScanServiceStoppedError() from None

    def _signature(self, snapshot: InventorySnapshot) -> Hashable:
        if self._trigger_policy is TriggerPolicy.CONTENT:
            return snapshot.content_fingerprint()
        return snapshot.collection_sizes()

    def _finish(self) -> None:
        with self._idle:
            self._in_flight -= 1
            self._idle.notify_all()

    def _run(self, generation: int, snapshot: InventorySnapshot) -> DuplicateReport | None:
        try:
            with LogContext.bind(scan_id=str(uuid4())):
                try:
                    report = self._detector.scan(snapshot)
                except Exception:
                    logger.exception("duplicate_scan_failed", extra={
                        "generation": generation,
                    })
                    return None

                if self._publish(generation, report):
                    self._notify(report)
                return report
        finally:
            self._finish()

    def _publish(self, generation: int, report: DuplicateReport) -> bool:
        with self._lock:
            if generation < self._published_generation:
                logger.info("duplicate_scan_result_discarded", extra={
                    "generation": generation,
                    "published_generation": self._published_generation,
                })
                return False
            self._published_generation = generation
            self._latest_report = report

        logger.info("duplicate_report_published", extra={
            "generation": generation,
            "group_count": report.group_count,
        })
        return True

    def _notify(self, report: DuplicateReport) -> None:
        if self._on_report is None:
            return
        try:
            self._on_report(report)
        except Exception:
            logger.exception("duplicate_report_callback_failed")
