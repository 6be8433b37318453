"""
Listing scrape engine: primary pass, retry pass, reconciliation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from app.config import ScrapeSettings
from app.domain.listing_scrape import BatchContext, BatchSummary, ExtractionResult
from app.scraping.driver import PageDriver
from app.scraping.extraction import ExtractionTimeouts
from app.scraping.logging_utils import log_event
from app.scraping.reconciler import BatchRun, ResultReconciler
from app.scraping.retry import RetryCoordinator
from app.scraping.storage import ListingStorage
from app.scraping.worker_pool import Extractor, WorkerPool

logger = logging.getLogger(__name__)


class ListingScrapeEngine:
    """
    Runs one admitted batch end to end and returns its summary.

    Results are reconciled while the primary pool is still scraping; the
    retry pass starts only after the primary stream is fully drained.
    """

    def __init__(
        self,
        *,
        settings: ScrapeSettings,
        driver: PageDriver,
        storage: ListingStorage,
        extractor: Extractor | None = None,
    ) -> None:
        self._settings = settings
        self._driver = driver
        self._storage = storage
        self._extractor = extractor
        self._timeouts = ExtractionTimeouts(
            navigation_seconds=settings.navigation_timeout_seconds,
            selector_seconds=settings.selector_timeout_seconds,
            click_seconds=settings.click_timeout_seconds,
        )

    def run(self, context: BatchContext) -> BatchSummary:
        run = BatchRun(context=context)
        reconciler = ResultReconciler(storage=self._storage, run=run)
        log_event(
            logger,
            logging.INFO,
            "batch_started",
            batch_id=context.batch_id,
            name=context.name,
            urls=run.total,
        )

        primary = WorkerPool(
            driver=self._driver,
            concurrency=self._settings.primary_workers,
            inter_task_delay_seconds=self._settings.primary_delay_seconds,
            name="primary",
            extractor=self._extractor,
            timeouts=self._timeouts,
        )
        primary_results = primary.run(context.tasks())
        try:
            reconciler.reconcile_primary(primary_results)
        finally:
            _exhaust(primary_results)

        if run.navigation_failed:
            retry = RetryCoordinator(
                driver=self._driver,
                concurrency=self._settings.retry_workers,
                inter_task_delay_seconds=self._settings.retry_delay_seconds,
                timeouts=self._timeouts,
                extractor=self._extractor,
            )
            retry_results = retry.run(context, run.navigation_failed)
            try:
                reconciler.reconcile_retry(retry_results)
            finally:
                _exhaust(retry_results)

        reconciler.record_final_failures()

        summary = run.summary()
        log_event(
            logger,
            logging.INFO,
            "batch_finished",
            batch_id=summary.batch_id,
            name=summary.name,
            processed=summary.processed,
            saved=summary.saved,
            errors=summary.errors,
            retried=summary.retried,
            failed_links=len(summary.failed_links),
            elapsed_seconds=summary.elapsed_seconds,
        )
        return summary


def _exhaust(results: Iterator[ExtractionResult]) -> None:
    # Blocks until the pool's workers have exited.
    for _ in results:
        pass
