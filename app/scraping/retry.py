"""
Second, smaller and slower pass over URLs that failed to load.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from app.domain.listing_scrape import BatchContext, ExtractionResult
from app.scraping.driver import PageDriver
from app.scraping.extraction import ExtractionTimeouts
from app.scraping.logging_utils import log_event
from app.scraping.worker_pool import Extractor, WorkerPool

logger = logging.getLogger(__name__)


class RetryCoordinator:
    """
    Re-runs navigation failures with the batch's own selectors.
    """

    def __init__(
        self,
        *,
        driver: PageDriver,
        concurrency: int = 5,
        inter_task_delay_seconds: float = 0.2,
        timeouts: ExtractionTimeouts | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        self._pool = WorkerPool(
            driver=driver,
            concurrency=concurrency,
            inter_task_delay_seconds=inter_task_delay_seconds,
            name="retry",
            extractor=extractor,
            timeouts=timeouts,
        )

    def run(self, context: BatchContext, failed_urls: Sequence[str]) -> Iterator[ExtractionResult]:
        log_event(
            logger,
            logging.INFO,
            "retry_pass_started",
            batch_id=context.batch_id,
            urls=len(failed_urls),
        )
        return self._pool.run(context.tasks(list(failed_urls)))
