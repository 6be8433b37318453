"""
app/services/listing_scrape_service.py

Validation, admission and background dispatch for listing scrape batches.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from functools import lru_cache
from typing import Any, Protocol

from fastapi import BackgroundTasks

from app.config import ScrapeSettings, get_scrape_settings
from app.domain.listing_scrape import BatchContext, BatchSummary, SelectorConfig
from app.scraping.admission import JobAdmissionGate
from app.scraping.driver import PageDriver, PlaywrightPageDriver
from app.scraping.engine import ListingScrapeEngine
from app.scraping.errors import AdmissionConflictError, ScrapeValidationError
from app.scraping.logging_utils import log_event
from app.scraping.storage import ListingStorage, SQLAlchemyListingStorage

logger = logging.getLogger(__name__)


class BatchTaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class FastAPIBackgroundTaskExecutor:
    def __init__(self, background_tasks: BackgroundTasks) -> None:
        self._background_tasks = background_tasks

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self._background_tasks.add_task(task, *args, **kwargs)


class InlineTaskExecutor:
    """Runs the batch on the calling thread (CLI and tests)."""

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        task(*args, **kwargs)


class ListingScrapeService:
    """
    Admits at most one batch at a time and runs it outside the request.
    """

    def __init__(
        self,
        *,
        settings: ScrapeSettings | None = None,
        driver: PageDriver | None = None,
        storage: ListingStorage | None = None,
        gate: JobAdmissionGate | None = None,
    ) -> None:
        self._settings = settings or get_scrape_settings()
        self._driver = driver or PlaywrightPageDriver(headless=self._settings.headless)
        if storage is None:
            from db.session import SessionLocal

            storage = SQLAlchemyListingStorage(session_factory=SessionLocal)
        self._storage = storage
        self._gate = gate or JobAdmissionGate()
        self._summary_lock = threading.Lock()
        self._last_summary: BatchSummary | None = None

    @property
    def running(self) -> bool:
        return self._gate.running

    @property
    def last_summary(self) -> BatchSummary | None:
        with self._summary_lock:
            return self._last_summary

    def submit(
        self,
        *,
        name: str,
        urls: Sequence[str],
        selectors: SelectorConfig,
        executor: BatchTaskExecutor,
    ) -> BatchContext:
        """
        Validate and admit a batch, then hand it to `executor`.

        Raises ScrapeValidationError or AdmissionConflictError; nothing is
        scheduled in either case.
        """

        cleaned = tuple(url.strip() for url in urls if url and url.strip())
        if not cleaned:
            raise ScrapeValidationError("No URLs provided")
        if selectors.is_empty:
            raise ScrapeValidationError("No content or photo selectors provided")

        if not self._gate.try_admit():
            log_event(logger, logging.WARNING, "batch_rejected", name=name, urls=len(cleaned))
            raise AdmissionConflictError("A scrape batch is already running.")

        context = BatchContext(name=name, urls=cleaned, selectors=selectors)
        log_event(
            logger,
            logging.INFO,
            "batch_admitted",
            batch_id=context.batch_id,
            name=name,
            urls=len(cleaned),
        )
        try:
            executor.submit(self._run_batch, context)
        except Exception:
            self._gate.release()
            raise
        return context

    def wait_until_idle(self) -> None:
        self._gate.wait_until_idle()

    def _run_batch(self, context: BatchContext) -> None:
        try:
            engine = ListingScrapeEngine(
                settings=self._settings,
                driver=self._driver,
                storage=self._storage,
            )
            summary = engine.run(context)
            with self._summary_lock:
                self._last_summary = summary
        except Exception:
            logger.exception("Listing scrape batch failed batch_id=%s name=%s", context.batch_id, context.name)
        finally:
            self._gate.release()


@lru_cache(maxsize=1)
def get_listing_scrape_service() -> ListingScrapeService:
    """
    Build and cache the process-wide listing scrape service.
    """

    return ListingScrapeService()
