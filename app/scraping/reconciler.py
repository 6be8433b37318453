"""
Result classification, persistence and running counts for one batch.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

from app.domain.listing_scrape import BatchContext, BatchSummary, ExtractionResult
from app.scraping.errors import ListingPersistenceError
from app.scraping.logging_utils import log_event
from app.scraping.storage import ListingStorage

logger = logging.getLogger(__name__)


@dataclass
class BatchRun:
    """
    Mutable state of one batch, owned by the reconciling thread.
    """

    context: BatchContext
    results: list[ExtractionResult] = field(default_factory=list)
    saved: int = 0
    errors: int = 0
    retried: int = 0
    navigation_failed: list[str] = field(default_factory=list)
    save_failed: list[str] = field(default_factory=list)
    still_failing: list[str] = field(default_factory=list)
    started_at: float = field(default_factory=time.monotonic)

    @property
    def total(self) -> int:
        return len(self.context.urls)

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def final_failed_links(self) -> list[str]:
        return [*self.save_failed, *self.still_failing]

    def summary(self) -> BatchSummary:
        return BatchSummary(
            batch_id=self.context.batch_id,
            name=self.context.name,
            processed=self.processed,
            saved=self.saved,
            errors=self.errors,
            retried=self.retried,
            failed_links=self.final_failed_links,
            elapsed_seconds=round(time.monotonic() - self.started_at, 3),
        )


class ResultReconciler:
    """
    Drains result streams into a BatchRun.

    Navigation failures from the primary pass are queued for retry; save
    failures never are. A retry success turns one provisional error into a
    saved listing.
    """

    def __init__(self, *, storage: ListingStorage, run: BatchRun) -> None:
        self._storage = storage
        self._run = run

    @property
    def run(self) -> BatchRun:
        return self._run

    def reconcile_primary(self, results: Iterable[ExtractionResult]) -> None:
        for result in results:
            self._run.results.append(result)
            if result.ok:
                if self._save(result, phase="primary"):
                    self._run.saved += 1
                else:
                    self._run.errors += 1
                    self._run.save_failed.append(result.url)
                continue

            self._run.errors += 1
            self._run.navigation_failed.append(result.url)
            log_event(
                logger,
                logging.WARNING,
                "navigation_failed",
                batch_id=self._run.context.batch_id,
                url=result.url,
                error=result.error,
            )

    def reconcile_retry(self, results: Iterable[ExtractionResult]) -> None:
        for result in results:
            self._run.retried += 1
            if not result.ok:
                log_event(
                    logger,
                    logging.WARNING,
                    "retry_failed",
                    batch_id=self._run.context.batch_id,
                    url=result.url,
                    error=result.error,
                )
                self._run.still_failing.append(result.url)
                continue

            if self._save(result, phase="retry"):
                self._run.saved += 1
                self._run.errors -= 1
            else:
                self._run.save_failed.append(result.url)

    def record_final_failures(self) -> None:
        links = self._run.final_failed_links
        if not links:
            return
        try:
            self._storage.record_failed_links(links)
        except ListingPersistenceError as exc:
            error = str(exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error recording failed links batch_id=%s", self._run.context.batch_id)
            error = _describe(exc)
        else:
            log_event(
                logger,
                logging.INFO,
                "failed_links_recorded",
                batch_id=self._run.context.batch_id,
                links=len(links),
            )
            return

        log_event(
            logger,
            logging.ERROR,
            "failed_links_record_failed",
            batch_id=self._run.context.batch_id,
            links=len(links),
            error=error,
        )

    def _save(self, result: ExtractionResult, *, phase: str) -> bool:
        try:
            self._storage.update_listing(
                reference=result.reference,
                content=result.content,
                photos=result.photos,
            )
        except ListingPersistenceError as exc:
            error = str(exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error saving listing url=%s", result.url)
            error = _describe(exc)
        else:
            log_event(
                logger,
                logging.DEBUG,
                "listing_saved",
                batch_id=self._run.context.batch_id,
                phase=phase,
                reference=result.reference,
                photos=len(result.photos),
            )
            return True

        log_event(
            logger,
            logging.WARNING,
            "listing_save_failed",
            batch_id=self._run.context.batch_id,
            phase=phase,
            url=result.url,
            reference=result.reference,
            error=error,
        )
        return False


def _describe(exc: Exception) -> str:
    return f"{type(exc).__name__}: {exc}"
