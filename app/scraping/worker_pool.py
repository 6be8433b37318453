"""
Fixed-size thread pool that fans extraction tasks out over browser sessions.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Iterator, Sequence

from app.domain.listing_scrape import ExtractionResult, ExtractionTask
from app.scraping.driver import PageDriver, PageSession
from app.scraping.errors import SessionOpenError
from app.scraping.extraction import ExtractionTimeouts, extract_listing
from app.scraping.logging_utils import log_event, timed_event

logger = logging.getLogger(__name__)

Extractor = Callable[[PageSession, ExtractionTask], ExtractionResult]

_CLOSED = object()


class WorkerPool:
    """
    Runs tasks on `concurrency` workers, each owning one page session.

    `run()` yields results in completion order while workers are still busy;
    the iterator ends once every worker has exited.
    """

    def __init__(
        self,
        *,
        driver: PageDriver,
        concurrency: int,
        inter_task_delay_seconds: float,
        name: str = "primary",
        extractor: Extractor | None = None,
        timeouts: ExtractionTimeouts | None = None,
    ) -> None:
        self._driver = driver
        self._concurrency = max(1, concurrency)
        self._delay = max(0.0, inter_task_delay_seconds)
        self._name = name
        self._timeouts = timeouts or ExtractionTimeouts()
        self._extractor = extractor or self._default_extractor

    def run(self, tasks: Sequence[ExtractionTask]) -> Iterator[ExtractionResult]:
        if not tasks:
            return iter(())

        task_queue: queue.Queue[ExtractionTask] = queue.Queue(maxsize=len(tasks))
        for task in tasks:
            task_queue.put_nowait(task)

        results: queue.Queue[object] = queue.Queue()
        worker_count = min(self._concurrency, len(tasks))
        workers = [
            threading.Thread(
                target=self._work,
                args=(index, task_queue, results),
                name=f"{self._name}-{index}",
                daemon=True,
            )
            for index in range(worker_count)
        ]
        log_event(
            logger,
            logging.INFO,
            "pool_started",
            pool=self._name,
            workers=worker_count,
            tasks=len(tasks),
        )
        for worker in workers:
            worker.start()

        def _close_when_drained() -> None:
            for worker in workers:
                worker.join()
            self._fail_remaining(task_queue, results)
            results.put(_CLOSED)

        threading.Thread(target=_close_when_drained, name=f"{self._name}-join", daemon=True).start()
        return self._drain(results)

    def _drain(self, results: queue.Queue[object]) -> Iterator[ExtractionResult]:
        with timed_event(logger, "pool_finished", pool=self._name) as outcome:
            outcome["results"] = 0
            while True:
                item = results.get()
                if item is _CLOSED:
                    break
                outcome["results"] += 1
                yield item  # type: ignore[misc]

    def _work(
        self,
        index: int,
        task_queue: queue.Queue[ExtractionTask],
        results: queue.Queue[object],
    ) -> None:
        try:
            session = self._driver.open_session()
        except SessionOpenError as exc:
            logger.error("%s worker %d: failed to open session: %s", self._name, index, exc)
            return

        with session:
            while True:
                try:
                    task = task_queue.get_nowait()
                except queue.Empty:
                    return

                try:
                    result = self._extractor(session, task)
                except Exception as exc:  # noqa: BLE001
                    logger.exception("%s worker %d: extraction crashed url=%s", self._name, index, task.url)
                    result = ExtractionResult(url=task.url, error=f"Failed to navigate: {exc}")
                results.put(result)

                if self._delay:
                    time.sleep(self._delay)

    @staticmethod
    def _fail_remaining(
        task_queue: queue.Queue[ExtractionTask],
        results: queue.Queue[object],
    ) -> None:
        # Left over only when no worker could open a session.
        while True:
            try:
                task = task_queue.get_nowait()
            except queue.Empty:
                return
            results.put(ExtractionResult(url=task.url, error="Failed to navigate: no browser session available"))

    def _default_extractor(self, session: PageSession, task: ExtractionTask) -> ExtractionResult:
        return extract_listing(session, task, timeouts=self._timeouts)
