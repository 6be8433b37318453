"""
JSON event lines for listing scrape batches.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Log `event` and its fields as one compact JSON object.

    Fields set to None are left out; UUIDs and other values json cannot
    encode are written with str().
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event}
    payload.update({key: value for key, value in fields.items() if value is not None})
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


@contextmanager
def timed_event(
    logger: logging.Logger,
    event: str,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> Iterator[dict[str, Any]]:
    """
    Log `event` with `elapsed_seconds` when the block exits.

    The yielded dict is merged into the event, so the block can report
    counts it only knows at the end.
    """

    started = time.monotonic()
    outcome: dict[str, Any] = {}
    try:
        yield outcome
    finally:
        log_event(
            logger,
            level,
            event,
            **fields,
            **outcome,
            elapsed_seconds=round(time.monotonic() - started, 3),
        )
