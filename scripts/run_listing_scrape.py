"""
Run one listing scrape batch from the command line.

The request file uses the same JSON body as `POST /scrape`.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from app.schemas.listing_scrape import BatchSummaryResponse, ScrapeBatchRequest
from app.scraping.errors import ScrapeValidationError
from app.services.listing_scrape_service import InlineTaskExecutor, ListingScrapeService


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a listing scrape batch synchronously.")
    parser.add_argument("request_file", help="Path to a JSON scrape request.")
    parser.add_argument(
        "--name",
        dest="name",
        default=None,
        help="Override the batch name from the request file.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        request = ScrapeBatchRequest.model_validate_json(Path(args.request_file).read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        parser.error(f"Invalid request file: {exc}")

    service = ListingScrapeService()
    try:
        service.submit(
            name=args.name or request.name,
            urls=request.urls,
            selectors=request.selectors.to_domain(),
            executor=InlineTaskExecutor(),
        )
    except ScrapeValidationError as exc:
        parser.error(str(exc))

    summary = service.last_summary
    if summary is None:
        return 1

    print(json.dumps(BatchSummaryResponse.from_summary(summary).model_dump(mode="json"), indent=2))
    return 0 if not summary.failed_links else 2


if __name__ == "__main__":
    raise SystemExit(main())
