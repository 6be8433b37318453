"""
app/api/routers/listing_scrape.py

Listing scrape batch endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from app.schemas.listing_scrape import (
    BatchSummaryResponse,
    ScrapeAcceptedResponse,
    ScrapeBatchRequest,
    ScrapeStatusResponse,
)
from app.scraping.errors import AdmissionConflictError, ScrapeValidationError
from app.services.listing_scrape_service import (
    FastAPIBackgroundTaskExecutor,
    ListingScrapeService,
    get_listing_scrape_service,
)

router = APIRouter(tags=["listing-scrape"])


@router.post(
    "/scrape",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ScrapeAcceptedResponse,
)
def submit_scrape_batch(
    request: ScrapeBatchRequest,
    background_tasks: BackgroundTasks,
    scrape_service: ListingScrapeService = Depends(get_listing_scrape_service),
) -> ScrapeAcceptedResponse:
    """
    Admit one batch and scrape it after the response is sent.
    """

    try:
        context = scrape_service.submit(
            name=request.name,
            urls=request.urls,
            selectors=request.selectors.to_domain(),
            executor=FastAPIBackgroundTaskExecutor(background_tasks),
        )
    except ScrapeValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except AdmissionConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    return ScrapeAcceptedResponse(
        batch_id=context.batch_id,
        name=context.name,
        total_urls=len(context.urls),
    )


@router.get("/scrape/status", response_model=ScrapeStatusResponse)
def get_scrape_status(
    wait: bool = Query(default=False, description="Block until the running batch finishes"),
    scrape_service: ListingScrapeService = Depends(get_listing_scrape_service),
) -> ScrapeStatusResponse:
    if wait:
        scrape_service.wait_until_idle()

    summary = scrape_service.last_summary
    return ScrapeStatusResponse(
        running=scrape_service.running,
        last_batch=BatchSummaryResponse.from_summary(summary) if summary else None,
    )
