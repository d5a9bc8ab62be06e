import asyncio
import logging
import time
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from medfinder.config import Settings
from medfinder.dependencies import ErrorResponse, rate_limit
from medfinder.exceptions import ValidationError
from medfinder.metrics import search_latency_seconds, search_requests_total
from medfinder.schemas import CamelModel, MedicineOut, PharmacyOut
from medfinder.services import search as search_service
from medfinder.services.catalog import make_location
from medfinder.services.identity import Identity

router = APIRouter(tags=["search"])
logger = logging.getLogger(__name__)
settings = Settings()


class SearchResponse(CamelModel):
    medicines: list[MedicineOut]
    pharmacies: list[PharmacyOut]


class SearchHistoryItem(CamelModel):
    id: str
    query: str
    results: dict | None = None
    created_at: datetime


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def combined_search(
    q: str | None = None,
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    identity: Identity = Depends(rate_limit),
):
    """Search medicines and pharmacies with one query."""
    started = time.perf_counter()
    try:
        location = make_location(lat, lng)
        result = await search_service.search(q, location)
    except ValidationError:
        search_requests_total.labels(status="bad_request").inc()
        raise
    except Exception:
        search_requests_total.labels(status="error").inc()
        raise
    search_latency_seconds.observe(time.perf_counter() - started)

    summary = {
        "medicines": len(result.medicines),
        "pharmacies": len(result.pharmacies),
    }
    await asyncio.to_thread(
        search_service.record_search_sync, identity, q.strip(), summary
    )
    search_requests_total.labels(status="ok").inc()
    logger.info(
        "search identity=%s medicines=%d pharmacies=%d located=%s",
        identity.key,
        summary["medicines"],
        summary["pharmacies"],
        location is not None,
    )
    return SearchResponse(
        medicines=[MedicineOut.model_validate(m) for m in result.medicines],
        pharmacies=[PharmacyOut.model_validate(p) for p in result.pharmacies],
    )


@router.get("/search/history", response_model=list[SearchHistoryItem])
async def search_history(
    limit: int = Query(settings.search_history_limit, ge=0, le=100),
    identity: Identity = Depends(rate_limit),
):
    rows = await asyncio.to_thread(search_service.list_searches_sync, identity, limit)
    return [
        SearchHistoryItem(
            id=r.id,
            query=r.query,
            results=r.results,
            created_at=r.created_at,
        )
        for r in rows
    ]
