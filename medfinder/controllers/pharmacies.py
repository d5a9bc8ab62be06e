import asyncio

from fastapi import APIRouter, Depends, Query

from medfinder.dependencies import ErrorResponse, rate_limit
from medfinder.schemas import PharmacyOut
from medfinder.services import catalog

router = APIRouter(prefix="/pharmacies", tags=["pharmacies"])


@router.get(
    "/search",
    response_model=list[PharmacyOut],
    responses={400: {"model": ErrorResponse}},
    dependencies=[Depends(rate_limit)],
)
async def search_pharmacies(
    q: str = "",
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
):
    location = catalog.make_location(lat, lng)
    rows = await asyncio.to_thread(
        catalog.search_pharmacies_sync, q.strip(), location
    )
    return [PharmacyOut.model_validate(r) for r in rows]


@router.get(
    "/{pharmacy_id}",
    response_model=PharmacyOut,
    responses={404: {"model": ErrorResponse}},
)
async def get_pharmacy(pharmacy_id: str):
    pharmacy = await asyncio.to_thread(catalog.get_pharmacy_sync, pharmacy_id)
    return PharmacyOut.model_validate(pharmacy)
