import asyncio

from fastapi import APIRouter, Depends, Query

from medfinder.dependencies import ErrorResponse, rate_limit
from medfinder.schemas import AvailabilityOut, MedicineOut, PharmacyOut
from medfinder.services import catalog
from medfinder.services.search import normalize_query

router = APIRouter(prefix="/medicines", tags=["medicines"])


@router.get(
    "/search",
    response_model=list[MedicineOut],
    responses={400: {"model": ErrorResponse}},
    dependencies=[Depends(rate_limit)],
)
async def search_medicines(q: str | None = None):
    text = normalize_query(q)
    rows = await asyncio.to_thread(catalog.search_medicines_sync, text)
    return [MedicineOut.model_validate(r) for r in rows]


@router.get(
    "/{medicine_id}",
    response_model=MedicineOut,
    responses={404: {"model": ErrorResponse}},
)
async def get_medicine(medicine_id: str):
    medicine = await asyncio.to_thread(catalog.get_medicine_sync, medicine_id)
    return MedicineOut.model_validate(medicine)


@router.get(
    "/{medicine_id}/availability",
    response_model=list[AvailabilityOut],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def medicine_availability(
    medicine_id: str,
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
):
    """Pharmacies holding the medicine in stock, nearest first when located."""
    location = catalog.make_location(lat, lng)
    rows = await asyncio.to_thread(
        catalog.medicine_availability_sync, medicine_id, location
    )
    return [
        AvailabilityOut(
            id=inv.id,
            medicine_id=inv.medicine_id,
            pharmacy_id=inv.pharmacy_id,
            price=float(inv.price),
            stock=inv.stock,
            last_updated=inv.last_updated,
            pharmacy=PharmacyOut.model_validate(pharmacy),
            medicine=MedicineOut.model_validate(medicine),
        )
        for inv, pharmacy, medicine in rows
    ]
