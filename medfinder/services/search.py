"""Combined medicine + pharmacy search and the per-identity search history."""
from __future__ import annotations

import asyncio
from typing import Any, NamedTuple

from medfinder import db as db_module
from medfinder.exceptions import ValidationError
from medfinder.models import Medicine, Pharmacy, UserSearch
from medfinder.services import catalog
from medfinder.services.catalog import Location
from medfinder.services.identity import Identity, owner_columns, owner_filter


class SearchResult(NamedTuple):
    medicines: list[Medicine]
    pharmacies: list[Pharmacy]


def normalize_query(query: str | None) -> str:
    text = (query or "").strip()
    if not text:
        raise ValidationError("Query parameter 'q' is required")
    return text


async def search(query: str | None, location: Location | None = None) -> SearchResult:
    """Run both matchers concurrently; the first failure propagates."""
    text = normalize_query(query)
    medicines, pharmacies = await asyncio.gather(
        asyncio.to_thread(catalog.search_medicines_sync, text),
        asyncio.to_thread(catalog.search_pharmacies_sync, text, location),
    )
    return SearchResult(medicines=medicines, pharmacies=pharmacies)


def record_search_sync(
    identity: Identity,
    query: str,
    results: dict[str, Any] | None = None,
) -> UserSearch:
    with db_module.SessionLocal() as db:
        record = UserSearch(query=query, results=results, **owner_columns(identity))
        db.add(record)
        db.commit()
        return record


def list_searches_sync(identity: Identity, limit: int = 20) -> list[UserSearch]:
    with db_module.SessionLocal() as db:
        return (
            db.query(UserSearch)
            .filter(owner_filter(UserSearch, identity))
            .order_by(UserSearch.created_at.desc())
            .limit(limit)
            .all()
        )


__all__ = [
    "SearchResult",
    "normalize_query",
    "search",
    "record_search_sync",
    "list_searches_sync",
]
