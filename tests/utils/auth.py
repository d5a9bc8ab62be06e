from __future__ import annotations

import uuid

from medfinder.config import Settings


def anon_headers(session_id: str | None = None) -> dict[str, str]:
    """Headers of an anonymous visitor with a fresh (or given) session token."""
    return {"X-Session-ID": session_id or uuid.uuid4().hex}


def account_headers(
    user_id: str | None = None,
    *,
    api_key: str | None = None,
    session_id: str | None = None,
) -> dict[str, str]:
    settings = Settings()
    headers = anon_headers(session_id)
    headers["X-User-ID"] = user_id or f"user-{uuid.uuid4().hex[:12]}"
    headers["X-API-Key"] = api_key or settings.api_key
    return headers
