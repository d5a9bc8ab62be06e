"""Append-only chat history per identity."""
from __future__ import annotations

from medfinder import db as db_module
from medfinder.models import ChatMessage
from medfinder.services.identity import Identity, owner_columns, owner_filter


def append_sync(identity: Identity, text: str, is_from_bot: bool = False) -> ChatMessage:
    with db_module.SessionLocal() as db:
        message = ChatMessage(
            message=text,
            is_from_bot=is_from_bot,
            **owner_columns(identity),
        )
        db.add(message)
        db.commit()
        return message


def list_sync(identity: Identity, limit: int = 50) -> list[ChatMessage]:
    """Most recent ``limit`` messages, newest first."""
    if limit <= 0:
        return []
    with db_module.SessionLocal() as db:
        return (
            db.query(ChatMessage)
            .filter(owner_filter(ChatMessage, identity))
            .order_by(ChatMessage.created_at.desc())
            .limit(limit)
            .all()
        )


__all__ = ["append_sync", "list_sync"]
