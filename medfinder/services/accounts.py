"""Profiles of authenticated accounts, as mirrored from the auth provider."""
from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from medfinder import db as db_module
from medfinder.exceptions import NotFoundError
from medfinder.models import User
from medfinder.models.base import utcnow


def get_user_sync(user_id: str) -> User:
    with db_module.SessionLocal() as db:
        user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def upsert_user(db: Session, **fields: Any) -> User:
    user = db.get(User, fields["id"])
    if user is None:
        user = User(**fields)
        db.add(user)
    else:
        for key, value in fields.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
    db.flush()
    return user


__all__ = ["get_user_sync", "upsert_user"]
