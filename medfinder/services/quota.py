"""Weekly chat allowance for anonymous sessions.

Accounts are unlimited. Anonymous sessions get ``anon_weekly_chat_limit``
user-authored messages per week; the counter restarts at 1 on the first
message after a week boundary (Sunday 00:00 in ``quota_timezone``).
"""
from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from typing import NamedTuple
from zoneinfo import ZoneInfo

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from medfinder import db as db_module
from medfinder.config import Settings
from medfinder.exceptions import StoreError
from medfinder.models import AnonymousChatUsage
from medfinder.models.base import new_id
from medfinder.services.identity import Identity

settings = Settings()


class Admission(NamedTuple):
    allowed: bool
    remaining: int | None  # None means unlimited


class UsageResult(NamedTuple):
    """Outcome of an atomic check-and-increment."""
    accepted: bool
    count: int
    remaining: int | None
    week_start: datetime | None


class QuotaStatus(NamedTuple):
    unlimited: bool
    remaining_chats: int | None
    is_limit_reached: bool
    week_start: datetime | None


def _as_utc(value: datetime | str | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def week_start(now: datetime | None = None, tz_name: str | None = None) -> datetime:
    """Most recent Sunday midnight (local to ``tz_name``) at or before ``now``, as UTC."""
    tz = ZoneInfo(tz_name or settings.quota_timezone)
    current = _as_utc(now) or datetime.now(timezone.utc)
    local = current.astimezone(tz)
    days_since_sunday = (local.weekday() + 1) % 7
    start_date = local.date() - timedelta(days=days_since_sunday)
    return datetime.combine(start_date, time.min, tzinfo=tz).astimezone(timezone.utc)


def _effective_count(record: AnonymousChatUsage | None, boundary: datetime) -> int:
    if record is None:
        return 0
    stored = _as_utc(record.week_start)
    if stored is None or stored < boundary:
        return 0
    return record.chat_count or 0


def _get_record(db: Session, session_id: str) -> AnonymousChatUsage | None:
    return db.query(AnonymousChatUsage).filter_by(session_id=session_id).first()


def check_admission_sync(identity: Identity, now: datetime | None = None) -> Admission:
    """Whether ``identity`` may send another chat message this week."""
    if identity.is_account:
        return Admission(True, None)
    limit = settings.anon_weekly_chat_limit
    boundary = week_start(now)
    with db_module.SessionLocal() as db:
        record = _get_record(db, identity.id)
        remaining = max(0, limit - _effective_count(record, boundary))
    return Admission(remaining > 0, remaining)


def quota_status_sync(identity: Identity, now: datetime | None = None) -> QuotaStatus:
    if identity.is_account:
        return QuotaStatus(True, None, False, None)
    admission = check_admission_sync(identity, now)
    return QuotaStatus(
        unlimited=False,
        remaining_chats=admission.remaining,
        is_limit_reached=not admission.allowed,
        week_start=week_start(now),
    )


def _upsert_usage(
    db: Session,
    session_id: str,
    *,
    ip_address: str | None,
    boundary: datetime,
    now: datetime,
    limit: int | None,
):
    """Insert-or-bump the session counter in one statement.

    With ``limit`` set, the update only applies while the stored week is stale
    or the count is below the limit. Returns the written ``(chat_count,
    week_start)`` row, or None when the update was refused.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise StoreError(f"Unsupported database dialect: {dialect}")

    table = AnonymousChatUsage.__table__
    stmt = insert(table).values(
        id=new_id(),
        session_id=session_id,
        ip_address=ip_address,
        chat_count=1,
        week_start=boundary,
        created_at=now,
        last_used_at=now,
    )
    stale = table.c.week_start < stmt.excluded.week_start
    where = None
    if limit is not None:
        where = or_(stale, table.c.chat_count < limit)
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.session_id],
        set_={
            "chat_count": case((stale, 1), else_=table.c.chat_count + 1),
            "week_start": case((stale, stmt.excluded.week_start), else_=table.c.week_start),
            "last_used_at": stmt.excluded.last_used_at,
            "ip_address": func.coalesce(stmt.excluded.ip_address, table.c.ip_address),
        },
        where=where,
    ).returning(table.c.chat_count, table.c.week_start)
    return db.execute(stmt).first()


def _apply_usage(
    identity: Identity,
    *,
    ip_address: str | None,
    now: datetime | None,
    limit: int | None,
) -> UsageResult:
    current = _as_utc(now) or datetime.now(timezone.utc)
    boundary = week_start(current)
    allotment = settings.anon_weekly_chat_limit
    with db_module.SessionLocal() as db:
        row = _upsert_usage(
            db,
            identity.id,
            ip_address=ip_address,
            boundary=boundary,
            now=current,
            limit=limit,
        )
        if row is None:
            record = _get_record(db, identity.id)
            db.commit()
            count = record.chat_count if record else allotment
            stored_week = _as_utc(record.week_start) if record else boundary
            return UsageResult(False, count, 0, stored_week)
        # Count as written by this statement
        count, stored_week = row.chat_count, _as_utc(row.week_start)
        db.commit()
    return UsageResult(True, count, max(0, allotment - count), stored_week)


def record_usage_sync(
    identity: Identity,
    ip_address: str | None = None,
    now: datetime | None = None,
) -> UsageResult:
    """Count one user-authored message unconditionally. No-op for accounts."""
    if identity.is_account:
        return UsageResult(True, 0, None, None)
    return _apply_usage(identity, ip_address=ip_address, now=now, limit=None)


def consume_chat_sync(
    identity: Identity,
    ip_address: str | None = None,
    now: datetime | None = None,
) -> UsageResult:
    """Admit and count one message atomically.

    ``accepted`` is False when the weekly allowance is already used up; the
    stored counter is left untouched in that case.
    """
    if identity.is_account:
        return UsageResult(True, 0, None, None)
    return _apply_usage(
        identity,
        ip_address=ip_address,
        now=now,
        limit=settings.anon_weekly_chat_limit,
    )


__all__ = [
    "Admission",
    "UsageResult",
    "QuotaStatus",
    "week_start",
    "check_admission_sync",
    "quota_status_sync",
    "record_usage_sync",
    "consume_chat_sync",
]
