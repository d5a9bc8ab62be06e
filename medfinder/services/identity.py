"""Attribute requests to an account or an anonymous session."""
from __future__ import annotations

from typing import NamedTuple

ACCOUNT = "account"
ANONYMOUS = "anonymous"


class Identity(NamedTuple):
    kind: str
    id: str

    @property
    def is_account(self) -> bool:
        return self.kind == ACCOUNT

    @property
    def key(self) -> str:
        """Stable string used for throttling and logging."""
        return f"{self.kind}:{self.id}"


def resolve_identity(account_id: str | None, session_token: str) -> Identity:
    """Prefer the authenticated account; fall back to the session token."""
    if account_id:
        return Identity(ACCOUNT, str(account_id))
    return Identity(ANONYMOUS, session_token)


def owner_filter(model, identity: Identity):
    """Column predicate selecting rows owned by ``identity``."""
    if identity.is_account:
        return model.user_id == identity.id
    return model.session_id == identity.id


def owner_columns(identity: Identity) -> dict[str, str | None]:
    if identity.is_account:
        return {"user_id": identity.id, "session_id": None}
    return {"user_id": None, "session_id": identity.id}


__all__ = [
    "ACCOUNT",
    "ANONYMOUS",
    "Identity",
    "resolve_identity",
    "owner_filter",
    "owner_columns",
]
