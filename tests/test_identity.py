from medfinder.models import ChatMessage
from medfinder.services.identity import (
    Identity,
    owner_columns,
    owner_filter,
    resolve_identity,
)


def test_account_id_wins_over_session():
    identity = resolve_identity("user-1", "sess-1")
    assert identity == Identity("account", "user-1")
    assert identity.is_account
    assert identity.key == "account:user-1"


def test_anonymous_falls_back_to_session_token():
    identity = resolve_identity(None, "sess-1")
    assert identity == Identity("anonymous", "sess-1")
    assert not identity.is_account


def test_empty_account_id_is_anonymous():
    assert resolve_identity("", "sess-2").kind == "anonymous"


def test_owner_columns():
    assert owner_columns(Identity("account", "u")) == {"user_id": "u", "session_id": None}
    assert owner_columns(Identity("anonymous", "s")) == {"user_id": None, "session_id": "s"}


def test_owner_filter_targets_matching_column():
    account = str(owner_filter(ChatMessage, Identity("account", "u")))
    anonymous = str(owner_filter(ChatMessage, Identity("anonymous", "s")))
    assert "chat_messages.user_id" in account
    assert "chat_messages.session_id" in anonymous
