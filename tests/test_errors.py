from medfinder import db as db_module
from medfinder.exceptions import QuotaExceededError, StoreError, ValidationError
from tests.utils.auth import anon_headers


def test_uninitialized_store_is_500(client, monkeypatch):
    monkeypatch.setattr(db_module, "_session_factory", None)
    resp = client.get("/v1/chat/messages", headers=anon_headers())
    assert resp.status_code == 500
    assert resp.json() == {"code": "STORE_ERROR", "message": "Internal storage error"}


def test_unknown_route_uses_error_shape(client):
    resp = client.get("/v1/nothing-here")
    assert resp.status_code == 404
    assert resp.json() == {"code": "HTTP_404", "message": "Not Found"}


def test_invalid_body_is_bad_request(client):
    resp = client.post("/v1/chat/messages", headers=anon_headers(), json={})
    assert resp.status_code == 400
    assert resp.json() == {"code": "BAD_REQUEST", "message": "Invalid request"}


def test_quota_payload():
    assert QuotaExceededError().to_payload() == {
        "code": "QUOTA_EXCEEDED",
        "message": "Weekly free chat limit reached. Sign in to keep chatting.",
        "remainingChats": 0,
        "isLimitReached": True,
    }


def test_error_status_codes():
    assert ValidationError("x").status_code == 400
    assert StoreError("x").status_code == 500
