from tests.utils.auth import anon_headers


def test_search_metrics(client):
    resp = client.get("/v1/search", params={"q": "aspirin"}, headers=anon_headers())
    assert resp.status_code == 200
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    body = metrics.text
    assert "search_requests_total" in body
    assert "search_latency_seconds_bucket" in body


def test_chat_metrics(client):
    headers = anon_headers()
    for _ in range(5):
        client.post("/v1/chat/messages", headers=headers, json={"message": "hi"})
    body = client.get("/metrics").text
    assert 'chat_messages_total{author="user"}' in body
    assert 'chat_messages_total{author="bot"}' in body
    assert "quota_reject_total" in body
