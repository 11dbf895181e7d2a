from fastapi.testclient import TestClient

from livetimers.main import app


def test_health_and_metrics():
    with TestClient(app) as client:
        assert client.get("/health").json() == {"ok": True}
        metrics = client.get("/metrics")
        assert metrics.status_code == 200
        assert "http_requests_total" in metrics.text or "http_request" in metrics.text
