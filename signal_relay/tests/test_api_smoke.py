from fastapi.testclient import TestClient
from signal_relay.app import app

client = TestClient(app)

def test_root_ok():
    r = client.get("/")
    assert r.status_code == 200
    body = r.json()
    assert body.get("name") == "Signal Relay"
    assert "services" in body
    assert body["endpoints"]["webhook"] == "/webhook"


def test_health_ok():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


def test_metrics_exposed():
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "relay_alerts_total" in r.text


def test_config_hides_credentials():
    r = client.get("/config")
    assert r.status_code == 200
    body = r.json()
    assert body["trading"]["leverage"] >= 1
    assert "BITGET_API_SECRET" not in r.text


def test_positions_without_relay():
    # Lifespan has not run, so no relay is registered
    r = client.get("/positions")
    assert r.status_code in (200, 503)
