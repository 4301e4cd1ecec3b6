import pytest
from fastapi.testclient import TestClient

from signal_relay.app import app
from signal_relay.config import settings
from signal_relay.api.dependencies.services import service_registry
from signal_relay.api.routes.webhook import decode_alert
from signal_relay.execution.position_engine import PositionEngine
from signal_relay.models.trade_models import ExchangeResult, TradingConfig
from signal_relay.services.notifier import TradeNotifier
from signal_relay.services.relay_service import AlertRelayService


class FakeExchange:
    def __init__(self):
        self.orders = []

    async def set_leverage(self, ticker, leverage, hold_side=None):
        return ExchangeResult(success=True, raw={"code": "00000"})

    async def submit_order(self, ticker, side, size_usd, margin_mode):
        self.orders.append((ticker, side.value))
        return ExchangeResult(success=True, raw={"code": "00000"}, order_id=f"ord-{len(self.orders)}")


@pytest.fixture
def relay():
    notifier = TradeNotifier()
    engine = PositionEngine(FakeExchange(), notifier, TradingConfig())
    relay = AlertRelayService(engine, default_ticker="BTCUSDT")
    service_registry.register("relay", relay)
    service_registry.register("notifier", notifier)
    yield relay
    service_registry.unregister("relay")
    service_registry.unregister("notifier")


@pytest.fixture
def client():
    return TestClient(app)


def _post_text(client, text, path="/webhook", **kwargs):
    return client.post(path, content=text, headers={"content-type": "text/plain", **kwargs.pop("headers", {})}, **kwargs)


def test_decode_alert_variants():
    assert decode_alert(b"Buy - BTC", "text/plain") == "Buy - BTC"
    assert decode_alert(b'{"signal": "ENTER-LONG"}', "application/json") == {"signal": "ENTER-LONG"}
    assert decode_alert(b"signal=ENTER-SHORT&secret=x", "application/x-www-form-urlencoded") == {"signal": "ENTER-SHORT", "secret": "x"}
    assert decode_alert(b"{not json", "application/json") == "{not json"


def test_text_alert_opens_position(client, relay):
    r = _post_text(client, "Buy - BTCUSDT.P, Price = 65000")
    assert r.status_code == 200
    assert r.json() == {"success": True, "events": 1}
    body = client.get("/positions").json()
    assert body["count"] == 1
    assert body["positions"]["BTCUSDT"]["side"] == "buy"


def test_root_path_accepts_alerts(client, relay):
    r = _post_text(client, "Sell - ETH", path="/")
    assert r.status_code == 200
    assert "ETHUSDT" in relay.positions()


def test_structured_json_alert(client, relay):
    r = client.post("/webhook", json={"signal": "ENTER-SHORT"})
    assert r.status_code == 200
    assert relay.positions()["BTCUSDT"]["side"] == "sell"
    r = client.post("/webhook", json={"signal": "SELL-CLOSE"})
    assert r.json()["events"] == 1
    assert relay.positions() == {}


def test_form_encoded_alert(client, relay):
    r = client.post("/webhook", data={"signal": "ENTER-LONG"})
    assert r.status_code == 200
    assert relay.positions()["BTCUSDT"]["side"] == "buy"


def test_unparseable_alert_still_acknowledged(client, relay):
    r = _post_text(client, "hello")
    assert r.status_code == 200
    assert r.json() == {"success": True, "events": 0}
    last = client.get("/alerts/last").json()
    assert last["data"]["raw"] == "hello"
    assert last["data"]["parsed"]["ticker"] is None


def test_handling_failure_still_acknowledged(client, relay, monkeypatch):
    async def boom(signal):
        raise RuntimeError("engine down")

    monkeypatch.setattr(relay.engine, "handle", boom)
    r = _post_text(client, "Buy - BTC")
    assert r.status_code == 200
    assert r.json()["success"] is True


def test_secret_required_when_configured(client, relay, monkeypatch):
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", "s3cret")
    assert _post_text(client, "Buy - BTC").status_code == 401
    assert _post_text(client, "Buy - BTC", params={"secret": "wrong"}).status_code == 401
    assert relay.positions() == {}
    assert _post_text(client, "Buy - BTC", params={"secret": "s3cret"}).status_code == 200
    assert _post_text(client, "Buy - ETH", headers={"X-Webhook-Secret": "s3cret"}).status_code == 200
    assert client.post("/webhook", json={"signal": "ENTER-SHORT", "ticker": "SOL", "secret": "s3cret"}).status_code == 200
    assert set(relay.positions()) == {"BTCUSDT", "ETHUSDT", "SOLUSDT"}


def test_delete_position(client, relay, monkeypatch):
    _post_text(client, "Buy - BTC")
    r = client.delete("/positions/btc")
    assert r.status_code == 200
    assert r.json()["position"]["ticker"] == "BTCUSDT"
    assert client.delete("/positions/BTCUSDT").status_code == 404
    monkeypatch.setattr(settings, "WEBHOOK_SECRET", "s3cret")
    assert client.delete("/positions/BTCUSDT").status_code == 401


def test_events_and_status(client, relay):
    _post_text(client, "Buy - BTC")
    _post_text(client, "Sell - BTC")
    events = client.get("/events", params={"limit": 10}).json()["events"]
    assert [e["action"] for e in events] == ["OPEN", "CLOSE", "OPEN"]
    assert client.get("/events", params={"limit": 0}).json()["events"] == []
    status = client.get("/status").json()
    assert status["relay"]["active_positions"] == ["BTCUSDT"]
    assert status["relay"]["alerts_received"] == 2


def test_lifespan_without_credentials_reports_errors(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "BITGET_API_KEY", "")
    monkeypatch.setattr(settings, "NOTIFIER_WEBHOOK", "")
    monkeypatch.setattr(settings, "TRADE_LOG_PATH", str(tmp_path / "trades.log"))
    with TestClient(app) as c:
        kinds = [e["kind"] for e in c.get("/startup/log").json()["events"]]
        assert "exchange_skip" in kinds
        r = c.post("/webhook", content="Buy - BTC", headers={"content-type": "text/plain"})
        assert r.status_code == 200
        events = c.get("/events").json()["events"]
        assert events[-1]["action"] == "ERROR"
        assert c.get("/positions").json()["count"] == 0
    assert "relay" not in service_registry.names()
    assert "ERROR" in (tmp_path / "trades.log").read_text()
