import pytest

from signal_relay.execution.position_engine import PositionEngine
from signal_relay.models.trade_models import ExchangeResult, TradingConfig
from signal_relay.services.relay_service import AlertRelayService
from signal_relay.utils.orders_enum import TradeAction


class DummyExchange:
    def __init__(self):
        self.orders = []

    async def set_leverage(self, ticker, leverage, hold_side=None):
        return ExchangeResult(success=True, raw={"code": "00000"})

    async def submit_order(self, ticker, side, size_usd, margin_mode):
        self.orders.append((ticker, side))
        return ExchangeResult(success=True, raw={"code": "00000"}, order_id=str(len(self.orders)))


class ListSink:
    def __init__(self):
        self.events = []

    def record(self, event):
        self.events.append(event)


class ExplodingEngine:
    config = TradingConfig()

    async def handle(self, signal):
        raise RuntimeError("boom")

    def positions(self):
        return {}


def _relay():
    ex = DummyExchange()
    sink = ListSink()
    engine = PositionEngine(ex, sink, TradingConfig())
    return AlertRelayService(engine, default_ticker="BTCUSDT"), ex, sink


@pytest.mark.asyncio
async def test_text_alert_opens_position():
    relay, ex, sink = _relay()
    events = await relay.accept_alert("Buy - SOL.P, Price = 150")
    assert [e.action for e in events] == [TradeAction.OPEN]
    assert relay.positions()["SOLUSDT"]["side"] == "buy"
    assert relay.last_alert["data"]["parsed"]["ticker"] == "SOLUSDT"
    assert relay.last_alert["timestamp"] is not None


@pytest.mark.asyncio
async def test_structured_alert_uses_default_symbol():
    relay, ex, sink = _relay()
    await relay.accept_alert({"signal": "ENTER-LONG", "secret": "x"})
    events = await relay.accept_alert({"signal": "BUY-CLOSE", "secret": "x"})
    assert [e.action for e in events] == [TradeAction.CLOSE]
    assert [o[0] for o in ex.orders] == ["BTCUSDT", "BTCUSDT"]
    assert relay.positions() == {}


@pytest.mark.asyncio
async def test_alert_without_ticker_is_dropped():
    relay, ex, sink = _relay()
    events = await relay.accept_alert("hello world")
    assert events == []
    assert ex.orders == []
    assert relay.last_alert["data"]["parsed"]["ticker"] is None
    assert relay.alerts_received == 1


@pytest.mark.asyncio
async def test_engine_failure_does_not_propagate():
    relay = AlertRelayService(ExplodingEngine())
    assert await relay.accept_alert("Buy - BTC") == []


@pytest.mark.asyncio
async def test_status_and_stop_close_resources():
    closed = []

    class Closable:
        async def close(self):
            closed.append(True)

    ex = DummyExchange()
    relay = AlertRelayService(PositionEngine(ex, ListSink()), closers=[Closable()])
    await relay.start()
    await relay.accept_alert("Sell - ETH")
    status = relay.status()
    assert status["running"] is True
    assert status["active_positions"] == ["ETHUSDT"]
    assert status["trading_config"]["order_size"] == 50
    await relay.stop()
    assert closed == [True]
    assert relay.status()["running"] is False
