import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from signal_relay.engine.signal_parser import parse
from signal_relay.execution.position_engine import PositionEngine
from signal_relay.models.trade_models import TradeEvent
from signal_relay.services.metrics import alerts_counter
from signal_relay.utils.orders_enum import ErrorKind
from signal_relay.utils.time_utils import utc_now_iso

logger = logging.getLogger("relay_service")


class AlertRelayService:
    """Inbound boundary: one call per delivered alert.

    ``accept_alert`` always completes. Parse misses are dropped, exchange
    failures come back from the engine as ERROR events, and anything unexpected
    is logged here so the webhook caller still gets its acknowledgement.
    """

    def __init__(self, engine: PositionEngine, quote_suffix: str = "USDT", default_ticker: Optional[str] = None, closers: Optional[List[Any]] = None):
        self.engine = engine
        self.quote_suffix = quote_suffix
        self.default_ticker = default_ticker
        self._closers = closers or []
        self._running = False
        self.last_alert: Dict[str, Any] = {"timestamp": None, "data": None}
        self.alerts_received = 0

    async def start(self):
        self._running = True
        logger.info("Alert relay started quote_suffix=%s default_ticker=%s", self.quote_suffix, self.default_ticker)

    async def stop(self):
        if not self._running:
            return
        for resource in self._closers:
            try:
                await resource.close()
            except Exception:
                logger.exception("Failed closing %s", type(resource).__name__)
        self._running = False
        logger.info("Alert relay stopped")

    async def accept_alert(self, raw: Union[str, Mapping[str, Any]]) -> List[TradeEvent]:
        self.alerts_received += 1
        try:
            signal = parse(raw, quote_suffix=self.quote_suffix, default_ticker=self.default_ticker)
        except Exception:
            logger.exception("Alert parsing failed")
            alerts_counter.labels(outcome="error").inc()
            return []
        self.last_alert = {
            "timestamp": utc_now_iso(),
            "data": {"raw": signal.raw, "parsed": signal.to_dict()},
        }
        if signal.ticker is None:
            logger.info("No ticker found in alert (%s); dropped", ErrorKind.PARSE_AMBIGUOUS.value)
            alerts_counter.labels(outcome="dropped").inc()
            return []
        try:
            events = await self.engine.handle(signal)
        except Exception:
            logger.exception("Error handling signal for %s", signal.ticker)
            alerts_counter.labels(outcome="error").inc()
            return []
        alerts_counter.labels(outcome="handled").inc()
        return events

    def positions(self) -> Dict[str, Dict]:
        return {ticker: pos.to_dict() for ticker, pos in self.engine.positions().items()}

    def status(self) -> Dict[str, Any]:
        return {
            "running": self._running,
            "alerts_received": self.alerts_received,
            "last_alert_at": self.last_alert["timestamp"],
            "active_positions": sorted(self.engine.positions().keys()),
            "trading_config": self.engine.config.to_dict(),
        }


__all__ = ["AlertRelayService"]
