import asyncio
import logging
import time
from dataclasses import replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from signal_relay.models.trade_models import ExchangeResult, Position, Signal, TradeEvent, TradingConfig
from signal_relay.providers.base import Exchange, TradeSink
from signal_relay.services.metrics import exchange_errors_counter, order_latency, orders_counter
from signal_relay.utils.orders_enum import Direction, ErrorKind, TradeAction
from signal_relay.utils.time_utils import utc_now

logger = logging.getLogger("position_engine")


class HandlingState(Enum):
    IDLE = "idle"
    CLOSING = "closing"
    OPENING = "opening"
    DONE = "done"


class PositionEngine:
    """Owns the ticker -> Position ledger and turns signals into exchange actions.

    Each ticker has its own asyncio.Lock. A handling pass holds the lock from the
    first ledger read until the ledger reflects the exchange outcome, so two
    alerts for the same ticker are applied one after the other in arrival order
    while different tickers run concurrently. A flat ticker's lock is dropped
    once nothing holds or waits on it.

    Exchange failures never raise out of ``handle``; they are returned (and sent
    to the sink) as ERROR trade events and leave the ledger untouched.
    """

    def __init__(self, exchange: Exchange, sink: TradeSink, config: Optional[TradingConfig] = None, exchange_timeout: float = 10.0, lock_timeout: float = 30.0):
        self.exchange = exchange
        self.sink = sink
        self.config = config or TradingConfig()
        self.exchange_timeout = exchange_timeout
        self.lock_timeout = lock_timeout
        self._positions: Dict[str, Position] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    def _lock_for(self, ticker: str) -> asyncio.Lock:
        if ticker not in self._locks:
            self._locks[ticker] = asyncio.Lock()
        self._lock_users[ticker] = self._lock_users.get(ticker, 0) + 1
        return self._locks[ticker]

    def _release_lock_ref(self, ticker: str):
        # Locks of flat tickers nobody holds or waits on are dropped
        users = self._lock_users[ticker] - 1
        if users or ticker in self._positions:
            self._lock_users[ticker] = users
            return
        del self._lock_users[ticker]
        del self._locks[ticker]

    def positions(self) -> Dict[str, Position]:
        """Snapshot of the ledger; mutating it does not affect the engine."""
        return {ticker: replace(pos) for ticker, pos in self._positions.items()}

    def get(self, ticker: str) -> Optional[Position]:
        pos = self._positions.get(ticker)
        return replace(pos) if pos else None

    async def handle(self, signal: Signal) -> List[TradeEvent]:
        if signal.ticker is None:
            logger.info("No ticker found in signal: %r", signal.raw)
            return []
        lock = self._lock_for(signal.ticker)
        try:
            return await self._handle_locked(lock, signal)
        finally:
            self._release_lock_ref(signal.ticker)

    async def _handle_locked(self, lock: asyncio.Lock, signal: Signal) -> List[TradeEvent]:
        ticker = signal.ticker
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.lock_timeout)
        except asyncio.TimeoutError:
            logger.error("Timed out waiting %.1fs for %s lock; dropping signal", self.lock_timeout, ticker)
            exchange_errors_counter.labels(kind=ErrorKind.CONCURRENCY_TIMEOUT.value).inc()
            events: List[TradeEvent] = []
            self._emit(events, TradeAction.ERROR, ticker, signal.direction, {
                "stage": "lock",
                "error_kind": ErrorKind.CONCURRENCY_TIMEOUT.value,
                "error": f"lock not acquired within {self.lock_timeout}s",
                "signal": signal.raw,
            })
            return events
        try:
            return await self._run(signal)
        finally:
            lock.release()

    async def remove(self, ticker: str) -> Optional[Position]:
        """Forget a tracked position without touching the exchange."""
        try:
            async with self._lock_for(ticker):
                position = self._positions.pop(ticker, None)
        finally:
            self._release_lock_ref(ticker)
        if position:
            logger.info("Removed %s position for %s from ledger", position.side.value, ticker)
        return position

    def _plan(self, signal: Signal) -> HandlingState:
        position = self._positions.get(signal.ticker)
        if signal.is_exit:
            if position is None:
                logger.info("No active position to close for %s", signal.ticker)
                return HandlingState.DONE
            return HandlingState.CLOSING
        if not signal.is_entry:
            logger.info("Ignoring %s signal without direction", signal.ticker)
            return HandlingState.DONE
        if position is None:
            return HandlingState.OPENING
        if position.side is signal.direction:
            logger.info("Already %s %s; ignoring duplicate entry", position.side.value, signal.ticker)
            return HandlingState.DONE
        return HandlingState.CLOSING

    async def _run(self, signal: Signal) -> List[TradeEvent]:
        events: List[TradeEvent] = []
        state = HandlingState.IDLE
        while state is not HandlingState.DONE:
            if state is HandlingState.IDLE:
                state = self._plan(signal)
            elif state is HandlingState.CLOSING:
                closed = await self._close(signal.ticker, events)
                state = HandlingState.OPENING if closed and signal.is_entry else HandlingState.DONE
            elif state is HandlingState.OPENING:
                await self._open(signal.ticker, signal.direction, events)
                state = HandlingState.DONE
        return events

    async def _call(self, stage: str, fn: Callable[..., Awaitable[ExchangeResult]], *args: Any, **kwargs: Any) -> ExchangeResult:
        started = time.perf_counter()
        try:
            result = await asyncio.wait_for(fn(*args, **kwargs), timeout=self.exchange_timeout)
        except asyncio.TimeoutError:
            logger.error("%s timed out after %.1fs", stage, self.exchange_timeout)
            result = ExchangeResult.failed(ErrorKind.EXCHANGE_UNAVAILABLE, {"error": f"{stage} timed out after {self.exchange_timeout}s"})
        except Exception as e:
            logger.exception("%s failed", stage)
            result = ExchangeResult.failed(ErrorKind.EXCHANGE_UNAVAILABLE, {"error": str(e), "type": type(e).__name__})
        finally:
            order_latency.observe(time.perf_counter() - started)
        if not result.success and result.error_kind is None:
            result = replace(result, error_kind=ErrorKind.EXCHANGE_REJECTED)
        return result

    async def _open(self, ticker: str, side: Direction, events: List[TradeEvent]) -> bool:
        cfg = self.config
        logger.info("Opening %s position for %s", side.value, ticker)
        leverage = await self._call("set_leverage", self.exchange.set_leverage, ticker, cfg.leverage, hold_side=side.hold_side)
        if not leverage.success:
            self._fail(events, "set_leverage", ticker, side, leverage)
            return False
        result = await self._call("submit_order", self.exchange.submit_order, ticker, side, cfg.order_size, cfg.margin_mode)
        if not result.success:
            self._fail(events, "open", ticker, side, result)
            return False
        self._positions[ticker] = Position(ticker=ticker, side=side, order_id=result.order_id, entry_time=utc_now())
        orders_counter.labels(action=TradeAction.OPEN.value).inc()
        self._emit(events, TradeAction.OPEN, ticker, side, {
            "order_id": result.order_id,
            "size": cfg.position_size_usd,
            "leverage": cfg.leverage,
            "order_size": cfg.order_size,
            "margin_mode": cfg.margin_mode.value,
            "response": result.raw,
        })
        return True

    async def _close(self, ticker: str, events: List[TradeEvent]) -> bool:
        cfg = self.config
        position = self._positions[ticker]
        close_side = position.side.opposite()
        logger.info("Closing %s position for %s with %s order", position.side.value, ticker, close_side.value)
        result = await self._call("submit_order", self.exchange.submit_order, ticker, close_side, cfg.order_size, cfg.margin_mode)
        if not result.success:
            self._fail(events, "close", ticker, position.side, result)
            return False
        del self._positions[ticker]
        orders_counter.labels(action=TradeAction.CLOSE.value).inc()
        self._emit(events, TradeAction.CLOSE, ticker, position.side, {
            "order_id": result.order_id,
            "entry_order_id": position.order_id,
            "close_side": close_side.value,
            "response": result.raw,
        })
        return True

    def _fail(self, events: List[TradeEvent], stage: str, ticker: str, side: Direction, result: ExchangeResult):
        kind = result.error_kind or ErrorKind.EXCHANGE_REJECTED
        exchange_errors_counter.labels(kind=kind.value).inc()
        logger.error("Exchange %s failed for %s %s: %s", stage, side.value, ticker, result.raw)
        self._emit(events, TradeAction.ERROR, ticker, side, {
            "stage": stage,
            "error_kind": kind.value,
            "error": result.raw,
            "size": self.config.position_size_usd,
            "leverage": self.config.leverage,
        })

    def _emit(self, events: List[TradeEvent], action: TradeAction, ticker: str, side: Direction, detail: Dict[str, Any]):
        event = TradeEvent(action=action, ticker=ticker, side=side, timestamp=utc_now(), detail=detail)
        events.append(event)
        try:
            self.sink.record(event)
        except Exception:
            logger.exception("Trade sink failed for %s %s", action.value, ticker)


__all__ = ["PositionEngine", "HandlingState"]
