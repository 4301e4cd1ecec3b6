"""Collaborator contracts consumed by the position engine."""
from typing import Optional, Protocol

from signal_relay.models.trade_models import ExchangeResult, TradeEvent
from signal_relay.utils.orders_enum import Direction, MarginMode


class Exchange(Protocol):
    async def submit_order(self, ticker: str, side: Direction, size_usd: float, margin_mode: MarginMode) -> ExchangeResult:
        ...

    async def set_leverage(self, ticker: str, leverage: int, hold_side: Optional[str] = None) -> ExchangeResult:
        ...


class TradeSink(Protocol):
    def record(self, event: TradeEvent) -> None:
        ...


__all__ = ["Exchange", "TradeSink"]
