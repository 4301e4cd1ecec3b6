"""
Value objects passed between the parser, the position engine and its collaborators.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from signal_relay.utils.orders_enum import Direction, ErrorKind, MarginMode, TradeAction


@dataclass(frozen=True)
class Signal:
	"""Normalized trading intent parsed from one inbound alert."""
	ticker: Optional[str]
	direction: Direction
	is_exit: bool
	price: str
	raw: str

	@property
	def is_entry(self) -> bool:
		return not self.is_exit and self.direction in (Direction.BUY, Direction.SELL)

	def to_dict(self):
		return {
			"ticker": self.ticker,
			"direction": self.direction.value,
			"is_exit": self.is_exit,
			"price": self.price,
			"raw": self.raw
		}


@dataclass
class Position:
	"""Open position tracked for a single ticker."""
	ticker: str
	side: Direction
	order_id: Optional[str]
	entry_time: datetime

	def to_dict(self):
		return {
			"ticker": self.ticker,
			"side": self.side.value,
			"order_id": self.order_id,
			"entry_time": self.entry_time.isoformat()
		}


@dataclass(frozen=True)
class TradeEvent:
	"""Audit record handed to the trade sink."""
	action: TradeAction
	ticker: str
	side: Direction
	timestamp: datetime
	detail: Dict[str, Any] = field(default_factory=dict)

	def to_dict(self):
		return {
			"action": self.action.value,
			"ticker": self.ticker,
			"side": self.side.value,
			"timestamp": self.timestamp.isoformat(),
			"detail": self.detail
		}


@dataclass(frozen=True)
class ExchangeResult:
	"""Outcome of a single exchange call. Failures are values, not exceptions."""
	success: bool
	raw: Any = None
	order_id: Optional[str] = None
	error_kind: Optional[ErrorKind] = None

	@classmethod
	def failed(cls, kind: ErrorKind, raw: Any) -> "ExchangeResult":
		return cls(success=False, raw=raw, error_kind=kind)


@dataclass(frozen=True)
class TradingConfig:
	position_size_usd: float = 10.0
	leverage: int = 5
	margin_mode: MarginMode = MarginMode.ISOLATED
	quote_suffix: str = "USDT"

	@property
	def order_size(self) -> float:
		"""Total position size in USD (margin times leverage)."""
		return self.position_size_usd * self.leverage

	def to_dict(self):
		return {
			"position_size_usd": self.position_size_usd,
			"leverage": self.leverage,
			"margin_mode": self.margin_mode.value,
			"quote_suffix": self.quote_suffix,
			"order_size": self.order_size
		}
