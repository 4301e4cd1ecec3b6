from enum import Enum


class Direction(str, Enum):
    BUY = "buy"
    SELL = "sell"
    UNKNOWN = "unknown"

    def opposite(self) -> "Direction":
        if self is Direction.BUY:
            return Direction.SELL
        if self is Direction.SELL:
            return Direction.BUY
        return Direction.UNKNOWN

    @property
    def hold_side(self) -> str:
        """Bitget position side held after an order in this direction."""
        return "long" if self is Direction.BUY else "short"


class TradeAction(str, Enum):
    OPEN = "OPEN"
    CLOSE = "CLOSE"
    ERROR = "ERROR"


class MarginMode(str, Enum):
    ISOLATED = "isolated"  # Collateral limited to the position
    CROSS = "cross"  # Whole account balance backs the position

    @property
    def exchange_value(self) -> str:
        # Bitget spells cross margin as "crossed"
        return "crossed" if self is MarginMode.CROSS else "isolated"


class ErrorKind(str, Enum):
    PARSE_AMBIGUOUS = "parse_ambiguous"
    EXCHANGE_REJECTED = "exchange_rejected"
    EXCHANGE_UNAVAILABLE = "exchange_unavailable"
    CONCURRENCY_TIMEOUT = "concurrency_timeout"
