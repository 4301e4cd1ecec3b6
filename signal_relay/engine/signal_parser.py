"""Alert text -> Signal normalization.

Two alert shapes are understood:

* free text from chart alerts, e.g. ``"Buy TP - BELUSDT.P, Price = 0.6852"``
* structured payloads carrying a literal code, e.g. ``{"signal": "ENTER-LONG", "secret": "..."}``

Parsing never raises. Anything unrecognizable comes back as a Signal with
``ticker=None`` and/or ``direction=UNKNOWN`` and the caller decides what to drop.
"""
import json
import logging
import re
from typing import Any, Mapping, Optional, Tuple, Union

from signal_relay.models.trade_models import Signal
from signal_relay.utils.orders_enum import Direction

logger = logging.getLogger("signal_parser")

# "- BELUSDT.P" / "- ETH"
TICKER_PATTERN = re.compile(r"-\s+([A-Za-z0-9]+)(?:\.[Pp])?")
PRICE_PREFIX = "Price = "
EXIT_KEYWORDS = ("tp", "sl", "exit")

SIGNAL_CODES = {
    "ENTER-LONG": (Direction.BUY, False),
    "ENTER-SHORT": (Direction.SELL, False),
    "BUY-CLOSE": (Direction.SELL, True),
    "SELL-CLOSE": (Direction.BUY, True),
    "EXIT": (Direction.UNKNOWN, True),
}

REDACTED_FIELDS = ("secret", "passphrase", "apiSecret", "apiPass")


def normalize_ticker(token: Optional[str], quote_suffix: str = "USDT") -> Optional[str]:
    if not token:
        return None
    ticker = token.strip().upper()
    if ticker.endswith(".P"):
        ticker = ticker[:-2]
    if not ticker:
        return None
    suffix = quote_suffix.upper()
    if not ticker.endswith(suffix):
        ticker += suffix
    return ticker


def _direction_of(words: str) -> Direction:
    lowered = words.lower()
    # buy wins when both appear
    if "buy" in lowered:
        return Direction.BUY
    if "sell" in lowered:
        return Direction.SELL
    return Direction.UNKNOWN


def _is_exit(words: str) -> bool:
    lowered = words.lower()
    return any(k in lowered for k in EXIT_KEYWORDS)


def _split_alert(message: str) -> Tuple[str, str]:
    parts = message.split(",", 1)
    descriptor = parts[0].strip()
    price_part = parts[1].strip() if len(parts) > 1 else ""
    if price_part.startswith(PRICE_PREFIX):
        price_part = price_part[len(PRICE_PREFIX):]
    return descriptor, price_part.strip()


def parse_text(message: str, quote_suffix: str = "USDT") -> Signal:
    descriptor, price = _split_alert(message)
    match = TICKER_PATTERN.search(descriptor)
    ticker = normalize_ticker(match.group(1), quote_suffix) if match else None
    return Signal(
        ticker=ticker,
        direction=_direction_of(descriptor),
        is_exit=_is_exit(descriptor),
        price=price,
        raw=message,
    )


def _redacted_json(payload: Mapping[str, Any]) -> str:
    clean = {k: ("***" if k in REDACTED_FIELDS else v) for k, v in payload.items()}
    try:
        return json.dumps(clean, sort_keys=True, default=str)
    except (TypeError, ValueError):
        return str(clean)


def parse_structured(payload: Mapping[str, Any], quote_suffix: str = "USDT", default_ticker: Optional[str] = None) -> Signal:
    code = str(payload.get("signal") or "").strip().upper()
    direction, is_exit = SIGNAL_CODES.get(code, (Direction.UNKNOWN, False))
    if code not in SIGNAL_CODES:
        logger.warning("Unknown signal code: %r", payload.get("signal"))
    token = payload.get("ticker") or payload.get("symbol") or default_ticker
    return Signal(
        ticker=normalize_ticker(str(token), quote_suffix) if token else None,
        direction=direction,
        is_exit=is_exit,
        price="",
        raw=_redacted_json(payload),
    )


def parse(raw: Union[str, Mapping[str, Any], None], quote_suffix: str = "USDT", default_ticker: Optional[str] = None) -> Signal:
    """Map an inbound alert to a Signal.

    Mappings with a ``signal`` field go through the literal code table; any other
    mapping is parsed from its JSON text like the chart alerts are.
    """
    if raw is None:
        return Signal(ticker=None, direction=Direction.UNKNOWN, is_exit=False, price="", raw="")
    if isinstance(raw, Mapping):
        if "signal" in raw:
            signal = parse_structured(raw, quote_suffix, default_ticker)
        else:
            signal = parse_text(_redacted_json(raw), quote_suffix)
    elif isinstance(raw, (bytes, bytearray)):
        signal = parse_text(raw.decode("utf-8", errors="replace"), quote_suffix)
    else:
        signal = parse_text(str(raw), quote_suffix)
    logger.info("Parsed signal: %s", signal.to_dict())
    return signal


__all__ = ["parse", "parse_text", "parse_structured", "normalize_ticker", "SIGNAL_CODES"]
