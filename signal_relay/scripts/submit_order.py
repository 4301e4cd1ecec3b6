"""Submit a single market order to Bitget outside the webhook flow.

Examples (run from project root):
  python -m signal_relay.scripts.submit_order --symbol BTC --side buy
  python -m signal_relay.scripts.submit_order --symbol BTCUSDT --side sell --size 0.001 --margin-mode cross
  python -m signal_relay.scripts.submit_order --symbol ETH --side buy --leverage 3

Credentials come from the same settings as the server (BITGET_API_KEY/SECRET/PASS).
"""
import argparse
import asyncio
import logging
import sys

from signal_relay.config import settings
from signal_relay.engine.signal_parser import normalize_ticker
from signal_relay.providers.bitget_rest import BitgetRest
from signal_relay.utils.logging_config import configure_logging
from signal_relay.utils.orders_enum import Direction, MarginMode

logger = logging.getLogger("submit_order")

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Submit one market order to Bitget USDT-M futures")
    p.add_argument("--symbol", required=True, help="Symbol, quote suffix optional (e.g. BTC or BTCUSDT)")
    p.add_argument("--side", required=True, choices=["buy", "sell"], help="Order side")
    p.add_argument("--size", type=float, default=None, help="Order size (default POSITION_SIZE_USD x LEVERAGE)")
    p.add_argument("--leverage", type=int, default=None, help="Set leverage before ordering")
    p.add_argument("--margin-mode", choices=[m.value for m in MarginMode], default=None, help="Margin mode (default MARGIN_MODE)")
    return p.parse_args(argv)

async def run(symbol: str, side: str, size: float = None, leverage: int = None, margin_mode: str = None) -> bool:
    trading = settings.trading_config()
    rest = BitgetRest(
        settings.BITGET_API_KEY,
        settings.BITGET_API_SECRET,
        settings.BITGET_API_PASS,
        base_url=settings.BITGET_BASE_URL,
        margin_coin=settings.MARGIN_COIN,
        product_type=settings.PRODUCT_TYPE,
        timeout=settings.EXCHANGE_TIMEOUT_SEC,
    )
    ticker = normalize_ticker(symbol, trading.quote_suffix)
    direction = Direction(side)
    try:
        if leverage is not None:
            lev = await rest.set_leverage(ticker, leverage, hold_side=direction.hold_side)
            if not lev.success:
                logger.error("Leverage update failed: %s", lev.raw)
                return False
        order_size = size if size is not None else trading.position_size_usd * (leverage or trading.leverage)
        result = await rest.submit_order(ticker, direction, order_size, MarginMode(margin_mode or trading.margin_mode))
        if result.success:
            logger.info("Order submitted successfully: %s order_id=%s", ticker, result.order_id)
        else:
            logger.error("Error submitting order: %s", result.raw)
        return result.success
    finally:
        await rest.close()

def main(argv=None):
    configure_logging(settings.LOG_LEVEL)
    args = parse_args(argv)
    ok = asyncio.run(run(args.symbol, args.side, args.size, args.leverage, args.margin_mode))
    sys.exit(0 if ok else 1)

if __name__ == "__main__":
    main()
