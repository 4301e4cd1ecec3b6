"""TradingView alert to Bitget futures relay."""

__version__ = "1.0.0"
