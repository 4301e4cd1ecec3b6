import logging
import sys

def configure_logging(level: str = "INFO"):
    """Configure logging for the application."""
    root = logging.getLogger()
    if any(getattr(h, "_signal_relay", False) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    handler.setFormatter(formatter)
    handler._signal_relay = True
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

# Make sure the function is available for import
__all__ = ['configure_logging']
