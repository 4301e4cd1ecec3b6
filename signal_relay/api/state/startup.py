"""Startup diagnostics: credentials found, exchange client built, relay started."""
from collections import deque
from typing import Deque, Dict, List

from signal_relay.utils.time_utils import utc_now_iso

_startup_events: Deque[Dict] = deque(maxlen=500)


def record_startup_event(kind: str, message: str, **extra):
    _startup_events.append({"ts": utc_now_iso(), "kind": kind, "message": message, **extra})


def get_startup_events(limit: int = 100) -> List[Dict]:
    if limit <= 0:
        return []
    return list(_startup_events)[-limit:]


def clear_startup_events():
    _startup_events.clear()

__all__ = ["record_startup_event", "get_startup_events", "clear_startup_events"]
