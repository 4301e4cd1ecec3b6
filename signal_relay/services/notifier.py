import asyncio
import json
import logging
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Deque, Dict, List, Optional, Set

import httpx

from signal_relay.models.trade_models import TradeEvent
from signal_relay.utils.orders_enum import TradeAction

logger = logging.getLogger("notifier")
trade_logger = logging.getLogger("trades")


class TradeNotifier:
    """Trade sink: logs every event, appends it to the audit file and forwards it to an optional webhook.

    ``record`` is synchronous and never raises. With a running loop the file
    append runs on a single writer thread and the webhook post as a task, so the
    caller never waits on disk or network.
    """

    def __init__(self, webhook_url: str = "", log_path: Optional[str] = None, recent_limit: int = 200, client: Optional[httpx.AsyncClient] = None):
        self.webhook = webhook_url
        self.log_path = Path(log_path) if log_path else None
        self.client = client or httpx.AsyncClient(timeout=5.0)
        self._recent: Deque[Dict] = deque(maxlen=recent_limit)
        self._pending: Set[asyncio.Future] = set()
        # one worker keeps audit lines in event order
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="trade-audit")
        if self.log_path:
            try:
                self.log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError:
                logger.exception("Cannot create trade log directory %s", self.log_path.parent)

    def record(self, event: TradeEvent) -> None:
        entry = event.to_dict()
        self._recent.append(entry)
        if event.action is TradeAction.ERROR:
            trade_logger.error("Trade: %s", entry)
        else:
            trade_logger.info("Trade: %s", entry)
        if self.log_path:
            self._schedule_write(entry)
        if self.webhook:
            self._schedule_post(entry)

    def recent(self, limit: int = 50) -> List[Dict]:
        if limit <= 0:
            return []
        return list(self._recent)[-limit:]

    def _append(self, entry: Dict):
        if not self.log_path:
            return
        try:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        except OSError:
            logger.exception("Trade log write failed")

    def _schedule_write(self, entry: Dict):
        try:
            future = asyncio.get_running_loop().run_in_executor(self._writer, self._append, entry)
        except RuntimeError:
            # no running loop, or the writer is already shut down
            self._append(entry)
            return
        self._track(future)

    def _track(self, future: asyncio.Future):
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)

    def _schedule_post(self, entry: Dict):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running loop; skipping webhook notification for %s", entry.get("ticker"))
            return
        self._track(loop.create_task(self._post(entry)))

    async def _post(self, entry: Dict):
        try:
            await self.client.post(self.webhook, json=entry)
        except Exception:
            logger.exception("Notifier failed")

    async def flush(self):
        """Wait for in-flight audit writes and webhook posts."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self):
        await self.flush()
        self._writer.shutdown(wait=True)
        await self.client.aclose()


__all__ = ["TradeNotifier"]
