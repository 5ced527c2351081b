"""Per-widget background refresh for Python consumers.

Each WidgetRefresher owns two asyncio tasks: a one-shot refresh after
``initial_delay`` and a repeating refresh every ``interval`` seconds. Refreshers
share no state; two widgets for the same pair simply both hit the cache.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from .config import Settings
from .engine import PriceService
from .errors import PriceError
from .models import PriceRecord
from .widgets import WidgetInstance

logger = logging.getLogger(__name__)


class WidgetRefresher:
    def __init__(
        self,
        service: PriceService,
        settings: Settings,
        instance: WidgetInstance,
        on_update: Callable[[PriceRecord], None],
        initial_delay: float = 1.0,
        interval: float | None = None,
    ):
        self.service = service
        self.settings = settings
        self.instance = instance
        self.on_update = on_update
        self.initial_delay = initial_delay
        self.interval = interval if interval is not None else instance.refresh
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    async def refresh(self) -> PriceRecord | None:
        """Fetch once in a worker thread; failures leave the display as is."""
        try:
            record = await asyncio.to_thread(
                self.service.get_price,
                self.instance.symbol,
                self.instance.currency or None,
                self.settings,
            )
        except PriceError as e:
            logger.debug(f"Refresh failed for {self.instance.symbol}: {e.message}")
            return None
        except Exception:
            logger.exception(f"Unexpected error refreshing {self.instance.symbol}")
            return None
        self.on_update(record)
        return record

    async def _delayed_once(self) -> None:
        await asyncio.sleep(self.initial_delay)
        await self.refresh()

    async def _every_interval(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.refresh()

    def start(self) -> None:
        """Schedule both tasks on the running loop."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._delayed_once()),
            asyncio.create_task(self._every_interval()),
        ]

    async def stop(self) -> None:
        """Cancel both tasks and wait for them to finish."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
