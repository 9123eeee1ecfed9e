"""Fixed-period polling of the relay service."""

import asyncio
import logging
from typing import Optional

from vk_relay.use_cases import PollSummary, RelayService

LOGGER = logging.getLogger(__name__)


class Poller:
    """Run poll cycles one after another, never two at the same time.

    The ledger is only safe to mutate from one cycle at a time, so a trigger
    that arrives while a cycle is running is skipped instead of queued.
    """

    def __init__(self, service: RelayService, interval: float) -> None:
        self.service = service
        self.interval = interval
        self._lock = asyncio.Lock()
        self._stopped = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def run_cycle(self) -> Optional[PollSummary]:
        """Run one poll cycle. Returns None if another cycle is in progress."""
        if self._lock.locked():
            LOGGER.warning("Previous poll cycle still running, skipping this trigger")
            return None

        async with self._lock:
            return await self.service.process_new_posts()

    async def run_forever(self) -> None:
        """Poll until stop() is called.

        A failed cycle is logged and the next one starts from scratch.
        """
        LOGGER.info("Checking for new posts every %.0f seconds", self.interval)
        while not self._stopped.is_set():
            try:
                await self.run_cycle()
            except Exception:
                LOGGER.exception("Error during scheduled post processing")

            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
        LOGGER.info("Poller stopped")

    def stop(self) -> None:
        self._stopped.set()
