"""Fixed-interval refresh of the active SOS listing."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from rescue_radar.services.gateway import GatewayResult, SosGateway

logger = logging.getLogger(__name__)


@dataclass
class SosPoller:
    """Polls a gateway for active requests until stopped.

    Each refresh replaces ``latest``; results are not deduplicated and the
    most recent response always wins.
    """

    gateway: SosGateway
    interval_seconds: float = 30.0
    type_filter: str | None = None
    on_update: Callable[[GatewayResult], None] | None = None
    latest: GatewayResult | None = None

    async def refresh(self) -> GatewayResult:
        """Fetch the listing once and publish it."""
        result = await self.gateway.list(self.type_filter)
        if not result.ok:
            logger.warning("SOS refresh failed: %s", result.message)
        self.latest = result
        if self.on_update is not None:
            self.on_update(result)
        return result

    async def run(self, stop: asyncio.Event) -> None:
        """Refresh immediately, then every interval until ``stop`` is set."""
        while not stop.is_set():
            await self.refresh()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                continue
