"""Asynchronous polling of stream servers for switch decisions."""

import asyncio
import logging
from collections.abc import Callable

from .servers import StreamServer
from .types import STATS_REFRESH_INTERVAL_SECONDS, SwitchType, Triggers

logger = logging.getLogger(__name__)


class AsyncSwitchMonitor:
    """
    Periodically asks every configured stream server which scene to show.

    The monitor only reports decisions; acting on them is left to the
    on_decision callback. It keeps no history, so any hysteresis belongs in
    the callback as well.

    Attributes:
        servers: Stream servers to poll.
        triggers: Thresholds passed to every decision.
        check_interval: Seconds between each poll cycle.
        on_decision: Callback invoked with each server and its decision.
    """

    def __init__(
        self,
        servers: list[StreamServer],
        triggers: Triggers,
        check_interval: float = STATS_REFRESH_INTERVAL_SECONDS,
        on_decision: Callable[[StreamServer, SwitchType], None] | None = None,
    ) -> None:
        """
        Initialize the switch monitor.

        Args:
            servers: Stream servers to poll.
            triggers: Bitrate thresholds for the decisions.
            check_interval: Seconds between polls (default: the stats refresh interval).
            on_decision: Optional callback invoked with every decision.
        """
        self.servers = list(servers)
        self.triggers = triggers
        self.check_interval = check_interval
        self.on_decision = on_decision

        if check_interval < STATS_REFRESH_INTERVAL_SECONDS:
            logger.warning(
                "Polling every %.1fs is faster than the stats refresh interval of %ds",
                check_interval,
                STATS_REFRESH_INTERVAL_SECONDS,
            )

    async def check_server(self, server: StreamServer) -> SwitchType | None:
        """
        Ask one server for its decision.

        Args:
            server: Stream server to ask.

        Returns:
            The decision, or None if the server raised unexpectedly.
        """
        try:
            decision = await server.switch(self.triggers)
        except Exception:
            logger.exception("Error deciding scene for %r", server)
            return None

        logger.info("%r -> %s", server, decision.value)

        if self.on_decision:
            try:
                self.on_decision(server, decision)
            except Exception:
                logger.exception("Error in decision callback")

        return decision

    async def check_all(self) -> list[SwitchType | None]:
        """Poll every server concurrently, returning decisions in server order."""
        return await asyncio.gather(*(self.check_server(server) for server in self.servers))

    async def monitor_servers(self) -> None:
        """
        Periodically poll all servers.

        Runs indefinitely until cancelled.
        """
        while True:
            await self.check_all()
            logger.debug("Waiting %.1fs for next check...", self.check_interval)
            await asyncio.sleep(self.check_interval)

    def start_monitoring(self) -> None:
        """
        Start the async monitoring loop.

        Blocks until interrupted with Ctrl+C.
        """
        try:
            asyncio.run(self.monitor_servers())
        except KeyboardInterrupt:
            logger.info("Stopping monitoring...")
