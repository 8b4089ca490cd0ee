"""NGINX RTMP module backend."""

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from .errors import ConfigError, StatsParseError
from .servers import StreamServer, register_server
from .stats import parse_stats, select_stream
from .switcher import classify
from .types import URL, Bitrate, StreamKey, StreamRecord, SwitchType, Triggers

logger = logging.getLogger(__name__)

HTTP_SUCCESS = range(200, 300)
DEFAULT_TIMEOUT_SECONDS = 5.0

# Persisted key -> attribute
PERSISTED_FIELDS = (("statsUrl", "stats_url"), ("application", "application"), ("key", "key"))


@register_server("Nginx")
@dataclass(frozen=True)
class Nginx(StreamServer):
    """
    A stream published to an NGINX server running the RTMP module.

    Stats come from the XML page served by the module's ``rtmp_stat``
    directive. Every call fetches the page afresh; nothing is cached between
    calls and failures are never retried.

    Attributes:
        stats_url: URL of the NGINX stats page.
        application: RTMP application the stream is published to.
        key: Stream key identifying the stream within the application.
        timeout: Seconds to wait for the stats page before giving up.
        log: Logger to report failures to (uses the module logger if None).
    """

    stats_url: URL
    application: str
    key: StreamKey
    timeout: float = field(default=DEFAULT_TIMEOUT_SECONDS, compare=False, repr=False)
    log: logging.Logger | None = field(default=None, compare=False, repr=False)

    @property
    def _logger(self) -> logging.Logger:
        return self.log or logger

    async def get_stats(self) -> StreamRecord | None:
        """
        Fetch the stats page and extract this stream.

        A bitrate of 0 means the stream just started; the stats update
        every 10 seconds.

        Returns:
            The stream's stats, or None if the page is unreachable, answers
            with an error status, cannot be parsed, or does not list the stream.
        """
        loop = asyncio.get_running_loop()
        request = functools.partial(requests.get, self.stats_url, timeout=self.timeout)

        try:
            response = await loop.run_in_executor(None, request)
        except requests.RequestException as e:
            self._logger.error("Stats page (%s) is unreachable: %s", self.stats_url, e)
            return None

        if response.status_code not in HTTP_SUCCESS:
            self._logger.error(
                "Error accessing stats page (%s): HTTP %d", self.stats_url, response.status_code
            )
            return None

        text = response.text
        try:
            document = parse_stats(text)
        except StatsParseError as e:
            self._logger.debug("%s", text)
            self._logger.error("Error parsing stats (%s) %s", self.stats_url, e)
            return None

        stream = select_stream(document, self.application, self.key)
        self._logger.debug("%r", stream)
        return stream

    async def switch(self, triggers: Triggers) -> SwitchType:
        """Which scene to switch to. An unavailable stream counts as offline."""
        stats = await self.get_stats()
        if stats is None:
            return SwitchType.OFFLINE

        return classify(stats.bitrate_kbps, triggers)

    async def bitrate(self) -> Bitrate:
        stats = await self.get_stats()
        if stats is None:
            return Bitrate(message=None)

        return Bitrate(message=str(stats.bitrate_kbps))

    async def source_info(self) -> str:
        """Not supported by this backend."""
        msg = "Source info is not supported for NGINX stream servers"
        raise NotImplementedError(msg)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type_name,
            "statsUrl": self.stats_url,
            "application": self.application,
            "key": self.key,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Nginx":
        """
        Build the backend from its persisted configuration.

        Args:
            data: Mapping with ``statsUrl``, ``application`` and ``key``.

        Raises:
            ConfigError: If a field is missing or is not a string.
        """
        values = {}
        for persisted, attr in PERSISTED_FIELDS:
            value = data.get(persisted)
            if not isinstance(value, str):
                msg = f"Nginx stream server requires {persisted!r} to be a string, got {value!r}"
                raise ConfigError(msg)
            values[attr] = value

        return cls(**values)
