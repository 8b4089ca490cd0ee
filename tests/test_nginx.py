"""Tests for the NGINX RTMP backend."""

import logging
from unittest.mock import MagicMock, patch

import pytest
import requests
from conftest import STATS_XML, make_response, stats_with_bitrate

from streamswitch.errors import ConfigError
from streamswitch.nginx import DEFAULT_TIMEOUT_SECONDS, Nginx
from streamswitch.servers import server_from_dict
from streamswitch.types import Bitrate, SwitchType, Triggers

STATS_URL = "http://rtmp.example.com/stat"


def make_server(application: str = "live", key: str = "cam1", **kwargs) -> Nginx:
    return Nginx(stats_url=STATS_URL, application=application, key=key, **kwargs)


class TestGetStats:
    """Test fetching and extracting stream stats."""

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_returns_matching_stream(self, mock_get):
        """Test the configured stream is extracted from the stats page."""
        mock_get.return_value = make_response()

        stats = await make_server(key="cam2").get_stats()

        assert stats is not None
        assert stats.name == "cam2"
        assert stats.bw_video == 512000
        mock_get.assert_called_once_with(STATS_URL, timeout=DEFAULT_TIMEOUT_SECONDS)

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_custom_timeout(self, mock_get):
        mock_get.return_value = make_response()

        await make_server(timeout=1.5).get_stats()

        mock_get.assert_called_once_with(STATS_URL, timeout=1.5)

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_unreachable(self, mock_get, caplog):
        """Test transport failures yield None and log an error."""
        mock_get.side_effect = requests.ConnectionError("connection refused")

        with caplog.at_level(logging.ERROR):
            assert await make_server().get_stats() is None

        assert "unreachable" in caplog.text

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_timeout(self, mock_get):
        mock_get.side_effect = requests.Timeout("read timed out")
        assert await make_server().get_stats() is None

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_error_status(self, mock_get, caplog):
        """Test a non-2xx status yields None without parsing the body."""
        mock_get.return_value = make_response(text=STATS_XML, status_code=503)

        with caplog.at_level(logging.ERROR):
            assert await make_server().get_stats() is None

        assert "HTTP 503" in caplog.text

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_parse_error_logs_body(self, mock_get, caplog):
        """Test a malformed page yields None and logs the raw body at debug level."""
        mock_get.return_value = make_response(text="<html>oops</html>")

        with caplog.at_level(logging.DEBUG):
            assert await make_server().get_stats() is None

        assert "<html>oops</html>" in caplog.text
        assert "Error parsing stats" in caplog.text

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_empty_body(self, mock_get):
        mock_get.return_value = make_response(text="")
        assert await make_server().get_stats() is None

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_truncated_body(self, mock_get):
        """Test a body cut off mid-transfer yields None rather than a partial record."""
        mock_get.return_value = make_response(text=STATS_XML[: STATS_XML.index("</bw_video>")])

        server = make_server()
        assert await server.get_stats() is None
        assert await server.switch(Triggers(low=800)) == SwitchType.OFFLINE

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_missing_stream(self, mock_get):
        """Test a stream not on the stats page yields None."""
        mock_get.return_value = make_response()
        assert await make_server(key="cam9").get_stats() is None

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_injected_logger(self, mock_get):
        """Test failures are reported to the injected logger."""
        mock_get.side_effect = requests.ConnectionError("down")
        log = MagicMock(spec=logging.Logger)

        assert await make_server(log=log).get_stats() is None

        log.error.assert_called_once()


class TestSwitch:
    """Test scene switch decisions."""

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_unavailable_is_offline(self, mock_get):
        """Test a 503 stats page is treated as offline whatever the triggers."""
        mock_get.return_value = make_response(status_code=503)
        server = make_server()

        assert await server.switch(Triggers()) == SwitchType.OFFLINE
        assert await server.switch(Triggers(offline=0, low=0)) == SwitchType.OFFLINE
        assert await server.switch(Triggers(offline=5000, low=1000)) == SwitchType.OFFLINE

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_missing_stream_is_offline(self, mock_get):
        mock_get.return_value = make_response()
        assert await make_server(key="cam9").switch(Triggers(low=100)) == SwitchType.OFFLINE

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("triggers", "expected"),
        [
            (Triggers(low=600), SwitchType.LOW),
            (Triggers(low=400), SwitchType.NORMAL),
            (Triggers(offline=600), SwitchType.OFFLINE),
            (Triggers(offline=600, low=800), SwitchType.OFFLINE),
        ],
    )
    @patch("streamswitch.nginx.requests.get")
    async def test_classifies_bitrate(self, mock_get, triggers, expected):
        """Test 512000 bits per second (500 kbps) against several triggers."""
        mock_get.return_value = make_response(text=stats_with_bitrate(512000))
        assert await make_server().switch(triggers) == expected

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_zero_bitrate_is_previous(self, mock_get):
        """Test a just-started stream holds the previous scene."""
        mock_get.return_value = make_response(text=stats_with_bitrate(0))
        assert await make_server().switch(Triggers(offline=300, low=800)) == SwitchType.PREVIOUS

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_idempotent(self, mock_get):
        """Test repeated decisions on unchanged stats agree."""
        mock_get.return_value = make_response()
        server = make_server()
        triggers = Triggers(offline=300, low=2500)

        first = await server.switch(triggers)
        second = await server.switch(triggers)

        assert first == second == SwitchType.LOW
        assert mock_get.call_count == 2


class TestCommands:
    """Test the bitrate and source info commands."""

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_bitrate(self, mock_get):
        mock_get.return_value = make_response()
        assert await make_server().bitrate() == Bitrate(message="2000")

    @pytest.mark.asyncio
    @patch("streamswitch.nginx.requests.get")
    async def test_bitrate_no_data(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")
        assert await make_server().bitrate() == Bitrate(message=None)

    @pytest.mark.asyncio
    async def test_source_info_unsupported(self):
        with pytest.raises(NotImplementedError):
            await make_server().source_info()


class TestSerialization:
    """Test persisting the backend configuration."""

    def test_to_dict(self):
        assert make_server().to_dict() == {
            "type": "Nginx",
            "statsUrl": STATS_URL,
            "application": "live",
            "key": "cam1",
        }

    def test_round_trip(self):
        """Test a backend restores to an equal instance through the registry."""
        server = make_server(key="cam2")
        restored = server_from_dict(server.to_dict())

        assert isinstance(restored, Nginx)
        assert restored == server

    def test_missing_field(self):
        with pytest.raises(ConfigError, match="statsUrl"):
            Nginx.from_dict({"type": "Nginx", "application": "live", "key": "cam1"})

    def test_repr_identifies_stream(self):
        """Test the repr shows only the fields identifying the stream."""
        assert repr(make_server(timeout=1.5)) == (
            f"Nginx(stats_url='{STATS_URL}', application='live', key='cam1')"
        )

    def test_immutable(self):
        server = make_server()
        with pytest.raises(AttributeError):
            server.key = "cam2"
