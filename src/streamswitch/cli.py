"""Command-line interface for streamswitch."""

import argparse
import asyncio
import logging
import pathlib

from .config import SwitchConfig, load_config
from .monitor import AsyncSwitchMonitor
from .servers import StreamServer
from .types import STATS_REFRESH_INTERVAL_SECONDS

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "no data available"


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        debug: Enable debug level logging if True.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler("streamswitch.log"),
            logging.StreamHandler(),
        ],
    )


async def report_bitrates(servers: list[StreamServer]) -> list[str]:
    """
    Query the current bitrate of every server.

    Returns:
        One line per server, in server order.
    """
    reports = await asyncio.gather(*(server.bitrate() for server in servers))
    lines = []
    for server, report in zip(servers, reports, strict=True):
        message = f"{report.message} kbps" if report.message is not None else NO_DATA_MESSAGE
        lines.append(f"{server!r}: {message}")
    return lines


async def report_decisions(config: SwitchConfig) -> list[str]:
    decisions = await asyncio.gather(*(server.switch(config.triggers) for server in config.servers))
    return [
        f"{server!r}: {decision.value}"
        for server, decision in zip(config.servers, decisions, strict=True)
    ]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Streamswitch - scene switch decisions from stream server stats",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the current bitrate of every configured stream
  streamswitch bitrate

  # Decide once which scene each stream should show
  streamswitch --config servers.yaml switch

  # Keep deciding every 10 seconds
  streamswitch watch --interval 10
        """,
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=pathlib.Path,
        help="Path to streamswitch.yaml configuration file",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("bitrate", help="Show the current bitrate of each stream")
    commands.add_parser("switch", help="Decide once which scene each stream should show")
    watch = commands.add_parser("watch", help="Keep deciding on a fixed interval")
    watch.add_argument(
        "--interval",
        "-i",
        type=float,
        default=STATS_REFRESH_INTERVAL_SECONDS,
        help=f"Seconds between checks (default: {STATS_REFRESH_INTERVAL_SECONDS})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the streamswitch CLI."""
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError):
        logger.exception("Error loading configuration")
        logger.info("Please provide --config or create a streamswitch.yaml file")
        return 1

    if not config.servers:
        logger.error("No stream servers configured!")
        return 1

    if args.command == "bitrate":
        for line in asyncio.run(report_bitrates(config.servers)):
            logger.info(line)
    elif args.command == "switch":
        for line in asyncio.run(report_decisions(config)):
            logger.info(line)
    else:
        monitor = AsyncSwitchMonitor(
            config.servers,
            config.triggers,
            check_interval=args.interval,
        )
        monitor.start_monitoring()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
