"""Loading stream servers and triggers from YAML configuration."""

import logging
import pathlib
from dataclasses import dataclass, field
from typing import Any

import yaml

from . import nginx  # noqa: F401  registers the Nginx backend
from .errors import ConfigError
from .servers import StreamServer, server_from_dict
from .types import Triggers

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "streamswitch.yaml"


@dataclass
class SwitchConfig:
    """
    Everything needed to probe streams and decide scenes.

    Attributes:
        triggers: Bitrate thresholds shared by all servers.
        servers: Configured stream servers, in file order.
    """

    triggers: Triggers = field(default_factory=Triggers)
    servers: list[StreamServer] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "triggers": {"offline": self.triggers.offline, "low": self.triggers.low},
            "servers": [server.to_dict() for server in self.servers],
        }


def _parse_threshold(triggers: dict[str, Any], name: str) -> int | None:
    value = triggers.get(name)
    if value is None:
        return None

    # bool is an int subclass, but "offline: true" is a typo, not a threshold
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        msg = f"Trigger {name!r} must be a non-negative integer or null, got {value!r}"
        raise ConfigError(msg)
    return value


def parse_triggers(data: Any) -> Triggers:
    """
    Build triggers from their configuration mapping.

    Args:
        data: Mapping with optional ``offline`` and ``low`` keys, or None.

    Raises:
        ConfigError: If data is not a mapping or a threshold is invalid.
    """
    if data is None:
        return Triggers()

    if not isinstance(data, dict):
        msg = "'triggers' must be a mapping"
        raise ConfigError(msg)

    return Triggers(
        offline=_parse_threshold(data, "offline"),
        low=_parse_threshold(data, "low"),
    )


def parse_config(data: Any) -> SwitchConfig:
    if not isinstance(data, dict) or "servers" not in data:
        msg = "Configuration must contain a 'servers' key with a list of stream servers"
        raise ConfigError(msg)

    servers = data["servers"]
    if not isinstance(servers, list):
        msg = "'servers' must be a list of stream servers"
        raise ConfigError(msg)

    return SwitchConfig(
        triggers=parse_triggers(data.get("triggers")),
        servers=[server_from_dict(server) for server in servers],
    )


def load_config(yaml_path: pathlib.Path | None = None) -> SwitchConfig:
    """
    Load stream servers and triggers from a YAML configuration file.

    Args:
        yaml_path: Path to the configuration file. If None, looks for
            streamswitch.yaml in the current directory.

    Returns:
        The parsed configuration.

    Raises:
        FileNotFoundError: If the YAML file doesn't exist.
        ConfigError: If the configuration is invalid.
    """
    if yaml_path is None:
        yaml_path = pathlib.Path.cwd() / DEFAULT_CONFIG_NAME

    if not yaml_path.exists():
        msg = f"Configuration not found at {yaml_path}"
        raise FileNotFoundError(msg)

    with yaml_path.open() as f:
        data = yaml.safe_load(f)

    config = parse_config(data)
    logger.info("Loaded %d stream servers from %s", len(config.servers), yaml_path)
    return config


def save_config(config: SwitchConfig, yaml_path: pathlib.Path) -> None:
    """Write a configuration back to YAML in the format load_config reads."""
    with yaml_path.open("w") as f:
        yaml.safe_dump(config.to_dict(), f, sort_keys=False)
