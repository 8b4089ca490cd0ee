"""
Streamswitch - Scene switch decisions from live stream server stats.

This package probes the stats pages of streaming servers, classifies the
measured bitrate of a stream against configured triggers, and reports which
scene a production controller should switch to.
"""

from .config import SwitchConfig, load_config
from .errors import ConfigError, StatsParseError
from .monitor import AsyncSwitchMonitor
from .nginx import Nginx
from .servers import StreamServer, register_server, server_from_dict
from .switcher import classify
from .types import Bitrate, StreamRecord, SwitchType, Triggers

__version__ = "0.1.0"
__all__ = [
    "AsyncSwitchMonitor",
    "Bitrate",
    "ConfigError",
    "Nginx",
    "StatsParseError",
    "StreamRecord",
    "StreamServer",
    "SwitchConfig",
    "SwitchType",
    "Triggers",
    "classify",
    "load_config",
    "register_server",
    "server_from_dict",
]
