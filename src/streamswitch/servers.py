"""Stream server backend contract and the registry of backend kinds."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from .errors import ConfigError
from .types import Bitrate, SwitchType, Triggers

logger = logging.getLogger(__name__)

# Key holding the backend kind in persisted server configurations
TYPE_KEY = "type"

_REGISTRY: dict[str, type["StreamServer"]] = {}


class StreamServer(ABC):
    """
    A streaming server whose stats decide which scene to show.

    Every backend kind answers the same questions: which scene to switch to,
    what the current bitrate is, and what is known about the source. Backends
    are persisted as dictionaries tagged with their kind under ``type``.
    """

    type_name: str = ""

    @abstractmethod
    async def switch(self, triggers: Triggers) -> SwitchType:
        """Decide which scene to switch to."""

    @abstractmethod
    async def bitrate(self) -> Bitrate:
        """Report the current bitrate."""

    @abstractmethod
    async def source_info(self) -> str:
        """Describe the incoming source."""

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Serialize the backend configuration, including its type tag."""

    @classmethod
    @abstractmethod
    def from_dict(cls, data: dict[str, Any]) -> "StreamServer":
        """Build a backend from its serialized configuration."""


def register_server(type_name: str) -> Callable[[type[StreamServer]], type[StreamServer]]:
    """
    Register a backend class under a type tag.

    Args:
        type_name: Value of the ``type`` key identifying this backend kind.

    Returns:
        A class decorator.
    """

    def decorator(cls: type[StreamServer]) -> type[StreamServer]:
        if type_name in _REGISTRY:
            msg = f"Stream server type {type_name!r} is already registered"
            raise ValueError(msg)
        cls.type_name = type_name
        _REGISTRY[type_name] = cls
        logger.debug("Registered stream server type %s", type_name)
        return cls

    return decorator


def registered_types() -> list[str]:
    return sorted(_REGISTRY)


def server_from_dict(data: dict[str, Any]) -> StreamServer:
    """
    Restore a backend from its tagged configuration.

    Args:
        data: Mapping with a ``type`` key naming a registered backend kind.

    Returns:
        An instance of the matching backend class.

    Raises:
        ConfigError: If data is not a mapping or its type is unknown.
    """
    if not isinstance(data, dict):
        msg = f"Stream server configuration must be a mapping, got {type(data).__name__}"
        raise ConfigError(msg)

    type_name = data.get(TYPE_KEY)
    if type_name is None:
        msg = f"Stream server configuration is missing the {TYPE_KEY!r} key"
        raise ConfigError(msg)

    if not isinstance(type_name, str):
        msg = f"Stream server {TYPE_KEY!r} must be a string, got {type_name!r}"
        raise ConfigError(msg)

    cls = _REGISTRY.get(type_name)
    if cls is None:
        msg = f"Unknown stream server type {type_name!r} (known: {', '.join(registered_types())})"
        raise ConfigError(msg)

    return cls.from_dict(data)
