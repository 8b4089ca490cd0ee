"""Exceptions raised by streamswitch."""


class StatsParseError(ValueError):
    """The stats page is not a well-formed nginx-rtmp stats document."""


class ConfigError(ValueError):
    """A server or trigger configuration is invalid."""
