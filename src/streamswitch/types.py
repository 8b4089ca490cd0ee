"""Type definitions for streamswitch."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TypeAlias

# Common type aliases
URL: TypeAlias = str
StreamKey: TypeAlias = str

# nginx-rtmp reports bandwidth in bits per second
BITS_PER_KILOBIT = 1024

# nginx-rtmp refreshes its stats page every 10 seconds, polling faster gains nothing
STATS_REFRESH_INTERVAL_SECONDS = 10


class SwitchType(Enum):
    """Which scene the production controller should switch to."""

    NORMAL = "normal"
    LOW = "low"
    PREVIOUS = "previous"
    OFFLINE = "offline"


@dataclass(frozen=True)
class Triggers:
    """Operator-configured bitrate thresholds in kilobits per second.

    Attributes:
        offline: Nonzero bitrates at or below this are treated as offline.
        low: Bitrates at or below this are treated as low.

    A threshold of None disables that branch of the classifier.
    """

    offline: int | None = None
    low: int | None = None


@dataclass
class VideoMeta:
    width: int
    height: int
    frame_rate: int
    codec: str
    profile: str | None = None
    compat: int | None = None
    level: float | None = None


@dataclass
class AudioMeta:
    codec: str
    profile: str | None = None
    channels: int | None = None
    sample_rate: int | None = None


@dataclass
class Meta:
    video: VideoMeta
    audio: AudioMeta


@dataclass
class StreamRecord:
    """Statistics for one live stream as reported by the server.

    Attributes:
        name: The stream key.
        bw_video: Video bandwidth in bits per second. Zero means the stream
            just started and the server has not measured it yet.
        meta: Codec metadata, if the publisher sent any.
    """

    name: StreamKey
    bw_video: int
    meta: Meta | None = None

    @property
    def bitrate_kbps(self) -> int:
        """Video bitrate in kilobits per second."""
        return self.bw_video // BITS_PER_KILOBIT


@dataclass
class Application:
    name: str
    streams: list[StreamRecord] = field(default_factory=list)


@dataclass
class StatsDocument:
    """Parsed stats page: every application with its live streams."""

    applications: list[Application] = field(default_factory=list)


@dataclass
class Bitrate:
    """Result of a bitrate query. message is None when no data is available."""

    message: str | None = None
