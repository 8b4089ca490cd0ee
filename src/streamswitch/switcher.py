"""Bitrate classification into scene switch decisions."""

from .types import SwitchType, Triggers


def classify(bitrate_kbps: int, triggers: Triggers) -> SwitchType:
    """
    Decide which scene to switch to for a measured bitrate.

    The checks run as a priority chain:

    1. A configured offline trigger fires on a nonzero bitrate at or below it.
       A zero reading never goes through this branch.
    2. A zero bitrate means the stream just started, so keep the previous scene.
    3. A configured low trigger fires on a bitrate at or below it.
    4. Anything else is normal.

    Args:
        bitrate_kbps: Video bitrate in kilobits per second.
        triggers: Thresholds to compare against.

    Returns:
        The scene to switch to.
    """
    if triggers.offline is not None and 0 < bitrate_kbps <= triggers.offline:
        return SwitchType.OFFLINE

    if bitrate_kbps == 0:
        return SwitchType.PREVIOUS

    if triggers.low is not None and bitrate_kbps <= triggers.low:
        return SwitchType.LOW

    return SwitchType.NORMAL
