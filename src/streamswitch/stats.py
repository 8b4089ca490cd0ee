"""Parser for the nginx-rtmp XML stats page."""

import logging

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup
from lxml import etree

from .errors import StatsParseError
from .types import Application, AudioMeta, Meta, StatsDocument, StreamRecord, VideoMeta

logger = logging.getLogger(__name__)


def _children(parent: Tag, name: str) -> list[Tag]:
    return [child for child in parent.find_all(name, recursive=False) if isinstance(child, Tag)]


def _child(parent: Tag, name: str) -> Tag | None:
    """Return the direct child element called name, if any. It must be unique."""
    children = _children(parent, name)
    if len(children) > 1:
        msg = f"<{parent.name}> has {len(children)} <{name}> elements"
        raise StatsParseError(msg)
    return children[0] if children else None


def _required(parent: Tag, name: str) -> Tag:
    child = _child(parent, name)
    if child is None:
        msg = f"<{parent.name}> is missing <{name}>"
        raise StatsParseError(msg)
    return child


def _text(parent: Tag, name: str) -> str:
    return _required(parent, name).get_text(strip=True)


def _optional_text(parent: Tag, name: str) -> str | None:
    child = _child(parent, name)
    if child is None:
        return None
    return child.get_text(strip=True)


def _to_uint(value: str, parent: Tag, name: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        msg = f"<{parent.name}><{name}> is not an integer: {value!r}"
        raise StatsParseError(msg) from e

    if number < 0:
        msg = f"<{parent.name}><{name}> is negative: {number}"
        raise StatsParseError(msg)
    return number


def _uint(parent: Tag, name: str) -> int:
    return _to_uint(_text(parent, name), parent, name)


def _optional_uint(parent: Tag, name: str) -> int | None:
    value = _optional_text(parent, name)
    if value is None:
        return None
    return _to_uint(value, parent, name)


def _optional_float(parent: Tag, name: str) -> float | None:
    value = _optional_text(parent, name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as e:
        msg = f"<{parent.name}><{name}> is not a number: {value!r}"
        raise StatsParseError(msg) from e


def _parse_video(tag: Tag) -> VideoMeta:
    return VideoMeta(
        width=_uint(tag, "width"),
        height=_uint(tag, "height"),
        frame_rate=_uint(tag, "frame_rate"),
        codec=_text(tag, "codec"),
        profile=_optional_text(tag, "profile"),
        compat=_optional_uint(tag, "compat"),
        level=_optional_float(tag, "level"),
    )


def _parse_audio(tag: Tag) -> AudioMeta:
    return AudioMeta(
        codec=_text(tag, "codec"),
        profile=_optional_text(tag, "profile"),
        channels=_optional_uint(tag, "channels"),
        sample_rate=_optional_uint(tag, "sample_rate"),
    )


def _parse_stream(tag: Tag) -> StreamRecord:
    meta = None
    meta_tag = _child(tag, "meta")
    if meta_tag is not None:
        meta = Meta(
            video=_parse_video(_required(meta_tag, "video")),
            audio=_parse_audio(_required(meta_tag, "audio")),
        )

    return StreamRecord(
        name=_text(tag, "name"),
        bw_video=_uint(tag, "bw_video"),
        meta=meta,
    )


def _parse_application(tag: Tag) -> Application:
    live = _required(tag, "live")
    return Application(
        name=_text(tag, "name"),
        streams=[_parse_stream(stream) for stream in _children(live, "stream")],
    )


def parse_stats(text: str) -> StatsDocument:
    """
    Parse an nginx-rtmp stats page.

    The expected shape is ``<rtmp><server><application>...`` where each
    application holds a ``<live>`` element with zero or more ``<stream>``
    elements. The name of the root element itself is not checked.

    Args:
        text: The response body of the stats page.

    Returns:
        The parsed document.

    Raises:
        StatsParseError: If the document is empty or does not have the
            expected shape.
    """
    if not text.strip():
        msg = "Document is empty"
        raise StatsParseError(msg)

    # BeautifulSoup's xml builder repairs broken markup, so check well-formedness first
    try:
        strict = etree.XMLParser(recover=False, resolve_entities=False, no_network=True)
        etree.fromstring(text.encode(), strict)
        soup = BeautifulSoup(text, "xml")
    except (ParserRejectedMarkup, etree.LxmlError) as e:
        msg = f"Document is not well-formed XML: {e}"
        raise StatsParseError(msg) from e

    root = soup.find(True, recursive=False)
    if not isinstance(root, Tag):
        msg = "Document has no root element"
        raise StatsParseError(msg)

    server = _required(root, "server")
    applications = [_parse_application(app) for app in _children(server, "application")]
    logger.debug("Parsed %d applications from stats page", len(applications))
    return StatsDocument(applications=applications)


def select_stream(document: StatsDocument, application: str, key: str) -> StreamRecord | None:
    """
    Pick the stream named key inside the application named application.

    Streams of the same name under other applications are ignored. Should the
    server report the same stream twice, the last one wins.

    Returns:
        The matching stream, or None if there is none.
    """
    matches = [
        stream
        for app in document.applications
        if app.name == application
        for stream in app.streams
        if stream.name == key
    ]
    return matches[-1] if matches else None
