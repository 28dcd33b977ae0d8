"""
GPX point reader.

Turns an uploaded GPX document into one flat, document-ordered list of raw
samples (trk -> trkseg -> trkpt). Timestamps are kept as text here; they
are validated later by the kinematics pass.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterator, Optional

import lxml.etree as ET

from trackfeel.core.constants import GARMIN_TPX_NAMESPACES
from trackfeel.core.errors import MalformedInput

logger = logging.getLogger(__name__)

_parser = ET.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_comments=True,
    remove_pis=True,
    collect_ids=False,
)


@dataclass(frozen=True)
class RawPoint:
    """One recorded sample exactly as found in the file."""
    lat: float
    lon: float
    ele: Optional[float] = None
    hr: Optional[int] = None
    time_text: Optional[str] = None


def read_points(payload: bytes) -> list[RawPoint]:
    """
    Parse GPX bytes and flatten every track point in document order.

    Args:
        payload: raw file content

    Returns:
        All trkpt samples of all segments of all tracks, in order

    Raises:
        MalformedInput: if the payload is not a GPX document
    """
    if not payload or not payload.strip():
        raise MalformedInput("empty payload")
    try:
        root = ET.fromstring(payload, parser=_parser)
    except ET.XMLSyntaxError as e:
        raise MalformedInput(f"xml parse (raw size {len(payload)}): {e}") from e

    if _local_name(root) != "gpx":
        raise MalformedInput(f"unexpected root element <{_local_name(root)}>")

    points: list[RawPoint] = []
    for trk in _children(root, "trk"):
        for seg in _children(trk, "trkseg"):
            for trkpt in _children(seg, "trkpt"):
                points.append(_read_trkpt(trkpt))

    logger.debug("flattened %d track points", len(points))
    return points


def _read_trkpt(el) -> RawPoint:
    return RawPoint(
        lat=_coordinate(el, "lat"),
        lon=_coordinate(el, "lon"),
        ele=_optional_float(_child_text(el, "ele")),
        hr=_heart_rate(el),
        time_text=_child_text(el, "time"),
    )


def _coordinate(el, attr: str) -> float:
    raw = el.get(attr)
    if raw is None:
        raise MalformedInput(f"trkpt without {attr} (line {el.sourceline})")
    try:
        value = float(raw)
    except ValueError as e:
        raise MalformedInput(f"trkpt {attr}={raw!r} is not a number (line {el.sourceline})") from e
    if not math.isfinite(value):
        raise MalformedInput(f"trkpt {attr}={raw!r} is not finite (line {el.sourceline})")
    return value


def _heart_rate(el) -> Optional[int]:
    # <extensions><gpxtpx:TrackPointExtension><gpxtpx:hr>151</gpxtpx:hr>...
    for ext in _children(el, "extensions"):
        for ns in GARMIN_TPX_NAMESPACES:
            hr = ext.findtext(f"{{{ns}}}TrackPointExtension/{{{ns}}}hr")
            if hr is not None:
                return _optional_int(hr)
    return None


def _local_name(el) -> str:
    return ET.QName(el).localname


def _children(el, name: str) -> Iterator:
    for child in el:
        if isinstance(child.tag, str) and _local_name(child) == name:
            yield child


def _child_text(el, name: str) -> Optional[str]:
    for child in _children(el, name):
        return (child.text or "").strip()
    return None


def _optional_float(text: Optional[str]) -> Optional[float]:
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _optional_int(text: Optional[str]) -> Optional[int]:
    if text is None:
        return None
    try:
        return int(text.strip())
    except ValueError:
        return None
