# gpsclimb/formats/gpx.py
"""
GPX helpers for gpsclimb

This module is intentionally thin and format-focused:
- GPX namespace handling (1.1 and 1.0)
- safely reading an ElementTree
- extracting ordered track points (and basic metadata) for the analysis core

Key design principle:
  The analysis core only ever sees plain ordered TrackPoints / Coordinates.
  Everything XML-shaped stays in here.
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from gpsclimb.analyze.graph import (
    ElevationSmoothing,
    TrackGraph,
    build_track_graph_from_points,
)
from gpsclimb.errors import InvalidGpxError
from gpsclimb.geo.coordinates import Coordinate, TrackPoint

# GPX 1.1 default namespace
GPX_NS = {"gpx": "http://www.topografix.com/GPX/1/1"}


def _namespace_of(root: ET.Element) -> dict[str, str]:
    """
    Namespace map for `root`.

    ElementTree represents namespaced tags internally as
      "{namespace-uri}tag"
    so GPX 1.0 files (different URI) need their own map.
    """
    if root.tag.startswith("{"):
        return {"gpx": root.tag[1:].split("}", 1)[0]}
    return GPX_NS


def _parse_gpx_time(text: str) -> Optional[_dt.datetime]:
    """
    Parse an ISO-8601 timestamp commonly found in GPX <time> nodes.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44+00:00"
    """
    if not text:
        return None
    s = text.strip()
    if not s:
        return None

    # GPX times commonly use Z for UTC.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    try:
        dt = _dt.datetime.fromisoformat(s)
    except ValueError:
        return None

    # Ensure tz-aware; if naive, assume UTC (conservative for GPX sources)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)

    return dt.astimezone(_dt.timezone.utc)


def _float_or(text: Optional[str], default: Optional[float]) -> Optional[float]:
    if text is None or not text.strip():
        return default
    try:
        return float(text)
    except ValueError:
        return default


def _power_of(pt: ET.Element, ns: dict[str, str]) -> Optional[float]:
    """Power in watts from <extensions>, whatever extension schema wraps it."""
    ext = pt.find("gpx:extensions", ns)
    if ext is None:
        return None
    for el in ext.iter():
        if el.tag.rsplit("}", 1)[-1].lower() == "power":
            return _float_or(el.text, None)
    return None


def read_gpx(path: Path) -> ET.ElementTree:
    """
    Read a GPX file into an ElementTree.

    Raises:
      InvalidGpxError, OSError
    """
    try:
        return ET.parse(path)
    except ET.ParseError as e:
        raise InvalidGpxError(f"{path}: {e}") from e


def extract_trackpoints(tree: ET.ElementTree) -> list[TrackPoint]:
    """
    Extract ordered track points from a GPX tree.

    All <trkpt> of all tracks/segments in document order; files without
    tracks fall back to their <rtept> route points. A missing <ele> counts
    as 0 m, <time> and power are optional.
    """
    root = tree.getroot()
    ns = _namespace_of(root)

    nodes = root.findall(".//gpx:trkpt", ns) or root.findall(".//gpx:rtept", ns)

    pts: list[TrackPoint] = []
    for node in nodes:
        try:
            lat = float(node.get("lat"))
            lon = float(node.get("lon"))
        except (TypeError, ValueError) as e:
            raise InvalidGpxError(f"point without valid lat/lon: {node.attrib}") from e

        ele = _float_or(node.findtext("gpx:ele", namespaces=ns), 0.0)
        time = _parse_gpx_time(node.findtext("gpx:time", default="", namespaces=ns))

        pts.append(
            TrackPoint(
                coordinate=Coordinate(latitude=lat, longitude=lon, elevation=ele),
                time=time,
                power=_power_of(node, ns),
            )
        )

    return pts


@dataclass(frozen=True)
class Track:
    """
    A parsed GPX track together with its analysis graph.
    """
    title: str
    points: tuple[TrackPoint, ...]
    graph: TrackGraph
    date: Optional[_dt.datetime] = None
    description: Optional[str] = None
    keywords: tuple[str, ...] = ()


def read_track(
        path: Path, *,
        elevation_smoothing: ElevationSmoothing = ElevationSmoothing.segmentation(),
) -> Track:
    """
    Read a GPX file and build its TrackGraph.

    Metadata preference order:
      - title: <metadata><name>, then <trk><name>, then the file stem
      - date:  <metadata><time>, then the first point time
    """
    tree = read_gpx(path)
    root = tree.getroot()
    ns = _namespace_of(root)
    points = extract_trackpoints(tree)

    title = (
        root.findtext("gpx:metadata/gpx:name", namespaces=ns)
        or root.findtext("gpx:trk/gpx:name", namespaces=ns)
        or path.stem
    ).strip()

    date = _parse_gpx_time(root.findtext("gpx:metadata/gpx:time", default="", namespaces=ns))
    if date is None:
        date = next((p.time for p in points if p.time is not None), None)

    description = (
        root.findtext("gpx:metadata/gpx:desc", namespaces=ns)
        or root.findtext("gpx:trk/gpx:desc", namespaces=ns)
    )
    keywords_text = root.findtext("gpx:metadata/gpx:keywords", default="", namespaces=ns)
    keywords = tuple(k.strip() for k in keywords_text.split(",") if k.strip())

    return Track(
        title=title,
        points=tuple(points),
        graph=build_track_graph_from_points(points, elevation_smoothing),
        date=date,
        description=description.strip() if description else None,
        keywords=keywords,
    )
