"""
modules/ingestion/route_decoder.py
------------------------------------
Splits the planner's interleaved route array into graph node and link ids.

    interleaved_route = [node, link, node, link, ..., node]
                          0     1     2     3          2k

Even positions are nodes, odd positions are links.  A well-formed route has
odd length (it starts and ends on a node).  Decoding never raises: bad input
gives best-effort lists plus a malformed_route warning.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from schemas.itinerary import BuildWarning, RouteData, SegmentRoute, WarningKind
from schemas.schedule import RouteSummaryItem

logger = logging.getLogger(__name__)


@dataclass
class RouteHop:
    """node → node hop and the links travelled on the way."""
    from_node: str
    to_node: str
    links: list[str] = field(default_factory=list)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _id_str(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def decode_route(interleaved: Optional[list[Any]]) -> tuple[list[str], list[str]]:
    """
    (node_ids, link_ids) in route order, ids as strings.

    Blank entries are skipped without shifting the node / link parity of the
    entries after them.
    """
    node_ids: list[str] = []
    link_ids: list[str] = []
    for index, value in enumerate(interleaved or []):
        if _is_blank(value):
            continue
        (node_ids if index % 2 == 0 else link_ids).append(_id_str(value))
    return node_ids, link_ids


def interleave(node_ids: list[Any], link_ids: list[Any]) -> list[str]:
    """Inverse of decode_route: node, link, node, ... (extra ids of either kind appended in turn)."""
    route: list[str] = []
    for index in range(max(len(node_ids), len(link_ids))):
        if index < len(node_ids):
            route.append(_id_str(node_ids[index]))
        if index < len(link_ids):
            route.append(_id_str(link_ids[index]))
    return route


def route_problems(interleaved: Optional[list[Any]]) -> list[str]:
    """Human-readable reasons an interleaved route is malformed (empty when fine)."""
    if not interleaved:
        return []
    problems: list[str] = []
    if len(interleaved) % 2 == 0:
        problems.append(f"route has even length {len(interleaved)} (ends on a link)")
    blanks = [i for i, value in enumerate(interleaved) if _is_blank(value)]
    if blanks:
        problems.append(f"route has blank entries at positions {blanks[:10]}")
    return problems


def parse_route_segments(interleaved: Optional[list[Any]]) -> list[RouteHop]:
    """
    Node-link-node hops for renderers.

    Routes shorter than one hop (fewer than three entries) yield no hops; a
    trailing link without a closing node is dropped.
    """
    if not interleaved or len(interleaved) < 3:
        return []
    hops: list[RouteHop] = []
    current: Optional[RouteHop] = None
    for index, value in enumerate(interleaved):
        ident = "" if _is_blank(value) else _id_str(value)
        if index % 2 == 0:
            if current is not None:
                current.to_node = ident
                hops.append(current)
            current = RouteHop(from_node=ident, to_node="")
        elif current is not None and ident:
            current.links.append(ident)
    return hops


def _segment_routes(raw_segments: list[Any]) -> list[SegmentRoute]:
    segments: list[SegmentRoute] = []
    for raw in raw_segments or []:
        if not isinstance(raw, dict):
            logger.debug("Ignoring non-object segment route %r", raw)
            continue
        try:
            segments.append(SegmentRoute(
                from_index=int(raw.get("from_index", 0)),
                to_index=int(raw.get("to_index", 0)),
                node_ids=[_id_str(v) for v in raw.get("node_ids") or [] if not _is_blank(v)],
                link_ids=[_id_str(v) for v in raw.get("link_ids") or [] if not _is_blank(v)],
            ))
        except (TypeError, ValueError):
            logger.debug("Ignoring malformed segment route %r", raw)
    return segments


def build_route_data(
    route_summary_item: Optional[RouteSummaryItem],
    day_number: Optional[int] = None,
) -> tuple[RouteData, list[str], list[BuildWarning]]:
    """
    RouteData, the stringified interleaved route and any malformed_route warnings
    for one day.  A missing summary gives empty route data.
    """
    if route_summary_item is None:
        return RouteData(), [], []

    raw = route_summary_item.interleaved_route
    if raw is not None and not isinstance(raw, list):
        raw = None
    node_ids, link_ids = decode_route(raw)
    interleaved = ["" if _is_blank(v) else _id_str(v) for v in raw or []]

    warnings: list[BuildWarning] = []
    for problem in route_problems(raw):
        logger.warning("Malformed route for %s: %s", route_summary_item.day, problem)
        warnings.append(BuildWarning(
            kind=WarningKind.MALFORMED_ROUTE,
            message=f"{route_summary_item.day}: {problem}",
            day=day_number,
        ))

    distance_m = route_summary_item.total_distance_m or 0.0
    route = RouteData(
        node_ids=node_ids,
        link_ids=link_ids,
        segment_routes=_segment_routes(route_summary_item.segment_routes),
        route_distance_km=max(distance_m, 0.0) / 1000.0,
    )
    return route, interleaved, warnings
