"""
main.py
--------
Itinerary pipeline entry points.

  create_itinerary         local heuristic build (greedy nearest neighbour)
  parse_schedule_response  rebuild the itinerary from a planner response
  generate_itinerary       auto-complete the selection, ask the remote planner,
                           fall back to the heuristic build when it fails

Every entry point returns a BuildResult.  Bad or missing input never raises:
it yields success=False plus a missing_input warning.  Degraded outcomes
(unresolved places, malformed routes, short recommendation pools, planner
outages) come back as warnings next to a usable itinerary.
"""

from __future__ import annotations
import logging
import time as _time_mod
import uuid
from datetime import date, datetime
from typing import Any, Iterable, Optional

from pydantic import ValidationError

# ── Schemas ────────────────────────────────────────────────────────────────────
from schemas.itinerary import BuildResult, BuildWarning, WarningKind
from schemas.place import Place
from schemas.schedule import SchedulePayload, ServerScheduleResponse

# ── Planning ───────────────────────────────────────────────────────────────────
from modules.planning.auto_complete import AutoCompleteEngine
from modules.planning.payload_builder import prepare_schedule_payload
from modules.planning.place_categorizer import categorize_places
from modules.planning.quota_calculator import trip_length_days
from modules.planning.route_planner import GreedyDayAssigner

# ── Ingestion ──────────────────────────────────────────────────────────────────
from modules.ingestion.day_order import DayOrderNormalizer
from modules.ingestion.itinerary_assembler import ItineraryAssembler
from modules.ingestion.schedule_matcher import ScheduleItemMatcher

# ── Tools ──────────────────────────────────────────────────────────────────────
from modules.tool_usage.distance_tool import DistanceTool
from modules.tool_usage.place_lookup import PlaceLookup
from modules.tool_usage.planner_client import PlannerClient, PlannerError
from modules.tool_usage.time_tool import TimeTool
from modules.observability.logger import StructuredLogger

logger = logging.getLogger(__name__)


def _new_build_id() -> str:
    return f"build_{uuid.uuid4().hex[:12]}"


def _missing_input(message: str, source: str) -> BuildResult:
    logger.warning("Missing input: %s", message)
    return BuildResult(
        success=False,
        warnings=[BuildWarning(kind=WarningKind.MISSING_INPUT, message=message)],
        source=source,
    )


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


# ── Heuristic path ─────────────────────────────────────────────────────────────

def create_itinerary(
    places: Iterable[Place],
    start: Optional[date | datetime],
    end: Optional[date | datetime],
    category_aliases: Optional[dict[str, str]] = None,
    build_log: Optional[StructuredLogger] = None,
    build_id: str = "",
) -> BuildResult:
    """
    Build an itinerary locally from candidate places and a trip window.

    A datetime start also sets the first day's start clock.
    """
    places = list(places or [])
    if start is None or end is None:
        return _missing_input("trip start and end dates are required", "heuristic")
    if _as_date(end) < _as_date(start):
        return _missing_input(f"trip ends ({end}) before it starts ({start})", "heuristic")
    if not places:
        return _missing_input("no places to schedule", "heuristic")

    build_id = build_id or _new_build_id()
    build_log = build_log or StructuredLogger()
    _t0 = _time_mod.perf_counter()

    buckets = categorize_places(places, category_aliases)
    warnings = [
        BuildWarning(
            kind=WarningKind.UNCATEGORIZED_PLACE,
            message=f"place {p.name!r} has unknown category {p.category!r}",
            category=p.category,
        )
        for p in buckets.dropped
    ]

    day_start = start.strftime("%H:%M") if isinstance(start, datetime) else None
    num_days = trip_length_days(start, end)
    assigner = GreedyDayAssigner(DistanceTool(), TimeTool(), build_log)
    days = assigner.assign(
        buckets, num_days, start_date=_as_date(start), day_start=day_start, build_id=build_id,
    )

    result = BuildResult(success=True, days=days, warnings=warnings, source="heuristic")
    build_log.log(build_id, "BUILD_COMPLETE", {
        "source": result.source,
        "days": len(days),
        "warnings": [w.kind for w in warnings],
        "duration_ms": round((_time_mod.perf_counter() - _t0) * 1000, 2),
    })
    return result


# ── Planner-response path ──────────────────────────────────────────────────────

def parse_schedule_response(
    response: ServerScheduleResponse | dict[str, Any] | None,
    place_lookup: PlaceLookup,
    trip_start: Optional[date | datetime] = None,
    last_payload: Optional[SchedulePayload] = None,
    prior_selection: Iterable[Place] = (),
    category_aliases: Optional[dict[str, str]] = None,
    reference_date: Optional[date] = None,
    build_log: Optional[StructuredLogger] = None,
    build_id: str = "",
) -> BuildResult:
    """Rebuild the per-day itinerary from a planner schedule response."""
    if response is None:
        return _missing_input("no planner response", "planner")
    if isinstance(response, dict):
        try:
            response = ServerScheduleResponse.model_validate(response)
        except ValidationError as exc:
            return _missing_input(f"planner response is not usable: {exc.error_count()} errors", "planner")
    if not response.schedule:
        return _missing_input("planner response has an empty schedule", "planner")

    build_id = build_id or _new_build_id()
    build_log = build_log or StructuredLogger()
    matcher = ScheduleItemMatcher(
        place_lookup,
        last_payload=last_payload,
        prior_selection=prior_selection,
        category_aliases=category_aliases,
    )
    assembler = ItineraryAssembler(
        matcher, DayOrderNormalizer(), TimeTool(), DistanceTool(), build_log,
    )
    result = assembler.assemble(
        response,
        trip_start=_as_date(trip_start) if trip_start else None,
        reference_date=reference_date,
        build_id=build_id,
    )
    build_log.log(build_id, "BUILD_COMPLETE", {
        "source": result.source,
        "days": len(result.days),
        "warnings": [w.kind for w in result.warnings],
    })
    return result


# ── Full flow ──────────────────────────────────────────────────────────────────

def generate_itinerary(
    selected: Iterable[Place],
    start: Optional[datetime],
    end: Optional[datetime],
    place_lookup: PlaceLookup,
    recommended_by_category: Optional[dict[str, list[Place]]] = None,
    client: Optional[PlannerClient] = None,
    engine: Optional[AutoCompleteEngine] = None,
    category_aliases: Optional[dict[str, str]] = None,
    build_log: Optional[StructuredLogger] = None,
) -> BuildResult:
    """
    Auto-complete, request a schedule from the planner and ingest it.

    When the planner is not configured the heuristic build runs directly;
    when it fails the heuristic build runs on the same places and the result
    carries a planner_unavailable warning.
    """
    selected = list(selected or [])
    if start is None or end is None:
        return _missing_input("trip start and end dates are required", "heuristic")
    if _as_date(end) < _as_date(start):
        return _missing_input(f"trip ends ({end}) before it starts ({start})", "heuristic")
    if not selected and not recommended_by_category:
        return _missing_input("no places to schedule", "heuristic")

    build_id = _new_build_id()
    build_log = build_log or StructuredLogger()
    client = client or PlannerClient()
    engine = engine or AutoCompleteEngine(category_aliases=category_aliases)

    payload, completion = prepare_schedule_payload(
        selected, start, end, recommended_by_category, engine,
    )
    completion_warnings = completion.warnings
    everything = [*selected, *completion.added]
    build_log.log(build_id, "PAYLOAD", payload.model_dump())

    def _heuristic(extra: list[BuildWarning]) -> BuildResult:
        result = create_itinerary(
            everything, start, end, category_aliases, build_log, build_id,
        )
        result.warnings = [*completion_warnings, *extra, *result.warnings]
        return result

    if not client.enabled:
        logger.info("Planner not configured; building itinerary locally")
        return _heuristic([])

    try:
        response = client.request_schedule(payload)
    except PlannerError as exc:
        logger.warning("Planner unavailable, falling back to local build: %s", exc)
        return _heuristic([BuildWarning(kind=WarningKind.PLANNER_UNAVAILABLE, message=str(exc))])

    result = parse_schedule_response(
        response,
        place_lookup,
        trip_start=start,
        last_payload=payload,
        prior_selection=everything,
        category_aliases=category_aliases,
        build_log=build_log,
        build_id=build_id,
    )
    if not result.success:
        logger.warning("Planner response unusable, falling back to local build")
        return _heuristic([
            BuildWarning(kind=WarningKind.PLANNER_UNAVAILABLE, message=w.message)
            for w in result.warnings
        ])
    result.warnings = [*completion_warnings, *result.warnings]
    return result
