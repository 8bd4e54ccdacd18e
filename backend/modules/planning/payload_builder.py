"""
modules/planning/payload_builder.py
-------------------------------------
Builds the request body sent to the remote schedule planner.

The planner expects numeric ids wherever the place id is numeric, so ids are
sent as ints when they parse and as the raw string otherwise.
"""

from __future__ import annotations
import logging
from datetime import datetime
from typing import Iterable, Optional

from schemas.place import Place, parse_id
from schemas.schedule import SchedulePayload, SchedulePlace
from modules.planning.auto_complete import AutoCompleteEngine, AutoCompleteResult
from modules.planning.quota_calculator import trip_length_days

logger = logging.getLogger(__name__)

_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def format_datetime(value: datetime) -> str:
    """Local ISO timestamp without timezone, e.g. '2025-05-21T09:00:00'."""
    return value.strftime(_DATETIME_FORMAT)


def to_schedule_place(place: Place) -> SchedulePlace:
    numeric = parse_id(place.id)
    return SchedulePlace(id=numeric if numeric is not None else place.id, name=place.name)


def build_schedule_payload(
    places: Iterable[Place],
    start: datetime,
    end: datetime,
) -> SchedulePayload:
    """
    Split places into user selections and auto-filled candidates
    (Place.is_candidate) and wrap them with the trip window.
    """
    places = list(places)
    return SchedulePayload(
        selected_places=[to_schedule_place(p) for p in places if not p.is_candidate],
        candidate_places=[to_schedule_place(p) for p in places if p.is_candidate],
        start_datetime=format_datetime(start),
        end_datetime=format_datetime(end),
    )


def prepare_schedule_payload(
    selected: Iterable[Place],
    start: datetime,
    end: datetime,
    recommended_by_category: Optional[dict[str, list[Place]]] = None,
    engine: Optional[AutoCompleteEngine] = None,
) -> tuple[SchedulePayload, AutoCompleteResult]:
    """Auto-complete the selection for the trip length, then build the payload."""
    selected = list(selected)
    engine = engine or AutoCompleteEngine()
    completion = engine.complete(selected, recommended_by_category or {}, trip_length_days(start, end))
    payload = build_schedule_payload([*selected, *completion.added], start, end)
    logger.info(
        "Schedule payload: %d selected, %d candidates, %s → %s",
        len(payload.selected_places), len(payload.candidate_places),
        payload.start_datetime, payload.end_datetime,
    )
    return payload, completion
