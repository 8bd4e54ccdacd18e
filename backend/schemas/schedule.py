"""
schemas/schedule.py
-------------------
Pydantic wire models exchanged with the remote schedule planner.

Inbound:  ServerScheduleResponse (flat schedule + per-day route summary).
Outbound: SchedulePayload (selected / candidate places + trip window).

The response envelope keeps its item lists untyped; items are validated one
at a time by validate_schedule_items / validate_route_summary so a single
corrupt entry does not sink the whole response.
"""

from __future__ import annotations
import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


# ── Inbound ────────────────────────────────────────────────────────────────────

class ServerScheduleItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[int, str]] = None
    place_name: str = ""
    place_type: str = ""
    time_block: str = Field(..., description='"<DayAbbrev>_<HHMM>", e.g. "Mon_0900"')

    @property
    def day_key(self) -> str:
        return self.time_block.split("_", 1)[0]

    @property
    def time_suffix(self) -> str:
        parts = self.time_block.split("_", 1)
        return parts[1] if len(parts) > 1 else ""

    def extra_coordinate(self, key: str) -> Optional[float]:
        """Numeric x / y the planner sometimes attaches to an item."""
        raw = (self.model_extra or {}).get(key)
        if isinstance(raw, bool):
            return None
        try:
            return float(raw) if raw is not None else None
        except (TypeError, ValueError):
            return None


class RouteSummaryItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    day: str
    status: str = ""
    total_distance_m: float = 0.0
    places_routed: list[str] = Field(default_factory=list)
    places_scheduled: list[str] = Field(default_factory=list)
    interleaved_route: Optional[list[Any]] = None
    segment_routes: list[Any] = Field(default_factory=list)

    @property
    def day_key(self) -> str:
        return self.day.strip()


class ServerScheduleResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    total_reward: Optional[float] = None
    schedule: list[Any] = Field(default_factory=list)
    route_summary: list[Any] = Field(default_factory=list)


def validate_schedule_items(raw_items: list[Any]) -> tuple[list[ServerScheduleItem], list[str]]:
    """Validate schedule entries one by one; returns (items, error messages)."""
    items: list[ServerScheduleItem] = []
    errors: list[str] = []
    for index, raw in enumerate(raw_items):
        if isinstance(raw, ServerScheduleItem):
            items.append(raw)
            continue
        try:
            items.append(ServerScheduleItem.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping invalid schedule item #%d: %s", index, exc.errors()[:1])
            errors.append(f"schedule item #{index} is invalid: {raw!r}")
    return items, errors


def validate_route_summary(raw_items: list[Any]) -> tuple[list[RouteSummaryItem], list[str]]:
    items: list[RouteSummaryItem] = []
    errors: list[str] = []
    for index, raw in enumerate(raw_items):
        if isinstance(raw, RouteSummaryItem):
            items.append(raw)
            continue
        try:
            items.append(RouteSummaryItem.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping invalid route summary #%d: %s", index, exc.errors()[:1])
            errors.append(f"route summary #{index} is invalid")
    return items, errors


# ── Outbound ───────────────────────────────────────────────────────────────────

class SchedulePlace(BaseModel):
    id: Union[int, str]
    name: str


class SchedulePayload(BaseModel):
    selected_places: list[SchedulePlace] = Field(default_factory=list)
    candidate_places: list[SchedulePlace] = Field(default_factory=list)
    start_datetime: str = Field(..., description="YYYY-MM-DDTHH:MM:SS, local time")
    end_datetime: str = Field(..., description="YYYY-MM-DDTHH:MM:SS, local time")

    def hint_places(self) -> list[SchedulePlace]:
        return [*self.selected_places, *self.candidate_places]
