"""
modules/ingestion/itinerary_assembler.py
------------------------------------------
Rebuilds the per-day itinerary from a planner schedule response.

Per normalised day:
  1. match every schedule item to a place (ScheduleItemMatcher)
  2. merge consecutive slots of the same place (group_consecutive)
  3. decode the route summary with the same day string ("Day2", "Mon"; a
     long weekday name such as "Monday" also matches "Mon") (build_route_data)
  4. fill travel labels from Haversine distance at TRAVEL_SPEED_KMH; the last
     stop gets "-", pairs touching a fallback or coordinate-less stop stay "N/A"
  5. total_distance_km = sum of consecutive-stop distances over real places

The returned days are deep copies, so no two days share a list or a record.
"""

from __future__ import annotations
import copy
import logging
from datetime import date
from typing import Any, Optional

import config
from schemas.itinerary import (
    BuildResult,
    BuildWarning,
    ItineraryDay,
    ItineraryPlaceWithTime,
    WarningKind,
)
from schemas.schedule import (
    RouteSummaryItem,
    ServerScheduleItem,
    ServerScheduleResponse,
    validate_route_summary,
    validate_schedule_items,
)
from modules.ingestion.consecutive_grouper import group_consecutive
from modules.ingestion.day_order import (
    DaySlot,
    DayOrderNormalizer,
    day_number,
    organize_schedule_by_day,
)
from modules.ingestion.route_decoder import build_route_data
from modules.ingestion.schedule_matcher import ScheduleItemMatcher
from modules.tool_usage.distance_tool import DistanceTool
from modules.tool_usage.time_tool import TimeTool
from modules.observability.logger import StructuredLogger

logger = logging.getLogger(__name__)


def _measurable(stop: ItineraryPlaceWithTime) -> bool:
    return not stop.is_fallback and stop.has_coordinates


class ItineraryAssembler:
    """Planner response → BuildResult (source="planner")."""

    def __init__(
        self,
        matcher: ScheduleItemMatcher,
        normalizer: DayOrderNormalizer | None = None,
        time_tool: TimeTool | None = None,
        distance_tool: DistanceTool | None = None,
        build_log: StructuredLogger | None = None,
    ):
        self.matcher       = matcher
        self.normalizer    = normalizer    or DayOrderNormalizer()
        self.time_tool     = time_tool     or TimeTool()
        self.distance_tool = distance_tool or DistanceTool()
        self.build_log     = build_log     or StructuredLogger()

    def assemble(
        self,
        response: ServerScheduleResponse | dict[str, Any],
        trip_start: Optional[date] = None,
        reference_date: Optional[date] = None,
        build_id: str = "",
    ) -> BuildResult:
        if isinstance(response, dict):
            response = ServerScheduleResponse.model_validate(response)

        warnings: list[BuildWarning] = []
        items, item_errors = validate_schedule_items(response.schedule)
        summaries, summary_errors = validate_route_summary(response.route_summary)
        for message in item_errors + summary_errors:
            warnings.append(BuildWarning(kind=WarningKind.INVALID_SCHEDULE_ITEM, message=message))

        by_day = organize_schedule_by_day(items)
        slots, order_warnings = self.normalizer.normalize(
            by_day.keys(), trip_start=trip_start, reference_date=reference_date,
        )
        warnings.extend(order_warnings)
        warnings.extend(self.normalizer.collisions(by_day, slots))

        summary_by_key: dict[str, RouteSummaryItem] = {}
        for summary in summaries:
            summary_by_key.setdefault(summary.day_key, summary)

        with self.build_log.stage(build_id or "planner", "assemble") as extra:
            days = [
                self._build_day(
                    slot, by_day[slot.day_key], self._summary_for(slot.day_key, summary_by_key), warnings,
                )
                for slot in slots
            ]
            extra.update(days=len(days), items=len(items), warnings=len(warnings))

        logger.info(
            "Assembled %d days from %d schedule items (%d warnings)",
            len(days), len(items), len(warnings),
        )
        return BuildResult(
            success=True,
            days=copy.deepcopy(days),
            warnings=warnings,
            source="planner",
        )

    def _summary_for(
        self, day_key: str, summary_by_key: dict[str, RouteSummaryItem],
    ) -> Optional[RouteSummaryItem]:
        """Summary with the same day string; weekday keys also match "Monday" vs "Mon"."""
        if day_key in summary_by_key:
            return summary_by_key[day_key]
        label = self.normalizer.canonical(day_key)
        if label is None or day_number(day_key) is not None:
            return None
        for key, summary in summary_by_key.items():
            if day_number(key) is None and self.normalizer.canonical(key) == label:
                return summary
        return None

    def _build_day(
        self,
        slot: DaySlot,
        items: list[ServerScheduleItem],
        summary: Optional[RouteSummaryItem],
        warnings: list[BuildWarning],
    ) -> ItineraryDay:
        matched = [self.matcher.match(item) for item in items]
        for m in matched:
            if m.warning is not None:
                m.warning.day = slot.day
                warnings.append(m.warning)

        stops = group_consecutive(matched, slot.day, self.time_tool)
        self._fill_travel_labels(stops)

        route, interleaved, route_warnings = build_route_data(summary, slot.day)
        warnings.extend(route_warnings)

        return ItineraryDay(
            day=slot.day,
            day_of_week=slot.day_of_week,
            date=slot.date_label,
            places=stops,
            total_distance_km=self.distance_tool.path_distance_km(
                [s for s in stops if _measurable(s)]
            ),
            route_data=route,
            interleaved_route=interleaved,
        )

    def _fill_travel_labels(self, stops: list[ItineraryPlaceWithTime]) -> None:
        for current, nxt in zip(stops, stops[1:]):
            if _measurable(current) and _measurable(nxt):
                minutes = self.distance_tool.travel_minutes(current, nxt)
                current.travel_time_to_next = self.time_tool.travel_label(minutes)
            else:
                current.travel_time_to_next = config.TRAVEL_TIME_PENDING
        if stops:
            stops[-1].travel_time_to_next = config.TRAVEL_TIME_LAST
