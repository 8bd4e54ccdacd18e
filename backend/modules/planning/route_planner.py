"""
modules/planning/route_planner.py
-----------------------------------
Local multi-day itinerary builder (greedy nearest neighbour).

Each day d ∈ 1..N:
  1. Seed: an unused accommodation (30 min stay) if any remains, otherwise the
     first unused attraction, otherwise the first unused place of any bucket.
  2. Fill: repeatedly move to the nearest unused attraction / restaurant / cafe
     whose daily quota is not met yet.  The clock advances by travel time plus
     the category's stay duration.
  3. Close: when every quota is met or nothing eligible is left.  The last
     stop's travel label becomes "-".

Constraints enforced:
  visit-once: a place is used at most once across the whole trip (UsageArena).
  quotas:     per-day counts come from calculate_daily_quotas; the seed counts
              toward its own category.
  ties:       equal distances keep the first candidate in bucket order
              (attraction, restaurant, cafe).
"""

from __future__ import annotations
import logging
from datetime import date
from typing import Optional

import config
from schemas.itinerary import ItineraryDay, ItineraryPlaceWithTime
from schemas.place import CategorizedPlace, CategorizedPlaces, Place, PlaceCategory
from modules.planning.quota_calculator import DailyQuotas, calculate_daily_quotas
from modules.tool_usage.distance_tool import DistanceTool
from modules.tool_usage.time_tool import TimeTool
from modules.observability.logger import StructuredLogger

logger = logging.getLogger(__name__)

# Buckets scanned while filling a day, in tie-break order.
_FILL_ORDER: tuple[str, ...] = (
    PlaceCategory.ATTRACTION.value,
    PlaceCategory.RESTAURANT.value,
    PlaceCategory.CAFE.value,
)


class UsageArena:
    """
    Per-build record of which places are already on the itinerary.

    Keyed by place id (name when the id is empty), so the caller's Place
    objects are never touched.
    """

    def __init__(self) -> None:
        self._used: set[str] = set()

    @staticmethod
    def _key(place: Place) -> str:
        return place.id or f"name:{place.name}"

    def is_used(self, place: Place) -> bool:
        return self._key(place) in self._used

    def mark(self, entry: CategorizedPlace) -> None:
        self._used.add(self._key(entry.place))
        entry.used_in_itinerary = True

    def __len__(self) -> int:
        return len(self._used)


class GreedyDayAssigner:
    """Builds N days of timed stops from categorized places."""

    def __init__(
        self,
        distance_tool: DistanceTool | None = None,
        time_tool: TimeTool | None = None,
        build_log: StructuredLogger | None = None,
    ):
        self.distance_tool = distance_tool or DistanceTool()
        self.time_tool     = time_tool     or TimeTool()
        self.build_log     = build_log     or StructuredLogger()

    # ── Public entry point ────────────────────────────────────────────────────

    def assign(
        self,
        buckets: CategorizedPlaces,
        num_days: int,
        start_date: Optional[date] = None,
        day_start: Optional[str] = None,
        build_id: str = "",
    ) -> list[ItineraryDay]:
        """
        Generate num_days days.  Days that run out of places come back empty
        (total_distance_km = 0) so day numbering stays contiguous.

        Args:
            buckets:    Output of categorize_places.  used_in_itinerary flags on
                        its entries are set as places get scheduled.
            num_days:   Trip length; values below 1 yield no days.
            start_date: Date of day 1 (today when omitted); drives day_of_week,
                        date and time-block labels.
            day_start:  "HH:MM" clock each day starts at.
        """
        start_date = start_date or date.today()
        day_start = day_start or self.time_tool.day_start
        quotas = calculate_daily_quotas(buckets, num_days)
        arena = UsageArena()

        days: list[ItineraryDay] = []
        with self.build_log.stage(build_id or "heuristic", "greedy_assign") as extra:
            for offset in range(max(int(num_days), 0)):
                day = self._plan_single_day(
                    day_number=offset + 1,
                    day_of_week=self.time_tool.weekday_abbrev(
                        date.fromordinal(start_date.toordinal() + offset)
                    ),
                    date_label=self.time_tool.format_date(start_date, offset),
                    buckets=buckets,
                    quotas=quotas,
                    arena=arena,
                    day_start=day_start,
                )
                days.append(day)
            extra.update(days=len(days), places_scheduled=len(arena))

        logger.info(
            "Greedy itinerary: %d days, %d of %d places scheduled",
            len(days), len(arena), buckets.total,
        )
        return days

    # ── Per-day state machine ─────────────────────────────────────────────────

    def _plan_single_day(
        self,
        day_number: int,
        day_of_week: str,
        date_label: str,
        buckets: CategorizedPlaces,
        quotas: DailyQuotas,
        arena: UsageArena,
        day_start: str,
    ) -> ItineraryDay:
        stops: list[ItineraryPlaceWithTime] = []
        placed: list[Place] = []
        counts: dict[str, int] = {c: 0 for c in _FILL_ORDER}
        clock = day_start

        # SeedPlaced
        seed = self._pick_seed(buckets, arena)
        if seed is not None:
            entry, category = seed
            clock = self._append(stops, placed, entry, category, clock, day_of_week, arena)
            if category in counts:
                counts[category] += 1

        # FillingQuota
        while placed:
            nxt = self._pick_nearest(placed[-1], buckets, quotas, counts, arena)
            if nxt is None:
                break
            entry, category = nxt
            clock = self._append(stops, placed, entry, category, clock, day_of_week, arena)
            counts[category] += 1

        # DayClosed
        if stops:
            stops[-1].travel_time_to_next = config.TRAVEL_TIME_LAST

        return ItineraryDay(
            day=day_number,
            day_of_week=day_of_week,
            date=date_label,
            places=stops,
            total_distance_km=self.distance_tool.path_distance_km(placed),
        )

    def _pick_seed(
        self, buckets: CategorizedPlaces, arena: UsageArena
    ) -> Optional[tuple[CategorizedPlace, str]]:
        for category in (
            PlaceCategory.ACCOMMODATION.value,
            PlaceCategory.ATTRACTION.value,
            *_FILL_ORDER[1:],
        ):
            for entry in buckets.bucket(category):
                if not arena.is_used(entry.place):
                    return entry, category
        return None

    def _pick_nearest(
        self,
        current: Place,
        buckets: CategorizedPlaces,
        quotas: DailyQuotas,
        counts: dict[str, int],
        arena: UsageArena,
    ) -> Optional[tuple[CategorizedPlace, str]]:
        """
        Nearest eligible place to current.

        When no eligible place can be measured (missing coordinates on either
        side) the first eligible one in bucket order is taken instead.
        """
        eligible: list[tuple[CategorizedPlace, str]] = []
        for category in _FILL_ORDER:
            if counts[category] >= quotas.for_category(category):
                continue
            eligible.extend(
                (entry, category)
                for entry in buckets.bucket(category)
                if not arena.is_used(entry.place)
            )
        if not eligible:
            return None
        index = self.distance_tool.nearest(current, [e.place for e, _ in eligible])
        return eligible[index if index is not None else 0]

    def _append(
        self,
        stops: list[ItineraryPlaceWithTime],
        placed: list[Place],
        entry: CategorizedPlace,
        category: str,
        clock: str,
        day_of_week: str,
        arena: UsageArena,
    ) -> str:
        """Schedule entry after the current last stop; returns the clock after its stay."""
        place = entry.place
        if placed:
            minutes = self.distance_tool.travel_minutes(placed[-1], place)
            stops[-1].travel_time_to_next = self.time_tool.travel_label(minutes)
            clock = self.time_tool.add_minutes(clock, minutes or 0)

        stay = config.STAY_DURATION_MINUTES.get(
            category, config.STAY_DURATION_MINUTES[PlaceCategory.OTHER.value]
        )
        depart = self.time_tool.add_minutes(clock, stay)
        stops.append(ItineraryPlaceWithTime.from_place(
            place,
            category=category,
            arrive_time=clock,
            depart_time=depart,
            stay_duration_minutes=stay,
            time_block=self.time_tool.make_block(day_of_week, clock),
        ))
        placed.append(place)
        arena.mark(entry)
        logger.debug("Day %s: %s at %s (%s)", day_of_week, place.name, clock, category)
        return depart
