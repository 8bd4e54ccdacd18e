"""
modules/ingestion/consecutive_grouper.py
------------------------------------------
Collapses runs of hourly planner slots for the same place into one stay.

  identity     numeric id when both items resolved to a numeric id,
               otherwise (a fallback on either side) the place name
  stay         SCHEDULE_SLOT_MINUTES × run length
  arrival      clock of the run's first time block
  entry id     "<baseId>_<day>_<runStartIndex>"; baseId is the numeric id,
               else the name with whitespace replaced by "_"

A run whose name is an airport and which opens or closes the day becomes the
fixed airport record.  Travel labels start out as "N/A".
"""

from __future__ import annotations
import logging
import re

import config
from schemas.itinerary import ItineraryPlaceWithTime
from schemas.place import PlaceCategory
from modules.ingestion.schedule_matcher import MatchedScheduleItem, airport_place, is_airport
from modules.tool_usage.time_tool import TimeTool

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def _same_place(a: MatchedScheduleItem, b: MatchedScheduleItem) -> bool:
    ida, idb = a.numeric_id, b.numeric_id
    if ida is not None and idb is not None:
        return ida == idb
    return a.name == b.name


def _base_id(first: MatchedScheduleItem) -> str:
    if first.numeric_id is not None:
        return str(first.numeric_id)
    return _WHITESPACE.sub("_", first.name)


def group_consecutive(
    matched_items: list[MatchedScheduleItem],
    day_number: int,
    time_tool: TimeTool | None = None,
) -> list[ItineraryPlaceWithTime]:
    """Merge maximal same-place runs of one day's (time-sorted) items."""
    time_tool = time_tool or TimeTool()
    grouped: list[ItineraryPlaceWithTime] = []
    total = len(matched_items)
    i = 0

    while i < total:
        first = matched_items[i]
        j = i + 1
        while j < total and _same_place(first, matched_items[j]):
            j += 1

        run_length = j - i
        stay = config.SCHEDULE_SLOT_MINUTES * run_length
        arrive = time_tool.time_from_block(first.item.time_block)
        timing = dict(
            arrive_time=arrive,
            depart_time=time_tool.add_minutes(arrive, stay),
            stay_duration_minutes=stay,
            time_block=first.item.time_block,
        )
        entry_id = f"{_base_id(first)}_{day_number}_{i}"
        opens_or_closes_day = i == 0 or j == total

        if opens_or_closes_day and (is_airport(first.item.place_name) or is_airport(first.name)):
            entry = ItineraryPlaceWithTime.from_place(
                airport_place(entry_id),
                category=PlaceCategory.TRANSPORT.value,
                **timing,
            )
            entry.geo_node_id = None
            logger.debug("Day %d: airport slot at %s", day_number, arrive)
        else:
            entry = ItineraryPlaceWithTime.from_place(
                first.place, category=first.category, is_fallback=first.is_fallback, **timing
            )
            entry.id = entry_id
            if first.is_fallback:
                # No graph node behind a synthetic place.
                entry.geo_node_id = None
        entry.numeric_db_id = first.numeric_id
        entry.travel_time_to_next = config.TRAVEL_TIME_PENDING
        grouped.append(entry)
        i = j

    logger.debug("Day %d: %d slots grouped into %d stops", day_number, total, len(grouped))
    return grouped
