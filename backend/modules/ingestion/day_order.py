"""
modules/ingestion/day_order.py
--------------------------------
Turns the planner's day-keys into trip days 1..N.

Two key styles are understood:
  weekday keys   "Mon", "Tue", ... (also "monday", "MON"), looked up in the
                 configured weekday table; the table's numbering is free
                 (Mon=1..Sun=7 and Sun=0..Sat=6 both work)
  numbered keys  "Day1", "Day2", ... meaning trip day N

Stage 1  sort keys: numbered keys by N, weekday keys by the table, unknown
         labels last, otherwise stable.
Stage 2  with a trip start date, numbered keys land on day N and weekday keys
         are re-ordered by how many days after the start weekday they fall;
         then day = index + 1 and date = start + index.  The index is
         authoritative: a key whose label disagrees with its computed date
         is kept where it is and reported as day_label_mismatch.

A key holding the same time block twice means two calendar days were
collapsed into one weekday label; that is reported as day_key_collision and
left as is.
"""

from __future__ import annotations
import logging
import re
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

import config
from schemas.itinerary import BuildWarning, WarningKind
from schemas.schedule import ServerScheduleItem
from modules.tool_usage.time_tool import TimeTool

logger = logging.getLogger(__name__)

_DAY_NUMBER = re.compile(r"^day\s*(\d+)$", re.IGNORECASE)


@dataclass
class DaySlot:
    """Where one planner day-key lands in the trip."""
    day_key: str
    day: int                        # 1-based
    date: date
    day_of_week: str

    @property
    def date_label(self) -> str:
        return self.date.strftime("%m/%d")


def day_number(day_key: str) -> Optional[int]:
    """N of a "DayN" key, or None."""
    match = _DAY_NUMBER.match(day_key.strip())
    if match is None or int(match.group(1)) < 1:
        return None
    return int(match.group(1))


def organize_schedule_by_day(
    items: Iterable[ServerScheduleItem],
) -> dict[str, list[ServerScheduleItem]]:
    """
    Group items by time-block prefix; each day sorted start markers first,
    then by HHMM ("09" counts as "0900"), unparseable suffixes, end markers last.
    """
    by_day: dict[str, list[ServerScheduleItem]] = {}
    for item in items:
        by_day.setdefault(item.day_key, []).append(item)
    for day_key, day_items in by_day.items():
        day_items.sort(key=lambda it: TimeTool.sort_key(it.time_suffix))
    return by_day


class DayOrderNormalizer:
    """Maps planner day-keys to contiguous trip days."""

    def __init__(self, weekday_order: Optional[dict[str, int]] = None):
        self.weekday_order = dict(weekday_order or config.WEEKDAY_ORDER)

    def canonical(self, day_key: str) -> Optional[str]:
        """Weekday label of the table a key refers to, or None."""
        if day_key in self.weekday_order:
            return day_key
        short = day_key.strip()[:3].title()
        return short if short in self.weekday_order else None

    def weekday_rank(self, day_key: str) -> Optional[int]:
        """Position of a key in the weekday table; tolerates "monday" / "MON"."""
        label = self.canonical(day_key)
        return None if label is None else self.weekday_order[label]

    def normalize(
        self,
        day_keys: Iterable[str],
        trip_start: Optional[date] = None,
        reference_date: Optional[date] = None,
    ) -> tuple[list[DaySlot], list[BuildWarning]]:
        keys = list(dict.fromkeys(day_keys))
        ordered = sorted(keys, key=self._label_order)

        warnings: list[BuildWarning] = []
        slots: list[DaySlot] = []

        if trip_start is None:
            base = reference_date or date.today()
            for index, key in enumerate(ordered):
                day_date = base + timedelta(days=index)
                label = self.canonical(key) if day_number(key) is None else None
                slots.append(DaySlot(key, index + 1, day_date, label or TimeTool.weekday_abbrev(day_date)))
            return slots, warnings

        ordered.sort(key=lambda k: self._offset_from(k, trip_start))

        for index, key in enumerate(ordered):
            day_date = trip_start + timedelta(days=index)
            actual = TimeTool.weekday_abbrev(day_date)
            slots.append(DaySlot(key, index + 1, day_date, actual))
            if not self._lands_on(key, index + 1, actual):
                message = (
                    f"planner day {key!r} was placed on day {index + 1} "
                    f"({actual} {day_date:%m/%d})"
                )
                logger.warning("Day label mismatch: %s", message)
                warnings.append(BuildWarning(
                    kind=WarningKind.DAY_LABEL_MISMATCH, message=message, day=index + 1,
                ))

        return slots, warnings

    def _label_order(self, key: str) -> tuple[int, int]:
        number = day_number(key)
        if number is not None:
            return (0, number)
        rank = self.weekday_rank(key)
        if rank is not None:
            return (1, rank)
        return (2, 0)

    def _offset_from(self, key: str, trip_start: date) -> tuple[int, int]:
        number = day_number(key)
        if number is not None:
            return (0, number - 1)
        index = TimeTool.weekday_index(self.canonical(key) or "")
        if index is not None:
            return (0, (index - trip_start.weekday()) % 7)
        return (1, 0)

    def _lands_on(self, key: str, day: int, actual_weekday: str) -> bool:
        number = day_number(key)
        if number is not None:
            return number == day
        return self.canonical(key) == actual_weekday

    @staticmethod
    def collisions(
        schedule_by_day: dict[str, list[ServerScheduleItem]],
        slots: Iterable[DaySlot] = (),
    ) -> list[BuildWarning]:
        """day_key_collision for every key that holds the same time block twice."""
        day_of = {slot.day_key: slot.day for slot in slots}
        warnings: list[BuildWarning] = []
        for key, items in schedule_by_day.items():
            repeated = sorted(b for b, n in Counter(i.time_block for i in items).items() if n > 1)
            if not repeated:
                continue
            message = (
                f"planner day {key!r} repeats time blocks {repeated}; "
                "two calendar days may share this label"
            )
            logger.warning("Day key collision: %s", message)
            warnings.append(BuildWarning(
                kind=WarningKind.DAY_KEY_COLLISION, message=message, day=day_of.get(key),
            ))
        return warnings
