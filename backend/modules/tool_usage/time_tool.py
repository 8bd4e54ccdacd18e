"""
modules/tool_usage/time_tool.py
---------------------------------
Arithmetic tool for clock times and planner time blocks.
Local computation only.

Clock times are "HH:MM" strings; minutes past midnight are plain ints.  Adding
minutes wraps around midnight (a late stay shows up as an early-morning time).
Time blocks look like "Mon_0900"; the part after "_" may also be a two-digit
hour ("Mon_09") or a start / end marker ("Mon_시작", "Mon_끝").
"""

from __future__ import annotations
import logging
from datetime import date, datetime, timedelta
from typing import Optional

import config

logger = logging.getLogger(__name__)

_MINUTES_PER_DAY = 24 * 60
_NO_TIME = "00:00"
_WEEKDAY_ABBREVS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class TimeTool:
    """
    Wraps time-arithmetic used by both itinerary builders:
    clock advancement, time-block parsing and travel-time labels.
    """

    def __init__(self, day_start: str = config.DEFAULT_DAY_START):
        self.day_start = day_start

    # ── Clock arithmetic ──────────────────────────────────────────────────────

    @staticmethod
    def to_minutes(clock: str) -> Optional[int]:
        """'HH:MM' → minutes past midnight, None when unparseable."""
        try:
            parsed = datetime.strptime(clock.strip(), "%H:%M")
        except (AttributeError, ValueError):
            return None
        return parsed.hour * 60 + parsed.minute

    @staticmethod
    def format_minutes(minutes: int) -> str:
        minutes = int(minutes) % _MINUTES_PER_DAY
        return f"{minutes // 60:02d}:{minutes % 60:02d}"

    def add_minutes(self, clock: str, minutes: int) -> str:
        """
        Advance an 'HH:MM' clock by a number of minutes.

        An unparseable clock is treated as midnight.
        """
        base = self.to_minutes(clock)
        if base is None:
            base = 0
        return self.format_minutes(base + int(minutes))

    # ── Time blocks ───────────────────────────────────────────────────────────

    @staticmethod
    def block_suffix(time_block: str) -> str:
        parts = time_block.split("_", 1)
        return parts[1] if len(parts) > 1 else parts[0]

    @staticmethod
    def block_digits(suffix: str) -> Optional[str]:
        """'0900' → '0900', '09' → '0900'; None for markers and junk."""
        suffix = suffix.strip()
        if not suffix.isdigit() or len(suffix) > 4:
            return None
        if len(suffix) <= 2:
            suffix = suffix.zfill(2)
        return suffix.ljust(4, "0")

    def time_from_block(self, time_block: str) -> str:
        """
        Arrival clock encoded in a time block ("Mon_0900" → "09:00").

        Anything without a usable HHMM part yields "00:00".
        """
        digits = self.block_digits(self.block_suffix(time_block))
        if digits is None:
            return _NO_TIME
        hours, mins = int(digits[:2]), int(digits[2:])
        if hours > 23 or mins > 59:
            return _NO_TIME
        return f"{hours:02d}:{mins:02d}"

    @staticmethod
    def sort_key(suffix: str) -> tuple[int, int]:
        """
        Ordering of time-block suffixes within a day:
        start markers, then numeric times, then unparseable suffixes, then end markers.
        """
        if suffix in config.TIME_BLOCK_START_MARKERS:
            return (0, 0)
        if suffix in config.TIME_BLOCK_END_MARKERS:
            return (3, 0)
        digits = TimeTool.block_digits(suffix)
        if digits is None:
            return (2, 0)
        return (1, int(digits))

    @staticmethod
    def make_block(day_of_week: str, clock: str) -> str:
        """('Mon', '09:30') → 'Mon_0930'."""
        return f"{day_of_week}_{clock.replace(':', '')}"

    # ── Labels & dates ────────────────────────────────────────────────────────

    @staticmethod
    def travel_label(minutes: Optional[int]) -> str:
        """Display label for the hop to the next stop."""
        if minutes is None:
            return config.TRAVEL_TIME_PENDING
        return f"{max(int(minutes), 0)}분"

    @staticmethod
    def format_date(base: date, offset_days: int) -> str:
        """'MM/DD' of base + offset_days."""
        return (base + timedelta(days=offset_days)).strftime("%m/%d")

    @staticmethod
    def weekday_abbrev(day: date) -> str:
        return _WEEKDAY_ABBREVS[day.weekday()]

    @staticmethod
    def weekday_index(abbrev: str) -> Optional[int]:
        """Python weekday (Mon = 0) of a "Mon".."Sun" label, or None."""
        try:
            return _WEEKDAY_ABBREVS.index(abbrev)
        except ValueError:
            return None
