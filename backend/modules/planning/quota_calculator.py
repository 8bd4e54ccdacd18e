"""
modules/planning/quota_calculator.py
--------------------------------------
Per-day category quotas and whole-trip minimum counts.

  daily quota (attraction / restaurant / cafe) = ceil(bucket size / days)
  accommodation                                = at most one per day
  trip minimums                                = 4 attractions, 3 restaurants and
                                                 3 cafes per day (never fewer than
                                                 one day's worth), one accommodation
                                                 per night
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import date, datetime

from schemas.place import CategorizedPlaces, PlaceCategory


@dataclass
class DailyQuotas:
    """How many places of each category one day should hold."""
    attraction: int = 0
    restaurant: int = 0
    cafe: int = 0
    accommodation: int = 1

    def for_category(self, category: str) -> int:
        return getattr(self, category, 0)


def calculate_daily_quotas(buckets: CategorizedPlaces, num_days: int) -> DailyQuotas:
    """
    ceil(count / num_days) per category.  num_days below 1 is treated as 1.
    """
    days = max(int(num_days), 1)
    return DailyQuotas(
        attraction=math.ceil(len(buckets.attractions) / days),
        restaurant=math.ceil(len(buckets.restaurants) / days),
        cafe=math.ceil(len(buckets.cafes) / days),
        accommodation=1 if buckets.accommodations else 0,
    )


def minimum_recommendation_count(num_days: int) -> dict[str, int]:
    """Whole-trip minimum number of places per category for a trip of num_days."""
    n = max(int(num_days), 0)
    return {
        PlaceCategory.ATTRACTION.value:    max(4, 4 * n),
        PlaceCategory.RESTAURANT.value:    max(3, 3 * n),
        PlaceCategory.CAFE.value:          max(3, 3 * n),
        PlaceCategory.ACCOMMODATION.value: n - 1 if n > 1 else 1,
    }


def trip_length_days(start: date | datetime, end: date | datetime) -> int:
    """Inclusive number of calendar days between start and end, at least 1."""
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(end, datetime):
        end = end.date()
    return max((end - start).days + 1, 1)
