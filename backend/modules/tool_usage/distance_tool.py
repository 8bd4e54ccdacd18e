"""
modules/tool_usage/distance_tool.py
-------------------------------------
Straight-line distance and travel-time estimates between places, using the
Haversine formula and a flat average speed.  No external HTTP calls are made.

Coordinates follow the place records: x is longitude, y is latitude.

Config knob (config.py):
  TRAVEL_SPEED_KMH -- average travel speed (default: 40)
"""

from __future__ import annotations
import math
import logging
from typing import Any, Optional

import config
from schemas.place import is_finite_number

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

_EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    r = _EARTH_RADIUS_KM
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * r * math.asin(math.sqrt(a))


def _km_to_minutes(km: float, speed_kmh: float) -> float:
    return (km / speed_kmh) * 60.0


def _xy(place: Any) -> Optional[tuple[float, float]]:
    """(lng, lat) of any record with x / y attributes, or None without coordinates."""
    x, y = getattr(place, "x", None), getattr(place, "y", None)
    if is_finite_number(x) and is_finite_number(y):
        return float(x), float(y)
    return None


# ---------------------------------------------------------------------------
# DistanceTool
# ---------------------------------------------------------------------------


class DistanceTool:
    """
    Haversine distances between places plus minutes at a constant speed
    (config.TRAVEL_SPEED_KMH).
    """

    def __init__(self, speed_kmh: Optional[float] = None) -> None:
        self.speed_kmh: float = speed_kmh or config.TRAVEL_SPEED_KMH

    def distance_km(self, a: Any, b: Any) -> Optional[float]:
        """Distance between two place records; None when either has no coordinates."""
        pa, pb = _xy(a), _xy(b)
        if pa is None or pb is None:
            return None
        if pa == pb:
            return 0.0
        return haversine_km(pa[1], pa[0], pb[1], pb[0])

    def travel_minutes(self, a: Any, b: Any) -> Optional[int]:
        """Whole minutes (rounded up) to get from a to b, None without coordinates."""
        km = self.distance_km(a, b)
        if km is None:
            return None
        return self.minutes_for_km(km)

    def minutes_for_km(self, km: float) -> int:
        if km <= 0:
            return 0
        return math.ceil(_km_to_minutes(km, self.speed_kmh))

    def path_distance_km(self, places: list[Any]) -> float:
        """
        Sum of distances between consecutive places.

        Pairs where either side has no coordinates contribute nothing.
        """
        total = 0.0
        for a, b in zip(places, places[1:]):
            km = self.distance_km(a, b)
            if km is not None:
                total += km
        return total

    def nearest(self, origin: Any, candidates: list[Any]) -> Optional[int]:
        """
        Index of the candidate closest to origin.

        Candidates without coordinates are skipped; ties keep the first one.
        Returns None when nothing is reachable.
        """
        best_index: Optional[int] = None
        best_km = math.inf
        for index, candidate in enumerate(candidates):
            km = self.distance_km(origin, candidate)
            if km is not None and km < best_km:
                best_km = km
                best_index = index
        return best_index
