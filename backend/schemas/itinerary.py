"""
schemas/itinerary.py
--------------------
Dataclass definitions for the per-day itinerary model shared by both build
paths (local heuristic and planner-response ingestion).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

import config
from schemas.place import Place, is_finite_number


@dataclass
class ItineraryPlaceWithTime:
    """
    A single timed stop in a day's itinerary.

    travel_time_to_next is a display label: "N/A" until computed, "-" for the
    last stop of a day, otherwise e.g. "15분".
    """
    id: str = ""
    name: str = ""
    category: str = "other"
    x: Optional[float] = None                 # lng
    y: Optional[float] = None                 # lat
    address: str = ""
    road_address: str = ""
    phone: str = ""
    description: str = ""
    rating: float = 0.0
    image_url: str = ""
    homepage: str = ""
    geo_node_id: Optional[str] = None
    arrive_time: str = ""                     # HH:MM
    depart_time: str = ""                     # HH:MM
    stay_duration_minutes: int = 0
    travel_time_to_next: str = config.TRAVEL_TIME_PENDING
    time_block: str = ""                      # e.g. "Mon_0900"
    is_fallback: bool = False
    is_candidate: bool = False
    numeric_db_id: Optional[int] = None

    @property
    def has_coordinates(self) -> bool:
        return is_finite_number(self.x) and is_finite_number(self.y)

    @classmethod
    def from_place(
        cls, place: Place, category: Optional[str] = None, **timing
    ) -> "ItineraryPlaceWithTime":
        """Copy a Place's fields; timing fields (arrive_time, ...) come from kwargs."""
        return cls(
            id=place.id,
            name=place.name,
            category=category or place.category,
            x=place.x,
            y=place.y,
            address=place.address,
            road_address=place.road_address,
            phone=place.phone,
            description=place.description,
            rating=place.rating,
            image_url=place.image_url,
            homepage=place.homepage,
            geo_node_id=place.geo_node_id or place.id or None,
            is_candidate=place.is_candidate,
            numeric_db_id=place.numeric_id,
            **timing,
        )


@dataclass
class SegmentRoute:
    """Route slice between two stops of a day."""
    from_index: int = 0
    to_index: int = 0
    node_ids: list[str] = field(default_factory=list)
    link_ids: list[str] = field(default_factory=list)


@dataclass
class RouteData:
    """Graph ids of a day's route, split out of the interleaved array."""
    node_ids: list[str] = field(default_factory=list)
    link_ids: list[str] = field(default_factory=list)
    segment_routes: list[SegmentRoute] = field(default_factory=list)
    route_distance_km: float = 0.0            # planner-reported graph distance


@dataclass
class ItineraryDay:
    """One day's scheduled stops."""
    day: int = 0                              # 1-based, contiguous
    day_of_week: str = ""                     # "Mon".."Sun"
    date: str = ""                            # MM/DD
    places: list[ItineraryPlaceWithTime] = field(default_factory=list)
    total_distance_km: float = 0.0            # Haversine sum over consecutive stops
    route_data: RouteData = field(default_factory=RouteData)
    interleaved_route: list[str] = field(default_factory=list)


# ── Diagnostics ───────────────────────────────────────────────────────────────

class WarningKind:
    MISSING_INPUT         = "missing_input"
    QUOTA_SHORTFALL       = "quota_shortfall"
    UNRESOLVED_PLACE      = "unresolved_place"
    MALFORMED_ROUTE       = "malformed_route"
    DAY_KEY_COLLISION     = "day_key_collision"
    DAY_LABEL_MISMATCH    = "day_label_mismatch"
    INVALID_SCHEDULE_ITEM = "invalid_schedule_item"
    PLANNER_UNAVAILABLE   = "planner_unavailable"
    UNCATEGORIZED_PLACE   = "uncategorized_place"


@dataclass
class BuildWarning:
    """Caller-visible diagnostic for a degraded (but still usable) build."""
    kind: str
    message: str
    category: Optional[str] = None
    shortage: Optional[int] = None
    day: Optional[int] = None


@dataclass
class BuildResult:
    """
    Outcome of one itinerary build.

    success is False only for missing input; every other failure mode shows
    up as warnings next to a partial itinerary.
    """
    success: bool = True
    days: list[ItineraryDay] = field(default_factory=list)
    warnings: list[BuildWarning] = field(default_factory=list)
    source: str = "heuristic"                 # "heuristic" | "planner"

    def warnings_of(self, kind: str) -> list[BuildWarning]:
        return [w for w in self.warnings if w.kind == kind]
