"""
schemas/place.py
----------------
Place records and the canonical place-id conversions.

External systems emit place ids either as numbers or as strings ("123",
"N123", "n/a").  Every comparison in the pipeline goes through parse_id /
format_id / same_id instead of comparing raw values.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class PlaceCategory(str, Enum):
    ACCOMMODATION = "accommodation"
    ATTRACTION    = "attraction"
    RESTAURANT    = "restaurant"
    CAFE          = "cafe"
    OTHER         = "other"
    TRANSPORT     = "transport"   # airport record only


# Categories the itinerary builders schedule (buckets).
SCHEDULABLE_CATEGORIES: tuple[PlaceCategory, ...] = (
    PlaceCategory.ACCOMMODATION,
    PlaceCategory.ATTRACTION,
    PlaceCategory.RESTAURANT,
    PlaceCategory.CAFE,
)


# ── Place id conversions ──────────────────────────────────────────────────────

def parse_id(value: Any) -> Optional[int]:
    """
    Convert a raw place id to an int.

    Accepts ints, integral floats, digit strings and the graph-style "N123"
    form.  Returns None for everything else (bools, "n/a", "", "12abc", None).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        text = value.strip()
        if len(text) > 1 and text[0] in ("N", "n") and text[1:].isdigit():
            text = text[1:]
        if text.isdigit():
            return int(text)
        if text[:1] == "-" and text[1:].isdigit():
            return int(text)
    return None


def format_id(value: int) -> str:
    return str(int(value))


def normalize_id(value: Any) -> str:
    """String form of a raw id: canonical digits when numeric, stripped text otherwise."""
    parsed = parse_id(value)
    if parsed is not None:
        return format_id(parsed)
    return "" if value is None else str(value).strip()


def same_id(a: Any, b: Any) -> bool:
    """True when two raw ids denote the same place."""
    pa, pb = parse_id(a), parse_id(b)
    if pa is not None and pb is not None:
        return pa == pb
    na, nb = normalize_id(a), normalize_id(b)
    return bool(na) and na == nb


def is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


# ── Records ───────────────────────────────────────────────────────────────────

@dataclass
class Place:
    """
    A candidate place.  x is longitude, y is latitude.

    Identity is `id` (always stored as a string).  A place whose x/y are not
    finite numbers is a "no coordinates" place: it is still schedulable but is
    left out of all distance math.
    """
    id: str
    name: str
    category: str = PlaceCategory.OTHER.value
    x: Optional[float] = None
    y: Optional[float] = None
    address: str = ""
    road_address: str = ""
    phone: str = ""
    description: str = ""
    rating: float = 0.0
    image_url: str = ""
    homepage: str = ""
    geo_node_id: Optional[str] = None
    is_candidate: bool = False      # auto-filled, not picked by the user

    def __post_init__(self) -> None:
        self.id = normalize_id(self.id)

    @property
    def has_coordinates(self) -> bool:
        return is_finite_number(self.x) and is_finite_number(self.y)

    @property
    def numeric_id(self) -> Optional[int]:
        return parse_id(self.id)

    @classmethod
    def from_dict(cls, data: dict) -> "Place":
        """Build a Place from a loosely-typed record (DB row, JSON)."""
        def _coord(key: str) -> Optional[float]:
            raw = data.get(key)
            try:
                return float(raw) if raw is not None and raw != "" else None
            except (TypeError, ValueError):
                return None

        try:
            rating = float(data.get("rating") or 0.0)
        except (TypeError, ValueError):
            rating = 0.0

        return cls(
            id=data.get("id"),
            name=str(data.get("name") or ""),
            category=str(data.get("category") or PlaceCategory.OTHER.value),
            x=_coord("x"),
            y=_coord("y"),
            address=data.get("address") or "",
            road_address=data.get("road_address") or "",
            phone=data.get("phone") or "",
            description=data.get("description") or "",
            rating=rating,
            image_url=data.get("image_url") or "",
            homepage=data.get("homepage") or "",
            geo_node_id=data.get("geo_node_id") or data.get("geoNodeId"),
            is_candidate=bool(data.get("is_candidate", False)),
        )


@dataclass
class CategorizedPlace:
    """Bucket entry produced by the categorizer for one build."""
    place: Place
    used_in_itinerary: bool = False


@dataclass
class CategorizedPlaces:
    """The four schedulable buckets plus what was dropped."""
    accommodations: list[CategorizedPlace] = field(default_factory=list)
    attractions:    list[CategorizedPlace] = field(default_factory=list)
    restaurants:    list[CategorizedPlace] = field(default_factory=list)
    cafes:          list[CategorizedPlace] = field(default_factory=list)
    dropped:        list[Place] = field(default_factory=list)

    def bucket(self, category: str) -> list[CategorizedPlace]:
        return {
            PlaceCategory.ACCOMMODATION.value: self.accommodations,
            PlaceCategory.ATTRACTION.value:    self.attractions,
            PlaceCategory.RESTAURANT.value:    self.restaurants,
            PlaceCategory.CAFE.value:          self.cafes,
        }.get(category, [])

    @property
    def total(self) -> int:
        return (
            len(self.accommodations) + len(self.attractions)
            + len(self.restaurants) + len(self.cafes)
        )
