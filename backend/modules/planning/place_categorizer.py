"""
modules/planning/place_categorizer.py
---------------------------------------
Splits a flat list of candidate places into the four schedulable buckets
(accommodation, attraction, restaurant, cafe).

Categories arrive in whatever vocabulary the data source uses ("관광지",
"Restaurant", "hotel" ...) and are normalised through one alias table,
config.CATEGORY_ALIASES by default.  Places whose category maps to nothing
schedulable are dropped and reported.
"""

from __future__ import annotations
import logging
from typing import Iterable, Optional

import config
from schemas.place import (
    CategorizedPlace,
    CategorizedPlaces,
    Place,
    PlaceCategory,
    SCHEDULABLE_CATEGORIES,
)

logger = logging.getLogger(__name__)

_SCHEDULABLE = {c.value for c in SCHEDULABLE_CATEGORIES}


def normalize_category(
    raw: Optional[str],
    category_aliases: Optional[dict[str, str]] = None,
) -> Optional[str]:
    """
    Canonical category for a raw label, or None when the label is unknown.

    Matching is case-insensitive and ignores surrounding whitespace.
    """
    if not raw:
        return None
    aliases = config.CATEGORY_ALIASES if category_aliases is None else category_aliases
    key = str(raw).strip()
    return aliases.get(key) or aliases.get(key.lower())


def categorize_places(
    places: Iterable[Place],
    category_aliases: Optional[dict[str, str]] = None,
) -> CategorizedPlaces:
    """
    Bucket places by canonical category, preserving input order.

    Every entry starts with used_in_itinerary=False.  The caller's Place
    objects are referenced, never modified.
    """
    result = CategorizedPlaces()
    no_coords = 0

    for place in places:
        category = normalize_category(place.category, category_aliases)
        if category not in _SCHEDULABLE:
            logger.warning(
                "Dropping place %r (id=%s): category %r is not schedulable",
                place.name, place.id, place.category,
            )
            result.dropped.append(place)
            continue
        if not place.has_coordinates:
            no_coords += 1
            logger.info("Place %r (id=%s) has no coordinates", place.name, place.id)
        result.bucket(category).append(CategorizedPlace(place=place))

    logger.debug(
        "Categorized %d places: %d accommodation, %d attraction, %d restaurant, "
        "%d cafe, %d dropped, %d without coordinates",
        result.total + len(result.dropped),
        len(result.accommodations), len(result.attractions),
        len(result.restaurants), len(result.cafes),
        len(result.dropped), no_coords,
    )
    return result


def canonical_category(place: Place, category_aliases: Optional[dict[str, str]] = None) -> str:
    """Canonical category of a place, "other" when unknown."""
    return normalize_category(place.category, category_aliases) or PlaceCategory.OTHER.value
