"""
modules/tool_usage/place_lookup.py
-------------------------------------
Read-only access to the place database.

The pipeline only ever asks two questions: "which place has this numeric id"
and "which place has this exact name".  ``PlaceLookup`` is that interface;
``InMemoryPlaceStore`` answers it from a list of records loaded up front
(the shape the app keeps in memory after fetching every category once).
"""

from __future__ import annotations
import dataclasses
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from schemas.place import Place, parse_id
from modules.validation import validate_place

logger = logging.getLogger(__name__)


class PlaceLookup(ABC):
    """Interface to the place database."""

    @abstractmethod
    def find_by_id(self, place_id: int) -> Optional[Place]:
        """Place whose id parses to place_id, or None."""

    @abstractmethod
    def find_by_name(self, name: str) -> Optional[Place]:
        """Place whose name equals name exactly, or None."""


def _repaired(place: Place, bad_fields: set[str]) -> Place:
    changes: dict = {}
    if "coordinates" in bad_fields:
        changes.update(x=None, y=None)
    if "rating" in bad_fields:
        changes["rating"] = 0.0
    return dataclasses.replace(place, **changes)


class InMemoryPlaceStore(PlaceLookup):
    """
    Id and name indices built once at construction, read-only afterwards.

    Only records without a name are left out (listed in ``rejected``).  A
    record with unusable coordinates stays in as a no-coordinates place, and
    an out-of-range rating is reset to 0.0 (absent).  On duplicate ids or
    names the first record wins.
    """

    def __init__(self, places: Iterable[Place | dict]) -> None:
        self._by_id: dict[int, Place] = {}
        self._by_name: dict[str, Place] = {}
        self.rejected: list[Place | dict] = []

        for raw in places:
            place = raw if isinstance(raw, Place) else Place.from_dict(raw)
            result = validate_place(place)
            if "name" in result.fields:
                logger.debug("Place %r left out of lookup: %s", place.id, result.errors)
                self.rejected.append(raw)
                continue
            if not result:
                place = _repaired(place, result.fields)
                logger.debug("Place %r repaired: %s", place.name, result.errors)
            numeric = parse_id(place.id)
            if numeric is not None:
                self._by_id.setdefault(numeric, place)
            self._by_name.setdefault(place.name, place)

        logger.debug(
            "Place store ready: %d ids, %d names, %d rejected",
            len(self._by_id), len(self._by_name), len(self.rejected),
        )

    def find_by_id(self, place_id: int) -> Optional[Place]:
        return self._by_id.get(place_id)

    def find_by_name(self, name: str) -> Optional[Place]:
        return self._by_name.get(name)

    def __len__(self) -> int:
        return len(self._by_name)
