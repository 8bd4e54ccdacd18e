"""
modules/ingestion/schedule_matcher.py
---------------------------------------
Resolves one planner schedule item to a full place record.

Resolution order (first hit wins):
  1. numeric id              → PlaceLookup.find_by_id
  2. exact name              → PlaceLookup.find_by_name
     name without whitespace → PlaceLookup.find_by_name
  3. id hints: places from the last request payload and the prior selection
     whose id or name matches the item; their id is retried against the
     lookup.  Failing that, the hint with the most similar name
     (ratio >= threshold) is tried the same way.
  4. fallback: a synthetic place built from the item itself, flagged
     is_fallback and reported as unresolved_place.

Airport handling depends on the item's position in its day and lives in
consecutive_grouper.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Iterable, Optional, Union

import config
from schemas.itinerary import BuildWarning, WarningKind
from schemas.place import Place, PlaceCategory, normalize_id, parse_id, same_id
from schemas.schedule import SchedulePayload, SchedulePlace, ServerScheduleItem
from modules.planning.place_categorizer import normalize_category
from modules.tool_usage.place_lookup import PlaceLookup

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

Hint = Union[Place, SchedulePlace]


@dataclass
class MatchedScheduleItem:
    """A schedule item paired with the place it resolved to."""
    item: ServerScheduleItem
    place: Place
    category: str
    is_fallback: bool = False
    matched_by: str = ""            # id | name | name_no_spaces | hint | similar_hint | fallback
    warning: Optional[BuildWarning] = None

    @property
    def numeric_id(self) -> Optional[int]:
        if self.is_fallback:
            return None
        return parse_id(self.place.id)

    @property
    def name(self) -> str:
        return self.place.name or self.item.place_name


# ── Name helpers ───────────────────────────────────────────────────────────────

def strip_whitespace(name: str) -> str:
    return _WHITESPACE.sub("", name or "")


def name_similarity(a: str, b: str) -> float:
    """0..1 similarity of two names, ignoring case and whitespace."""
    na, nb = strip_whitespace(a).lower(), strip_whitespace(b).lower()
    if na == nb:
        return 1.0
    if not na or not nb:
        return 0.0
    return SequenceMatcher(None, na, nb).ratio()


def is_airport(name: Optional[str]) -> bool:
    """True when name mentions one of the configured airport names."""
    lowered = (name or "").lower()
    return any(airport.lower() in lowered for airport in config.AIRPORT_NAMES)


def airport_place(place_id: str = "") -> Place:
    """The fixed airport record."""
    return Place(id=place_id, **config.AIRPORT_RECORD)


# ── Matcher ────────────────────────────────────────────────────────────────────

class ScheduleItemMatcher:
    """
    Matches planner items against the place database plus the id hints
    carried over from the request that produced the response.
    """

    def __init__(
        self,
        place_lookup: PlaceLookup,
        last_payload: Optional[SchedulePayload] = None,
        prior_selection: Iterable[Place] = (),
        category_aliases: Optional[dict[str, str]] = None,
        similarity_threshold: float = config.NAME_SIMILARITY_THRESHOLD,
    ):
        self.place_lookup = place_lookup
        self.category_aliases = category_aliases
        self.similarity_threshold = similarity_threshold
        self.hints: list[Hint] = [
            *(last_payload.hint_places() if last_payload else []),
            *prior_selection,
        ]

    def match(self, item: ServerScheduleItem) -> MatchedScheduleItem:
        place, how = self._resolve(item)
        if place is not None:
            logger.debug("Matched %r by %s → id=%s", item.place_name, how, place.id)
            return MatchedScheduleItem(
                item=item,
                place=place,
                category=self._category_of(place.category, item.place_type),
                matched_by=how,
            )
        return self._fallback(item)

    # ── Resolution steps ──────────────────────────────────────────────────────

    def _resolve(self, item: ServerScheduleItem) -> tuple[Optional[Place], str]:
        numeric = parse_id(item.id)
        if numeric is not None:
            found = self.place_lookup.find_by_id(numeric)
            if found is not None:
                return found, "id"

        name = (item.place_name or "").strip()
        if name:
            found = self.place_lookup.find_by_name(name)
            if found is not None:
                return found, "name"
            compact = strip_whitespace(name)
            if compact != name:
                found = self.place_lookup.find_by_name(compact)
                if found is not None:
                    return found, "name_no_spaces"

        for hint in self.hints:
            if self._hint_matches(hint, item):
                found = self._resolve_hint(hint)
                if found is not None:
                    return found, "hint"

        similar = self._most_similar_hint(name)
        if similar is not None:
            found = self._resolve_hint(similar)
            if found is not None:
                return found, "similar_hint"

        return None, ""

    @staticmethod
    def _hint_matches(hint: Hint, item: ServerScheduleItem) -> bool:
        if item.id is not None and same_id(hint.id, item.id):
            return True
        return bool(item.place_name) and (
            hint.name == item.place_name
            or strip_whitespace(hint.name) == strip_whitespace(item.place_name)
        )

    def _resolve_hint(self, hint: Hint) -> Optional[Place]:
        numeric = parse_id(hint.id)
        if numeric is not None:
            found = self.place_lookup.find_by_id(numeric)
            if found is not None:
                return found
        # A full record from the prior selection is good enough by itself.
        if isinstance(hint, Place):
            return hint
        return None

    def _most_similar_hint(self, name: str) -> Optional[Hint]:
        if not name or not self.hints:
            return None
        best: Optional[Hint] = None
        best_score = 0.0
        for hint in self.hints:
            score = name_similarity(name, hint.name)
            if score > best_score:
                best, best_score = hint, score
        if best is not None and best_score >= self.similarity_threshold:
            logger.debug("Name %r is similar to hint %r (%.2f)", name, best.name, best_score)
            return best
        return None

    # ── Fallback ──────────────────────────────────────────────────────────────

    def _fallback(self, item: ServerScheduleItem) -> MatchedScheduleItem:
        category = self._category_of(None, item.place_type)
        x, y = item.extra_coordinate("x"), item.extra_coordinate("y")
        if x is None or y is None:
            x, y = config.FALLBACK_COORDINATES
        place = Place(
            id=normalize_id(item.id),
            name=item.place_name,
            category=category,
            x=x,
            y=y,
            rating=0.0,
        )
        message = (
            f"could not resolve schedule item {item.place_name!r} "
            f"(id={item.id!r}, time_block={item.time_block!r})"
        )
        logger.warning("Unresolved place: %s", message)
        return MatchedScheduleItem(
            item=item,
            place=place,
            category=category,
            is_fallback=True,
            matched_by="fallback",
            warning=BuildWarning(kind=WarningKind.UNRESOLVED_PLACE, message=message),
        )

    def _category_of(self, place_category: Optional[str], place_type: str) -> str:
        return (
            normalize_category(place_category, self.category_aliases)
            or normalize_category(place_type, self.category_aliases)
            or PlaceCategory.OTHER.value
        )
