"""
modules/planning/auto_complete.py
-----------------------------------
Tops up an under-filled selection with recommended places.

For each category:
    shortage = max(0, minimum_required(trip_days)[category] - selected count)
The first `shortage` pool entries that are neither selected nor already
added in this run are appended as candidates (is_candidate=True).  A pool too
small to cover the shortage produces a quota_shortfall warning.

Pool dicts may be keyed by any label the category alias table knows
("관광지", "attraction", "touristspot" ...).
"""

from __future__ import annotations
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from schemas.itinerary import BuildWarning, WarningKind
from schemas.place import Place, PlaceCategory, normalize_id
from modules.planning.place_categorizer import canonical_category, normalize_category
from modules.planning.quota_calculator import minimum_recommendation_count

logger = logging.getLogger(__name__)

# Order categories are topped up in.
_CATEGORY_ORDER: tuple[str, ...] = (
    PlaceCategory.ACCOMMODATION.value,
    PlaceCategory.ATTRACTION.value,
    PlaceCategory.RESTAURANT.value,
    PlaceCategory.CAFE.value,
)


@dataclass
class AutoCompleteResult:
    """
    added:                candidates appended to the selection, in category order
    warnings:             quota_shortfall / missing_input diagnostics
    remaining_candidates: pool entries neither selected nor added (deduplicated)
    """
    added: list[Place] = field(default_factory=list)
    warnings: list[BuildWarning] = field(default_factory=list)
    remaining_candidates: list[Place] = field(default_factory=list)


class AutoCompleteEngine:
    """Fills category shortfalls from per-category recommendation pools."""

    def __init__(
        self,
        minimum_required: Callable[[int], dict[str, int]] = minimum_recommendation_count,
        category_aliases: Optional[dict[str, str]] = None,
    ):
        self.minimum_required = minimum_required
        self.category_aliases = category_aliases

    def complete(
        self,
        selected: Iterable[Place],
        recommended_by_category: dict[str, list[Place]],
        trip_duration: int,
    ) -> AutoCompleteResult:
        result = AutoCompleteResult()
        selected = list(selected)

        if not trip_duration or trip_duration < 1:
            logger.warning("Auto-complete skipped: trip duration %r", trip_duration)
            result.warnings.append(BuildWarning(
                kind=WarningKind.MISSING_INPUT,
                message="trip duration is missing or shorter than one day",
            ))
            return result

        pools = self._pools_by_category(recommended_by_category)
        minimums = self.minimum_required(trip_duration)

        taken: set[str] = {normalize_id(p.id) for p in selected if p.id}
        selected_counts: dict[str, int] = {}
        for place in selected:
            category = canonical_category(place, self.category_aliases)
            selected_counts[category] = selected_counts.get(category, 0) + 1

        for category in _CATEGORY_ORDER:
            minimum = minimums.get(category, 0)
            shortage = max(0, minimum - selected_counts.get(category, 0))
            if shortage == 0:
                continue

            picks: list[Place] = []
            for candidate in pools.get(category, []):
                if len(picks) >= shortage:
                    break
                key = normalize_id(candidate.id)
                if not key or key in taken:
                    continue
                taken.add(key)
                picks.append(dataclasses.replace(candidate, is_candidate=True))

            result.added.extend(picks)
            logger.info(
                "Auto-complete %s: minimum %d, selected %d, added %d",
                category, minimum, selected_counts.get(category, 0), len(picks),
            )
            if len(picks) < shortage:
                missing = shortage - len(picks)
                logger.warning("Auto-complete %s: pool short by %d", category, missing)
                result.warnings.append(BuildWarning(
                    kind=WarningKind.QUOTA_SHORTFALL,
                    message=f"not enough {category} recommendations: {missing} short",
                    category=category,
                    shortage=missing,
                ))

        seen: set[str] = set(taken)
        for category in _CATEGORY_ORDER:
            for candidate in pools.get(category, []):
                key = normalize_id(candidate.id)
                if key and key not in seen:
                    seen.add(key)
                    result.remaining_candidates.append(candidate)

        return result

    def _pools_by_category(
        self, recommended_by_category: dict[str, list[Place]]
    ) -> dict[str, list[Place]]:
        pools: dict[str, list[Place]] = {}
        for label, places in (recommended_by_category or {}).items():
            category = normalize_category(label, self.category_aliases)
            if category is None:
                logger.warning("Ignoring recommendations under unknown category %r", label)
                continue
            pools.setdefault(category, []).extend(places or [])
        return pools
