"""
modules/validation/place_validator.py
--------------------------------------
Data-quality guards for place records entering the itinerary builders.

  Place:
    ✓ Non-empty name
    ✓ Longitude (x) in [-180, 180] and latitude (y) in [-90, 90], if present
    ✓ Coordinates are not both exactly 0.0 (likely missing)
    ✓ x and y are either both present or both absent
    ✓ Rating in [1, 5] if present (0.0 treated as absent)

A place without coordinates is valid: it can still be scheduled, it is just
left out of distance math.

Usage:
    from modules.validation import validate_place, filter_valid

    result = validate_place(place)
    if not result.valid:
        logger.warning(result.errors)

    clean = filter_valid(places, validate_place)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, TypeVar

from schemas.place import Place, is_finite_number

T = TypeVar("T")


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The input record as a dict (for logging purposes).
        fields: Which parts failed: "name", "coordinates", "rating".
                Callers can repair a record whose name is fine.
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: dict = field(default_factory=dict, repr=False)
    fields: set[str] = field(default_factory=set)

    def __bool__(self) -> bool:
        return self.valid


# ── Place validation ───────────────────────────────────────────────────────────

def validate_place(place: Place | dict[str, Any]) -> ValidationResult:
    """Validate one place record (a Place or a loosely-typed dict)."""
    record = asdict(place) if isinstance(place, Place) else dict(place)
    errors: list[str] = []
    fields: set[str] = set()

    # ── Name ───────────────────────────────────────────────────────────────
    name = record.get("name", "")
    if not name or not str(name).strip():
        errors.append("name must not be empty")
        fields.add("name")

    # ── Coordinates ────────────────────────────────────────────────────────
    before = len(errors)
    x, y = record.get("x"), record.get("y")
    if (x is None) != (y is None):
        errors.append(f"x/y must be given together (got x={x!r}, y={y!r})")
    elif x is not None:
        if not (is_finite_number(x) and is_finite_number(y)):
            errors.append(f"x/y must be finite numbers (got x={x!r}, y={y!r})")
        else:
            if not (-180.0 <= x <= 180.0):
                errors.append(f"x={x} is outside valid longitude range [-180, 180]")
            if not (-90.0 <= y <= 90.0):
                errors.append(f"y={y} is outside valid latitude range [-90, 90]")
            if x == 0.0 and y == 0.0:
                errors.append(
                    "x=0.0 and y=0.0: likely a missing/default value, "
                    "not a real place"
                )

    if len(errors) > before:
        fields.add("coordinates")

    # ── Rating ─────────────────────────────────────────────────────────────
    before = len(errors)
    rating = record.get("rating")
    if rating is not None:
        try:
            r = float(rating)
            # 0.0 is the sentinel for "absent"
            if r != 0.0 and not (1.0 <= r <= 5.0):
                errors.append(f"rating={r} is outside valid range [1, 5]")
        except (TypeError, ValueError):
            errors.append(f"rating={rating!r} must be numeric")

    if len(errors) > before:
        fields.add("rating")

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record, fields=fields)


# ── Batch helper ───────────────────────────────────────────────────────────────

def filter_valid(
    records: list[T],
    validator: Callable[[T], ValidationResult],
) -> list[T]:
    """Return only the records the validator accepts, in order."""
    return [r for r in records if validator(r).valid]
