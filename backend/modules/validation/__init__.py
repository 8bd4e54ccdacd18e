"""
modules/validation package: data quality guards for incoming place records.
"""
from modules.validation.place_validator import (
    ValidationResult,
    validate_place,
    filter_valid,
)

__all__ = [
    "ValidationResult",
    "validate_place",
    "filter_valid",
]
