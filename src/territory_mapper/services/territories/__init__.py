"""Territory registry helpers."""

from .registry import (
    COLOR_PALETTE,
    UNASSIGNED_COLOR,
    DuplicateTerritoryError,
    TerritoryError,
    TerritoryNotFoundError,
    TerritoryRegistry,
    TerritoryValidationError,
)

__all__ = [
    "COLOR_PALETTE",
    "UNASSIGNED_COLOR",
    "DuplicateTerritoryError",
    "TerritoryError",
    "TerritoryNotFoundError",
    "TerritoryRegistry",
    "TerritoryValidationError",
]
