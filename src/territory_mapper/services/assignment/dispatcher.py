"""Factory for assignment policies based on the selected mode."""

from __future__ import annotations

from ...models.domain import AssignmentMode
from .base import AssignmentPolicy
from .policies import ExpandExistingPolicy, FillUnassignedPolicy, TakeOverPolicy


def get_policy(mode: AssignmentMode | str) -> AssignmentPolicy:
    value = mode.value if isinstance(mode, AssignmentMode) else str(mode)
    match value:
        case "fill-unassigned":
            return FillUnassignedPolicy()
        case "take-over":
            return TakeOverPolicy()
        case "expand-existing":
            return ExpandExistingPolicy()
        case _:
            raise ValueError(f"Unknown assignment mode '{mode}'.")
