"""Conflict-resolution policies for each assignment mode."""

from __future__ import annotations

from typing import Optional

from ...models.domain import AssignmentMode
from .base import AssignmentDecision, AssignmentPolicy


class FillUnassignedPolicy(AssignmentPolicy):
    """Only claim postal areas that have no territory."""

    mode = AssignmentMode.FILL_UNASSIGNED.value

    def decide(self, current_territory: Optional[str], territory_name: str) -> AssignmentDecision:
        if not current_territory:
            return AssignmentDecision.ASSIGN
        if current_territory == territory_name:
            return AssignmentDecision.NOOP
        return AssignmentDecision.SKIP


class TakeOverPolicy(AssignmentPolicy):
    """Claim every postal area regardless of its current owner."""

    mode = AssignmentMode.TAKE_OVER.value

    def decide(self, current_territory: Optional[str], territory_name: str) -> AssignmentDecision:
        if not current_territory:
            return AssignmentDecision.ASSIGN
        if current_territory == territory_name:
            return AssignmentDecision.NOOP
        return AssignmentDecision.REASSIGN


class ExpandExistingPolicy(FillUnassignedPolicy):
    """Grow a territory into unassigned postal areas.

    Adjacency to the existing territory is not checked; this behaves like
    :class:`FillUnassignedPolicy`.
    """

    mode = AssignmentMode.EXPAND_EXISTING.value
