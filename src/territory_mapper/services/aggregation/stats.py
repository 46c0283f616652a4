"""Postal area assignment statistics."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from ...models.store import PostalAreaStore


@dataclass(slots=True)
class StateCount:
    total: int = 0
    assigned: int = 0


@dataclass(slots=True)
class AssignmentStats:
    total: int
    assigned: int
    unassigned: int
    territory_counts: dict[str, int] = field(default_factory=dict)
    state_counts: dict[str, StateCount] = field(default_factory=dict)


def calculate_assignment_stats(
    postal_areas: PostalAreaStore,
    region_filter: Optional[str] = None,
) -> AssignmentStats:
    territory_counts: Counter[str] = Counter()
    state_counts: dict[str, StateCount] = {}
    total = 0

    for area in postal_areas.in_region(region_filter):
        total += 1
        state_count = state_counts.setdefault(area.state, StateCount())
        state_count.total += 1
        if area.territory:
            state_count.assigned += 1
            territory_counts[area.territory] += 1

    assigned = sum(territory_counts.values())
    return AssignmentStats(
        total=total,
        assigned=assigned,
        unassigned=total - assigned,
        territory_counts=dict(territory_counts),
        state_counts=state_counts,
    )
