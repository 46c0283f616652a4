"""Base classes for assignment policy implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class AssignmentDecision(str, Enum):
    ASSIGN = "assign"
    REASSIGN = "reassign"
    SKIP = "skip"
    NOOP = "noop"


@dataclass(slots=True)
class SkippedPostalArea:
    postcode: str
    current_territory: str


@dataclass(slots=True)
class ReassignedPostalArea:
    postcode: str
    from_territory: str
    to_territory: str


@dataclass(slots=True)
class AssignmentResult:
    """Outcome of one bulk assignment, partitioned by what happened to each id."""

    assigned: list[str] = field(default_factory=list)
    skipped: list[SkippedPostalArea] = field(default_factory=list)
    reassigned: list[ReassignedPostalArea] = field(default_factory=list)
    outside_region: list[str] = field(default_factory=list)

    @property
    def changed(self) -> list[str]:
        """Ids whose owner was written by this operation."""

        return [*self.assigned, *(item.postcode for item in self.reassigned)]


class AssignmentPolicy(ABC):
    """Contract for conflict-resolution policies."""

    mode: str

    @abstractmethod
    def decide(self, current_territory: Optional[str], territory_name: str) -> AssignmentDecision:
        raise NotImplementedError
