"""Territory assignment engine."""

from .base import AssignmentDecision, AssignmentResult, ReassignedPostalArea, SkippedPostalArea
from .dispatcher import get_policy
from .service import assign_polygon, assign_postal_areas, unassign_postal_areas

__all__ = [
    "AssignmentDecision",
    "AssignmentResult",
    "ReassignedPostalArea",
    "SkippedPostalArea",
    "assign_polygon",
    "assign_postal_areas",
    "get_policy",
    "unassign_postal_areas",
]
