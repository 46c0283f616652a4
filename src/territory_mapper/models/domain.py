"""Domain models for postal areas, territories, companies and compliance zones."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

Coordinate = tuple[float, float]
"""A ``(latitude, longitude)`` pair."""

UNASSIGNED_OWNER = "Unassigned"


class AssignmentMode(str, Enum):
    """Conflict policy applied when a drawn region covers owned postal areas."""

    FILL_UNASSIGNED = "fill-unassigned"
    TAKE_OVER = "take-over"
    EXPAND_EXISTING = "expand-existing"


class LifecycleStage(str, Enum):
    TARGET = "Target"
    LEAD = "Lead"
    MQL = "MQL"
    SQL = "SQL"
    OPPORTUNITY = "Opportunity"
    CUSTOMER = "Customer"
    EVANGELIST = "Evangelist"
    OTHER = "Other"


class CoordSource(str, Enum):
    HUBSPOT = "hubspot"
    POSTCODE = "postcode"
    MISSING = "missing"


def postal_area_key(postcode: str, state: str) -> str:
    """Build the identifier used for a postcode within a state."""

    return f"{postcode}-{state}"


def normalize_region(region: Optional[str]) -> Optional[str]:
    """Return an upper-cased state code, or None when no filter applies."""

    if region is None:
        return None
    normalized = region.strip().upper()
    if not normalized or normalized == "ALL":
        return None
    return normalized


@dataclass(slots=True)
class PostalArea:
    """A postcode within a state, with its centroid and current owner."""

    postcode: str
    state: str
    latitude: float
    longitude: float
    localities: list[str] = field(default_factory=list)
    sa3name: str = ""
    sa4name: str = ""
    territory: Optional[str] = None

    @property
    def id(self) -> str:
        return postal_area_key(self.postcode, self.state)

    @property
    def centroid(self) -> Coordinate:
        return (self.latitude, self.longitude)


@dataclass(slots=True)
class Territory:
    id: str
    name: str
    color: str


@dataclass(slots=True)
class Company:
    """A CRM company record. Its territory is derived, never stored."""

    id: str
    name: str
    state: str
    postcode: str
    latitude: Optional[float]
    longitude: Optional[float]
    owner: str = ""
    lifecycle_stage: LifecycleStage = LifecycleStage.OTHER
    pum: int = 0
    address: str = ""
    city: str = ""
    domain: str = ""
    phase: str = ""
    hubspot_url: str = ""
    coord_source: CoordSource = CoordSource.MISSING

    @property
    def postal_area_id(self) -> str:
        return postal_area_key(self.postcode, self.state)

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(slots=True)
class ComplianceZone:
    """An independently drawn region used for coverage reporting."""

    id: str
    polygon: Sequence[Coordinate]
    created_at: str
    updated_at: str
