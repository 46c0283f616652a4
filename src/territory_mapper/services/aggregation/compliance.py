"""Company coverage of compliance zones."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from shapely.prepared import PreparedGeometry

from ...models.domain import Company, ComplianceZone
from ..geospatial import covers_point, prepare_ring


@dataclass(slots=True)
class ComplianceStats:
    company_count: int = 0
    total_pum: int = 0


def _prepare_zones(zones: Iterable[ComplianceZone]) -> list[PreparedGeometry]:
    prepared = (prepare_ring(zone.polygon) for zone in zones)
    return [geometry for geometry in prepared if geometry is not None]


def _covered(company: Company, prepared_zones: Sequence[PreparedGeometry]) -> bool:
    if not company.has_coordinates:
        return False
    return any(covers_point(zone, company.latitude, company.longitude) for zone in prepared_zones)


def is_in_compliance_zone(company: Company, zones: Iterable[ComplianceZone]) -> bool:
    return _covered(company, _prepare_zones(zones))


def compute_compliance_stats(companies: Iterable[Company], zones: Iterable[ComplianceZone]) -> ComplianceStats:
    """Count companies inside any zone; overlapping zones count a company once."""

    prepared_zones = _prepare_zones(zones)
    stats = ComplianceStats()
    if not prepared_zones:
        return stats
    for company in companies:
        if _covered(company, prepared_zones):
            stats.company_count += 1
            stats.total_pum += company.pum or 0
    return stats
