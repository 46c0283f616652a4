"""Properties-under-management totals per territory."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ...models.domain import Company, Territory, normalize_region
from ...models.store import PostalAreaStore


@dataclass(slots=True)
class TerritoryPUMStats:
    pum: int = 0
    company_count: int = 0

    def add(self, pum: int) -> None:
        self.pum += pum
        self.company_count += 1


@dataclass(slots=True)
class PUMSummary:
    by_territory: dict[str, TerritoryPUMStats] = field(default_factory=dict)
    unassigned: TerritoryPUMStats = field(default_factory=TerritoryPUMStats)
    total: TerritoryPUMStats = field(default_factory=TerritoryPUMStats)


def company_territory(company: Company, postal_areas: PostalAreaStore) -> Optional[str]:
    """Territory of the postal area a company sits in, if any."""

    return postal_areas.territory_of(company.postal_area_id)


def derive_company_territories(
    companies: Iterable[Company],
    postal_areas: PostalAreaStore,
) -> dict[str, Optional[str]]:
    return {company.id: company_territory(company, postal_areas) for company in companies}


def calculate_territory_pum(
    companies: Iterable[Company],
    territories: Iterable[Territory],
    postal_areas: PostalAreaStore,
    region_filter: Optional[str] = None,
) -> PUMSummary:
    """Sum PUM and company counts per territory.

    Companies whose postal area is unowned, or owned by a name that is not
    registered, are counted as unassigned.
    """

    summary = PUMSummary(by_territory={territory.name: TerritoryPUMStats() for territory in territories})
    region = normalize_region(region_filter)
    # postal area id -> territory, computed once per call
    memo: dict[str, Optional[str]] = {}

    for company in companies:
        if region is not None and company.state != region:
            continue
        pum = company.pum or 0
        key = company.postal_area_id
        if key not in memo:
            memo[key] = company_territory(company, postal_areas)
        territory = memo[key]

        summary.total.add(pum)
        bucket = summary.by_territory.get(territory) if territory else None
        if bucket is not None:
            bucket.add(pum)
        else:
            summary.unassigned.add(pum)

    return summary
