"""Company filtering and dataset summaries."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from ...models.domain import Company, LifecycleStage, normalize_region

# Phases that mark an agency as an active platform customer
CUSTOMER_PHASES = frozenset({"Onboarding", "Maturity", "Handover", "Adoption"})


class CustomerFilter(str, Enum):
    ALL = "all"
    CUSTOMERS = "customers"
    NON_CUSTOMERS = "non-customers"


@dataclass(slots=True)
class CompanyFilters:
    owners: list[str] = field(default_factory=list)
    stages: list[LifecycleStage] = field(default_factory=list)
    customer_filter: CustomerFilter = CustomerFilter.ALL
    min_pum: Optional[int] = None
    max_pum: Optional[int] = None
    search: str = ""


@dataclass(slots=True)
class CompanyDatasetStats:
    total: int
    with_coords: int
    missing_coords: int
    by_lifecycle: dict[str, int]


def is_platform_customer(company: Company) -> bool:
    phase = (company.phase or "").strip()
    return phase in CUSTOMER_PHASES


def _matches(company: Company, filters: CompanyFilters, region: Optional[str]) -> bool:
    if region is not None and company.state != region:
        return False
    if filters.owners and company.owner not in filters.owners:
        return False
    if filters.stages and company.lifecycle_stage not in filters.stages:
        return False
    if filters.customer_filter == CustomerFilter.CUSTOMERS and not is_platform_customer(company):
        return False
    if filters.customer_filter == CustomerFilter.NON_CUSTOMERS and is_platform_customer(company):
        return False
    pum = company.pum or 0
    if filters.min_pum is not None and pum < filters.min_pum:
        return False
    if filters.max_pum is not None and pum > filters.max_pum:
        return False
    if filters.search and filters.search.lower() not in company.name.lower():
        return False
    return True


def filter_companies(
    companies: Iterable[Company],
    filters: Optional[CompanyFilters] = None,
    region_filter: Optional[str] = None,
) -> list[Company]:
    filters = filters or CompanyFilters()
    region = normalize_region(region_filter)
    return [company for company in companies if _matches(company, filters, region)]


def summarize_companies(companies: Iterable[Company]) -> CompanyDatasetStats:
    by_lifecycle: Counter[str] = Counter({stage.value: 0 for stage in LifecycleStage})
    total = 0
    with_coords = 0
    for company in companies:
        total += 1
        if company.has_coordinates:
            with_coords += 1
        by_lifecycle[company.lifecycle_stage.value] += 1
    return CompanyDatasetStats(
        total=total,
        with_coords=with_coords,
        missing_coords=total - with_coords,
        by_lifecycle=dict(by_lifecycle),
    )
