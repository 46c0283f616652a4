"""Aggregations derived from territory assignments and the company feed."""

from .area import AreaAnalysisResult, GroupStats, analyze_area
from .compliance import ComplianceStats, compute_compliance_stats, is_in_compliance_zone
from .filters import (
    CompanyDatasetStats,
    CompanyFilters,
    CustomerFilter,
    filter_companies,
    is_platform_customer,
    summarize_companies,
)
from .pum import (
    PUMSummary,
    TerritoryPUMStats,
    calculate_territory_pum,
    company_territory,
    derive_company_territories,
)
from .stats import AssignmentStats, StateCount, calculate_assignment_stats

__all__ = [
    "AreaAnalysisResult",
    "AssignmentStats",
    "CompanyDatasetStats",
    "CompanyFilters",
    "ComplianceStats",
    "CustomerFilter",
    "GroupStats",
    "PUMSummary",
    "StateCount",
    "TerritoryPUMStats",
    "analyze_area",
    "calculate_assignment_stats",
    "calculate_territory_pum",
    "company_territory",
    "compute_compliance_stats",
    "derive_company_territories",
    "filter_companies",
    "is_in_compliance_zone",
    "is_platform_customer",
    "summarize_companies",
]
