"""Utilities to serialize engine results into API payloads."""

from __future__ import annotations

from typing import Optional

from ...models.domain import Company
from ..aggregation import (
    AreaAnalysisResult,
    AssignmentStats,
    CompanyDatasetStats,
    PUMSummary,
    TerritoryPUMStats,
)
from ..assignment import AssignmentResult


def assignment_result_to_json(result: AssignmentResult) -> dict:
    return {
        "assigned": list(result.assigned),
        "skipped": [
            {"postcode": item.postcode, "currentTerritory": item.current_territory}
            for item in result.skipped
        ],
        "reassigned": [
            {"postcode": item.postcode, "from": item.from_territory, "to": item.to_territory}
            for item in result.reassigned
        ],
        "outsideRegion": list(result.outside_region),
    }


def assignment_stats_to_json(stats: AssignmentStats) -> dict:
    return {
        "total": stats.total,
        "assigned": stats.assigned,
        "unassigned": stats.unassigned,
        "territoryCounts": dict(stats.territory_counts),
        "stateCounts": {
            state: {"total": count.total, "assigned": count.assigned}
            for state, count in stats.state_counts.items()
        },
    }


def _pum_stats(stats: TerritoryPUMStats) -> dict:
    return {"pum": stats.pum, "companyCount": stats.company_count}


def pum_summary_to_json(summary: PUMSummary) -> dict:
    return {
        "byTerritory": {name: _pum_stats(stats) for name, stats in summary.by_territory.items()},
        "unassigned": _pum_stats(summary.unassigned),
        "total": _pum_stats(summary.total),
    }


def company_to_json(company: Company, territory: Optional[str] = None) -> dict:
    return {
        "id": company.id,
        "name": company.name,
        "state": company.state,
        "postcode": company.postcode,
        "latitude": company.latitude,
        "longitude": company.longitude,
        "owner": company.owner,
        "lifecycleStage": company.lifecycle_stage.value,
        "pum": company.pum,
        "phase": company.phase or None,
        "hubspotUrl": company.hubspot_url or None,
        "coordSource": company.coord_source.value,
        "territory": territory,
    }


def area_analysis_to_json(result: AreaAnalysisResult, territories: dict[str, Optional[str]]) -> dict:
    return {
        "companies": [company_to_json(company, territories.get(company.id)) for company in result.companies],
        "totalPUM": result.total_pum,
        "companyCount": result.company_count,
        "byStage": {stage: {"count": group.count, "pum": group.pum} for stage, group in result.by_stage.items()},
        "byOwner": {owner: {"count": group.count, "pum": group.pum} for owner, group in result.by_owner.items()},
    }


def company_stats_to_json(stats: CompanyDatasetStats) -> dict:
    return {
        "total": stats.total,
        "withCoords": stats.with_coords,
        "missingCoords": stats.missing_coords,
        "byLifecycle": dict(stats.by_lifecycle),
    }
