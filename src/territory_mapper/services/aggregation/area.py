"""Breakdown of an ad-hoc selection of companies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ...models.domain import UNASSIGNED_OWNER, Company, LifecycleStage


@dataclass(slots=True)
class GroupStats:
    count: int = 0
    pum: int = 0


@dataclass(slots=True)
class AreaAnalysisResult:
    companies: list[Company]
    total_pum: int = 0
    company_count: int = 0
    by_stage: dict[str, GroupStats] = field(default_factory=dict)
    by_owner: dict[str, GroupStats] = field(default_factory=dict)


def analyze_area(companies: Sequence[Company]) -> AreaAnalysisResult:
    result = AreaAnalysisResult(companies=list(companies), company_count=len(companies))

    for company in companies:
        pum = company.pum or 0
        result.total_pum += pum

        stage = company.lifecycle_stage.value if company.lifecycle_stage else LifecycleStage.OTHER.value
        stage_stats = result.by_stage.setdefault(stage, GroupStats())
        stage_stats.count += 1
        stage_stats.pum += pum

        owner = (company.owner or "").strip() or UNASSIGNED_OWNER
        owner_stats = result.by_owner.setdefault(owner, GroupStats())
        owner_stats.count += 1
        owner_stats.pum += pum

    return result
