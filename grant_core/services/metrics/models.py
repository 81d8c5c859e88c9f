from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from grant_core.domain import GrantStatus, ReportingPeriod, RiskLevel, UtilizationBasis


@dataclass(frozen=True)
class GrantProgressMetrics:
    grant_id: str
    total_funding: float
    funds_utilized: float
    approved_funds: float
    gross_utilization: float
    approved_utilization: float
    utilization_basis: UtilizationBasis
    utilization_rate: float
    milestones_completed: int
    total_milestones: int
    milestone_completion_rate: float
    days_elapsed: int
    days_remaining: int
    total_days: int
    timeline_progress: float
    status: GrantStatus
    risk_score: float
    risk_level: RiskLevel
    kpi_achievement: Dict[str, float]
    last_updated: date


@dataclass(frozen=True)
class PeriodSpend:
    # recognized = approved + pending; rejected spend is never bucketed
    period_key: str
    period_start: date
    period_end: date
    recognized: float
    approved: float


@dataclass(frozen=True)
class FinancialMetrics:
    grant_id: str
    period: ReportingPeriod
    as_of: date
    total_funding: float
    gross_spend: float
    approved_spend: float
    pending_spend: float
    rejected_spend: float
    recognized_spend: float
    remaining_funds: float
    gross_utilization: float
    approved_utilization: float
    monthly_burn_rate: float
    forecast_exhaustion: Optional[date]
    spend_by_category: Dict[str, float] = field(default_factory=dict)
    spend_by_period: List[PeriodSpend] = field(default_factory=list)


__all__ = ["GrantProgressMetrics", "FinancialMetrics", "PeriodSpend"]
