from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, Optional

from grant_core.domain import KPI, Grant, RiskLevel, UtilizationBasis
from grant_core.services.metrics.models import GrantProgressMetrics

LOW_RISK_THRESHOLD = 0.20
MEDIUM_RISK_THRESHOLD = 0.40


def risk_score(timeline_progress: float, utilization_rate: float, milestone_completion_rate: float) -> float:
    """
    Mean drift of deliverables and spend away from elapsed time.

    A grant 90% through its timeline with 40% of milestones done scores high
    even though no single signal looks alarming on its own.
    """
    timeline_vs_milestones = abs(timeline_progress - milestone_completion_rate)
    timeline_vs_financial = abs(timeline_progress - utilization_rate)
    return (timeline_vs_milestones + timeline_vs_financial) / 2


def classify_risk(timeline_progress: float, utilization_rate: float, milestone_completion_rate: float) -> RiskLevel:
    score = risk_score(timeline_progress, utilization_rate, milestone_completion_rate)
    if score < LOW_RISK_THRESHOLD:
        return RiskLevel.LOW
    if score < MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def kpi_achievement(kpis: Iterable[KPI]) -> Dict[str, float]:
    return {kpi.name: kpi.achievement() for kpi in kpis}


def calculate_progress(
    grant: Grant,
    *,
    as_of: Optional[date] = None,
    utilization_basis: UtilizationBasis = UtilizationBasis.GROSS,
) -> GrantProgressMetrics:
    """
    Timeline, financial and milestone progress for one grant plus its risk level.

    Raises InvalidGrantError when the grant's end date is not after its start
    date or its funding is negative. Degenerate inputs (no funding, no
    milestones, zero KPI targets) fall back to documented values.
    """
    as_of = as_of or date.today()
    grant.validate()

    total_days = grant.total_days()
    days_elapsed = grant.days_elapsed(as_of)
    timeline_progress = grant.timeline_progress(as_of)

    gross_utilization = grant.gross_utilization()
    approved_utilization = grant.approved_utilization()
    if utilization_basis == UtilizationBasis.APPROVED:
        utilization_rate = approved_utilization
    else:
        utilization_rate = gross_utilization

    total_milestones = len(grant.milestones)
    milestones_completed = sum(1 for m in grant.milestones if m.is_completed)
    milestone_completion_rate = grant.progress()

    score = risk_score(timeline_progress, utilization_rate, milestone_completion_rate)

    return GrantProgressMetrics(
        grant_id=grant.id,
        total_funding=float(grant.total_funding or 0.0),
        funds_utilized=grant.gross_spend(),
        approved_funds=grant.approved_spend(),
        gross_utilization=gross_utilization,
        approved_utilization=approved_utilization,
        utilization_basis=utilization_basis,
        utilization_rate=utilization_rate,
        milestones_completed=milestones_completed,
        total_milestones=total_milestones,
        milestone_completion_rate=milestone_completion_rate,
        days_elapsed=days_elapsed,
        days_remaining=grant.days_remaining(as_of),
        total_days=total_days,
        timeline_progress=timeline_progress,
        status=grant.status,
        risk_score=score,
        risk_level=classify_risk(timeline_progress, utilization_rate, milestone_completion_rate),
        kpi_achievement=kpi_achievement(grant.kpis),
        last_updated=as_of,
    )


__all__ = [
    "calculate_progress",
    "classify_risk",
    "risk_score",
    "kpi_achievement",
    "LOW_RISK_THRESHOLD",
    "MEDIUM_RISK_THRESHOLD",
]
