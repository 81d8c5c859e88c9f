from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta
from typing import List, Optional, Union

from grant_core.domain import Grant, MilestoneStatus, ReportingFrequency, RiskLevel, UtilizationBasis
from grant_core.services.grant.service import GrantService
from grant_core.services.metrics import calculate_progress
from grant_core.services.metrics.models import GrantProgressMetrics
from grant_core.services.reporting.models import ProgressReport

# progress signals further apart than this earn a recommendation
DRIFT_TOLERANCE = 0.10
KPI_WATCH_LEVEL = 0.8
NEXT_STEP_HORIZON_DAYS = 30

_FREQUENCY_MONTHS = {
    ReportingFrequency.MONTHLY: 1,
    ReportingFrequency.QUARTERLY: 3,
    ReportingFrequency.SEMI_ANNUAL: 6,
    ReportingFrequency.ANNUAL: 12,
}


def add_months(anchor: date, months: int) -> date:
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    day = min(anchor.day, monthrange(year, month)[1])
    return date(year, month, day)


def next_report_due(grant: Grant, as_of: date) -> Optional[date]:
    """End of the reporting period containing ``as_of``, capped at the grant end date."""
    if as_of > grant.end_date:
        return None
    step = _FREQUENCY_MONTHS.get(grant.reporting_frequency, 3)
    periods = 1
    while True:
        period_end = add_months(grant.start_date, step * periods) - timedelta(days=1)
        if period_end >= as_of or period_end >= grant.end_date:
            return min(period_end, grant.end_date)
        periods += 1


class ReportingProgressMixin:
    _grants: GrantService

    def get_progress(
        self,
        grant_id: str,
        *,
        include_details: bool = False,
        as_of: date | None = None,
        utilization_basis: UtilizationBasis = UtilizationBasis.GROSS,
    ) -> Union[GrantProgressMetrics, ProgressReport]:
        """Bare metrics, or a full ProgressReport when ``include_details`` is set."""
        if include_details:
            return self.generate_progress_report(grant_id, as_of=as_of, utilization_basis=utilization_basis)
        grant = self._grants.get_grant(grant_id)
        return calculate_progress(grant, as_of=as_of, utilization_basis=utilization_basis)

    def generate_progress_report(
        self,
        grant_id: str,
        *,
        as_of: date | None = None,
        utilization_basis: UtilizationBasis = UtilizationBasis.GROSS,
    ) -> ProgressReport:
        as_of = as_of or date.today()
        grant = self._grants.get_grant(grant_id)
        metrics = calculate_progress(grant, as_of=as_of, utilization_basis=utilization_basis)
        return ProgressReport(
            metrics=metrics,
            recommendations=self._build_recommendations(metrics),
            next_steps=self._build_next_steps(grant, as_of),
            alerts=self._build_progress_alerts(grant, metrics, as_of),
        )

    # --------------------------------------------------------------
    # Helpers
    # --------------------------------------------------------------

    def _build_recommendations(self, metrics: GrantProgressMetrics) -> List[str]:
        recommendations: List[str] = []
        timeline = metrics.timeline_progress

        if timeline - metrics.milestone_completion_rate > DRIFT_TOLERANCE:
            recommendations.append(
                f"Accelerate milestone completion: {metrics.milestone_completion_rate:.0%} of milestones "
                f"done at {timeline:.0%} of the timeline."
            )

        if timeline - metrics.utilization_rate > DRIFT_TOLERANCE:
            recommendations.append(
                f"Spending trails the timeline ({metrics.utilization_rate:.0%} utilized); "
                "confirm the spend plan with the program officer."
            )
        elif metrics.utilization_rate - timeline > DRIFT_TOLERANCE:
            recommendations.append(
                f"Spending is ahead of the timeline ({metrics.utilization_rate:.0%} utilized); "
                "review expenditure approvals."
            )

        pending_spend = metrics.funds_utilized - metrics.approved_funds
        if pending_spend > 0:
            recommendations.append(f"Review {pending_spend:,.2f} of expenditures not yet approved.")

        for name, achievement in sorted(metrics.kpi_achievement.items()):
            if achievement < KPI_WATCH_LEVEL:
                recommendations.append(f'Improve KPI "{name}": currently at {achievement:.0%} of target.')

        if metrics.risk_level == RiskLevel.HIGH:
            recommendations.append("Update the risk mitigation plan.")

        if not recommendations:
            recommendations.append("Progress is aligned with the timeline; keep the current plan.")
        return recommendations

    def _build_next_steps(self, grant: Grant, as_of: date) -> List[str]:
        steps: List[str] = []
        horizon = as_of + timedelta(days=NEXT_STEP_HORIZON_DAYS)

        open_milestones = sorted(
            (m for m in grant.milestones if not m.is_completed),
            key=lambda m: m.due_date,
        )
        for milestone in open_milestones:
            if milestone.due_date < as_of:
                steps.append(f'Recover overdue milestone "{milestone.name}" (due {milestone.due_date.isoformat()}).')
            elif milestone.due_date <= horizon:
                steps.append(f'Complete milestone "{milestone.name}" by {milestone.due_date.isoformat()}.')

        due = next_report_due(grant, as_of)
        if due is not None:
            frequency = grant.reporting_frequency.value.replace("_", "-").lower()
            steps.append(f"Submit {frequency} progress report by {due.isoformat()}.")
        return steps

    def _build_progress_alerts(self, grant: Grant, metrics: GrantProgressMetrics, as_of: date) -> List[str]:
        alerts: List[str] = []

        delayed = [m for m in grant.milestones if m.status == MilestoneStatus.DELAYED]
        if delayed:
            alerts.append(f"{len(delayed)} milestone(s) are marked delayed.")

        if metrics.gross_utilization > 1.0:
            alerts.append(f"Recorded spend exceeds total funding ({metrics.gross_utilization:.0%}).")

        if grant.end_date < as_of and metrics.milestones_completed < metrics.total_milestones:
            alerts.append(f"Grant appears delayed: planned finish was {grant.end_date.isoformat()}.")

        if metrics.risk_level != RiskLevel.LOW:
            alerts.append(f"Risk level is {metrics.risk_level.value.lower()} (score {metrics.risk_score:.2f}).")
        return alerts


__all__ = ["ReportingProgressMixin", "next_report_due", "add_months"]
