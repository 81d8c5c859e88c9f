from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional

from grant_core.domain import ComplianceRequirement, Grant, GrantStatus, OverallCompliance, RiskLevel
from grant_core.exceptions import DomainError
from grant_core.services.compliance import ComplianceSummary, assess_compliance
from grant_core.services.grant.service import GrantService
from grant_core.services.metrics import GrantProgressMetrics, calculate_progress
from grant_core.services.reporting.models import (
    GrantEvaluationFailure,
    GrantScorecard,
    PortfolioMetrics,
    UpcomingDeadline,
)

logger = logging.getLogger(__name__)

DEADLINE_HORIZON_DAYS = 30
TOP_PERFORMER_LIMIT = 3


def _mean(values: List[float], empty: float) -> float:
    return sum(values) / len(values) if values else empty


def _is_at_risk(progress: GrantProgressMetrics, compliance: ComplianceSummary) -> bool:
    return progress.risk_level != RiskLevel.LOW or compliance.status != OverallCompliance.COMPLIANT


def _is_high_risk(progress: GrantProgressMetrics, compliance: ComplianceSummary) -> bool:
    return progress.risk_level == RiskLevel.HIGH or compliance.status == OverallCompliance.NON_COMPLIANT


class ReportingPortfolioMixin:
    _grants: GrantService

    def get_portfolio(
        self,
        grant_ids: Optional[Iterable[str]] = None,
        *,
        as_of: date | None = None,
    ) -> PortfolioMetrics:
        """
        Aggregate progress and compliance across grants.

        Each grant is evaluated on its own. A grant that cannot be loaded or
        evaluated lands in ``failures`` and the rest of the batch carries on.
        """
        as_of = as_of or date.today()
        shared = self._grants.list_shared_requirements()

        scorecards: List[GrantScorecard] = []
        failures: List[GrantEvaluationFailure] = []
        evaluated: List[tuple[Grant, GrantProgressMetrics, ComplianceSummary]] = []
        active = 0

        if grant_ids is None:
            candidates: List[str] = [g.id for g in self._grants.list_grants()]
        else:
            candidates = list(dict.fromkeys(grant_ids))

        for grant_id in candidates:
            title = ""
            try:
                grant = self._grants.get_grant(grant_id)
                title = grant.title
                if grant.status == GrantStatus.ACTIVE:
                    active += 1
                progress = calculate_progress(grant, as_of=as_of)
                requirements: List[ComplianceRequirement] = list(grant.compliance_requirements) + shared
                compliance = assess_compliance(grant, requirements, as_of=as_of)
            except DomainError as exc:
                logger.warning("Portfolio evaluation skipped grant %s: %s (%s)", grant_id, exc, exc.code)
                failures.append(GrantEvaluationFailure(grant_id=grant_id, code=exc.code, message=str(exc)))
                scorecards.append(GrantScorecard(grant_id=grant_id, title=title, progress=None, compliance=None))
                continue
            evaluated.append((grant, progress, compliance))
            scorecards.append(
                GrantScorecard(grant_id=grant.id, title=grant.title, progress=progress, compliance=compliance)
            )

        at_risk = [(g, p, c) for g, p, c in evaluated if _is_at_risk(p, c)]
        high_risk = [(g, p, c) for g, p, c in evaluated if _is_high_risk(p, c)]

        performers = [(g, p, c) for g, p, c in evaluated if not _is_at_risk(p, c)]
        performers.sort(key=lambda row: (-row[2].compliance_rate, -row[1].milestone_completion_rate, row[0].title))
        at_risk.sort(key=lambda row: -row[1].risk_score)

        if failures:
            logger.info("Portfolio evaluated %s of %s grants", len(evaluated), len(candidates))

        return PortfolioMetrics(
            as_of=as_of,
            total_grants=len(candidates),
            active_grants=active,
            evaluated_grants=len(evaluated),
            total_funding=sum(p.total_funding for _, p, _ in evaluated),
            utilized_funding=sum(p.funds_utilized for _, p, _ in evaluated),
            approved_funding=sum(p.approved_funds for _, p, _ in evaluated),
            average_progress=_mean([p.milestone_completion_rate for _, p, _ in evaluated], 0.0),
            average_timeline_progress=_mean([p.timeline_progress for _, p, _ in evaluated], 0.0),
            compliance_rate=_mean([c.compliance_rate for _, _, c in evaluated], 1.0),
            at_risk_grants=len(at_risk),
            high_risk_grants=len(high_risk),
            upcoming_deadlines=self._collect_deadlines(evaluated, as_of),
            top_performers=[g.id for g, _, _ in performers[:TOP_PERFORMER_LIMIT]],
            need_attention=[g.id for g, _, _ in at_risk],
            scorecards=scorecards,
            failures=failures,
        )

    def _collect_deadlines(
        self,
        evaluated: List[tuple[Grant, GrantProgressMetrics, ComplianceSummary]],
        as_of: date,
    ) -> List[UpcomingDeadline]:
        horizon = as_of + timedelta(days=DEADLINE_HORIZON_DAYS)
        deadlines: List[UpcomingDeadline] = []

        def within(day: date | None) -> bool:
            return day is not None and as_of <= day <= horizon

        for grant, _, compliance in evaluated:
            for milestone in grant.milestones:
                if not milestone.is_completed and within(milestone.due_date):
                    deadlines.append(UpcomingDeadline(grant.id, milestone.due_date, "MILESTONE", milestone.name))
            for status in compliance.requirements:
                if within(status.due_date):
                    deadlines.append(UpcomingDeadline(grant.id, status.due_date, "REQUIREMENT", status.requirement_name))
            if grant.status not in (GrantStatus.COMPLETED, GrantStatus.CLOSED) and within(grant.end_date):
                deadlines.append(UpcomingDeadline(grant.id, grant.end_date, "GRANT_END", grant.title))

        deadlines.sort(key=lambda d: (d.deadline, d.grant_id, d.label))
        return deadlines


__all__ = ["ReportingPortfolioMixin", "DEADLINE_HORIZON_DAYS"]
