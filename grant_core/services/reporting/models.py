from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from grant_core.services.compliance.models import ComplianceSummary
from grant_core.services.metrics.models import GrantProgressMetrics


@dataclass
class ProgressReport:
    metrics: GrantProgressMetrics
    recommendations: List[str]
    next_steps: List[str]
    alerts: List[str]


@dataclass
class CorrectiveAction:
    requirement_id: str
    action: str
    deadline: date
    responsible_party: str


@dataclass
class ComplianceReport:
    summary: ComplianceSummary
    corrective_actions: List[CorrectiveAction]


@dataclass
class UpcomingDeadline:
    grant_id: str
    deadline: date
    kind: str
    label: str


@dataclass
class GrantEvaluationFailure:
    grant_id: str
    code: str
    message: str


@dataclass
class GrantScorecard:
    grant_id: str
    title: str
    progress: Optional[GrantProgressMetrics]
    compliance: Optional[ComplianceSummary]


@dataclass
class PortfolioMetrics:
    as_of: date
    total_grants: int
    active_grants: int
    evaluated_grants: int
    total_funding: float
    utilized_funding: float
    approved_funding: float
    average_progress: float
    average_timeline_progress: float
    compliance_rate: float
    at_risk_grants: int
    high_risk_grants: int
    upcoming_deadlines: List[UpcomingDeadline] = field(default_factory=list)
    top_performers: List[str] = field(default_factory=list)
    need_attention: List[str] = field(default_factory=list)
    scorecards: List[GrantScorecard] = field(default_factory=list)
    failures: List[GrantEvaluationFailure] = field(default_factory=list)


__all__ = [
    "ProgressReport",
    "CorrectiveAction",
    "ComplianceReport",
    "UpcomingDeadline",
    "GrantEvaluationFailure",
    "GrantScorecard",
    "PortfolioMetrics",
]
