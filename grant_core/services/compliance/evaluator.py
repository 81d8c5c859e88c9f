from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from grant_core.domain import (
    ComplianceRequirement,
    ComplianceState,
    Grant,
    OverallCompliance,
    Severity,
    coerce_requirement_type,
)
from grant_core.services.compliance.models import ComplianceStatus, ComplianceSummary
from grant_core.services.compliance.rules import RULES

logger = logging.getLogger(__name__)

# pending share above which an otherwise clean grant is flagged at risk
PENDING_AT_RISK_RATIO = 0.3


def evaluate_requirement(
    requirement: ComplianceRequirement,
    grant: Grant,
    *,
    as_of: Optional[date] = None,
) -> ComplianceStatus:
    as_of = as_of or date.today()
    evidence: List[str] = []

    if requirement.applicable_from is not None and requirement.applicable_from > as_of:
        state = ComplianceState.NOT_APPLICABLE
    else:
        requirement_type = coerce_requirement_type(requirement.requirement_type)
        rule = RULES.get(requirement_type)
        if rule is None:
            logger.info(
                "No evaluator for requirement type %r (requirement %s); marking pending",
                requirement_type,
                requirement.id,
            )
            evidence.append(f"No evaluator available for requirement type '{requirement_type}'")
            state = ComplianceState.PENDING
        else:
            state = rule(requirement, grant, evidence, as_of)

    return ComplianceStatus(
        requirement_id=requirement.id,
        requirement_name=requirement.name,
        requirement_type=requirement.requirement_type,
        description=requirement.description,
        status=state,
        evidence=tuple(evidence),
        last_checked=as_of,
        severity=requirement.severity,
        due_date=requirement.due_date,
    )


def overall_status(
    *,
    non_compliant: int,
    high_priority: int,
    pending: int,
    total: int,
) -> OverallCompliance:
    if non_compliant > 0:
        return OverallCompliance.NON_COMPLIANT if high_priority > 0 else OverallCompliance.AT_RISK
    if pending > total * PENDING_AT_RISK_RATIO:
        return OverallCompliance.AT_RISK
    return OverallCompliance.COMPLIANT


def assess_compliance(
    grant: Grant,
    requirements: Iterable[ComplianceRequirement],
    *,
    as_of: Optional[date] = None,
) -> ComplianceSummary:
    """
    Evaluate each requirement independently against ``grant`` and aggregate.

    A grant with no requirements is vacuously compliant (rate 1.0).
    """
    as_of = as_of or date.today()
    statuses = [evaluate_requirement(req, grant, as_of=as_of) for req in requirements]

    counts = {state: 0 for state in ComplianceState}
    issues = {severity: 0 for severity in Severity}
    for status in statuses:
        counts[status.status] += 1
        if status.status == ComplianceState.NON_COMPLIANT:
            issues[status.severity] += 1

    total = len(statuses)
    compliant = counts[ComplianceState.COMPLIANT]
    non_compliant = counts[ComplianceState.NON_COMPLIANT]
    pending = counts[ComplianceState.PENDING]
    compliance_rate = compliant / total if total > 0 else 1.0

    return ComplianceSummary(
        grant_id=grant.id,
        total_requirements=total,
        compliant_requirements=compliant,
        non_compliant_requirements=non_compliant,
        pending_requirements=pending,
        not_applicable_requirements=counts[ComplianceState.NOT_APPLICABLE],
        compliance_rate=compliance_rate,
        high_priority_issues=issues[Severity.HIGH],
        medium_priority_issues=issues[Severity.MEDIUM],
        low_priority_issues=issues[Severity.LOW],
        status=overall_status(
            non_compliant=non_compliant,
            high_priority=issues[Severity.HIGH],
            pending=pending,
            total=total,
        ),
        last_assessment=as_of,
        requirements=statuses,
    )


__all__ = ["assess_compliance", "evaluate_requirement", "overall_status", "PENDING_AT_RISK_RATIO"]
