from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Callable, Dict, List

from grant_core.domain import ComplianceRequirement, ComplianceState, DocumentStatus, Grant, RequirementType

logger = logging.getLogger(__name__)

DEFAULT_MAX_UTILIZATION_RATE = 1.0
DEFAULT_MIN_ACHIEVEMENT_RATE = 0.8

# (requirement, grant, evidence, as_of) -> state; rules append to evidence in check order
RuleEvaluator = Callable[[ComplianceRequirement, Grant, List[str], date], ComplianceState]


def _float_param(requirement: ComplianceRequirement, key: str, default: float) -> float:
    raw = (requirement.parameters or {}).get(key)
    if raw is None:
        return default
    try:
        value = math.nan if isinstance(raw, bool) else float(raw)
    except (TypeError, ValueError):
        value = math.nan
    if math.isfinite(value):
        return value
    logger.warning(
        "Requirement %s has malformed %s=%r; using default %s",
        requirement.id,
        key,
        raw,
        default,
    )
    return default


def _list_param(requirement: ComplianceRequirement, key: str) -> list[str]:
    raw = (requirement.parameters or {}).get(key)
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, (list, tuple, set, frozenset)):
        return [str(item) for item in raw]
    logger.warning("Requirement %s has malformed %s=%r; treating as empty", requirement.id, key, raw)
    return []


def _str_param(requirement: ComplianceRequirement, key: str) -> str | None:
    raw = (requirement.parameters or {}).get(key)
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def check_documentation(
    requirement: ComplianceRequirement,
    grant: Grant,
    evidence: List[str],
    as_of: date,
) -> ComplianceState:
    for doc_type in _list_param(requirement, "requiredDocuments"):
        found = next(
            (
                d
                for d in grant.documents
                if d.document_type == doc_type and d.status == DocumentStatus.APPROVED
            ),
            None,
        )
        if found is None:
            evidence.append(f"Missing or unapproved document: {doc_type}")
            return ComplianceState.NON_COMPLIANT
        evidence.append(f'Document "{doc_type}" submitted and approved')
    return ComplianceState.COMPLIANT


def check_financial(
    requirement: ComplianceRequirement,
    grant: Grant,
    evidence: List[str],
    as_of: date,
) -> ComplianceState:
    max_rate = _float_param(requirement, "maxUtilizationRate", DEFAULT_MAX_UTILIZATION_RATE)
    spent = grant.gross_spend()

    if not grant.total_funding:
        if spent > 0:
            evidence.append(f"Expenditures of {spent:.2f} recorded against a grant with no funding")
            return ComplianceState.NON_COMPLIANT
        evidence.append("No funding and no expenditures recorded")
        return ComplianceState.COMPLIANT

    actual = spent / grant.total_funding
    if actual > max_rate:
        evidence.append(f"Utilization rate ({actual:.2f}) exceeds maximum ({max_rate:g})")
        return ComplianceState.NON_COMPLIANT

    evidence.append(f"Utilization rate ({actual:.2f}) within acceptable range")
    return ComplianceState.COMPLIANT


def check_reporting(
    requirement: ComplianceRequirement,
    grant: Grant,
    evidence: List[str],
    as_of: date,
) -> ComplianceState:
    due_date = requirement.due_date
    report_type = _str_param(requirement, "reportType")

    # A report due on as_of is already owed. Before that, or with no due date,
    # the requirement counts as compliant, not pending.
    if due_date is None or due_date > as_of:
        if due_date is None:
            evidence.append("No due date set; reporting requirement treated as compliant")
        else:
            evidence.append(f"Report not yet due (due {due_date.isoformat()})")
        return ComplianceState.COMPLIANT

    submitted = next(
        (
            r
            for r in grant.reports
            if report_type is not None and r.report_type == report_type and r.submission_date <= due_date
        ),
        None,
    )
    if submitted is None:
        evidence.append(f"Missing required report: {report_type or '<unspecified>'}")
        return ComplianceState.NON_COMPLIANT

    evidence.append(f'Report "{submitted.report_type}" submitted on {submitted.submission_date.isoformat()}')
    return ComplianceState.COMPLIANT


def check_performance(
    requirement: ComplianceRequirement,
    grant: Grant,
    evidence: List[str],
    as_of: date,
) -> ComplianceState:
    min_rate = _float_param(requirement, "minAchievementRate", DEFAULT_MIN_ACHIEVEMENT_RATE)

    for kpi in grant.kpis:
        if kpi.target_value == 0:
            continue
        achievement = kpi.achievement()
        if achievement < min_rate:
            evidence.append(
                f'KPI "{kpi.name}" achievement ({achievement:.2f}) below minimum ({min_rate:g})'
            )
            return ComplianceState.NON_COMPLIANT
        evidence.append(f'KPI "{kpi.name}" achievement: {achievement:.2f}')

    return ComplianceState.COMPLIANT


RULES: Dict[Any, RuleEvaluator] = {
    RequirementType.DOCUMENTATION: check_documentation,
    RequirementType.FINANCIAL: check_financial,
    RequirementType.REPORTING: check_reporting,
    RequirementType.PERFORMANCE: check_performance,
}


__all__ = [
    "RULES",
    "RuleEvaluator",
    "check_documentation",
    "check_financial",
    "check_reporting",
    "check_performance",
    "DEFAULT_MAX_UTILIZATION_RATE",
    "DEFAULT_MIN_ACHIEVEMENT_RATE",
]
