from __future__ import annotations

from datetime import date, timedelta
from typing import List, Union

from grant_core.domain import ComplianceState, Grant, RequirementType, Severity, coerce_requirement_type
from grant_core.services.compliance import ComplianceStatus, ComplianceSummary, assess_compliance
from grant_core.services.grant.service import GrantService
from grant_core.services.reporting.models import ComplianceReport, CorrectiveAction

_ACTION_WINDOW_DAYS = {
    Severity.HIGH: 14,
    Severity.MEDIUM: 30,
    Severity.LOW: 60,
}

_RESPONSIBLE_PARTY = {
    RequirementType.FINANCIAL: "Finance Officer",
    RequirementType.REPORTING: "Program Manager",
    RequirementType.PERFORMANCE: "Program Manager",
}


def corrective_deadline(status: ComplianceStatus, as_of: date) -> date:
    deadline = as_of + timedelta(days=_ACTION_WINDOW_DAYS.get(status.severity, 30))
    if status.due_date is not None and status.due_date > deadline:
        return status.due_date
    return deadline


def responsible_party(status: ComplianceStatus, grant: Grant) -> str:
    requirement_type = coerce_requirement_type(status.requirement_type)
    if requirement_type == RequirementType.DOCUMENTATION:
        return grant.grant_manager or "Grant Manager"
    return _RESPONSIBLE_PARTY.get(requirement_type, "Compliance Officer")


class ReportingComplianceMixin:
    _grants: GrantService

    def get_compliance(
        self,
        grant_id: str,
        *,
        as_of: date | None = None,
        include_report: bool = False,
    ) -> Union[ComplianceSummary, ComplianceReport]:
        if include_report:
            return self.generate_compliance_report(grant_id, as_of=as_of)
        grant = self._grants.get_grant(grant_id)
        requirements = self._grants.list_requirements(grant_id)
        return assess_compliance(grant, requirements, as_of=as_of)

    def generate_compliance_report(self, grant_id: str, *, as_of: date | None = None) -> ComplianceReport:
        as_of = as_of or date.today()
        grant = self._grants.get_grant(grant_id)
        summary = assess_compliance(grant, self._grants.list_requirements(grant_id), as_of=as_of)
        return ComplianceReport(
            summary=summary,
            corrective_actions=self._build_corrective_actions(grant, summary, as_of),
        )

    def _build_corrective_actions(
        self,
        grant: Grant,
        summary: ComplianceSummary,
        as_of: date,
    ) -> List[CorrectiveAction]:
        actions: List[CorrectiveAction] = []
        for status in summary.requirements:
            if status.status == ComplianceState.NON_COMPLIANT:
                finding = status.evidence[-1] if status.evidence else "Requirement not met"
                action = f"Resolve {status.requirement_name}: {finding}"
            elif status.status == ComplianceState.PENDING:
                action = f"Review {status.requirement_name} manually"
            else:
                continue
            actions.append(
                CorrectiveAction(
                    requirement_id=status.requirement_id,
                    action=action,
                    deadline=corrective_deadline(status, as_of),
                    responsible_party=responsible_party(status, grant),
                )
            )
        actions.sort(key=lambda a: a.deadline)
        return actions


__all__ = ["ReportingComplianceMixin", "corrective_deadline", "responsible_party"]
