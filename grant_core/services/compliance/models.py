from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Union

from grant_core.domain import ComplianceState, OverallCompliance, RequirementType, Severity


@dataclass(frozen=True)
class ComplianceStatus:
    requirement_id: str
    requirement_name: str
    requirement_type: Union[RequirementType, str]
    description: str
    status: ComplianceState
    evidence: tuple[str, ...]
    last_checked: date
    severity: Severity
    due_date: Optional[date] = None


@dataclass(frozen=True)
class ComplianceSummary:
    grant_id: str
    total_requirements: int
    compliant_requirements: int
    non_compliant_requirements: int
    pending_requirements: int
    not_applicable_requirements: int
    compliance_rate: float
    high_priority_issues: int
    medium_priority_issues: int
    low_priority_issues: int
    status: OverallCompliance
    last_assessment: date
    requirements: List[ComplianceStatus] = field(default_factory=list)


__all__ = ["ComplianceStatus", "ComplianceSummary"]
