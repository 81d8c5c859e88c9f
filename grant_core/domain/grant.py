from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional, Tuple, TypeVar

from grant_core.domain.audit import GrantHistoryEntry
from grant_core.domain.compliance import ComplianceRequirement
from grant_core.domain.document import GrantDocument, ReportSubmission
from grant_core.domain.enums import (
    DocumentStatus,
    ExpenditureStatus,
    GrantStatus,
    GrantType,
    MilestoneStatus,
    ReportingFrequency,
)
from grant_core.domain.expenditure import Expenditure
from grant_core.domain.identifiers import generate_id
from grant_core.domain.kpi import KPI
from grant_core.domain.milestone import Milestone
from grant_core.domain.organization import Organization
from grant_core.exceptions import BusinessRuleError, InvalidGrantError, NotFoundError, ValidationError

# |progress - timeline| above this flags a grant as at risk
AT_RISK_DEVIATION = 0.3

_T = TypeVar("_T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _find(items: Iterable[_T], item_id: str, label: str) -> _T:
    for item in items:
        if getattr(item, "id", None) == item_id:
            return item
    raise NotFoundError(f"{label} not found.", code=f"{label.upper()}_NOT_FOUND")


@dataclass
class Grant:
    """
    Aggregate root for a funded program.

    State changes go through the mutation methods below. Each one applies the
    change, bumps ``version`` and appends exactly one entry to ``history`` in
    the same call. ``history`` is a tuple and is only ever extended.

    A Grant instance is single-writer: callers must serialize concurrent
    mutation of the same instance (one writer per grant at a time).
    Calculators only read it.
    """

    id: str
    title: str
    start_date: date
    end_date: date
    grant_number: str = ""
    description: str = ""
    grant_type: GrantType = GrantType.FEDERAL
    status: GrantStatus = GrantStatus.DRAFT

    total_funding: float = 0.0
    awarded_amount: float = 0.0
    matching_requirement: Optional[float] = None
    funding_source: str = ""
    grant_manager: str = ""

    application_date: Optional[date] = None
    award_date: Optional[date] = None
    reporting_frequency: ReportingFrequency = ReportingFrequency.QUARTERLY

    recipient: Optional[Organization] = None
    grantor: Optional[Organization] = None

    objectives: List[str] = field(default_factory=list)
    target_beneficiaries: str = ""
    geographic_scope: str = ""

    milestones: List[Milestone] = field(default_factory=list)
    expenditures: List[Expenditure] = field(default_factory=list)
    kpis: List[KPI] = field(default_factory=list)
    documents: List[GrantDocument] = field(default_factory=list)
    reports: List[ReportSubmission] = field(default_factory=list)
    compliance_requirements: List[ComplianceRequirement] = field(default_factory=list)

    created_by: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    updated_by: str = ""
    updated_at: datetime = field(default_factory=_utcnow)
    version: int = 1
    tags: List[str] = field(default_factory=list)
    history: Tuple[GrantHistoryEntry, ...] = ()

    @staticmethod
    def create(title: str, start_date: date, end_date: date, **extra) -> "Grant":
        grant = Grant(
            id=generate_id(),
            title=title,
            start_date=start_date,
            end_date=end_date,
            **extra,
        )
        grant.validate()
        return grant

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    def validate(self) -> None:
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise InvalidGrantError(
                "Grant end date cannot be before start date.",
                code="GRANT_TIMELINE_INVERTED",
            )
        if (self.total_funding or 0.0) < 0:
            raise InvalidGrantError("Grant total funding cannot be negative.", code="GRANT_NEGATIVE_FUNDING")

    # ------------------------------------------------------------------
    # Derived figures
    # ------------------------------------------------------------------

    def total_days(self) -> int:
        """Length of the funded period, end date inclusive."""
        if self.end_date <= self.start_date:
            raise InvalidGrantError(
                "Grant end date must be after its start date.",
                code="GRANT_TIMELINE_INVERTED",
            )
        return (self.end_date - self.start_date).days + 1

    def days_elapsed(self, as_of: date) -> int:
        return (as_of - self.start_date).days

    def days_remaining(self, as_of: date) -> int:
        return (self.end_date - as_of).days

    def timeline_progress(self, as_of: date) -> float:
        return min(max(self.days_elapsed(as_of) / self.total_days(), 0.0), 1.0)

    def progress(self) -> float:
        """Milestone completion ratio."""
        if not self.milestones:
            return 0.0
        completed = sum(1 for m in self.milestones if m.is_completed)
        return completed / len(self.milestones)

    def gross_spend(self) -> float:
        return float(sum(e.amount for e in self.expenditures))

    def approved_spend(self) -> float:
        return float(sum(e.amount for e in self.expenditures if e.is_approved))

    def gross_utilization(self) -> float:
        """All recorded expenditures over total funding, whatever their approval state."""
        if not self.total_funding:
            return 0.0
        return self.gross_spend() / self.total_funding

    def approved_utilization(self) -> float:
        """Approved expenditures only over total funding."""
        if not self.total_funding:
            return 0.0
        return self.approved_spend() / self.total_funding

    def is_at_risk(self, as_of: date) -> bool:
        timeline = self.timeline_progress(as_of)
        return (
            abs(self.progress() - timeline) > AT_RISK_DEVIATION
            or abs(self.approved_utilization() - timeline) > AT_RISK_DEVIATION
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _record(self, action: str, actor: str | None, changes: dict[str, Any]) -> GrantHistoryEntry:
        entry = GrantHistoryEntry.create(action, actor=actor, changes=changes)
        self.version += 1
        self.updated_at = entry.timestamp
        if actor:
            self.updated_by = actor
        self.history = self.history + (entry,)
        return entry

    def _adopt(self, child: Any, label: str) -> None:
        owner = getattr(child, "grant_id", None)
        if owner and owner != self.id:
            raise ValidationError(f"{label} belongs to another grant.", code=f"{label.upper()}_FOREIGN")
        child.grant_id = self.id

    def update_status(self, new_status: GrantStatus, actor: str | None = None) -> GrantHistoryEntry:
        old_status = self.status
        self.status = new_status
        return self._record(
            "STATUS_CHANGE",
            actor,
            {"status": {"from": old_status.value, "to": new_status.value}},
        )

    def update_funding(self, total_funding: float, actor: str | None = None) -> GrantHistoryEntry:
        if total_funding < 0:
            raise InvalidGrantError("Grant total funding cannot be negative.", code="GRANT_NEGATIVE_FUNDING")
        old_funding = self.total_funding
        self.total_funding = total_funding
        return self._record(
            "FUNDING_CHANGE",
            actor,
            {"total_funding": {"from": old_funding, "to": total_funding}},
        )

    def add_milestone(self, milestone: Milestone, actor: str | None = None) -> GrantHistoryEntry:
        self._adopt(milestone, "Milestone")
        self.milestones.append(milestone)
        return self._record("MILESTONE_ADDED", actor, {"milestone_id": milestone.id, "name": milestone.name})

    def complete_milestone(
        self,
        milestone_id: str,
        completion_date: date,
        actor: str | None = None,
    ) -> GrantHistoryEntry:
        milestone = _find(self.milestones, milestone_id, "Milestone")
        old_status = milestone.status
        milestone.status = MilestoneStatus.COMPLETED
        milestone.completion_date = completion_date
        return self._record(
            "MILESTONE_COMPLETED",
            actor,
            {
                "milestone_id": milestone.id,
                "status": {"from": old_status.value, "to": milestone.status.value},
                "completion_date": completion_date.isoformat(),
            },
        )

    def add_expenditure(self, expenditure: Expenditure, actor: str | None = None) -> GrantHistoryEntry:
        if expenditure.amount is None or expenditure.amount < 0:
            raise ValidationError("Expenditure amount cannot be negative.", code="EXPENDITURE_NEGATIVE")
        self._adopt(expenditure, "Expenditure")
        self.expenditures.append(expenditure)
        return self._record(
            "EXPENDITURE_ADDED",
            actor,
            {"expenditure_id": expenditure.id, "amount": expenditure.amount, "status": expenditure.status.value},
        )

    def _set_expenditure_status(
        self,
        expenditure_id: str,
        new_status: ExpenditureStatus,
        action: str,
        actor: str | None,
        decided_on: date | None,
    ) -> GrantHistoryEntry:
        expenditure = _find(self.expenditures, expenditure_id, "Expenditure")
        if expenditure.status != ExpenditureStatus.PENDING:
            raise BusinessRuleError(
                f"Expenditure is already {expenditure.status.value.lower()}.",
                code="EXPENDITURE_ALREADY_DECIDED",
            )
        expenditure.status = new_status
        if new_status == ExpenditureStatus.APPROVED:
            expenditure.approved_by = actor
            expenditure.approved_on = decided_on
        return self._record(
            action,
            actor,
            {
                "expenditure_id": expenditure.id,
                "status": {"from": ExpenditureStatus.PENDING.value, "to": new_status.value},
            },
        )

    def approve_expenditure(
        self,
        expenditure_id: str,
        actor: str | None = None,
        approved_on: date | None = None,
    ) -> GrantHistoryEntry:
        return self._set_expenditure_status(
            expenditure_id,
            ExpenditureStatus.APPROVED,
            "EXPENDITURE_APPROVED",
            actor,
            approved_on or date.today(),
        )

    def reject_expenditure(self, expenditure_id: str, actor: str | None = None) -> GrantHistoryEntry:
        return self._set_expenditure_status(
            expenditure_id,
            ExpenditureStatus.REJECTED,
            "EXPENDITURE_REJECTED",
            actor,
            None,
        )

    def add_kpi(self, kpi: KPI, actor: str | None = None) -> GrantHistoryEntry:
        self._adopt(kpi, "KPI")
        self.kpis.append(kpi)
        return self._record("KPI_ADDED", actor, {"kpi_id": kpi.id, "name": kpi.name, "target": kpi.target_value})

    def record_kpi_value(self, kpi_id: str, value: float, actor: str | None = None) -> GrantHistoryEntry:
        kpi = _find(self.kpis, kpi_id, "KPI")
        old_value = kpi.current_value
        kpi.current_value = float(value)
        return self._record(
            "KPI_UPDATED",
            actor,
            {"kpi_id": kpi.id, "current_value": {"from": old_value, "to": kpi.current_value}},
        )

    def add_document(self, document: GrantDocument, actor: str | None = None) -> GrantHistoryEntry:
        self._adopt(document, "Document")
        self.documents.append(document)
        return self._record(
            "DOCUMENT_ADDED",
            actor,
            {"document_id": document.id, "document_type": document.document_type},
        )

    def review_document(
        self,
        document_id: str,
        status: DocumentStatus,
        actor: str | None = None,
        notes: str | None = None,
    ) -> GrantHistoryEntry:
        document = _find(self.documents, document_id, "Document")
        old_status = document.status
        document.status = status
        if notes is not None:
            document.review_notes = notes
        return self._record(
            "DOCUMENT_REVIEWED",
            actor,
            {"document_id": document.id, "status": {"from": old_status.value, "to": status.value}},
        )

    def submit_report(self, report: ReportSubmission, actor: str | None = None) -> GrantHistoryEntry:
        self._adopt(report, "Report")
        self.reports.append(report)
        return self._record(
            "REPORT_SUBMITTED",
            actor,
            {
                "report_id": report.id,
                "report_type": report.report_type,
                "submission_date": report.submission_date.isoformat(),
            },
        )

    def add_compliance_requirement(
        self,
        requirement: ComplianceRequirement,
        actor: str | None = None,
    ) -> GrantHistoryEntry:
        self._adopt(requirement, "Requirement")
        self.compliance_requirements.append(requirement)
        return self._record(
            "REQUIREMENT_ADDED",
            actor,
            {"requirement_id": requirement.id, "name": requirement.name},
        )


__all__ = ["Grant", "AT_RISK_DEVIATION"]
