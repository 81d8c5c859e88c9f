from __future__ import annotations

from datetime import date
from typing import Callable, Iterable

from grant_core.domain import (
    KPI,
    DocumentStatus,
    Expenditure,
    Grant,
    GrantDocument,
    Milestone,
    ReportSubmission,
)
from grant_core.events.domain_events import domain_events
from grant_core.events.signal import Signal
from grant_core.exceptions import ValidationError
from grant_core.services.grant.persistence import GrantPersistenceMixin
from grant_core.services.grant.validation import GrantValidationMixin


class GrantActivityMixin(GrantValidationMixin, GrantPersistenceMixin):
    """Milestones, spend, KPIs, documents and reports recorded against a grant."""

    def _mutate(
        self,
        grant_id: str,
        expected_version: int | None,
        change: Callable[[Grant], object],
        signals: Iterable[Signal[str]],
    ) -> Grant:
        grant = self._require_grant(grant_id)
        self._check_version(grant, expected_version)
        previous = grant.version
        change(grant)
        return self._save_grant(grant, previous, *signals)

    def add_milestone(
        self,
        grant_id: str,
        name: str,
        due_date: date,
        *,
        description: str = "",
        deliverables: list[str] | None = None,
        dependencies: list[str] | None = None,
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> Milestone:
        if not name or not name.strip():
            raise ValidationError("Milestone name cannot be empty.", code="MILESTONE_NAME_EMPTY")
        milestone = Milestone.create(
            grant_id,
            name.strip(),
            due_date,
            description=description.strip(),
            deliverables=list(deliverables or []),
            dependencies=list(dependencies or []),
        )
        self._mutate(
            grant_id,
            expected_version,
            lambda g: g.add_milestone(milestone, actor),
            [domain_events.grant_changed],
        )
        return milestone

    def complete_milestone(
        self,
        grant_id: str,
        milestone_id: str,
        completion_date: date | None = None,
        *,
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> Grant:
        return self._mutate(
            grant_id,
            expected_version,
            lambda g: g.complete_milestone(milestone_id, completion_date or date.today(), actor),
            [domain_events.grant_changed],
        )

    def record_expenditure(
        self,
        grant_id: str,
        amount: float,
        incurred_on: date,
        *,
        category: str = "OTHER",
        description: str = "",
        receipt_url: str | None = None,
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> Expenditure:
        if amount is None or amount < 0:
            raise ValidationError("Expenditure amount cannot be negative.", code="EXPENDITURE_NEGATIVE")
        expenditure = Expenditure.create(
            grant_id,
            float(amount),
            incurred_on,
            category=(category or "OTHER").strip().upper(),
            description=description.strip(),
            receipt_url=receipt_url,
        )
        self._mutate(
            grant_id,
            expected_version,
            lambda g: g.add_expenditure(expenditure, actor),
            [domain_events.expenditures_changed],
        )
        return expenditure

    def approve_expenditure(
        self,
        grant_id: str,
        expenditure_id: str,
        *,
        actor: str | None = None,
        approved_on: date | None = None,
        expected_version: int | None = None,
    ) -> Grant:
        return self._mutate(
            grant_id,
            expected_version,
            lambda g: g.approve_expenditure(expenditure_id, actor, approved_on),
            [domain_events.expenditures_changed],
        )

    def reject_expenditure(
        self,
        grant_id: str,
        expenditure_id: str,
        *,
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> Grant:
        return self._mutate(
            grant_id,
            expected_version,
            lambda g: g.reject_expenditure(expenditure_id, actor),
            [domain_events.expenditures_changed],
        )

    def add_kpi(
        self,
        grant_id: str,
        name: str,
        target_value: float,
        *,
        current_value: float = 0.0,
        unit: str = "",
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> KPI:
        if not name or not name.strip():
            raise ValidationError("KPI name cannot be empty.", code="KPI_NAME_EMPTY")
        grant = self._require_grant(grant_id)
        if any(k.name.strip().lower() == name.strip().lower() for k in grant.kpis):
            raise ValidationError("A KPI with this name already exists on the grant.", code="KPI_NAME_DUPLICATE")
        kpi = KPI.create(grant_id, name.strip(), float(target_value), float(current_value), unit)
        self._mutate(
            grant_id,
            expected_version,
            lambda g: g.add_kpi(kpi, actor),
            [domain_events.grant_changed],
        )
        return kpi

    def record_kpi_value(
        self,
        grant_id: str,
        kpi_id: str,
        value: float,
        *,
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> Grant:
        return self._mutate(
            grant_id,
            expected_version,
            lambda g: g.record_kpi_value(kpi_id, value, actor),
            [domain_events.grant_changed, domain_events.compliance_changed],
        )

    def upload_document(
        self,
        grant_id: str,
        document_type: str,
        name: str,
        *,
        uploaded_on: date | None = None,
        url: str = "",
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> GrantDocument:
        if not document_type or not document_type.strip():
            raise ValidationError("Document type cannot be empty.", code="DOCUMENT_TYPE_EMPTY")
        document = GrantDocument.create(
            grant_id,
            document_type.strip(),
            (name or document_type).strip(),
            uploaded_on or date.today(),
            url=url,
            uploaded_by=actor or "",
        )
        self._mutate(
            grant_id,
            expected_version,
            lambda g: g.add_document(document, actor),
            [domain_events.compliance_changed],
        )
        return document

    def review_document(
        self,
        grant_id: str,
        document_id: str,
        status: DocumentStatus,
        *,
        notes: str | None = None,
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> Grant:
        return self._mutate(
            grant_id,
            expected_version,
            lambda g: g.review_document(document_id, status, actor, notes),
            [domain_events.compliance_changed],
        )

    def submit_report(
        self,
        grant_id: str,
        report_type: str,
        period: str,
        submission_date: date | None = None,
        *,
        notes: str | None = None,
        url: str | None = None,
        actor: str | None = None,
        expected_version: int | None = None,
    ) -> ReportSubmission:
        if not report_type or not report_type.strip():
            raise ValidationError("Report type cannot be empty.", code="REPORT_TYPE_EMPTY")
        report = ReportSubmission.create(
            grant_id,
            report_type.strip(),
            (period or "").strip(),
            submission_date or date.today(),
            submitted_by=actor or "",
            notes=notes,
            url=url,
        )
        self._mutate(
            grant_id,
            expected_version,
            lambda g: g.submit_report(report, actor),
            [domain_events.compliance_changed],
        )
        return report


__all__ = ["GrantActivityMixin"]
