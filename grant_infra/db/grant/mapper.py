from __future__ import annotations

from dataclasses import fields
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence

from grant_core.domain import (
    KPI,
    Address,
    ComplianceRequirement,
    Contact,
    Expenditure,
    Grant,
    GrantDocument,
    GrantHistoryEntry,
    Milestone,
    Organization,
    OrganizationType,
    ReportSubmission,
)
from grant_infra.db.models import (
    ExpenditureORM,
    GrantDocumentORM,
    GrantHistoryORM,
    GrantORM,
    KPIORM,
    MilestoneORM,
    ReportSubmissionORM,
)
from grant_infra.db.serialization import from_json_dict, from_json_list, to_json


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _parse_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    return date.fromisoformat(str(value))


def _known_fields(cls: type, raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    names = {f.name for f in fields(cls)}
    return {key: str(value or "") for key, value in raw.items() if key in names}


# ---------------------------------------------------------------------------
# Organisations (JSON columns)
# ---------------------------------------------------------------------------


def organization_to_json(org: Optional[Organization]) -> Optional[str]:
    if org is None:
        return None
    return to_json(
        {
            "id": org.id,
            "name": org.name,
            "org_type": org.org_type.value,
            "tax_id": org.tax_id,
            "address": vars(org.address),
            "contact": vars(org.contact),
            "registration_date": org.registration_date.isoformat() if org.registration_date else None,
        }
    )


def organization_from_json(raw: Optional[str]) -> Optional[Organization]:
    data = from_json_dict(raw)
    if not data:
        return None
    return Organization(
        id=str(data.get("id") or ""),
        name=str(data.get("name") or ""),
        org_type=OrganizationType(data.get("org_type") or OrganizationType.NON_PROFIT.value),
        tax_id=data.get("tax_id"),
        address=Address(**_known_fields(Address, data.get("address"))),
        contact=Contact(**_known_fields(Contact, data.get("contact"))),
        registration_date=_parse_date(data.get("registration_date")),
    )


# ---------------------------------------------------------------------------
# Grant row
# ---------------------------------------------------------------------------


def grant_row_values(grant: Grant) -> dict[str, Any]:
    """Column values of the ``grants`` row, version excluded."""
    return {
        "grant_number": grant.grant_number,
        "title": grant.title,
        "description": grant.description,
        "grant_type": grant.grant_type,
        "status": grant.status,
        "total_funding": grant.total_funding,
        "awarded_amount": grant.awarded_amount,
        "matching_requirement": grant.matching_requirement,
        "funding_source": grant.funding_source,
        "grant_manager": grant.grant_manager,
        "start_date": grant.start_date,
        "end_date": grant.end_date,
        "application_date": grant.application_date,
        "award_date": grant.award_date,
        "reporting_frequency": grant.reporting_frequency,
        "recipient_json": organization_to_json(grant.recipient),
        "grantor_json": organization_to_json(grant.grantor),
        "objectives_json": to_json(list(grant.objectives)),
        "target_beneficiaries": grant.target_beneficiaries,
        "geographic_scope": grant.geographic_scope,
        "tags_json": to_json(list(grant.tags)),
        "created_by": grant.created_by,
        "created_at": grant.created_at,
        "updated_by": grant.updated_by,
        "updated_at": grant.updated_at,
    }


def grant_to_orm(grant: Grant) -> GrantORM:
    return GrantORM(id=grant.id, version=grant.version, **grant_row_values(grant))


# ---------------------------------------------------------------------------
# Children
# ---------------------------------------------------------------------------


def milestone_to_orm(m: Milestone, position: int) -> MilestoneORM:
    return MilestoneORM(
        id=m.id,
        grant_id=m.grant_id,
        position=position,
        name=m.name,
        description=m.description,
        due_date=m.due_date,
        completion_date=m.completion_date,
        status=m.status,
        deliverables_json=to_json(list(m.deliverables)),
        dependencies_json=to_json(list(m.dependencies)),
    )


def milestone_from_orm(obj: MilestoneORM) -> Milestone:
    return Milestone(
        id=obj.id,
        grant_id=obj.grant_id,
        name=obj.name,
        due_date=obj.due_date,
        description=obj.description or "",
        completion_date=obj.completion_date,
        status=obj.status,
        deliverables=[str(x) for x in from_json_list(obj.deliverables_json)],
        dependencies=[str(x) for x in from_json_list(obj.dependencies_json)],
    )


def expenditure_to_orm(e: Expenditure, position: int) -> ExpenditureORM:
    return ExpenditureORM(
        id=e.id,
        grant_id=e.grant_id,
        position=position,
        amount=e.amount,
        incurred_on=e.incurred_on,
        category=e.category,
        description=e.description,
        receipt_url=e.receipt_url,
        status=e.status,
        approved_by=e.approved_by,
        approved_on=e.approved_on,
    )


def expenditure_from_orm(obj: ExpenditureORM) -> Expenditure:
    return Expenditure(
        id=obj.id,
        grant_id=obj.grant_id,
        amount=obj.amount,
        incurred_on=obj.incurred_on,
        category=obj.category or "OTHER",
        description=obj.description or "",
        receipt_url=obj.receipt_url,
        status=obj.status,
        approved_by=obj.approved_by,
        approved_on=obj.approved_on,
    )


def kpi_to_orm(k: KPI, position: int) -> KPIORM:
    return KPIORM(
        id=k.id,
        grant_id=k.grant_id,
        position=position,
        name=k.name,
        target_value=k.target_value,
        current_value=k.current_value,
        unit=k.unit,
    )


def kpi_from_orm(obj: KPIORM) -> KPI:
    return KPI(
        id=obj.id,
        grant_id=obj.grant_id,
        name=obj.name,
        target_value=obj.target_value,
        current_value=obj.current_value,
        unit=obj.unit or "",
    )


def document_to_orm(d: GrantDocument, position: int) -> GrantDocumentORM:
    return GrantDocumentORM(
        id=d.id,
        grant_id=d.grant_id,
        position=position,
        document_type=d.document_type,
        name=d.name,
        uploaded_on=d.uploaded_on,
        url=d.url,
        uploaded_by=d.uploaded_by,
        status=d.status,
        review_notes=d.review_notes,
    )


def document_from_orm(obj: GrantDocumentORM) -> GrantDocument:
    return GrantDocument(
        id=obj.id,
        grant_id=obj.grant_id,
        document_type=obj.document_type,
        name=obj.name,
        uploaded_on=obj.uploaded_on,
        url=obj.url or "",
        uploaded_by=obj.uploaded_by or "",
        status=obj.status,
        review_notes=obj.review_notes,
    )


def report_to_orm(r: ReportSubmission, position: int) -> ReportSubmissionORM:
    return ReportSubmissionORM(
        id=r.id,
        grant_id=r.grant_id,
        position=position,
        report_type=r.report_type,
        period=r.period,
        submission_date=r.submission_date,
        submitted_by=r.submitted_by,
        status=r.status,
        url=r.url,
        notes=r.notes,
    )


def report_from_orm(obj: ReportSubmissionORM) -> ReportSubmission:
    return ReportSubmission(
        id=obj.id,
        grant_id=obj.grant_id,
        report_type=obj.report_type,
        period=obj.period or "",
        submission_date=obj.submission_date,
        submitted_by=obj.submitted_by or "",
        status=obj.status,
        url=obj.url,
        notes=obj.notes,
    )


def history_to_orm(grant_id: str, entry: GrantHistoryEntry, sequence: int) -> GrantHistoryORM:
    return GrantHistoryORM(
        id=entry.id,
        grant_id=grant_id,
        sequence=sequence,
        occurred_at=entry.timestamp,
        action=entry.action,
        actor=entry.actor,
        changes_json=to_json(dict(entry.changes)),
    )


def history_from_orm(obj: GrantHistoryORM) -> GrantHistoryEntry:
    return GrantHistoryEntry(
        id=obj.id,
        timestamp=_aware(obj.occurred_at),
        action=obj.action,
        actor=obj.actor,
        changes=from_json_dict(obj.changes_json),
    )


def grant_from_orm(
    obj: GrantORM,
    *,
    milestones: Sequence[MilestoneORM] = (),
    expenditures: Sequence[ExpenditureORM] = (),
    kpis: Sequence[KPIORM] = (),
    documents: Sequence[GrantDocumentORM] = (),
    reports: Sequence[ReportSubmissionORM] = (),
    requirements: Sequence[ComplianceRequirement] = (),
    history: Sequence[GrantHistoryORM] = (),
) -> Grant:
    return Grant(
        id=obj.id,
        title=obj.title,
        start_date=obj.start_date,
        end_date=obj.end_date,
        grant_number=obj.grant_number or "",
        description=obj.description or "",
        grant_type=obj.grant_type,
        status=obj.status,
        total_funding=obj.total_funding,
        awarded_amount=obj.awarded_amount,
        matching_requirement=obj.matching_requirement,
        funding_source=obj.funding_source or "",
        grant_manager=obj.grant_manager or "",
        application_date=obj.application_date,
        award_date=obj.award_date,
        reporting_frequency=obj.reporting_frequency,
        recipient=organization_from_json(obj.recipient_json),
        grantor=organization_from_json(obj.grantor_json),
        objectives=[str(x) for x in from_json_list(obj.objectives_json)],
        target_beneficiaries=obj.target_beneficiaries or "",
        geographic_scope=obj.geographic_scope or "",
        milestones=[milestone_from_orm(row) for row in milestones],
        expenditures=[expenditure_from_orm(row) for row in expenditures],
        kpis=[kpi_from_orm(row) for row in kpis],
        documents=[document_from_orm(row) for row in documents],
        reports=[report_from_orm(row) for row in reports],
        compliance_requirements=list(requirements),
        created_by=obj.created_by or "",
        created_at=_aware(obj.created_at),
        updated_by=obj.updated_by or "",
        updated_at=_aware(obj.updated_at),
        version=obj.version,
        tags=[str(x) for x in from_json_list(obj.tags_json)],
        history=tuple(history_from_orm(row) for row in history),
    )


__all__ = [
    "grant_row_values",
    "grant_to_orm",
    "grant_from_orm",
    "milestone_to_orm",
    "expenditure_to_orm",
    "kpi_to_orm",
    "document_to_orm",
    "report_to_orm",
    "history_to_orm",
    "organization_to_json",
    "organization_from_json",
]
