# grant_infra/db/models.py
from __future__ import annotations
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from grant_infra.db.base import Base
from grant_core.domain import (
    DocumentStatus,
    ExpenditureStatus,
    GrantStatus,
    GrantType,
    MilestoneStatus,
    ReportingFrequency,
    ReportStatus,
    Severity,
)


class GrantORM(Base):
    __tablename__ = "grants"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    grant_number: Mapped[str] = mapped_column(String, default="")
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    grant_type: Mapped[GrantType] = mapped_column(SAEnum(GrantType), default=GrantType.FEDERAL, nullable=False)
    status: Mapped[GrantStatus] = mapped_column(SAEnum(GrantStatus), default=GrantStatus.DRAFT, nullable=False)

    total_funding: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    awarded_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    matching_requirement: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    funding_source: Mapped[str] = mapped_column(String, default="")
    grant_manager: Mapped[str] = mapped_column(String, default="")

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    application_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    award_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    reporting_frequency: Mapped[ReportingFrequency] = mapped_column(
        SAEnum(ReportingFrequency), default=ReportingFrequency.QUARTERLY, nullable=False
    )

    # organisations and free-form lists are stored as JSON text
    recipient_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    grantor_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    objectives_json: Mapped[str] = mapped_column(Text, default="[]")
    target_beneficiaries: Mapped[str] = mapped_column(String, default="")
    geographic_scope: Mapped[str] = mapped_column(String, default="")
    tags_json: Mapped[str] = mapped_column(Text, default="[]")

    created_by: Mapped[str] = mapped_column(String, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_by: Mapped[str] = mapped_column(String, default="")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
Index("idx_grants_status", GrantORM.status)
Index("idx_grants_grant_number", GrantORM.grant_number)


class MilestoneORM(Base):
    __tablename__ = "milestones"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    grant_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("grants.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    completion_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[MilestoneStatus] = mapped_column(
        SAEnum(MilestoneStatus), default=MilestoneStatus.PENDING, nullable=False
    )
    deliverables_json: Mapped[str] = mapped_column(Text, default="[]")
    dependencies_json: Mapped[str] = mapped_column(Text, default="[]")
Index("idx_milestones_grant", MilestoneORM.grant_id)


class ExpenditureORM(Base):
    __tablename__ = "expenditures"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    grant_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("grants.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    incurred_on: Mapped[date] = mapped_column(Date, nullable=False)
    category: Mapped[str] = mapped_column(String, default="OTHER")
    description: Mapped[str] = mapped_column(Text, default="")
    receipt_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status: Mapped[ExpenditureStatus] = mapped_column(
        SAEnum(ExpenditureStatus), default=ExpenditureStatus.PENDING, nullable=False
    )
    approved_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    approved_on: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
Index("idx_expenditures_grant", ExpenditureORM.grant_id)
Index("idx_expenditures_status", ExpenditureORM.status)


class KPIORM(Base):
    __tablename__ = "kpis"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    grant_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("grants.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    target_value: Mapped[float] = mapped_column(Float, nullable=False)
    current_value: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    unit: Mapped[str] = mapped_column(String, default="")
Index("idx_kpis_grant", KPIORM.grant_id)


class GrantDocumentORM(Base):
    __tablename__ = "grant_documents"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    grant_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("grants.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    document_type: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    uploaded_on: Mapped[date] = mapped_column(Date, nullable=False)
    url: Mapped[str] = mapped_column(String, default="")
    uploaded_by: Mapped[str] = mapped_column(String, default="")
    status: Mapped[DocumentStatus] = mapped_column(
        SAEnum(DocumentStatus), default=DocumentStatus.PENDING, nullable=False
    )
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
Index("idx_grant_documents_grant", GrantDocumentORM.grant_id)
Index("idx_grant_documents_type", GrantDocumentORM.document_type)


class ReportSubmissionORM(Base):
    __tablename__ = "report_submissions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    grant_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("grants.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    report_type: Mapped[str] = mapped_column(String, nullable=False)
    period: Mapped[str] = mapped_column(String, default="")
    submission_date: Mapped[date] = mapped_column(Date, nullable=False)
    submitted_by: Mapped[str] = mapped_column(String, default="")
    status: Mapped[ReportStatus] = mapped_column(
        SAEnum(ReportStatus), default=ReportStatus.SUBMITTED, nullable=False
    )
    url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
Index("idx_report_submissions_grant", ReportSubmissionORM.grant_id)


class ComplianceRequirementORM(Base):
    __tablename__ = "compliance_requirements"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    # NULL grant_id marks a program-wide requirement
    grant_id: Mapped[Optional[str]] = mapped_column(
        String,
        ForeignKey("grants.id", ondelete="CASCADE"),
        nullable=True,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # plain string so unknown requirement kinds survive a round trip
    requirement_type: Mapped[str] = mapped_column(String, nullable=False)
    severity: Mapped[Severity] = mapped_column(SAEnum(Severity), default=Severity.MEDIUM, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    applicable_from: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    parameters_json: Mapped[str] = mapped_column(Text, default="{}")
Index("idx_compliance_requirements_grant", ComplianceRequirementORM.grant_id)


class GrantHistoryORM(Base):
    __tablename__ = "grant_history"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    grant_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("grants.id", ondelete="CASCADE"),
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    action: Mapped[str] = mapped_column(String, nullable=False)
    actor: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    changes_json: Mapped[str] = mapped_column(Text, default="{}")
Index("idx_grant_history_grant_sequence", GrantHistoryORM.grant_id, GrantHistoryORM.sequence, unique=True)


CHILD_TABLES = (
    MilestoneORM,
    ExpenditureORM,
    KPIORM,
    GrantDocumentORM,
    ReportSubmissionORM,
    ComplianceRequirementORM,
    GrantHistoryORM,
)
