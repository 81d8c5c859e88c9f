from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from grant_core.domain.enums import DocumentStatus, ReportStatus
from grant_core.domain.identifiers import generate_id


@dataclass
class GrantDocument:
    id: str
    grant_id: str
    document_type: str
    name: str
    uploaded_on: date
    url: str = ""
    uploaded_by: str = ""
    status: DocumentStatus = DocumentStatus.PENDING
    review_notes: Optional[str] = None

    @staticmethod
    def create(grant_id: str, document_type: str, name: str, uploaded_on: date, **extra) -> "GrantDocument":
        return GrantDocument(
            id=generate_id(),
            grant_id=grant_id,
            document_type=document_type,
            name=name,
            uploaded_on=uploaded_on,
            **extra,
        )


@dataclass
class ReportSubmission:
    id: str
    grant_id: str
    report_type: str
    period: str
    submission_date: date
    submitted_by: str = ""
    status: ReportStatus = ReportStatus.SUBMITTED
    url: Optional[str] = None
    notes: Optional[str] = None

    @staticmethod
    def create(grant_id: str, report_type: str, period: str, submission_date: date, **extra) -> "ReportSubmission":
        return ReportSubmission(
            id=generate_id(),
            grant_id=grant_id,
            report_type=report_type,
            period=period,
            submission_date=submission_date,
            **extra,
        )


__all__ = ["GrantDocument", "ReportSubmission"]
