from grant_core.domain.audit import GrantHistoryEntry
from grant_core.domain.compliance import ComplianceRequirement, coerce_requirement_type, coerce_severity
from grant_core.domain.document import GrantDocument, ReportSubmission
from grant_core.domain.enums import (
    ComplianceState,
    DocumentStatus,
    ExpenditureStatus,
    GrantStatus,
    GrantType,
    MilestoneStatus,
    OrganizationType,
    OverallCompliance,
    ReportingFrequency,
    ReportingPeriod,
    ReportStatus,
    RequirementType,
    RiskLevel,
    Severity,
    UtilizationBasis,
)
from grant_core.domain.expenditure import Expenditure
from grant_core.domain.grant import Grant
from grant_core.domain.identifiers import generate_id
from grant_core.domain.kpi import KPI
from grant_core.domain.milestone import Milestone
from grant_core.domain.organization import Address, Contact, Organization

__all__ = [
    "generate_id",
    "GrantStatus",
    "GrantType",
    "ReportingFrequency",
    "OrganizationType",
    "MilestoneStatus",
    "ExpenditureStatus",
    "DocumentStatus",
    "ReportStatus",
    "RequirementType",
    "Severity",
    "ComplianceState",
    "OverallCompliance",
    "RiskLevel",
    "UtilizationBasis",
    "ReportingPeriod",
    "Grant",
    "Milestone",
    "Expenditure",
    "KPI",
    "GrantDocument",
    "ReportSubmission",
    "ComplianceRequirement",
    "coerce_requirement_type",
    "coerce_severity",
    "GrantHistoryEntry",
    "Organization",
    "Address",
    "Contact",
]
