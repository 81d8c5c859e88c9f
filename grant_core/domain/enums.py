from __future__ import annotations

from enum import Enum


class GrantStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    COMPLETED = "COMPLETED"
    TERMINATED = "TERMINATED"
    CLOSED = "CLOSED"


class GrantType(str, Enum):
    FEDERAL = "FEDERAL"
    STATE = "STATE"
    LOCAL = "LOCAL"
    FOUNDATION = "FOUNDATION"
    CORPORATE = "CORPORATE"
    INTERNATIONAL = "INTERNATIONAL"


class ReportingFrequency(str, Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMI_ANNUAL = "SEMI_ANNUAL"
    ANNUAL = "ANNUAL"


class OrganizationType(str, Enum):
    NON_PROFIT = "NON_PROFIT"
    GOVERNMENT = "GOVERNMENT"
    ACADEMIC = "ACADEMIC"
    PRIVATE = "PRIVATE"


class MilestoneStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    DELAYED = "DELAYED"


class ExpenditureStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DocumentStatus(str, Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ReportStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    REVIEWED = "REVIEWED"


class RequirementType(str, Enum):
    DOCUMENTATION = "DOCUMENTATION"
    FINANCIAL = "FINANCIAL"
    REPORTING = "REPORTING"
    PERFORMANCE = "PERFORMANCE"


class Severity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ComplianceState(str, Enum):
    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"
    PENDING = "PENDING"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class OverallCompliance(str, Enum):
    COMPLIANT = "COMPLIANT"
    AT_RISK = "AT_RISK"
    NON_COMPLIANT = "NON_COMPLIANT"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class UtilizationBasis(str, Enum):
    GROSS = "GROSS"
    APPROVED = "APPROVED"


class ReportingPeriod(str, Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUAL = "ANNUAL"


__all__ = [
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
]
