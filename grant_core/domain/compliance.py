from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Union

from grant_core.domain.enums import RequirementType, Severity
from grant_core.domain.identifiers import generate_id
from grant_core.exceptions import ValidationError


def coerce_requirement_type(value: Any) -> Union[RequirementType, str]:
    """Known types become enum members; anything else stays a plain string."""
    if isinstance(value, RequirementType):
        return value
    text = str(value or "").strip()
    try:
        return RequirementType(text.upper())
    except ValueError:
        return text


def coerce_severity(value: Any) -> Severity:
    """Accept a Severity or its name in any case; anything else is a ValidationError."""
    if isinstance(value, Severity):
        return value
    text = str(value or "").strip().upper()
    try:
        return Severity(text)
    except ValueError:
        raise ValidationError(
            f"Unknown requirement severity: {value!r}",
            code="REQUIREMENT_SEVERITY_INVALID",
        ) from None


@dataclass
class ComplianceRequirement:
    id: str
    name: str
    requirement_type: Union[RequirementType, str]
    severity: Severity = Severity.MEDIUM
    description: str = ""
    grant_id: Optional[str] = None
    applicable_from: Optional[date] = None
    due_date: Optional[date] = None
    # shape depends on requirement_type: requiredDocuments, maxUtilizationRate,
    # reportType, minAchievementRate
    parameters: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def create(
        name: str,
        requirement_type: Union[RequirementType, str],
        severity: Union[Severity, str] = Severity.MEDIUM,
        description: str = "",
        **extra,
    ) -> "ComplianceRequirement":
        return ComplianceRequirement(
            id=generate_id(),
            name=name,
            requirement_type=coerce_requirement_type(requirement_type),
            severity=coerce_severity(severity),
            description=description,
            **extra,
        )


__all__ = ["ComplianceRequirement", "coerce_requirement_type", "coerce_severity"]
