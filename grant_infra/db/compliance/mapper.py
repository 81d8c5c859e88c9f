from __future__ import annotations

from grant_core.domain import ComplianceRequirement, coerce_requirement_type, coerce_severity
from grant_infra.db.models import ComplianceRequirementORM
from grant_infra.db.serialization import from_json_dict, to_json


def _type_name(requirement_type: object) -> str:
    return getattr(requirement_type, "value", None) or str(requirement_type)


def requirement_to_orm(requirement: ComplianceRequirement, position: int = 0) -> ComplianceRequirementORM:
    return ComplianceRequirementORM(
        id=requirement.id,
        grant_id=requirement.grant_id,
        position=position,
        name=requirement.name,
        requirement_type=_type_name(requirement.requirement_type),
        severity=requirement.severity,
        description=requirement.description,
        applicable_from=requirement.applicable_from,
        due_date=requirement.due_date,
        parameters_json=to_json(requirement.parameters or {}),
    )


def requirement_from_orm(obj: ComplianceRequirementORM) -> ComplianceRequirement:
    return ComplianceRequirement(
        id=obj.id,
        name=obj.name,
        requirement_type=coerce_requirement_type(obj.requirement_type),
        severity=coerce_severity(obj.severity),
        description=obj.description or "",
        grant_id=obj.grant_id,
        applicable_from=obj.applicable_from,
        due_date=obj.due_date,
        parameters=from_json_dict(obj.parameters_json),
    )


__all__ = ["requirement_to_orm", "requirement_from_orm"]
