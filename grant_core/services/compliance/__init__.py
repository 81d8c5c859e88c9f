from .evaluator import assess_compliance, evaluate_requirement, overall_status
from .models import ComplianceStatus, ComplianceSummary
from .rules import RULES

__all__ = [
    "assess_compliance",
    "evaluate_requirement",
    "overall_status",
    "ComplianceStatus",
    "ComplianceSummary",
    "RULES",
]
