from .models import (
    ComplianceReport,
    CorrectiveAction,
    GrantEvaluationFailure,
    GrantScorecard,
    PortfolioMetrics,
    ProgressReport,
    UpcomingDeadline,
)
from .service import ReportingService

__all__ = [
    "ReportingService",
    "ProgressReport",
    "ComplianceReport",
    "CorrectiveAction",
    "UpcomingDeadline",
    "GrantEvaluationFailure",
    "GrantScorecard",
    "PortfolioMetrics",
]
