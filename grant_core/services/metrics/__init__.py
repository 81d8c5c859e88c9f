from .financial import calculate_financial_metrics
from .models import FinancialMetrics, GrantProgressMetrics, PeriodSpend
from .progress import calculate_progress, classify_risk, kpi_achievement, risk_score

__all__ = [
    "calculate_progress",
    "calculate_financial_metrics",
    "classify_risk",
    "risk_score",
    "kpi_achievement",
    "GrantProgressMetrics",
    "FinancialMetrics",
    "PeriodSpend",
]
