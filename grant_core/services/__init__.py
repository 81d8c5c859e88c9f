from .grant import GrantService
from .reporting import ReportingService

__all__ = [
    "GrantService",
    "ReportingService",
]
