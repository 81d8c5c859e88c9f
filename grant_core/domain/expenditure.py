from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from grant_core.domain.enums import ExpenditureStatus
from grant_core.domain.identifiers import generate_id


@dataclass
class Expenditure:
    id: str
    grant_id: str
    amount: float
    incurred_on: date
    category: str = "OTHER"
    description: str = ""
    receipt_url: Optional[str] = None
    status: ExpenditureStatus = ExpenditureStatus.PENDING
    approved_by: Optional[str] = None
    approved_on: Optional[date] = None

    @property
    def is_approved(self) -> bool:
        return self.status == ExpenditureStatus.APPROVED

    @staticmethod
    def create(
        grant_id: str,
        amount: float,
        incurred_on: date,
        category: str = "OTHER",
        description: str = "",
        **extra,
    ) -> "Expenditure":
        return Expenditure(
            id=generate_id(),
            grant_id=grant_id,
            amount=amount,
            incurred_on=incurred_on,
            category=category,
            description=description,
            **extra,
        )


__all__ = ["Expenditure"]
