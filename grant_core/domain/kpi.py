from __future__ import annotations

from dataclasses import dataclass

from grant_core.domain.identifiers import generate_id


@dataclass
class KPI:
    id: str
    grant_id: str
    name: str
    target_value: float
    current_value: float = 0.0
    unit: str = ""

    def achievement(self) -> float:
        """Ratio of current to target; a zero target yields the raw current value."""
        if self.target_value == 0:
            return float(self.current_value)
        return float(self.current_value) / float(self.target_value)

    @staticmethod
    def create(grant_id: str, name: str, target_value: float, current_value: float = 0.0, unit: str = "") -> "KPI":
        return KPI(
            id=generate_id(),
            grant_id=grant_id,
            name=name,
            target_value=target_value,
            current_value=current_value,
            unit=unit,
        )


__all__ = ["KPI"]
