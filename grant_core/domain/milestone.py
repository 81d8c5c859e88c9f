from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from grant_core.domain.enums import MilestoneStatus
from grant_core.domain.identifiers import generate_id


@dataclass
class Milestone:
    id: str
    grant_id: str
    name: str
    due_date: date
    description: str = ""
    completion_date: Optional[date] = None
    status: MilestoneStatus = MilestoneStatus.PENDING
    deliverables: List[str] = field(default_factory=list)
    # ids of milestones this one depends on; informational only
    dependencies: List[str] = field(default_factory=list)

    @property
    def is_completed(self) -> bool:
        return self.status == MilestoneStatus.COMPLETED

    @staticmethod
    def create(grant_id: str, name: str, due_date: date, description: str = "", **extra) -> "Milestone":
        return Milestone(
            id=generate_id(),
            grant_id=grant_id,
            name=name,
            due_date=due_date,
            description=description,
            **extra,
        )


__all__ = ["Milestone"]
