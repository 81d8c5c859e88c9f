from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from grant_core.domain.identifiers import generate_id


@dataclass(frozen=True)
class GrantHistoryEntry:
    id: str
    timestamp: datetime
    action: str
    actor: str | None
    changes: Mapping[str, Any] = field(default_factory=dict)

    @staticmethod
    def create(
        action: str,
        *,
        actor: str | None = None,
        changes: Mapping[str, Any] | None = None,
        timestamp: datetime | None = None,
    ) -> "GrantHistoryEntry":
        return GrantHistoryEntry(
            id=generate_id(),
            timestamp=timestamp or datetime.now(timezone.utc),
            action=action,
            actor=actor,
            changes=dict(changes or {}),
        )


__all__ = ["GrantHistoryEntry"]
