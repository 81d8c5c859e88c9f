from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from grant_core.domain import ComplianceRequirement, Grant


class GrantRepository(ABC):
    @abstractmethod
    def add(self, grant: Grant) -> None: ...

    @abstractmethod
    def update(self, grant: Grant, expected_version: int) -> None:
        """Persist ``grant`` if the stored row is still at ``expected_version``."""

    @abstractmethod
    def delete(self, grant_id: str) -> None: ...

    @abstractmethod
    def get(self, grant_id: str) -> Optional[Grant]: ...

    @abstractmethod
    def list_all(self) -> List[Grant]: ...


class RequirementRepository(ABC):
    @abstractmethod
    def add(self, requirement: ComplianceRequirement) -> None: ...

    @abstractmethod
    def get(self, requirement_id: str) -> Optional[ComplianceRequirement]: ...

    @abstractmethod
    def list_shared(self) -> List[ComplianceRequirement]:
        """Program-wide requirements that apply to every grant (no owning grant_id)."""

    @abstractmethod
    def delete(self, requirement_id: str) -> None: ...


__all__ = ["GrantRepository", "RequirementRepository"]
