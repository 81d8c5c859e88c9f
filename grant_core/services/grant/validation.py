from __future__ import annotations

from datetime import date

from grant_core.domain import Grant
from grant_core.exceptions import ConcurrencyError, NotFoundError, ValidationError
from grant_core.interfaces import GrantRepository


class GrantValidationMixin:
    _grant_repo: GrantRepository

    def _validate_title(self, title: str) -> None:
        if not title or not title.strip():
            raise ValidationError("Grant title cannot be empty.", code="GRANT_TITLE_EMPTY")
        if len(title.strip()) < 3:
            raise ValidationError("Grant title must be at least 3 characters.", code="GRANT_TITLE_TOO_SHORT")

    def _validate_grant_number(self, grant_number: str, *, exclude_id: str | None = None) -> None:
        number = (grant_number or "").strip().lower()
        if not number:
            return
        for grant in self._grant_repo.list_all():
            if grant.id != exclude_id and grant.grant_number.strip().lower() == number:
                raise ValidationError(
                    "A grant with this number already exists.",
                    code="GRANT_NUMBER_DUPLICATE",
                )

    def _validate_window(self, start_date: date | None, end_date: date | None) -> None:
        if start_date is None or end_date is None:
            raise ValidationError("Grant start and end dates are required.", code="GRANT_DATES_REQUIRED")

    def _require_grant(self, grant_id: str) -> Grant:
        grant = self._grant_repo.get(grant_id)
        if grant is None:
            raise NotFoundError("Grant not found.", code="GRANT_NOT_FOUND")
        return grant

    def _check_version(self, grant: Grant, expected_version: int | None) -> None:
        if expected_version is not None and grant.version != expected_version:
            raise ConcurrencyError(
                "Grant changed since you opened it. Refresh and try again.",
                code="STALE_WRITE",
            )


__all__ = ["GrantValidationMixin"]
