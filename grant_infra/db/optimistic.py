from __future__ import annotations

from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session

from grant_core.exceptions import ConcurrencyError, NotFoundError


def update_with_version_check(
    session: Session,
    orm_type: type[Any],
    row_id: str,
    expected_version: int,
    values: dict[str, Any],
    *,
    new_version: int | None = None,
    not_found_message: str,
    not_found_code: str = "NOT_FOUND",
    stale_message: str,
) -> int:
    """
    Compare-and-set write keyed on ``version``.

    The row is written only while it still holds ``expected_version``; the
    stored version becomes ``new_version`` (default ``expected_version + 1``).
    """
    next_version = int(new_version) if new_version is not None else int(expected_version) + 1
    if next_version <= int(expected_version):
        raise ConcurrencyError("Version must move forward on every write.", code="VERSION_NOT_ADVANCED")
    stmt = (
        update(orm_type)
        .where(orm_type.id == row_id, orm_type.version == expected_version)
        .values(**values, version=next_version)
    )
    result = session.execute(stmt)
    if result.rowcount == 1:
        return next_version

    if session.get(orm_type, row_id) is None:
        raise NotFoundError(not_found_message, code=not_found_code)
    raise ConcurrencyError(stale_message, code="STALE_WRITE")


__all__ = ["update_with_version_check"]
