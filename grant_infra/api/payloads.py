from __future__ import annotations

import logging
import math
from dataclasses import fields, is_dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Mapping

from grant_core.exceptions import (
    BusinessRuleError,
    ConcurrencyError,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# most specific first; InvalidGrantError is a ValidationError
_STATUS_CODES: tuple[tuple[type[Exception], int], ...] = (
    (NotFoundError, 404),
    (ValidationError, 422),
    (ConcurrencyError, 409),
    (BusinessRuleError, 409),
)


def to_camel_case(snake_str: str) -> str:
    components = snake_str.split("_")
    return components[0].lower() + "".join(x.title() for x in components[1:])


def to_jsonable(obj: Any) -> Any:
    """
    Convert result objects into JSON-safe structures.

    Dataclass field names become camelCase. Mapping keys are data (KPI names,
    categories, period keys) and are kept as given. Non-finite floats become None.
    """
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if is_dataclass(obj) and not isinstance(obj, type):
        return {to_camel_case(f.name): to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Mapping):
        return {str(to_jsonable(key)): to_jsonable(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(item) for item in obj]
    return str(obj)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def status_code_for(exc: BaseException) -> int:
    for error_type, status in _STATUS_CODES:
        if isinstance(exc, error_type):
            return status
    return 500


def success_payload(data: Any, **extra: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "success": True,
        "data": to_jsonable(data),
        "timestamp": _timestamp(),
    }
    for key, value in extra.items():
        payload[to_camel_case(key)] = to_jsonable(value)
    return payload


def error_payload(exc: BaseException) -> dict[str, Any]:
    if isinstance(exc, DomainError):
        message, code = str(exc), exc.code
    else:
        # internals stay in the log, not in the response
        logger.error("Unhandled error mapped to 500: %s", exc, exc_info=exc)
        message, code = "Internal server error.", "INTERNAL_ERROR"
    return {
        "success": False,
        "error": message,
        "code": code,
        "timestamp": _timestamp(),
    }


__all__ = ["success_payload", "error_payload", "status_code_for", "to_jsonable", "to_camel_case"]
