from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def to_json(payload: Any) -> str:
    return json.dumps(payload, default=str, ensure_ascii=False, sort_keys=True)


def _load(raw: str | None) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable JSON column value: %.60r", raw)
        return None


def from_json_dict(raw: str | None) -> dict[str, Any]:
    value = _load(raw)
    return value if isinstance(value, dict) else {}


def from_json_list(raw: str | None) -> list[Any]:
    value = _load(raw)
    return value if isinstance(value, list) else []


__all__ = ["to_json", "from_json_dict", "from_json_list"]
