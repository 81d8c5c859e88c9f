
from __future__ import annotations

from uuid import uuid4


def generate_id() -> str:
    return str(uuid4())


__all__ = ["generate_id"]
