"""Shared service-layer helper functions."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime


def now_utc() -> datetime:
    """Current UTC time (timezone-aware) for created_at/updated_at."""
    return datetime.now(UTC)


def new_record_id() -> str:
    """Fresh opaque id for an element or link."""
    return str(uuid.uuid4())


def paginate[T](items: list[T], limit: int, offset: int) -> list[T]:
    """Slice ``items[offset:offset + limit]``, clamping negatives to zero.

    Examples:
        >>> paginate([1, 2, 3, 4], 2, 1)
        [2, 3]
        >>> paginate([1, 2], 10, 5)
        []
    """
    offset = max(offset, 0)
    limit = max(limit, 0)
    return items[offset : offset + limit]
