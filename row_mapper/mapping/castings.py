"""ISO-8601 date casters.

Each caster has the ``(value, cast)`` signature expected by
``EntityBuilder.convert``. Lists are converted item by item and values
that cannot be converted are returned unchanged.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from row_mapper.core.enums import Cast


def _parse(value: Any) -> dt.datetime | None:
    if isinstance(value, dt.datetime):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return dt.datetime.fromisoformat(text)
    except ValueError:
        return None


def to_datetime(value: Any, cast: Cast) -> Any:
    """ISO string to ``datetime``."""
    if isinstance(value, list):
        return [to_datetime(item, cast) for item in value]
    parsed = _parse(value)
    return value if parsed is None else parsed


def to_timestamp(value: Any, cast: Cast) -> Any:
    """``datetime`` or ISO string to integer epoch seconds.

    Naive datetimes are taken as UTC.
    """
    if isinstance(value, list):
        return [to_timestamp(item, cast) for item in value]
    parsed = _parse(value)
    if parsed is None:
        return value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return int(parsed.timestamp())


def to_iso_string(value: Any, cast: Cast) -> Any:
    """``datetime`` to an ISO string carrying its UTC offset.

    Naive datetimes are taken as UTC.
    """
    if isinstance(value, list):
        return [to_iso_string(item, cast) for item in value]
    if not isinstance(value, dt.datetime):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.isoformat(timespec="seconds")


def iso_datetime(value: Any, cast: Cast) -> Any:
    """Parse ISO strings on input and output, format them on normalize."""
    if cast is Cast.NORMALIZE:
        return to_iso_string(value, cast)
    return to_datetime(value, cast)
