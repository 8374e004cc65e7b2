from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable


def to_plain(value: Any) -> Any:
    """Convert dataclasses/enums/dates/decimals into JSON-safe primitives."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain(v) for v in value]
    return value


def to_dict(obj: Any, *, exclude: Iterable[str] = ()) -> dict:
    data = to_plain(obj)
    for key in exclude:
        data.pop(key, None)
    return data


def snapshot(obj: Any, *fields: str) -> dict:
    """Audit snapshot: the whole record, or only the named fields."""

    data = to_plain(obj)
    if fields:
        return {name: data.get(name) for name in fields}
    return data
