"""Uniform field access over ORM rows, pydantic models and plain dicts."""

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


def field_value(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        value = record.get(name, default)
    else:
        value = getattr(record, name, default)
    return default if value is None else value


def stage_value(record: Any) -> Optional[str]:
    stage = field_value(record, "stage")
    if isinstance(stage, Enum):
        return stage.value
    return stage


def posting_id(record: Any) -> Optional[str]:
    """Job id for job applications, internship id for internship applications."""
    return field_value(record, "job_id") or field_value(record, "internship_id")


def to_timestamp(value: Any) -> Optional[float]:
    """
    Convert a datetime or ISO-8601 string to a POSIX timestamp.

    Naive datetimes are treated as UTC. Returns None for missing or
    unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()
