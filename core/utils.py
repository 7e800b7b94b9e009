# core/utils.py

import uuid
from datetime import datetime, timezone


def sanitize(data: dict) -> dict:
    """
    Sanitize dictionary data before it is written:
    - Empty strings → None
    - Preserve booleans, None values, numbers, dicts
    - Strip string whitespace
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped if stripped else None
            continue

        clean[k] = v

    return clean


def is_uuid(value) -> bool:
    """True for the hyphenated 8-4-4-4-12 form (any version, any case)."""
    if not isinstance(value, str):
        return False
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        return False
    return str(parsed) == value.lower()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()
