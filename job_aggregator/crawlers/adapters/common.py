from __future__ import annotations
from datetime import datetime, timezone
from typing import Any


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return " ".join(str(value).split())


def optional_text(value: Any) -> str | None:
    text = clean_text(value)
    return text or None


def matches_query(query: str, *fields: Any) -> bool:
    terms = clean_text(query).lower().split()
    if not terms:
        return True
    blob = " ".join(clean_text(f) for f in fields).lower()
    return all(term in blob for term in terms)


def epoch_to_iso(value: Any) -> str | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    ts = float(value)
    # some feeds publish milliseconds
    if ts > 1e12:
        ts /= 1000.0
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat().replace("+00:00", "Z")
    except (OverflowError, OSError, ValueError):
        return None


def salary_range(low: Any, high: Any) -> str | None:
    parts = [f"{int(v):,}" for v in (low, high) if isinstance(v, (int, float)) and not isinstance(v, bool) and v > 0]
    if not parts:
        return None
    return " - ".join(dict.fromkeys(parts))
