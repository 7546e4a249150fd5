from __future__ import annotations
import re
from datetime import datetime, timedelta, timezone

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

UNITS = ("second", "minute", "hour", "day", "week", "month", "year")
_UNIT_PATTERN = "|".join(UNITS)
SHORTHAND_UNITS = {"d": "day", "m": "month", "y": "year"}

# Absolute rules, in precedence order. All are searched, not anchored.
AGO_RE = re.compile(rf"(\d+)\+?\s*({_UNIT_PATTERN})s?\s*ago")
SHORTHAND_RE = re.compile(r"(\d+)\s*([dmy])\b")
HEDGED_RE = re.compile(rf"(?:(about|over|almost)\s*)?(\d+)\s*({_UNIT_PATTERN})s?")

# Relative rules are anchored so that only recognisable phrases are re-rendered.
REL_SHORT_DAYS_RE = re.compile(r"(\d+)\s*d")
REL_AGO_RE = re.compile(rf"(?:posted\s+)?(\d+)\+?\s+({_UNIT_PATTERN})s?\s+ago")
REL_HEDGED_RE = re.compile(r"(?:(?:about|over|almost)\s+)?(\d+)\s+(day|week|month|year)s?")

# Only strings with a year, a numeric date or a month name go to the date parser.
# dateutil happily reads "6m" as six minutes past midnight.
_DATE_HINT_RE = re.compile(
    r"\d{4}|\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}|\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\b",
    re.IGNORECASE,
)
_YEAR_RE = re.compile(r"\b\d{4}\b|\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}")
_POSTED_PREFIX_RE = re.compile(r"^posted\s+(?:on\s+)?", re.IGNORECASE)

DAYS_PER_MONTH = 30
MONTHS_PER_YEAR = 12


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_absolute(raw: str | None, reference: datetime | None = None) -> datetime | None:
    text = (raw or "").strip()
    if not text:
        return None
    try:
        return _as_utc(date_parser.isoparse(text))
    except (ValueError, OverflowError):
        pass
    if not _DATE_HINT_RE.search(text):
        return None
    reference = _as_utc(reference or _now())
    default = reference.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
    try:
        parsed = _as_utc(date_parser.parse(_POSTED_PREFIX_RE.sub("", text), default=default))
    except (ValueError, OverflowError):
        return None
    # "Dec 5" seen in January is last December, never a date in the future
    if not _YEAR_RE.search(text) and parsed.date() > reference.date():
        parsed -= relativedelta(years=1)
    return parsed


def shift_back(reference: datetime, amount: int, unit: str) -> datetime:
    if unit == "year":
        return reference - relativedelta(years=amount)
    if unit == "month":
        return reference - relativedelta(months=amount)
    if unit == "week":
        return reference - timedelta(days=7 * amount)
    return reference - timedelta(**{f"{unit}s": amount})


def _match_relative(text: str, reference: datetime) -> datetime | None:
    if text in ("new", "today"):
        return reference
    if text == "yesterday":
        return reference - timedelta(days=1)

    match = AGO_RE.search(text)
    if match:
        return shift_back(reference, int(match.group(1)), match.group(2))

    match = SHORTHAND_RE.search(text)
    if match:
        return shift_back(reference, int(match.group(1)), SHORTHAND_UNITS[match.group(2)])

    match = HEDGED_RE.search(text)
    if match:
        # hedge words are accepted but the number is taken as exact
        return shift_back(reference, int(match.group(2)), match.group(3))

    return None


def parse_posted_date(raw: str | None, reference: datetime | None = None) -> datetime | None:
    if raw is None or not raw.strip():
        return None
    reference = _as_utc(reference or _now())

    absolute = parse_absolute(raw, reference)
    if absolute is not None:
        return absolute

    try:
        return _match_relative(raw.strip().lower(), reference)
    except (OverflowError, ValueError):
        # e.g. "999999 years ago" walks off the calendar
        return None


def to_absolute(raw: str | None, reference: datetime | None = None) -> datetime:
    """Like ``parse_posted_date`` but fails open to the reference instant."""
    reference = _as_utc(reference or _now())
    resolved = parse_posted_date(raw, reference)
    return resolved if resolved is not None else reference


def _render(amount: int, unit: str) -> str:
    if unit in ("second", "minute", "hour"):
        return "today"
    if unit == "week":
        amount, unit = amount * 7, "day"
    if unit == "day":
        if amount <= 0:
            return "today"
        if amount == 1:
            return "yesterday"
        return f"{amount} days ago"
    return f"{amount} {unit}s ago"


def relative_between(instant: datetime, reference: datetime) -> str:
    days = (_as_utc(reference) - _as_utc(instant)) // timedelta(days=1)
    if days <= 0:
        return "today"
    if days == 1:
        return "yesterday"
    if days < DAYS_PER_MONTH:
        return f"{days} days ago"
    months = days // DAYS_PER_MONTH
    if months < MONTHS_PER_YEAR:
        return f"{months} months ago"
    return f"{months // MONTHS_PER_YEAR} years ago"


def to_relative(raw: str | None, reference: datetime | None = None) -> str | None:
    if raw is None or not raw.strip():
        return None
    text = " ".join(raw.strip().lower().split())

    if text in ("new", "today"):
        return "today"
    if text == "yesterday":
        return "yesterday"

    match = REL_SHORT_DAYS_RE.fullmatch(text)
    if match:
        return _render(int(match.group(1)), "day")

    match = REL_AGO_RE.fullmatch(text)
    if match:
        return _render(int(match.group(1)), match.group(2))

    match = REL_HEDGED_RE.fullmatch(text)
    if match:
        return _render(int(match.group(1)), match.group(2))

    reference = _as_utc(reference or _now())
    instant = parse_absolute(raw, reference)
    if instant is not None:
        return relative_between(instant, reference)
    return None


def to_iso(instant: datetime) -> str:
    return _as_utc(instant).isoformat(timespec="milliseconds").replace("+00:00", "Z")
