from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Optional

from salesboard.models.sales import SpaLeg, Tenure

MONTH_NAMES = [
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
]
MONTH_ABBREVIATIONS = [name[:3] for name in MONTH_NAMES]

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_WHITESPACE = re.compile(r"\s+")
_NUMERIC_MONTH = re.compile(r"^(\d{4})[/-](\d{1,2})(?:[/-](\d{1,2}))?$")
_FALLBACK_DATE_FORMATS = (
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%d-%b-%Y",
    "%d-%b-%y",
)


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value)).strip()


def optional_text(value: Any) -> Optional[str]:
    text = clean_text(value)
    return text or None


def normalize_name(name: Any) -> str:
    """Matching key for advisor, owner and product names."""
    return clean_text(name).lower()


def currency_to_number(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if math.isfinite(value) else 0.0
    text = str(value).strip()
    if not text:
        return 0.0
    cleaned = _NON_NUMERIC.sub("", text)
    if not cleaned:
        return 0.0
    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_date(value: Any) -> Optional[date]:
    """Parse m/d/yyyy, yyyy-m-d and a few textual forms; anything else is None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None

    parts = [part.strip() for part in re.split(r"[/-]", text)]
    if len(parts) == 3 and len(parts[2]) >= 2 and all(part.isdigit() for part in parts):
        is_ymd = len(parts[0]) == 4
        month = int(parts[1] if is_ymd else parts[0])
        day = int(parts[2] if is_ymd else parts[1])
        year_raw = parts[0] if is_ymd else parts[2]
        year = int(f"20{year_raw}" if len(year_raw) == 2 else year_raw)
        if year > 1900:
            try:
                return date(year, month, day)
            except ValueError:
                return None
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def month_approved_to_date(month_approved: Optional[str]) -> Optional[date]:
    """First day of the month named by free text such as "2026-01" or "Jan 2026"."""
    raw = clean_text(month_approved)
    if not raw:
        return None

    numeric = _NUMERIC_MONTH.match(raw)
    if numeric:
        year = int(numeric.group(1))
        month = int(numeric.group(2))
        try:
            return date(year, month, 1)
        except ValueError:
            return None

    parts = raw.split(" ")
    if len(parts) < 2:
        return None
    month_token = parts[0].lower().rstrip(".,")
    year_token = parts[1].strip(",")
    if not year_token.isdigit():
        return None
    year = int(year_token)

    if month_token in MONTH_NAMES:
        month_index = MONTH_NAMES.index(month_token)
    elif month_token[:3] in MONTH_ABBREVIATIONS:
        month_index = MONTH_ABBREVIATIONS.index(month_token[:3])
    else:
        return None
    try:
        return date(year, month_index + 1, 1)
    except ValueError:
        return None


def parse_spa_leg(value: Any) -> SpaLeg:
    text = normalize_name(value)
    if not text:
        return SpaLeg.UNKNOWN
    if text.startswith("spa") or "spartan" in text:
        return SpaLeg.SPARTAN
    if text.startswith("leg") or "legacy" in text:
        return SpaLeg.LEGACY
    return SpaLeg.UNKNOWN


def parse_tenure(value: Any) -> Tenure:
    text = normalize_name(value)
    if not text:
        return Tenure.UNKNOWN
    if "tenured" in text:
        return Tenure.TENURED
    if text.startswith("rook") or "first two" in text or "first 2" in text:
        return Tenure.ROOKIE
    return Tenure.UNKNOWN


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"
