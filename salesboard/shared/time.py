from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from salesboard.core.errors import InvalidRangeError

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class RangePreset(str, Enum):
    MTD = "MTD"
    QTD = "QTD"
    YTD = "YTD"
    PREV_MONTH = "PREV_MONTH"
    CUSTOM = "CUSTOM"


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date


def today_in_timezone(timezone_name: str) -> date:
    try:
        zone = ZoneInfo(timezone_name)
    except ZoneInfoNotFoundError:
        zone = ZoneInfo("UTC")
    return datetime.now(zone).date()


def parse_iso_day(value: Optional[str]) -> date:
    text = (value or "").strip()
    if not _ISO_DAY.match(text):
        raise InvalidRangeError(f"Expected a YYYY-MM-DD date, got {value!r}")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise InvalidRangeError(f"{text} is not a valid calendar date") from exc


def resolve_range(
    preset: RangePreset,
    today: date,
    custom_start: Optional[str] = None,
    custom_end: Optional[str] = None,
) -> DateRange:
    if preset == RangePreset.MTD:
        return DateRange(start=today.replace(day=1), end=today)
    if preset == RangePreset.QTD:
        return DateRange(start=quarter_start(today), end=today)
    if preset == RangePreset.YTD:
        return DateRange(start=date(today.year, 1, 1), end=today)
    if preset == RangePreset.PREV_MONTH:
        previous = add_months(month_start(today), -1)
        return DateRange(start=previous, end=month_end(previous))
    if preset == RangePreset.CUSTOM:
        start = parse_iso_day(custom_start)
        end = parse_iso_day(custom_end)
        if start > end:
            raise InvalidRangeError(
                "Range start must not be after range end",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )
        return DateRange(start=start, end=end)
    raise InvalidRangeError(f"Unsupported range preset {preset!r}")


def month_start(value: date) -> date:
    return date(value.year, value.month, 1)


def month_end(value: date) -> date:
    return date(value.year, value.month, calendar.monthrange(value.year, value.month)[1])


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, 1)


def quarter_start(value: date) -> date:
    return date(value.year, ((value.month - 1) // 3) * 3 + 1, 1)


def months_between(earlier: date, later: date) -> int:
    """Whole calendar months elapsed from ``earlier`` to ``later``."""
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if later.day < earlier.day:
        months -= 1
    return months
