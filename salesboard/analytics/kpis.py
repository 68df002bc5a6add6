from __future__ import annotations

from datetime import date
from typing import Optional

from salesboard.models.sales import TransactionRecord
from salesboard.schemas.sales import MoneyKpis
from salesboard.shared.parsing import clean_text, month_approved_to_date
from salesboard.shared.time import month_start

KPI_FIELDS = ("anp", "fyp", "fyc", "afyc", "mdrt_fyp", "case_count", "face_amount")


def empty_kpis() -> MoneyKpis:
    return MoneyKpis()


def add_row_to_kpis(kpis: MoneyKpis, row: TransactionRecord) -> MoneyKpis:
    """Fold one record into ``kpis`` in place and return the same object."""
    for field in KPI_FIELDS:
        setattr(kpis, field, getattr(kpis, field) + (getattr(row, field) or 0.0))
    return kpis


def combine_kpis(left: MoneyKpis, right: MoneyKpis) -> MoneyKpis:
    combined = empty_kpis()
    for field in KPI_FIELDS:
        setattr(combined, field, getattr(left, field) + getattr(right, field))
    return combined


def in_range(value: Optional[date], start: date, end: date) -> bool:
    if value is None:
        return False
    return start <= value <= end


def has_approval_proof(row: TransactionRecord) -> bool:
    return row.date_approved is not None or bool(clean_text(row.month_approved))


def is_approved_in_range(row: TransactionRecord, start: date, end: date) -> bool:
    if in_range(row.date_approved, start, end):
        return True
    if row.date_approved is None and row.month_approved:
        approved_month = month_approved_to_date(row.month_approved)
        if approved_month is None:
            return False
        # Month text only resolves to a month, so compare at month granularity.
        return month_start(start) <= approved_month <= month_start(end)
    return False


def approval_date(row: TransactionRecord) -> Optional[date]:
    """Exact approved date, else the first day of the month-approved text."""
    if row.date_approved is not None:
        return row.date_approved
    return month_approved_to_date(row.month_approved)


def approval_month(row: TransactionRecord) -> Optional[date]:
    """Approved month, preferring the month-approved text over the exact date."""
    approved_month = month_approved_to_date(row.month_approved)
    if approved_month is not None:
        return approved_month
    if row.date_approved is not None:
        return month_start(row.date_approved)
    return None


def case_credit(row: TransactionRecord) -> float:
    return row.case_count if row.case_count and row.case_count > 0 else 1.0
