from __future__ import annotations

import re
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from salesboard.analytics.kpis import approval_month, is_approved_in_range
from salesboard.analytics.roster import ALL_FILTER, RosterIndex, matches_advisor
from salesboard.models.sales import TransactionRecord
from salesboard.schemas.sales import (
    CmpBreakdown,
    CmpStreak,
    ProductLookouts,
    ProductSale,
    RoundupItem,
)
from salesboard.shared.parsing import clean_text, month_key, normalize_name
from salesboard.shared.time import add_months, month_start

MAX_STREAK_MONTHS = 240
# Last month tracked by the previous CMP ledger; roster "Months CMP 2025" bridges it.
CMP_CARRYOVER_MONTH = "2025-12"

_A_PLUS_SIGNATURE = re.compile(r"a\+\s*signature", re.IGNORECASE)
_ASCEND = re.compile(r"\bascend\b", re.IGNORECASE)
_STANDALONE_FIVE = re.compile(r"\b5\b")
_PAY = re.compile(r"pay", re.IGNORECASE)


def is_a_plus_signature(product: str) -> bool:
    return bool(_A_PLUS_SIGNATURE.search(product))


def is_ascend(product: str) -> bool:
    return bool(_ASCEND.search(product))


def is_future_safe_usd_5_pay(product: str) -> bool:
    collapsed = re.sub(r"\s+", "", product).lower()
    return (
        "futuresafe" in collapsed
        and "usd" in collapsed
        and bool(_STANDALONE_FIVE.search(product))
        and bool(_PAY.search(product))
    )


def build_product_sellers(
    rows: Iterable[TransactionRecord],
    start: date,
    end: date,
    roster: RosterIndex,
    unit_filter: Optional[str] = ALL_FILTER,
) -> ProductLookouts:
    a_plus_signature: List[ProductSale] = []
    ascend: List[ProductSale] = []
    future_safe: List[ProductSale] = []
    for row in rows:
        advisor = clean_text(row.advisor)
        if not advisor or not roster.in_unit(advisor, unit_filter):
            continue
        if not is_approved_in_range(row, start, end):
            continue
        product = clean_text(row.product)
        if not product:
            continue
        sale = ProductSale(
            advisor=roster.display_name(advisor),
            product=product,
            fyc=row.fyc,
            policy_number=row.policy_number,
            month_approved=row.month_approved,
        )
        if is_a_plus_signature(product):
            a_plus_signature.append(sale)
        if is_ascend(product):
            ascend.append(sale)
        if is_future_safe_usd_5_pay(product):
            future_safe.append(sale)

    def by_fyc(sales: List[ProductSale]) -> List[ProductSale]:
        return sorted(sales, key=lambda sale: sale.fyc, reverse=True)

    return ProductLookouts(
        a_plus_signature=by_fyc(a_plus_signature),
        ascend=by_fyc(ascend),
        future_safe_usd_5_pay=by_fyc(future_safe),
    )


def build_sales_roundup(
    rows: Iterable[TransactionRecord],
    start: date,
    end: date,
    roster: RosterIndex,
    unit_filter: Optional[str] = ALL_FILTER,
    advisor_filter: Optional[str] = ALL_FILTER,
) -> List[RoundupItem]:
    items: List[RoundupItem] = []
    for row in rows:
        advisor = clean_text(row.advisor)
        if not advisor:
            continue
        if not matches_advisor(advisor, advisor_filter) or not roster.in_unit(advisor, unit_filter):
            continue
        if not is_approved_in_range(row, start, end):
            continue
        product = clean_text(row.product)
        if not product:
            continue
        items.append(
            RoundupItem(
                advisor=roster.display_name(advisor),
                product=product,
                afyc=row.afyc,
                policy_number=row.policy_number,
                month_approved=row.month_approved,
            )
        )
    items.sort(key=lambda item: (-item.afyc, item.advisor.lower()))
    return items


def produced_months_by_advisor(rows: Iterable[TransactionRecord]) -> Dict[str, Set[str]]:
    months: Dict[str, Set[str]] = {}
    for row in rows:
        key = normalize_name(row.advisor)
        if not key:
            continue
        approved_month = approval_month(row)
        if approved_month is None:
            continue
        months.setdefault(key, set()).add(month_key(approved_month))
    return months


def count_streak(produced_months: Set[str], as_of: date, carryover_months: int = 0) -> int:
    """Consecutive producing months walking back from the month of ``as_of``."""
    streak = 0
    cursor = month_start(as_of)
    while month_key(cursor) in produced_months and streak < MAX_STREAK_MONTHS:
        streak += 1
        cursor = add_months(cursor, -1)
    if streak > 0 and month_key(cursor) == CMP_CARRYOVER_MONTH and carryover_months > 0:
        streak += carryover_months
    return streak


def build_consistent_monthly_producers(
    rows: Iterable[TransactionRecord],
    roster: RosterIndex,
    as_of: date,
    unit_filter: Optional[str] = ALL_FILTER,
) -> CmpBreakdown:
    produced = produced_months_by_advisor(rows)
    three_plus: List[CmpStreak] = []
    watch_two: List[CmpStreak] = []
    watch_one: List[CmpStreak] = []

    for entry in roster.entries:
        if not roster.in_unit(entry.advisor, unit_filter):
            continue
        streak = count_streak(
            produced.get(normalize_name(entry.advisor), set()),
            as_of,
            carryover_months=entry.months_cmp_carryover,
        )
        if streak >= 3:
            three_plus.append(CmpStreak(advisor=entry.advisor, streak_months=streak))
        elif streak == 2:
            watch_two.append(CmpStreak(advisor=entry.advisor, streak_months=streak))
        elif streak == 1:
            watch_one.append(CmpStreak(advisor=entry.advisor, streak_months=streak))

    def ranked(streaks: List[CmpStreak]) -> List[CmpStreak]:
        return sorted(streaks, key=lambda item: (-item.streak_months, item.advisor.lower()))

    return CmpBreakdown(
        as_of_month=month_key(as_of),
        three_plus=ranked(three_plus),
        watch_two=ranked(watch_two),
        watch_one=ranked(watch_one),
    )
