from __future__ import annotations

from datetime import date

from salesboard.analytics.lookouts import (
    build_consistent_monthly_producers,
    build_product_sellers,
    build_sales_roundup,
    count_streak,
    is_a_plus_signature,
    is_ascend,
    is_future_safe_usd_5_pay,
    produced_months_by_advisor,
)
from salesboard.analytics.roster import RosterIndex
from salesboard.models.sales import RosterEntry, TransactionRecord

AS_OF = date(2026, 4, 30)


def _approved_in(advisor: str, year: int, month: int) -> TransactionRecord:
    return TransactionRecord(advisor=advisor, fyc=100, date_approved=date(year, month, 15))


def test_produced_months_fall_back_to_exact_date_for_bad_month_text():
    rows = [
        TransactionRecord(advisor="Ana", fyc=100, month_approved="0000-01", date_approved=date(2026, 3, 9)),
        TransactionRecord(advisor="Ben", fyc=100, month_approved="0000-01"),
    ]

    assert produced_months_by_advisor(rows) == {"ana": {"2026-03"}}


def test_product_patterns():
    assert is_a_plus_signature("A+ Signature 10")
    assert is_a_plus_signature("a+signature")
    assert is_ascend("Ascend Plus")
    assert not is_ascend("Ascendant")
    assert is_future_safe_usd_5_pay("FutureSafe USD 5 Pay")
    assert is_future_safe_usd_5_pay("Future Safe (USD) 5-Pay")
    assert not is_future_safe_usd_5_pay("FutureSafe USD 10 Pay")
    assert not is_future_safe_usd_5_pay("FutureSafe PHP 5 Pay")


def test_three_consecutive_months_land_in_three_plus():
    roster = RosterIndex([RosterEntry(advisor="Ana")])
    rows = [
        _approved_in("Ana", 2026, 4),
        _approved_in("Ana", 2026, 3),
        _approved_in("Ana", 2026, 2),
        _approved_in("Ana", 2025, 12),
    ]

    breakdown = build_consistent_monthly_producers(rows, roster, AS_OF)

    assert [(item.advisor, item.streak_months) for item in breakdown.three_plus] == [("Ana", 3)]
    assert breakdown.watch_two == []
    assert breakdown.watch_one == []
    assert breakdown.as_of_month == "2026-04"


def test_streak_buckets_and_ordering():
    roster = RosterIndex([RosterEntry(advisor=name) for name in ("Zed", "amy", "Bo", "Cal")])
    rows = [
        _approved_in("Zed", 2026, 4),
        _approved_in("Zed", 2026, 3),
        _approved_in("amy", 2026, 4),
        _approved_in("amy", 2026, 3),
        _approved_in("Bo", 2026, 4),
        _approved_in("Cal", 2026, 3),
    ]

    breakdown = build_consistent_monthly_producers(rows, roster, AS_OF)

    assert [item.advisor for item in breakdown.watch_two] == ["amy", "Zed"]
    assert [item.advisor for item in breakdown.watch_one] == ["Bo"]
    assert breakdown.three_plus == []


def test_month_text_wins_over_exact_date_for_streaks():
    roster = RosterIndex([RosterEntry(advisor="Ana")])
    rows = [
        TransactionRecord(advisor="Ana", date_approved=date(2026, 5, 2), month_approved="April 2026"),
        TransactionRecord(advisor="Ana", month_approved="2026-03"),
    ]

    breakdown = build_consistent_monthly_producers(rows, roster, AS_OF)

    assert [(item.advisor, item.streak_months) for item in breakdown.watch_two] == [("Ana", 2)]


def test_carryover_bridges_december_2025():
    roster = RosterIndex(
        [
            RosterEntry(advisor="Ana", months_cmp_carryover=5),
            RosterEntry(advisor="Ben", months_cmp_carryover=5),
        ]
    )
    rows = [
        _approved_in("Ana", 2026, 2),
        _approved_in("Ana", 2026, 1),
        _approved_in("Ben", 2026, 2),
    ]

    breakdown = build_consistent_monthly_producers(rows, roster, date(2026, 2, 28))

    assert [(item.advisor, item.streak_months) for item in breakdown.three_plus] == [("Ana", 7)]
    assert [(item.advisor, item.streak_months) for item in breakdown.watch_one] == [("Ben", 1)]


def test_carryover_needs_a_live_streak():
    assert count_streak(set(), date(2026, 1, 31), carryover_months=4) == 0
    assert count_streak({"2026-01"}, date(2026, 1, 31), carryover_months=4) == 5
    assert count_streak({"2026-01", "2025-12"}, date(2026, 1, 31), carryover_months=4) == 2


def test_product_sellers_and_roundup():
    roster = RosterIndex([RosterEntry(advisor="Ana Cruz", unit="Alpha"), RosterEntry(advisor="Ben", unit="Beta")])
    rows = [
        TransactionRecord(advisor="ana cruz", product="Ascend", fyc=100, afyc=90, date_approved=date(2026, 4, 3)),
        TransactionRecord(advisor="Ben", product="Ascend", fyc=300, afyc=250, date_approved=date(2026, 4, 4)),
        TransactionRecord(advisor="Ben", product="A+ Signature", fyc=50, afyc=90, date_approved=date(2026, 4, 5)),
        TransactionRecord(advisor="Ben", product="", fyc=999, afyc=999, date_approved=date(2026, 4, 6)),
        TransactionRecord(advisor="Ben", product="Ascend", fyc=500, afyc=500, date_approved=date(2026, 3, 6)),
    ]
    start, end = date(2026, 4, 1), AS_OF

    sellers = build_product_sellers(rows, start, end, roster)
    assert [(sale.advisor, sale.fyc) for sale in sellers.ascend] == [("Ben", 300), ("Ana Cruz", 100)]
    assert [sale.advisor for sale in sellers.a_plus_signature] == ["Ben"]
    assert sellers.future_safe_usd_5_pay == []

    roundup = build_sales_roundup(rows, start, end, roster)
    assert [(item.advisor, item.afyc) for item in roundup] == [
        ("Ben", 250),
        ("Ana Cruz", 90),
        ("Ben", 90),
    ]
    alpha_only = build_sales_roundup(rows, start, end, roster, unit_filter="Alpha")
    assert [item.advisor for item in alpha_only] == ["Ana Cruz"]
    ben_only = build_sales_roundup(rows, start, end, roster, advisor_filter="BEN")
    assert len(ben_only) == 2
