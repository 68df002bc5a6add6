from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from salesboard.analytics.kpis import approval_date, case_credit, is_approved_in_range
from salesboard.analytics.roster import ALL_FILTER, RosterIndex
from salesboard.models.sales import DprRow, RosterEntry, Tenure, TransactionRecord
from salesboard.schemas.incentives import PpbTracker, PpbTrackerRow, TenureBand
from salesboard.shared.parsing import clean_text, month_key, normalize_name
from salesboard.shared.time import add_months, month_start, months_between, quarter_start

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# (minimum quarter-to-date FYC, production bonus rate)
FYC_RATE_TIERS: Tuple[Tuple[float, float], ...] = (
    (20_000, 0.10),
    (30_000, 0.10),
    (50_000, 0.15),
    (80_000, 0.20),
    (120_000, 0.30),
    (200_000, 0.35),
    (350_000, 0.40),
)
# (minimum non-Guardian cases, case count bonus rate)
CCB_RATE_TIERS: Tuple[Tuple[float, float], ...] = (
    (3, 0.05),
    (5, 0.10),
    (7, 0.15),
    (9, 0.20),
)
FIRST_TWO_YEARS_MIN_FYC = 20_000
TENURED_MIN_FYC = 30_000
FIRST_TWO_YEARS_MONTHS = 24
CCB_MIN_CASES = 3
CCB_MIN_ACTIVE_MONTHS = 2
# Assumes 82.5%+ persistency until actual persistency feeds the projection.
PERSISTENCY_MULTIPLIER = 1.0

_GUARDIAN = re.compile(r"guardian", re.IGNORECASE)


@dataclass
class QuarterWindow:
    start: date
    end: date
    months: List[date]

    @property
    def label(self) -> str:
        return f"Q{(self.start.month - 1) // 3 + 1} {self.start.year}"

    def month_index(self, value: date) -> int:
        index = (value.year - self.start.year) * 12 + (value.month - self.start.month)
        return min(max(index, 0), 2)


@dataclass
class _AdvisorAccumulator:
    advisor: str
    fyc: float = 0.0
    cases: float = 0.0
    month_cases: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])


@dataclass
class _CaseCredit:
    month_index: int
    credit: float


def quarter_window(range_end: date) -> QuarterWindow:
    start = quarter_start(range_end)
    return QuarterWindow(
        start=start,
        end=range_end,
        months=[add_months(start, offset) for offset in range(3)],
    )


def is_guardian_product(product: Optional[str]) -> bool:
    return bool(_GUARDIAN.search(product or ""))


def resolve_tenure(entry: Optional[RosterEntry], as_of: date) -> TenureBand:
    """Roster label first, then PA date age at quarter start, else first two years."""
    if entry is not None:
        if entry.tenure == Tenure.TENURED:
            return TenureBand.TENURED
        if entry.tenure == Tenure.ROOKIE:
            return TenureBand.FIRST_TWO_YEARS
        if entry.pa_date is not None:
            if months_between(entry.pa_date, as_of) < FIRST_TWO_YEARS_MONTHS:
                return TenureBand.FIRST_TWO_YEARS
            return TenureBand.TENURED
    return TenureBand.FIRST_TWO_YEARS


def minimum_qualifying_fyc(tenure: TenureBand) -> float:
    if tenure == TenureBand.TENURED:
        return TENURED_MIN_FYC
    return FIRST_TWO_YEARS_MIN_FYC


def ppb_rate_for(fyc: float, tenure: TenureBand) -> float:
    if fyc < minimum_qualifying_fyc(tenure):
        return 0.0
    rate = 0.0
    for threshold, tier_rate in FYC_RATE_TIERS:
        if fyc >= threshold:
            rate = tier_rate
    return rate


def next_ppb_tier(fyc: float, tenure: TenureBand) -> Optional[Tuple[float, float]]:
    """FYC still needed and the rate it unlocks; tiers sharing the current rate are skipped."""
    current_rate = ppb_rate_for(fyc, tenure)
    floor = minimum_qualifying_fyc(tenure)
    for threshold, tier_rate in FYC_RATE_TIERS:
        if threshold < floor:
            continue
        if threshold > fyc and tier_rate > current_rate:
            return threshold - fyc, tier_rate
    return None


def ccb_rate_for(cases: float) -> float:
    rate = 0.0
    for threshold, tier_rate in CCB_RATE_TIERS:
        if cases >= threshold:
            rate = tier_rate
    return rate


def next_ccb_tier(cases: float, current_rate: float) -> Optional[Tuple[float, float]]:
    for threshold, tier_rate in CCB_RATE_TIERS:
        if threshold > cases and tier_rate > current_rate:
            return threshold - cases, tier_rate
    return None


def required_active_months(entry: Optional[RosterEntry], window: QuarterWindow) -> int:
    # Advisors licensed in the quarter's last month only need that month.
    if entry is not None and entry.pa_date is not None and month_start(entry.pa_date) == window.months[2]:
        return 1
    return CCB_MIN_ACTIVE_MONTHS


def is_ccb_eligible(
    ppb_rate: float, cases: float, active_months: int, entry: Optional[RosterEntry], window: QuarterWindow
) -> bool:
    if ppb_rate <= 0 or cases < CCB_MIN_CASES:
        return False
    return active_months >= required_active_months(entry, window)


def _accumulate_transactions(
    rows: Iterable[TransactionRecord],
    roster: RosterIndex,
    window: QuarterWindow,
    unit_filter: Optional[str],
) -> Dict[str, _AdvisorAccumulator]:
    advisors: Dict[str, _AdvisorAccumulator] = {}
    seen_cases: Dict[Tuple[str, str, str, str], _CaseCredit] = {}

    for row in rows:
        advisor = clean_text(row.advisor)
        if not advisor or not roster.in_unit(advisor, unit_filter):
            continue
        if not is_approved_in_range(row, window.start, window.end):
            continue
        key = normalize_name(advisor)
        bucket = advisors.setdefault(key, _AdvisorAccumulator(advisor=roster.display_name(advisor)))
        bucket.fyc += row.fyc

        # Guardian FYC counts, Guardian cases do not.
        if is_guardian_product(row.product):
            continue
        approved_on = approval_date(row)
        if approved_on is None:
            continue
        month_index = window.month_index(approved_on)
        dedup_key = (
            key,
            normalize_name(row.policy_owner),
            normalize_name(row.product),
            normalize_name(row.mode),
        )
        previous = seen_cases.get(dedup_key)
        if previous is None:
            credit = case_credit(row)
            seen_cases[dedup_key] = _CaseCredit(month_index=month_index, credit=credit)
            bucket.month_cases[month_index] += credit
            bucket.cases += credit
        elif month_index < previous.month_index:
            # Rows are not chronological; the earliest month keeps the credit.
            bucket.month_cases[previous.month_index] -= previous.credit
            bucket.month_cases[month_index] += previous.credit
            previous.month_index = month_index
    return advisors


def _dpr_fyc_by_advisor(
    dpr_rows: Iterable[DprRow],
    roster: RosterIndex,
    window: QuarterWindow,
    unit_filter: Optional[str],
) -> Dict[str, Tuple[str, float]]:
    last_month = month_start(window.end)
    month_keys = {month_key(month) for month in window.months if month <= last_month}
    totals: Dict[str, Tuple[str, float]] = {}
    for dpr in dpr_rows:
        advisor = clean_text(dpr.advisor)
        if not advisor or dpr.month not in month_keys:
            continue
        if not roster.in_unit(advisor, unit_filter):
            continue
        key = normalize_name(advisor)
        name, fyc = totals.get(key, (roster.display_name(advisor), 0.0))
        totals[key] = (name, fyc + dpr.fyc)
    return totals


def build_ppb_tracker(
    rows: Iterable[TransactionRecord],
    roster: RosterIndex,
    dpr_rows: Iterable[DprRow],
    range_end: date,
    unit_filter: Optional[str] = ALL_FILTER,
) -> PpbTracker:
    window = quarter_window(range_end)
    transactional = _accumulate_transactions(rows, roster, window, unit_filter)
    dpr_totals = _dpr_fyc_by_advisor(dpr_rows, roster, window, unit_filter)

    keys = list(transactional.keys())
    keys.extend(key for key in dpr_totals if key not in transactional)

    tracker_rows: List[PpbTrackerRow] = []
    for key in keys:
        bucket = transactional.get(key)
        dpr_entry = dpr_totals.get(key)
        if bucket is None:
            bucket = _AdvisorAccumulator(advisor=dpr_entry[0] if dpr_entry else key)
        dpr_fyc = dpr_entry[1] if dpr_entry else None
        # DPR lags live approvals, so never let it pull the figure down.
        fyc = max(bucket.fyc, dpr_fyc) if dpr_fyc is not None else bucket.fyc
        if fyc == 0 and bucket.cases == 0:
            continue

        entry = roster.get(bucket.advisor)
        tenure = resolve_tenure(entry, window.start)
        ppb_rate = ppb_rate_for(fyc, tenure)
        active_months = sum(1 for month_cases in bucket.month_cases if month_cases > 0)
        ccb_rate: Optional[float] = None
        if is_ccb_eligible(ppb_rate, bucket.cases, active_months, entry, window):
            ccb_rate = ccb_rate_for(bucket.cases)
        total_bonus_rate = ppb_rate + (ccb_rate or 0.0)
        next_ppb = next_ppb_tier(fyc, tenure)
        next_ccb = next_ccb_tier(bucket.cases, ccb_rate or 0.0)

        tracker_rows.append(
            PpbTrackerRow(
                advisor=bucket.advisor,
                unit=roster.unit_of(bucket.advisor),
                spa_leg=roster.spa_leg_of(bucket.advisor),
                tenure=tenure,
                fyc=fyc,
                transactional_fyc=bucket.fyc,
                dpr_fyc=dpr_fyc,
                cases=bucket.cases,
                m1_cases=bucket.month_cases[0],
                m2_cases=bucket.month_cases[1],
                m3_cases=bucket.month_cases[2],
                active_months=active_months,
                ppb_rate=ppb_rate,
                ccb_rate=ccb_rate,
                total_bonus_rate=total_bonus_rate,
                persistency_multiplier=PERSISTENCY_MULTIPLIER,
                projected_bonus=total_bonus_rate * PERSISTENCY_MULTIPLIER * fyc,
                fyc_to_next_bonus_tier=next_ppb[0] if next_ppb else None,
                next_ppb_rate=next_ppb[1] if next_ppb else None,
                cases_to_next_ccb_tier=next_ccb[0] if next_ccb else None,
                next_ccb_rate=next_ccb[1] if next_ccb else None,
            )
        )

    tracker_rows.sort(key=lambda row: (-row.fyc, row.advisor.lower()))
    return PpbTracker(
        quarter=window.label,
        quarter_start=window.start,
        quarter_to_date_end=window.end,
        months=[MONTH_LABELS[month.month - 1] for month in window.months],
        rows=tracker_rows,
    )
