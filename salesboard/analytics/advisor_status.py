from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional

from salesboard.analytics.kpis import (
    KPI_FIELDS,
    add_row_to_kpis,
    approval_date,
    empty_kpis,
    has_approval_proof,
    in_range,
    is_approved_in_range,
)
from salesboard.analytics.roster import (
    ALL_FILTER,
    RosterIndex,
    matches_advisor,
    resolve_unit,
)
from salesboard.models.sales import TransactionRecord
from salesboard.schemas.sales import (
    AdvisorDetail,
    AdvisorLeaderboardEntry,
    AdvisorStatus,
    AdvisorStatusBreakdown,
    DashboardOptions,
    Leaderboards,
    ProductMixItem,
    TeamKpis,
    TrendPoint,
    UnitLeaderboardEntry,
)
from salesboard.shared.parsing import clean_text, normalize_name

LEADERBOARD_SIZE = 10
PRODUCT_MIX_SIZE = 10


def is_producing(status: AdvisorStatus) -> bool:
    approved = status.approved
    return approved.case_count > 0 or approved.fyc > 0 or approved.fyp > 0


def is_pending(status: AdvisorStatus) -> bool:
    pending = status.open
    return pending.case_count > 0 or pending.fyc > 0 or pending.fyp > 0


def _alphabetical(name: str) -> tuple[str, str]:
    return name.lower(), name


def _new_status(advisor: str, unit: Optional[str]) -> AdvisorStatus:
    return AdvisorStatus(advisor=advisor, unit=unit)


def build_advisor_statuses(
    rows: Iterable[TransactionRecord],
    roster: RosterIndex,
    start: date,
    end: date,
    unit_filter: Optional[str] = ALL_FILTER,
) -> AdvisorStatusBreakdown:
    statuses: Dict[str, AdvisorStatus] = {}
    for entry in roster.entries:
        if not roster.in_unit(entry.advisor, unit_filter):
            continue
        statuses[normalize_name(entry.advisor)] = _new_status(entry.advisor, entry.unit)

    for row in rows:
        advisor = clean_text(row.advisor)
        if not advisor:
            continue
        if not roster.in_unit(advisor, unit_filter):
            continue
        key = normalize_name(advisor)
        status = statuses.get(key)
        if status is None:
            # Advisors missing from the roster still keep their history.
            entry = roster.get(advisor)
            status = _new_status(advisor, entry.unit if entry else None)
            statuses[key] = status

        if is_approved_in_range(row, start, end):
            add_row_to_kpis(status.approved, row)
        if in_range(row.date_submitted, start, end):
            add_row_to_kpis(status.submitted, row)
        if in_range(row.date_paid, start, end):
            add_row_to_kpis(status.paid, row)
        # A case only becomes pending once the client has paid it.
        if not has_approval_proof(row) and in_range(row.date_paid, start, end):
            add_row_to_kpis(status.open, row)

    advisors = list(statuses.values())
    producing: List[AdvisorStatus] = []
    pending: List[AdvisorStatus] = []
    non_producing: List[AdvisorStatus] = []
    for status in advisors:
        producing_now = is_producing(status)
        pending_now = is_pending(status)
        if producing_now:
            producing.append(status)
        if pending_now:
            pending.append(
                status.model_copy(update={"advisor": f"({status.advisor})"}) if producing_now else status
            )
        if not producing_now and not pending_now:
            non_producing.append(status)

    producing.sort(key=lambda status: status.approved.fyc, reverse=True)
    pending.sort(key=lambda status: status.open.fyc, reverse=True)
    non_producing.sort(key=lambda status: _alphabetical(status.advisor))
    return AdvisorStatusBreakdown(
        advisors=advisors,
        producing=producing,
        pending=pending,
        non_producing=non_producing,
    )


def aggregate_team(statuses: Iterable[AdvisorStatus]) -> TeamKpis:
    approved = empty_kpis()
    submitted = empty_kpis()
    paid = empty_kpis()
    for status in statuses:
        for field in KPI_FIELDS:
            setattr(approved, field, getattr(approved, field) + getattr(status.approved, field))
            setattr(submitted, field, getattr(submitted, field) + getattr(status.submitted, field))
            setattr(paid, field, getattr(paid, field) + getattr(status.paid, field))
    return TeamKpis(approved=approved, submitted=submitted, paid=paid)


def build_leaderboards(statuses: List[AdvisorStatus]) -> Leaderboards:
    advisors_by_fyc = sorted(
        (AdvisorLeaderboardEntry(advisor=s.advisor, value=s.approved.fyc) for s in statuses),
        key=lambda entry: entry.value,
        reverse=True,
    )[:LEADERBOARD_SIZE]
    advisors_by_fyp = sorted(
        (AdvisorLeaderboardEntry(advisor=s.advisor, value=s.approved.fyp) for s in statuses),
        key=lambda entry: entry.value,
        reverse=True,
    )[:LEADERBOARD_SIZE]

    unit_fyc: Dict[str, float] = defaultdict(float)
    unit_fyp: Dict[str, float] = defaultdict(float)
    for status in statuses:
        unit = resolve_unit(status.unit)
        unit_fyc[unit] += status.approved.fyc
        unit_fyp[unit] += status.approved.fyp

    units_by_fyc = sorted(
        (UnitLeaderboardEntry(unit=unit, value=value) for unit, value in unit_fyc.items()),
        key=lambda entry: entry.value,
        reverse=True,
    )[:LEADERBOARD_SIZE]
    units_by_fyp = sorted(
        (UnitLeaderboardEntry(unit=unit, value=value) for unit, value in unit_fyp.items()),
        key=lambda entry: entry.value,
        reverse=True,
    )[:LEADERBOARD_SIZE]
    return Leaderboards(
        advisors_by_fyc=advisors_by_fyc,
        advisors_by_fyp=advisors_by_fyp,
        units_by_fyc=units_by_fyc,
        units_by_fyp=units_by_fyp,
    )


def build_approved_trends_by_day(
    rows: Iterable[TransactionRecord],
    start: date,
    end: date,
    roster: RosterIndex,
    unit_filter: Optional[str] = ALL_FILTER,
    advisor_filter: Optional[str] = ALL_FILTER,
) -> List[TrendPoint]:
    buckets: Dict[str, Dict[str, float]] = defaultdict(lambda: {"fyc": 0.0, "fyp": 0.0, "cases": 0.0})
    for row in rows:
        if not roster.in_unit(row.advisor, unit_filter):
            continue
        if not matches_advisor(row.advisor, advisor_filter):
            continue
        if not is_approved_in_range(row, start, end):
            continue
        approved_on = approval_date(row)
        if approved_on is None:
            continue
        bucket = buckets[approved_on.isoformat()]
        bucket["fyc"] += row.fyc
        bucket["fyp"] += row.fyp
        bucket["cases"] += row.case_count

    return [
        TrendPoint(date=day, fyc=values["fyc"], fyp=values["fyp"], cases=values["cases"])
        for day, values in sorted(buckets.items())
    ]


def build_advisor_detail(
    rows: List[TransactionRecord],
    advisor: str,
    start: date,
    end: date,
    roster: RosterIndex,
    unit_filter: Optional[str] = ALL_FILTER,
) -> AdvisorDetail:
    approved = empty_kpis()
    submitted = empty_kpis()
    paid = empty_kpis()
    products: Dict[str, Dict[str, float]] = defaultdict(lambda: {"fyc": 0.0, "cases": 0.0})

    for row in rows:
        if not matches_advisor(row.advisor, advisor):
            continue
        if not roster.in_unit(row.advisor, unit_filter):
            continue
        if is_approved_in_range(row, start, end):
            add_row_to_kpis(approved, row)
            product = clean_text(row.product) or "Unknown"
            products[product]["fyc"] += row.fyc
            products[product]["cases"] += row.case_count
        if in_range(row.date_submitted, start, end):
            add_row_to_kpis(submitted, row)
        if in_range(row.date_paid, start, end):
            add_row_to_kpis(paid, row)

    product_mix = sorted(
        (
            ProductMixItem(product=product, fyc=values["fyc"], cases=values["cases"])
            for product, values in products.items()
        ),
        key=lambda item: item.fyc,
        reverse=True,
    )[:PRODUCT_MIX_SIZE]
    return AdvisorDetail(
        advisor=roster.display_name(advisor),
        approved=approved,
        submitted=submitted,
        paid=paid,
        product_mix=product_mix,
        approved_by_day=build_approved_trends_by_day(
            rows, start, end, roster, unit_filter=unit_filter, advisor_filter=advisor
        ),
    )


def build_filter_options(roster: RosterIndex) -> DashboardOptions:
    units = sorted({resolve_unit(entry.unit) for entry in roster.entries}, key=_alphabetical)
    advisors = sorted({entry.advisor for entry in roster.entries}, key=_alphabetical)
    return DashboardOptions(units=[ALL_FILTER, *units], advisors=[ALL_FILTER, *advisors])

