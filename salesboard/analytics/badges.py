from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from salesboard.analytics.kpis import is_approved_in_range
from salesboard.analytics.roster import ALL_FILTER, RosterIndex
from salesboard.models.sales import TransactionRecord
from salesboard.schemas.incentives import (
    BadgeAchiever,
    BadgeBlock,
    BadgeProspect,
    BadgeTier,
    MdrtTracker,
    MdrtTrackerRow,
    MonthlyExcellenceBadges,
)
from salesboard.shared.parsing import clean_text, month_key, normalize_name

BadgeGuide = Tuple[Tuple[BadgeTier, float], ...]

PREMIUMS_GUIDE: BadgeGuide = (
    (BadgeTier.SILVER, 100_000),
    (BadgeTier.GOLD, 150_000),
    (BadgeTier.DIAMOND, 300_000),
    (BadgeTier.MASTER, 400_000),
)
SAVED_LIVES_GUIDE: BadgeGuide = (
    (BadgeTier.SILVER, 3),
    (BadgeTier.GOLD, 4),
    (BadgeTier.DIAMOND, 6),
    (BadgeTier.MASTER, 8),
)
INCOME_GUIDE: BadgeGuide = (
    (BadgeTier.SILVER, 35_000),
    (BadgeTier.GOLD, 50_000),
    (BadgeTier.DIAMOND, 100_000),
    (BadgeTier.MASTER, 140_000),
)

COT_MULTIPLIER = 3
TOT_MULTIPLIER = 6


def achieved_tier(value: float, guide: BadgeGuide) -> Optional[BadgeTier]:
    tier: Optional[BadgeTier] = None
    for candidate, threshold in guide:
        if value >= threshold:
            tier = candidate
    return tier


def next_tier(value: float, guide: BadgeGuide) -> Optional[Tuple[BadgeTier, float]]:
    for candidate, threshold in guide:
        if value < threshold:
            return candidate, threshold - value
    return None


def classify_badges(
    metric: str,
    values: Dict[str, float],
    guide: BadgeGuide,
    roster: RosterIndex,
) -> BadgeBlock:
    """Split advisors into tier achievers and those closing in on their next tier.

    Only positive values are considered. An advisor between two tiers shows up in
    both lists: achieved at the lower tier, close to the next one.
    """
    achieved: List[BadgeAchiever] = []
    close: List[BadgeProspect] = []
    for advisor, value in values.items():
        if value <= 0:
            continue
        spa_leg = roster.spa_leg_of(advisor)
        tier = achieved_tier(value, guide)
        if tier is not None:
            achieved.append(BadgeAchiever(advisor=advisor, spa_leg=spa_leg, tier=tier, value=value))
        upcoming = next_tier(value, guide)
        if upcoming is not None:
            target_tier, remaining = upcoming
            close.append(
                BadgeProspect(
                    advisor=advisor,
                    spa_leg=spa_leg,
                    target_tier=target_tier,
                    remaining=remaining,
                    value=value,
                )
            )
    achieved.sort(key=lambda item: (-item.value, item.advisor.lower()))
    close.sort(key=lambda item: (-item.value, item.advisor.lower()))
    return BadgeBlock(
        metric=metric,
        thresholds={tier.value: threshold for tier, threshold in guide},
        achieved=achieved,
        close=close,
    )


def sum_approved_by_advisor(
    rows: Iterable[TransactionRecord],
    start: date,
    end: date,
    roster: RosterIndex,
    value_of: Callable[[TransactionRecord], float],
    unit_filter: Optional[str] = ALL_FILTER,
) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    names: Dict[str, str] = {}
    for row in rows:
        advisor = clean_text(row.advisor)
        if not advisor or not roster.in_unit(advisor, unit_filter):
            continue
        if not is_approved_in_range(row, start, end):
            continue
        key = normalize_name(advisor)
        names.setdefault(key, roster.display_name(advisor))
        totals[key] += value_of(row)
    return {names[key]: total for key, total in totals.items()}


def build_monthly_excellence(
    rows: List[TransactionRecord],
    range_end: date,
    roster: RosterIndex,
    unit_filter: Optional[str] = ALL_FILTER,
) -> MonthlyExcellenceBadges:
    start = range_end.replace(day=1)

    def totals(value_of: Callable[[TransactionRecord], float]) -> Dict[str, float]:
        return sum_approved_by_advisor(rows, start, range_end, roster, value_of, unit_filter)

    return MonthlyExcellenceBadges(
        month=month_key(range_end),
        premiums=classify_badges("fyp", totals(lambda row: row.fyp), PREMIUMS_GUIDE, roster),
        saved_lives=classify_badges(
            "caseCount", totals(lambda row: row.case_count), SAVED_LIVES_GUIDE, roster
        ),
        income=classify_badges("fyc", totals(lambda row: row.fyc), INCOME_GUIDE, roster),
    )


def build_mdrt_tracker(
    rows: List[TransactionRecord],
    range_end: date,
    roster: RosterIndex,
    target_premium: float,
    unit_filter: Optional[str] = ALL_FILTER,
) -> MdrtTracker:
    start = date(range_end.year, 1, 1)
    cot_premium = target_premium * COT_MULTIPLIER
    tot_premium = target_premium * TOT_MULTIPLIER
    totals = sum_approved_by_advisor(
        rows, start, range_end, roster, lambda row: row.mdrt_fyp, unit_filter
    )

    tracker_rows: List[MdrtTrackerRow] = []
    for advisor, mdrt_fyp in totals.items():
        if mdrt_fyp <= 0:
            continue
        tier: Optional[str] = None
        if mdrt_fyp >= tot_premium:
            tier = "TOT"
        elif mdrt_fyp >= cot_premium:
            tier = "COT"
        elif mdrt_fyp >= target_premium:
            tier = "MDRT"
        tracker_rows.append(
            MdrtTrackerRow(
                advisor=advisor,
                spa_leg=roster.spa_leg_of(advisor),
                mdrt_fyp=mdrt_fyp,
                balance_to_mdrt=max(0.0, target_premium - mdrt_fyp),
                balance_to_cot=max(0.0, cot_premium - mdrt_fyp),
                balance_to_tot=max(0.0, tot_premium - mdrt_fyp),
                achieved_tier=tier,
            )
        )
    tracker_rows.sort(key=lambda row: (-row.mdrt_fyp, row.advisor.lower()))
    return MdrtTracker(
        as_of=range_end,
        target_premium=target_premium,
        cot_premium=cot_premium,
        tot_premium=tot_premium,
        rows=tracker_rows,
    )
