from __future__ import annotations

from typing import Iterable, Optional

from salesboard.analytics.advisor_status import is_producing
from salesboard.analytics.roster import ALL_FILTER, RosterIndex
from salesboard.models.sales import SpaLeg
from salesboard.schemas.sales import AdvisorStatus, CohortMonitoring, CohortTotals, HighPerformer

HIGH_PERFORMER_MIN_CASES = 2
TOP_TIER_MIN_CASES = 6


def build_cohort_monitoring(
    statuses: Iterable[AdvisorStatus],
    roster: RosterIndex,
    cohort: SpaLeg,
    unit_filter: Optional[str] = ALL_FILTER,
) -> CohortMonitoring:
    """Activity ratio, high performers and totals for one roster cohort."""
    total_advisors = sum(
        1
        for entry in roster.entries
        if entry.spa_leg == cohort and roster.in_unit(entry.advisor, unit_filter)
    )
    members = [
        status
        for status in statuses
        if roster.spa_leg_of(status.advisor) == cohort and roster.in_unit(status.advisor, unit_filter)
    ]
    producing_advisors = sum(1 for status in members if is_producing(status))
    activity_ratio = producing_advisors / total_advisors if total_advisors else 0.0

    high_performers = [
        HighPerformer(
            advisor=status.advisor,
            cases=status.approved.case_count,
            is_top_tier=status.approved.case_count >= TOP_TIER_MIN_CASES,
        )
        for status in sorted(members, key=lambda status: status.approved.case_count, reverse=True)
        if status.approved.case_count >= HIGH_PERFORMER_MIN_CASES
    ]

    approved_fyc = sum(status.approved.fyc for status in members)
    approved_cases = sum(status.approved.case_count for status in members)
    avg_fyc_per_case = approved_fyc / approved_cases if approved_cases > 0 else 0.0
    return CohortMonitoring(
        cohort=cohort,
        total_advisors=total_advisors,
        producing_advisors=producing_advisors,
        activity_ratio=activity_ratio,
        high_performers=high_performers,
        totals=CohortTotals(
            approved_fyc=approved_fyc,
            approved_cases=approved_cases,
            avg_fyc_per_case=avg_fyc_per_case,
        ),
    )
