from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from salesboard.analytics.advisor_status import (
    aggregate_team,
    build_advisor_detail,
    build_advisor_statuses,
    build_approved_trends_by_day,
    build_filter_options,
    build_leaderboards,
)
from salesboard.analytics.badges import build_mdrt_tracker, build_monthly_excellence
from salesboard.analytics.cohorts import build_cohort_monitoring
from salesboard.analytics.lookouts import (
    build_consistent_monthly_producers,
    build_product_sellers,
    build_sales_roundup,
)
from salesboard.analytics.ppb import build_ppb_tracker
from salesboard.analytics.roster import RosterIndex, is_unfiltered
from salesboard.core.config import Settings, get_settings
from salesboard.models.sales import SpaLeg
from salesboard.repositories.sales_sheets_repository import SalesSheetsRepository
from salesboard.schemas.sales import (
    ALL_FILTER,
    DashboardFiltersEcho,
    SalesDashboardFilters,
    SalesDashboardResponse,
    SpecialLookouts,
    TrendSeries,
)
from salesboard.shared.parsing import clean_text
from salesboard.shared.time import DateRange, month_start, resolve_range, today_in_timezone

logger = logging.getLogger(__name__)


def resolve_cmp_as_of(range_end: date, today: date) -> date:
    """Range end when it falls in a past month, else the last day of the previous month."""
    current_month = month_start(today)
    if range_end < current_month:
        return range_end
    return date.fromordinal(current_month.toordinal() - 1)


class SalesDashboardService:
    def __init__(self, repository: SalesSheetsRepository, settings: Optional[Settings] = None) -> None:
        self.repository = repository
        self.settings = settings or get_settings()

    def resolve_date_range(self, filters: SalesDashboardFilters, today: date) -> DateRange:
        return resolve_range(filters.preset, today, custom_start=filters.start, custom_end=filters.end)

    def get_dashboard(
        self, filters: SalesDashboardFilters, today: Optional[date] = None
    ) -> SalesDashboardResponse:
        today = today or today_in_timezone(self.settings.reporting_timezone)
        date_range = self.resolve_date_range(filters, today)
        start, end = date_range.start, date_range.end
        unit = clean_text(filters.unit) or ALL_FILTER
        advisor = clean_text(filters.advisor) or ALL_FILTER
        logger.info("Building sales dashboard for %s..%s unit=%s advisor=%s", start, end, unit, advisor)

        rows = self.repository.list_transactions()
        roster = RosterIndex(self.repository.list_roster())
        dpr_rows = self.repository.list_dpr_rows()

        statuses = build_advisor_statuses(rows, roster, start, end, unit_filter=unit)
        advisor_detail = None
        if not is_unfiltered(advisor):
            advisor_detail = build_advisor_detail(rows, advisor, start, end, roster, unit_filter=unit)

        special_lookouts = SpecialLookouts(
            products=build_product_sellers(rows, start, end, roster, unit_filter=unit),
            cmp=build_consistent_monthly_producers(
                rows, roster, resolve_cmp_as_of(end, today), unit_filter=unit
            ),
            sales_roundup=build_sales_roundup(
                rows, start, end, roster, unit_filter=unit, advisor_filter=advisor
            ),
        )

        return SalesDashboardResponse(
            generated_at=datetime.now(timezone.utc),
            filters=DashboardFiltersEcho(
                preset=filters.preset,
                start=start.isoformat(),
                end=end.isoformat(),
                unit=unit,
                advisor=advisor,
            ),
            options=build_filter_options(roster),
            team=aggregate_team(statuses.advisors),
            producing_advisors=statuses,
            leaderboards=build_leaderboards(statuses.advisors),
            trends=TrendSeries(
                approved_by_day=build_approved_trends_by_day(
                    rows, start, end, roster, unit_filter=unit, advisor_filter=advisor
                )
            ),
            spartan_monitoring=build_cohort_monitoring(
                statuses.advisors, roster, SpaLeg.SPARTAN, unit_filter=unit
            ),
            legacy_monitoring=build_cohort_monitoring(
                statuses.advisors, roster, SpaLeg.LEGACY, unit_filter=unit
            ),
            special_lookouts=special_lookouts,
            ppb_tracker=build_ppb_tracker(rows, roster, dpr_rows, end, unit_filter=unit),
            monthly_excellence=build_monthly_excellence(rows, end, roster, unit_filter=unit),
            mdrt_tracker=build_mdrt_tracker(
                rows, end, roster, self.settings.mdrt_target_premium, unit_filter=unit
            ),
            advisor_detail=advisor_detail,
        )

