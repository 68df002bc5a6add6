from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from salesboard.models.sales import SpaLeg
from salesboard.schemas.incentives import MdrtTracker, MonthlyExcellenceBadges, PpbTracker
from salesboard.shared.base import BaseSchema
from salesboard.shared.time import RangePreset

ALL_FILTER = "All"


class SalesDashboardFilters(BaseSchema):
    # Keep query parameter names in snake_case for API contract consistency.
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    preset: RangePreset = RangePreset.MTD
    start: Optional[str] = None
    end: Optional[str] = None
    unit: str = ALL_FILTER
    advisor: str = ALL_FILTER


class MoneyKpis(BaseSchema):
    anp: float = 0.0
    fyp: float = 0.0
    fyc: float = 0.0
    afyc: float = 0.0
    mdrt_fyp: float = 0.0
    case_count: float = 0.0
    face_amount: float = 0.0


class AdvisorStatus(BaseSchema):
    advisor: str
    unit: Optional[str] = None
    approved: MoneyKpis = Field(default_factory=MoneyKpis)
    submitted: MoneyKpis = Field(default_factory=MoneyKpis)
    paid: MoneyKpis = Field(default_factory=MoneyKpis)
    # Paid activity with no approval proof yet (no approved date, no month approved).
    open: MoneyKpis = Field(default_factory=MoneyKpis)


class AdvisorStatusBreakdown(BaseSchema):
    advisors: List[AdvisorStatus] = Field(default_factory=list, exclude=True)
    producing: List[AdvisorStatus]
    pending: List[AdvisorStatus]
    non_producing: List[AdvisorStatus]


class TeamKpis(BaseSchema):
    approved: MoneyKpis
    submitted: MoneyKpis
    paid: MoneyKpis


class AdvisorLeaderboardEntry(BaseSchema):
    advisor: str
    value: float


class UnitLeaderboardEntry(BaseSchema):
    unit: str
    value: float


class Leaderboards(BaseSchema):
    advisors_by_fyc: List[AdvisorLeaderboardEntry] = Field(alias="advisorsByFYC")
    advisors_by_fyp: List[AdvisorLeaderboardEntry] = Field(alias="advisorsByFYP")
    units_by_fyc: List[UnitLeaderboardEntry] = Field(alias="unitsByFYC")
    units_by_fyp: List[UnitLeaderboardEntry] = Field(alias="unitsByFYP")


class TrendPoint(BaseSchema):
    date: str
    fyc: float
    fyp: float
    cases: float


class TrendSeries(BaseSchema):
    approved_by_day: List[TrendPoint]


class ProductMixItem(BaseSchema):
    product: str
    fyc: float
    cases: float


class AdvisorDetail(BaseSchema):
    advisor: str
    approved: MoneyKpis
    submitted: MoneyKpis
    paid: MoneyKpis
    product_mix: List[ProductMixItem]
    approved_by_day: List[TrendPoint]


class HighPerformer(BaseSchema):
    advisor: str
    cases: float
    is_top_tier: bool


class CohortTotals(BaseSchema):
    approved_fyc: float
    approved_cases: float
    avg_fyc_per_case: float


class CohortMonitoring(BaseSchema):
    cohort: SpaLeg
    total_advisors: int
    producing_advisors: int
    activity_ratio: float
    high_performers: List[HighPerformer]
    totals: CohortTotals


class ProductSale(BaseSchema):
    advisor: str
    product: str
    fyc: float
    policy_number: Optional[str] = None
    month_approved: Optional[str] = None


class ProductLookouts(BaseSchema):
    a_plus_signature: List[ProductSale]
    ascend: List[ProductSale]
    future_safe_usd_5_pay: List[ProductSale] = Field(alias="futureSafeUsd5Pay")


class RoundupItem(BaseSchema):
    advisor: str
    product: str
    afyc: float
    policy_number: Optional[str] = None
    month_approved: Optional[str] = None


class CmpStreak(BaseSchema):
    advisor: str
    streak_months: int


class CmpBreakdown(BaseSchema):
    as_of_month: str
    three_plus: List[CmpStreak]
    watch_two: List[CmpStreak]
    watch_one: List[CmpStreak]


class SpecialLookouts(BaseSchema):
    products: ProductLookouts
    cmp: CmpBreakdown
    sales_roundup: List[RoundupItem]


class DashboardFiltersEcho(BaseSchema):
    preset: RangePreset
    start: str
    end: str
    unit: str
    advisor: str


class DashboardOptions(BaseSchema):
    units: List[str]
    advisors: List[str]


class SalesDashboardResponse(BaseSchema):
    generated_at: datetime
    filters: DashboardFiltersEcho
    options: DashboardOptions
    team: TeamKpis
    producing_advisors: AdvisorStatusBreakdown
    leaderboards: Leaderboards
    trends: TrendSeries
    spartan_monitoring: CohortMonitoring
    legacy_monitoring: CohortMonitoring
    special_lookouts: SpecialLookouts
    ppb_tracker: PpbTracker
    monthly_excellence: MonthlyExcellenceBadges
    mdrt_tracker: MdrtTracker
    advisor_detail: Optional[AdvisorDetail] = None
