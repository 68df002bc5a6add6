from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from salesboard.models.sales import SpaLeg
from salesboard.shared.base import BaseSchema


class TenureBand(str, Enum):
    FIRST_TWO_YEARS = "first_two_years"
    TENURED = "tenured"


class PpbTrackerRow(BaseSchema):
    advisor: str
    unit: str
    spa_leg: SpaLeg
    tenure: TenureBand
    fyc: float
    transactional_fyc: float
    dpr_fyc: Optional[float] = None
    cases: float
    m1_cases: float
    m2_cases: float
    m3_cases: float
    active_months: int
    ppb_rate: float
    ccb_rate: Optional[float] = None
    total_bonus_rate: float
    persistency_multiplier: float
    projected_bonus: float
    fyc_to_next_bonus_tier: Optional[float] = None
    next_ppb_rate: Optional[float] = None
    cases_to_next_ccb_tier: Optional[float] = None
    next_ccb_rate: Optional[float] = None


class PpbTracker(BaseSchema):
    quarter: str
    quarter_start: date
    quarter_to_date_end: date
    months: List[str]
    rows: List[PpbTrackerRow]


class BadgeTier(str, Enum):
    SILVER = "Silver"
    GOLD = "Gold"
    DIAMOND = "Diamond"
    MASTER = "Master"


class BadgeAchiever(BaseSchema):
    advisor: str
    spa_leg: SpaLeg
    tier: BadgeTier
    value: float


class BadgeProspect(BaseSchema):
    advisor: str
    spa_leg: SpaLeg
    target_tier: BadgeTier
    remaining: float
    value: float


class BadgeBlock(BaseSchema):
    metric: str
    thresholds: Dict[str, float]
    achieved: List[BadgeAchiever]
    close: List[BadgeProspect]


class MonthlyExcellenceBadges(BaseSchema):
    month: str
    premiums: BadgeBlock
    saved_lives: BadgeBlock
    income: BadgeBlock


class MdrtTrackerRow(BaseSchema):
    advisor: str
    spa_leg: SpaLeg
    mdrt_fyp: float
    balance_to_mdrt: float
    balance_to_cot: float
    balance_to_tot: float
    achieved_tier: Optional[str] = None


class MdrtTracker(BaseSchema):
    as_of: date
    target_premium: float
    cot_premium: float
    tot_premium: float
    rows: List[MdrtTrackerRow]
