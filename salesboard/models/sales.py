from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from salesboard.shared.base import SheetRecord


class SpaLeg(str, Enum):
    SPARTAN = "spartan"
    LEGACY = "legacy"
    UNKNOWN = "unknown"


class Tenure(str, Enum):
    ROOKIE = "rookie"
    TENURED = "tenured"
    UNKNOWN = "unknown"


class TransactionRecord(SheetRecord):
    advisor: str = ""
    unit_manager: Optional[str] = None
    policy_owner: Optional[str] = None
    product: Optional[str] = None
    policy_number: Optional[str] = None
    mode: Optional[str] = None
    anp: float = 0.0
    fyp: float = 0.0
    fyc: float = 0.0
    afyc: float = 0.0
    mdrt_fyp: float = 0.0
    case_count: float = 0.0
    face_amount: float = 0.0
    date_submitted: Optional[date] = None
    date_paid: Optional[date] = None
    date_approved: Optional[date] = None
    month_approved: Optional[str] = None
    remarks: Optional[str] = None


class RosterEntry(SheetRecord):
    advisor: str
    unit: Optional[str] = None
    spa_leg: SpaLeg = SpaLeg.UNKNOWN
    program: Optional[str] = None
    pa_date: Optional[date] = None
    tenure: Tenure = Tenure.UNKNOWN
    tenure_label: Optional[str] = None
    months_cmp_carryover: int = 0


class DprRow(SheetRecord):
    month: str
    advisor: str
    fyc: float = 0.0
    anp: float = 0.0
    fyp: float = 0.0
    persistency: Optional[float] = None
