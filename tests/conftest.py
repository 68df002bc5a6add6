from __future__ import annotations

from datetime import date
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from salesboard.api.dependencies import get_sales_dashboard_service
from salesboard.core.config import Settings
from salesboard.main import create_app
from salesboard.models.sales import DprRow, RosterEntry, SpaLeg, Tenure, TransactionRecord
from salesboard.schemas.sales import SalesDashboardFilters, SalesDashboardResponse
from salesboard.services.sales_dashboard_service import SalesDashboardService

TODAY = date(2026, 2, 20)


class FakeSalesSheetsRepository:
    def __init__(
        self,
        transactions: Optional[List[TransactionRecord]] = None,
        roster: Optional[List[RosterEntry]] = None,
        dpr_rows: Optional[List[DprRow]] = None,
    ) -> None:
        self.transactions = transactions if transactions is not None else default_transactions()
        self.roster = roster if roster is not None else default_roster()
        self.dpr_rows = dpr_rows or []

    def list_transactions(self) -> List[TransactionRecord]:
        return list(self.transactions)

    def list_roster(self) -> List[RosterEntry]:
        return list(self.roster)

    def list_dpr_rows(self) -> List[DprRow]:
        return list(self.dpr_rows)


class FixedDateSalesDashboardService(SalesDashboardService):
    def get_dashboard(
        self, filters: SalesDashboardFilters, today: Optional[date] = None
    ) -> SalesDashboardResponse:
        return super().get_dashboard(filters, today=today or TODAY)


def default_roster() -> List[RosterEntry]:
    return [
        RosterEntry(advisor="Ana Cruz", unit="Alpha", spa_leg=SpaLeg.SPARTAN, tenure=Tenure.TENURED),
        RosterEntry(advisor="Bea Santos", unit="Alpha", spa_leg=SpaLeg.LEGACY, tenure=Tenure.ROOKIE),
        RosterEntry(advisor="Carlo Reyes", unit="Beta", spa_leg=SpaLeg.SPARTAN),
    ]


def default_transactions() -> List[TransactionRecord]:
    return [
        TransactionRecord(
            advisor="Ana Cruz",
            policy_owner="Owner One",
            product="A+ Signature",
            mode="Annual",
            policy_number="P-100",
            fyc=40_000,
            fyp=120_000,
            afyc=40_000,
            mdrt_fyp=120_000,
            case_count=1,
            date_approved=date(2026, 2, 5),
        ),
        TransactionRecord(
            advisor=" ana  cruz ",
            policy_owner="Owner Two",
            product="Ascend",
            mode="Monthly",
            policy_number="P-101",
            fyc=20_000,
            fyp=50_000,
            afyc=18_000,
            case_count=1,
            date_approved=date(2026, 2, 10),
        ),
        TransactionRecord(
            advisor="Bea Santos",
            product="Ascend",
            fyc=5_000,
            fyp=12_000,
            case_count=1,
            date_paid=date(2026, 2, 12),
        ),
        TransactionRecord(
            advisor="Dan Lim",
            product="Guardian Plan",
            fyc=1_000,
            fyp=3_000,
            case_count=1,
            date_approved=date(2026, 2, 7),
        ),
        TransactionRecord(
            advisor="Ana Cruz",
            product="Ascend",
            fyc=10_000,
            case_count=1,
            month_approved="January 2026",
        ),
    ]


@pytest.fixture()
def repository() -> FakeSalesSheetsRepository:
    return FakeSalesSheetsRepository()


@pytest.fixture()
def client(repository: FakeSalesSheetsRepository) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_sales_dashboard_service] = lambda: FixedDateSalesDashboardService(
        repository=repository, settings=Settings()
    )
    return TestClient(app)
