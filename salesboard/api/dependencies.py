from __future__ import annotations

from functools import lru_cache

from salesboard.core.config import get_settings
from salesboard.repositories.sales_sheets_repository import SalesSheetsRepository
from salesboard.services.sales_dashboard_service import SalesDashboardService


@lru_cache
def get_sales_sheets_repository() -> SalesSheetsRepository:
    return SalesSheetsRepository(settings=get_settings())


def get_sales_dashboard_service() -> SalesDashboardService:
    return SalesDashboardService(repository=get_sales_sheets_repository(), settings=get_settings())
