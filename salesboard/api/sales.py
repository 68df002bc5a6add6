from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from salesboard.api.dependencies import get_sales_dashboard_service
from salesboard.core.config import get_settings
from salesboard.schemas.sales import ALL_FILTER, SalesDashboardFilters, SalesDashboardResponse
from salesboard.services.sales_dashboard_service import SalesDashboardService
from salesboard.shared.response import Meta, ResponseEnvelope
from salesboard.shared.time import RangePreset

router = APIRouter(prefix="/sales", tags=["sales"])

SALES_CALCULATION_VERSION = "v1"


def get_sales_dashboard_filters(
    preset: str = Query(
        default="MTD",
        pattern="^(MTD|QTD|YTD|PREV_MONTH|CUSTOM|mtd|qtd|ytd|prev_month|custom)$",
    ),
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    unit: str = Query(default=ALL_FILTER),
    advisor: str = Query(default=ALL_FILTER),
) -> SalesDashboardFilters:
    return SalesDashboardFilters(
        preset=RangePreset(preset.upper()),
        start=start,
        end=end,
        unit=unit.strip() or ALL_FILTER,
        advisor=advisor.strip() or ALL_FILTER,
    )


@router.get("")
def sales_dashboard(
    filters: SalesDashboardFilters = Depends(get_sales_dashboard_filters),
    service: SalesDashboardService = Depends(get_sales_dashboard_service),
) -> ResponseEnvelope[SalesDashboardResponse]:
    data = service.get_dashboard(filters)
    settings = get_settings()
    meta = Meta(
        as_of_date=data.filters.end,
        source="google_sheets",
        time_window=data.filters.preset.value,
        calculation_version=SALES_CALCULATION_VERSION,
        timezone=settings.reporting_timezone,
        sources=[
            settings.new_business_sheet_name,
            settings.roster_sheet_name,
            settings.dpr_sheet_name,
        ],
        generated_at=data.generated_at.isoformat(),
    )
    return ResponseEnvelope(data=data, meta=meta)
