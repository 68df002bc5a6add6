from __future__ import annotations

from fastapi import APIRouter

from salesboard.api.health import router as health_router
from salesboard.api.sales import router as sales_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(sales_router)
