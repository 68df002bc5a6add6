from __future__ import annotations

from fastapi import APIRouter

from salesboard.core.config import get_settings
from salesboard.shared.response import Meta, ResponseEnvelope
from salesboard.shared.time import today_in_timezone


router = APIRouter(tags=["health"])


def _system_meta() -> Meta:
    return Meta(
        as_of_date=today_in_timezone(get_settings().reporting_timezone).isoformat(),
        source="system",
        time_window="now",
        calculation_version="v1",
    )


@router.get("/health")
def health_check() -> ResponseEnvelope[dict]:
    return ResponseEnvelope(data={"status": "ok"}, meta=_system_meta())


@router.get("/healthz")
def health_check_liveness() -> ResponseEnvelope[dict]:
    return ResponseEnvelope(data={"status": "ok"}, meta=_system_meta())
