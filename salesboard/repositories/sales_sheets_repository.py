from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from salesboard.core.config import Settings, get_settings
from salesboard.core.errors import UpstreamError
from salesboard.core.sheets import SheetsClient
from salesboard.models.sales import DprRow, RosterEntry, TransactionRecord
from salesboard.repositories.sheet_rows import parse_dpr_rows, parse_roster_entries, parse_sales_rows

logger = logging.getLogger(__name__)


class SalesSheetsRepository:
    def __init__(self, settings: Optional[Settings] = None, client: Optional[SheetsClient] = None) -> None:
        self.settings = settings or get_settings()
        self.client = client or SheetsClient(self.settings)

    def _fetch(self, sheet_name: str, cell_range: str) -> List[List[str]]:
        try:
            return self.client.get_values(sheet_name, cell_range)
        except httpx.HTTPError as exc:
            logger.error("Sheet read failed for %s: %s", sheet_name, exc)
            raise UpstreamError(f"Unable to read sheet '{sheet_name}'", sheet=sheet_name) from exc

    def list_transactions(self) -> List[TransactionRecord]:
        values = self._fetch(self.settings.new_business_sheet_name, self.settings.new_business_sheet_range)
        records = parse_sales_rows(values)
        logger.info("Loaded %s new business rows", len(records))
        return records

    def list_roster(self) -> List[RosterEntry]:
        values = self._fetch(self.settings.roster_sheet_name, self.settings.roster_sheet_range)
        entries = parse_roster_entries(values)
        logger.info("Loaded %s roster advisors", len(entries))
        return entries

    def list_dpr_rows(self) -> List[DprRow]:
        try:
            values = self.client.get_values(self.settings.dpr_sheet_name, self.settings.dpr_sheet_range)
        except httpx.HTTPError as exc:
            # DPR is optional; bonus projections fall back to transactional FYC.
            logger.warning("DPR sheet %s unavailable: %s", self.settings.dpr_sheet_name, exc)
            return []
        rows = parse_dpr_rows(values)
        logger.info("Loaded %s DPR rows", len(rows))
        return rows
