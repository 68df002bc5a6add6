from __future__ import annotations

import logging
from threading import Lock
from typing import Any, List, Optional
from urllib.parse import quote, urlencode

import httpx
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from salesboard.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

SHEETS_API_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_READONLY_SCOPE = "https://www.googleapis.com/auth/spreadsheets.readonly"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


class SheetsClient:
    _shared_client: httpx.Client | None = None
    _client_lock: Lock = Lock()

    def __init__(self, settings: Optional[Settings] = None) -> None:
        settings = settings or get_settings()
        if not settings.google_sheets_id:
            raise ValueError("GOOGLE_SHEETS_ID is required")
        if not settings.google_service_account_email or not settings.google_service_account_private_key:
            raise ValueError("Google service account email and private key are required")
        self.spreadsheet_id = settings.google_sheets_id
        self.timeout_seconds = settings.sheets_timeout_seconds
        self._credentials = service_account.Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": settings.google_service_account_email,
                # Keys pasted into env files usually carry literal "\n" sequences.
                "private_key": settings.google_service_account_private_key.replace("\\n", "\n"),
                "token_uri": GOOGLE_TOKEN_URI,
            },
            scopes=[SHEETS_READONLY_SCOPE],
        )
        self._credentials_lock = Lock()
        self._client = self._get_shared_client(self.timeout_seconds)

    @classmethod
    def _get_shared_client(cls, timeout_seconds: float) -> httpx.Client:
        if cls._shared_client is not None:
            return cls._shared_client
        with cls._client_lock:
            if cls._shared_client is None:
                cls._shared_client = httpx.Client(
                    timeout=timeout_seconds,
                    limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
                )
        return cls._shared_client

    def _access_token(self) -> str:
        with self._credentials_lock:
            if not self._credentials.valid:
                self._credentials.refresh(GoogleAuthRequest())
            return str(self._credentials.token)

    def get_values(self, sheet_name: str, cell_range: str = "A:Z") -> List[List[str]]:
        """Return the sheet grid as strings; blank cells become empty strings."""
        a1_range = quote(f"{sheet_name}!{cell_range}", safe="!:")
        params = {
            "valueRenderOption": "UNFORMATTED_VALUE",
            "dateTimeRenderOption": "FORMATTED_STRING",
        }
        url = f"{SHEETS_API_BASE_URL}/{self.spreadsheet_id}/values/{a1_range}?{urlencode(params)}"
        headers = {"Authorization": f"Bearer {self._access_token()}"}
        response = self._client.get(url, headers=headers)
        response.raise_for_status()
        payload = response.json()
        values: List[List[Any]] = payload.get("values") or []
        logger.debug("Fetched %s rows from sheet %s", len(values), sheet_name)
        return [["" if cell is None else str(cell) for cell in row] for row in values]
