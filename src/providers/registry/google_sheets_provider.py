"""Grant registry read from a Google Sheets spreadsheet (Sheets API v4).

The first row of the configured range is the header row; every following
row with a reference number becomes a :class:`GrantRecord`.  Values are
requested unformatted so numbers arrive without locale formatting, while
dates come back as their displayed strings.
"""

from __future__ import annotations

from urllib.parse import quote

import httpx

from src.interfaces.grant_registry_provider import IGrantRegistryProvider
from src.models.grants import GrantRecord
from src.providers.registry.row_parser import parse_grant_rows
from src.utils.errors import ConfigurationError, RegistryError
from src.utils.logging import get_logger

_VALUES_URL = "https://sheets.googleapis.com/v4/spreadsheets/{spreadsheet_id}/values/{range}"


class GoogleSheetsRegistryProvider(IGrantRegistryProvider):
    """Registry provider backed by the portfolio spreadsheet."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        spreadsheet_id: str,
        sheet_range: str = "'grantee info'!A:EE",
        access_token: str = "",
        api_key: str = "",
    ) -> None:
        if not spreadsheet_id:
            raise ConfigurationError(
                message="GOOGLE_SHEETS_SPREADSHEET_ID is not set",
                provider_name=self.get_provider_name(),
            )
        self._http = http_client
        self._spreadsheet_id = spreadsheet_id
        self._range = sheet_range
        self._access_token = access_token
        self._api_key = api_key
        self._logger = get_logger(__name__)

    async def fetch_all_records(self) -> list[GrantRecord]:
        url = _VALUES_URL.format(
            spreadsheet_id=self._spreadsheet_id,
            range=quote(self._range, safe=""),
        )
        params = {
            "valueRenderOption": "UNFORMATTED_VALUE",
            "dateTimeRenderOption": "FORMATTED_STRING",
        }
        if self._api_key:
            params["key"] = self._api_key
        headers = {"Authorization": f"Bearer {self._access_token}"} if self._access_token else {}

        try:
            response = await self._http.get(url, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RegistryError(
                message=f"Spreadsheet fetch failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        try:
            rows = response.json().get("values") or []
        except ValueError as exc:
            raise RegistryError(
                message=f"Spreadsheet response is not JSON: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        if len(rows) < 2:
            raise RegistryError(
                message="No data found in spreadsheet",
                provider_name=self.get_provider_name(),
            )

        records = parse_grant_rows(rows)
        self._logger.info("registry_loaded", source="google-sheets", records=len(records))
        return records

    def get_provider_name(self) -> str:
        return "google-sheets"
