"""Grant registry read from a CSV export of the portfolio spreadsheet."""

from __future__ import annotations

import asyncio
import csv
from pathlib import Path

from src.interfaces.grant_registry_provider import IGrantRegistryProvider
from src.models.grants import GrantRecord
from src.providers.registry.row_parser import parse_grant_rows
from src.utils.errors import RegistryError
from src.utils.logging import get_logger


class CSVRegistryProvider(IGrantRegistryProvider):
    """Registry provider for offline runs.

    The file must have the same header row as the spreadsheet tab.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._logger = get_logger(__name__)

    def _read_rows(self) -> list[list[str]]:
        # utf-8-sig drops the BOM spreadsheet exports like to prepend.
        with open(self._path, newline="", encoding="utf-8-sig") as f:
            return list(csv.reader(f))

    async def fetch_all_records(self) -> list[GrantRecord]:
        try:
            rows = await asyncio.to_thread(self._read_rows)
        except (OSError, UnicodeDecodeError, csv.Error) as exc:
            raise RegistryError(
                message=f"Cannot read registry CSV {self._path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if len(rows) < 2:
            raise RegistryError(
                message=f"No data found in {self._path}",
                provider_name=self.get_provider_name(),
            )

        records = parse_grant_rows(rows)
        self._logger.info("registry_loaded", source=str(self._path), records=len(records))
        return records

    def get_provider_name(self) -> str:
        return "csv-registry"
