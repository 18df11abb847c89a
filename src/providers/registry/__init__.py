"""Grant registry provider implementations.

    - GoogleSheetsRegistryProvider - Sheets API v4 over httpx (production)
    - CSVRegistryProvider          - a CSV export of the same sheet

Both share the header-map row parser in ``row_parser``.
"""

from src.providers.registry.csv_registry_provider import CSVRegistryProvider
from src.providers.registry.google_sheets_provider import GoogleSheetsRegistryProvider

__all__ = ["CSVRegistryProvider", "GoogleSheetsRegistryProvider"]
