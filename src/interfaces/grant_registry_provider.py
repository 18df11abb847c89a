"""Abstract base class for grant registry providers.

The registry is the structured, row-per-grant source of truth (a
spreadsheet in production, a CSV export for offline runs). Providers return
fully parsed :class:`~src.models.grants.GrantRecord` objects; rows without a
reference number never make it out of the provider.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.grants import GrantRecord


# Concrete implementations: GoogleSheetsRegistryProvider, CSVRegistryProvider
# Located in: src/providers/registry/
class IGrantRegistryProvider(ABC):
    """Contract for reading the full grant registry."""

    @abstractmethod
    async def fetch_all_records(self) -> list[GrantRecord]:
        """Return every grant record in the registry.

        Raises
        ------
        src.utils.errors.RegistryError
            If the registry cannot be read or has no data rows.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"google-sheets"``."""
