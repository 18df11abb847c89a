"""Abstract base class for document-drive providers.

The drive holds the source documents, organised in folders. The pipeline
only reads from it: it lists files (recursively), downloads binary content,
and asks for a plain-text export of native cloud documents.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.documents import DriveFile

# Native folder type; listings recurse into these instead of returning them.
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


# Concrete implementations: GoogleDriveProvider, LocalDriveProvider
# Located in: src/providers/drive/
class IDriveProvider(ABC):
    """Contract for read-only access to the shared document drive."""

    @abstractmethod
    async def list_files_recursive(self, folder_id: str) -> list[DriveFile]:
        """Return every non-folder, non-trashed file under *folder_id*.

        Subfolders are descended into; their entries are not returned.

        Raises
        ------
        src.utils.errors.ProviderUnavailableError
            If the drive cannot be listed.
        """

    @abstractmethod
    async def download(self, file_id: str) -> bytes:
        """Return the raw bytes of a stored file.

        Raises
        ------
        src.utils.errors.ProviderUnavailableError
            If the download fails.
        """

    @abstractmethod
    async def export_as_plain_text(self, file_id: str) -> str:
        """Return a native cloud document exported as plain text.

        Raises
        ------
        src.utils.errors.ProviderUnavailableError
            If the export fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"google-drive"``."""
