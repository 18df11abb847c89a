"""Source folders in the shared drive and the document type assumed for each.

Colombia and Kenya hold a mix of document types; their ``document_type`` is
only the default and the filename classifier overrides it per file whenever
the filename names a more specific type.

``config/config.yaml`` may replace the whole list under ``drive.folders``::

    drive:
      folders:
        - folder_id: 1KtimzlEqcEllzHALi7d8lIqktL1ny-AD
          label: Annual Impact Reports
          document_type: impact_survey
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from src.models.documents import DocumentType, DriveFolderConfig
from src.utils.errors import ConfigurationError

DRIVE_FOLDERS: list[DriveFolderConfig] = [
    DriveFolderConfig(
        folder_id="1KtimzlEqcEllzHALi7d8lIqktL1ny-AD",
        label="Annual Impact Reports",
        document_type=DocumentType.IMPACT_SURVEY,
    ),
    DriveFolderConfig(
        folder_id="1s8CyOudeFj1S6-exrTcx8qTkxwDPG5tH",
        label="Grantee Check-in Transcripts",
        document_type=DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT,
    ),
    DriveFolderConfig(
        folder_id="1Sg7eCEJ3rLRRy7TBYYKhG1DNemovTBP3",
        label="Colombia",
        document_type=DocumentType.GRANT_DESCRIPTION,
    ),
    DriveFolderConfig(
        folder_id="1hItZtcYt9AwvxSMAyu1Gc7Cz04wMiPRV",
        label="Kenya",
        document_type=DocumentType.GRANT_DESCRIPTION,
    ),
    DriveFolderConfig(
        folder_id="19dfFP9xiZN9-KuASlmoUgF20nCky4GIe",
        label="Grant Descriptions US",
        document_type=DocumentType.GRANT_DESCRIPTION,
    ),
]


def load_drive_folders(config: dict[str, Any] | None = None) -> list[DriveFolderConfig]:
    """Return the configured folder list, falling back to :data:`DRIVE_FOLDERS`.

    Raises
    ------
    ConfigurationError
        If ``drive.folders`` is present but malformed.
    """
    raw = ((config or {}).get("drive") or {}).get("folders")
    if not raw:
        return list(DRIVE_FOLDERS)

    try:
        return [DriveFolderConfig.model_validate(entry) for entry in raw]
    except (ValidationError, TypeError) as exc:
        raise ConfigurationError(
            message=f"Invalid drive.folders entry in config: {exc}",
        ) from exc
