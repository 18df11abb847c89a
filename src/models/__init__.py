"""Grant ingestion domain models, re-exported from one place.

Import from ``src.models`` rather than the individual modules:

    - documents.py  - drive files, extracted documents, chunks and their
                      metadata, run options and run results
    - grants.py     - the grant registry record
"""

from __future__ import annotations

from src.models.documents import (
    ChunkMetadata,
    DocumentChunk,
    DocumentType,
    DriveFile,
    DriveFolderConfig,
    ExtractedDocument,
    FileError,
    FileListing,
    IngestionOptions,
    IngestionResult,
    ParsedFilename,
    SectionType,
    StoredChunk,
    UnmatchedGrant,
)
from src.models.grants import GrantRecord

__all__ = [
    "ChunkMetadata",
    "DocumentChunk",
    "DocumentType",
    "DriveFile",
    "DriveFolderConfig",
    "ExtractedDocument",
    "FileError",
    "FileListing",
    "GrantRecord",
    "IngestionOptions",
    "IngestionResult",
    "ParsedFilename",
    "SectionType",
    "StoredChunk",
    "UnmatchedGrant",
]
