"""Orchestrator for a drive-to-store ingestion run.

Pipeline per file: **classify -> resolve -> skip check -> extract ->
segment -> enrich -> replace -> upsert**.

The :class:`IngestionService` implements the **Orchestrator pattern**: it
coordinates the drive, the grant registry, the text extractor, the
segmenter and the chunk store without any of them knowing about each
other.  All collaborators are injected, so a local directory tree can stand
in for the drive and a CSV file for the registry spreadsheet.

Failure boundaries:

* registry load failure aborts the run with :class:`IngestionRunError`
  (carrying whatever was counted so far);
* a folder that cannot be listed is recorded against the folder label and
  the run moves to the next folder;
* any exception while processing a file is recorded against the file name
  and the run moves to the next file.

Files are processed strictly one at a time, with an optional pause between
files in live mode to stay under drive and LLM rate limits.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from enum import Enum

import structlog

from src.interfaces.drive_provider import IDriveProvider
from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.models.documents import (
    DocumentType,
    DriveFile,
    DriveFolderConfig,
    ExtractedDocument,
    FileError,
    FileListing,
    IngestionOptions,
    IngestionResult,
    StoredChunk,
    UnmatchedGrant,
)
from src.services.ingestion.filename_parser import parse_filename
from src.services.ingestion.grant_lookup import GrantRegistryCache, GrantResolver
from src.services.ingestion.metadata_enricher import build_base_metadata, enrich_chunk
from src.services.ingestion.segmenters.dispatch import DocumentSegmenter
from src.services.ingestion.sync_state import SyncStateTracker
from src.services.ingestion.text_extractor import MIN_TEXT_LENGTH, TextExtractor, is_supported
from src.utils.errors import IngestionRunError, RAGError, RegistryError

logger = structlog.get_logger(logger_name=__name__)


class IngestionState(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Run and per-file states, logged on every transition.

    Run level:  IDLE → ENUMERATING → LISTING → … → DONE (or FAILED)
    Per file:   CLASSIFYING → RESOLVING → SKIP_CHECK → EXTRACTING →
                SEGMENTING → ENRICHING → REPLACING → UPSERTING
    """

    IDLE = "idle"
    ENUMERATING = "enumerating"       # Loading the registry, picking the generation
    LISTING = "listing"               # Listing one folder
    CLASSIFYING = "classifying"
    RESOLVING = "resolving"
    SKIP_CHECK = "skip_check"
    EXTRACTING = "extracting"
    SEGMENTING = "segmenting"
    ENRICHING = "enriching"
    REPLACING = "replacing"           # Deleting the file's previous chunks
    UPSERTING = "upserting"
    DONE = "done"
    FAILED = "failed"


class _FileOutcome(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    NEW = "new"
    UPDATED = "updated"
    SKIPPED = "skipped"


def _now_ms() -> int:
    return int(time.time() * 1000)


async def list_folder_files(
    drive: IDriveProvider,
    folders: list[DriveFolderConfig],
) -> list[FileListing]:
    """Classify every file in *folders* from its name alone.

    Needs only the drive: no registry lookup, no store access.  Folders
    that cannot be listed are logged and left out.
    """
    listings: list[FileListing] = []
    for folder in folders:
        try:
            files = await drive.list_files_recursive(folder.folder_id)
        except Exception as exc:
            logger.error("folder_listing_failed", folder=folder.label, error=str(exc))
            continue
        for file in files:
            parsed = parse_filename(file.name)
            listings.append(
                FileListing(
                    folder_label=folder.label,
                    file=file,
                    parsed=parsed,
                    document_type=parsed.document_type or folder.document_type,
                    supported=is_supported(file.mime_type),
                )
            )
    return listings


class IngestionService:
    """Runs ingestion over the configured drive folders.

    Parameters
    ----------
    drive:
        Source of files (Google Drive or a local directory tree).
    registry_cache:
        Grant registry cache; reset at the start of every run.
    store:
        Chunk store that also holds the sync state.
    extractor:
        Converts drive files to plain text.
    segmenter:
        Splits extracted text into chunks.
    folders:
        Folders to walk, each with its default document type.
    file_delay:
        Seconds to pause between files in live runs.
    """

    def __init__(
        self,
        drive: IDriveProvider,
        registry_cache: GrantRegistryCache,
        store: IVectorStoreProvider,
        extractor: TextExtractor,
        segmenter: DocumentSegmenter,
        folders: list[DriveFolderConfig],
        file_delay: float = 0.5,
    ) -> None:
        self._drive = drive
        self._registry_cache = registry_cache
        self._resolver = GrantResolver(registry_cache)
        self._store = store
        self._sync = SyncStateTracker(store)
        self._extractor = extractor
        self._segmenter = segmenter
        self._folders = folders
        self._file_delay = file_delay
        self._state = IngestionState.IDLE

    @property
    def state(self) -> IngestionState:
        return self._state

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, options: IngestionOptions | None = None) -> IngestionResult:
        """Walk every selected folder and bring the store up to date.

        Raises
        ------
        IngestionRunError
            If the grant registry cannot be loaded.  ``exc.result`` holds
            the partial counts.
        """
        options = options or IngestionOptions()
        result = IngestionResult()
        start = time.monotonic()
        log = logger.bind(dry_run=options.dry_run, force=options.force_reprocess)

        self._transition(IngestionState.ENUMERATING)
        self._registry_cache.reset()
        try:
            records = await self._registry_cache.get()
        except RegistryError as exc:
            self._transition(IngestionState.FAILED, error=str(exc))
            raise IngestionRunError(
                message=f"Grant registry unavailable: {exc}",
                provider_name=exc.provider_name,
                result=result,
            ) from exc

        result.sync_generation = await self._sync.latest_generation() + 1
        log.info(
            "ingestion_run_started",
            grants=len(records),
            sync_generation=result.sync_generation,
            folders=len(self._selected_folders(options.folder_ids)),
        )

        for folder in self._selected_folders(options.folder_ids):
            await self._run_folder(folder, options, result)

        self._transition(IngestionState.DONE)
        log.info(
            "ingestion_run_complete",
            total_files=result.total_files,
            processed=result.processed_files,
            new=result.new_files,
            updated=result.updated_files,
            skipped=result.skipped_files,
            chunks=result.total_chunks,
            deleted_chunks=result.deleted_chunks,
            errors=len(result.errors),
            unmatched=len(result.unmatched_grants),
            duration_s=round(time.monotonic() - start, 2),
        )
        return result

    async def list_files(self, folder_ids: list[str] | None = None) -> list[FileListing]:
        """Classify every file without extracting or writing anything."""
        self._transition(IngestionState.LISTING)
        listings = await list_folder_files(self._drive, self._selected_folders(folder_ids))
        self._transition(IngestionState.DONE)
        return listings

    async def purge_file(self, file_id: str) -> int:
        """Delete every stored chunk for one source file id."""
        deleted = await self._sync.delete_chunks_for_source_file(file_id)
        logger.info("file_purged", file_id=file_id, deleted=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _selected_folders(self, folder_ids: list[str] | None) -> list[DriveFolderConfig]:
        if not folder_ids:
            return list(self._folders)
        wanted = set(folder_ids)
        return [folder for folder in self._folders if folder.folder_id in wanted]

    def _transition(self, state: IngestionState, **context: object) -> None:
        self._state = state
        logger.debug("ingestion_state", state=state.value, **context)

    async def _run_folder(
        self,
        folder: DriveFolderConfig,
        options: IngestionOptions,
        result: IngestionResult,
    ) -> None:
        self._transition(IngestionState.LISTING, folder=folder.label)
        try:
            files = await self._drive.list_files_recursive(folder.folder_id)
        except Exception as exc:
            logger.error("folder_listing_failed", folder=folder.label, error=str(exc))
            result.errors.append(FileError(file=folder.label, error=str(exc)))
            return

        logger.info("folder_listed", folder=folder.label, files=len(files))
        result.total_files += len(files)

        for file in files:
            if not is_supported(file.mime_type):
                logger.warning(
                    "file_unsupported_type",
                    file=file.name,
                    mime_type=file.mime_type,
                )
                result.skipped_files += 1
                continue

            try:
                outcome = await self._process_file(file, folder, options, result)
            except Exception as exc:
                logger.error("file_processing_failed", file=file.name, error=str(exc))
                result.errors.append(FileError(file=file.name, error=str(exc)))
                outcome = None

            if outcome == _FileOutcome.SKIPPED:
                result.skipped_files += 1
                continue
            if outcome is not None:
                result.processed_files += 1
                if outcome == _FileOutcome.UPDATED:
                    result.updated_files += 1
                else:
                    result.new_files += 1

            if not options.dry_run and self._file_delay > 0:
                await asyncio.sleep(self._file_delay)

    async def _process_file(
        self,
        file: DriveFile,
        folder: DriveFolderConfig,
        options: IngestionOptions,
        result: IngestionResult,
    ) -> _FileOutcome:
        log = logger.bind(file=file.name, file_id=file.id)
        if not file.modified_time:
            file = file.model_copy(
                update={"modified_time": datetime.now(timezone.utc).isoformat()}
            )

        self._transition(IngestionState.CLASSIFYING, file=file.name)
        parsed = parse_filename(file.name)
        document_type: DocumentType = parsed.document_type or folder.document_type

        self._transition(IngestionState.RESOLVING, file=file.name)
        grant = await self._resolver.resolve(parsed.reference_number, parsed.grantee_name)
        if grant is None:
            log.warning("grant_unmatched", reference_number=parsed.reference_number)
            result.unmatched_grants.append(
                UnmatchedGrant(file=file.name, reference_number=parsed.reference_number)
            )

        self._transition(IngestionState.SKIP_CHECK, file=file.name)
        if not options.force_reprocess and await self._sync.should_skip(file.id, file.modified_time):
            log.info("file_unchanged_skipped")
            return _FileOutcome.SKIPPED

        self._transition(IngestionState.EXTRACTING, file=file.name)
        text = await self._extractor.extract(file)
        if len(text.strip()) < MIN_TEXT_LENGTH:
            log.warning("file_text_too_short", chars=len(text.strip()))
            return _FileOutcome.SKIPPED

        doc = ExtractedDocument(
            file=file,
            text=text,
            document_type=document_type,
            reference_number=parsed.reference_number,
            grantee_name=parsed.grantee_name,
        )

        self._transition(IngestionState.SEGMENTING, file=file.name)
        chunks = await self._segmenter.segment(
            doc,
            build_base_metadata(doc, grant),
            use_llm=options.use_llm_chunking,
        )

        self._transition(IngestionState.ENRICHING, file=file.name)
        ingested_at = _now_ms()
        chunks = [enrich_chunk(c, file, grant, result.sync_generation, ingested_at) for c in chunks]

        try:
            existing: list[StoredChunk] | None = await self._sync.chunks_for_source_file(file.id)
        except RAGError as exc:
            # Unknown prior state: report as new, still clear old chunks in live mode.
            log.warning("existing_chunks_lookup_failed", error=str(exc))
            existing = None
        outcome = _FileOutcome.UPDATED if existing else _FileOutcome.NEW

        if options.dry_run:
            log.info(
                "file_dry_run",
                document_type=document_type.value,
                chunks=len(chunks),
                would_replace=len(existing or []),
                grant=grant.reference_number if grant else None,
            )
            result.total_chunks += len(chunks)
            return outcome

        if existing is None or existing:
            self._transition(IngestionState.REPLACING, file=file.name)
            result.deleted_chunks += await self._sync.delete_chunks_for_source_file(file.id)

        self._transition(IngestionState.UPSERTING, file=file.name)
        stored = await self._store.upsert(chunks)
        result.total_chunks += stored

        log.info(
            "file_processed",
            outcome=outcome.value,
            document_type=document_type.value,
            chunks=stored,
            grant=grant.reference_number if grant else None,
        )
        return outcome

