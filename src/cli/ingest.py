# =============================================================================
# src/cli/ingest.py - CLI Ingest Command (Drive → Chunk Store Sync)
# =============================================================================
#
# Standalone CLI for syncing grant documents from the shared drive into the
# ChromaDB chunk store.  Every run walks the configured drive folders,
# classifies each file by name, resolves it to a grant registry record,
# extracts and segments its text, and replaces the file's chunks in the
# store.  Unchanged files (same modification timestamp) are skipped.
#
# Modes:
#
#   (default)       - full sync of every configured folder
#   --dry-run       - do everything except write to the store
#   --list-files    - classify files only; no extraction or writes
#   --purge-file ID - delete every chunk for one source file id
#
# Sources:
#   - Drive:    Google Drive v3 (GOOGLE_ACCESS_TOKEN / GOOGLE_API_KEY), or
#               a local directory tree with --local PATH (one subdirectory
#               per folder label)
#   - Registry: Google Sheets (GOOGLE_SHEETS_SPREADSHEET_ID), or a CSV
#               export with --registry-csv PATH
#   - LLM (transcript segmentation, optional): Anthropic -> OpenAI
#
# Usage examples:
#   python -m src.cli.ingest
#   python -m src.cli.ingest --dry-run --no-llm
#   python -m src.cli.ingest --local ./drive --registry-csv grants.csv
#   python -m src.cli.ingest --folder 1KtimzlEqcEllzHALi7d8lIqktL1ny-AD --force
#   python -m src.cli.ingest --purge-file 1AbCdEf
# =============================================================================

"""Standalone CLI for syncing grant documents into the chunk store.

Usage::

    python -m src.cli.ingest [--dry-run] [--no-llm] [--folder ID ...]
                             [--force] [--list-files] [--purge-file ID]
                             [--local PATH] [--registry-csv PATH]
                             [--json-logs]

Exit status is 0 when the run completes (even with per-file errors, which
are listed in the summary) and 1 when configuration is missing or the run
cannot proceed.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time

import httpx

from src.config.drive_folders import load_drive_folders
from src.config.loader import load_config

# Settings is a Pydantic BaseSettings model that reads configuration from
# environment variables and .env files.
from src.config.settings import Settings
from src.interfaces.drive_provider import IDriveProvider
from src.interfaces.grant_registry_provider import IGrantRegistryProvider
from src.interfaces.llm_provider import ILLMProvider
from src.models.documents import DriveFolderConfig, FileListing, IngestionOptions, IngestionResult
from src.utils.errors import ConfigurationError, GrantIngestError, IngestionRunError
from src.utils.logging import configure_logging

_BANNER_WIDTH = 60
_HTTP_TIMEOUT_SECONDS = 60.0


# ---------------------------------------------------------------------------
# Provider wiring
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider | None:
    """Select the first available LLM provider for transcript segmentation.

    Priority: Anthropic (Claude) -> OpenAI (or an OpenAI-compatible
    endpoint).  ``None`` when neither key is configured; transcripts then
    use paragraph grouping.
    """
    if app_settings.anthropic_api_key:
        from src.providers.llm.anthropic_provider import AnthropicLLMProvider

        return AnthropicLLMProvider(settings=app_settings)
    if app_settings.openai_api_key:
        from src.providers.llm.openai_provider import OpenAILLMProvider

        return OpenAILLMProvider(settings=app_settings)
    return None


def _build_drive(
    args: argparse.Namespace,
    app_settings: Settings,
    http_client: httpx.AsyncClient,
    folders: list[DriveFolderConfig],
) -> IDriveProvider:
    local_root = args.local or app_settings.local_drive_root
    if local_root:
        from src.providers.drive.local_drive_provider import LocalDriveProvider

        return LocalDriveProvider(
            local_root,
            folder_paths={folder.folder_id: folder.label for folder in folders},
        )

    from src.providers.drive.google_drive_provider import GoogleDriveProvider

    return GoogleDriveProvider(
        http_client,
        access_token=app_settings.google_access_token,
        api_key=app_settings.google_api_key,
    )


def _build_registry(
    args: argparse.Namespace,
    app_settings: Settings,
    http_client: httpx.AsyncClient,
) -> IGrantRegistryProvider:
    csv_path = args.registry_csv or app_settings.registry_csv_path
    if csv_path:
        from src.providers.registry.csv_registry_provider import CSVRegistryProvider

        return CSVRegistryProvider(csv_path)

    from src.providers.registry.google_sheets_provider import GoogleSheetsRegistryProvider

    return GoogleSheetsRegistryProvider(
        http_client,
        spreadsheet_id=app_settings.google_sheets_spreadsheet_id,
        sheet_range=app_settings.google_sheets_range,
        access_token=app_settings.google_access_token,
        api_key=app_settings.google_api_key,
    )


def _build_store(app_settings: Settings):  # noqa: ANN202
    from src.providers.vector_store.chromadb_provider import ChromaDBProvider

    return ChromaDBProvider(
        persist_directory=app_settings.chromadb_persist_dir,
        collection_name=app_settings.chromadb_collection,
        max_text_chars=app_settings.vector_store_max_text_chars,
        upsert_batch_size=app_settings.vector_store_upsert_batch,
        delete_batch_size=app_settings.vector_store_delete_batch,
    )


def _build_ingestion_service(
    args: argparse.Namespace,
    app_settings: Settings,
    http_client: httpx.AsyncClient,
    folders: list[DriveFolderConfig],
):  # noqa: ANN202
    """Assemble the ingestion pipeline from the configured providers.

    Raises
    ------
    ConfigurationError
        If a selected provider is missing credentials or ids.
    """
    from src.services.ingestion.grant_lookup import GrantRegistryCache
    from src.services.ingestion.ingestion_service import IngestionService
    from src.services.ingestion.segmenters.dispatch import DocumentSegmenter
    from src.services.ingestion.segmenters.llm_transcript import LLMTranscriptSegmenter
    from src.services.ingestion.segmenters.transcripts import ParagraphTranscriptSegmenter
    from src.services.ingestion.text_extractor import TextExtractor

    drive = _build_drive(args, app_settings, http_client, folders)
    registry = _build_registry(args, app_settings, http_client)

    llm_segmenter = None
    if not args.no_llm:
        llm_segmenter = LLMTranscriptSegmenter(
            _build_llm_provider(app_settings),
            fallback=ParagraphTranscriptSegmenter(),
            max_chars=app_settings.transcript_llm_max_chars,
        )

    return IngestionService(
        drive=drive,
        registry_cache=GrantRegistryCache(registry),
        store=_build_store(app_settings),
        extractor=TextExtractor(drive),
        segmenter=DocumentSegmenter(llm_segmenter),
        folders=folders,
        file_delay=app_settings.ingest_file_delay_seconds,
    )


def _missing_configuration(args: argparse.Namespace, app_settings: Settings) -> list[str]:
    """Describe every required setting that is absent for the chosen mode."""
    if args.purge_file:
        return []

    missing: list[str] = []
    uses_google_drive = not (args.local or app_settings.local_drive_root)
    if uses_google_drive and not app_settings.has_google_credentials():
        missing.append("GOOGLE_ACCESS_TOKEN or GOOGLE_API_KEY (or --local PATH)")

    if args.list_files:
        return missing

    if not (args.registry_csv or app_settings.registry_csv_path):
        if not app_settings.google_sheets_spreadsheet_id:
            missing.append("GOOGLE_SHEETS_SPREADSHEET_ID (or --registry-csv PATH)")
        elif not app_settings.has_google_credentials():
            missing.append("GOOGLE_ACCESS_TOKEN or GOOGLE_API_KEY for the registry sheet")
    return missing


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _mode_label(args: argparse.Namespace) -> str:
    if args.purge_file:
        return f"purge file {args.purge_file}"
    if args.list_files:
        return "list files"
    parts = ["DRY RUN" if args.dry_run else "live"]
    parts.append("paragraph chunking" if args.no_llm else "LLM transcript chunking")
    if args.force:
        parts.append("force reprocess")
    return ", ".join(parts)


def _print_banner(args: argparse.Namespace, folders: list[DriveFolderConfig]) -> None:
    print("=" * _BANNER_WIDTH)
    print("Grant Portfolio Document Ingestion")
    print("=" * _BANNER_WIDTH)
    print(f"  Mode:    {_mode_label(args)}")
    print(f"  Source:  {args.local or 'Google Drive'}")
    print(f"  Folders: {', '.join(folder.label for folder in folders) or '(none)'}")
    print()


def _print_listings(listings: list[FileListing]) -> None:
    current_folder = None
    for listing in listings:
        if listing.folder_label != current_folder:
            current_folder = listing.folder_label
            print(f"\n[{current_folder}]")
        marker = " " if listing.supported else "x"
        reference = listing.parsed.reference_number or "-"
        name = listing.parsed.grantee_name or "-"
        print(
            f"  {marker} {listing.file.name:<50} {reference:<10} "
            f"{listing.document_type.value:<28} {name}"
        )
    supported = sum(1 for listing in listings if listing.supported)
    print(f"\n{len(listings)} files ({supported} supported)")


def _print_result(result: IngestionResult, duration: float, dry_run: bool) -> None:
    print()
    print("Run summary")
    print("-" * _BANNER_WIDTH)
    print(f"  Duration:        {duration:.1f}s")
    print(f"  Sync generation: {result.sync_generation}")
    print(f"  Files found:     {result.total_files}")
    print(f"  Processed:       {result.processed_files} "
          f"({result.new_files} new, {result.updated_files} updated)")
    print(f"  Skipped:         {result.skipped_files}")
    print(f"  Chunks written:  {result.total_chunks}")
    print(f"  Chunks deleted:  {result.deleted_chunks}")
    print(f"  Errors:          {len(result.errors)}")

    if result.errors:
        print("\n  Errors:")
        for error in result.errors:
            print(f"    {error.file}: {error.error}")

    if result.unmatched_grants:
        print(f"\n  Unmatched grants ({len(result.unmatched_grants)}):")
        for unmatched in result.unmatched_grants:
            print(f"    {unmatched.file} (ref: {unmatched.reference_number or 'none'})")

    if dry_run:
        print("\n  DRY RUN: nothing was written to the chunk store.")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_purge(args: argparse.Namespace, app_settings: Settings) -> int:
    from src.services.ingestion.sync_state import SyncStateTracker

    deleted = await SyncStateTracker(_build_store(app_settings)).delete_chunks_for_source_file(
        args.purge_file
    )
    print(f"Deleted {deleted} chunks for file {args.purge_file}.")
    return 0


async def _handle_run(
    args: argparse.Namespace,
    app_settings: Settings,
    folders: list[DriveFolderConfig],
) -> int:
    async with httpx.AsyncClient(timeout=_HTTP_TIMEOUT_SECONDS) as http_client:
        if args.list_files:
            # Drive only: no registry and no store are opened in list mode.
            from src.services.ingestion.ingestion_service import list_folder_files

            selected = [f for f in folders if not args.folder or f.folder_id in args.folder]
            drive = _build_drive(args, app_settings, http_client, folders)
            _print_listings(await list_folder_files(drive, selected))
            return 0

        service = _build_ingestion_service(args, app_settings, http_client, folders)

        options = IngestionOptions(
            use_llm_chunking=not args.no_llm,
            dry_run=args.dry_run,
            folder_ids=args.folder,
            force_reprocess=args.force,
        )
        start = time.monotonic()
        try:
            result = await service.run(options)
        except IngestionRunError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            if exc.result is not None:
                _print_result(exc.result, time.monotonic() - start, args.dry_run)
            return 1

    _print_result(result, time.monotonic() - start, args.dry_run)
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.ingest",
        description="Sync grant documents from the shared drive into the chunk store.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Process files but write nothing to the chunk store",
    )
    parser.add_argument(
        "--no-llm",
        action="store_true",
        dest="no_llm",
        help="Use paragraph chunking for transcripts instead of the LLM",
    )
    parser.add_argument(
        "--folder",
        action="append",
        metavar="ID",
        help="Only process this drive folder id (repeatable)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Reprocess files even when their timestamp is unchanged",
    )
    parser.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Classify files only; no extraction or writes",
    )
    parser.add_argument(
        "--purge-file",
        metavar="FILE_ID",
        dest="purge_file",
        help="Delete every chunk for one source file id and exit",
    )
    parser.add_argument(
        "--local",
        metavar="PATH",
        help="Read documents from a local directory tree instead of Google Drive",
    )
    parser.add_argument(
        "--registry-csv",
        metavar="PATH",
        dest="registry_csv",
        help="Read the grant registry from a CSV export instead of Google Sheets",
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="YAML config file (default: config/config.yaml)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        dest="json_logs",
        help="Emit JSON log lines",
    )
    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ingestion tool.

    Missing configuration is reported before any work starts.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Load all configuration from environment variables and .env file.
    app_settings = Settings()
    configure_logging(app_settings.log_level, json_output=args.json_logs)

    missing = _missing_configuration(args, app_settings)
    if missing:
        print("Error: missing required configuration:", file=sys.stderr)
        for item in missing:
            print(f"  {item}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.purge_file:
            sys.exit(asyncio.run(_handle_purge(args, app_settings)))

        folders = load_drive_folders(load_config(args.config, settings=app_settings))
        _print_banner(args, folders)
        exit_code = asyncio.run(_handle_run(args, app_settings, folders))
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)
    except GrantIngestError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
