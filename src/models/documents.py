"""Document, chunk, and run-result models for the ingestion pipeline.

Defines Pydantic v2 models for source files in the shared drive, parsed
filename identities, extracted documents, the chunks written to the vector
store (with their flat metadata record), and the aggregate result of one
ingestion run.

Lifecycle of a document through these models:

    DriveFile            (listed from a drive folder; read-only)
      -> ParsedFilename  (classify the filename; never persisted)
      -> ExtractedDocument (plain text + identity; lives for one file)
      -> DocumentChunk[] (segmented, enriched, upserted to the store)

Chunk metadata is intentionally flat: vector stores only accept scalar
metadata values, and every field is a potential retrieval filter.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Closed vocabularies
# ---------------------------------------------------------------------------
class DocumentType(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """The five kinds of grant document the pipeline understands."""

    GRANT_DESCRIPTION = "grant_description"
    MIDPOINT_CHECKIN_TRANSCRIPT = "midpoint_checkin_transcript"
    MIDPOINT_SURVEY = "midpoint_survey"
    IMPACT_SURVEY = "impact_survey"
    CLOSEOUT_TRANSCRIPT = "closeout_transcript"


class SectionType(str, Enum):  # noqa: UP042 — StrEnum requires Python 3.11+
    """Semantic role of a chunk within its document.

    Each segmentation strategy draws from its own subset:
        - grant descriptions: PROJECT_SUMMARY .. BUDGET
        - transcripts: PROGRESS .. TRANSCRIPT_SUMMARY
        - midpoint surveys: STAGE, PROGRESS, EARLY_SIGNALS, CHALLENGES
        - impact surveys: BREADTH_SCALE .. FINANCIAL
        - any size-based fallback: FULL_DOCUMENT
    """

    # Grant descriptions
    PROJECT_SUMMARY = "project_summary"
    SCOPE_OF_WORK = "scope_of_work"
    PARTNERSHIPS = "partnerships"
    TECHNOLOGY = "technology"
    TIMELINE = "timeline"
    OUTCOMES = "outcomes"
    MEASUREMENT = "measurement"
    BUDGET = "budget"
    # Transcripts
    PROGRESS = "progress"
    CHALLENGES = "challenges"
    PIVOTS = "pivots"
    DATA_MEASUREMENT = "data_measurement"
    ORG_CHANGES = "org_changes"
    FUTURE_PLANS = "future_plans"
    SUPPORT_REQUESTS = "support_requests"
    NOTABLE_QUOTES = "notable_quotes"
    TRANSCRIPT_SUMMARY = "transcript_summary"
    # Midpoint surveys
    STAGE = "stage"
    EARLY_SIGNALS = "early_signals"
    # Impact surveys
    BREADTH_SCALE = "breadth_scale"
    DEPTH_OUTCOMES = "depth_outcomes"
    LEARNINGS = "learnings"
    FEEDBACK = "feedback"
    FINANCIAL = "financial"
    # Fallback
    FULL_DOCUMENT = "full_document"


# ---------------------------------------------------------------------------
# Drive-side models
# ---------------------------------------------------------------------------
class DriveFile(BaseModel):
    """A file listed from the document drive (the Source Document).

    ``modified_time`` is kept as the exact string the drive reported: the
    sync tracker compares it verbatim against the value stored on chunks.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Opaque, stable drive file id.")
    name: str = Field(description="Filename including extension.")
    mime_type: str = Field(description="Drive-reported media type.")
    modified_time: str = Field(default="", description="Last-modified timestamp string.")
    size: int | None = Field(default=None, ge=0, description="Size in bytes, if known.")
    web_view_link: str | None = Field(default=None, description="Browser link to the file.")


class DriveFolderConfig(BaseModel):
    """One configured source folder and the document type assumed for it."""

    model_config = ConfigDict(frozen=True)

    folder_id: str
    label: str
    # Used when the filename classifier cannot infer a type.
    document_type: DocumentType


class ParsedFilename(BaseModel):
    """Identity fields inferred from a filename. Every field may be ``None``."""

    model_config = ConfigDict(frozen=True)

    reference_number: str | None = None
    document_type: DocumentType | None = None
    grantee_name: str | None = None


class ExtractedDocument(BaseModel):
    """A source file after text extraction, before segmentation."""

    model_config = ConfigDict(frozen=True)

    file: DriveFile
    text: str
    document_type: DocumentType
    reference_number: str | None = None
    grantee_name: str | None = None


# ---------------------------------------------------------------------------
# Chunk models
# ---------------------------------------------------------------------------
class ChunkMetadata(BaseModel):
    """Flat, denormalised metadata stored with every chunk.

    Registry-derived fields default to empty values when no grant record
    resolved; sync-tracking fields are filled in by the enricher just before
    the chunk is written.
    """

    model_config = ConfigDict(frozen=True)

    # --- Grant identity (from the registry record) ---
    reference_number: str = ""
    grantee_id: int = 0
    grantee_name: str = ""
    grantee_country: str = ""
    state: str = ""
    program_officer: str = ""
    rfp: str = ""
    grant_portfolio_type: str = ""
    intervention_area_primary: str = ""
    intervention_area_secondary: str = ""
    impact_pathway: str = ""
    labor_market_sector: str = ""
    project_mechanism: str = ""
    primary_population_focus: str = ""
    grant_amount: float | None = None
    grant_title: str = ""
    active: bool = False
    fiscal_year: int | None = None

    # --- Pre-computed impact metrics ---
    roi: float | None = None
    people_served: float | None = None
    cost_per_person: float | None = None
    income_change_pct: float | None = None

    # --- Document level ---
    document_type: DocumentType
    document_date: str = ""
    source_file: str = ""
    drive_url: str = ""

    # --- Chunk level ---
    chunk_index: int = Field(default=0, ge=0)
    chunk_uid: str = ""
    section_type: SectionType = SectionType.FULL_DOCUMENT
    section_heading: str = ""

    # --- Sync tracking ---
    drive_file_id: str = ""
    drive_file_modified: str = ""
    ingestion_timestamp: int = Field(default=0, description="Epoch milliseconds.")
    sync_generation: int = Field(default=0, ge=0)


class DocumentChunk(BaseModel):
    """One retrievable unit: text plus its metadata record."""

    model_config = ConfigDict(frozen=True)

    chunk_uid: str
    text: str
    metadata: ChunkMetadata


class StoredChunk(BaseModel):
    """A chunk as returned by a metadata-only vector-store query."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    metadata: dict[str, str | int | float | bool] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Run configuration and result
# ---------------------------------------------------------------------------
class IngestionOptions(BaseModel):
    """Switches for a single ingestion run."""

    model_config = ConfigDict(frozen=True)

    use_llm_chunking: bool = True
    dry_run: bool = False
    folder_ids: list[str] | None = None
    force_reprocess: bool = False


class FileError(BaseModel):
    model_config = ConfigDict(frozen=True)

    file: str
    error: str


class UnmatchedGrant(BaseModel):
    model_config = ConfigDict(frozen=True)

    file: str
    reference_number: str | None = None


class FileListing(BaseModel):
    """A classified file, as reported by list-only mode."""

    model_config = ConfigDict(frozen=True)

    folder_label: str
    file: DriveFile
    parsed: ParsedFilename
    document_type: DocumentType
    supported: bool


class IngestionResult(BaseModel):
    """Aggregate outcome of one ingestion run.

    Unlike the other models this one is mutable: the orchestrator fills it
    in as the run progresses, and a partially filled instance is attached
    to :class:`~src.utils.errors.IngestionRunError` when the run fails.
    A run that returns normally may still carry per-file ``errors``.
    """

    total_files: int = 0
    processed_files: int = 0
    new_files: int = 0
    updated_files: int = 0
    skipped_files: int = 0
    total_chunks: int = 0
    deleted_chunks: int = 0
    sync_generation: int = 0
    errors: list[FileError] = Field(default_factory=list)
    unmatched_grants: list[UnmatchedGrant] = Field(default_factory=list)
