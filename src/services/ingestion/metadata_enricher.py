"""Build the flat metadata record attached to every chunk.

Registry values win when a grant was resolved; otherwise the reference
number and grantee name parsed from the filename are used and every other
registry-derived field keeps its empty default (``""``, ``None`` or
``False``).  Both functions are pure.
"""

from __future__ import annotations

from src.models.documents import ChunkMetadata, DocumentChunk, DriveFile, ExtractedDocument
from src.models.grants import GrantRecord

# ChunkMetadata field -> GrantRecord field, where the names differ.
_RENAMED_FIELDS: dict[str, str] = {
    "roi": "roi_lifetime_income_gain",
    "people_served": "estimated_total_people_served",
    "income_change_pct": "pct_change_in_annual_income",
}

# Copied under the same name.
_DIRECT_FIELDS: tuple[str, ...] = (
    "grantee_id",
    "grantee_country",
    "state",
    "program_officer",
    "rfp",
    "grant_portfolio_type",
    "intervention_area_primary",
    "intervention_area_secondary",
    "impact_pathway",
    "labor_market_sector",
    "project_mechanism",
    "primary_population_focus",
    "grant_amount",
    "grant_title",
    "active",
    "cost_per_person",
)


def _grant_fields(grant: GrantRecord) -> dict[str, object]:
    fields: dict[str, object] = {name: getattr(grant, name) for name in _DIRECT_FIELDS}
    for target, source in _RENAMED_FIELDS.items():
        fields[target] = getattr(grant, source)
    fields["fiscal_year"] = int(grant.fiscal_year) if grant.fiscal_year is not None else None
    return fields


def build_base_metadata(doc: ExtractedDocument, grant: GrantRecord | None) -> ChunkMetadata:
    """Document-level metadata shared by all chunks of *doc*."""
    fields: dict[str, object] = {
        "reference_number": doc.reference_number or "",
        "grantee_name": doc.grantee_name or "",
        "document_type": doc.document_type,
        "document_date": doc.file.modified_time,
        "source_file": doc.file.name,
        "drive_url": doc.file.web_view_link or "",
    }
    if grant is not None:
        fields.update(_grant_fields(grant))
        fields["reference_number"] = grant.reference_number
        if grant.grantee_name:
            fields["grantee_name"] = grant.grantee_name
    return ChunkMetadata(**fields)


def enrich_chunk(
    chunk: DocumentChunk,
    file: DriveFile,
    grant: GrantRecord | None,
    sync_generation: int,
    ingested_at: int,
) -> DocumentChunk:
    """Return a copy of *chunk* stamped with sync-tracking fields.

    ``ingested_at`` is epoch milliseconds.  Registry fields are re-applied
    so a chunk built from stale base metadata still carries current values.
    """
    update: dict[str, object] = {
        "drive_file_id": file.id,
        "drive_file_modified": file.modified_time,
        "ingestion_timestamp": ingested_at,
        "sync_generation": sync_generation,
    }
    if grant is not None:
        update.update(_grant_fields(grant))
        update["reference_number"] = grant.reference_number
        if grant.grantee_name:
            update["grantee_name"] = grant.grantee_name

    return chunk.model_copy(update={"metadata": chunk.metadata.model_copy(update=update)})
