"""Abstract base class for vector-store service providers.

Defines the contract the ingestion pipeline needs from the chunk store:
batched upserts, metadata-only queries, and deletes by id or by filter.
Embedding happens inside the store (or its client library), so callers hand
over plain text and flat metadata.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.models.documents import DocumentChunk, StoredChunk


# Concrete implementation: ChromaDBProvider (src/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for the chunk store written by the ingestion pipeline.

    **Supported filter syntax** (the *filters* dict of
    :meth:`query_by_filter` and :meth:`delete_by_filter`):

    * ``{"drive_file_id": "abc"}`` - equality on a metadata field.
    * ``{"sync_generation": {"$gt": 3}}`` - comparison operators
      ``$gt``, ``$gte``, ``$lt``, ``$lte``, ``$ne``.
    * ``{"document_type": {"$in": ["impact_survey", "midpoint_survey"]}}``
    * several top-level keys are combined with logical AND.
    """

    @abstractmethod
    async def upsert(self, chunks: list[DocumentChunk]) -> int:
        """Insert or replace *chunks*, keyed by ``chunk_uid``.

        Text is truncated to the store's maximum length and metadata
        entries whose value is ``None`` are dropped before writing.

        Returns
        -------
        int
            The number of chunks written.

        Raises
        ------
        src.utils.errors.RAGError
            If the store operation fails.
        """

    @abstractmethod
    async def query_by_filter(
        self,
        filters: dict[str, Any],
        top_k: int = 1000,
        include_metadata: bool = True,
    ) -> list[StoredChunk]:
        """Return up to *top_k* stored chunks matching *filters*.

        No similarity ranking is involved; order is backend-defined.

        Raises
        ------
        src.utils.errors.RAGError
            If the query fails.
        """

    @abstractmethod
    async def delete_by_ids(self, ids: list[str]) -> int:
        """Delete chunks by id, in batches. Returns the number requested."""

    @abstractmethod
    async def delete_by_filter(self, filters: dict[str, Any]) -> int:
        """Delete every chunk matching *filters*. Returns the number deleted."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the store is configured and reachable."""
