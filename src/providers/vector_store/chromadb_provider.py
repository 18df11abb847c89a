"""ChromaDB vector store provider adapter.

Wraps `chromadb.PersistentClient` to implement :class:`IVectorStoreProvider`.
Embedding happens inside the collection: chunk text is handed over as
documents and the collection's embedding function (ChromaDB's bundled
default unless one is injected) turns it into vectors.  The ingestion
pipeline never queries by similarity; it only writes chunks and reads them
back by metadata for sync bookkeeping.
"""

from __future__ import annotations

import os
from typing import Any

# Disable ChromaDB telemetry before importing chromadb.  The bundled PostHog
# client breaks against newer posthog releases ("capture() takes 1
# positional argument but 3 were given"), so it is switched off three ways:
#   1. ANONYMIZED_TELEMETRY env var
#   2. posthog.disabled = True
#   3. Settings(anonymized_telemetry=False) on the client
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.models.documents import DocumentChunk, StoredChunk
from src.utils.errors import RAGError

logger = structlog.get_logger(logger_name=__name__)

_MetadataValue = str | int | float | bool


class ChromaDBProvider(IVectorStoreProvider):
    """Chunk store backed by ChromaDB with local persistence.

    Parameters
    ----------
    persist_directory:
        On-disk location of the ChromaDB database.
    collection_name:
        Collection holding every grant-document chunk.
    embedding_function:
        Optional ChromaDB embedding function.  ``None`` keeps ChromaDB's
        default (all-MiniLM-L6-v2 via ONNX).
    max_text_chars, upsert_batch_size, delete_batch_size:
        Store limits; see :class:`~src.config.settings.Settings`.
    """

    def __init__(
        self,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "grant_portfolio",
        embedding_function: chromadb.EmbeddingFunction | None = None,
        max_text_chars: int = 35000,
        upsert_batch_size: int = 96,
        delete_batch_size: int = 100,
    ) -> None:
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._max_text_chars = max_text_chars
        self._upsert_batch_size = upsert_batch_size
        self._delete_batch_size = delete_batch_size

        self._client = chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        kwargs: dict[str, Any] = {
            "name": collection_name,
            "metadata": {"hnsw:space": "cosine"},
        }
        if embedding_function is not None:
            kwargs["embedding_function"] = embedding_function
        self._collection = self._client.get_or_create_collection(**kwargs)

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def upsert(self, chunks: list[DocumentChunk]) -> int:
        """Upsert chunks in batches, truncating text and flattening metadata."""
        if not chunks:
            return 0

        try:
            total_stored = 0
            batch_size = self._upsert_batch_size
            for start in range(0, len(chunks), batch_size):
                batch = chunks[start : start + batch_size]
                self._collection.upsert(
                    ids=[c.chunk_uid for c in batch],
                    documents=[c.text[: self._max_text_chars] for c in batch],
                    metadatas=[self._chunk_to_metadata(c) for c in batch],
                )
                total_stored += len(batch)

            logger.info(
                "chromadb_upsert",
                count=total_stored,
                batches=(len(chunks) + batch_size - 1) // batch_size,
            )
            return total_stored

        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def query_by_filter(
        self,
        filters: dict[str, Any],
        top_k: int = 1000,
        include_metadata: bool = True,
    ) -> list[StoredChunk]:
        try:
            include = ["metadatas", "documents"] if include_metadata else ["documents"]
            page = self._collection.get(
                where=self._translate_filters(filters),
                limit=top_k,
                include=include,
            )
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB query_by_filter failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        ids = page.get("ids") or []
        documents = page.get("documents") or [""] * len(ids)
        metadatas = page.get("metadatas") or [{}] * len(ids)
        return [
            StoredChunk(id=chunk_id, text=text or "", metadata=dict(meta or {}))
            for chunk_id, text, meta in zip(ids, documents, metadatas, strict=True)
        ]

    async def delete_by_ids(self, ids: list[str]) -> int:
        if not ids:
            return 0
        try:
            for start in range(0, len(ids), self._delete_batch_size):
                self._collection.delete(ids=ids[start : start + self._delete_batch_size])
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB delete_by_ids failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("chromadb_delete_by_ids", deleted_count=len(ids))
        return len(ids)

    async def delete_by_filter(self, filters: dict[str, Any]) -> int:
        try:
            existing = self._collection.get(where=self._translate_filters(filters), include=[])
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB delete_by_filter failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return await self.delete_by_ids(list(existing["ids"] or []))

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB collection is accessible."""
        try:
            self._collection.count()
            return True
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _chunk_to_metadata(chunk: DocumentChunk) -> dict[str, _MetadataValue]:
        """Flatten chunk metadata into ChromaDB's scalar-only value types.

        ``None`` values are dropped rather than stored.
        """
        raw = chunk.metadata.model_dump(mode="json")
        return {
            key: value
            for key, value in raw.items()
            if isinstance(value, (str, int, float, bool))
        }

    @staticmethod
    def _translate_filters(filters: dict[str, Any]) -> dict[str, Any] | None:
        """Translate the common filter syntax to a ChromaDB ``where`` clause.

        ChromaDB requires an explicit ``$and`` when more than one field is
        constrained; bare values become ``$eq``.
        """
        clauses: list[dict[str, Any]] = []
        for field, condition in filters.items():
            if isinstance(condition, dict):
                clauses.append({field: condition})
            else:
                clauses.append({field: {"$eq": condition}})

        if not clauses:
            return None
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}
