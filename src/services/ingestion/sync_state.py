"""Sync bookkeeping kept in the chunk store itself.

There is no separate state database: every chunk carries the source file's
id, its modification timestamp at ingestion time, and the run's sync
generation.  Change detection compares the stored timestamp string with
the drive's current one, verbatim.  A file edited without the timestamp
moving is therefore never re-ingested unless the run is forced.
"""

from __future__ import annotations

import structlog

from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.models.documents import StoredChunk
from src.utils.errors import RAGError

logger = structlog.get_logger(logger_name=__name__)

_QUERY_LIMIT = 1000


class SyncStateTracker:
    """Read and clear per-file sync state through an :class:`IVectorStoreProvider`."""

    def __init__(self, store: IVectorStoreProvider) -> None:
        self._store = store

    async def latest_generation(self) -> int:
        """Highest ``sync_generation`` in the store; 0 when empty or unreadable.

        The store has no aggregate query, so this repeatedly asks for chunks
        above the best generation seen so far until none remain.
        """
        best = 0
        try:
            while True:
                chunks = await self._store.query_by_filter(
                    {"sync_generation": {"$gt": best}}, top_k=_QUERY_LIMIT
                )
                generations = [_as_int(c.metadata.get("sync_generation")) for c in chunks]
                highest = max(generations, default=best)
                if highest <= best:
                    return best
                best = highest
        except RAGError as exc:
            logger.warning("sync_generation_query_failed", error=str(exc))
            return 0

    async def chunks_for_source_file(self, file_id: str) -> list[StoredChunk]:
        """Every stored chunk for *file_id*.

        Raises
        ------
        src.utils.errors.RAGError
            If the store query fails.
        """
        return await self._store.query_by_filter({"drive_file_id": file_id}, top_k=_QUERY_LIMIT)

    async def should_skip(self, file_id: str, modified_time: str) -> bool:
        """True when chunks for *file_id* exist with the same modification time."""
        try:
            chunks = await self._store.query_by_filter({"drive_file_id": file_id}, top_k=1)
        except RAGError as exc:
            logger.warning("sync_skip_check_failed", file_id=file_id, error=str(exc))
            return False
        if not chunks:
            return False
        return chunks[0].metadata.get("drive_file_modified") == modified_time

    async def delete_chunks_for_source_file(self, file_id: str) -> int:
        """Delete every chunk for *file_id* and return how many were removed."""
        deleted = 0
        # Queries are capped, so keep going until nothing is left.
        while True:
            chunks = await self.chunks_for_source_file(file_id)
            if not chunks:
                break
            deleted += await self._store.delete_by_ids([c.id for c in chunks])
            if len(chunks) < _QUERY_LIMIT:
                break
        if deleted:
            logger.info("sync_chunks_deleted", file_id=file_id, deleted=deleted)
        return deleted


def _as_int(value: object) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return int(str(value))
    except ValueError:
        return 0
