"""Resolve a document's identity to a grant registry record.

:class:`GrantRegistryCache` holds the registry for the duration of a run.
It is an explicit object owned by the orchestrator (reset at the start of
every run) rather than module state, and concurrent first loads share one
fetch through :class:`~src.utils.concurrency.SingleFlight`.

:class:`GrantResolver` applies three strategies in order:

1. exact reference-number match;
2. case-insensitive substring containment of the grantee name, in either
   direction;
3. word overlap: the share of the name's words (longer than two
   characters) found in a record's grantee name, best score at or above
   0.5, ties keeping the earlier record.
"""

from __future__ import annotations

import structlog

from src.interfaces.grant_registry_provider import IGrantRegistryProvider
from src.models.grants import GrantRecord
from src.utils.concurrency import SingleFlight

logger = structlog.get_logger(logger_name=__name__)

_REGISTRY_KEY = "registry"
MIN_NAME_LENGTH = 3
MIN_WORD_LENGTH = 3
WORD_OVERLAP_THRESHOLD = 0.5


class GrantRegistryCache:
    """Lazily loaded, resettable copy of the grant registry."""

    def __init__(self, provider: IGrantRegistryProvider) -> None:
        self._provider = provider
        self._records: list[GrantRecord] | None = None
        self._flight: SingleFlight[list[GrantRecord]] = SingleFlight()

    async def get(self) -> list[GrantRecord]:
        """Return the registry, fetching it on first use.

        Raises
        ------
        src.utils.errors.RegistryError
            Propagated from the provider; nothing is cached on failure.
        """
        if self._records is None:
            self._records = await self._flight.do(_REGISTRY_KEY, self._provider.fetch_all_records)
            logger.info("grant_registry_cached", records=len(self._records))
        return self._records

    def reset(self) -> None:
        self._records = None

    @property
    def is_loaded(self) -> bool:
        return self._records is not None


class GrantResolver:
    """Match (reference number, grantee name) pairs against the registry."""

    def __init__(self, cache: GrantRegistryCache) -> None:
        self._cache = cache

    async def resolve(
        self,
        reference_number: str | None,
        grantee_name: str | None,
    ) -> GrantRecord | None:
        records = await self._cache.get()
        return match_grant(records, reference_number, grantee_name)


def match_grant(
    records: list[GrantRecord],
    reference_number: str | None,
    grantee_name: str | None,
) -> GrantRecord | None:
    """Pure matching logic behind :meth:`GrantResolver.resolve`."""
    if reference_number:
        for record in records:
            if record.reference_number == reference_number:
                return record

    if not grantee_name:
        return None
    normalized = grantee_name.lower().strip()
    if len(normalized) < MIN_NAME_LENGTH:
        return None

    # Records with a blank name would "contain" every query.
    named = [(record, record.grantee_name.lower()) for record in records if record.grantee_name.strip()]

    for record, record_name in named:
        if normalized in record_name or record_name in normalized:
            return record

    query_words = [word for word in normalized.split() if len(word) >= MIN_WORD_LENGTH]
    if not query_words:
        return None

    best_match: GrantRecord | None = None
    best_score = 0.0
    for record, record_name in named:
        matched = sum(1 for word in query_words if word in record_name)
        score = matched / len(query_words)
        if score > best_score and score >= WORD_OVERLAP_THRESHOLD:
            best_score = score
            best_match = record

    return best_match
