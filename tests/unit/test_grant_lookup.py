"""Unit tests for grant identity resolution and the registry cache."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.interfaces.grant_registry_provider import IGrantRegistryProvider
from src.models.grants import GrantRecord
from src.services.ingestion.grant_lookup import GrantRegistryCache, GrantResolver, match_grant
from src.utils.errors import RegistryError


def _make_grant(reference_number: str, grantee_name: str) -> GrantRecord:
    return GrantRecord(reference_number=reference_number, grantee_name=grantee_name)


_RECORDS = [
    _make_grant("2024010B", "Acme Org"),
    _make_grant("2023005A", "Bright Futures Workforce Alliance"),
    _make_grant("2025001C", "Kenya Digital Skills Trust"),
]


class TestMatchGrant:
    def test_exact_reference_number(self) -> None:
        grant = match_grant(_RECORDS, "2023005A", "Something Else Entirely")
        assert grant is not None
        assert grant.reference_number == "2023005A"

    def test_unknown_reference_falls_through_to_name(self) -> None:
        grant = match_grant(_RECORDS, "2029999", "Acme Org")
        assert grant is not None
        assert grant.reference_number == "2024010B"

    def test_name_contained_in_record(self) -> None:
        grant = match_grant(_RECORDS, None, "bright futures")
        assert grant is not None
        assert grant.reference_number == "2023005A"

    def test_record_name_contained_in_query(self) -> None:
        grant = match_grant(_RECORDS, None, "Acme Org Final Notes")
        assert grant is not None
        assert grant.reference_number == "2024010B"

    def test_word_overlap_above_threshold(self) -> None:
        # "kenya" and "skills" match, "academy" does not: 2/3 >= 0.5.
        grant = match_grant(_RECORDS, None, "Kenya Skills Academy")
        assert grant is not None
        assert grant.reference_number == "2025001C"

    def test_word_overlap_below_threshold(self) -> None:
        # Only "digital" matches out of three words.
        assert match_grant(_RECORDS, None, "Nairobi Digital Collective") is None

    @pytest.mark.parametrize(
        "query, expected",
        [
            ("solar sisterhood program", "2022001A"),
            ("Toolkit Africa Kenya", "2022002A"),
            ("xyz", None),
        ],
    )
    def test_small_registry_name_queries(self, query: str, expected: str | None) -> None:
        records = [_make_grant("2022001A", "Solar Sister"), _make_grant("2022002A", "Toolkit Africa")]

        grant = match_grant(records, None, query)

        assert (grant.reference_number if grant else None) == expected

    def test_word_overlap_ignores_short_words(self) -> None:
        # "of" and "an" are ignored, leaving "acme" (1/1).
        grant = match_grant([_make_grant("2024010B", "The Acme Org")], None, "of an acme")
        assert grant is not None

    def test_word_overlap_ties_keep_first_record(self) -> None:
        records = [
            _make_grant("2024001A", "Harbor Jobs Network"),
            _make_grant("2024002A", "Harbor Jobs Partners"),
        ]
        grant = match_grant(records, None, "Harbor Jobs Coalition Group")
        assert grant is not None
        assert grant.reference_number == "2024001A"

    def test_short_name_rejected(self) -> None:
        assert match_grant(_RECORDS, None, "ac") is None

    def test_no_identity(self) -> None:
        assert match_grant(_RECORDS, None, None) is None

    def test_blank_registry_names_do_not_match_everything(self) -> None:
        records = [_make_grant("2024009Z", ""), _make_grant("2024010B", "Acme Org")]
        grant = match_grant(records, None, "Acme Org")
        assert grant is not None
        assert grant.reference_number == "2024010B"

    def test_empty_registry(self) -> None:
        assert match_grant([], "2024010B", "Acme Org") is None


class TestGrantRegistryCache:
    @pytest.fixture()
    def provider(self) -> IGrantRegistryProvider:
        mock = MagicMock(spec=IGrantRegistryProvider)
        mock.get_provider_name.return_value = "mock-registry"
        mock.fetch_all_records = AsyncMock(return_value=list(_RECORDS))
        return mock

    @pytest.mark.asyncio
    async def test_loads_once(self, provider) -> None:
        cache = GrantRegistryCache(provider)
        assert not cache.is_loaded

        first = await cache.get()
        second = await cache.get()

        assert first is second
        assert cache.is_loaded
        provider.fetch_all_records.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reset_forces_reload(self, provider) -> None:
        cache = GrantRegistryCache(provider)
        await cache.get()
        cache.reset()
        await cache.get()
        assert provider.fetch_all_records.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_first_loads_share_one_fetch(self, provider) -> None:
        release = asyncio.Event()

        async def slow_fetch() -> list[GrantRecord]:
            await release.wait()
            return list(_RECORDS)

        provider.fetch_all_records = AsyncMock(side_effect=slow_fetch)
        cache = GrantRegistryCache(provider)

        waiters = [asyncio.create_task(cache.get()) for _ in range(5)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters)

        provider.fetch_all_records.assert_awaited_once()
        assert all(len(r) == 3 for r in results)

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, provider) -> None:
        provider.fetch_all_records = AsyncMock(
            side_effect=[RegistryError("sheet unavailable"), list(_RECORDS)]
        )
        cache = GrantRegistryCache(provider)

        with pytest.raises(RegistryError):
            await cache.get()
        assert not cache.is_loaded

        records = await cache.get()
        assert len(records) == 3


class TestGrantResolver:
    @pytest.mark.asyncio
    async def test_resolve_uses_cache(self, mock_registry_provider) -> None:
        resolver = GrantResolver(GrantRegistryCache(mock_registry_provider))

        grant = await resolver.resolve("2024010B", None)
        missing = await resolver.resolve(None, "Unknown Grantee")

        assert grant is not None
        assert grant.grantee_name == "Acme Org"
        assert missing is None
        mock_registry_provider.fetch_all_records.assert_awaited_once()
