"""Shared pytest fixtures for the grant ingestion test suite."""

from __future__ import annotations

import hashlib
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import chromadb
import pytest
import structlog

from src.interfaces.drive_provider import IDriveProvider
from src.interfaces.grant_registry_provider import IGrantRegistryProvider
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.models.documents import DocumentType, DriveFolderConfig
from src.models.grants import GrantRecord

# ---------------------------------------------------------------------------
# Deterministic embeddings for the real ChromaDB store
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 16


class HashingEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Hash-derived vectors so tests never download an embedding model."""

    def __init__(self) -> None:
        pass

    def __call__(self, input: list[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for text in input:
            digest = hashlib.sha256(text.encode("utf-8")).digest()
            vectors.append([byte / 255.0 + 0.01 for byte in digest[:_EMBEDDING_DIM]])
        return vectors

    @staticmethod
    def name() -> str:
        return "test_hashing"


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_grant(
    reference_number: str = "2024010B",
    grantee_name: str = "Acme Org",
    **overrides: object,
) -> GrantRecord:
    fields: dict[str, object] = {
        "reference_number": reference_number,
        "grantee_name": grantee_name,
        "grantee_id": 42,
        "grantee_country": "United States",
        "program_officer": "Dana Reyes",
        "grant_amount": 250000.0,
        "fiscal_year": 2024.0,
        "active": True,
        "roi_lifetime_income_gain": 4.2,
        "estimated_total_people_served": 1200.0,
        "cost_per_person": 208.33,
        "pct_change_in_annual_income": 0.18,
    }
    fields.update(overrides)
    return GrantRecord(**fields)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _silent_structlog() -> None:
    """Discard log output so no logger is cached against a captured stream."""
    structlog.configure(
        processors=[structlog.processors.add_log_level],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def embedding_function() -> HashingEmbeddingFunction:
    return HashingEmbeddingFunction()


@pytest.fixture
def chroma_store(tmp_path: Path, embedding_function: HashingEmbeddingFunction):
    """A real ChromaDB store persisted under the test's tmp directory."""
    from src.providers.vector_store.chromadb_provider import ChromaDBProvider

    return ChromaDBProvider(
        persist_directory=str(tmp_path / "chroma"),
        collection_name="test_grants",
        embedding_function=embedding_function,
    )


@pytest.fixture
def grant_records() -> list[GrantRecord]:
    return [
        make_grant(),
        make_grant("2023005A", "Bright Futures Workforce Alliance", grantee_id=7),
        make_grant("2025001C", "Kenya Digital Skills Trust", grantee_country="Kenya"),
    ]


@pytest.fixture
def mock_registry_provider(grant_records: list[GrantRecord]) -> IGrantRegistryProvider:
    """Mock IGrantRegistryProvider returning :func:`grant_records`."""
    mock = MagicMock(spec=IGrantRegistryProvider)
    mock.get_provider_name.return_value = "mock-registry"
    mock.fetch_all_records = AsyncMock(return_value=grant_records)
    return mock


@pytest.fixture
def mock_drive_provider() -> IDriveProvider:
    mock = MagicMock(spec=IDriveProvider)
    mock.get_provider_name.return_value = "mock-drive"
    mock.list_files_recursive = AsyncMock(return_value=[])
    mock.download = AsyncMock(return_value=b"")
    mock.export_as_plain_text = AsyncMock(return_value="")
    return mock


@pytest.fixture
def mock_vector_store() -> IVectorStoreProvider:
    """Mock IVectorStoreProvider with an empty store."""
    mock = MagicMock(spec=IVectorStoreProvider)
    mock.get_provider_name.return_value = "mock-store"
    mock.is_available.return_value = True
    mock.upsert = AsyncMock(side_effect=lambda chunks: len(chunks))
    mock.query_by_filter = AsyncMock(return_value=[])
    mock.delete_by_ids = AsyncMock(side_effect=lambda ids: len(ids))
    mock.delete_by_filter = AsyncMock(return_value=0)
    return mock


@pytest.fixture
def mock_llm_provider() -> ILLMProvider:
    """Mock ILLMProvider that returns configurable responses.

    Override with ``mock_llm_provider.complete.return_value = "..."`` or
    ``mock_llm_provider.complete.side_effect = ...`` in specific tests.
    """
    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.is_available.return_value = True
    mock.complete = AsyncMock(return_value='{"segments": [], "summary": ""}')
    return mock


@pytest.fixture
def single_folder() -> list[DriveFolderConfig]:
    return [
        DriveFolderConfig(
            folder_id="folder-gd",
            label="Grant Descriptions US",
            document_type=DocumentType.GRANT_DESCRIPTION,
        )
    ]
