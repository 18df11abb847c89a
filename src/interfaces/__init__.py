"""Public interface definitions for all external service providers.

Every external system the ingestion pipeline touches is accessed through
the abstract base classes in this package. Concrete adapters implement
these interfaces and are wired together in the CLI, so the services in
``src/services/ingestion`` never import an SDK directly and unit tests can
inject ``MagicMock(spec=...)`` stand-ins.

CONCRETE PROVIDER MAP:
    Interface                  →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────────
    IDriveProvider             →  GoogleDriveProvider, LocalDriveProvider
    IGrantRegistryProvider     →  GoogleSheetsRegistryProvider,
                                  CSVRegistryProvider
    IVectorStoreProvider       →  ChromaDBProvider
    ILLMProvider               →  AnthropicLLMProvider, OpenAILLMProvider
"""

from src.interfaces.drive_provider import FOLDER_MIME_TYPE, IDriveProvider
from src.interfaces.grant_registry_provider import IGrantRegistryProvider
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "FOLDER_MIME_TYPE",
    "IDriveProvider",
    "IGrantRegistryProvider",
    "ILLMProvider",
    "IVectorStoreProvider",
]
