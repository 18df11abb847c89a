"""Utility modules for the grant document ingestion pipeline.

- **errors** -- Exception hierarchy rooted at GrantIngestError; each
  pipeline stage raises its own subclass so the orchestrator can record
  per-file failures without broad handling elsewhere.
- **logging** -- structlog setup with console output for interactive runs
  and JSON output for scheduled runs.
- **concurrency** -- SingleFlight keyed request coalescing used by the
  grant registry cache.
"""

from src.utils.concurrency import SingleFlight
from src.utils.errors import (
    ConfigurationError,
    ExtractionError,
    GrantIngestError,
    IngestionRunError,
    LLMError,
    ProviderUnavailableError,
    RAGError,
    RegistryError,
    SegmentationError,
)
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "ExtractionError",
    "GrantIngestError",
    "IngestionRunError",
    "LLMError",
    "ProviderUnavailableError",
    "RAGError",
    "RegistryError",
    "SegmentationError",
    "SingleFlight",
    "configure_logging",
    "get_logger",
]
