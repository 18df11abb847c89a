"""Custom exception hierarchy for the grant document ingestion pipeline.

All application exceptions inherit from :class:`GrantIngestError`, which
carries an optional ``provider_name`` so error handlers can identify which
external collaborator (e.g. "google-drive", "chromadb", "anthropic")
caused the failure.

The hierarchy is organized by pipeline stage:

    GrantIngestError  (base -- catch-all for any ingestion error)
    +-- ConfigurationError       (startup / missing credentials or ids)
    +-- ProviderUnavailableError (drive / store / LLM unreachable)
    +-- RegistryError            (structured grant registry failure)
    +-- ExtractionError          (document-to-text conversion)
    +-- SegmentationError        (chunking strategy failure)
    +-- LLMError                 (any LLM API call failure)
    +-- RAGError                 (vector-store failure)
    +-- IngestionRunError        (run-level failure, carries partial result)

Per-file errors are caught by the orchestrator and recorded in the run
result; only ConfigurationError and IngestionRunError are meant to reach
the CLI.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.models.documents import IngestionResult


class GrantIngestError(Exception):
    """Base exception for all ingestion errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[google-drive] 403 Forbidden``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Startup / collaborator errors
# ---------------------------------------------------------------------------

class ConfigurationError(GrantIngestError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(GrantIngestError):
    """Raised when an external service or provider is unreachable."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RegistryError(GrantIngestError):
    """Raised when the structured grant registry cannot be fetched or parsed."""

    def __init__(
        self,
        message: str = "Grant registry unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Document processing errors
# ---------------------------------------------------------------------------

class ExtractionError(GrantIngestError):
    """Raised when a document cannot be converted to plain text."""

    def __init__(
        self,
        message: str = "Text extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SegmentationError(GrantIngestError):
    """Raised when a segmentation strategy cannot produce chunks."""

    def __init__(
        self,
        message: str = "Document segmentation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(GrantIngestError):
    """Raised when an LLM API call fails or returns an unparseable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RAGError(GrantIngestError):
    """Raised when a vector-store operation fails."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Run-level errors
# ---------------------------------------------------------------------------

class IngestionRunError(GrantIngestError):
    """Raised when a whole ingestion run fails.

    The partially filled :class:`~src.models.documents.IngestionResult` is
    attached as ``result`` so callers can still report what happened before
    the failure.
    """

    def __init__(
        self,
        message: str = "Ingestion run failed",
        provider_name: str | None = None,
        result: IngestionResult | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._result = result

    @property
    def result(self) -> IngestionResult | None:
        return self._result
