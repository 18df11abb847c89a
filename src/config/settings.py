"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# pydantic-settings reads each field from (in priority order):
#
#   1. **Environment variables** - e.g. ANTHROPIC_API_KEY=sk-ant-...
#   2. **.env file** - key=value lines in the project root .env file
#   3. the default declared below
#
# Field ``google_access_token`` maps to env var ``GOOGLE_ACCESS_TOKEN``.
# Empty string means "not configured"; the CLI checks the fields it needs
# for the selected mode before doing any work.
#
# The .env file is never committed. See .env.example for the full list.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Grant ingestion settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === LLM Providers (transcript segmentation) ===
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoints (TogetherAI, etc.)
    openai_text_model: str = ""

    # === Google Drive / Sheets ===
    # Bearer token with drive.readonly + spreadsheets.readonly scopes.
    google_access_token: str = ""
    google_api_key: str = ""
    google_sheets_spreadsheet_id: str = ""
    google_sheets_range: str = "'grantee info'!A:EE"

    # === Local sources (offline runs) ===
    registry_csv_path: str = ""
    local_drive_root: str = ""

    # === Vector Store ===
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_collection: str = "grant_portfolio"
    vector_store_max_text_chars: int = 35000
    vector_store_upsert_batch: int = 96
    vector_store_delete_batch: int = 100

    # === Ingestion tunables ===
    ingest_file_delay_seconds: float = 0.5
    transcript_llm_max_chars: int = 100000

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names that have non-empty API keys configured."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        return providers

    def has_google_credentials(self) -> bool:
        return bool(self.google_access_token or self.google_api_key)
