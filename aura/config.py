"""Configuration loaded from environment (.env) and defaults."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Locate the project root .env file regardless of CWD
_THIS_DIR = Path(__file__).resolve().parent          # aura/
_PROJECT_ROOT = _THIS_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM provider: openai | anthropic
    aura_llm_provider: str = "openai"

    # OpenAI (or any OpenAI-compatible endpoint via base URL)
    openai_api_key: str | None = None
    aura_openai_model: str = "gpt-4o-mini"
    aura_openai_base_url: str | None = None

    # Anthropic
    anthropic_api_key: str | None = None
    aura_anthropic_model: str = "claude-3-5-sonnet-20241022"

    # Security audit
    aura_audit_timeout_seconds: float = 30.0
    aura_audit_max_flags: int = 10

    # Data directory for the file-based store
    aura_data_dir: str = "./data"

    # Postgres DSN; when set the Postgres store is preferred
    aura_database_url: str | None = None

    # Catalog feed (AltStore source) metadata
    aura_catalog_name: str = "Aura Store"
    aura_catalog_identifier: str = "com.aura.store"
    aura_catalog_subtitle: str = "The Open App Market"
    aura_catalog_description: str = "Discover and download apps for iOS."
    aura_catalog_bundle_prefix: str = "com.aura.store"
    aura_catalog_cache_seconds: int = 300

    # CORS origins (comma-separated). Defaults to localhost dev.
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    cors_origin_regex: str | None = None

    # Server port
    port: int = 8000

    # Sliding-window limiter for mutating routes (audits cost model calls)
    rate_limit_max: int = 30
    rate_limit_window: int = 60

    @property
    def data_dir(self) -> Path:
        """Get data directory as Path.

        Relative paths are resolved against the project root (not CWD).
        """
        p = Path(self.aura_data_dir)
        if not p.is_absolute():
            return (_PROJECT_ROOT / p).resolve()
        return p.resolve()

    @property
    def store_dir(self) -> Path:
        """Get the file store directory."""
        return self.data_dir / "store"

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def llm_credentials(self, provider_name: str | None = None) -> tuple[str, str | None, str]:
        """Return (provider_name, api_key, model) for the selected provider."""
        name = (provider_name or self.aura_llm_provider).lower()
        if name == "anthropic":
            return name, self.anthropic_api_key, self.aura_anthropic_model
        return name, self.openai_api_key, self.aura_openai_model

    def ensure_dirs(self) -> None:
        """Ensure all data directories exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.store_dir.mkdir(parents=True, exist_ok=True)


def get_settings() -> Settings:
    settings = Settings()
    settings.ensure_dirs()
    return settings
