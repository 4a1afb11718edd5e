# feature_board/config/settings.py
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get project root (2 levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_llm_model: str = "gpt-4o-mini"

    # PostgreSQL (primary store)
    postgres_host: Optional[str] = None
    postgres_port: int = 5432
    postgres_database: Optional[str] = None
    postgres_username: Optional[str] = None
    postgres_password: Optional[str] = None
    postgres_sslmode: str = "prefer"
    postgres_pool_size: int = 5
    postgres_pool_timeout_seconds: float = 10.0

    # Automation
    cron_secret: Optional[str] = None
    tagging_batch_size: int = 50
    job_timeout_seconds: float = 25.0
    tagging_delay_seconds: float = 0.5
    insight_delay_seconds: float = 1.0
    min_theme_size: int = 2
    tagging_claim_timeout_seconds: float = 600.0

    # Export
    export_dir: str = "exports"

    # Store fallback
    availability_ttl_seconds: float = 30.0
    seed_fallback_store: bool = True

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    log_level: str = "INFO"

    def postgres_configured(self) -> bool:
        """True when every connection field the primary store needs is set."""
        return all([
            self.postgres_host,
            self.postgres_database,
            self.postgres_username,
            self.postgres_password,
        ])

    def export_path(self) -> Path:
        path = Path(self.export_dir)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path.resolve()


@lru_cache
def get_settings() -> Settings:
    return Settings()
