"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# pydantic-settings reads configuration from TWO sources (in priority
# order):
#
#   1. **Environment variables**: e.g., KOLOSAL_SERVER_URL=http://gpu:8084
#   2. **.env file**: key=value lines in the project root .env file
#
# Field `kolosal_server_url` maps to env var `KOLOSAL_SERVER_URL`
# (pydantic-settings uppercases and matches).  Defaults are used when
# neither source defines a field.
#
# The three service base URLs and the embedding model name are the only
# settings the upstream services care about; everything else tunes this
# console process.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Kolosal console settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === External services ===
    # Defaults target the Docker host, where the three services usually run.
    kolosal_server_url: str = "http://host.docker.internal:8084"
    markitdown_server_url: str = "http://host.docker.internal:8081"
    docling_server_url: str = "http://host.docker.internal:8082"

    # === Models ===
    # Sent as `model_name` on every /chunking call.
    embedding_model_name: str = "qwen3-embedding-4b"

    # === Transport ===
    # OCR conversions of large PDFs are slow; keep this generous.
    http_timeout_seconds: float = Field(default=120.0, gt=0)

    # === Ingestion defaults ===
    default_similarity_threshold: float = 0.6
    retrieve_default_limit: int = 10
    retrieve_default_score_threshold: float = 0.5

    # === App Config ===
    # Browser origins allowed to call the API; JSON list in the environment,
    # e.g. CORS_ALLOWED_ORIGINS='["http://localhost:3001"]'.
    cors_allowed_origins: list[str] = ["*"]
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"
