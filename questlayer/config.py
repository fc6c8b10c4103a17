"""Runtime configuration for the ingestion service.

Values are read from the environment (prefix ``QUESTLAYER_``) or a local
``.env`` file and passed explicitly into the pipeline.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUESTLAYER_", env_file=".env", extra="ignore"
    )

    # Persistence backend; empty means the service is not configured
    database_url: str = ""

    # Optional pipeline stages
    enable_rewrite: bool = True
    enable_browser: bool = False

    # Text-generation capability (OpenAI-compatible chat completions)
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"
    llm_api_key: str = ""

    # Text-extraction relay; the scheme-stripped target URL is appended
    reader_base_url: str = "https://r.jina.ai/http://"

    log_level: str = "INFO"

    fetch_timeout: float = 9.0  # seconds
    rewrite_timeout: float = 12.0  # seconds


@lru_cache
def get_settings() -> Settings:
    return Settings()
