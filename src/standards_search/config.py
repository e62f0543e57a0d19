"""Application settings via pydantic-settings."""

from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global configuration for the standards search service.

    Values can be set via environment variables prefixed with STANDARDS_,
    e.g. STANDARDS_CORPUS_DIR=/path/to/corpus. The AI key is also read from
    GEMINI_API_KEY.
    """

    model_config = SettingsConfigDict(
        env_prefix="STANDARDS_",
        env_file=".env",
        extra="ignore",
    )

    # Corpus (None = bundled seed corpus)
    corpus_dir: Optional[Path] = None

    # Generative AI
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("STANDARDS_GEMINI_API_KEY", "GEMINI_API_KEY", "gemini_api_key"),
    )
    gemini_model: str = "gemini-2.5-flash-lite"
    ai_base_url: str = "https://generativelanguage.googleapis.com"
    ai_timeout: float = 30.0

    # Search
    snippet_window: int = Field(200, gt=0)
    default_search_limit: int = Field(10, gt=0)
    default_global_limit: int = Field(20, gt=0)
    max_limit: int = Field(100, gt=0)
    related_limit: int = Field(5, gt=0)
    similarity_max_features: int = Field(10000, gt=0)

    # HTTP
    cors_origins: List[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = 3001

    log_level: str = "INFO"

    @property
    def ai_enabled(self) -> bool:
        return bool(self.gemini_api_key)
