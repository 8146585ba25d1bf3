"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI Vision Configuration
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_timeout: float = 60.0  # seconds
    openai_max_retries: int = 3
    openai_max_tokens: int = 1000

    # Google Cloud Vision Configuration
    google_api_key: str = ""
    google_vision_url: str = "https://vision.googleapis.com/v1/images:annotate"
    google_vision_timeout: float = 30.0

    # LLM Settings
    llm_temperature: float = 0.1

    # Analysis orchestration
    analysis_providers: list[str] = ["openai", "google"]  # priority order
    analysis_max_failures: int = 3

    # Image handling
    image_download_timeout: float = 30.0
    image_url_allowed_hosts: list[str] = []  # e.g. ["abc.supabase.co"]; empty disables URL images
    max_image_size_bytes: int = 10 * 1024 * 1024  # 10 MB

    # App
    debug: bool = False
    log_level: str = "INFO"
    app_name: str = "Calorie Tracker API"
    api_version: str = "1.0.0"

    @property
    def is_openai_configured(self) -> bool:
        """Check if the OpenAI vision provider has credentials."""
        return bool(self.openai_api_key)

    @property
    def is_google_configured(self) -> bool:
        """Check if the Google Cloud Vision provider has credentials."""
        return bool(self.google_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
