"""Application configuration using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Application settings, configurable via environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Path("data")

    # Logging
    log_level: LogLevel = "INFO"
    log_file_enabled: bool = False
    log_file_path: Path | None = None
    log_file_max_bytes: int = 10 * 1024 * 1024  # 10 MB
    log_file_backup_count: int = 5

    @property
    def resolved_log_file_path(self) -> Path:
        """Return log file path, defaulting to data_dir/lingopop.log if not set."""
        return self.log_file_path or self.data_dir / "lingopop.log"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "lingopop.db"

    @property
    def export_dir(self) -> Path:
        return self.data_dir / "exports"

    # Gemini
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("gemini_api_key", "api_key"),
    )
    text_model: str = "gemini-2.5-flash"
    pro_image_model: str = "gemini-3-pro-image-preview"
    fast_image_model: str = "gemini-2.5-flash-image"

    # Speech
    speech_model: str = "gemini-2.5-flash-preview-tts"
    speech_voice: str = "Kore"
    speech_sample_rate: int = 24000

    # Languages
    native_lang: str = "en"
    target_lang: str = "es"


settings = Settings()
