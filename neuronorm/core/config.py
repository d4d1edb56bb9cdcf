from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="NeuroNorm Scoring API")
    environment: Literal["dev", "test", "staging", "prod"] = Field(default="dev")
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    catalog_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding manifest.yaml; defaults to the packaged catalog",
    )
    strict_monotonicity: bool = Field(
        default=True,
        description="Reject tables whose normative values run against the declared direction",
    )
    debug_instrumentation_enabled: bool = Field(default=True)

    @field_validator("catalog_dir", mode="before")
    @classmethod
    def _normalize_blank_path(cls, value: object) -> Optional[str | Path]:
        if value in (None, "", b""):
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        if isinstance(value, Path):
            return value
        raise TypeError("CATALOG_DIR must be a filesystem path")

    @computed_field(return_type=bool)
    def is_production(self) -> bool:
        return self.environment == "prod"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
