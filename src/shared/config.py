"""Shared configuration management using pydantic-settings."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from src.shared.constants import MAX_CONTENT_LENGTH


class SharedConfig(BaseSettings):
    """Base configuration shared across all services."""
    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class ErdValidatorConfig(SharedConfig):
    """Configuration for the ERD validator service."""
    max_content_length: int = Field(
        default=MAX_CONTENT_LENGTH,
        validation_alias="ERD_MAX_CONTENT_LENGTH",
    )
    include_corrected_erd: bool = Field(
        default=True,
        validation_alias="ERD_INCLUDE_CORRECTED",
    )
