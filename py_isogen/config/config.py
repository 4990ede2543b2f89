"""Configuration management."""

import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load a local .env for development, without overriding values already in the environment
env_file = Path.cwd() / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Library settings pulled from ``ISOGEN_*`` environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log renderer (json or console)"
    )

    # Execution
    max_workers: Optional[int] = Field(
        default=None, ge=1, description="Worker threads for parallel work (None = CPU count)"
    )

    # Extraction
    default_threshold: float = Field(default=0.5, description="Iso level used when none is given")
    chunk_volume_mode: Literal["density", "heightmap"] = Field(
        default="heightmap", description="How chunk volumes are built from the noise field"
    )

    model_config = SettingsConfigDict(env_prefix="ISOGEN_", extra="ignore")


settings = Settings()
