"""Centralized configuration using Pydantic Settings

All environment variables (MIDIPLAY_*) are managed here.
"""

from pathlib import Path
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="MIDIPLAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # MIDI input
    input_port: str | None = None
    channel: Annotated[int, Field(ge=0, le=15)] | None = None

    # MPlayer
    mplayer_program: str = "mplayer"
    player_flags: str | None = None

    # Command dispatch timing (seconds)
    sweep_interval: float = Field(default=0.01, ge=0)
    progress_timeout: float = Field(default=1.0, gt=0)
    poll_interval: float = Field(default=0.005, gt=0)

    # Default mapping file for `midiplay run`
    mapping_file: Path | None = None


# Global settings instance
settings = Settings()
