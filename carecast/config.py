"""Application configuration utilities."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, Field, ValidationError


class EngineConfig(BaseModel):
    """Strongly typed configuration loaded from config.json."""

    default_interval_hours: float = Field(default=3.0, gt=0)
    default_guidance: str = Field(
        default="Check in regularly and follow your baby's hunger, sleep and diaper cues.",
    )
    recovery_factor: float = Field(default=0.6, gt=0, le=1)
    soon_window_minutes: float = Field(default=30, ge=0)
    log_level: str = Field(default="INFO")
    allowed_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )


def _config_path() -> Path:
    override = os.getenv("CARECAST_CONFIG")
    if override:
        return Path(override).expanduser().resolve()
    return Path(__file__).resolve().parents[1] / "config.json"


def load_config() -> EngineConfig:
    """Load configuration from config.json, falling back to defaults when absent."""

    config_file = _config_path()
    if not config_file.exists():
        return EngineConfig()

    try:
        contents: Dict[str, Any] = json.loads(config_file.read_text())
        return EngineConfig(**contents)
    except (json.JSONDecodeError, ValidationError) as exc:
        example = config_file.with_name("config.example.json")
        raise ValueError(
            f"Invalid configuration in {config_file}: {exc}. Example file: {example}"
        ) from exc


CONFIG = load_config()
