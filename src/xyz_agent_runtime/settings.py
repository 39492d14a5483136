"""
@file_name: settings.py
@author: NetMind.AI
@date: 2026-03-02
@description: Unified configuration management

Uses pydantic-settings to centrally manage all environment variables.

Usage:
    from xyz_agent_runtime.settings import settings

    max_turns = settings.default_max_turns
    api_key = settings.openai_api_key
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from xyz_agent_runtime.config import DEFAULT_MAX_TURNS

# Project root directory (3 levels up from src/xyz_agent_runtime/settings.py)
_PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """Runtime global configuration, automatically loaded from .env file and environment variables"""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ===== Model Client (OpenAI-compatible) =====
    openai_api_key: str = ""
    openai_base_url: Optional[str] = None
    default_model: str = "gpt-4.1-mini"
    model_request_timeout: float = 90.0
    model_max_retries: int = Field(default=3, ge=1)

    # ===== Run Loop =====
    default_max_turns: int = Field(default=DEFAULT_MAX_TURNS, ge=1)
    max_parallel_tool_calls: int = Field(default=8, ge=1)
    output_parse_retries: int = Field(default=1, ge=0)
    run_timeout_seconds: Optional[float] = None

    # ===== Logging =====
    file_logging_enabled: bool = False
    log_dir: str = str(_PROJECT_ROOT / "logs")
    log_level: str = "DEBUG"
    log_retention: str = "30 days"


settings = Settings()

# Sync the API key to os.environ for SDK clients constructed without explicit credentials.
# pydantic-settings only loads values into the Settings object and does not write to os.environ.
if settings.openai_api_key and not os.environ.get("OPENAI_API_KEY"):
    os.environ["OPENAI_API_KEY"] = settings.openai_api_key
