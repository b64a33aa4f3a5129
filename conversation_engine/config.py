# conversation_engine/config.py
"""
Settings

Environment-driven configuration for the conversation engine.
A `.env` file next to the project root is loaded once, here.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SCENARIOS_PATH = Path(__file__).resolve().parent / "data" / "scenarios.json"

load_dotenv(PROJECT_ROOT / ".env")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


class Settings:
    """
    Plain settings holder. Read once at import; tests may build their own.
    """

    def __init__(self) -> None:
        self.OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY") or None
        self.LLM_FALLBACK_MODEL: str = os.getenv("LLM_FALLBACK_MODEL", "gpt-4o-mini")
        self.LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "10"))

        self.WORKFLOW_EXECUTOR_URL: Optional[str] = os.getenv("WORKFLOW_EXECUTOR_URL") or None

        self.SCENARIOS_PATH: Path = Path(
            os.getenv("SCENARIOS_PATH") or DEFAULT_SCENARIOS_PATH
        )

        # Simulated "typing" latency
        self.OPTION_RESPONSE_DELAY_MS: int = _int_env("OPTION_RESPONSE_DELAY_MS", 1000)
        self.FREEFORM_RESPONSE_DELAY_MS: int = _int_env("FREEFORM_RESPONSE_DELAY_MS", 1200)

        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
