"""
Runtime configuration for RefactorScore.

Values come from environment variables (a local .env file is loaded first).
The resulting Settings object is immutable and passed explicitly to the
components that need it.
"""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


# =============================================================================
# HELPERS
# =============================================================================

def _env_str(name: str, default: str) -> str:
    value = os.getenv(name, default).strip()
    if not value:
        raise ValueError(f"{name} must not be empty")
    return value


def _env_int(name: str, default: int, minimum: int, maximum: int | None = None) -> int:
    raw = os.getenv(name)
    try:
        value = int(raw) if raw not in (None, "") else default
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")

    if value < minimum or (maximum is not None and value > maximum):
        bounds = f"[{minimum}, {maximum}]" if maximum is not None else f">= {minimum}"
        raise ValueError(f"{name} must be in {bounds}, got {value}")
    return value


def _env_float(name: str, default: float, minimum: float, maximum: float) -> float:
    raw = os.getenv(name)
    try:
        value = float(raw) if raw not in (None, "") else default
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")

    if not minimum <= value <= maximum:
        raise ValueError(f"{name} must be in [{minimum}, {maximum}], got {value}")
    return value


# =============================================================================
# SETTINGS
# =============================================================================

@dataclass(frozen=True)
class OllamaSettings:
    """Model endpoint, timeouts and retry limits."""
    base_url: str = "http://localhost:11434"
    model: str = "llama2"
    temperature: float = 0.2
    analysis_timeout_seconds: int = 180
    suggestions_timeout_seconds: int = 120
    health_timeout_seconds: int = 30
    max_json_fix_retries: int = 5
    suggestion_attempts: int = 3


@dataclass(frozen=True)
class WorkerSettings:
    """Polling loop parameters."""
    repository_path: str = "."
    lookback_days: int = 7
    commits_per_cycle: int = 5
    interval_seconds: int = 3600


@dataclass(frozen=True)
class Settings:
    ollama: OllamaSettings
    worker: WorkerSettings
    max_concurrent_analysis: int = 2
    database_url: str = "sqlite:///./refactor_score.db"

    @classmethod
    def from_env(cls) -> "Settings":
        ollama = OllamaSettings(
            base_url=_env_str("OLLAMA_BASE_URL", "http://localhost:11434").rstrip("/"),
            model=_env_str("OLLAMA_MODEL", "llama2"),
            temperature=_env_float("OLLAMA_TEMPERATURE", 0.2, 0.0, 2.0),
            analysis_timeout_seconds=_env_int("OLLAMA_ANALYSIS_TIMEOUT_SECONDS", 180, 1, 1800),
            suggestions_timeout_seconds=_env_int("OLLAMA_SUGGESTIONS_TIMEOUT_SECONDS", 120, 1, 1800),
            health_timeout_seconds=_env_int("OLLAMA_HEALTH_TIMEOUT_SECONDS", 30, 1, 60),
            max_json_fix_retries=_env_int("OLLAMA_MAX_JSON_FIX_RETRIES", 5, 0, 10),
            suggestion_attempts=_env_int("OLLAMA_SUGGESTION_ATTEMPTS", 3, 1, 10),
        )
        worker = WorkerSettings(
            repository_path=_env_str("GIT_REPOSITORY_PATH", "."),
            lookback_days=_env_int("WORKER_LOOKBACK_DAYS", 7, 1),
            commits_per_cycle=_env_int("WORKER_COMMITS_PER_CYCLE", 5, 1),
            interval_seconds=_env_int("WORKER_INTERVAL_SECONDS", 3600, 1),
        )
        return cls(
            ollama=ollama,
            worker=worker,
            max_concurrent_analysis=_env_int("MAX_CONCURRENT_ANALYSIS", 2, 1, 8),
            database_url=_env_str("DATABASE_URL", "sqlite:///./refactor_score.db"),
        )


@lru_cache()
def get_settings() -> Settings:
    """Settings loaded once per process."""
    return Settings.from_env()
