"""Service settings loaded from environment variables.

Settings are read once per request through the API dependency and can be
overridden in tests by constructing Settings directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from skyvern_manager.errors import ConfigValidationError

DEFAULT_BASE_URL = "https://api.skyvern.com/v1"
DEFAULT_DB_PATH = Path("data/skyvern_manager.db")


@dataclass
class Settings:
    """All configuration loaded from environment variables."""

    # Skyvern API
    skyvern_base_url: str = DEFAULT_BASE_URL
    skyvern_api_key: str = ""
    timeout_seconds: float = 30.0

    # Config document storage
    db_path: Path = DEFAULT_DB_PATH

    # Workflow listing (doc export, eligibility)
    workflow_page_size: int = 100

    # Run analytics
    run_analytics_page_size: int = 20
    run_analytics_exclude_statuses: list[str] = field(
        default_factory=lambda: ["queued", "running"]
    )
    run_analytics_early_exit: bool = True

    # Workflow run explorer
    workflow_run_page_size: int = 10
    workflow_run_excluded_statuses: list[str] = field(
        default_factory=lambda: ["queued", "running"]
    )


def _split_csv(raw: str) -> list[str]:
    """Split a comma-separated env value, dropping blanks."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigValidationError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigValidationError(f"{name} must be at least 1, got {value}")
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigValidationError(f"{name} must be a number, got {raw!r}") from None


def _bool_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """Load settings from the process environment.

    Raises:
        ConfigValidationError: If a numeric variable is malformed.
    """
    return Settings(
        skyvern_base_url=os.environ.get("SKYVERN_BASE_URL", DEFAULT_BASE_URL),
        skyvern_api_key=os.environ.get("SKYVERN_API_KEY", ""),
        timeout_seconds=_float_env("SKYVERN_TIMEOUT_SECONDS", 30.0),
        db_path=Path(os.environ.get("SKYVERN_MANAGER_DB_PATH", str(DEFAULT_DB_PATH))),
        workflow_page_size=_int_env("WORKFLOW_PAGE_SIZE", 100),
        run_analytics_page_size=_int_env("RUN_ANALYTICS_PAGE_SIZE", 20),
        run_analytics_exclude_statuses=_split_csv(
            os.environ.get("RUN_ANALYTICS_EXCLUDE_STATUSES", "queued,running")
        ),
        run_analytics_early_exit=_bool_env("RUN_ANALYTICS_EARLY_EXIT", True),
        workflow_run_page_size=_int_env("WORKFLOW_RUN_PAGE_SIZE", 10),
        workflow_run_excluded_statuses=[
            s.lower()
            for s in _split_csv(
                os.environ.get("WORKFLOW_RUN_EXCLUDED_STATUSES", "queued,running")
            )
        ],
    )
