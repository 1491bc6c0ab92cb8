"""
Runtime configuration for the export backend. Set values in env or backend/.env.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BACKEND_DIR = Path(__file__).resolve().parent

# Load .env from backend directory so PRINT_BASE_URL etc. are available
load_dotenv(BACKEND_DIR / ".env")

# A3 landscape (420mm x 297mm) at 96 CSS px per inch.
A3_LANDSCAPE_VIEWPORT = (1587, 1123)

CHROMIUM_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
)


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_str(name: str) -> str | None:
    raw = (os.environ.get(name) or "").strip()
    return raw or None


@dataclass(frozen=True)
class ExportSettings:
    """Knobs for one PDF export. Durations are milliseconds, like Playwright's."""
    print_base_url: str | None = None
    print_path: str = "/print"
    filename_prefix: str = "g-house-presentation"
    navigation_timeout_ms: int = 60000
    ready_fallback_ms: int = 3000
    settle_delay_ms: int = 1000
    viewport_width: int = A3_LANDSCAPE_VIEWPORT[0]
    viewport_height: int = A3_LANDSCAPE_VIEWPORT[1]


def load_settings() -> ExportSettings:
    return ExportSettings(
        print_base_url=_env_str("PRINT_BASE_URL"),
        print_path=_env_str("PRINT_PATH") or "/print",
        filename_prefix=_env_str("PDF_FILENAME_PREFIX") or "g-house-presentation",
        navigation_timeout_ms=_env_int("NAVIGATION_TIMEOUT_MS", 60000),
        ready_fallback_ms=_env_int("READY_FALLBACK_MS", 3000),
        settle_delay_ms=_env_int("SETTLE_DELAY_MS", 1000),
        viewport_width=_env_int("VIEWPORT_WIDTH", A3_LANDSCAPE_VIEWPORT[0]),
        viewport_height=_env_int("VIEWPORT_HEIGHT", A3_LANDSCAPE_VIEWPORT[1]),
    )


PROJECTS_DIR = Path(_env_str("PROJECTS_DIR") or BACKEND_DIR / "projects")

# CORS: use ALLOWED_ORIGINS env (comma-separated) if set, else default
_origins_env = (os.environ.get("ALLOWED_ORIGINS") or "").strip()
if _origins_env:
    ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()]
else:
    ALLOWED_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
