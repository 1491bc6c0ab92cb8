"""
Export a project's print-ready page to an A3 landscape PDF.

Stages run strictly in order inside one engine scope:
launch -> navigate -> readiness -> settle -> pdf. The engine is released on
every exit path by the engine factory's context manager.
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any
from urllib.parse import urlencode

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from config import ExportSettings, load_settings
from errors import GenerationError, RenderTimeoutError, ValidationError
from exporting.engine import EngineFactory, launch_engine
from exporting.readiness import READY_FALLBACK, READY_SIGNAL_JS, wait_for_render_ready

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"

# Template CSS (@page size) is the source of truth for page size; format and
# landscape only apply if the page declares none.
PDF_OPTIONS: dict[str, Any] = {
    "format": "A3",
    "landscape": True,
    "print_background": True,
    "margin": {"top": "0", "right": "0", "bottom": "0", "left": "0"},
    "prefer_css_page_size": True,
    "display_header_footer": False,
}


@dataclass(frozen=True)
class PdfExport:
    filename: str
    content: bytes
    readiness: str = ""


def export_filename(prefix: str, project_id: str, day: date) -> str:
    """<prefix>-<project id>-<YYYY-MM-DD>.pdf with header-unsafe characters replaced."""
    safe_id = re.sub(r"[^A-Za-z0-9_.-]", "_", project_id)
    return f"{prefix}-{safe_id}-{day.isoformat()}.pdf"


def print_url(base_url: str, print_path: str, project_id: str) -> str:
    path = print_path if print_path.startswith("/") else f"/{print_path}"
    return f"{base_url.rstrip('/')}{path}?{urlencode({'projectId': project_id})}"


def _clean_project_id(project_id: Any) -> str:
    if not isinstance(project_id, str):
        return ""
    return project_id.strip()


async def export_presentation_pdf(
    project_id: Any,
    *,
    base_url: str,
    engine_factory: EngineFactory = launch_engine,
    settings: ExportSettings | None = None,
    today: date | None = None,
) -> PdfExport:
    """
    Render /print?projectId=<id> in a fresh headless Chromium and return the PDF.

    Raises ValidationError (no engine started), RenderTimeoutError when
    navigation exceeds its bound, GenerationError for any other engine failure.
    Never returns a partial PDF.
    """
    project_id = _clean_project_id(project_id)
    if not project_id:
        raise ValidationError()

    settings = settings or load_settings()
    url = print_url(settings.print_base_url or base_url, settings.print_path, project_id)
    start = time.perf_counter()
    stage = "launch"
    logger.info("EXPORT_START project_id=%s url=%s", project_id, url)

    try:
        async with engine_factory() as browser:
            page = await browser.new_page(
                viewport={"width": settings.viewport_width, "height": settings.viewport_height},
                device_scale_factor=1,
            )

            stage = "navigate"
            response = await page.goto(
                url,
                wait_until="networkidle",
                timeout=settings.navigation_timeout_ms,
            )
            if response is not None and response.status >= 400:
                raise GenerationError(
                    f"Print page returned HTTP {response.status}",
                    project_id=project_id,
                    stage=stage,
                )

            stage = "readiness"
            readiness = await wait_for_render_ready(
                page.evaluate(READY_SIGNAL_JS, settings.ready_fallback_ms),
                settings.ready_fallback_ms,
            )
            if readiness == READY_FALLBACK:
                logger.warning(
                    "EXPORT_READY_FALLBACK project_id=%s waited_ms=%d",
                    project_id,
                    settings.ready_fallback_ms,
                )

            stage = "settle"
            await page.wait_for_timeout(settings.settle_delay_ms)

            stage = "pdf"
            await page.emulate_media(media="print")
            pdf_bytes = await page.pdf(**PDF_OPTIONS)
            if not pdf_bytes or not pdf_bytes.startswith(PDF_MAGIC):
                raise GenerationError(
                    "Engine returned an empty or invalid PDF",
                    project_id=project_id,
                    stage=stage,
                )
    except PlaywrightTimeoutError as e:
        if stage in ("navigate", "readiness"):
            raise RenderTimeoutError(
                f"Print page did not become ready during {stage}: {e}",
                project_id=project_id,
                stage=stage,
            ) from e
        raise GenerationError(str(e), project_id=project_id, stage=stage) from e
    except PlaywrightError as e:
        raise GenerationError(str(e), project_id=project_id, stage=stage) from e

    day = today or datetime.now(timezone.utc).date()
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "EXPORT_DONE project_id=%s bytes=%d readiness=%s duration_ms=%.0f",
        project_id,
        len(pdf_bytes),
        readiness,
        duration_ms,
    )
    return PdfExport(
        filename=export_filename(settings.filename_prefix, project_id, day),
        content=pdf_bytes,
        readiness=readiness,
    )
