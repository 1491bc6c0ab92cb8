from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import ValidationError as PydanticValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from config import ALLOWED_ORIGINS, PROJECTS_DIR, ExportSettings, load_settings
from errors import PdfExportError, ValidationError
from exporting import EngineFactory, export_presentation_pdf, launch_engine
from models import ExportRequest, Project, ProjectUpsert
from projects_store import JsonFileProjectStore, ProjectStore
from reporting.print_page import build_print_html

_LOG = logging.getLogger("uvicorn.error")

VERSION = (os.environ.get("GIT_COMMIT") or "").strip() or "unknown"

PROJECT_ID_REQUIRED = "Project ID is required"
METHOD_NOT_ALLOWED = "Method not allowed. Use POST."
PDF_GENERATION_FAILED = "Failed to generate PDF"

app = FastAPI(title="Presentation PDF Export", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        _LOG.info(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.0f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestLogMiddleware)


# --- Dependencies (overridden in tests) ---

def get_engine_factory() -> EngineFactory:
    return launch_engine


def get_export_settings() -> ExportSettings:
    return load_settings()


def get_project_store() -> ProjectStore:
    return JsonFileProjectStore(PROJECTS_DIR)


@app.on_event("startup")
def startup_log() -> None:
    settings = load_settings()
    _LOG.info(
        "Backend starting version=%s print_base_url=%s navigation_timeout_ms=%d ready_fallback_ms=%d",
        VERSION,
        settings.print_base_url or "<request origin>",
        settings.navigation_timeout_ms,
        settings.ready_fallback_ms,
    )


@app.get("/health")
def health():
    return {"status": "ok", "version": VERSION}


@app.get("/health/pdf")
async def health_pdf(engine_factory: EngineFactory = Depends(get_engine_factory)):
    """
    Runtime check for Playwright PDF dependencies.
    Returns 200 only when Chromium can launch successfully.
    """
    try:
        async with engine_factory() as browser:
            page = await browser.new_page()
            await page.set_content("<html><body>ok</body></html>")
    except Exception as e:
        msg = str(e)
        if len(msg) > 500:
            msg = msg[:500]
        raise HTTPException(
            status_code=503,
            detail=f"Playwright runtime unavailable: {msg}",
        ) from e

    return {"status": "ok", "pdf_runtime": "ready"}


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@app.post("/api/export-pdf")
async def export_pdf(
    request: Request,
    engine_factory: EngineFactory = Depends(get_engine_factory),
    settings: ExportSettings = Depends(get_export_settings),
):
    """
    Render the project's print page in headless Chromium and return an A3 landscape PDF.
    400 for a missing project id (no engine started); 500 for any rendering failure.
    """
    rid = getattr(request.state, "request_id", "-")
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    if not isinstance(payload, dict):
        _LOG.info("EXPORT_ERR rid=%s stage=validate err=body is not a JSON object", rid)
        return _error(400, PROJECT_ID_REQUIRED)
    try:
        export_req = ExportRequest.model_validate(payload)
    except PydanticValidationError:
        _LOG.info("EXPORT_ERR rid=%s stage=validate err=projectId is not a string", rid)
        return _error(400, PROJECT_ID_REQUIRED)

    try:
        export = await export_presentation_pdf(
            export_req.project_id,
            base_url=str(request.base_url),
            engine_factory=engine_factory,
            settings=settings,
        )
    except ValidationError:
        _LOG.info("EXPORT_ERR rid=%s stage=validate err=missing projectId", rid)
        return _error(400, PROJECT_ID_REQUIRED)
    except PdfExportError as e:
        _LOG.error(
            "EXPORT_ERR rid=%s project_id=%s stage=%s type=%s err=%s",
            rid,
            e.project_id,
            e.stage,
            type(e).__name__,
            str(e)[:400],
        )
        return _error(500, PDF_GENERATION_FAILED)
    except Exception:
        _LOG.exception("EXPORT_ERR rid=%s project_id=%s stage=unexpected", rid, export_req.project_id)
        return _error(500, PDF_GENERATION_FAILED)

    return Response(
        content=export.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{export.filename}"',
            "Content-Length": str(len(export.content)),
        },
    )


@app.api_route(
    "/api/export-pdf",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def reject_non_post_methods() -> JSONResponse:
    """Only POST exports; nothing else may start a rendering engine."""
    return _error(405, METHOD_NOT_ALLOWED, headers={"Allow": "POST"})


@app.get("/print", response_class=HTMLResponse)
def print_page(
    project_id: Optional[str] = Query(None, alias="projectId"),
    store: ProjectStore = Depends(get_project_store),
):
    """Print-ready deck: one A3 landscape page per slide, emits the print-ready signal."""
    project = None
    if project_id:
        try:
            project = store.get(project_id)
        except ValueError:
            project = None
    if project is None:
        return HTMLResponse("<!DOCTYPE html><html><body>Project not found</body></html>", status_code=404)
    return HTMLResponse(build_print_html(project))


@app.get("/projects")
def list_projects(store: ProjectStore = Depends(get_project_store)):
    return [p.model_dump(mode="json") for p in store.list()]


@app.get("/projects/{project_id}")
def get_project(project_id: str, store: ProjectStore = Depends(get_project_store)):
    try:
        project = store.get(project_id)
    except ValueError:
        project = None
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return project.model_dump(mode="json")


@app.put("/projects/{project_id}")
def put_project(
    project_id: str,
    body: ProjectUpsert,
    store: ProjectStore = Depends(get_project_store),
):
    """Create or replace a project's deck."""
    try:
        project = Project(
            id=project_id,
            name=body.name,
            customer_name=body.customer_name,
            slides=body.slides,
        )
    except PydanticValidationError:
        raise HTTPException(status_code=400, detail=f"Invalid project id: {project_id}")
    saved = store.save(project)
    _LOG.info("PROJECT_SAVED project_id=%s slides=%d", saved.id, len(saved.slides))
    return saved.model_dump(mode="json")


def get_app() -> FastAPI:
    """
    Convenience accessor for ASGI servers.
    """
    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8010")),
        reload=True,
    )
