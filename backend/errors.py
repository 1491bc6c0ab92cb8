"""Failures of the PDF export pipeline. Stage names match the log lines in exporting.pdf_export."""
from __future__ import annotations


class PdfExportError(Exception):
    """Base for export failures. `stage` is where it happened: validate, launch, navigate, readiness, pdf."""

    def __init__(self, message: str, *, project_id: str | None = None, stage: str = "export") -> None:
        super().__init__(message)
        self.project_id = project_id
        self.stage = stage


class ValidationError(PdfExportError):
    """Missing or empty project id. Raised before any engine is started."""

    def __init__(self, message: str = "Project ID is required", *, project_id: str | None = None) -> None:
        super().__init__(message, project_id=project_id, stage="validate")


class RenderTimeoutError(PdfExportError):
    """Navigation to the print page, or the wait for it to become ready, exceeded its bound."""


class GenerationError(PdfExportError):
    """The engine failed to load the print page or to produce PDF bytes."""
