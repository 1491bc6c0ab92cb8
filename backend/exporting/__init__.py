"""Headless-browser PDF export of print-ready presentation pages."""

from exporting.engine import EngineFactory, launch_engine
from exporting.pdf_export import PdfExport, export_filename, export_presentation_pdf, print_url
from exporting.readiness import READY_EVENT, READY_FLAG, wait_for_render_ready

__all__ = [
    "EngineFactory",
    "launch_engine",
    "PdfExport",
    "export_filename",
    "export_presentation_pdf",
    "print_url",
    "READY_EVENT",
    "READY_FLAG",
    "wait_for_render_ready",
]
