"""PDF rendering for generated sections."""

from .html_template import build_section_html, resolve_logo_source
from .pdf_renderer import PdfRenderer, PyMuPDFRenderer, generate_section_pdf

__all__ = [
    "PdfRenderer",
    "PyMuPDFRenderer",
    "build_section_html",
    "generate_section_pdf",
    "resolve_logo_source",
]
