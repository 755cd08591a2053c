"""PDF rendering adapter for section documents.

Responsibilities:
- Define the narrow renderer protocol used by the build coordinator.
- Render HTML to paginated PDFs with PyMuPDF's `Story` layout engine.
- Render one combined document per section with the branded template.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Protocol

import fitz
from loguru import logger

from ..config import Branding, PdfOptions
from .html_template import build_section_html, resolve_logo_source


class PdfRenderer(Protocol):
    """Turn an HTML document into a PDF file."""

    def render(self, html: str, output_path: Path, options: PdfOptions) -> None:
        """Render `html` to `output_path` using page setup `options`."""


class PyMuPDFRenderer:
    """Paginated HTML-to-PDF renderer backed by PyMuPDF."""

    def render(self, html: str, output_path: Path, options: PdfOptions) -> None:
        """Render HTML into a PDF file, creating parent directories."""

        output_path.parent.mkdir(parents=True, exist_ok=True)
        self._render_to(html, str(output_path), options)

    def self_check(self) -> bool:
        """Render a tiny document in memory and report whether it worked."""

        try:
            self._render_to("<p>neonbuilder</p>", io.BytesIO(), PdfOptions())
        except Exception as exc:
            logger.warning(f"PDF renderer self-check failed: {exc}")
            return False
        return True

    @staticmethod
    def _render_to(html: str, target: str | io.BytesIO, options: PdfOptions) -> None:
        """Lay out HTML across as many pages as needed and write them to `target`."""

        mediabox = fitz.paper_rect(options.page_format.lower())
        content_box = fitz.Rect(
            mediabox.x0 + options.margin_left,
            mediabox.y0 + options.margin_top,
            mediabox.x1 - options.margin_right,
            mediabox.y1 - options.margin_bottom,
        )
        story = fitz.Story(html=html)
        writer = fitz.DocumentWriter(target)
        try:
            more = 1
            while more:
                device = writer.begin_page(mediabox)
                more, _ = story.place(content_box)
                story.draw(device)
                writer.end_page()
        finally:
            writer.close()


def generate_section_pdf(
    renderer: PdfRenderer,
    *,
    text: str,
    output_dir: Path,
    section_id: str,
    section_label: str,
    branding: Branding,
    options: PdfOptions,
) -> Path:
    """Render a section's combined text once and return the PDF path."""

    output_path = output_dir / f"{section_id}_chunk_01.pdf"
    document = build_section_html(
        title=section_label,
        content=text,
        branding=branding,
        section_label=section_label,
        chunk_number=1,
        total_chunks=1,
        logo_src=resolve_logo_source(branding),
    )
    renderer.render(document, output_path, options)
    return output_path
