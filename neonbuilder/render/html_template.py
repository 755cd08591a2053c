"""Branded HTML document construction for section PDFs.

Responsibilities:
- Build a self-contained HTML page from section text and branding.
- Resolve logo references into sources an offline renderer can load.
"""

from __future__ import annotations

import base64
import html
from pathlib import Path

from loguru import logger

from ..config import Branding


_REMOTE_PREFIXES = ("http://", "https://", "data:")
_LOGO_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


def file_to_data_uri(path: Path) -> str:
    """Return a base64 `data:` URI for a local image file.

    Raises:
        FileNotFoundError: If the file does not exist.
    """

    mime_type = _LOGO_MIME_TYPES.get(path.suffix.lower(), "image/png")
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def resolve_logo_source(branding: Branding) -> str:
    """Return an image source for the branding logo, or `""` for none.

    Remote URLs and `data:` URIs pass through unchanged. Local files become
    `data:` URIs; a missing local file logs a warning and yields no logo.
    """

    logo_url = branding.logo_url.strip()
    if not logo_url:
        return ""
    if not branding.logo_is_local and logo_url.startswith(_REMOTE_PREFIXES):
        return logo_url

    logo_path = Path(logo_url).expanduser()
    try:
        return file_to_data_uri(logo_path)
    except FileNotFoundError:
        logger.warning(f"Could not load logo file: {logo_path}")
        return ""


def build_section_html(
    *,
    title: str,
    content: str,
    branding: Branding,
    section_label: str,
    chunk_number: int,
    total_chunks: int,
    logo_src: str = "",
) -> str:
    """Return the branded HTML document for one section PDF."""

    escaped_content = html.escape(content)
    escaped_title = html.escape(title)
    if logo_src:
        logo_markup = f'<img src="{html.escape(logo_src)}" alt="Logo" class="logo"/>'
    else:
        logo_markup = '<div class="logo-placeholder">NEON</div>'

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8"/>
<title>{escaped_title}</title>
<style>
body {{
  font-family: {branding.font_family};
  background-color: {branding.secondary_color};
  color: {branding.text_color};
  line-height: 1.6;
}}
.container {{
  background-color: {branding.accent_color};
  padding: 24px;
}}
.header {{
  border-bottom: 2px solid {branding.primary_color};
  padding-bottom: 12px;
  margin-bottom: 18px;
}}
.logo {{
  height: 48px;
}}
.logo-placeholder {{
  color: {branding.primary_color};
  font-weight: bold;
  font-size: 14px;
}}
.chunk-info {{
  text-align: right;
  font-size: 10px;
}}
h1 {{
  color: {branding.primary_color};
  font-size: 24px;
  margin-bottom: 6px;
}}
.section-label {{
  font-size: 11px;
  text-transform: uppercase;
  margin-bottom: 18px;
}}
.content {{
  white-space: pre-wrap;
  font-size: 11px;
}}
.footer {{
  margin-top: 24px;
  padding-top: 12px;
  border-top: 1px solid {branding.primary_color};
  text-align: center;
  font-size: 9px;
}}
.footer-brand {{
  color: {branding.primary_color};
  font-weight: bold;
}}
</style>
</head>
<body>
<div class="container">
<div class="header">
{logo_markup}
<div class="chunk-info">Part {chunk_number} of {total_chunks}</div>
</div>
<h1>{escaped_title}</h1>
<div class="section-label">{html.escape(section_label)}</div>
<div class="content">{escaped_content}</div>
<div class="footer">
<span class="footer-brand">{html.escape(branding.footer_text)}</span><br/>
Generated with Neon Prompt Engine Builder
</div>
</div>
</body>
</html>
"""
