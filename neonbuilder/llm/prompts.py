"""Prompt template library for chunk generation.

Responsibilities:
- Centralize prompt construction for section chunk requests.
- Keep prompts deterministic for a given section, position, and branding.
"""

from __future__ import annotations

from ..config import Branding
from ..sections import Section


class PromptLibrary:
    """Build prompt strings for section content generation."""

    def content_system_prompt(self) -> str:
        """Return the fixed system prompt framing a commercial content creator."""

        return (
            "You are an expert content creator specializing in digital products, "
            "marketing copy, and professional documentation. Your output is always "
            "polished, professional, and ready for commercial use."
        )

    def section_chunk_prompt(
        self,
        section: Section,
        chunk_index: int,
        total_chunks: int,
        branding: Branding,
    ) -> str:
        """Return the user prompt for one 0-based chunk of a section."""

        instructions = section.prompt_template or section.description
        part = chunk_index + 1
        return (
            f"You are generating part {part} of {total_chunks}\n"
            f'for the "{section.label}" section of a commercial digital product bundle.\n'
            "\n"
            f"SECTION ID: {section.id}\n"
            f"SECTION DESCRIPTION: {section.description}\n"
            "\n"
            "SPECIFIC INSTRUCTIONS:\n"
            f"{instructions}\n"
            "\n"
            "BRANDING CONTEXT:\n"
            f"- Primary color: {branding.primary_color}\n"
            f"- Secondary color: {branding.secondary_color}\n"
            f"- Brand name from footer: {branding.footer_text}\n"
            "\n"
            "REQUIREMENTS:\n"
            "1. Generate professional, polished, commercial-quality content\n"
            "2. Content should be immediately usable without editing\n"
            "3. No meta commentary or explanations about what you're generating\n"
            "4. No placeholder text - all content must be complete\n"
            "5. Maintain consistent tone and style throughout\n"
            f"6. This is chunk {part} of {total_chunks}, so ensure content is unique "
            "and doesn't repeat previous chunks\n"
            "\n"
            "OUTPUT FORMAT:\n"
            "Provide the content directly, formatted appropriately for the section type.\n"
            "For prompts: Use numbered lists with clear categories\n"
            "For copy: Use proper headings, subheadings, and formatting\n"
            "For documentation: Use markdown formatting"
        )
