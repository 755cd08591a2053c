"""Section catalog for the digital product bundle.

Responsibilities:
- Define the fixed, read-only list of bundle sections.
- Provide id lookup and catalog-level helpers used by config and generation.

Key types:
- `Section`: immutable section record.
- `SECTIONS`: ordered catalog of all known sections.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Section:
    """One named category of generated content.

    Attributes:
        id: Unique section key, also used for file and archive names.
        label: Human-readable section name.
        description: Short description of the section deliverable.
        prompt_template: Section-specific generation instructions (may be empty).
        default_chunks: Default number of chunks generated for the section.
    """

    id: str
    label: str
    description: str
    prompt_template: str
    default_chunks: int


SECTIONS: tuple[Section, ...] = (
    Section(
        id="core_prompts",
        label="Core Edition Prompts",
        default_chunks=12,
        description="300 strategic prompts → 12 categories × 25 prompts",
        prompt_template=(
            "Generate professional, strategic prompts for business and productivity.\n"
            "Focus on actionable, results-driven content that users can immediately apply.\n"
            "Include prompts for: goal setting, time management, decision making, "
            "communication, and leadership."
        ),
    ),
    Section(
        id="premium_prompts",
        label="Premium Edition Prompts",
        default_chunks=14,
        description="700 advanced prompts → 14 chunks × 50",
        prompt_template=(
            "Generate advanced, specialized prompts for power users.\n"
            "Include complex multi-step workflows, advanced automation triggers, and "
            "expert-level strategies.\n"
            "Cover: advanced marketing, sales optimization, content creation, and "
            "business scaling."
        ),
    ),
    Section(
        id="automation",
        label="Automation Workflows",
        default_chunks=5,
        description="75 automation workflows → 5 chunks × 15",
        prompt_template=(
            "Generate detailed automation workflow templates.\n"
            "Include step-by-step instructions, trigger conditions, and integration points.\n"
            "Cover: email automation, social media scheduling, CRM workflows, and "
            "reporting automation."
        ),
    ),
    Section(
        id="sales_pages",
        label="Sales Pages (FE, OTO1, OTO2, Downsell, Lead Magnet)",
        default_chunks=5,
        description="All funnel sales pages",
        prompt_template=(
            "Generate high-converting sales page copy.\n"
            "Include: headlines, subheadlines, bullet points, testimonial frameworks, "
            "CTAs, and guarantee sections.\n"
            "Follow proven copywriting formulas: AIDA, PAS, and story-based selling."
        ),
    ),
    Section(
        id="thank_you",
        label="Thank You Pages",
        default_chunks=5,
        description="FE, OTO1, OTO2, Downsell, Lead Magnet",
        prompt_template=(
            "Generate thank you page content that maximizes customer satisfaction and "
            "upsell potential.\n"
            "Include: confirmation messages, next steps, bonus delivery instructions, "
            "and soft upsell elements."
        ),
    ),
    Section(
        id="launch_emails",
        label="Launch Email Sequences",
        default_chunks=2,
        description="Customer launch + affiliate launch",
        prompt_template=(
            "Generate email sequence templates for product launches.\n"
            "Include: pre-launch teasers, launch day emails, urgency/scarcity emails, "
            "and post-launch follow-ups.\n"
            "Cover both customer-facing and affiliate/JV partner communications."
        ),
    ),
    Section(
        id="affiliate_toolkit",
        label="Affiliate Toolkit",
        default_chunks=4,
        description="JV copy, banners text, email swipes, scripts",
        prompt_template=(
            "Generate affiliate marketing materials.\n"
            "Include: email swipes, social media posts, banner ad copy, video scripts, "
            "and promotional angles.\n"
            "Make it easy for affiliates to promote with ready-to-use content."
        ),
    ),
    Section(
        id="branding",
        label="Branding Docs",
        default_chunks=2,
        description="Color palette, typography, logo description",
        prompt_template=(
            "Generate comprehensive branding documentation.\n"
            "Include: color palette specifications, typography guidelines, logo usage "
            "rules, and brand voice guidelines.\n"
            "Ensure consistency across all marketing materials."
        ),
    ),
    Section(
        id="jvzoo_docs",
        label="JVZoo Listing & Funnel Docs",
        default_chunks=3,
        description="Product listings, prices, funnel wiring",
        prompt_template=(
            "Generate JVZoo marketplace listing content.\n"
            "Include: product descriptions, feature lists, pricing justifications, and "
            "funnel structure documentation.\n"
            "Optimize for marketplace visibility and conversion."
        ),
    ),
    Section(
        id="readmes",
        label="README & Licensing",
        default_chunks=3,
        description="README, install, license",
        prompt_template=(
            "Generate documentation files for the product package.\n"
            "Include: installation instructions, quick start guide, FAQ, "
            "troubleshooting, and licensing terms.\n"
            "Make it easy for customers to get started immediately."
        ),
    ),
)


def get_section_by_id(
    section_id: str, sections: tuple[Section, ...] = SECTIONS
) -> Section | None:
    """Return the section with the given id, or `None` when unknown."""

    for section in sections:
        if section.id == section_id:
            return section
    return None


def section_ids(sections: tuple[Section, ...] = SECTIONS) -> tuple[str, ...]:
    """Return all section ids in catalog order."""

    return tuple(section.id for section in sections)


def total_default_chunks(sections: tuple[Section, ...] = SECTIONS) -> int:
    """Return the sum of default chunk counts across a catalog."""

    return sum(section.default_chunks for section in sections)


def validate_section(section: Section) -> None:
    """Validate a section record.

    Raises:
        ValueError: If id, label, or description is blank, or the default
            chunk count is not a positive integer.
    """

    if not isinstance(section.id, str) or not section.id.strip():
        raise ValueError("Section must have a valid string id.")
    if not isinstance(section.label, str) or not section.label.strip():
        raise ValueError("Section must have a valid string label.")
    if isinstance(section.default_chunks, bool) or not isinstance(section.default_chunks, int):
        raise ValueError("Section must have a positive integer default_chunks.")
    if section.default_chunks < 1:
        raise ValueError("Section must have a positive integer default_chunks.")
    if not isinstance(section.description, str) or not section.description.strip():
        raise ValueError("Section must have a valid string description.")
