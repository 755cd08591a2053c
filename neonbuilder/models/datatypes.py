"""Core datatypes shared across Neon Builder modules.

Responsibilities:
- Represent immutable records exchanged between generation, packaging, and
  build coordination.
- Provide explicit typing for token usage arithmetic and run results.

Key types:
- `Usage`, `ChatCompletion`, `SectionGeneration`, `ChunkProgress`,
  `SectionResult`, `BuildStats`, and `BuildResult`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from ..telemetry.cost_tracker import CostSummary


def _token_count(value: object) -> int:
    """Coerce a provider token counter into a non-negative integer."""

    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    return max(0, int(value))


@dataclass(frozen=True, slots=True)
class Usage:
    """Token usage reported for one or more completion calls.

    Attributes:
        prompt_tokens: Input tokens billed for the request(s).
        completion_tokens: Output tokens billed for the request(s).
        total_tokens: Provider-reported total tokens.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: Usage) -> Usage:
        if not isinstance(other, Usage):
            return NotImplemented
        return Usage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object] | None) -> Usage:
        """Build usage from a provider `usage` payload, defaulting absent fields to 0."""

        if not payload:
            return cls()
        return cls(
            prompt_tokens=_token_count(payload.get("prompt_tokens")),
            completion_tokens=_token_count(payload.get("completion_tokens")),
            total_tokens=_token_count(payload.get("total_tokens")),
        )


@dataclass(frozen=True, slots=True)
class ChatCompletion:
    """Text and usage returned by one completion request."""

    text: str
    usage: Usage


@dataclass(frozen=True, slots=True)
class SectionGeneration:
    """Ordered chunk texts and summed usage for one generated section."""

    chunks: tuple[str, ...]
    total_usage: Usage


@dataclass(frozen=True, slots=True)
class ChunkProgress:
    """Progress event emitted after each generated chunk.

    Attributes:
        section_id: Section currently being generated.
        section_label: Human-readable section label.
        chunk_index: 0-based chunk index within the section.
        section_chunks: Effective chunk count for the section.
        completed_chunks: Chunks completed so far across the whole run.
        total_chunks: Chunks planned for the whole run.
        usage: Usage reported for this chunk.
        formatted_cost: Running run cost formatted for display.
    """

    section_id: str
    section_label: str
    chunk_index: int
    section_chunks: int
    completed_chunks: int
    total_chunks: int
    usage: Usage
    formatted_cost: str


@dataclass(frozen=True, slots=True)
class SectionResult:
    """Artifacts produced for one successfully processed section."""

    section_id: str
    section_label: str
    num_chunks: int
    combined_text_path: Path
    pdf_path: Path | None
    archive_path: Path


@dataclass(frozen=True, slots=True)
class BuildStats:
    """Aggregate statistics for one build run."""

    total_sections: int
    total_chunks: int
    total_size_bytes: int
    duration_ms: int


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Deterministic record of a completed build run.

    Attributes:
        output_dir: Run output directory (`<output_dir>/<root_folder>`).
        master_archive_path: Path of the master archive.
        sections: Section results in processing order.
        stats: Aggregate run statistics.
        cost: Final cost summary from the run cost tracker.
    """

    output_dir: Path
    master_archive_path: Path
    sections: tuple[SectionResult, ...]
    stats: BuildStats
    cost: CostSummary
