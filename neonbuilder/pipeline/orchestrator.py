"""Build orchestration for neonbuilder.

Responsibilities:
- Drive the section loop: generate, combine, render, and archive each section.
- Roll section archives into the master bundle archive.
- Report chunk progress, run cost, and build statistics.

Key types:
- `BuildCoordinator`: orchestration facade for one build run.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
import time

from ..config import BuildConfig
from ..errors import PipelineStageError
from ..io.storage import OutputStore
from ..llm.generator import CompletionClient, generate_section
from ..models.datatypes import BuildResult, BuildStats, ChunkProgress, SectionResult, Usage
from ..packaging.archive import create_master_archive, create_section_archive
from ..render.pdf_renderer import PdfRenderer, generate_section_pdf
from ..sections import Section
from ..telemetry.cost_tracker import CostTracker
from ..telemetry.logger import RunLogger
from .telemetry import BuildTelemetryMixin


CHUNK_SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True, slots=True)
class _BuildPlan:
    """Validated sections and chunk counts for one run."""

    sections: tuple[Section, ...]
    chunk_counts: tuple[int, ...]
    store: OutputStore

    @property
    def total_chunks(self) -> int:
        return sum(self.chunk_counts)


class BuildCoordinator(BuildTelemetryMixin):
    """Coordinate all stages for a single bundle build."""

    def __init__(
        self,
        client: CompletionClient,
        renderer: PdfRenderer | None = None,
        run_logger: RunLogger | None = None,
        progress_callback: Callable[[ChunkProgress], None] | None = None,
        sleeper: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize collaborators and optional logging/progress hooks."""

        self._client = client
        self._renderer = renderer
        self._run_logger = run_logger
        self._progress_callback = progress_callback
        self._sleeper = sleeper
        self._clock = clock

    def run(self, config: BuildConfig) -> BuildResult:
        """Run a full build and return its outputs, statistics, and cost.

        Raises:
            PipelineStageError: If the config is invalid or PDFs are requested
                without a renderer.
            GenerationError: If any chunk cannot be generated.
        """

        started_at = self._clock()
        plan = self._run_stage("init", lambda: self._prepare(config))
        cost_tracker = CostTracker(model=config.model)

        completed_chunks = 0
        section_results: list[SectionResult] = []
        for section, chunk_count in zip(plan.sections, plan.chunk_counts):
            result = self._run_stage(
                f"section:{section.id}",
                lambda section=section, chunk_count=chunk_count: self._build_section(
                    config,
                    plan,
                    section,
                    chunk_count,
                    cost_tracker,
                    completed_chunks,
                ),
            )
            completed_chunks += chunk_count
            section_results.append(result)

        master_archive_path = self._run_stage(
            "master_archive",
            lambda: create_master_archive(
                [result.archive_path for result in section_results],
                plan.store.root / f"{config.root_folder}_complete.zip",
                compression_level=config.compression_level,
            ),
        )

        stats = self._run_stage(
            "stats",
            lambda: BuildStats(
                total_sections=len(section_results),
                total_chunks=plan.total_chunks,
                total_size_bytes=plan.store.size_bytes(),
                duration_ms=int(round((self._clock() - started_at) * 1000)),
            ),
        )
        return BuildResult(
            output_dir=plan.store.root,
            master_archive_path=master_archive_path,
            sections=tuple(section_results),
            stats=stats,
            cost=cost_tracker.summary(),
        )

    def _prepare(self, config: BuildConfig) -> _BuildPlan:
        """Validate config, resolve sections, and create the bundle root."""

        try:
            config.validate()
            sections = config.selected_catalog()
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Check build options, YAML config values, and `neonbuilder sections`.",
            ) from exc
        if config.generate_pdfs and self._renderer is None:
            raise PipelineStageError(
                stage="config",
                detail="PDF generation is enabled but no PDF renderer is configured.",
                hint="Pass `--no-pdf` or install PyMuPDF.",
            )

        store = OutputStore(config.output_dir / config.root_folder)
        store.ensure_directory()
        if self._run_logger is not None:
            self._run_logger.log_debug(
                "init",
                "plan",
                model=config.model,
                output=store.root,
                pdfs=config.generate_pdfs,
                sections=len(sections),
            )
        return _BuildPlan(
            sections=sections,
            chunk_counts=tuple(config.effective_chunks(section) for section in sections),
            store=store,
        )

    def _build_section(
        self,
        config: BuildConfig,
        plan: _BuildPlan,
        section: Section,
        chunk_count: int,
        cost_tracker: CostTracker,
        completed_before: int,
    ) -> SectionResult:
        """Generate, combine, render, and archive one section."""

        section_dir = plan.store.ensure_directory(section.id)

        def on_progress(chunk_index: int, content: str, usage: Usage) -> None:
            cost_tracker.add_usage(usage)
            if self._progress_callback is not None:
                self._progress_callback(
                    ChunkProgress(
                        section_id=section.id,
                        section_label=section.label,
                        chunk_index=chunk_index,
                        section_chunks=chunk_count,
                        completed_chunks=completed_before + chunk_index + 1,
                        total_chunks=plan.total_chunks,
                        usage=usage,
                        formatted_cost=cost_tracker.formatted_cost(),
                    )
                )

        generation = generate_section(
            self._client,
            section_id=section.id,
            num_chunks=chunk_count,
            model=config.model,
            temperature=config.temperature,
            branding=config.branding,
            on_progress=on_progress,
            max_retries=config.max_retries,
            retry_delay_ms=config.retry_delay_ms,
            max_tokens=config.max_tokens,
            sleeper=self._sleeper,
        )

        combined_text = CHUNK_SEPARATOR.join(generation.chunks)
        text_path = plan.store.save_text(Path(section.id) / f"{section.id}.txt", combined_text)

        pdf_path: Path | None = None
        if config.generate_pdfs and self._renderer is not None:
            pdf_path = generate_section_pdf(
                self._renderer,
                text=combined_text,
                output_dir=section_dir,
                section_id=section.id,
                section_label=section.label,
                branding=config.branding,
                options=config.pdf,
            )

        archive_path = create_section_archive(
            section.id,
            section_dir,
            plan.store.root,
            include_source_files=False,
            include_pdfs=config.generate_pdfs,
            compression_level=config.compression_level,
        )
        return SectionResult(
            section_id=section.id,
            section_label=section.label,
            num_chunks=chunk_count,
            combined_text_path=text_path,
            pdf_path=pdf_path,
            archive_path=archive_path,
        )
