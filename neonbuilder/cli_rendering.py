"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
chunk progress, section listings, archive statistics, and build summaries.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import BuildResult, ChunkProgress
from .packaging.archive import ArchiveStats
from .sections import Section, total_default_chunks


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def format_bytes(size: int) -> str:
    """Format a byte count with binary units (`1.5 KB`)."""

    if size <= 0:
        return "0 B"
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            break
        value /= 1024
    if unit == "B":
        return f"{int(value)} B"
    return f"{value:.2f} {unit}"


def format_duration(duration_ms: int) -> str:
    """Format milliseconds as `850ms`, `12.3s`, or `2m 5s`."""

    if duration_ms < 1000:
        return f"{duration_ms}ms"
    seconds = duration_ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, remainder = divmod(int(seconds), 60)
    return f"{minutes}m {remainder}s"


def echo_chunk_progress(progress: ChunkProgress) -> None:
    """Print one deterministic chunk progress line."""

    typer.echo(
        "[progress] "
        f"{progress.completed_chunks}/{progress.total_chunks} "
        f"section={progress.section_id} "
        f"chunk={progress.chunk_index + 1}/{progress.section_chunks} "
        f"tokens={progress.usage.total_tokens} "
        f"cost={progress.formatted_cost}"
    )


def echo_section_list(sections: tuple[Section, ...]) -> None:
    """Print catalog rows and the default chunk total."""

    for section in sections:
        typer.echo(f"{section.id} ({section.default_chunks} chunks): {section.label}")
        typer.echo(f"  {section.description}")
    typer.echo(f"Total default chunks: {total_default_chunks(sections)}")


def echo_archive_stats(stats: ArchiveStats) -> None:
    """Print archive size summary and entry listing."""

    typer.echo(f"Archive: {stats.path}")
    typer.echo(f"Files: {stats.file_count}")
    typer.echo(f"Compressed size: {format_bytes(stats.compressed_size)}")
    typer.echo(f"Uncompressed size: {format_bytes(stats.uncompressed_size)}")
    typer.echo(f"Compression ratio: {stats.compression_ratio:.2f}%")
    for entry in stats.entries:
        if entry.is_dir:
            continue
        typer.echo(f"  {entry.name} ({format_bytes(entry.uncompressed_size)})")


def echo_extracted_files(files: list[Path]) -> None:
    """Print extracted file paths."""

    typer.echo(f"Extracted files: {len(files)}")
    for path in files:
        typer.echo(f"  {path}")


def echo_build_summary(result: BuildResult) -> None:
    """Print output locations, statistics, cost breakdown, and generated files."""

    cost = result.cost
    typer.secho("Build complete.", fg=typer.colors.GREEN)
    typer.echo(f"Output directory: {result.output_dir}")
    typer.echo(f"Master archive: {result.master_archive_path}")
    typer.echo(f"Sections: {result.stats.total_sections}")
    typer.echo(f"Chunks: {result.stats.total_chunks}")
    typer.echo(f"Total size: {format_bytes(result.stats.total_size_bytes)}")
    typer.echo(f"Duration: {format_duration(result.stats.duration_ms)}")
    typer.echo(f"Model: {cost.model}")
    typer.echo(
        f"Tokens: prompt={cost.usage.prompt_tokens} "
        f"completion={cost.usage.completion_tokens} total={cost.usage.total_tokens}"
    )
    typer.echo(f"Cost input (USD): {cost.input_cost:.6f}")
    typer.echo(f"Cost output (USD): {cost.output_cost:.6f}")
    typer.echo(f"Cost total: {cost.formatted_cost}")
    typer.echo("Generated files:")
    for section in result.sections:
        typer.echo(f"  {section.combined_text_path}")
        if section.pdf_path is not None:
            typer.echo(f"  {section.pdf_path}")
        typer.echo(f"  {section.archive_path}")
