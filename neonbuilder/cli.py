"""Command-line interface for neonbuilder.

Responsibilities:
- Expose user-facing commands for bundle builds and archive utilities.
- Convert CLI arguments, YAML config, and environment into a `BuildConfig`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Any, Mapping

import typer
from loguru import logger

from .cli_rendering import (
    echo_archive_stats,
    echo_build_summary,
    echo_chunk_progress,
    echo_extracted_files,
    echo_section_list,
    exit_with_command_error,
)
from .cli_runtime import (
    build_cli_layer,
    load_yaml_layer,
    prompt_build_layer,
    resolve_api_key,
)
from .config import BuildConfig, ConfigLoader, resolve_build_config
from .credentials import create_credential_store
from .errors import PipelineStageError
from .llm.openai_client import OpenAIChatClient
from .packaging.archive import archive_stats, extract_archive
from .parsing import normalize_optional_string
from .pipeline import BuildCoordinator
from .render.pdf_renderer import PyMuPDFRenderer
from .sections import SECTIONS
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="neonbuilder",
    no_args_is_help=True,
    help="Generate branded digital product bundles with OpenAI.",
)


def _resolve_config(*layers: Mapping[str, Any]) -> BuildConfig:
    """Resolve config layers and map validation failures to stage errors."""

    try:
        return resolve_build_config(*layers)
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Check build options and YAML values; run `neonbuilder sections` for ids.",
        ) from exc


def _confirm_build(config: BuildConfig) -> bool:
    """Show the build plan and ask for confirmation."""

    selected = config.selected_catalog()
    total_chunks = sum(config.effective_chunks(section) for section in selected)
    typer.echo(f"Output: {config.output_dir / config.root_folder}")
    typer.echo(f"Model: {config.model}")
    typer.echo(f"Sections: {len(selected)} ({total_chunks} chunks)")
    typer.echo(f"PDFs: {'yes' if config.generate_pdfs else 'no'}")
    return typer.confirm("Start build?", default=True)


@app.command("build")
def build_command(
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with build defaults."),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Output directory (overrides config and NEON_OUTPUT_DIR)."),
    ] = None,
    root_folder: Annotated[
        str | None,
        typer.Option("--root-folder", help="Bundle folder name created under the output directory."),
    ] = None,
    model: Annotated[
        str | None, typer.Option("--model", help="OpenAI model id (overrides NEON_MODEL).")
    ] = None,
    temperature: Annotated[
        float | None, typer.Option("--temperature", help="Sampling temperature, 0-2.")
    ] = None,
    max_tokens: Annotated[
        int | None, typer.Option("--max-tokens", help="Completion token limit per chunk.")
    ] = None,
    max_retries: Annotated[
        int | None, typer.Option("--max-retries", help="Attempts per chunk.")
    ] = None,
    retry_delay: Annotated[
        int | None,
        typer.Option("--retry-delay", help="Base retry delay in milliseconds."),
    ] = None,
    pdf: Annotated[
        bool | None,
        typer.Option("--pdf/--no-pdf", help="Render a branded PDF per section."),
    ] = None,
    page_format: Annotated[
        str | None,
        typer.Option("--page-format", help="PDF page format: A3, A4, A5, Letter, Legal."),
    ] = None,
    sections: Annotated[
        list[str] | None,
        typer.Option("--section", help="Section id to build (repeatable; default: all)."),
    ] = None,
    chunks: Annotated[
        list[str] | None,
        typer.Option("--chunks", help="Chunk count override `section_id=N` (repeatable)."),
    ] = None,
    primary_color: Annotated[
        str | None, typer.Option("--primary-color", help="Primary brand color `#RRGGBB`.")
    ] = None,
    secondary_color: Annotated[
        str | None, typer.Option("--secondary-color", help="Secondary brand color `#RRGGBB`.")
    ] = None,
    logo: Annotated[
        str | None, typer.Option("--logo", help="Logo URL or local image path.")
    ] = None,
    footer_text: Annotated[
        str | None, typer.Option("--footer-text", help="Footer text printed in PDFs.")
    ] = None,
    interactive: Annotated[
        bool,
        typer.Option("--interactive", help="Prompt for every build setting."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the confirmation prompt."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Emit debug logs (same as NEON_VERBOSE=true)."),
    ] = False,
    api_key: Annotated[
        str | None,
        typer.Option(
            "--api-key",
            help="OpenAI API key override. Prefer OPENAI_API_KEY to avoid shell history.",
        ),
    ] = None,
    store_api_key: Annotated[
        bool,
        typer.Option(
            "--store-api-key/--no-store-api-key",
            help="Persist a CLI-entered or prompted API key to credential storage.",
        ),
    ] = True,
) -> None:
    """Generate every selected section and package the bundle."""

    verbose_run = verbose
    try:
        layers = [
            load_yaml_layer(config_file),
            ConfigLoader.env_overrides(),
            build_cli_layer(
                out=out,
                root_folder=root_folder,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                max_retries=max_retries,
                retry_delay_ms=retry_delay,
                generate_pdfs=pdf,
                page_format=page_format,
                sections=sections,
                chunk_overrides=chunks,
                primary_color=primary_color,
                secondary_color=secondary_color,
                logo=logo,
                footer_text=footer_text,
                verbose=verbose,
            ),
        ]
        config = _resolve_config(*layers)
        if interactive:
            config = _resolve_config(*layers, prompt_build_layer(config))
        verbose_run = config.verbose_logging

        run_logger = RunLogger(verbose=config.verbose_logging)
        run_logger.log_debug(
            "config",
            "resolved",
            model=config.model,
            output_dir=config.output_dir,
            root_folder=config.root_folder,
            sections=",".join(config.selected_sections),
            pdfs=config.generate_pdfs,
        )

        resolved_api_key = resolve_api_key(
            cli_api_key=api_key,
            interactive=interactive,
            store_api_key=store_api_key,
        )

        renderer = None
        if config.generate_pdfs:
            renderer = PyMuPDFRenderer()
            renderer.self_check()

        if not yes and (interactive or sys.stdin.isatty()) and not _confirm_build(config):
            typer.echo("Build cancelled.")
            return

        coordinator = BuildCoordinator(
            client=OpenAIChatClient(api_key=resolved_api_key),
            renderer=renderer,
            run_logger=run_logger,
            progress_callback=echo_chunk_progress,
        )
        result = coordinator.run(config)
    except Exception as exc:
        if verbose_run:
            logger.opt(exception=exc).debug("build failed")
        exit_with_command_error("build", exc)

    echo_build_summary(result)


@app.command("sections")
def sections_command() -> None:
    """List available sections and their default chunk counts."""

    echo_section_list(SECTIONS)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from credential storage.",
        ),
    ] = False,
) -> None:
    """Manage stored CLI credentials."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    try:
        credential_store = create_credential_store()
        if set_api_key:
            prompted_api_key = normalize_optional_string(
                typer.prompt(
                    "OpenAI API key (hidden input)",
                    default="",
                    hide_input=True,
                    show_default=False,
                )
            )
            if prompted_api_key is None or not prompted_api_key.startswith("sk-"):
                raise PipelineStageError(
                    stage="credentials",
                    detail="API key must be non-empty and start with `sk-`.",
                    hint="Copy the full key from the OpenAI dashboard.",
                )
            credential_store.set_api_key(prompted_api_key)
            typer.echo("API key stored in credential storage.")
            return

        if clear_api_key:
            if credential_store.clear_api_key():
                typer.echo("Stored API key cleared from credential storage.")
            else:
                typer.echo("No stored API key found in credential storage.")
            return

        availability = "available" if credential_store.is_available() else "unavailable"
        status = "present" if credential_store.get_api_key() is not None else "not set"
    except Exception as exc:
        exit_with_command_error("credentials", exc)

    typer.echo(f"Credential storage: {availability}")
    typer.echo(f"Stored OpenAI API key: {status}")


@app.command("models")
def models_command(
    api_key: Annotated[
        str | None, typer.Option("--api-key", help="OpenAI API key override.")
    ] = None,
) -> None:
    """List GPT models available to the configured API key."""

    try:
        resolved_api_key = resolve_api_key(
            cli_api_key=api_key,
            interactive=False,
            store_api_key=False,
        )
        model_ids = OpenAIChatClient(api_key=resolved_api_key).list_models()
    except Exception as exc:
        exit_with_command_error("models", exc)

    for model_id in model_ids:
        typer.echo(model_id)
    typer.echo(f"Total models: {len(model_ids)}")


@app.command("archive-stats")
def archive_stats_command(
    archive: Annotated[Path, typer.Argument(help="Path to a ZIP archive.")],
) -> None:
    """Print size and entry statistics of an archive."""

    try:
        stats = archive_stats(archive)
    except Exception as exc:
        exit_with_command_error("archive-stats", exc)

    echo_archive_stats(stats)


@app.command("extract")
def extract_command(
    archive: Annotated[Path, typer.Argument(help="Path to a ZIP archive.")],
    output_dir: Annotated[Path, typer.Argument(help="Directory to extract into.")],
) -> None:
    """Extract an archive and list the extracted files."""

    try:
        files = extract_archive(archive, output_dir)
    except Exception as exc:
        exit_with_command_error("extract", exc)

    echo_extracted_files(files)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
