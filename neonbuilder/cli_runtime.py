"""CLI runtime resolution helpers.

This module isolates API-key resolution, interactive build prompts, and
config layer assembly from the command wiring layer.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Protocol

import typer

from .config import PAGE_FORMATS, BuildConfig, ConfigLoader
from .credentials import create_credential_store
from .errors import PipelineStageError
from .parsing import normalize_optional_string, parse_chunk_override
from .sections import SECTIONS


class CredentialStoreProtocol(Protocol):
    """Protocol for credential store operations used by CLI runtime resolution."""

    def get_api_key(self) -> str | None:
        """Return currently stored API key, if available."""

    def set_api_key(self, api_key: str) -> None:
        """Persist API key value."""


def load_yaml_layer(config_path: Path | None) -> dict[str, Any]:
    """Load a YAML config layer when requested and map failures to stage errors."""

    if config_path is None:
        return {}

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def build_cli_layer(
    *,
    out: Path | None = None,
    root_folder: str | None = None,
    model: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
    max_retries: int | None = None,
    retry_delay_ms: int | None = None,
    generate_pdfs: bool | None = None,
    page_format: str | None = None,
    sections: list[str] | None = None,
    chunk_overrides: list[str] | None = None,
    primary_color: str | None = None,
    secondary_color: str | None = None,
    logo: str | None = None,
    footer_text: str | None = None,
    verbose: bool = False,
) -> dict[str, Any]:
    """Return a config layer holding only explicitly provided CLI options."""

    layer: dict[str, Any] = {}
    scalar_values = {
        "output_dir": out,
        "root_folder": root_folder,
        "model": model,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "max_retries": max_retries,
        "retry_delay_ms": retry_delay_ms,
        "generate_pdfs": generate_pdfs,
    }
    for key, value in scalar_values.items():
        if value is not None:
            layer[key] = value
    if verbose:
        layer["verbose_logging"] = True
    if sections:
        layer["selected_sections"] = list(sections)
    if chunk_overrides:
        try:
            layer["chunk_overrides"] = dict(
                parse_chunk_override(token) for token in chunk_overrides
            )
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Use `--chunks core_prompts=3` (repeatable).",
            ) from exc
    if page_format is not None:
        layer["pdf"] = {"page_format": page_format}

    branding = {
        key: value
        for key, value in {
            "primary_color": primary_color,
            "secondary_color": secondary_color,
            "logo_url": logo,
            "footer_text": footer_text,
        }.items()
        if value is not None
    }
    if branding:
        layer["branding"] = branding
    return layer


def prompt_build_layer(base: BuildConfig) -> dict[str, Any]:
    """Prompt for every build setting, using `base` values as defaults."""

    root_folder = typer.prompt("Root folder name", default=base.root_folder).strip()
    output_dir = typer.prompt("Output directory", default=str(base.output_dir)).strip()
    model = typer.prompt("OpenAI model", default=base.model).strip()
    temperature = typer.prompt("Temperature (0-2)", default=base.temperature, type=float)
    generate_pdfs = typer.confirm("Generate PDFs?", default=base.generate_pdfs)
    page_format = base.pdf.page_format
    if generate_pdfs:
        page_format = typer.prompt(
            f"Page format ({', '.join(PAGE_FORMATS)})",
            default=base.pdf.page_format,
        ).strip()

    primary_color = typer.prompt("Primary color", default=base.branding.primary_color).strip()
    secondary_color = typer.prompt(
        "Secondary color", default=base.branding.secondary_color
    ).strip()
    footer_text = typer.prompt("Footer text", default=base.branding.footer_text).strip()
    logo = typer.prompt(
        "Logo URL or file path (blank for none)",
        default=base.branding.logo_url,
        show_default=bool(base.branding.logo_url),
    ).strip()

    for section in SECTIONS:
        typer.echo(f"  {section.id}: {section.label} ({section.default_chunks} chunks)")
    selected = typer.prompt(
        "Sections to build (comma-separated)",
        default=",".join(base.selected_sections),
    )
    selected_sections = [
        token for token in (normalize_optional_string(item) for item in selected.split(",")) if token
    ]

    chunk_overrides = dict(base.chunk_overrides)
    if typer.confirm("Customize chunk counts?", default=False):
        for section in SECTIONS:
            if section.id not in selected_sections:
                continue
            chunk_overrides[section.id] = typer.prompt(
                f"Chunks for {section.id}",
                default=base.chunk_overrides.get(section.id, section.default_chunks),
                type=int,
            )

    return {
        "root_folder": root_folder,
        "output_dir": output_dir,
        "model": model,
        "temperature": temperature,
        "generate_pdfs": generate_pdfs,
        "pdf": {"page_format": page_format},
        "branding": {
            "primary_color": primary_color,
            "secondary_color": secondary_color,
            "footer_text": footer_text,
            "logo_url": logo,
        },
        "selected_sections": selected_sections,
        "chunk_overrides": chunk_overrides,
    }


def _stdin_is_interactive() -> bool:
    """Return whether stdin is attached to a terminal."""

    return sys.stdin.isatty()


def resolve_api_key(
    *,
    cli_api_key: str | None,
    interactive: bool,
    store_api_key: bool,
    env: Mapping[str, str] | None = None,
    credential_store_factory: Callable[[], CredentialStoreProtocol] = create_credential_store,
    stdin_is_interactive: Callable[[], bool] = _stdin_is_interactive,
) -> str:
    """Resolve the OpenAI API key for one run.

    Order: `OPENAI_API_KEY`, `--api-key`, stored credential, then a hidden
    prompt when the session is interactive. A CLI or prompted key is stored
    when `store_api_key` is set; a prompted key also needs confirmation.

    Raises:
        PipelineStageError: If no key can be resolved or a prompted key is malformed.
    """

    env_map: Mapping[str, str] = os.environ if env is None else env
    env_api_key = normalize_optional_string(env_map.get("OPENAI_API_KEY"))
    if env_api_key is not None:
        return env_api_key

    credential_store = credential_store_factory()
    cli_key = normalize_optional_string(cli_api_key)
    if cli_key is not None:
        if store_api_key:
            _store_api_key(credential_store, cli_key)
        return cli_key

    stored_api_key = credential_store.get_api_key()
    if stored_api_key is not None:
        return stored_api_key

    if interactive or stdin_is_interactive():
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "OpenAI API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is not None:
            if not prompted_api_key.startswith("sk-"):
                raise PipelineStageError(
                    stage="credentials",
                    detail="API key should start with `sk-`.",
                    hint="Copy the full key from the OpenAI dashboard.",
                )
            if store_api_key and typer.confirm(
                "Save API key for future runs?", default=True
            ):
                _store_api_key(credential_store, prompted_api_key)
            return prompted_api_key

    raise PipelineStageError(
        stage="credentials",
        detail="OpenAI API key is not configured.",
        hint=(
            "Set `OPENAI_API_KEY`, pass `--api-key`, or run "
            "`neonbuilder credentials --set-api-key`."
        ),
    )


def _store_api_key(credential_store: CredentialStoreProtocol, api_key: str) -> None:
    """Persist an API key, mapping storage failures to a credentials stage error."""

    try:
        credential_store.set_api_key(api_key)
    except (OSError, RuntimeError, ValueError) as exc:
        raise PipelineStageError(
            stage="credentials",
            detail=f"Failed to store API key: {exc}",
            hint="Check `NEON_CONFIG_DIR` permissions, or rerun with `--no-store-api-key`.",
        ) from exc
    typer.echo("Stored API key in credential storage.")
