"""Configuration model and loaders for neonbuilder.

Responsibilities:
- Define build configuration as frozen, typed dataclasses.
- Load partial configuration layers from YAML files and environment variables.
- Merge layers with deterministic precedence and validate the result.

Key types:
- `Branding`: colors, footer, font, and logo used by generated documents.
- `PdfOptions`: page format and margins for rendered PDFs.
- `BuildConfig`: resolved settings for one build run.
- `ConfigLoader`: YAML and environment layer helpers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from .parsing import (
    has_invalid_folder_characters,
    is_hex_color,
    normalize_optional_string,
    parse_permissive_boolean,
)
from .sections import SECTIONS, Section, get_section_by_id, section_ids


PAGE_FORMATS = ("A3", "A4", "A5", "Letter", "Legal")
MAX_CHUNKS_PER_SECTION = 100
_REMOTE_LOGO_PREFIXES = ("http://", "https://", "data:")


@dataclass(frozen=True, slots=True)
class Branding:
    """Visual identity applied to generated documents.

    Attributes:
        primary_color: Accent color for headings and rules (`#RRGGBB`).
        secondary_color: Page background color (`#RRGGBB`).
        accent_color: Panel background color (`#RRGGBB`).
        text_color: Body text color (`#RRGGBB`).
        footer_text: Footer line printed under every document.
        font_family: CSS font-family stack.
        logo_url: Remote URL, `data:` URI, or local file path; empty for no logo.
        logo_is_local: Whether `logo_url` points at a local file.
    """

    primary_color: str = "#00FFC8"
    secondary_color: str = "#1a1a2e"
    accent_color: str = "#16213e"
    text_color: str = "#ffffff"
    footer_text: str = "© Neon Prompt Engine"
    font_family: str = "Arial, Helvetica, sans-serif"
    logo_url: str = ""
    logo_is_local: bool = False


@dataclass(frozen=True, slots=True)
class PdfOptions:
    """Page setup for rendered PDFs, margins in points."""

    page_format: str = "A4"
    margin_top: float = 40.0
    margin_right: float = 40.0
    margin_bottom: float = 40.0
    margin_left: float = 40.0


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Resolved configuration for one build run.

    Attributes:
        root_folder: Folder name created under `output_dir` for this bundle.
        output_dir: Base output directory.
        model: OpenAI chat model identifier.
        temperature: Sampling temperature in `[0, 2]`.
        max_tokens: Completion token limit per chunk.
        max_retries: Attempts per chunk before generation fails.
        retry_delay_ms: Base backoff delay in milliseconds.
        generate_pdfs: Whether a PDF is rendered per section.
        pdf: PDF page setup.
        branding: Document branding.
        selected_sections: Ordered, de-duplicated section ids to build.
        chunk_overrides: Per-section chunk counts replacing catalog defaults.
        compression_level: DEFLATE level for archives (0-9).
        include_source_files: Accepted for config compatibility; builds always
            archive PDFs only and keep combined text files on disk.
        verbose_logging: Whether debug logs are emitted.
    """

    root_folder: str = "NeonPromptEngine"
    output_dir: Path = Path("./dist")
    model: str = "gpt-4"
    temperature: float = 0.7
    max_tokens: int = 4000
    max_retries: int = 3
    retry_delay_ms: int = 1000
    generate_pdfs: bool = True
    pdf: PdfOptions = field(default_factory=PdfOptions)
    branding: Branding = field(default_factory=Branding)
    selected_sections: tuple[str, ...] = section_ids()
    chunk_overrides: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType({})
    )
    compression_level: int = 9
    include_source_files: bool = True
    verbose_logging: bool = False

    def validate(self) -> None:
        """Validate configuration values before any build work starts.

        Raises:
            ValueError: On the first invalid field found.
        """

        root = self.root_folder.strip() if isinstance(self.root_folder, str) else ""
        if not root:
            raise ValueError("`root_folder` must be a non-empty folder name.")
        if has_invalid_folder_characters(root):
            raise ValueError(
                f"`root_folder` `{root}` contains invalid characters (<>:\"/\\|?*)."
            )
        if not isinstance(self.model, str) or not self.model.strip():
            raise ValueError("`model` must be a non-empty string.")
        if not 0 <= self.temperature <= 2:
            raise ValueError("`temperature` must be between 0 and 2.")
        if self.max_tokens <= 0:
            raise ValueError("`max_tokens` must be a positive integer.")
        if self.max_retries < 0:
            raise ValueError("`max_retries` must not be negative.")
        if self.retry_delay_ms < 0:
            raise ValueError("`retry_delay_ms` must not be negative.")
        if not 0 <= self.compression_level <= 9:
            raise ValueError("`compression_level` must be between 0 and 9.")
        for color_field in ("primary_color", "secondary_color", "accent_color", "text_color"):
            value = getattr(self.branding, color_field)
            if not is_hex_color(value):
                raise ValueError(
                    f"`branding.{color_field}` `{value}` must be a hex color like #00FFC8."
                )
        if self.pdf.page_format not in PAGE_FORMATS:
            supported = ", ".join(PAGE_FORMATS)
            raise ValueError(
                f"Unsupported page format `{self.pdf.page_format}`; supported: {supported}."
            )
        if not self.selected_sections:
            raise ValueError("At least one section must be selected.")
        for section_id in self.selected_sections:
            if get_section_by_id(section_id) is None:
                raise ValueError(f"Unknown section ID: {section_id}")
        for section_id, count in self.chunk_overrides.items():
            if get_section_by_id(section_id) is None:
                raise ValueError(f"Chunk override targets unknown section ID: {section_id}")
            if not 1 <= count <= MAX_CHUNKS_PER_SECTION:
                raise ValueError(
                    f"Chunk override for `{section_id}` must be between 1 and "
                    f"{MAX_CHUNKS_PER_SECTION}."
                )

    def effective_chunks(self, section: Section) -> int:
        """Return the override chunk count for a section, or its catalog default."""

        return self.chunk_overrides.get(section.id, section.default_chunks)

    def selected_catalog(self) -> tuple[Section, ...]:
        """Return selected section records in selection order."""

        resolved: list[Section] = []
        for section_id in self.selected_sections:
            section = get_section_by_id(section_id)
            if section is None:
                raise ValueError(f"Unknown section ID: {section_id}")
            resolved.append(section)
        return tuple(resolved)


DEFAULT_CONFIG = BuildConfig()


class ConfigLoader:
    """Helpers that read partial configuration layers from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "root_folder",
            "output_dir",
            "model",
            "temperature",
            "max_tokens",
            "max_retries",
            "retry_delay_ms",
            "generate_pdfs",
            "pdf",
            "branding",
            "selected_sections",
            "chunk_overrides",
            "compression_level",
            "include_source_files",
            "verbose_logging",
        }
    )
    _SUPPORTED_BRANDING_KEYS = frozenset(Branding.__dataclass_fields__)
    _SUPPORTED_PDF_KEYS = frozenset(PdfOptions.__dataclass_fields__)

    @staticmethod
    def from_yaml(path: Path) -> dict[str, Any]:
        """Read one configuration layer from a YAML file.

        Raises:
            ValueError: If the root is not a mapping or a key is unsupported.
        """

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        source_label = f"YAML `{path}`"
        ConfigLoader._validate_keys(payload, ConfigLoader._SUPPORTED_YAML_KEYS, source_label)
        for nested_key, supported in (
            ("branding", ConfigLoader._SUPPORTED_BRANDING_KEYS),
            ("pdf", ConfigLoader._SUPPORTED_PDF_KEYS),
        ):
            if nested_key not in payload:
                continue
            nested = payload[nested_key]
            if not isinstance(nested, Mapping):
                raise ValueError(f"{source_label} key `{nested_key}` must be a mapping.")
            ConfigLoader._validate_keys(nested, supported, f"{source_label} `{nested_key}`")
        return dict(payload)

    @staticmethod
    def env_overrides(env: Mapping[str, str] | None = None) -> dict[str, Any]:
        """Read one configuration layer from `NEON_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        layer: dict[str, Any] = {}
        model = normalize_optional_string(env_map.get("NEON_MODEL"))
        if model is not None:
            layer["model"] = model
        output_dir = normalize_optional_string(env_map.get("NEON_OUTPUT_DIR"))
        if output_dir is not None:
            layer["output_dir"] = output_dir
        if env_map.get("NEON_VERBOSE") == "true":
            layer["verbose_logging"] = True
        return layer

    @staticmethod
    def _validate_keys(
        payload: Mapping[str, Any], supported: frozenset[str], source_label: str
    ) -> None:
        """Reject keys outside the supported set."""

        unknown = sorted(str(key) for key in set(payload).difference(supported))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")


def resolve_build_config(*layers: Mapping[str, Any] | None) -> BuildConfig:
    """Merge configuration layers over `DEFAULT_CONFIG` and validate the result.

    Later layers win. Nested `branding` and `pdf` mappings merge key by key,
    so a layer that sets only `branding.footer_text` keeps earlier colors.

    Raises:
        ValueError: If a value cannot be coerced or the merged config is invalid.
    """

    merged: dict[str, Any] = {
        config_field.name: getattr(DEFAULT_CONFIG, config_field.name)
        for config_field in fields(BuildConfig)
        if config_field.name not in {"branding", "pdf"}
    }
    branding: dict[str, Any] = asdict(DEFAULT_CONFIG.branding)
    pdf: dict[str, Any] = asdict(DEFAULT_CONFIG.pdf)
    explicit_logo_locality = False

    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if key == "branding":
                branding.update(value)
                explicit_logo_locality = explicit_logo_locality or "logo_is_local" in value
            elif key == "pdf":
                pdf.update(value)
            else:
                merged[key] = value

    logo_url = normalize_optional_string(branding.get("logo_url")) or ""
    branding["logo_url"] = logo_url
    if explicit_logo_locality:
        branding["logo_is_local"] = _coerce_bool(branding["logo_is_local"], "logo_is_local")
    else:
        branding["logo_is_local"] = bool(logo_url) and not logo_url.startswith(
            _REMOTE_LOGO_PREFIXES
        )

    config = BuildConfig(
        root_folder=str(merged["root_folder"]).strip(),
        output_dir=Path(merged["output_dir"]),
        model=str(merged["model"]).strip(),
        temperature=_coerce_float(merged["temperature"], "temperature"),
        max_tokens=_coerce_int(merged["max_tokens"], "max_tokens"),
        max_retries=_coerce_int(merged["max_retries"], "max_retries"),
        retry_delay_ms=_coerce_int(merged["retry_delay_ms"], "retry_delay_ms"),
        generate_pdfs=_coerce_bool(merged["generate_pdfs"], "generate_pdfs"),
        pdf=PdfOptions(
            page_format=str(pdf["page_format"]),
            margin_top=_coerce_float(pdf["margin_top"], "pdf.margin_top"),
            margin_right=_coerce_float(pdf["margin_right"], "pdf.margin_right"),
            margin_bottom=_coerce_float(pdf["margin_bottom"], "pdf.margin_bottom"),
            margin_left=_coerce_float(pdf["margin_left"], "pdf.margin_left"),
        ),
        branding=Branding(**branding),
        selected_sections=_dedupe_sections(merged["selected_sections"]),
        chunk_overrides=MappingProxyType(
            {
                str(section_id): _coerce_int(count, f"chunk_overrides.{section_id}")
                for section_id, count in dict(merged["chunk_overrides"]).items()
            }
        ),
        compression_level=_coerce_int(merged["compression_level"], "compression_level"),
        include_source_files=_coerce_bool(
            merged["include_source_files"], "include_source_files"
        ),
        verbose_logging=_coerce_bool(merged["verbose_logging"], "verbose_logging"),
    )
    config.validate()
    return config


def _dedupe_sections(value: object) -> tuple[str, ...]:
    """Normalize a section selection into an ordered tuple without duplicates."""

    if isinstance(value, str):
        value = value.split(",")
    if value is None:
        return tuple(section.id for section in SECTIONS)
    ordered: list[str] = []
    for item in value:
        section_id = normalize_optional_string(item)
        if section_id is not None and section_id not in ordered:
            ordered.append(section_id)
    return tuple(ordered)


def _coerce_int(value: object, field_name: str) -> int:
    """Coerce integer-like values, rejecting booleans and fractions."""

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"`{field_name}` must be an integer.") from exc


def _coerce_float(value: object, field_name: str) -> float:
    """Coerce numeric values to float."""

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a number.")
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"`{field_name}` must be a number.") from exc


def _coerce_bool(value: object, field_name: str) -> bool:
    """Coerce permissive boolean tokens (`true`, `no`, `1`, ...)."""

    parsed = parse_permissive_boolean(value)
    if parsed is None:
        raise ValueError(f"`{field_name}` must be a boolean value.")
    return parsed
