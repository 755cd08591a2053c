"""ZIP archive building, inspection, and extraction.

Responsibilities:
- Collect named byte entries in insertion order and finalize them as DEFLATE ZIPs.
- Build per-section archives from a section directory and roll them into a master archive.
- Report archive statistics and extract archives without escaping the target directory.

Key types:
- `Archive`: ordered in-memory entry collection.
- `ArchiveStats`: read-only size and entry summary of an archive on disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import io
from pathlib import Path
from typing import Iterable
import zipfile


@dataclass(frozen=True, slots=True)
class ArchiveEntryStats:
    """Size metadata of one archive entry."""

    name: str
    compressed_size: int
    uncompressed_size: int
    is_dir: bool


@dataclass(frozen=True, slots=True)
class ArchiveStats:
    """Summary of an archive on disk.

    Attributes:
        path: Archive file path.
        compressed_size: On-disk archive size in bytes.
        uncompressed_size: Sum of uncompressed file entry sizes.
        file_count: Number of non-directory entries.
        entries: Per-entry metadata in archive order.
        compression_ratio: Space saved in percent, rounded to two decimals.
    """

    path: Path
    compressed_size: int
    uncompressed_size: int
    file_count: int
    entries: tuple[ArchiveEntryStats, ...]
    compression_ratio: float


@dataclass(slots=True)
class Archive:
    """Ordered name-to-bytes entry collection finalized into a ZIP file."""

    _entries: dict[str, bytes] = field(default_factory=dict)

    @property
    def names(self) -> tuple[str, ...]:
        """Return entry names in insertion order."""

        return tuple(self._entries)

    def add_entry(self, name: str, data: bytes | str) -> None:
        """Insert or overwrite one entry; `/` separates directories."""

        normalized = name.replace("\\", "/").lstrip("/")
        if not normalized:
            raise ValueError("Archive entry name must be non-empty.")
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._entries[normalized] = bytes(data)

    def add_file(self, path: Path, name: str | None = None) -> None:
        """Add one file from disk under `name` (defaults to its basename)."""

        self.add_entry(name or path.name, path.read_bytes())

    def add_tree(
        self,
        source_dir: Path,
        archive_prefix: str = "",
        extensions: Iterable[str] | None = None,
        recursive: bool = True,
    ) -> int:
        """Add files below `source_dir` and return how many were added.

        Args:
            source_dir: Directory to read.
            archive_prefix: Entry-name prefix, e.g. `core_prompts/`.
            extensions: Case-insensitive allow-list such as `(".txt",)`; `None`
                includes every file and an empty allow-list includes none.
            recursive: Whether to descend into subdirectories.

        Raises:
            FileNotFoundError: If `source_dir` does not exist.
        """

        if not source_dir.is_dir():
            raise FileNotFoundError(f"Archive source directory not found: {source_dir}")

        allowed = (
            None
            if extensions is None
            else {self._normalize_extension(extension) for extension in extensions}
        )
        prefix = archive_prefix.replace("\\", "/").strip("/")
        candidates = source_dir.rglob("*") if recursive else source_dir.iterdir()

        added = 0
        for path in sorted(candidates):
            if not path.is_file():
                continue
            if allowed is not None and path.suffix.lower() not in allowed:
                continue
            relative_name = path.relative_to(source_dir).as_posix()
            entry_name = f"{prefix}/{relative_name}" if prefix else relative_name
            self.add_entry(entry_name, path.read_bytes())
            added += 1
        return added

    def finalize(self, compression_level: int = 9) -> bytes:
        """Return the ZIP bytes of the current entries."""

        buffer = io.BytesIO()
        self._write_zip(buffer, compression_level)
        return buffer.getvalue()

    def write(self, output_path: Path, compression_level: int = 9) -> Path:
        """Write the ZIP to `output_path`, creating its parent directory."""

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("wb") as handle:
            self._write_zip(handle, compression_level)
        return output_path

    def _write_zip(self, target: io.BufferedIOBase | io.BytesIO, compression_level: int) -> None:
        """Serialize entries into a DEFLATE ZIP stream."""

        with zipfile.ZipFile(
            target,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compression_level,
        ) as archive:
            for name, data in self._entries.items():
                archive.writestr(name, data)

    @staticmethod
    def _normalize_extension(extension: str) -> str:
        """Normalize `txt`, `.TXT`, and `.txt` to `.txt`."""

        lowered = extension.strip().lower()
        return lowered if lowered.startswith(".") else f".{lowered}"


def create_section_archive(
    section_id: str,
    section_dir: Path,
    output_dir: Path,
    include_source_files: bool = True,
    include_pdfs: bool = True,
    compression_level: int = 9,
) -> Path:
    """Archive the top-level files of a section directory as `<section_id>.zip`.

    Entries are stored under `<section_id>/`. `.txt` files are included when
    `include_source_files` is set and `.pdf` files when `include_pdfs` is set;
    with both off the archive is empty.
    """

    extensions: list[str] = []
    if include_source_files:
        extensions.append(".txt")
    if include_pdfs:
        extensions.append(".pdf")

    archive = Archive()
    archive.add_tree(
        section_dir,
        archive_prefix=section_id,
        extensions=extensions,
        recursive=False,
    )
    return archive.write(output_dir / f"{section_id}.zip", compression_level)


def create_master_archive(
    section_archive_paths: Iterable[Path],
    output_path: Path,
    readme_path: Path | None = None,
    license_path: Path | None = None,
    compression_level: int = 9,
) -> Path:
    """Bundle section archives, plus optional README and license, into one ZIP.

    Raises:
        FileNotFoundError: If a section archive is missing.
    """

    archive = Archive()
    for section_archive in section_archive_paths:
        archive.add_file(section_archive)
    if readme_path is not None and readme_path.is_file():
        archive.add_file(readme_path, "README.md")
    if license_path is not None and license_path.is_file():
        archive.add_file(license_path, "LICENSE.txt")
    return archive.write(output_path, compression_level)


def archive_stats(archive_path: Path) -> ArchiveStats:
    """Read size and entry statistics of a ZIP file."""

    with zipfile.ZipFile(archive_path) as archive:
        entries = tuple(
            ArchiveEntryStats(
                name=info.filename,
                compressed_size=info.compress_size,
                uncompressed_size=info.file_size,
                is_dir=info.is_dir(),
            )
            for info in archive.infolist()
        )

    compressed_size = archive_path.stat().st_size
    uncompressed_size = sum(entry.uncompressed_size for entry in entries if not entry.is_dir)
    if uncompressed_size > 0:
        ratio = round((1 - compressed_size / uncompressed_size) * 100, 2)
    else:
        ratio = 0.0
    return ArchiveStats(
        path=archive_path,
        compressed_size=compressed_size,
        uncompressed_size=uncompressed_size,
        file_count=sum(1 for entry in entries if not entry.is_dir),
        entries=entries,
        compression_ratio=ratio,
    )


def extract_archive(archive_path: Path, output_dir: Path) -> list[Path]:
    """Extract a ZIP below `output_dir` and return the extracted file paths.

    Raises:
        ValueError: If an entry would be written outside `output_dir`.
    """

    output_dir.mkdir(parents=True, exist_ok=True)
    root = output_dir.resolve()
    extracted: list[Path] = []
    with zipfile.ZipFile(archive_path) as archive:
        for info in archive.infolist():
            target = (root / info.filename).resolve()
            if target != root and root not in target.parents:
                raise ValueError(
                    f"Archive entry `{info.filename}` escapes extraction directory."
                )
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(archive.read(info))
            extracted.append(target)
    return extracted
