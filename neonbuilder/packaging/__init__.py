"""Archive packaging for section and bundle outputs."""

from .archive import (
    Archive,
    ArchiveEntryStats,
    ArchiveStats,
    archive_stats,
    create_master_archive,
    create_section_archive,
    extract_archive,
)

__all__ = [
    "Archive",
    "ArchiveEntryStats",
    "ArchiveStats",
    "archive_stats",
    "create_master_archive",
    "create_section_archive",
    "extract_archive",
]
