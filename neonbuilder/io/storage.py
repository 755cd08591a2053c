"""Output storage helpers for build artifacts.

Responsibilities:
- Create output directories idempotently.
- Write UTF-8 text artifacts under a build root.
- Measure the on-disk size of an output tree.
"""

from __future__ import annotations

from pathlib import Path


class OutputStore:
    """Filesystem-backed store rooted at one build output folder."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root output directory."""

        self.root = root

    def ensure_directory(self, relative_path: Path | str = "") -> Path:
        """Create a directory below the root (or the root itself) and return it."""

        path = self.root / relative_path
        path.mkdir(parents=True, exist_ok=True)
        return path

    def save_text(self, relative_path: Path | str, content: str) -> Path:
        """Save text content and return final path."""

        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def size_bytes(self) -> int:
        """Return the total size of all files under the root."""

        return directory_size(self.root)


def directory_size(path: Path) -> int:
    """Return the total size in bytes of regular files below `path`."""

    return sum(item.stat().st_size for item in path.rglob("*") if item.is_file())
