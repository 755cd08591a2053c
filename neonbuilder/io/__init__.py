"""Filesystem helpers for build outputs."""

from .storage import OutputStore, directory_size

__all__ = ["OutputStore", "directory_size"]
