"""Typed data models used across Neon Builder modules."""

from .datatypes import (
    BuildResult,
    BuildStats,
    ChatCompletion,
    ChunkProgress,
    SectionGeneration,
    SectionResult,
    Usage,
)

__all__ = [
    "BuildResult",
    "BuildStats",
    "ChatCompletion",
    "ChunkProgress",
    "SectionGeneration",
    "SectionResult",
    "Usage",
]
