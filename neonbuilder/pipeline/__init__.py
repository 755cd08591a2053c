"""Build pipeline orchestration."""

from .orchestrator import CHUNK_SEPARATOR, BuildCoordinator

__all__ = ["CHUNK_SEPARATOR", "BuildCoordinator"]
