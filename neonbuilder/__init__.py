"""Top-level package for neonbuilder.

This package generates commercial digital product bundles: AI-written section
content, optional branded PDFs, and ZIP archives. The main orchestration entry
point is `BuildCoordinator`.
"""

from .pipeline import BuildCoordinator

__all__ = ["BuildCoordinator", "__version__"]

__version__ = "1.0.0"
