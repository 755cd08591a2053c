"""Domain exceptions for pipeline and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class UnknownSectionError(ValueError):
    """Raised when a section id is not present in the section catalog."""

    def __init__(self, section_id: str) -> None:
        super().__init__(f"Unknown section ID: {section_id}")
        self.section_id = section_id


class GenerationError(RuntimeError):
    """Raised when content generation for one chunk cannot complete."""


class EmptyResponseError(GenerationError):
    """Raised for one attempt when the provider returns no generated text."""


class AuthenticationError(GenerationError):
    """Raised when the provider rejects the configured API credential."""
