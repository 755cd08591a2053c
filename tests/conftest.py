"""Shared pytest fixtures for the neonbuilder test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from neonbuilder.config import PdfOptions
from neonbuilder.models.datatypes import ChatCompletion, Usage


class FakeCompletionClient:
    """Completion client that replays scripted responses or exceptions."""

    def __init__(self, responses: list[ChatCompletion | Exception]) -> None:
        """Initialize the script and call log."""

        self._responses = list(responses)
        self.calls: list[dict[str, object]] = []

    def chat_completion(self, **kwargs: object) -> ChatCompletion:
        """Record the call and return or raise the next scripted item."""

        self.calls.append(kwargs)
        if not self._responses:
            raise AssertionError("FakeCompletionClient ran out of scripted responses.")
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class RecordingSleeper:
    """Sleeper test double that records requested delays in seconds."""

    def __init__(self) -> None:
        """Initialize recording storage."""

        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        """Record a delay without sleeping."""

        self.delays.append(seconds)


class FakePdfRenderer:
    """Renderer test double writing a placeholder PDF payload."""

    def __init__(self) -> None:
        """Initialize render call log."""

        self.calls: list[tuple[str, Path, PdfOptions]] = []

    def render(self, html: str, output_path: Path, options: PdfOptions) -> None:
        """Record the call and write placeholder bytes."""

        self.calls.append((html, output_path, options))
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"%PDF-1.4 placeholder")


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Clear neonbuilder environment variables and isolate credential storage."""

    for name in (
        "OPENAI_API_KEY",
        "NEON_MODEL",
        "NEON_OUTPUT_DIR",
        "NEON_VERBOSE",
        "NEON_CREDENTIAL_BACKEND",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NEON_CONFIG_DIR", str(tmp_path / "neon-config"))


@pytest.fixture
def make_completion() -> Callable[..., ChatCompletion]:
    """Provide a factory for completions with simple token usage."""

    def _make(text: str, prompt_tokens: int = 100, completion_tokens: int = 50) -> ChatCompletion:
        return ChatCompletion(
            text=text,
            usage=Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )

    return _make


@pytest.fixture
def fake_client_factory() -> type[FakeCompletionClient]:
    """Provide the scripted completion client class."""

    return FakeCompletionClient


@pytest.fixture
def recording_sleeper() -> RecordingSleeper:
    """Provide a sleeper that records delays."""

    return RecordingSleeper()


@pytest.fixture
def fake_pdf_renderer() -> FakePdfRenderer:
    """Provide a renderer that writes placeholder PDFs."""

    return FakePdfRenderer()
