"""Chunk and section content generation with retry handling.

Responsibilities:
- Issue one completion request per chunk through an injected client.
- Apply the attempt/backoff policy for empty, rate-limited, and failed responses.
- Run a section's chunks strictly in order and sum their token usage.

Key types:
- `CompletionClient`: protocol implemented by `OpenAIChatClient` and test fakes.
- `ChunkRequest`: parameters of one chunk generation.
- `ChunkGenerator`: retrying generator for a single chunk.
"""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Callable, Protocol

from loguru import logger

from ..config import Branding
from ..errors import (
    AuthenticationError,
    EmptyResponseError,
    GenerationError,
    UnknownSectionError,
)
from ..models.datatypes import ChatCompletion, SectionGeneration, Usage
from ..sections import SECTIONS, Section, get_section_by_id
from .prompts import PromptLibrary


ProgressCallback = Callable[[int, str, Usage], None]


class CompletionClient(Protocol):
    """Minimal chat-completions interface used by the generator."""

    def chat_completion(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> ChatCompletion:
        """Return completion text and usage for one request."""


@dataclass(frozen=True, slots=True)
class ChunkRequest:
    """Parameters for generating one chunk of a section."""

    model: str
    temperature: float
    max_tokens: int
    section: Section
    chunk_index: int
    total_chunks: int
    branding: Branding
    max_retries: int = 3
    retry_delay_ms: int = 1000


class ChunkGenerator:
    """Generate one chunk with bounded retries and linear backoff.

    Each attempt ends in one of four outcomes:
    - success: non-empty text is returned with its usage;
    - fatal: a rejected API key raises `AuthenticationError` at once;
    - rate limited: wait `retry_delay_ms * attempt * 2` and try again;
    - retryable: wait `retry_delay_ms * attempt` when attempts remain.

    After `max_retries` failed attempts a `GenerationError` carries the last
    failure message.
    """

    def __init__(
        self,
        client: CompletionClient,
        sleeper: Callable[[float], None] = time.sleep,
        prompt_library: PromptLibrary | None = None,
    ) -> None:
        self.client = client
        self.sleeper = sleeper
        self.prompt_library = prompt_library or PromptLibrary()

    def generate(self, request: ChunkRequest) -> ChatCompletion:
        """Generate one chunk, retrying recoverable failures."""

        system_prompt = self.prompt_library.content_system_prompt()
        user_prompt = self.prompt_library.section_chunk_prompt(
            request.section,
            request.chunk_index,
            request.total_chunks,
            request.branding,
        )
        chunk_label = f"{request.section.id}#{request.chunk_index + 1}"

        last_error: Exception | None = None
        for attempt in range(1, request.max_retries + 1):
            try:
                completion = self.client.chat_completion(
                    model=request.model,
                    system_prompt=system_prompt,
                    user_prompt=user_prompt,
                    temperature=request.temperature,
                    max_tokens=request.max_tokens,
                )
                if not completion.text:
                    raise EmptyResponseError("Empty response from OpenAI API")
                return completion
            except Exception as exc:
                last_error = exc
                failure_kind = getattr(exc, "failure_kind", None)

                if failure_kind == "invalid_api_key":
                    raise AuthenticationError("Invalid OpenAI API key") from exc

                if failure_kind == "rate_limited":
                    wait_ms = request.retry_delay_ms * attempt * 2
                    logger.warning(
                        f"Rate limited on {chunk_label}, waiting {wait_ms}ms "
                        f"(attempt {attempt}/{request.max_retries})."
                    )
                    self.sleeper(wait_ms / 1000)
                    continue

                logger.warning(
                    f"Attempt {attempt}/{request.max_retries} failed for {chunk_label}: {exc}"
                )
                if attempt < request.max_retries:
                    self.sleeper(request.retry_delay_ms * attempt / 1000)

        last_message = str(last_error) if last_error is not None else "Unknown error"
        raise GenerationError(
            f"Failed to generate content after {request.max_retries} attempts: "
            f"{last_message}"
        ) from last_error


def generate_chunk(
    client: CompletionClient,
    request: ChunkRequest,
    sleeper: Callable[[float], None] = time.sleep,
) -> ChatCompletion:
    """Generate one chunk with a fresh `ChunkGenerator`."""

    return ChunkGenerator(client, sleeper=sleeper).generate(request)


def generate_section(
    client: CompletionClient,
    *,
    section_id: str,
    num_chunks: int,
    model: str,
    temperature: float,
    branding: Branding,
    on_progress: ProgressCallback | None = None,
    max_retries: int = 3,
    retry_delay_ms: int = 1000,
    max_tokens: int = 4000,
    sleeper: Callable[[float], None] = time.sleep,
    catalog: tuple[Section, ...] = SECTIONS,
) -> SectionGeneration:
    """Generate all chunks of one section in order.

    `on_progress(chunk_index, content, usage)` runs after each chunk and
    before the next request. The first chunk failure aborts the section.

    Raises:
        UnknownSectionError: If `section_id` is not in `catalog`; no request is made.
        GenerationError: If any chunk fails.
    """

    section = get_section_by_id(section_id, catalog)
    if section is None:
        raise UnknownSectionError(section_id)

    generator = ChunkGenerator(client, sleeper=sleeper)
    chunks: list[str] = []
    total_usage = Usage()
    for chunk_index in range(num_chunks):
        completion = generator.generate(
            ChunkRequest(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                section=section,
                chunk_index=chunk_index,
                total_chunks=num_chunks,
                branding=branding,
                max_retries=max_retries,
                retry_delay_ms=retry_delay_ms,
            )
        )
        chunks.append(completion.text)
        total_usage = total_usage + completion.usage
        if on_progress is not None:
            on_progress(chunk_index, completion.text, completion.usage)

    return SectionGeneration(chunks=tuple(chunks), total_usage=total_usage)
