"""LLM integration for section content generation."""

from .generator import ChunkGenerator, ChunkRequest, CompletionClient, generate_chunk, generate_section
from .openai_client import OpenAIChatClient, OpenAIProviderError
from .prompts import PromptLibrary

__all__ = [
    "ChunkGenerator",
    "ChunkRequest",
    "CompletionClient",
    "OpenAIChatClient",
    "OpenAIProviderError",
    "PromptLibrary",
    "generate_chunk",
    "generate_section",
]
