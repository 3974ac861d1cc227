"""
Streaming provider interface and offline implementations.

This module defines:
- Abstract StreamingProvider interface that all backends implement
- DummyProvider for testing and dry runs (echo or simple transformations)
- create_provider() factory

Design Philosophy:
- Providers are stateless: each stream() call carries the full instruction
- A provider yields text fragments in arrival order and simply raises on
  failure; wrapping, progress and session state belong to the orchestrator
- Credentials come from the ProviderConfig handed to the constructor
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterator, Optional

from doctrans_llms.translate.prompting import unwrap_source_text

if TYPE_CHECKING:
    from doctrans_llms.translate.llm import ProviderConfig


class StreamingProvider(ABC):
    """Abstract base class for streaming text-generation backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'openai', 'dummy-echo')."""
        pass

    @abstractmethod
    def stream(
        self,
        instruction: str,
        system_prompt: str,
        temperature: float,
    ) -> Iterator[str]:
        """Stream the response to an instruction.

        Args:
            instruction: User-facing instruction with the fenced source text
            system_prompt: Translation rules
            temperature: Sampling temperature

        Yields:
            Text fragments, in order, until the response is complete
        """
        pass


class DummyProvider(StreamingProvider):
    """A dummy provider for testing.

    Modes:
    - 'echo': Return the source text unchanged
    - 'upper': Return uppercase version
    - 'prefix': Add [TRANSLATED] prefix

    The output is emitted in fragments of `fragment_size` characters.
    """

    def __init__(self, mode: str = "prefix", fragment_size: int = 16):
        self.mode = mode
        self.fragment_size = max(1, fragment_size)

    @property
    def name(self) -> str:
        return f"dummy-{self.mode}"

    def stream(
        self,
        instruction: str,
        system_prompt: str,
        temperature: float,
    ) -> Iterator[str]:
        text = unwrap_source_text(instruction)
        if text is None:
            text = instruction

        if self.mode == "echo":
            translated = text
        elif self.mode == "upper":
            translated = text.upper()
        else:  # prefix
            translated = f"[TRANSLATED] {text}"

        for start in range(0, len(translated), self.fragment_size):
            yield translated[start:start + self.fragment_size]


def create_provider(backend: str, config: Optional["ProviderConfig"] = None, **kwargs) -> StreamingProvider:
    """Factory function to create a streaming provider by name.

    Args:
        backend: Provider backend name
        config: ProviderConfig with credentials and model settings
        **kwargs: Backend-specific arguments (e.g. mode for dummy)

    Supported backends and aliases:
        - dummy, echo, test: Offline test provider
        - openai, gpt: OpenAI chat models
        - deepseek, ds: DeepSeek (OpenAI-compatible API)
        - anthropic, claude: Anthropic Claude models
    """
    backend_lower = backend.lower().replace("_", "-")

    if backend_lower in ("dummy", "test"):
        return DummyProvider(mode=kwargs.get("mode", "prefix"))

    elif backend_lower == "echo":
        return DummyProvider(mode="echo")

    elif backend_lower in ("openai", "gpt"):
        from doctrans_llms.translate.llm import OpenAIProvider
        return OpenAIProvider(config)

    elif backend_lower in ("deepseek", "ds"):
        from doctrans_llms.translate.llm import DeepSeekProvider
        return DeepSeekProvider(config)

    elif backend_lower in ("anthropic", "claude"):
        from doctrans_llms.translate.llm import AnthropicProvider
        return AnthropicProvider(config)

    else:
        available = ["dummy", "echo", "openai", "deepseek", "anthropic"]
        raise ValueError(
            f"Unknown provider backend: {backend}. "
            f"Available backends: {', '.join(available)}"
        )
