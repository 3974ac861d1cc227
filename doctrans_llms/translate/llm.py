"""
LLM-based streaming providers.

This module provides:
- OpenAI chat-completions provider (GPT-4o, GPT-4o mini, ...)
- DeepSeek provider (OpenAI-compatible endpoint)
- Anthropic Claude provider

All providers run the model in streaming mode and yield text deltas as they
arrive. Credentials are never looked up here: the API key comes from the
ProviderConfig supplied by the caller (see doctrans_llms.keys).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from doctrans_llms.config import DEFAULT_MODEL as CONFIGURED_MODEL
from doctrans_llms.translate.base import StreamingProvider


@dataclass
class ProviderConfig:
    """Configuration for streaming providers.

    Attributes:
        api_key: Authenticates outbound calls
        model: Model name; None selects the backend default
        max_tokens: Upper bound on the response length
        base_url: Custom endpoint for OpenAI-compatible servers
        timeout: Network timeout in seconds passed to the HTTP client
    """
    api_key: Optional[str] = None
    model: Optional[str] = CONFIGURED_MODEL
    max_tokens: int = 8192
    base_url: Optional[str] = None
    timeout: float = 120.0


class BaseLLMProvider(StreamingProvider):
    """Shared configuration handling for hosted LLM providers."""

    DEFAULT_MODEL = "gpt-4o"
    SERVICE = "openai"

    def __init__(self, config: Optional[ProviderConfig] = None):
        self.config = config or ProviderConfig()
        self._client = None

    @property
    def model(self) -> str:
        return self.config.model or self.DEFAULT_MODEL

    @property
    def name(self) -> str:
        return f"{self.SERVICE}-{self.model}"

    def _require_key(self) -> str:
        if not self.config.api_key:
            raise ValueError(
                f"{self.SERVICE} API key required. Pass it in ProviderConfig(api_key=...) "
                f"or run: doctrans keys set {self.SERVICE}"
            )
        return self.config.api_key


class OpenAIProvider(BaseLLMProvider):
    """OpenAI chat-completions provider.

    Usage:
        provider = OpenAIProvider(ProviderConfig(api_key="sk-...", model="gpt-4o"))
        for fragment in provider.stream(instruction, system_prompt, 0.3):
            ...
    """

    DEFAULT_MODEL = "gpt-4o"
    SERVICE = "openai"
    DEFAULT_BASE_URL: Optional[str] = None

    def _get_client(self):
        """Lazy initialization of the OpenAI client."""
        if self._client is None:
            try:
                from openai import OpenAI
            except ImportError:
                raise ImportError(
                    "OpenAI library required. Install with: pip install openai"
                )

            kwargs = {
                "api_key": self._require_key(),
                "timeout": self.config.timeout,
                # Failures go straight to the caller
                "max_retries": 0,
            }
            base_url = self.config.base_url or self.DEFAULT_BASE_URL
            if base_url:
                kwargs["base_url"] = base_url

            self._client = OpenAI(**kwargs)

        return self._client

    def stream(
        self,
        instruction: str,
        system_prompt: str,
        temperature: float,
    ) -> Iterator[str]:
        client = self._get_client()
        response = client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": instruction},
            ],
            temperature=temperature,
            max_tokens=self.config.max_tokens,
            stream=True,
        )
        for chunk in response:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek API provider.

    Uses DeepSeek's chat API which is OpenAI-compatible.
    """

    DEFAULT_MODEL = "deepseek-chat"
    SERVICE = "deepseek"
    DEFAULT_BASE_URL = "https://api.deepseek.com/v1"


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude provider."""

    DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
    SERVICE = "anthropic"

    def _get_client(self):
        """Lazy initialization of the Anthropic client."""
        if self._client is None:
            try:
                import anthropic
            except ImportError:
                raise ImportError(
                    "Anthropic library required. Install with: pip install anthropic"
                )

            self._client = anthropic.Anthropic(
                api_key=self._require_key(),
                timeout=self.config.timeout,
                max_retries=0,
            )

        return self._client

    def stream(
        self,
        instruction: str,
        system_prompt: str,
        temperature: float,
    ) -> Iterator[str]:
        client = self._get_client()
        with client.messages.stream(
            model=self.model,
            max_tokens=self.config.max_tokens,
            system=system_prompt,
            temperature=temperature,
            messages=[{"role": "user", "content": instruction}],
        ) as response:
            for text in response.text_stream:
                if text:
                    yield text
