"""
Streaming translation.

translate_stream() turns a source text into a lazy sequence of translated
fragments produced by a StreamingProvider. Session state and progress are
handled one level up, in doctrans_llms.session.
"""

from __future__ import annotations

import logging
from typing import Iterator

from doctrans_llms.config import DEFAULT_SYSTEM_PROMPT, DEFAULT_TEMPERATURE
from doctrans_llms.errors import ProviderStreamError
from doctrans_llms.models import Language
from doctrans_llms.translate.base import DummyProvider, StreamingProvider, create_provider
from doctrans_llms.translate.llm import ProviderConfig
from doctrans_llms.translate.prompting import build_instruction

logger = logging.getLogger(__name__)


def translate_stream(
    provider: StreamingProvider,
    text: str,
    source_language: Language,
    target_language: Language,
    system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    temperature: float = DEFAULT_TEMPERATURE,
) -> Iterator[str]:
    """Translate text, yielding fragments as the provider emits them.

    Whitespace-only text yields nothing and never reaches the provider.

    Raises:
        ProviderStreamError: Any failure of the provider call, with the
            original exception chained
    """
    if not text.strip():
        return

    instruction = build_instruction(text, source_language, target_language)
    try:
        for fragment in provider.stream(instruction, system_prompt, temperature):
            if fragment:
                yield fragment
    except ProviderStreamError:
        raise
    except Exception as e:
        logger.error("Translation stream error from %s: %s", provider.name, e)
        raise ProviderStreamError(f"Translation stream failed: {e}") from e


__all__ = [
    "translate_stream",
    "StreamingProvider",
    "DummyProvider",
    "ProviderConfig",
    "create_provider",
    "build_instruction",
]
