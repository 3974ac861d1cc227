"""Instruction text sent to the streaming provider."""

from __future__ import annotations

import re
from typing import Optional

from doctrans_llms.models import Language

TEXT_FENCE = '"""'

_FENCED_TEXT = re.compile(
    r'Text to translate:\n"""\n(?P<text>.*)\n"""\s*$', re.DOTALL
)


def language_phrase(language: Language) -> str:
    """Name a language for the prompt; auto-detection asks the model to detect."""
    if language is Language.AUTO:
        return "the detected source language"
    return language.value


def build_instruction(
    text: str,
    source_language: Language,
    target_language: Language,
) -> str:
    """Build the instruction for one translation.

    The source text is fenced with triple quotes so that it is read as
    content, not as further instructions.

    Example:
        >>> print(build_instruction("Hi", Language.AUTO, Language.PERSIAN))
        Translate the following text from the detected source language to Persian (Farsi).
        <BLANKLINE>
        Text to translate:
        \"\"\"
        Hi
        \"\"\"
    """
    return (
        f"Translate the following text from {language_phrase(source_language)} "
        f"to {language_phrase(target_language)}.\n"
        "\n"
        "Text to translate:\n"
        f"{TEXT_FENCE}\n"
        f"{text}\n"
        f"{TEXT_FENCE}"
    )


def unwrap_source_text(instruction: str) -> Optional[str]:
    """Recover the fenced source text from an instruction built above."""
    match = _FENCED_TEXT.search(instruction)
    return match.group("text") if match else None
