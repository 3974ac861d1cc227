"""
Project-wide configuration.

This module defines the constants shared by the extractor, the streaming
orchestrator and the exporter: the file-format allow-lists, the progress
heuristic, provider defaults and the user configuration directory.

Module Contents:
    APP_NAME: Application name for display purposes
    SUPPORTED_EXTENSIONS: Extensions accepted for ingestion
    EXPORT_EXTENSIONS: Extensions offered for export
    DEFAULT_EXTENSION: Extension assumed when a filename has none
    EXPECTED_LENGTH_FACTOR: Translated length estimate relative to the input
    PRE_COMPLETION_CAP: Highest progress shown while a stream is still open
    DEFAULT_SYSTEM_PROMPT: Instructions sent with every translation request
    CONFIG_DIR: Per-user directory for stored keys

Some values can be overridden through environment variables
(DOCTRANS_BACKEND, DOCTRANS_MODEL, DOCTRANS_EXPECTED_LENGTH_FACTOR).

Example:
    >>> from doctrans_llms.config import EXPORT_EXTENSIONS
    >>> ".docx" in EXPORT_EXTENSIONS
    True
"""

import logging
import os
from pathlib import Path

# Application name for display and identification
APP_NAME = "DocTrans-LLMs"

# Ingestion allow-list (fixed, never sniffed from content)
SUPPORTED_EXTENSIONS = (
    ".txt", ".md", ".json", ".csv", ".xml", ".html",
    ".js", ".ts", ".tsx", ".jsx", ".css", ".srt", ".vtt", ".pdf",
)

# Export allow-list
EXPORT_EXTENSIONS = (
    ".txt", ".md", ".json", ".html", ".csv", ".xml", ".srt", ".vtt", ".pdf", ".docx",
)

DEFAULT_EXTENSION = ".txt"

# Progress estimation for streamed translations
EXPECTED_LENGTH_FACTOR = float(os.getenv("DOCTRANS_EXPECTED_LENGTH_FACTOR", "1.2"))
PRE_COMPLETION_CAP = 95.0

# Provider defaults
DEFAULT_BACKEND = os.getenv("DOCTRANS_BACKEND", "openai")
DEFAULT_MODEL = os.getenv("DOCTRANS_MODEL")
DEFAULT_TEMPERATURE = 0.3

# Bytes decoded per step when reading plain-text uploads
READ_CHUNK_SIZE = 64 * 1024

# Cosmetic save milestones: (percent, delay in seconds)
SAVE_STEPS = ((20, 0.2), (50, 0.4), (80, 0.3), (100, 0.2))

# Per-user configuration (stored API keys)
CONFIG_DIR = Path.home() / ".doctrans"

DEFAULT_SYSTEM_PROMPT = """You are an expert, high-precision translator specializing in academic and technical documents.
Your mission is to translate the provided text completely from the first word to the last, without omitting a single sentence, word, or detail.

STRICT RULES:
1. **NO SUMMARIZATION**: Do not summarize, shorten, or explain the text. Translate strictly verbatim.
2. **PRESERVE FORMATTING**: Keep the exact structure of the original text.
   - If there is a list, keep it as a list.
   - If there are headers, keep them as headers.
   - If there are paragraphs, keep the exact paragraph breaks.
3. **COMPLETE TRANSLATION**: Ensure every footnote, reference, and caption is translated (or kept in original if it's a proper noun/reference).
4. **PERSIAN STYLE**: When translating to Persian, use a formal, academic, and fluent tone (Standard Persian). Use correct terminology.
5. **OUTPUT ONLY**: Return ONLY the translated text. Do not add "Here is the translation" or any conversational filler.
6. **STRUCTURE**: If the input has specific indentation or bullet points, replicate them in the output.

Your goal is to create a translation that mirrors the original document's layout and content perfectly."""


def configure_logging(verbose: bool = False) -> None:
    """Route package logging through rich for terminal use.

    Args:
        verbose: Log at DEBUG instead of WARNING
    """
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
