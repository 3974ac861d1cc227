"""
Ingestion module: turn uploads into plain text.

This module provides:
- extract(): bytes + declared extension -> text, with progress callbacks
- extract_stream(): the same for uploads arriving in chunks
- extract_document() / extract_file(): build a Document from an upload

Only extensions in SUPPORTED_EXTENSIONS are accepted; the format is taken from
the extension, never sniffed from the content.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Optional

from doctrans_llms.config import SUPPORTED_EXTENSIONS
from doctrans_llms.errors import ExtractionError
from doctrans_llms.ingest.pdf import extract_pdf_text
from doctrans_llms.ingest.text import decode_bytes, decode_stream
from doctrans_llms.models import Document, SourceFormat, normalize_extension
from doctrans_llms.utils import parse_file_name

ProgressCallback = Callable[[int], None]


def _check_supported(extension: str) -> str:
    ext = normalize_extension(extension)
    if ext not in SUPPORTED_EXTENSIONS:
        raise ExtractionError(
            f"Unsupported file type: {ext}. "
            f"Supported types: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    return ext


def extract(
    data: bytes,
    extension: str,
    on_progress: Optional[ProgressCallback] = None,
) -> str:
    """Extract plain text from an upload.

    Args:
        data: Raw file bytes
        extension: Declared extension (".pdf", "txt", ...)
        on_progress: Called with integer percentages

    Raises:
        ExtractionError: Unsupported extension or undecodable content
    """
    ext = _check_supported(extension)
    if ext == ".pdf":
        return extract_pdf_text(data, on_progress)
    return decode_bytes(data, on_progress)


def extract_stream(
    chunks: Iterable[bytes],
    extension: str,
    total_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> str:
    """Extract text from an upload delivered in chunks.

    PDFs need the whole file, so their chunks are joined first and progress
    is reported per page.
    """
    ext = _check_supported(extension)
    if ext == ".pdf":
        return extract_pdf_text(b"".join(chunks), on_progress)
    return decode_stream(chunks, total_size, on_progress)


def extract_document(
    data: bytes,
    file_name: str,
    on_progress: Optional[ProgressCallback] = None,
) -> Document:
    """Extract an upload into a new Document."""
    name, extension = parse_file_name(file_name)
    text = extract(data, extension, on_progress)
    source_format = (
        SourceFormat.PAGINATED if normalize_extension(extension) == ".pdf"
        else SourceFormat.PLAIN
    )
    return Document(
        name=name,
        content=text,
        source_format=source_format,
        extension=normalize_extension(extension),
    )


def extract_file(
    path: Path | str,
    on_progress: Optional[ProgressCallback] = None,
) -> Document:
    """Read a file from disk and extract it."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ExtractionError(f"Failed to read file: {path}") from e
    return extract_document(data, path.name, on_progress)


__all__ = [
    "extract",
    "extract_stream",
    "extract_document",
    "extract_file",
    "extract_pdf_text",
    "decode_bytes",
    "decode_stream",
]
