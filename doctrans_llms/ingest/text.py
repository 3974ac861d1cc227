"""
Plain-text decoding with byte-level progress.

Line-oriented uploads (.txt, .md, .csv, .srt, source files, ...) are decoded
as UTF-8 chunk by chunk, so progress can be reported while bytes are still
arriving. A leading byte-order mark is dropped.
"""

from __future__ import annotations

import codecs
import logging
from typing import Callable, Iterable, Iterator, Optional

from doctrans_llms.config import READ_CHUNK_SIZE
from doctrans_llms.errors import ExtractionError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def iter_chunks(data: bytes, chunk_size: int = READ_CHUNK_SIZE) -> Iterator[bytes]:
    """Split an in-memory upload into read-sized chunks."""
    for start in range(0, len(data), chunk_size):
        yield data[start:start + chunk_size]


def decode_stream(
    chunks: Iterable[bytes],
    total_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> str:
    """Decode UTF-8 text arriving in chunks.

    Args:
        chunks: Byte chunks in file order
        total_size: Total number of bytes, if known; without it only the
            final 100 is reported
        on_progress: Called with an integer percentage after each chunk

    Returns:
        The decoded text

    Raises:
        ExtractionError: If the bytes are not valid UTF-8
    """
    decoder = codecs.getincrementaldecoder("utf-8-sig")()
    parts: list[str] = []
    consumed = 0

    try:
        for chunk in chunks:
            parts.append(decoder.decode(chunk))
            consumed += len(chunk)
            if on_progress and total_size:
                on_progress(min(100, round(consumed / total_size * 100)))
        parts.append(decoder.decode(b"", final=True))
    except UnicodeDecodeError as e:
        logger.warning("Text decoding failed after %d bytes: %s", consumed, e)
        raise ExtractionError(
            "Failed to read file. It is not valid UTF-8 text."
        ) from e

    if on_progress:
        on_progress(100)
    return "".join(parts)


def decode_bytes(
    data: bytes,
    on_progress: Optional[ProgressCallback] = None,
    chunk_size: int = READ_CHUNK_SIZE,
) -> str:
    """Decode a complete upload, reporting progress per chunk."""
    return decode_stream(iter_chunks(data, chunk_size), len(data), on_progress)
