"""
PDF text extraction with per-page progress.

Pages are read in document order with PyMuPDF. The text fragments (spans) of a
page are joined with single spaces and every page is followed by a blank line,
so page boundaries stay visible and no page is skipped.

Progress is reported once per page as round(pages_done / total_pages * 100).
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from doctrans_llms.errors import ExtractionError

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


def page_fragments(page) -> list[str]:
    """Collect the text spans of a PyMuPDF page in reading order."""
    fragments = []
    for block in page.get_text("dict")["blocks"]:
        if block.get("type") != 0:  # images carry no text
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if text:
                    fragments.append(text)
    return fragments


def extract_pdf_text(
    data: bytes,
    on_progress: Optional[Callable[[int], None]] = None,
) -> str:
    """Extract the text of every page of a PDF.

    Args:
        data: Raw PDF bytes
        on_progress: Called after each page with an integer percentage

    Returns:
        Concatenated page texts, each followed by a blank line

    Raises:
        ExtractionError: If the PDF is corrupted or password protected
    """
    try:
        import fitz  # PyMuPDF
    except ImportError:
        raise ImportError("PyMuPDF is required. Install with: pip install PyMuPDF")

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        logger.warning("Could not open PDF: %s", e)
        raise ExtractionError(
            "Failed to parse PDF file. It might be password protected or corrupted."
        ) from e

    try:
        if doc.needs_pass:
            raise ExtractionError(
                "Failed to parse PDF file. It might be password protected or corrupted."
            )

        total_pages = doc.page_count
        logger.debug("Extracting text from %d pages", total_pages)
        pages = []
        for index in range(total_pages):
            try:
                fragments = page_fragments(doc[index])
            except (RuntimeError, ValueError) as e:
                raise ExtractionError(
                    f"Failed to read page {index + 1} of the PDF file."
                ) from e
            pages.append(" ".join(fragments) + PAGE_SEPARATOR)
            if on_progress:
                on_progress(round((index + 1) / total_pages * 100))
        return "".join(pages)
    finally:
        doc.close()
