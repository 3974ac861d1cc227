"""
Utility functions used across CLI, extractor and exporter.

Functions:
    parse_file_name: Split a filename into base name and extension
    default_export_extension: Pick the export format suggested for an upload
    is_rtl: Check whether text contains Arabic-script characters
    text_direction: Layout direction ("rtl" or "ltr") for a piece of text

Example:
    >>> from doctrans_llms.utils import parse_file_name, text_direction
    >>> parse_file_name("report.v2.json")
    ('report.v2', '.json')
    >>> text_direction("سلام")
    'rtl'
"""

import re
from typing import Tuple

from doctrans_llms.config import DEFAULT_EXTENSION, EXPORT_EXTENSIONS

# Arabic block, which also covers the Persian letters
_RTL_PATTERN = re.compile(r"[\u0600-\u06FF]")


def parse_file_name(file_name: str) -> Tuple[str, str]:
    """
    Split a filename at its last dot.

    Args:
        file_name: Name as uploaded (no directory part)

    Returns:
        Tuple of (base_name, extension); the extension keeps its leading dot.
        Without a dot the whole name is the base and the extension is
        DEFAULT_EXTENSION.

    Example:
        >>> parse_file_name("README")
        ('README', '.txt')
    """
    index = file_name.rfind(".")
    if index == -1:
        return file_name, DEFAULT_EXTENSION
    return file_name[:index], file_name[index:]


def default_export_extension(extension: str) -> str:
    """Return the upload's extension if it can be exported, else plain text."""
    ext = extension.lower()
    return ext if ext in EXPORT_EXTENSIONS else DEFAULT_EXTENSION


def is_rtl(text: str) -> bool:
    return _RTL_PATTERN.search(text) is not None


def text_direction(text: str) -> str:
    return "rtl" if is_rtl(text) else "ltr"
