"""
Export module: serialize translated text and deliver it.

This module provides:
- export(): text + base name + extension -> Artifact
- FileDelivery: saves artifacts, opening print pages in the browser
"""

from doctrans_llms.render.delivery import FileDelivery
from doctrans_llms.render.export import (
    PLAIN_MIME_TYPES,
    build_print_html,
    build_word_html,
    export,
    export_spec,
    mime_type_for,
)

__all__ = [
    "export",
    "export_spec",
    "build_word_html",
    "build_print_html",
    "mime_type_for",
    "PLAIN_MIME_TYPES",
    "FileDelivery",
]
