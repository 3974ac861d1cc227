"""
Error taxonomy.

Every failure is reported once to the caller; nothing here is retried.

- ExtractionError: the upload is unsupported, unreadable, corrupted or
  password protected. Translation is not attempted.
- ProviderStreamError: the provider failed (or the run was cancelled or timed
  out) while streaming. The session ends in the error state but keeps its
  partial output.
- ExportError: the host refused to save or print the artifact. The translated
  text is untouched and the save may be retried.
"""

from __future__ import annotations


class DocTransError(Exception):
    """Base class for all DocTrans-LLMs errors."""


class ExtractionError(DocTransError):
    """Raised when an upload cannot be turned into plain text."""


class ProviderStreamError(DocTransError):
    """Raised when the translation stream fails before completion."""


class ExportError(DocTransError):
    """Raised when an artifact cannot be delivered."""
