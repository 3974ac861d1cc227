"""
DocTrans-LLMs: Streaming Document Translation with Multi-Format Export

Translates typed text, plain-text files and PDFs between English and
Persian with a streaming LLM, then exports the result as text, a Word
document or a printable page.

Components:
1. Ingestion with progress (plain text by bytes, PDF by pages)
2. Streaming translation with estimated progress
3. Direction-aware export (RTL/LTR per line)

License: MIT
"""

__version__ = "0.1.0"

from doctrans_llms.models import Document, Language, TranslationRequest, TranslationSession
from doctrans_llms.session import StreamingOrchestrator

__all__ = [
    "Document",
    "Language",
    "TranslationRequest",
    "TranslationSession",
    "StreamingOrchestrator",
]
