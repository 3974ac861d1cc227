"""
Core data models for DocTrans-LLMs.

- Document: extracted (or typed) source text
- TranslationRequest: what to translate and between which languages
- TranslationSession: state of one translate action
- ExportSpec / Artifact: what to export and what the exporter produced
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from doctrans_llms.config import DEFAULT_EXTENSION


class Language(Enum):
    """Languages offered for translation.

    Values are the names sent to the provider.
    """
    ENGLISH = "English"
    PERSIAN = "Persian (Farsi)"
    AUTO = "Auto Detect"

    @property
    def direction(self) -> str:
        return "rtl" if self is Language.PERSIAN else "ltr"

    @property
    def is_explicit(self) -> bool:
        return self is not Language.AUTO

    @classmethod
    def parse(cls, value: str) -> "Language":
        """Resolve a user-supplied name, code or enum value."""
        key = value.strip().lower()
        aliases = {
            "en": cls.ENGLISH,
            "eng": cls.ENGLISH,
            "english": cls.ENGLISH,
            "fa": cls.PERSIAN,
            "fas": cls.PERSIAN,
            "per": cls.PERSIAN,
            "persian": cls.PERSIAN,
            "farsi": cls.PERSIAN,
            "auto": cls.AUTO,
            "detect": cls.AUTO,
        }
        if key in aliases:
            return aliases[key]
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown language: {value}")


class SourceFormat(Enum):
    """How the source text was obtained."""
    PLAIN = "plain"
    PAGINATED = "paginated"


@dataclass(frozen=True)
class Document:
    """Source text ready for translation.

    A new Document is created for every upload; it is never edited afterwards.
    """
    name: str
    content: str
    source_format: SourceFormat = SourceFormat.PLAIN
    extension: str = DEFAULT_EXTENSION

    @classmethod
    def from_text(cls, text: str) -> "Document":
        """Document for text typed directly by the user."""
        return cls(name="", content=text)

    @property
    def export_base_name(self) -> str:
        return f"{self.name}_translated" if self.name else "translation"


@dataclass(frozen=True)
class TranslationRequest:
    """A translate action.

    Attributes:
        source_language: Explicit language or Language.AUTO
        target_language: Explicit language
        text: Source text; whitespace-only text makes the request a no-op
    """
    source_language: Language
    target_language: Language
    text: str

    def __post_init__(self):
        if not self.target_language.is_explicit:
            raise ValueError("Target language must be explicit")

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    def swapped(self) -> "TranslationRequest":
        """Exchange the language pair.

        With auto-detection as source, the old target becomes the source and
        English becomes the target.
        """
        if self.source_language is Language.AUTO:
            return TranslationRequest(self.target_language, Language.ENGLISH, self.text)
        return TranslationRequest(self.target_language, self.source_language, self.text)


class SessionStatus(Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    TRANSLATING = "translating"
    SUCCESS = "success"
    ERROR = "error"


_session_ids = itertools.count(1)


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session handed to callers."""
    session_id: int
    status: SessionStatus
    accumulated_text: str
    progress: float


@dataclass
class TranslationSession:
    """State of one translate action.

    Only StreamingOrchestrator mutates a session; a newer session replaces it
    instead of reusing it.
    """
    request: TranslationRequest
    status: SessionStatus = SessionStatus.IDLE
    accumulated_text: str = ""
    progress: float = 0.0
    error: Optional[BaseException] = None
    session_id: int = field(default_factory=lambda: next(_session_ids))

    @property
    def has_output(self) -> bool:
        return bool(self.accumulated_text)

    @property
    def is_finished(self) -> bool:
        return self.status in (SessionStatus.SUCCESS, SessionStatus.ERROR)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            status=self.status,
            accumulated_text=self.accumulated_text,
            progress=self.progress,
        )

    def begin(self) -> None:
        self.status = SessionStatus.TRANSLATING
        self.accumulated_text = ""
        self.progress = 0.0

    def append(self, fragment: str, progress: float) -> None:
        self.accumulated_text += fragment
        self.progress = max(self.progress, progress)

    def complete(self) -> None:
        self.progress = 100.0
        self.status = SessionStatus.SUCCESS

    def fail(self, error: BaseException) -> bool:
        """Move to the error state; returns False if already there."""
        if self.status is SessionStatus.ERROR:
            return False
        self.status = SessionStatus.ERROR
        self.error = error
        return True


class ExportKind(Enum):
    """Serialization strategy for an export extension."""
    PLAIN = "plain"
    RICH = "rich"
    PRINT = "print"

    @classmethod
    def for_extension(cls, extension: str) -> "ExportKind":
        ext = normalize_extension(extension)
        if ext in (".docx", ".doc"):
            return cls.RICH
        if ext == ".pdf":
            return cls.PRINT
        return cls.PLAIN


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it starts with a dot."""
    ext = extension.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"


@dataclass(frozen=True)
class ExportSpec:
    """What to export: consumed once by the exporter."""
    base_name: str
    extension: str
    content: str

    @property
    def kind(self) -> ExportKind:
        return ExportKind.for_extension(self.extension)

    @property
    def filename(self) -> str:
        return f"{self.base_name}{normalize_extension(self.extension)}"


@dataclass(frozen=True)
class Artifact:
    """A serialized export ready for delivery.

    For ExportKind.PRINT the payload is a complete HTML page meant for the
    host print mechanism rather than a direct download.
    """
    filename: str
    mime_type: str
    payload: bytes
    kind: ExportKind

    def text(self) -> str:
        """Decoded payload without the byte-order mark."""
        return self.payload.decode("utf-8-sig")
