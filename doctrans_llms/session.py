"""
Streaming translation orchestration.

This module drives one translation at a time:
1. start() creates a fresh TranslationSession and makes it current
2. run() consumes the provider stream in arrival order, appending fragments
3. progress is estimated from the accumulated length, since the final length
   is unknown until the stream ends

Progress heuristic:
    expected = len(input) * expected_length_factor
    progress = min(95, accumulated / expected * 100)   while streaming
    progress = 100                                     once the stream completes

Supersession:
    Starting a new translation does not stop the previous network stream.
    The older session simply stops being current; its run() notices that on
    the next fragment or a late failure, drops it and leaves the old session
    untouched. A superseded session that was never run does not start.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from doctrans_llms.config import (
    DEFAULT_SYSTEM_PROMPT,
    DEFAULT_TEMPERATURE,
    EXPECTED_LENGTH_FACTOR,
    PRE_COMPLETION_CAP,
)
from doctrans_llms.errors import ProviderStreamError
from doctrans_llms.models import (
    Language,
    SessionSnapshot,
    SessionStatus,
    TranslationRequest,
    TranslationSession,
)
from doctrans_llms.translate import translate_stream
from doctrans_llms.translate.base import StreamingProvider

logger = logging.getLogger(__name__)

# Type alias for progress callbacks
ProgressCallback = Callable[[SessionSnapshot], None]


def estimate_progress(
    accumulated_length: int,
    input_length: int,
    factor: float = EXPECTED_LENGTH_FACTOR,
    cap: float = PRE_COMPLETION_CAP,
) -> float:
    """Estimate progress of an open stream as a percentage capped at `cap`."""
    expected = input_length * factor
    if expected <= 0:
        return cap
    return min(cap, accumulated_length / expected * 100)


class StreamingOrchestrator:
    """Runs streaming translations and owns their sessions.

    Usage:
        orchestrator = StreamingOrchestrator(create_provider("openai", config))
        request = TranslationRequest(Language.AUTO, Language.PERSIAN, text)
        session = orchestrator.translate(request, on_progress=print)
        print(session.accumulated_text)
    """

    def __init__(
        self,
        provider: StreamingProvider,
        expected_length_factor: float = EXPECTED_LENGTH_FACTOR,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self.provider = provider
        self.expected_length_factor = expected_length_factor
        self.system_prompt = system_prompt
        self.temperature = temperature
        self._current: Optional[TranslationSession] = None

    @property
    def current(self) -> Optional[TranslationSession]:
        """The latest session; older ones are superseded."""
        return self._current

    def is_current(self, session: TranslationSession) -> bool:
        return self._current is session

    def start(self, request: TranslationRequest) -> TranslationSession:
        """Create a new session for a request and make it current.

        An empty request gets an idle session that does not replace the
        current one.
        """
        session = TranslationSession(request=request)
        if request.is_empty:
            logger.debug("Empty request: nothing to translate")
            return session
        previous = self._current
        self._current = session
        if previous is not None and not previous.is_finished:
            logger.info(
                "Session %d superseded by session %d",
                previous.session_id, session.session_id,
            )
        return session

    def run(
        self,
        session: TranslationSession,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> TranslationSession:
        """Consume the provider stream for a session.

        Args:
            session: Session returned by start()
            on_progress: Called with a snapshot after each applied fragment
                and once more on completion
            cancel: Set it to end the run with an error
            timeout: Seconds the whole stream may take

        Returns:
            The session, in SUCCESS, ERROR, or unchanged if it was superseded
            or its request was empty

        Raises:
            ProviderStreamError: The stream failed, was cancelled or timed out;
                the session keeps the text accumulated so far

        Errors raised by on_progress also end the session in ERROR before
        propagating.
        """
        request = session.request
        if request.is_empty or session.status is not SessionStatus.IDLE:
            return session
        if not self.is_current(session):
            logger.info("Session %d: superseded before it started", session.session_id)
            return session

        session.begin()
        logger.info(
            "Session %d: translating %d chars (%s -> %s) with %s",
            session.session_id, len(request.text),
            request.source_language.value, request.target_language.value,
            self.provider.name,
        )

        input_length = len(request.text)
        deadline = time.monotonic() + timeout if timeout is not None else None
        fragments = translate_stream(
            self.provider,
            request.text,
            request.source_language,
            request.target_language,
            system_prompt=self.system_prompt,
            temperature=self.temperature,
        )

        try:
            self._notify(session, on_progress)
            for fragment in fragments:
                if not self.is_current(session):
                    logger.info(
                        "Session %d: ignoring late fragments", session.session_id
                    )
                    return session
                if cancel is not None and cancel.is_set():
                    raise ProviderStreamError("Translation cancelled")
                if deadline is not None and time.monotonic() > deadline:
                    raise ProviderStreamError(
                        f"Translation timed out after {timeout:g} seconds"
                    )

                progress = estimate_progress(
                    len(session.accumulated_text) + len(fragment),
                    input_length,
                    self.expected_length_factor,
                )
                session.append(fragment, progress)
                self._notify(session, on_progress)
        except ProviderStreamError as e:
            if not self.is_current(session):
                logger.info(
                    "Session %d: ignoring late failure: %s", session.session_id, e
                )
                return session
            if session.fail(e):
                logger.warning(
                    "Session %d failed after %d chars: %s",
                    session.session_id, len(session.accumulated_text), e,
                )
                self._notify(session, on_progress)
            raise
        except Exception as e:
            if self.is_current(session) and session.fail(e):
                logger.warning(
                    "Session %d aborted by a progress callback: %s",
                    session.session_id, e,
                )
            raise
        finally:
            fragments.close()

        if not self.is_current(session):
            return session

        session.complete()
        logger.info(
            "Session %d complete: %d chars",
            session.session_id, len(session.accumulated_text),
        )
        self._notify(session, on_progress)
        return session

    def translate(
        self,
        request: TranslationRequest,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> TranslationSession:
        """Start a session for the request and run it to the end."""
        session = self.start(request)
        return self.run(session, on_progress=on_progress, cancel=cancel, timeout=timeout)

    def translate_text(
        self,
        text: str,
        source_language: Language = Language.AUTO,
        target_language: Language = Language.PERSIAN,
        **kwargs,
    ) -> TranslationSession:
        """Convenience wrapper building the request from plain arguments."""
        request = TranslationRequest(source_language, target_language, text)
        return self.translate(request, **kwargs)

    @staticmethod
    def _notify(
        session: TranslationSession,
        on_progress: Optional[ProgressCallback],
    ) -> None:
        if on_progress:
            on_progress(session.snapshot())
