"""
Tests for streaming translation and session orchestration.

Uses scripted providers so that fragment boundaries, failures and
supersession are deterministic; no network access is needed.
"""

import threading

import pytest

from doctrans_llms.errors import ProviderStreamError
from doctrans_llms.models import Language, SessionStatus, TranslationRequest
from doctrans_llms.session import StreamingOrchestrator, estimate_progress
from doctrans_llms.translate import DummyProvider, translate_stream
from doctrans_llms.translate.base import StreamingProvider


class ScriptedProvider(StreamingProvider):
    """Yields a fixed list of fragments, optionally failing afterwards."""

    def __init__(self, fragments, error=None):
        self.fragments = list(fragments)
        self.error = error
        self.calls = []

    @property
    def name(self) -> str:
        return "scripted"

    def stream(self, instruction, system_prompt, temperature):
        self.calls.append(instruction)
        for fragment in self.fragments:
            yield fragment
        if self.error is not None:
            raise self.error


def request(text="Hello world", source=Language.ENGLISH, target=Language.PERSIAN):
    return TranslationRequest(source, target, text)


class TestProgressEstimate:
    """Length-based progress heuristic."""

    def test_proportional_to_expected_length(self):
        # 10 chars of input -> 12 expected
        assert estimate_progress(6, 10) == pytest.approx(50.0)

    def test_capped_before_completion(self):
        assert estimate_progress(1000, 10) == 95.0

    def test_custom_factor(self):
        assert estimate_progress(10, 10, factor=2.0) == pytest.approx(50.0)

    def test_zero_input(self):
        assert estimate_progress(5, 0) == 95.0


class TestTranslateStream:
    """The lazy fragment sequence."""

    def test_whitespace_input_yields_nothing(self):
        provider = ScriptedProvider(["unused"])

        assert list(translate_stream(provider, "   \n\t", Language.AUTO, Language.PERSIAN)) == []
        assert provider.calls == []

    def test_fragments_in_order(self):
        provider = ScriptedProvider(["سلام", "", " دنیا"])

        fragments = list(translate_stream(provider, "Hello world", Language.ENGLISH, Language.PERSIAN))

        assert fragments == ["سلام", " دنیا"]

    def test_instruction_names_languages(self):
        provider = ScriptedProvider(["x"])

        list(translate_stream(provider, "Hi", Language.AUTO, Language.ENGLISH))

        assert "from the detected source language to English" in provider.calls[0]
        assert '"""\nHi\n"""' in provider.calls[0]

    def test_provider_error_is_wrapped(self):
        provider = ScriptedProvider(["partial"], error=ConnectionError("reset"))
        stream = translate_stream(provider, "Hello", Language.ENGLISH, Language.PERSIAN)

        assert next(stream) == "partial"
        with pytest.raises(ProviderStreamError) as exc_info:
            next(stream)
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_dummy_provider_echo(self):
        provider = DummyProvider(mode="echo", fragment_size=4)
        text = "Line1\n\nLine2"

        fragments = list(translate_stream(provider, text, Language.ENGLISH, Language.PERSIAN))

        assert "".join(fragments) == text
        assert len(fragments) == 3


class TestOrchestrator:
    """Session lifecycle driven by StreamingOrchestrator."""

    def test_whitespace_request_is_noop(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider(["unused"]))
        snapshots = []

        session = orchestrator.translate(request("  \n "), on_progress=snapshots.append)

        assert session.status == SessionStatus.IDLE
        assert session.accumulated_text == ""
        assert snapshots == []
        assert orchestrator.current is None

    def test_empty_request_keeps_previous_session(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider(["done"]))
        first = orchestrator.translate(request("Hello"))

        orchestrator.translate(request(" "))

        assert orchestrator.current is first
        assert first.status == SessionStatus.SUCCESS

    def test_success_accumulates_fragments(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider(["سلام", " ", "دنیا"]))

        session = orchestrator.translate(request("Hello world"))

        assert session.status == SessionStatus.SUCCESS
        assert session.accumulated_text == "سلام دنیا"
        assert session.progress == 100.0

    def test_progress_monotonic_capped_then_complete(self):
        # Output much longer than expected keeps the estimate at the cap
        fragments = ["a" * 5] * 10
        orchestrator = StreamingOrchestrator(ScriptedProvider(fragments))
        snapshots = []

        orchestrator.translate(request("x" * 10), on_progress=snapshots.append)

        progress = [snap.progress for snap in snapshots]
        assert progress == sorted(progress)
        assert all(p <= 95.0 for p in progress[:-1])
        assert 95.0 in progress
        assert progress[-1] == 100.0
        assert snapshots[0].status == SessionStatus.TRANSLATING
        assert snapshots[-1].status == SessionStatus.SUCCESS

    def test_one_snapshot_per_fragment(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider(["a", "b", "c"]))
        snapshots = []

        orchestrator.translate(request(), on_progress=snapshots.append)

        # start + 3 fragments + completion
        assert len(snapshots) == 5
        assert [s.accumulated_text for s in snapshots[1:4]] == ["a", "ab", "abc"]

    def test_failure_keeps_partial_output(self):
        provider = ScriptedProvider(["partial ", "text"], error=TimeoutError("slow"))
        orchestrator = StreamingOrchestrator(provider)
        snapshots = []

        with pytest.raises(ProviderStreamError):
            orchestrator.translate(request(), on_progress=snapshots.append)

        session = orchestrator.current
        assert session.status == SessionStatus.ERROR
        assert session.accumulated_text == "partial text"
        assert session.has_output
        assert session.progress < 100.0
        assert isinstance(session.error, ProviderStreamError)
        error_snaps = [s for s in snapshots if s.status == SessionStatus.ERROR]
        assert len(error_snaps) == 1

    def test_failure_before_any_fragment(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider([], error=RuntimeError("401")))

        with pytest.raises(ProviderStreamError):
            orchestrator.translate(request())

        assert orchestrator.current.status == SessionStatus.ERROR
        assert not orchestrator.current.has_output

    def test_finished_session_is_not_rerun(self):
        provider = ScriptedProvider(["once"])
        orchestrator = StreamingOrchestrator(provider)
        session = orchestrator.translate(request())

        orchestrator.run(session)

        assert len(provider.calls) == 1
        assert session.accumulated_text == "once"

    def test_superseded_session_drops_late_fragments(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider(["first ", "second"]))
        old = orchestrator.start(request("Old text"))

        def supersede(snapshot):
            if snapshot.accumulated_text == "first ":
                orchestrator.start(request("New text"))

        orchestrator.run(old, on_progress=supersede)

        assert old.accumulated_text == "first "
        assert old.status == SessionStatus.TRANSLATING
        assert orchestrator.current is not old
        assert orchestrator.current.status == SessionStatus.IDLE

    def test_superseded_session_never_starts(self):
        provider = ScriptedProvider(["unused"])
        orchestrator = StreamingOrchestrator(provider)
        old = orchestrator.start(request("Old text"))
        orchestrator.start(request("New text"))

        orchestrator.run(old)

        assert old.status == SessionStatus.IDLE
        assert old.accumulated_text == ""
        assert provider.calls == []

    def test_superseded_session_ignores_late_failure(self):
        provider = ScriptedProvider(["a"], error=ConnectionError("late"))
        orchestrator = StreamingOrchestrator(provider)
        old = orchestrator.start(request("Old text"))

        def supersede(snapshot):
            if snapshot.accumulated_text == "a":
                orchestrator.start(request("New text"))

        result = orchestrator.run(old, on_progress=supersede)

        assert result is old
        assert old.status == SessionStatus.TRANSLATING
        assert old.accumulated_text == "a"
        assert old.error is None
        assert orchestrator.current.status == SessionStatus.IDLE

    def test_callback_error_fails_session(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider(["a", "b"]))

        def broken(snapshot):
            if snapshot.accumulated_text == "a":
                raise RuntimeError("display closed")

        with pytest.raises(RuntimeError, match="display closed"):
            orchestrator.translate(request(), on_progress=broken)

        session = orchestrator.current
        assert session.status == SessionStatus.ERROR
        assert session.accumulated_text == "a"
        assert isinstance(session.error, RuntimeError)

    def test_callback_error_on_first_snapshot_fails_session(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider(["a"]))

        def broken(snapshot):
            raise ValueError("bad display")

        with pytest.raises(ValueError):
            orchestrator.translate(request(), on_progress=broken)

        assert orchestrator.current.status == SessionStatus.ERROR

    def test_new_session_starts_from_scratch(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider(["abc"]))
        first = orchestrator.translate(request("one"))
        second = orchestrator.translate(request("two"))

        assert first is not second
        assert second.session_id > first.session_id
        assert second.accumulated_text == "abc"

    def test_cancel(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider(["a", "b", "c"]))
        cancel = threading.Event()

        def cancel_after_first(snapshot):
            if snapshot.accumulated_text == "a":
                cancel.set()

        with pytest.raises(ProviderStreamError, match="cancelled"):
            orchestrator.translate(request(), on_progress=cancel_after_first, cancel=cancel)

        assert orchestrator.current.status == SessionStatus.ERROR
        assert orchestrator.current.accumulated_text == "a"

    def test_timeout(self):
        orchestrator = StreamingOrchestrator(ScriptedProvider(["a", "b"]))

        with pytest.raises(ProviderStreamError, match="timed out"):
            orchestrator.translate(request(), timeout=-1)

        assert orchestrator.current.status == SessionStatus.ERROR

    def test_translate_text_defaults(self):
        provider = ScriptedProvider(["x"])
        orchestrator = StreamingOrchestrator(provider)

        session = orchestrator.translate_text("Hello")

        assert session.request.source_language == Language.AUTO
        assert session.request.target_language == Language.PERSIAN
        assert "to Persian (Farsi)" in provider.calls[0]
