"""Tests for the scripted conversation session: trigger scan, latency, epochs."""

from __future__ import annotations

from conversation_engine.conversation_session import scan_triggered_steps
from conversation_engine.session_context import InteractionMode, SessionPhase

from conftest import make_scenario

OPENER = {
    "role": "agent",
    "content": "Hi! Pick one.",
    "options": [{"text": "A", "type": "positive"}, {"text": "B", "type": "negative"}],
}


def _contents(session):
    return [m.content for m in session.transcript]


def _titles(session):
    return [e.title for e in session.log.entries()]


# ---------------------------------------------------------------------------
# Trigger scan
# ---------------------------------------------------------------------------

def test_scan_stops_at_first_foreign_trigger():
    scenario = make_scenario(
        [
            OPENER,
            {"role": "agent", "content": "a1", "trigger": "A"},
            {"role": "agent", "content": "a2", "trigger": "A"},
            {"role": "agent", "content": "b1", "trigger": "B"},
            {"role": "agent", "content": "default"},
        ]
    )
    matched, cursor = scan_triggered_steps(scenario.steps, 0, "A")
    assert [s.content for s in matched] == ["a1", "a2"]
    assert cursor == 2


def test_scan_includes_default_step_after_match():
    scenario = make_scenario(
        [
            OPENER,
            {"role": "agent", "content": "a1", "trigger": "A"},
            {"role": "agent", "content": "default"},
            {"role": "agent", "content": "b1", "trigger": "B"},
        ]
    )
    matched, cursor = scan_triggered_steps(scenario.steps, 0, "A")
    assert [s.content for s in matched] == ["a1", "default"]
    assert cursor == 2


def test_scan_skips_leading_default_steps():
    scenario = make_scenario(
        [
            OPENER,
            {"role": "agent", "content": "leading default"},
            {"role": "agent", "content": "a1", "trigger": "A"},
        ]
    )
    matched, cursor = scan_triggered_steps(scenario.steps, 0, "A")
    assert [s.content for s in matched] == ["a1"]
    assert cursor == 2


def test_scan_skips_foreign_triggers_before_match():
    scenario = make_scenario(
        [
            OPENER,
            {"role": "agent", "content": "b1", "trigger": "B"},
            {"role": "agent", "content": "a1", "trigger": "A"},
        ]
    )
    matched, cursor = scan_triggered_steps(scenario.steps, 0, "A")
    assert [s.content for s in matched] == ["a1"]
    assert cursor == 2


def test_scan_without_match_keeps_cursor():
    scenario = make_scenario([OPENER, {"role": "agent", "content": "b1", "trigger": "B"}])
    matched, cursor = scan_triggered_steps(scenario.steps, 0, "A")
    assert matched == []
    assert cursor == 0


# ---------------------------------------------------------------------------
# Initialize / reset
# ---------------------------------------------------------------------------

def test_initialize_interactive_starts_at_first_step(session):
    scenario = make_scenario([OPENER, {"role": "agent", "content": "a1", "trigger": "A"}])
    session.initialize(scenario, InteractionMode.INTERACTIVE)

    assert _contents(session) == ["Hi! Pick one."]
    assert session.transcript[0].role == "agent"
    assert [o.text for o in session.transcript[0].options] == ["A", "B"]
    assert session.cursor == 0
    assert session.phase is SessionPhase.AWAITING_OPTION
    assert _titles(session) == ["Conversation Started"]
    assert session.log.entries()[0].detail == "Initialized Test's journey - Test journey"


def test_initialize_playback_uses_canned_transcript_and_logs(session):
    scenario = make_scenario(
        [OPENER],
        messages=[{"role": "agent", "content": "canned"}, {"role": "user", "content": "reply"}],
        logs=[{"time": "09:00", "title": "Campaign Triggered", "detail": "sent"}],
    )
    session.initialize(scenario, InteractionMode.PLAYBACK)

    assert _contents(session) == ["canned", "reply"]
    assert _titles(session) == ["Campaign Triggered", "Conversation Started"]
    assert session.log.entries()[0].time == "09:00"
    assert session.phase is SessionPhase.IDLE
    assert not session.select_option("A")
    assert not session.submit_free_text("hello")
    assert _contents(session) == ["canned", "reply"]


def test_reset_twice_equals_reset_once(session, clock):
    scenario = make_scenario([OPENER, {"role": "agent", "content": "a1", "trigger": "A"}])
    session.initialize(scenario, InteractionMode.INTERACTIVE)
    session.select_option("A")
    session.scheduler.advance(1.0)

    session.reset()
    once = (_contents(session), _titles(session), session.cursor)
    session.reset()
    twice = (_contents(session), _titles(session), session.cursor)

    assert once == twice
    assert once == (["Hi! Pick one."], ["Conversation Started", "Conversation Reset"], 0)


# ---------------------------------------------------------------------------
# Option selection
# ---------------------------------------------------------------------------

def test_select_option_appends_user_message_then_reply_after_delay(session, scheduler):
    scenario = make_scenario(
        [
            OPENER,
            {"role": "agent", "content": "a1", "trigger": "A"},
            {"role": "agent", "content": "a2", "trigger": "A"},
            {"role": "agent", "content": "b1", "trigger": "B"},
            {"role": "agent", "content": "default"},
        ]
    )
    session.initialize(scenario, InteractionMode.INTERACTIVE)

    assert session.select_option("A")
    assert _contents(session) == ["Hi! Pick one.", "A"]
    assert session.transcript[-1].role == "user"
    assert session.phase is SessionPhase.RESPONDING
    assert _titles(session)[-1] == "User Response"

    scheduler.advance(0.5)
    assert _contents(session) == ["Hi! Pick one.", "A"]

    scheduler.advance(0.5)
    assert _contents(session) == ["Hi! Pick one.", "A", "a1", "a2"]
    assert session.cursor == 2
    assert not session.is_responding
    assert session.log.entries()[-1].detail == "Generated 2 response(s) based on user intent"


def test_select_option_without_match_logs_freeform_transition(session, scheduler):
    scenario = make_scenario([OPENER, {"role": "agent", "content": "a1", "trigger": "A"}])
    session.initialize(scenario, InteractionMode.INTERACTIVE)

    session.select_option("B")
    scheduler.advance(1.0)

    assert _contents(session) == ["Hi! Pick one.", "B"]
    assert session.cursor == 0
    entry = session.log.entries()[-1]
    assert (entry.title, entry.detail) == (
        "Conversation Flow",
        "Transitioned to free-form conversation mode",
    )
    assert session.phase is SessionPhase.FREEFORM_OPEN
    assert session.show_input_box


def test_actions_rejected_while_responding(session, scheduler):
    scenario = make_scenario([OPENER, {"role": "agent", "content": "a1", "trigger": "A"}])
    session.initialize(scenario, InteractionMode.INTERACTIVE)

    assert session.select_option("A")
    assert not session.select_option("B")
    assert not session.submit_free_text("hello?")
    assert _contents(session) == ["Hi! Pick one.", "A"]

    scheduler.advance(1.0)
    assert _contents(session) == ["Hi! Pick one.", "A", "a1"]


def test_transcript_is_append_only(session, scheduler):
    scenario = make_scenario(
        [
            OPENER,
            {
                "role": "agent",
                "content": "a1",
                "trigger": "A",
                "options": [{"text": "C", "type": "neutral"}],
            },
            {"role": "agent", "content": "c1", "trigger": "C"},
        ]
    )
    session.initialize(scenario, InteractionMode.INTERACTIVE)

    seen = list(session.transcript)
    for choice in ("A", "C"):
        session.select_option(choice)
        scheduler.advance(1.0)
        current = list(session.transcript)
        assert current[: len(seen)] == seen
        seen = current

    assert [m.content for m in seen] == ["Hi! Pick one.", "A", "a1", "C", "c1"]


def test_reply_is_stamped_at_expiry(session, scheduler, clock):
    scenario = make_scenario([OPENER, {"role": "agent", "content": "a1", "trigger": "A"}])
    session.initialize(scenario, InteractionMode.INTERACTIVE)

    session.select_option("A")
    clock.tick(5)
    scheduler.advance(1.0)

    assert session.transcript[-1].timestamp == clock.now


# ---------------------------------------------------------------------------
# Epoch / cancellation
# ---------------------------------------------------------------------------

def test_reset_drops_pending_option_reply(session, scheduler):
    scenario = make_scenario([OPENER, {"role": "agent", "content": "a1", "trigger": "A"}])
    session.initialize(scenario, InteractionMode.INTERACTIVE)

    session.select_option("A")
    session.reset()
    assert not session.is_responding

    scheduler.advance(5.0)
    assert _contents(session) == ["Hi! Pick one."]
    assert session.cursor == 0
    assert _titles(session) == ["Conversation Started", "Conversation Reset"]


def test_stale_callback_is_ignored_even_if_it_fires(session):
    # a scheduler that cannot cancel still must not apply stale results
    fired = []

    class NoCancel:
        def call_later(self, delay, callback):
            fired.append(callback)

            class Handle:
                def cancel(self):
                    pass

            return Handle()

    session.scheduler = NoCancel()
    scenario = make_scenario([OPENER, {"role": "agent", "content": "a1", "trigger": "A"}])
    session.initialize(scenario, InteractionMode.INTERACTIVE)
    session.select_option("A")
    session.initialize(scenario, InteractionMode.INTERACTIVE)

    fired[0]()
    assert _contents(session) == ["Hi! Pick one."]


def test_option_continuation_without_scenario_is_a_no_op(session):
    session.is_responding = True
    session._resolve_option("A")

    assert session.transcript == ()
    assert session.is_responding is False
    assert session.log.entries() == ()


# ---------------------------------------------------------------------------
# Free-form
# ---------------------------------------------------------------------------

def _freeform_session(session, scheduler):
    scenario = make_scenario([OPENER, {"role": "agent", "content": "a1", "trigger": "A"}])
    session.initialize(scenario, InteractionMode.INTERACTIVE)
    session.select_option("A")
    scheduler.advance(1.0)
    assert session.phase is SessionPhase.FREEFORM_OPEN
    return session


def test_free_text_rejected_while_options_pending(session):
    scenario = make_scenario([OPENER])
    session.initialize(scenario, InteractionMode.INTERACTIVE)

    assert not session.submit_free_text("how much?")
    assert _contents(session) == ["Hi! Pick one."]


def test_blank_free_text_is_ignored(session, scheduler):
    _freeform_session(session, scheduler)
    before = len(session.log)

    assert not session.submit_free_text("   ")
    assert len(session.log) == before
    assert session.scheduler.pending == 0


def test_free_text_gets_classifier_reply_after_delay(session, scheduler):
    _freeform_session(session, scheduler)
    session.update_draft("How much does it cost?")

    assert session.submit_free_text()
    assert session.draft == ""
    assert session.transcript[-1].content == "How much does it cost?"
    assert session.transcript[-1].role == "user"

    scheduler.advance(1.0)
    assert session.is_responding

    scheduler.advance(0.25)
    reply = session.transcript[-1]
    assert reply.role == "agent"
    assert reply.content.startswith("This session is fully complimentary")
    assert [o.text for o in reply.options] == ["Yes, I'm interested", "Tell me more first"]
    assert session.phase is SessionPhase.AWAITING_OPTION

    entry = session.log.entries()[-1]
    assert entry.title == "AI Generated Response"
    assert entry.payload == {"intent": "pricing", "source": "keyword"}
    assert entry.detail == "Response generated using keyword detection and intent classification"


def test_draft_can_be_edited_while_reply_pending(session, scheduler):
    _freeform_session(session, scheduler)
    session.submit_free_text("is there a replay")
    session.update_draft("next question")

    scheduler.advance(1.2)
    assert session.draft == "next question"


def test_decline_lands_in_freeform_with_no_options(session, scheduler):
    _freeform_session(session, scheduler)
    session.submit_free_text("stop")
    scheduler.advance(1.2)

    assert session.transcript[-1].options is None
    assert session.phase is SessionPhase.FREEFORM_OPEN


def test_reset_drops_pending_free_text_reply(session, scheduler):
    _freeform_session(session, scheduler)
    session.submit_free_text("help")
    session.reset()
    scheduler.advance(2.0)

    assert _contents(session) == ["Hi! Pick one."]


def test_generator_text_replaces_canned_content(session, scheduler):
    calls = []

    class Generator:
        def generate(self, prompt, context=""):
            calls.append((prompt, context))
            return "A generated answer."

    session.text_generator = Generator()
    _freeform_session(session, scheduler)
    session.submit_free_text("what time is it")
    scheduler.advance(1.2)

    reply = session.transcript[-1]
    assert reply.content == "A generated answer."
    assert len(reply.options) == 3
    assert calls[0][0] == "what time is it"
    assert "Scenario: Test journey" in calls[0][1]
    assert session.log.entries()[-1].payload["source"] == "llm"
    assert session.log.entries()[-1].detail == "Response generated by the language model fallback"


def test_failing_generator_falls_back_to_classifier(session, scheduler):
    class Broken:
        def generate(self, prompt, context=""):
            raise RuntimeError("boom")

    session.text_generator = Broken()
    _freeform_session(session, scheduler)
    session.submit_free_text("no")
    scheduler.advance(1.2)

    assert session.transcript[-1].content.startswith("I understand. Thanks for your time.")
    assert not session.is_responding
