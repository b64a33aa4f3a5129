# conversation_engine/conversation_session.py
"""
ConversationSession

This is the "brain" of the demo chat.

Responsibilities:
- Own the live transcript and the cursor into the scenario script.
- Turn option clicks into scripted agent replies (trigger scan).
- Turn free-form text into classifier replies once the script is exhausted.
- Simulate typing latency through a Scheduler, dropping stale replies
  after a reset (epoch counter).
- Record every transition in the ActivityLog.

This module does NOT:
- Deal with HTTP / FastAPI (that happens in app.py).
- Choose scenarios or modes (that is the SessionController).
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from .activity_log import ActivityLog
from .config import settings
from .intent_classifier import classify
from .llm_fallback import TextGenerator
from .scenario_store import Scenario, Step
from .scheduler import ScheduledHandle, Scheduler
from .session_context import InteractionMode, Message, SessionPhase

logger = logging.getLogger("conversation_engine.session")

GENERATED_DETAILS = {
    "keyword": "Response generated using keyword detection and intent classification",
    "llm": "Response generated by the language model fallback",
}


def scan_triggered_steps(
    steps: Tuple[Step, ...],
    cursor: int,
    option_text: str,
) -> Tuple[List[Step], int]:
    """
    Longest contiguous run of steps unlocked by `option_text`, starting after
    `cursor`.

    - A step whose trigger equals the option is consumed and starts the run.
    - A step without trigger is consumed only once the run has started.
    - A step with another trigger is skipped before the run, and ends it after.

    Returns (matched steps, new cursor). The cursor is unchanged when nothing
    matched.
    """
    matched: List[Step] = []
    last_index = cursor
    for i in range(cursor + 1, len(steps)):
        step = steps[i]
        if step.trigger == option_text:
            matched.append(step)
            last_index = i
        elif step.trigger is None and matched:
            matched.append(step)
            last_index = i
        elif matched:
            break
    return matched, last_index


class ConversationSession:
    """
    One live conversation over one scenario.

    Every public action returns True when accepted and False when it was
    ignored (busy, wrong mode, options pending, blank input).
    """

    def __init__(
        self,
        scheduler: Scheduler,
        log: Optional[ActivityLog] = None,
        text_generator: Optional[TextGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
        option_delay: Optional[float] = None,
        freeform_delay: Optional[float] = None,
    ) -> None:
        self.scheduler = scheduler
        self.clock = clock or datetime.now
        self.log = log or ActivityLog(clock=self.clock)
        self.text_generator = text_generator
        self.option_delay = (
            option_delay if option_delay is not None else settings.OPTION_RESPONSE_DELAY_MS / 1000
        )
        self.freeform_delay = (
            freeform_delay if freeform_delay is not None else settings.FREEFORM_RESPONSE_DELAY_MS / 1000
        )

        self.scenario: Optional[Scenario] = None
        self.mode: InteractionMode = InteractionMode.INTERACTIVE
        self.cursor: int = 0
        self.is_responding: bool = False
        self.draft: str = ""
        self.epoch: int = 0

        self._transcript: List[Message] = []
        # at most one reply is in flight (is_responding guard)
        self._pending: Optional[ScheduledHandle] = None

    # -------------------------------------------------------------------------
    # Observable state
    # -------------------------------------------------------------------------
    @property
    def transcript(self) -> Tuple[Message, ...]:
        return tuple(self._transcript)

    @property
    def options_pending(self) -> bool:
        return bool(self._transcript) and self._transcript[-1].has_options

    @property
    def phase(self) -> SessionPhase:
        if self.is_responding:
            return SessionPhase.RESPONDING
        if self.mode is InteractionMode.PLAYBACK or not self._transcript:
            return SessionPhase.IDLE
        if self.options_pending:
            return SessionPhase.AWAITING_OPTION
        return SessionPhase.FREEFORM_OPEN

    @property
    def show_input_box(self) -> bool:
        return self.phase is SessionPhase.FREEFORM_OPEN

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    def initialize(self, scenario: Scenario, mode: InteractionMode) -> None:
        """
        Replace the whole session state for `scenario` in `mode`.
        Any reply still waiting on the scheduler is invalidated.
        """
        self._invalidate_pending()

        self.scenario = scenario
        self.mode = InteractionMode(mode)
        self.cursor = 0
        self.draft = ""

        self.log.clear()
        if self.mode is InteractionMode.INTERACTIVE:
            self._transcript = [scenario.steps[0].to_message(self.clock())]
        else:
            self._transcript = list(scenario.messages)
            self.log.extend(scenario.logs)

        self.log.append(
            "Conversation Started",
            f"Initialized {scenario.name}'s journey - {scenario.title}",
        )
        logger.info(f"[Session] initialized scenario={scenario.name!r} mode={self.mode.value} epoch={self.epoch}")

    def reset(self) -> None:
        if self.scenario is None:
            return
        self.initialize(self.scenario, self.mode)
        self.log.append("Conversation Reset", "Conversation restarted from beginning")

    def update_draft(self, text: str) -> None:
        self.draft = text

    # -------------------------------------------------------------------------
    # User actions
    # -------------------------------------------------------------------------
    def select_option(self, option_text: str) -> bool:
        if not self._accepts_action("select_option"):
            return False

        self._transcript.append(Message(role="user", content=option_text, timestamp=self.clock()))
        self.log.append("User Response", f'User selected: "{option_text}"')
        self.is_responding = True

        self._schedule(self.option_delay, lambda: self._resolve_option(option_text))
        return True

    def submit_free_text(self, text: Optional[str] = None) -> bool:
        if text is None:
            text = self.draft
        if not self._accepts_action("submit_free_text"):
            return False
        if self.options_pending:
            logger.debug("[Session] free text ignored: options pending")
            return False
        if not text.strip():
            logger.debug("[Session] free text ignored: blank input")
            return False

        self.draft = ""
        self._transcript.append(Message(role="user", content=text, timestamp=self.clock()))
        self.log.append("Free-form Input", f'User typed: "{text}"')
        self.is_responding = True

        self._schedule(self.freeform_delay, lambda: self._resolve_free_text(text))
        return True

    # -------------------------------------------------------------------------
    # Delayed continuations
    # -------------------------------------------------------------------------
    def _resolve_option(self, option_text: str) -> None:
        if self.scenario is None:
            self.is_responding = False
            return
        matched, new_cursor = scan_triggered_steps(self.scenario.steps, self.cursor, option_text)

        if matched:
            now = self.clock()
            self._transcript.extend(step.to_message(now) for step in matched)
            self.cursor = new_cursor
            self.log.append("AI Response", f"Generated {len(matched)} response(s) based on user intent")
        else:
            self.log.append("Conversation Flow", "Transitioned to free-form conversation mode")

        self.is_responding = False

    def _resolve_free_text(self, text: str) -> None:
        result = classify(text)
        content = result.content
        source = "keyword"

        generated = self._generate(text)
        if generated:
            content = generated
            source = "llm"

        self._transcript.append(
            Message(role="agent", content=content, options=result.options, timestamp=self.clock())
        )
        self.log.append(
            "AI Generated Response",
            GENERATED_DETAILS[source],
            payload={"intent": result.intent, "source": source},
        )
        self.is_responding = False

    def _generate(self, text: str) -> Optional[str]:
        if self.text_generator is None:
            return None
        try:
            return self.text_generator.generate(text, self._generation_context())
        except Exception as e:
            logger.warning(f"[Session] text generator failed, using canned reply: {e}")
            return None

    def _generation_context(self) -> str:
        lines = []
        if self.scenario is not None:
            lines.append(f"Scenario: {self.scenario.title}")
        for msg in self._transcript[-6:]:
            speaker = "Kira" if msg.role == "agent" else "User"
            lines.append(f"{speaker}: {msg.content}")
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------
    def _accepts_action(self, action: str) -> bool:
        if self.scenario is None or self.mode is not InteractionMode.INTERACTIVE:
            logger.debug(f"[Session] {action} ignored: not interactive")
            return False
        if self.is_responding:
            logger.debug(f"[Session] {action} ignored: response pending")
            return False
        return True

    def _schedule(self, delay: float, continuation: Callable[[], None]) -> None:
        epoch = self.epoch

        def run() -> None:
            if epoch != self.epoch:
                logger.debug(f"[Session] dropped stale response from epoch {epoch}")
                return
            self._pending = None
            continuation()

        self._pending = self.scheduler.call_later(delay, run)

    def _invalidate_pending(self) -> None:
        self.epoch += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self.is_responding = False
