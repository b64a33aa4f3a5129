# conversation_engine/session_controller.py
"""
SessionController

Owns the SessionConfig, the ConversationSession and its ActivityLog for the
current scenario selection. Any change of scenario or mode re-initializes
the session from scratch (never merged).
"""

from __future__ import annotations

import logging
from typing import Optional

from .conversation_session import ConversationSession
from .scenario_store import Scenario, ScenarioStore
from .session_context import InteractionMode, SessionConfig

logger = logging.getLogger("conversation_engine.controller")


class SessionController:
    """
    You typically create this once at startup and reuse it for all requests.
    """

    def __init__(
        self,
        store: ScenarioStore,
        session: ConversationSession,
        config: Optional[SessionConfig] = None,
    ) -> None:
        self.store = store
        self.session = session
        self.config = config or SessionConfig()
        self.session.initialize(self.scenario, self.config.mode)

    @property
    def scenario(self) -> Scenario:
        return self.store.get_scenario(self.config.scenario_index)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------
    def select_scenario(self, index: int) -> Scenario:
        """
        Raises ScenarioNotFound before touching any state.
        """
        scenario = self.store.get_scenario(index)
        self.config.scenario_index = index
        logger.info(f"[Controller] scenario -> {index} ({scenario.name})")
        self.session.initialize(scenario, self.config.mode)
        return scenario

    def set_mode(self, mode: InteractionMode) -> None:
        mode = InteractionMode(mode)
        self.config.mode = mode
        logger.info(f"[Controller] mode -> {mode.value}")
        self.session.initialize(self.scenario, mode)

    def set_active_panel(self, panel: str) -> None:
        self.config.active_panel = panel

    def reset(self) -> None:
        self.session.reset()
