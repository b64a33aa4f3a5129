# conversation_engine/models.py
"""
Pydantic models for request/response payloads and the serialized session
snapshot returned by the API.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .session_context import InteractionMode, SessionPhase


class SelectScenarioRequest(BaseModel):
    index: int = Field(..., description="Position of the scenario in the store")


class SetModeRequest(BaseModel):
    mode: InteractionMode


class SetPanelRequest(BaseModel):
    panel: str = Field(..., min_length=1)


class OptionRequest(BaseModel):
    text: str = Field(..., min_length=1, description="Exact option text that was clicked")


class FreeTextRequest(BaseModel):
    """
    Blank text is allowed here; the session ignores it.
    """
    text: Optional[str] = Field(None, description="Omit to submit the current draft")


class DraftRequest(BaseModel):
    text: str = ""


class OptionModel(BaseModel):
    text: str
    tag: str


class MessageModel(BaseModel):
    role: str
    content: str
    options: Optional[List[OptionModel]] = None
    timestamp: Optional[str] = None
    time: str = ""


class LogEntryModel(BaseModel):
    time: str
    timestamp: Optional[str] = None
    title: str
    detail: str
    payload: Any = None


class ScenarioSummary(BaseModel):
    index: int
    name: str
    title: str
    step_count: int


class SessionSnapshot(BaseModel):
    """
    Everything the host UI needs to render the chat and the log panel.
    """
    scenario_index: int
    scenario_name: str
    mode: InteractionMode
    active_panel: str
    phase: SessionPhase
    cursor: int
    is_responding: bool
    show_input_box: bool
    draft: str
    transcript: List[MessageModel]
    logs: List[LogEntryModel]

    @classmethod
    def from_controller(cls, controller) -> "SessionSnapshot":
        session = controller.session
        return cls(
            scenario_index=controller.config.scenario_index,
            scenario_name=controller.scenario.name,
            mode=controller.config.mode,
            active_panel=controller.config.active_panel,
            phase=session.phase,
            cursor=session.cursor,
            is_responding=session.is_responding,
            show_input_box=session.show_input_box,
            draft=session.draft,
            transcript=[MessageModel(**m.to_dict()) for m in session.transcript],
            logs=[LogEntryModel(**e.to_dict()) for e in session.log.entries()],
        )


class ActionResponse(BaseModel):
    accepted: bool
    session: SessionSnapshot


class MeetingInviteRequest(BaseModel):
    title: str = Field(..., min_length=1)
    dates: Optional[str] = None
    duration_minutes: int = Field(90, ge=1)


class WorkflowExecuteRequest(BaseModel):
    workflowId: str = Field(..., min_length=1)
    context: Dict[str, Any] = Field(default_factory=dict)


class GenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    context: str = ""


class GenerateResponse(BaseModel):
    response: str
    fallback: bool
