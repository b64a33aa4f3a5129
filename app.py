# app.py
"""
FastAPI entrypoint for the Kira demo conversation engine.

Exposes:
- GET  /health              → simple health check
- GET  /scenarios           → available scripted dialogues
- GET  /session             → current session snapshot
- POST /session/...         → scenario / mode / panel / reset / options / messages
- POST /meetings/invite     → meeting + calendar links
- POST /workflows/execute   → remote workflow executor (stub when unconfigured)
- POST /generate            → generative-model passthrough

Single process, single session: state lives in memory for the process lifetime.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from conversation_engine.activity_log import ActivityLog
from conversation_engine.config import settings
from conversation_engine.conversation_session import ConversationSession
from conversation_engine.llm_fallback import UNAVAILABLE_MESSAGE, OpenAITextGenerator
from conversation_engine.meeting_links import create_meeting_invite
from conversation_engine.models import (
    ActionResponse,
    DraftRequest,
    FreeTextRequest,
    GenerateRequest,
    GenerateResponse,
    MeetingInviteRequest,
    OptionRequest,
    ScenarioSummary,
    SelectScenarioRequest,
    SessionSnapshot,
    SetModeRequest,
    SetPanelRequest,
    WorkflowExecuteRequest,
)
from conversation_engine.scenario_store import ScenarioNotFound, ScenarioStore
from conversation_engine.scheduler import AsyncioScheduler
from conversation_engine.session_controller import SessionController
from conversation_engine.workflow_gateway import WorkflowGateway

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("conversation_engine.api")

# ---------------------------------------------------------------------------
# App & dependencies wiring
# ---------------------------------------------------------------------------

app = FastAPI(title="Kira Conversation Engine", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Shared in-process singletons
scenario_store = ScenarioStore.from_file(settings.SCENARIOS_PATH)
text_generator = OpenAITextGenerator()
workflow_gateway = WorkflowGateway()

session = ConversationSession(
    scheduler=AsyncioScheduler(),
    log=ActivityLog(),
    text_generator=text_generator,
)
controller = SessionController(store=scenario_store, session=session)


def _snapshot() -> SessionSnapshot:
    return SessionSnapshot.from_controller(controller)


def _action(accepted: bool) -> ActionResponse:
    return ActionResponse(accepted=accepted, session=_snapshot())


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "service": "conversation_engine", "scenarios": len(scenario_store)}


@app.get("/scenarios", response_model=list[ScenarioSummary])
async def list_scenarios() -> list[ScenarioSummary]:
    return [
        ScenarioSummary(index=i, name=s.name, title=s.title, step_count=len(s.steps))
        for i, s in enumerate(scenario_store.list_scenarios())
    ]


@app.get("/session", response_model=SessionSnapshot)
async def get_session() -> SessionSnapshot:
    return _snapshot()


@app.post("/session/scenario", response_model=SessionSnapshot)
async def select_scenario(req: SelectScenarioRequest) -> SessionSnapshot:
    try:
        controller.select_scenario(req.index)
    except ScenarioNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _snapshot()


@app.post("/session/mode", response_model=SessionSnapshot)
async def set_mode(req: SetModeRequest) -> SessionSnapshot:
    controller.set_mode(req.mode)
    return _snapshot()


@app.post("/session/panel", response_model=SessionSnapshot)
async def set_panel(req: SetPanelRequest) -> SessionSnapshot:
    controller.set_active_panel(req.panel)
    return _snapshot()


@app.post("/session/reset", response_model=SessionSnapshot)
async def reset_session() -> SessionSnapshot:
    controller.reset()
    return _snapshot()


@app.post("/session/options", response_model=ActionResponse)
async def select_option(req: OptionRequest) -> ActionResponse:
    """
    The scripted reply arrives after the simulated latency; poll GET /session.
    """
    return _action(controller.session.select_option(req.text))


@app.put("/session/draft", response_model=SessionSnapshot)
async def update_draft(req: DraftRequest) -> SessionSnapshot:
    controller.session.update_draft(req.text)
    return _snapshot()


@app.post("/session/messages", response_model=ActionResponse)
async def submit_message(req: FreeTextRequest) -> ActionResponse:
    return _action(controller.session.submit_free_text(req.text))


@app.post("/meetings/invite")
async def meeting_invite(req: MeetingInviteRequest) -> dict:
    invite = create_meeting_invite(
        title=req.title,
        dates=req.dates,
        duration_minutes=req.duration_minutes,
    )
    return invite.to_dict()


@app.post("/workflows/execute")
async def execute_workflow(req: WorkflowExecuteRequest) -> dict:
    return await workflow_gateway.execute(req.workflowId, req.context)


@app.post("/generate", response_model=GenerateResponse)
async def generate(req: GenerateRequest) -> GenerateResponse:
    text = await run_in_threadpool(text_generator.generate, req.prompt, req.context)
    if text is None:
        return GenerateResponse(response=UNAVAILABLE_MESSAGE, fallback=True)
    return GenerateResponse(response=text, fallback=False)


# For local dev convenience:
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
