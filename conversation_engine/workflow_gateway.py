# conversation_engine/workflow_gateway.py
"""
Workflow Gateway

Encapsulates calls to the remote workflow executor:
- execute(workflow_id, context) -> {status, ...}

When no executor URL is configured this is a stub that reports a synthetic
successful run. Errors never escape: they come back as
{"status": "error", "message": ...}.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx

from .config import settings

logger = logging.getLogger("conversation_engine.workflows")

SYNTHETIC_STEPS = [
    {"name": "Trigger", "status": "completed", "duration": "12ms"},
    {"name": "Condition Check", "status": "completed", "duration": "5ms"},
    {"name": "Action: Send Email", "status": "completed", "duration": "245ms"},
]


class WorkflowGateway:
    def __init__(
        self,
        url: Optional[str] = None,
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url if url is not None else settings.WORKFLOW_EXECUTOR_URL
        self.timeout = timeout
        self._transport = transport

    async def _post(self, url: str, payload: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(url, json=payload)
            resp.raise_for_status()
            try:
                return resp.json()
            except ValueError:
                return {"raw": resp.text}

    async def execute(self, workflow_id: str, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = {"workflowId": workflow_id, "context": context or {}}

        if not self.url:
            return self._synthetic_success(workflow_id)

        try:
            data = await self._post(self.url, payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Workflow {workflow_id} execution failed: {e}")
            return {"status": "error", "message": str(e) or "Failed to trigger workflow"}

        if not isinstance(data, dict):
            return {"status": "success", "result": data}
        data.setdefault("status", "success")
        return data

    def _synthetic_success(self, workflow_id: str) -> Dict[str, Any]:
        return {
            "status": "success",
            "message": f'Workflow "{workflow_id}" triggered successfully',
            "executionId": f"exec_{int(time.time() * 1000)}",
            "steps": [dict(step) for step in SYNTHETIC_STEPS],
        }
