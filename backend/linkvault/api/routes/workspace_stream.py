"""Workspace Stream - current public view and an SSE feed of view changes.

Invariants:
    - GET /workspace reflects the sync engine's latest accepted snapshots
    - The stream emits the current view first, then one event per change
    - max_events bounds the stream (used by tests and one-shot clients)
"""

import json
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from linkvault.services.workspace import Workspace, get_workspace
from linkvault.api.routes.payloads import view_payload

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/workspace", tags=["workspace"])

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


def _sse_line(event: dict) -> str:
    """Format event as SSE data line."""
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


@router.get("")
async def get_workspace_view(ws: Workspace = Depends(get_workspace)):
    return view_payload(ws, ws.engine.view)


@router.get("/stream")
async def stream_workspace(
    max_events: int | None = Query(None, ge=1),
    ws: Workspace = Depends(get_workspace),
):
    async def event_generator():
        sent = 0
        async for view in ws.engine.changes():
            yield _sse_line({"type": "workspace", "data": view_payload(ws, view)})
            sent += 1
            if max_events is not None and sent >= max_events:
                return

    return StreamingResponse(
        event_generator(), media_type="text/event-stream", headers=_SSE_HEADERS,
    )
