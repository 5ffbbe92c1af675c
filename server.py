"""
Break layout web server (FastAPI + WebSocket)

Stateless JSON endpoints for one-off or batch scenario builds, and a
WebSocket channel where each connection owns its own ScenarioController
(Next / mode / seed / keep commands, state queries).
"""

import json
import logging
from typing import Literal, Optional

from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect

from controller import ScenarioController
from rng import MASK32, normalize_seed
from scenario import build_scenario
from table import geometry_dict

logger = logging.getLogger(__name__)

MAX_BATCH = 100

app = FastAPI(title="Pool break layout")


# ── JSON endpoints ──────────────────────────────────────────────────────────

@app.get("/api/table")
async def table():
    return geometry_dict()


@app.get("/api/scenario")
async def scenario(mode: Literal["8", "9"] = "8", seed: Optional[str] = None):
    return build_scenario(mode, seed).to_dict()


@app.get("/api/scenarios")
async def scenarios(mode: Literal["8", "9"] = "8", seed: Optional[str] = None,
                    count: int = Query(1, ge=1, le=MAX_BATCH)):
    """Consecutive seeds starting at ``seed``; each build gets its own PRNG."""
    base = normalize_seed(seed)
    return [build_scenario(mode, (base + i) & MASK32).to_dict() for i in range(count)]


# ── WebSocket channel ───────────────────────────────────────────────────────

def _drain_events(ctrl: ScenarioController) -> list[dict]:
    """Turn queued controller events into outgoing frames."""
    frames = []
    for ev in ctrl.pending_events:
        if ev["type"] == "scenario":
            frames.append({
                "type": "scenario",
                "data": ev["scenario"].to_dict(),
                "show_numbers": ctrl.show_numbers,
                "status": ctrl.status_msg,
            })
        else:
            frames.append(ev)
    ctrl.pending_events.clear()
    if not frames and ctrl.status_msg:
        frames.append({"type": "status", "status": ctrl.status_msg})
    return frames


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket, mode: str = "8", seed: Optional[str] = None):
    await ws.accept()
    ctrl = ScenarioController(mode=mode, seed=seed)

    await ws.send_text(json.dumps({
        "type": "init",
        "table": geometry_dict(),
        "info": ctrl.info_msg,
    }))
    for frame in _drain_events(ctrl):
        await ws.send_text(json.dumps(frame))

    try:
        while True:
            data = await ws.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                continue
            if not isinstance(msg, dict):
                continue

            cmd = msg.get("cmd", "")
            if cmd == "key_down":
                ctrl.handle_key(msg.get("key", ""))
            elif cmd == "execute":
                ctrl.status_msg = ""
                ctrl.execute_command(msg.get("text", ""))
            elif cmd == "get_state":
                await ws.send_text(json.dumps({
                    "type": "state_json",
                    "data": ctrl.get_state_json(),
                }))
                continue
            else:
                continue

            for frame in _drain_events(ctrl):
                await ws.send_text(json.dumps(frame))
    except WebSocketDisconnect:
        logger.debug("client disconnected")


# ── Run with uvicorn ────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    from logging_config import configure_logging

    configure_logging("INFO")
    uvicorn.run("server:app", host="0.0.0.0", port=8000, reload=False)
