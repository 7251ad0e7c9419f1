# backend/app.py
from typing import Set, Optional, List
from fastapi import FastAPI, WebSocket, WebSocketDisconnect # type: ignore
from fastapi.middleware.cors import CORSMiddleware # type: ignore
from fastapi.responses import JSONResponse # type: ignore
from pydantic import BaseModel # type: ignore
import config
import database
from drills import DRILL_TYPES
from session_manager import SessionManager


app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],          # dev: allow everything
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

clients: Set[WebSocket] = set()
session_manager = SessionManager()


@app.on_event("startup")
async def startup():
    await database.init_db()
    print("[APP] Ready")


def _error(e: Exception, status_code: int = 400):
    print(f"[APP] Rejected: {e}")
    return JSONResponse(status_code=status_code, content={"ok": False, "error": str(e)})


def _current_payload():
    return session_manager.get_session_info()


async def _broadcast():
    payload = {"type": "session", "session": _current_payload()}
    dead = []
    for ws in list(clients):
        try:
            await ws.send_json(payload)
        except Exception as e:
            print(f"[APP] Failed to send to client: {e}")
            dead.append(ws)
    for ws in dead:
        clients.discard(ws)


async def _apply(action):
    """Run a mutation on the active session and push the new state to clients"""
    try:
        result = action(session_manager.require_session())
    except ValueError as e:
        return _error(e)
    await _broadcast()
    response = {"ok": True, "session": _current_payload()}
    if isinstance(result, dict):
        response.update(result)
    return response


@app.websocket("/ws")
async def ws_endpoint(ws: WebSocket):
    await ws.accept()
    clients.add(ws)

    await ws.send_json({"type": "session", "session": _current_payload()})

    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        clients.discard(ws)


@app.get("/api/config")
def get_config():
    return {
        "drill_types": list(DRILL_TYPES),
        "min_ends": config.MIN_ENDS,
        "max_ends": config.MAX_ENDS,
        "forty_bowls_ends": config.FORTY_BOWLS_ENDS,
        "lead_bowls_options": list(config.LEAD_BOWLS_OPTIONS),
        "seconds_chance_bowls_options": list(config.SECONDS_CHANCE_BOWLS_OPTIONS),
        "lead_scoring_rules": list(config.LEAD_SCORING_RULES),
        "lead_scoring_rule": config.LEAD_SCORING_RULE,
        "weather_options": list(config.WEATHER_OPTIONS),
        "surface_options": list(config.SURFACE_OPTIONS),
    }

# ========== Active Session Endpoints ==========

class SessionStartRequest(BaseModel):
    drill_type: str
    player_a_name: str = ""
    player_b_name: str = ""
    session_date: str = ""
    surface: str = ""
    weather: List[str] = []
    notes: str = ""
    num_ends: Optional[int] = None
    bowls_per_player: Optional[int] = None
    scoring_rule: Optional[str] = None


class SessionOpenRequest(BaseModel):
    drill_type: str


class SessionSetupRequest(BaseModel):
    player_a_name: Optional[str] = None
    player_b_name: Optional[str] = None
    session_date: Optional[str] = None
    surface: Optional[str] = None
    weather: Optional[List[str]] = None
    notes: Optional[str] = None
    num_ends: Optional[int] = None
    bowls_per_player: Optional[int] = None
    scoring_rule: Optional[str] = None


class BowlToggleRequest(BaseModel):
    end_index: int
    side: str
    bowl_index: int
    attribute: str


class BowlOutcomeRequest(BaseModel):
    end_index: int
    side: str
    bowl_index: int
    outcome: str


class AdjudicationRequest(BaseModel):
    shot_winner: Optional[str] = None
    shots_won: Optional[int] = None


@app.post("/api/session/start")
async def start_session(payload: SessionStartRequest):
    """Configure and start a new drill"""
    setup = payload.model_dump(exclude={"drill_type"}, exclude_none=True)
    try:
        session_manager.start_session(payload.drill_type, **setup)
    except ValueError as e:
        return _error(e)
    await _broadcast()
    return {"ok": True, "session": _current_payload()}


@app.post("/api/session/open")
async def open_session(payload: SessionOpenRequest):
    """Open a drill in setup with its default config"""
    try:
        session_manager.open_setup(payload.drill_type)
    except ValueError as e:
        return _error(e)
    await _broadcast()
    return {"ok": True, "session": _current_payload()}


@app.post("/api/session/configure")
async def configure_session(payload: SessionSetupRequest):
    """Edit setup fields of the session in setup"""
    setup = payload.model_dump(exclude_none=True)
    return await _apply(lambda s: {"config": s.configure(**setup).to_dict()})


@app.post("/api/session/begin")
async def begin_session():
    """Validate the setup and open end 1"""
    return await _apply(lambda s: session_manager.begin())


@app.get("/api/session/current")
def get_current_session():
    """Get the active session with live statistics"""
    info = _current_payload()
    if info is None:
        return {"ok": False, "message": "No active session"}
    return {"ok": True, "session": info}


@app.get("/api/session/stats")
def get_current_stats():
    if not session_manager.has_active_session():
        return {"ok": False, "message": "No active session"}
    return {"ok": True, "stats": session_manager.session.statistics()}


@app.post("/api/session/toggle")
async def toggle_bowl(payload: BowlToggleRequest):
    return await _apply(lambda s: {"mark": s.toggle_bowl_attribute(
        payload.end_index, payload.side, payload.bowl_index, payload.attribute).to_dict()})


@app.post("/api/session/outcome")
async def set_outcome(payload: BowlOutcomeRequest):
    return await _apply(lambda s: {"mark": s.set_bowl_outcome(
        payload.end_index, payload.side, payload.bowl_index, payload.outcome).to_dict()})


@app.post("/api/session/complete-end")
async def complete_end():
    return await _apply(lambda s: s.complete_end())


@app.post("/api/session/adjudicate")
async def adjudicate(payload: AdjudicationRequest):
    return await _apply(lambda s: {"adjudication": s.set_adjudication(
        shot_winner=payload.shot_winner, shots_won=payload.shots_won)})


@app.post("/api/session/back-to-edit")
async def back_to_edit():
    return await _apply(lambda s: s.back_to_edit())


@app.post("/api/session/finalize-end")
async def finalize_end():
    return await _apply(lambda s: {"end": s.finalize_end().to_dict()})


@app.post("/api/session/complete-early")
async def complete_early():
    return await _apply(lambda s: s.complete_early())


@app.post("/api/session/reset")
async def reset_session():
    """Back to setup for the same drill, default config"""
    return await _apply(lambda s: session_manager.reset())


@app.post("/api/session/close")
async def close_session():
    """Drop the active session"""
    session_manager.end_session()
    await _broadcast()
    return {"ok": True}


@app.post("/api/session/save")
async def save_session():
    """Store the active session once it reached summary"""
    try:
        session_id = await session_manager.save()
    except ValueError as e:
        return _error(e)
    return {"ok": True, "session_id": session_id}

# ========== History Endpoints ==========

@app.get("/api/sessions")
async def list_sessions(
    limit: int = config.HISTORY_PAGE_SIZE,
    offset: int = 0,
    drill_type: Optional[str] = None
):
    """List stored sessions, newest first"""
    return await database.list_sessions(limit=limit, offset=offset, drill_type=drill_type)


@app.get("/api/sessions/{session_id}")
async def get_session(session_id: int):
    """Get full details of a stored session"""
    session = await database.get_session(session_id)
    if session is None:
        return _error(ValueError("Session not found"), status_code=404)
    return {"ok": True, "session": session}


@app.post("/api/sessions/{session_id}/load")
async def load_session(session_id: int):
    """Reopen a stored session in summary state, statistics recomputed from its ends"""
    try:
        session = await session_manager.load(session_id)
    except ValueError as e:
        return _error(e)
    if session is None:
        return _error(ValueError("Session not found"), status_code=404)
    await _broadcast()
    return {"ok": True, "session": _current_payload()}


@app.delete("/api/sessions/{session_id}")
async def delete_session_endpoint(session_id: int):
    """Delete a stored session"""
    deleted = await database.delete_session(session_id)
    if not deleted:
        return _error(ValueError("Session not found"), status_code=404)
    return {"ok": True}
