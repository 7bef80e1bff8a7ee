from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from ..deps import get_http_client, get_sessions
from ..models.viewport import InvalidTransition
from ..session import SessionStore, get_current_state
from ..services.gallery_service import load_gallery

router = APIRouter(prefix="/api")


class VisibilityReport(BaseModel):
    ratio: float = Field(ge=0.0, le=1.0)


class LoadReport(BaseModel):
    width: int
    height: int


@router.get("/ping", response_class=PlainTextResponse, name="ping")
def ping():
    return "pong"

@router.get("/listing", name="listing")
async def listing(url: str = "", client: httpx.AsyncClient = Depends(get_http_client)):
    outcome = await load_gallery(url, client)
    return outcome.to_dict()

@router.get("/state", name="state")
def state(request: Request, sessions: SessionStore = Depends(get_sessions)):
    current = get_current_state(request, sessions)
    if current is None:
        return {"ok": False, "error": "no_session"}
    return {"ok": True, **current.to_dict()}

@router.post("/images/{index}/visible", name="image_visible")
def image_visible(index: int, report: VisibilityReport, request: Request, sessions: SessionStore = Depends(get_sessions)):
    current = get_current_state(request, sessions)
    if current is None:
        return {"ok": False, "error": "no_session"}
    try:
        triggered = current.mark_visible(index, report.ratio)
    except IndexError:
        return {"ok": False, "error": "not_found"}
    load = current.load_states[index]
    return {"ok": True, "triggered": triggered, "phase": load.phase.value}

@router.post("/images/{index}/loaded", name="image_loaded")
def image_loaded(index: int, report: LoadReport, request: Request, sessions: SessionStore = Depends(get_sessions)):
    current = get_current_state(request, sessions)
    if current is None:
        return {"ok": False, "error": "no_session"}
    try:
        size = current.mark_loaded(index, report.width, report.height)
    except IndexError:
        return {"ok": False, "error": "not_found"}
    except InvalidTransition as exc:
        return {"ok": False, "error": "invalid_transition", "detail": str(exc)}
    return {
        "ok": True,
        "phase": current.load_states[index].phase.value,
        "aspect_ratio": size.aspect_ratio,
        "padding_percent": size.padding_percent,
    }
