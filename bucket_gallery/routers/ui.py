from __future__ import annotations

import logging
from pathlib import Path

import httpx
from fastapi import APIRouter, Depends, Request, Form
from fastapi.responses import RedirectResponse, HTMLResponse
from fastapi.templating import Jinja2Templates

from ..deps import get_http_client, get_sessions
from ..session import COOKIE_NAME, SessionStore, get_session_id, make_session_token
from ..services.gallery_service import load_gallery
from ..models.listing import GalleryOutcome
from ..models.viewport import InvalidTransition
from ..config import settings

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
router = APIRouter()

# -------- helpers --------

def _redirect(to: str, *, request: Request, status_code: int = 302) -> RedirectResponse:
    """
    Redirect to a named endpoint using url_for so it respects root_path.
    """
    url = request.url_for(to)
    return RedirectResponse(url=str(url), status_code=status_code)

def _with_session(resp, session_id: str, created: bool):
    if created:
        resp.set_cookie(
            COOKIE_NAME,
            make_session_token(session_id),
            httponly=True,
            samesite="lax",
            max_age=settings.SESSION_TTL_SECONDS,
        )
    return resp

# -------- routes --------

@router.get("/", response_class=HTMLResponse, name="gallery")
def gallery(request: Request, sessions: SessionStore = Depends(get_sessions)):
    session_id, state, created = sessions.get_or_create(get_session_id(request))
    resp = templates.TemplateResponse(
        request,
        "gallery.html",
        {
            "app_name": settings.APP_NAME,
            "state": state,
            "threshold": state.threshold,
        },
    )
    return _with_session(resp, session_id, created)

@router.post("/gallery", name="gallery_submit")
async def gallery_submit(
    request: Request,
    url: str = Form(""),
    sessions: SessionStore = Depends(get_sessions),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    session_id, state, created = sessions.get_or_create(get_session_id(request))

    ticket = state.begin_submission(url.strip())
    try:
        outcome = await load_gallery(url, client)
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error loading listing %r", url)
        outcome = GalleryOutcome.failed()
    state.apply_outcome(ticket, outcome)

    return _with_session(_redirect("gallery", request=request), session_id, created)

@router.post("/preview/close", name="preview_close")
def preview_close(request: Request, sessions: SessionStore = Depends(get_sessions)):
    state = sessions.get(get_session_id(request))
    if state is not None:
        state.close_preview()
    return _redirect("gallery", request=request)

@router.post("/preview/{index}", name="preview_open")
def preview_open(index: int, request: Request, sessions: SessionStore = Depends(get_sessions)):
    state = sessions.get(get_session_id(request))
    if state is not None:
        try:
            state.open_preview(index)
        except (IndexError, InvalidTransition) as exc:
            logger.info("Ignoring preview request for image %s: %s", index, exc)
    return _redirect("gallery", request=request)
