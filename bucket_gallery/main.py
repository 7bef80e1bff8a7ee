from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .config import settings
from .routers.ui import router as ui_router
from .routers.api import router as api_router

PACKAGE_DIR = Path(__file__).resolve().parent

app = FastAPI(title=settings.APP_NAME)

app.mount("/static", StaticFiles(directory=PACKAGE_DIR / "static"), name="static")

app.include_router(ui_router)
app.include_router(api_router)
