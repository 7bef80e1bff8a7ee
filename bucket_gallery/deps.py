from __future__ import annotations

from typing import AsyncIterator

import httpx

from .services.gallery_service import build_client
from .session import SessionStore, store

async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with build_client() as client:
        yield client

def get_sessions() -> SessionStore:
    return store
