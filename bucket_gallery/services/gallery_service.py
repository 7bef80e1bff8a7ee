from __future__ import annotations

import logging
from urllib.parse import urlsplit

import httpx

from ..config import settings
from ..models.listing import GalleryOutcome
from .listing_service import ListingParseError, resolve

logger = logging.getLogger(__name__)


class ListingFetchError(RuntimeError):
    pass


def build_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.FETCH_TIMEOUT_SECONDS,
        follow_redirects=True,
        headers={"User-Agent": settings.FETCH_USER_AGENT, "Accept": "application/xml, text/xml, */*"},
        transport=transport,
    )


def is_listing_url(url: str) -> bool:
    try:
        parts = urlsplit((url or "").strip())
    except ValueError:
        # e.g. "http://[bad": unbalanced IPv6 brackets
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def _declared_length(resp: httpx.Response) -> int | None:
    raw = resp.headers.get("Content-Length", "")
    return int(raw) if raw.strip().isdigit() else None


async def fetch_listing(url: str, client: httpx.AsyncClient) -> str:
    """
    Single GET of the listing document. No retries. The body is streamed and
    abandoned as soon as it is known to exceed FETCH_MAX_BYTES.
    """
    if not is_listing_url(url):
        raise ListingFetchError(f"not an http(s) URL: {url!r}")
    limit = settings.FETCH_MAX_BYTES
    too_large = ListingFetchError(f"listing at {url} is larger than {limit} bytes")
    try:
        async with client.stream("GET", url.strip()) as resp:
            resp.raise_for_status()
            declared = _declared_length(resp)
            if declared is not None and declared > limit:
                raise too_large
            chunks: list[bytes] = []
            total = 0
            async for chunk in resp.aiter_bytes():
                total += len(chunk)
                if total > limit:
                    raise too_large
                chunks.append(chunk)
            encoding = resp.encoding or "utf-8"
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise ListingFetchError(f"GET {url} failed: {exc}") from exc

    return b"".join(chunks).decode(encoding, errors="replace")


async def load_gallery(url: str, client: httpx.AsyncClient) -> GalleryOutcome:
    """
    Fetch and resolve one listing. Fetch and parse failures collapse into the
    same generic outcome; zero images is its own "empty" outcome.
    """
    try:
        document = await fetch_listing(url, client)
        images = resolve(document, url.strip())
    except (ListingFetchError, ListingParseError) as exc:
        logger.warning("Listing load failed: %s", exc)
        return GalleryOutcome.failed()

    outcome = GalleryOutcome.from_images(images)
    logger.info("Resolved %d image(s) from %s", len(outcome.images), url)
    return outcome
