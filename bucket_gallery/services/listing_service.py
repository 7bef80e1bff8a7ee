from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Tuple
from urllib.parse import urlsplit

from ..models.listing import EPOCH, ImageRecord

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp")

# fromisoformat before 3.11 only takes exactly 3 or 6 fraction digits
_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


class ListingParseError(ValueError):
    pass


def _local_name(tag: str) -> str:
    # "{http://s3.amazonaws.com/doc/2006-03-01/}Contents" -> "Contents"
    return tag.rsplit("}", 1)[-1]


def _child_text(elem: ET.Element, name: str) -> Optional[str]:
    for child in elem:
        if _local_name(child.tag) == name:
            return (child.text or "").strip()
    return None


def _iter_contents(root: ET.Element) -> Iterator[Tuple[str, Optional[str]]]:
    for elem in root.iter():
        if _local_name(elem.tag) != "Contents":
            continue
        key = _child_text(elem, "Key")
        if not key:
            continue
        yield key, _child_text(elem, "LastModified")


def is_image_key(key: str) -> bool:
    if key.endswith("/"):
        return False
    return key.rsplit("/", 1)[-1].lower().endswith(IMAGE_EXTENSIONS)


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    value = raw.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    value = _FRACTION.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", value, count=1)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def base_url(source_url: str) -> str:
    """
    scheme://host/path of the listing URL, without query, fragment or trailing
    slash. A final ``*.xml`` segment names the listing document, not a folder,
    and is dropped.
    """
    parts = urlsplit(source_url.strip())
    path = parts.path.rstrip("/")
    last = path.rsplit("/", 1)[-1]
    if last.lower().endswith(".xml"):
        path = path[: -len(last)].rstrip("/")
    return f"{parts.scheme}://{parts.netloc}{path}"


def join_url(base: str, key: str) -> str:
    return f"{base.rstrip('/')}/{key.lstrip('/')}"


def resolve(document_text: str, source_url: str) -> List[ImageRecord]:
    """
    Turn a bucket listing document into image records, newest first.

    Non-image keys are skipped. Entries without a usable LastModified get
    EPOCH and sort after every dated entry; equal timestamps keep listing
    order. Raises ListingParseError if the document is not well-formed XML.
    """
    try:
        root = ET.fromstring(document_text)
    except ET.ParseError as exc:
        raise ListingParseError(f"listing is not well-formed XML: {exc}") from exc

    base = base_url(source_url)
    entries = []
    for key, raw_modified in _iter_contents(root):
        if not is_image_key(key):
            continue
        modified = parse_timestamp(raw_modified)
        record = ImageRecord(url=join_url(base, key), last_modified=modified or EPOCH, key=key)
        entries.append((modified is not None, record))

    # sorted() stays stable with reverse=True
    entries.sort(key=lambda e: (e[0], e[1].last_modified), reverse=True)
    return [record for _, record in entries]
