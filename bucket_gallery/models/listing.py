from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_ERROR = "error"

FETCH_FAILED_MESSAGE = "Failed to fetch or parse the S3 file list."
NO_IMAGES_MESSAGE = "No images found in the provided S3 list."


@dataclass(frozen=True)
class ImageRecord:
    url: str
    last_modified: datetime = EPOCH
    key: str = ""

    @property
    def name(self) -> str:
        source = self.key or self.url
        return source.rstrip("/").rsplit("/", 1)[-1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "key": self.key,
            "last_modified": self.last_modified.isoformat(),
        }


@dataclass(frozen=True)
class GalleryOutcome:
    """Result of one submit: resolved images, or the message to show instead."""

    status: str
    images: tuple[ImageRecord, ...] = field(default_factory=tuple)
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @classmethod
    def failed(cls) -> "GalleryOutcome":
        return cls(status=STATUS_ERROR, message=FETCH_FAILED_MESSAGE)

    @classmethod
    def from_images(cls, images) -> "GalleryOutcome":
        images = tuple(images)
        if not images:
            return cls(status=STATUS_EMPTY, message=NO_IMAGES_MESSAGE)
        return cls(status=STATUS_OK, images=images)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "images": [img.to_dict() for img in self.images],
        }
