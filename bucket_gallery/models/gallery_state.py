from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .listing import GalleryOutcome, ImageRecord
from .viewport import InvalidTransition, NaturalSize, ViewportLoadState

logger = logging.getLogger(__name__)


@dataclass
class GalleryState:
    """
    Everything one browser session sees: the submitted URL, the resolved
    images, the inline message, the preview selection and one load state per
    image. Mutated only through the methods below.

    Every submission takes a ticket from ``begin_submission``. Only the latest
    ticket may apply its outcome, so a slow earlier fetch finishing after a
    newer one is dropped instead of replacing the newer grid.
    """

    threshold: float = 0.1
    source_url: str = ""
    status: Optional[str] = None
    message: Optional[str] = None
    images: List[ImageRecord] = field(default_factory=list)
    load_states: List[ViewportLoadState] = field(default_factory=list)
    preview: Optional[ImageRecord] = None
    generation: int = 0
    pending_ticket: Optional[int] = None

    @property
    def loading(self) -> bool:
        return self.pending_ticket is not None

    @property
    def tiles(self) -> List[Tuple[int, ImageRecord, ViewportLoadState]]:
        return [(i, img, st) for i, (img, st) in enumerate(zip(self.images, self.load_states))]

    # -------- submissions --------

    def begin_submission(self, source_url: str) -> int:
        self.generation += 1
        self.pending_ticket = self.generation
        self.source_url = source_url
        self.status = None
        self.message = None
        self._replace_images(())
        return self.generation

    def apply_outcome(self, ticket: int, outcome: GalleryOutcome) -> bool:
        if ticket != self.generation:
            logger.info("Dropping stale listing result (ticket %s, latest %s)", ticket, self.generation)
            return False
        self.pending_ticket = None
        self.status = outcome.status
        self.message = outcome.message
        self._replace_images(outcome.images)
        return True

    def _replace_images(self, images: Iterable[ImageRecord]) -> None:
        self.images = list(images)
        self.load_states = [ViewportLoadState(threshold=self.threshold) for _ in self.images]
        self.preview = None

    # -------- per-image loader events --------

    def _load_state(self, index: int) -> ViewportLoadState:
        if index < 0 or index >= len(self.load_states):
            raise IndexError(f"no image at index {index}")
        return self.load_states[index]

    def mark_visible(self, index: int, ratio: float) -> bool:
        return self._load_state(index).observe(ratio)

    def mark_loaded(self, index: int, width: int, height: int) -> NaturalSize:
        return self._load_state(index).loaded(width, height)

    # -------- preview overlay --------

    def open_preview(self, index: int) -> ImageRecord:
        if not self._load_state(index).is_loaded:
            raise InvalidTransition(f"image {index} has not finished loading")
        self.preview = self.images[index]
        return self.preview

    def close_preview(self) -> None:
        self.preview = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_url": self.source_url,
            "status": self.status,
            "message": self.message,
            "loading": self.loading,
            "preview": self.preview.to_dict() if self.preview else None,
            "images": [
                {**img.to_dict(), "load": st.to_dict()}
                for img, st in zip(self.images, self.load_states)
            ],
        }
