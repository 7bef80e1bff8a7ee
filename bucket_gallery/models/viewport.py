from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class LoadPhase(str, Enum):
    PENDING = "pending"
    TRIGGERED = "triggered"
    LOADED = "loaded"


class InvalidTransition(ValueError):
    pass


@dataclass(frozen=True)
class NaturalSize:
    width: int = 1
    height: int = 1

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def padding_percent(self) -> float:
        # padding-top trick: box height as a percentage of its width
        return round(self.height / self.width * 100, 4)


@dataclass
class ViewportLoadState:
    """
    Lazy activation for one placeholder.

    PENDING -> TRIGGERED on the first visibility report at or above the
    threshold; the observer is retired at that point and later reports are
    ignored. TRIGGERED -> LOADED once the image reports its natural size.
    A broken image simply stays TRIGGERED.
    """

    threshold: float = 0.1
    phase: LoadPhase = LoadPhase.PENDING
    natural_size: NaturalSize = field(default_factory=NaturalSize)

    @property
    def visible(self) -> bool:
        return self.phase is not LoadPhase.PENDING

    @property
    def is_loaded(self) -> bool:
        return self.phase is LoadPhase.LOADED

    def observe(self, intersection_ratio: float) -> bool:
        """Feed one observer callback. Returns True when this call triggered the load."""
        if self.phase is not LoadPhase.PENDING:
            return False
        if intersection_ratio < self.threshold:
            return False
        self.phase = LoadPhase.TRIGGERED
        return True

    def loaded(self, width: int, height: int) -> NaturalSize:
        if self.phase is LoadPhase.PENDING:
            raise InvalidTransition("image reported loaded before it became visible")
        if width <= 0 or height <= 0:
            raise InvalidTransition(f"invalid natural size {width}x{height}")
        self.natural_size = NaturalSize(width=width, height=height)
        self.phase = LoadPhase.LOADED
        return self.natural_size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "visible": self.visible,
            "natural_size": {"width": self.natural_size.width, "height": self.natural_size.height},
        }
