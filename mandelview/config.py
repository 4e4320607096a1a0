"""Viewer settings fixed at start-up."""

from __future__ import annotations

from dataclasses import dataclass

from .escape import MAX_ITERATIONS, STABILITY_THRESHOLD, EscapeParameters
from .scheduler import validate_backend, validate_executor
from .viewport import ANCHORS


@dataclass(frozen=True)
class ViewerConfig:
    """Screen size, iteration settings and worker pool layout."""

    width: int = 500
    height: int = 500
    max_iterations: int = MAX_ITERATIONS
    stability_threshold: float = STABILITY_THRESHOLD
    worker_count: int = 10
    pan_speed: float = 1.0
    fps: int = 144
    backend: str = "python"
    executor: str = "thread"
    zoom_anchor: str = "cursor"

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Screen size must be positive, got {self.width}x{self.height}.")
        if self.worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {self.worker_count}.")
        if self.fps < 1:
            raise ValueError(f"fps must be at least 1, got {self.fps}.")
        validate_backend(self.backend)
        validate_executor(self.executor)
        if self.zoom_anchor not in ANCHORS:
            raise ValueError(f"Unknown zoom anchor '{self.zoom_anchor}'. Valid choices: {', '.join(ANCHORS)}.")
        # Raises on an invalid cap or threshold.
        self.escape_parameters()

    @property
    def screen(self) -> tuple[int, int]:
        return self.width, self.height

    def escape_parameters(self) -> EscapeParameters:
        return EscapeParameters(self.max_iterations, self.stability_threshold)
