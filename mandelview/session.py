"""Owns the viewport state and re-renders whenever it becomes dirty."""

from __future__ import annotations

from typing import Optional

import numpy as np

from . import viewport
from .config import ViewerConfig
from .scheduler import FrameError, FrameResult, FrameScheduler
from .viewport import Direction, ViewportState


class ViewerSession:
    """Single-writer driver between input events and the frame scheduler.

    Only the thread calling into the session touches :attr:`state`; workers
    see a frozen :class:`~mandelview.scheduler.FrameTask` snapshot. A frame
    whose computation fails is dropped, the previous frame stays current and
    the state stays dirty so the next :meth:`update` tries again.
    """

    def __init__(self, config: Optional[ViewerConfig] = None) -> None:
        self.config = config if config is not None else ViewerConfig()
        self.state: ViewportState = viewport.initialize(viewport.scaled_key_velocity(self.config.pan_speed))
        self.scheduler = FrameScheduler(
            self.config.worker_count,
            backend=self.config.backend,
            executor=self.config.executor,
        )
        self.frame: Optional[FrameResult] = None
        self.frames_rendered = 0
        self.skipped_frames = 0
        self.last_error: Optional[FrameError] = None

    def __enter__(self) -> ViewerSession:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.scheduler.close()

    def key_down(self, direction: Direction | str) -> None:
        self.state = viewport.key_down(self.state, direction)

    def key_up(self, direction: Direction | str) -> None:
        self.state = viewport.key_up(self.state, direction)

    def zoom_in(self, cursor: tuple[float, float]) -> None:
        self.state = viewport.zoom_in(self.state, cursor, self.config.screen, anchor=self.config.zoom_anchor)

    def zoom_out(self, cursor: tuple[float, float]) -> None:
        self.state = viewport.zoom_out(self.state, cursor, self.config.screen, anchor=self.config.zoom_anchor)

    def reset(self) -> None:
        self.state = viewport.reset(self.state)

    def tick(self, elapsed_time: float) -> None:
        self.state = viewport.handle_tick(self.state, elapsed_time)

    def render_if_dirty(self) -> bool:
        """Recompute the frame when needed; returns True when a new frame was published."""

        if not self.state.dirty:
            return False

        task = viewport.snapshot(self.state, self.config.escape_parameters())
        try:
            frame = self.scheduler.render(task, self.config.width, self.config.height)
        except FrameError as exc:
            self.skipped_frames += 1
            self.last_error = exc
            return False

        self.frame = frame
        self.frames_rendered += 1
        self.last_error = None
        self.state = viewport.mark_clean(self.state)
        return True

    def update(self, elapsed_time: float) -> bool:
        self.tick(elapsed_time)
        return self.render_if_dirty()

    def frame_array(self) -> np.ndarray:
        """Current frame as an image, black until the first frame completes."""

        if self.frame is None:
            return np.zeros((self.config.height, self.config.width, 3), dtype=np.uint8)
        return self.frame.to_array()
