"""Public API for the interactive Mandelbrot viewer core."""

from .arithmetic import Complex, add, magnitude, multiply
from .config import ViewerConfig
from .escape import EscapeParameters, evaluate
from .mapper import pixel_to_complex, to_complex_coordinate, to_pixel_coordinate
from .scheduler import (
    FrameError,
    FrameResult,
    FrameScheduler,
    FrameTask,
    PixelColorEntry,
    partition_columns,
    render_frame,
)
from .session import ViewerSession
from .viewport import (
    Direction,
    ViewportState,
    handle_tick,
    initialize,
    key_down,
    key_up,
    reset,
    snapshot,
    zoom_in,
    zoom_out,
)

__all__ = [
    "Complex",
    "Direction",
    "EscapeParameters",
    "FrameError",
    "FrameResult",
    "FrameScheduler",
    "FrameTask",
    "PixelColorEntry",
    "ViewerConfig",
    "ViewerSession",
    "ViewportState",
    "add",
    "evaluate",
    "handle_tick",
    "initialize",
    "key_down",
    "key_up",
    "magnitude",
    "multiply",
    "partition_columns",
    "pixel_to_complex",
    "render_frame",
    "reset",
    "snapshot",
    "to_complex_coordinate",
    "to_pixel_coordinate",
    "zoom_in",
    "zoom_out",
]
