"""Parallel computation of a full frame split into contiguous column ranges."""

from __future__ import annotations

import multiprocessing
from concurrent.futures import BrokenExecutor, Executor, ProcessPoolExecutor, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

import numpy as np

from .escape import EscapeParameters, escape_time
from .mapper import axis_coordinates, pixel_to_complex
from .palette import colorize

BACKENDS = ("python", "tensorflow")
EXECUTORS = ("thread", "process")


class FrameError(RuntimeError):
    """A worker failed while computing a frame; nothing from it was kept."""


@dataclass(frozen=True)
class FrameTask:
    """Viewport parameters captured when a frame computation begins."""

    pan_offset: tuple[float, float]
    magnification: float
    escape: EscapeParameters = field(default_factory=EscapeParameters)


class PixelColorEntry(NamedTuple):
    x: int
    y: int
    color: tuple[float, float, float]


@dataclass(frozen=True)
class FrameResult:
    """Every pixel of a frame, columns left to right, each column top to bottom."""

    width: int
    height: int
    entries: tuple[PixelColorEntry, ...]

    def __len__(self) -> int:
        return len(self.entries)

    def to_array(self) -> np.ndarray:
        """Pack the entries into a ``(height, width, 3)`` ``uint8`` image."""

        count = len(self.entries)
        frame = np.zeros((self.height, self.width, 3), dtype=np.float64)
        if count == 0:
            return np.uint8(frame)
        xs = np.fromiter((entry.x for entry in self.entries), dtype=np.int64, count=count)
        ys = np.fromiter((entry.y for entry in self.entries), dtype=np.int64, count=count)
        colors = np.array([entry.color for entry in self.entries], dtype=np.float64).reshape(count, 3)
        frame[ys, xs] = colors
        return np.uint8(np.clip(frame * 255, 0, 255))


def validate_backend(backend: str) -> str:
    if backend not in BACKENDS:
        raise ValueError(f"Unknown backend '{backend}'. Valid choices: {', '.join(BACKENDS)}.")
    return backend


def validate_executor(executor: str) -> str:
    if executor not in EXECUTORS:
        raise ValueError(f"Unknown executor '{executor}'. Valid choices: {', '.join(EXECUTORS)}.")
    return executor


def partition_columns(width: int, worker_count: int) -> list[tuple[int, int]]:
    """Split ``[0, width)`` into contiguous ``(start, stop)`` ranges.

    Each range holds ``width // n`` columns and the last one also takes the
    remainder. ``n`` is ``worker_count`` capped at ``width`` so that no range
    is empty.
    """

    if width < 1:
        raise ValueError(f"width must be at least 1, got {width}.")
    if worker_count < 1:
        raise ValueError(f"worker_count must be at least 1, got {worker_count}.")

    chunks = min(worker_count, width)
    per_chunk = width // chunks
    ranges = []
    start = 0
    for index in range(chunks):
        stop = width if index == chunks - 1 else start + per_chunk
        ranges.append((start, stop))
        start = stop
    return ranges


def _escape_values_python(task: FrameTask, x_start: int, x_end: int, width: int, height: int) -> np.ndarray:
    values = np.empty((x_end - x_start, height), dtype=np.float64)
    for i, x in enumerate(range(x_start, x_end)):
        for y in range(height):
            c = pixel_to_complex(x, y, width, height, task.pan_offset, task.magnification)
            result = escape_time(c, task.escape)
            values[i, y] = np.nan if result is None else result
    return values


def _escape_values_tensorflow(task: FrameTask, x_start: int, x_end: int, width: int, height: int) -> np.ndarray:
    from .kernels import escape_block

    real = axis_coordinates(x_start, x_end, width, task.pan_offset[0], task.magnification)
    imaginary = axis_coordinates(0, height, height, task.pan_offset[1], task.magnification)
    return escape_block(real, imaginary, task.escape)


def compute_columns(
    task: FrameTask,
    x_start: int,
    x_end: int,
    width: int,
    height: int,
    backend: str = "python",
) -> list[PixelColorEntry]:
    """Colour every pixel of columns ``[x_start, x_end)`` in column-major order."""

    if backend == "tensorflow":
        values = _escape_values_tensorflow(task, x_start, x_end, width, height)
    else:
        values = _escape_values_python(task, x_start, x_end, width, height)

    colors = colorize(values).tolist()
    entries = []
    for i, x in enumerate(range(x_start, x_end)):
        column = colors[i]
        for y in range(height):
            entries.append(PixelColorEntry(x, y, tuple(column[y])))
    return entries


class FrameScheduler:
    """Fan a frame out over a reusable worker pool and join it back in order."""

    def __init__(self, worker_count: int, *, backend: str = "python", executor: str = "thread") -> None:
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {worker_count}.")
        self.worker_count = int(worker_count)
        self.backend = validate_backend(backend)
        self.executor_kind = validate_executor(executor)
        self._executor: Optional[Executor] = None

    def __enter__(self) -> FrameScheduler:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get_executor(self) -> Executor:
        if self._executor is None:
            if self.executor_kind == "process":
                # TensorFlow state does not survive a fork, so workers start fresh.
                self._executor = ProcessPoolExecutor(
                    max_workers=self.worker_count,
                    mp_context=multiprocessing.get_context("spawn"),
                )
            else:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.worker_count,
                    thread_name_prefix="mandelview-worker",
                )
        return self._executor

    def render(self, task: FrameTask, width: int, height: int) -> FrameResult:
        """Compute a complete frame or raise :class:`FrameError`."""

        if height < 1:
            raise ValueError(f"height must be at least 1, got {height}.")
        ranges = partition_columns(width, self.worker_count)
        executor = self._get_executor()

        futures = [
            executor.submit(compute_columns, task, start, stop, width, height, self.backend)
            for start, stop in ranges
        ]
        # Barrier: nothing is published until every range has finished.
        wait(futures)

        entries: list[PixelColorEntry] = []
        for (start, stop), future in zip(ranges, futures):
            exc = future.exception()
            if exc is not None:
                if isinstance(exc, BrokenExecutor):
                    self.close()
                raise FrameError(f"Worker for columns [{start}, {stop}) failed: {exc}") from exc
            entries.extend(future.result())
        return FrameResult(width=width, height=height, entries=tuple(entries))

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


def render_frame(
    task: FrameTask,
    width: int,
    height: int,
    worker_count: int,
    *,
    backend: str = "python",
    executor: str = "thread",
) -> FrameResult:
    """Render one frame on a pool that only lives for this call."""

    with FrameScheduler(worker_count, backend=backend, executor=executor) as scheduler:
        return scheduler.render(task, width, height)
