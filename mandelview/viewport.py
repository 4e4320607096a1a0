"""Pan and zoom state accumulated between frames."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

import numpy as np

from .escape import EscapeParameters
from .scheduler import FrameTask

ZOOM_STEP = 2.0
MIN_MAGNIFICATION = 1.0
ANCHORS = ("cursor", "center")


class Direction(enum.Enum):
    UP = "up"
    LEFT = "left"
    DOWN = "down"
    RIGHT = "right"


# Pixels per second, in pre-scaled screen units.
DEFAULT_KEY_VELOCITY: dict[Direction, tuple[float, float]] = {
    Direction.UP: (0.0, -10.0),
    Direction.LEFT: (-10.0, 0.0),
    Direction.DOWN: (0.0, 10.0),
    Direction.RIGHT: (10.0, 0.0),
}


def scaled_key_velocity(pan_speed: float) -> dict[Direction, tuple[float, float]]:
    return {
        direction: (vx * pan_speed, vy * pan_speed)
        for direction, (vx, vy) in DEFAULT_KEY_VELOCITY.items()
    }


@dataclass(frozen=True)
class ViewportState:
    """Viewport parameters plus the movement keys currently held.

    ``magnification`` never drops below :data:`MIN_MAGNIFICATION`;
    ``pan_offset`` is an unconstrained translation in pre-scaled pixels.
    ``dirty`` is set by every transition that requires a new frame.
    """

    pan_offset: tuple[float, float] = (0.0, 0.0)
    magnification: float = MIN_MAGNIFICATION
    key_velocity: Mapping[Direction, tuple[float, float]] = field(
        default_factory=lambda: DEFAULT_KEY_VELOCITY,
        hash=False,
    )
    held: frozenset[Direction] = frozenset()
    dirty: bool = True

    def __post_init__(self) -> None:
        if not self.magnification >= MIN_MAGNIFICATION:
            raise ValueError(
                f"magnification must be at least {MIN_MAGNIFICATION}, got {self.magnification}."
            )
        # Shared by every state derived with replace(), so kept read-only.
        if not isinstance(self.key_velocity, MappingProxyType):
            object.__setattr__(self, "key_velocity", MappingProxyType(dict(self.key_velocity)))

    @property
    def key_is_down(self) -> dict[Direction, bool]:
        return {direction: direction in self.held for direction in self.key_velocity}


def initialize(key_velocity: Mapping[Direction, tuple[float, float]] | None = None) -> ViewportState:
    """Start-up state: no pan, unit magnification, every key up, first frame pending."""

    if key_velocity is None:
        return ViewportState()
    return ViewportState(key_velocity=key_velocity)


def _direction(value: Direction | str) -> Direction:
    if isinstance(value, Direction):
        return value
    try:
        return Direction(str(value).lower())
    except ValueError as exc:
        raise ValueError(f"Unknown direction '{value}'. Valid choices: {', '.join(d.value for d in Direction)}.") from exc


def handle_tick(state: ViewportState, elapsed_time: float) -> ViewportState:
    """Advance the pan offset by the velocity of every held key."""

    if not state.held:
        return state

    dx = np.float64(0.0)
    dy = np.float64(0.0)
    for direction in Direction:
        if direction not in state.held:
            continue
        vx, vy = state.key_velocity.get(direction, (0.0, 0.0))
        dx += np.float64(vx) * np.float64(elapsed_time)
        dy += np.float64(vy) * np.float64(elapsed_time)

    pan_offset = (float(state.pan_offset[0] + dx), float(state.pan_offset[1] + dy))
    return replace(state, pan_offset=pan_offset, dirty=True)


def key_down(state: ViewportState, direction: Direction | str) -> ViewportState:
    direction = _direction(direction)
    if direction in state.held:
        return state
    return replace(state, held=state.held | {direction}, dirty=True)


def key_up(state: ViewportState, direction: Direction | str) -> ViewportState:
    direction = _direction(direction)
    if direction not in state.held:
        return state
    return replace(state, held=state.held - {direction}, dirty=True)


def _pivot_zoom(
    state: ViewportState,
    new_magnification: float,
    cursor: tuple[float, float],
    screen: tuple[float, float],
    anchor: str,
) -> ViewportState:
    if anchor not in ANCHORS:
        raise ValueError(f"Unknown zoom anchor '{anchor}'. Valid choices: {', '.join(ANCHORS)}.")

    old_magnification = np.float64(state.magnification)
    new_magnification = np.float64(new_magnification)
    pan_offset = []
    for axis in (0, 1):
        pivot = (np.float64(state.pan_offset[axis]) + np.float64(cursor[axis])) / old_magnification * new_magnification
        if anchor == "cursor":
            # Keeps the plane point under the cursor at the same pixel.
            target = np.float64(cursor[axis])
        else:
            # Moves the plane point under the cursor to the middle of the screen.
            target = np.float64(screen[axis]) / 2.0
        pan_offset.append(float(pivot - target))

    return replace(
        state,
        pan_offset=(pan_offset[0], pan_offset[1]),
        magnification=float(new_magnification),
        dirty=True,
    )


def zoom_in(
    state: ViewportState,
    cursor: tuple[float, float],
    screen: tuple[float, float],
    *,
    anchor: str = "cursor",
) -> ViewportState:
    """Double the magnification around the pixel under ``cursor``."""

    return _pivot_zoom(state, ZOOM_STEP * state.magnification, cursor, screen, anchor)


def zoom_out(
    state: ViewportState,
    cursor: tuple[float, float],
    screen: tuple[float, float],
    *,
    anchor: str = "cursor",
) -> ViewportState:
    """Halve the magnification, never below 1.0.

    The pivot correction is applied even when the floor clamps the
    magnification, so at 1.0 a zoom out still re-pivots around the cursor.
    """

    new_magnification = max(MIN_MAGNIFICATION, state.magnification / ZOOM_STEP)
    return _pivot_zoom(state, new_magnification, cursor, screen, anchor)


def reset(state: ViewportState) -> ViewportState:
    """Back to the start-up view; held keys stay held."""

    return replace(state, pan_offset=(0.0, 0.0), magnification=MIN_MAGNIFICATION, dirty=True)


def mark_clean(state: ViewportState) -> ViewportState:
    if not state.dirty:
        return state
    return replace(state, dirty=False)


def snapshot(state: ViewportState, escape: EscapeParameters | None = None) -> FrameTask:
    """Freeze the current view into a task that workers can share."""

    return FrameTask(
        pan_offset=(float(state.pan_offset[0]), float(state.pan_offset[1])),
        magnification=float(state.magnification),
        escape=escape if escape is not None else EscapeParameters(),
    )
