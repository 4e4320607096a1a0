"""Interactive pygame window driving a :class:`ViewerSession`."""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
import pygame

from .session import ViewerSession
from .viewport import Direction

TITLE = "Mandelbrot Viewer"

KEY_DIRECTIONS = {
    pygame.K_w: Direction.UP,
    pygame.K_a: Direction.LEFT,
    pygame.K_s: Direction.DOWN,
    pygame.K_d: Direction.RIGHT,
}


def frame_surface(frame: np.ndarray) -> pygame.Surface:
    """Wrap a ``(height, width, 3)`` image in a surface (pygame is x-major)."""

    return pygame.surfarray.make_surface(frame.swapaxes(0, 1))


def handle_key_down(session: ViewerSession, key: int, cursor: tuple[int, int]) -> bool:
    """Apply a pressed key; returns False when the viewer should close."""

    if key in KEY_DIRECTIONS:
        session.key_down(KEY_DIRECTIONS[key])
    elif key == pygame.K_e:
        session.zoom_in(cursor)
    elif key == pygame.K_q:
        session.zoom_out(cursor)
    elif key == pygame.K_r:
        session.reset()
    elif key == pygame.K_ESCAPE:
        return False
    return True


def handle_key_up(session: ViewerSession, key: int) -> None:
    if key in KEY_DIRECTIONS:
        session.key_up(KEY_DIRECTIONS[key])


def run(session: ViewerSession, log: Optional[Callable[..., None]] = None) -> None:
    """Open the window and run the event loop until it is closed."""

    pygame.init()
    try:
        screen = pygame.display.set_mode(session.config.screen)
        pygame.display.set_caption(TITLE)
        clock = pygame.time.Clock()
        surface = frame_surface(session.frame_array())
        running = True

        while running:
            elapsed = clock.tick(session.config.fps) / 1000.0

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    running = handle_key_down(session, event.key, pygame.mouse.get_pos()) and running
                elif event.type == pygame.KEYUP:
                    handle_key_up(session, event.key)

            skipped = session.skipped_frames
            if session.update(elapsed):
                surface = frame_surface(session.frame_array())
            elif session.skipped_frames != skipped and log is not None:
                log("Frame skipped: %s" % session.last_error)

            screen.fill((0, 0, 0))
            screen.blit(surface, (0, 0))
            pygame.display.flip()
    finally:
        pygame.quit()
