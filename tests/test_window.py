import pytest

pygame = pytest.importorskip("pygame")

from mandelview.config import ViewerConfig
from mandelview.session import ViewerSession
from mandelview.viewport import Direction
from mandelview.window import handle_key_down, handle_key_up


@pytest.fixture
def session():
    with ViewerSession(ViewerConfig(width=8, height=8, worker_count=2)) as session:
        yield session


def test_movement_keys(session):
    assert handle_key_down(session, pygame.K_d, (0, 0))
    assert session.state.key_is_down[Direction.RIGHT]
    handle_key_up(session, pygame.K_d)
    assert not session.state.key_is_down[Direction.RIGHT]


def test_zoom_keys_use_cursor(session):
    handle_key_down(session, pygame.K_e, (2, 6))
    assert session.state.magnification == 2.0
    handle_key_down(session, pygame.K_q, (2, 6))
    assert session.state.magnification == 1.0
    assert session.state.pan_offset == pytest.approx((0.0, 0.0))


def test_reset_and_escape(session):
    handle_key_down(session, pygame.K_e, (1, 1))
    assert handle_key_down(session, pygame.K_r, (0, 0))
    assert session.state.magnification == 1.0
    assert not handle_key_down(session, pygame.K_ESCAPE, (0, 0))


def test_unbound_keys_are_ignored(session):
    before = session.state
    assert handle_key_down(session, pygame.K_z, (0, 0))
    handle_key_up(session, pygame.K_z)
    assert session.state is before
