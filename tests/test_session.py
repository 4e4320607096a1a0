import numpy as np
import pytest

import mandelview.scheduler as scheduler
from mandelview.config import ViewerConfig
from mandelview.session import ViewerSession
from mandelview.viewport import Direction


@pytest.fixture
def session():
    config = ViewerConfig(width=8, height=6, max_iterations=20, worker_count=3)
    with ViewerSession(config) as session:
        yield session


def test_black_until_first_frame(session):
    image = session.frame_array()
    assert image.shape == (6, 8, 3)
    assert not image.any()


def test_first_update_renders_then_waits_for_changes(session):
    assert session.update(0.01)
    assert session.frames_rendered == 1
    assert not session.state.dirty
    assert not session.update(0.01)
    assert session.frames_rendered == 1


def test_zoom_marks_frame_dirty(session):
    session.update(0.0)
    session.zoom_in((4, 3))
    assert session.state.dirty
    assert session.render_if_dirty()
    assert session.state.magnification == 2.0


def test_held_key_rerenders_every_tick(session):
    session.update(0.0)
    session.key_down(Direction.RIGHT)
    assert session.update(0.1)
    assert session.update(0.1)
    assert session.state.pan_offset == pytest.approx((2.0, 0.0))
    session.key_up(Direction.RIGHT)
    assert session.update(0.1)
    assert not session.update(0.1)


def test_reset_reproduces_initial_frame(session):
    session.render_if_dirty()
    initial = session.frame

    session.zoom_in((1, 5))
    session.key_down("down")
    session.update(0.25)
    session.zoom_out((7, 0))
    session.render_if_dirty()
    assert session.frame.entries != initial.entries

    session.key_up("down")
    session.reset()
    session.render_if_dirty()
    assert session.frame.entries == initial.entries


def test_failed_frame_keeps_previous_one(session, monkeypatch):
    session.render_if_dirty()
    previous = session.frame

    def broken_escape_time(c, params):
        raise RuntimeError("worker fault")

    monkeypatch.setattr(scheduler, "escape_time", broken_escape_time)
    session.zoom_in((4, 3))
    assert not session.render_if_dirty()
    assert session.frame is previous
    assert session.skipped_frames == 1
    assert session.last_error is not None
    assert session.state.dirty

    monkeypatch.undo()
    assert session.render_if_dirty()
    assert session.frame is not previous
    assert session.last_error is None


def test_frame_array_matches_frame(session):
    session.render_if_dirty()
    assert np.array_equal(session.frame_array(), session.frame.to_array())


def test_pan_speed_scales_velocity():
    with ViewerSession(ViewerConfig(width=4, height=4, worker_count=2, pan_speed=2.5)) as session:
        session.key_down(Direction.LEFT)
        session.tick(1.0)
        assert session.state.pan_offset == (-25.0, 0.0)
