import numpy as np
import pytest

import mandelview.scheduler as scheduler
from mandelview.escape import EscapeParameters
from mandelview.palette import color_for
from mandelview.scheduler import (
    FrameError,
    FrameScheduler,
    FrameTask,
    compute_columns,
    partition_columns,
    render_frame,
)

SCENARIO = FrameTask(pan_offset=(0.0, 0.0), magnification=1.0, escape=EscapeParameters(10, 2.0))


def _task(pan_offset=(0.0, 0.0), magnification=1.0, max_iterations=30):
    return FrameTask(pan_offset=pan_offset, magnification=magnification, escape=EscapeParameters(max_iterations, 2.0))


def test_partition_even_split():
    ranges = partition_columns(500, 10)
    assert len(ranges) == 10
    assert all(stop - start == 50 for start, stop in ranges)


def test_partition_last_chunk_takes_remainder():
    assert partition_columns(10, 3) == [(0, 3), (3, 6), (6, 10)]
    assert partition_columns(7, 1) == [(0, 7)]


def test_partition_caps_workers_at_width():
    assert partition_columns(3, 8) == [(0, 1), (1, 2), (2, 3)]


def test_partition_is_contiguous():
    for width in (1, 5, 64, 101):
        for workers in (1, 2, 3, 7, 16):
            ranges = partition_columns(width, workers)
            assert ranges[0][0] == 0
            assert ranges[-1][1] == width
            for (_, stop), (start, _) in zip(ranges, ranges[1:]):
                assert stop == start


@pytest.mark.parametrize("width, workers", [(0, 2), (4, 0), (-1, 1)])
def test_partition_rejects_invalid_sizes(width, workers):
    with pytest.raises(ValueError):
        partition_columns(width, workers)


def test_render_frame_covers_every_pixel_once_in_column_order():
    frame = render_frame(SCENARIO, 4, 4, 3)
    assert len(frame) == 16
    coordinates = [(entry.x, entry.y) for entry in frame.entries]
    assert coordinates == [(x, y) for x in range(4) for y in range(4)]


def test_scenario_corner_escapes_and_center_is_bounded():
    frame = render_frame(SCENARIO, 4, 4, 2)
    by_pixel = {(entry.x, entry.y): entry.color for entry in frame.entries}
    assert by_pixel[(0, 0)] == color_for(0.1)
    assert by_pixel[(2, 2)] == (0.0, 0.0, 0.0)


@pytest.mark.parametrize("workers", [2, 4, 13, 40])
def test_worker_count_does_not_change_the_frame(workers):
    task = _task(pan_offset=(-3.0, 1.5), magnification=1.0)
    single = render_frame(task, 13, 9, 1)
    many = render_frame(task, 13, 9, workers)
    assert many.entries == single.entries


def test_process_pool_matches_thread_pool():
    task = _task(pan_offset=(4.0, -2.0), magnification=2.0, max_iterations=20)
    threaded = render_frame(task, 8, 6, 3, executor="thread")
    processes = render_frame(task, 8, 6, 3, executor="process")
    assert processes.entries == threaded.entries


def test_compute_columns_only_covers_its_range():
    entries = compute_columns(SCENARIO, 1, 3, 4, 4)
    assert [(entry.x, entry.y) for entry in entries] == [(x, y) for x in (1, 2) for y in range(4)]


def test_scheduler_is_reusable_across_frames():
    with FrameScheduler(3) as pool:
        first = pool.render(SCENARIO, 6, 5)
        second = pool.render(SCENARIO, 6, 5)
    assert first.entries == second.entries


def test_worker_failure_aborts_the_frame(monkeypatch):
    original = scheduler.escape_time

    def failing_escape_time(c, params):
        if c.real > 0.5:
            raise ZeroDivisionError("boom")
        return original(c, params)

    monkeypatch.setattr(scheduler, "escape_time", failing_escape_time)
    with FrameScheduler(4) as pool:
        with pytest.raises(FrameError) as info:
            pool.render(_task(), 8, 4)
        assert isinstance(info.value.__cause__, ZeroDivisionError)

        monkeypatch.setattr(scheduler, "escape_time", original)
        frame = pool.render(_task(), 8, 4)
    assert len(frame) == 32


@pytest.mark.parametrize("kwargs", [{"backend": "cuda"}, {"executor": "fiber"}])
def test_unknown_backend_or_executor(kwargs):
    with pytest.raises(ValueError):
        FrameScheduler(2, **kwargs)


def test_invalid_height_raises():
    with pytest.raises(ValueError):
        render_frame(SCENARIO, 4, 0, 2)


def test_to_array_layout():
    frame = render_frame(SCENARIO, 4, 3, 2)
    image = frame.to_array()
    assert image.shape == (3, 4, 3)
    assert image.dtype == np.uint8
    expected = np.uint8(np.clip(np.array(color_for(0.1)) * 255, 0, 255))
    assert image[0, 0].tolist() == expected.tolist()
    by_pixel = {(entry.x, entry.y): entry.color for entry in frame.entries}
    assert image[2, 3].tolist() == np.uint8(np.clip(np.array(by_pixel[(3, 2)]) * 255, 0, 255)).tolist()


def test_tensorflow_backend_scenario():
    pytest.importorskip("tensorflow")
    frame = render_frame(SCENARIO, 4, 4, 2, backend="tensorflow")
    assert [(entry.x, entry.y) for entry in frame.entries] == [(x, y) for x in range(4) for y in range(4)]
    by_pixel = {(entry.x, entry.y): entry.color for entry in frame.entries}
    assert by_pixel[(0, 0)] == pytest.approx(color_for(0.1))
    assert by_pixel[(2, 2)] == (0.0, 0.0, 0.0)


def test_process_pool_runs_tensorflow_after_in_process_use():
    pytest.importorskip("tensorflow")
    threaded = render_frame(SCENARIO, 8, 8, 2, backend="tensorflow")
    processes = render_frame(SCENARIO, 8, 8, 2, backend="tensorflow", executor="process")
    assert len(processes) == 64
    assert processes.entries == threaded.entries


def test_process_pool_uses_spawned_workers():
    with FrameScheduler(2, executor="process") as pool:
        executor = pool._get_executor()
        assert executor._mp_context.get_start_method() == "spawn"
