import os
import sys
import warnings
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NamedTuple

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import numpy as np

# Imports for output
import PIL.Image
import imageio

from mandelview import ViewerConfig, ViewerSession
from mandelview.scheduler import BACKENDS, EXECUTORS
from mandelview.viewport import ANCHORS, Direction


def _quiet_tensorflow():
    import tensorflow as tf

    log("TensorFlow version: %s" % tf.__version__)
    if _suppress_messages:
        try:
            tf.get_logger().setLevel("ERROR")
            for handler in tf.get_logger().handlers:
                handler.setLevel("ERROR")
        except Exception:
            pass


class Action(NamedTuple):
    kind: str
    cursor: tuple[float, float] | None = None
    direction: Direction | None = None
    seconds: float = 0.0


@dataclass
class OutputConfig:
    modes: tuple[str, ...]
    gif_path: Path | None
    image_path: Path | None
    frame_dir: Path | None
    image_format: str


def build_parser():
    parser = ArgumentParser()

    parser.add_argument('--width', type=int,
                        dest='width', help='width of the screen in pixels',
                        metavar='WIDTH', default=500)

    parser.add_argument('--height', type=int,
                        dest='height', help='height of the screen in pixels',
                        metavar='HEIGHT', default=500)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='iteration cap after which a point is considered bounded',
                        metavar='MAX_ITERATIONS', default=100)

    parser.add_argument('--stability-threshold', type=float,
                        dest='stability_threshold', help='orbit magnitude at which a point counts as escaped',
                        metavar='THRESHOLD', default=2.0)

    parser.add_argument('--workers', type=int,
                        dest='worker_count', help='number of column ranges computed in parallel',
                        metavar='WORKERS', default=10)

    parser.add_argument('--pan-speed', type=float,
                        dest='pan_speed', help='multiplier applied to the 10 px/s key velocity',
                        metavar='PAN_SPEED', default=1.0)

    parser.add_argument('--fps', type=int,
                        dest='fps', help='target frame rate of the window and tick rate of held keys',
                        metavar='FPS', default=144)

    parser.add_argument('--backend', choices=BACKENDS, default='python',
                        help='per-pixel Python evaluation or a vectorised TensorFlow kernel per column range')

    parser.add_argument('--executor', choices=EXECUTORS, default='thread',
                        help='worker pool used for the column ranges')

    parser.add_argument('--zoom-anchor', choices=ANCHORS, default='cursor', dest='zoom_anchor',
                        help='"cursor" keeps the point under the cursor in place; "center" moves it to the middle of the screen')

    parser.add_argument('--interactive', action='store_true',
                        help='open a window: W/A/S/D pan, E/Q zoom at the mouse, R reset, Esc quit')

    parser.add_argument('--action', dest='actions', action='append', metavar='ACTION',
                        help='Viewport command to replay. May be repeated. Forms: zoom-in:X,Y, zoom-out:X,Y, reset, hold:DIRECTION:SECONDS.')

    parser.add_argument('--mode', dest='modes', action='append', metavar='MODE',
                        help='Output modes to generate. May be repeated. Choices: gif, image, frames.')

    parser.add_argument('--output', dest='output', type=str,
                        help='Destination for single-file outputs (gif/image) or container directory when both are requested.')

    parser.add_argument('--frame-dir', dest='frame_dir', type=str,
                        help='Directory in which to store the frame sequence.')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for image-based outputs. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow diagnostics.')

    return parser


def build_config(opt, parser: ArgumentParser) -> ViewerConfig:
    try:
        return ViewerConfig(
            width=opt.width,
            height=opt.height,
            max_iterations=opt.max_iterations,
            stability_threshold=opt.stability_threshold,
            worker_count=opt.worker_count,
            pan_speed=opt.pan_speed,
            fps=opt.fps,
            backend=opt.backend,
            executor=opt.executor,
            zoom_anchor=opt.zoom_anchor,
        )
    except ValueError as exc:
        parser.error(str(exc))


def parse_action(text: str, parser: ArgumentParser) -> Action:
    kind, _, rest = text.strip().partition(':')
    kind = kind.lower()

    if kind == 'reset':
        if rest:
            parser.error(f"Action '{text}': reset takes no arguments.")
        return Action('reset')

    if kind in {'zoom-in', 'zoom-out'}:
        try:
            x_str, y_str = rest.split(',')
            cursor = (float(x_str), float(y_str))
        except ValueError:
            parser.error(f"Action '{text}': expected {kind}:X,Y.")
        return Action(kind, cursor=cursor)

    if kind == 'hold':
        direction_str, _, seconds_str = rest.partition(':')
        try:
            direction = Direction(direction_str.lower())
        except ValueError:
            parser.error(f"Action '{text}': unknown direction '{direction_str}'. Valid choices: {', '.join(d.value for d in Direction)}.")
        try:
            seconds = float(seconds_str)
        except ValueError:
            parser.error(f"Action '{text}': expected hold:DIRECTION:SECONDS.")
        if seconds < 0:
            parser.error(f"Action '{text}': the hold duration cannot be negative.")
        return Action('hold', direction=direction, seconds=seconds)

    parser.error(f"Unknown action '{text}'. Valid forms: zoom-in:X,Y, zoom-out:X,Y, reset, hold:DIRECTION:SECONDS.")


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    valid_modes = {"gif", "image", "frames"}
    modes = list(opt.modes or [])
    if not modes:
        modes = ["image"]

    normalized_modes: list[str] = []
    for mode in modes:
        if mode not in valid_modes:
            parser.error(f"Unknown output mode '{mode}'. Valid choices: {', '.join(sorted(valid_modes))}.")
        if mode not in normalized_modes:
            normalized_modes.append(mode)

    modes_tuple = tuple(normalized_modes)
    modes_set = set(modes_tuple)

    frame_dir_value = getattr(opt, "frame_dir", None)
    frame_dir_path: Path | None = None
    if "frames" in modes_set:
        frame_dir_path = Path(frame_dir_value or "./frames").expanduser().resolve()
    elif frame_dir_value is not None:
        parser.error("--frame-dir is only valid with the frames mode.")

    image_format = (getattr(opt, "format", "png") or "png").lower().lstrip(".")
    if not image_format:
        image_format = "png"

    file_modes = [mode for mode in modes_tuple if mode in {"gif", "image"}]
    output_arg = getattr(opt, "output", None)
    gif_path: Path | None = None
    image_path: Path | None = None

    if not file_modes:
        if output_arg:
            parser.error("--output is only valid when gif or image modes are requested.")
    elif len(file_modes) == 1:
        mode = file_modes[0]
        if output_arg:
            output_path = Path(output_arg).expanduser()
            if str(output_arg).endswith(tuple(filter(None, {os.sep, os.altsep}))):
                parser.error("--output must be a file path when a single file-based mode is selected.")
            if output_path.exists() and output_path.is_dir():
                parser.error("--output must point to a file, not a directory, when a single file mode is active.")
            if mode == "gif":
                if output_path.suffix:
                    if output_path.suffix.lower() != ".gif":
                        parser.error("GIF outputs must end with .gif.")
                else:
                    output_path = output_path.with_suffix(".gif")
                gif_path = output_path.resolve()
            else:
                suffix = output_path.suffix
                expected_suffix = f".{image_format}"
                if suffix:
                    if suffix.lower() != expected_suffix.lower():
                        parser.error(f"--output extension {suffix} does not match --format {image_format}.")
                else:
                    output_path = output_path.with_suffix(expected_suffix)
                image_path = output_path.resolve()
        elif mode == "gif":
            gif_path = Path("session.gif").resolve()
        else:
            image_path = Path(f"frame_final.{image_format}").resolve()
    else:
        base_dir = Path(output_arg).expanduser() if output_arg else Path.cwd()
        if base_dir.exists() and not base_dir.is_dir():
            parser.error("--output must be a directory when both gif and image modes are active.")
        gif_path = (base_dir / "session.gif").resolve()
        image_path = (base_dir / f"frame_final.{image_format}").resolve()

    return OutputConfig(
        modes=modes_tuple,
        gif_path=gif_path,
        image_path=image_path,
        frame_dir=frame_dir_path,
        image_format=image_format,
    )


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    pil_format = _pil_format_name(image_format)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)


def write_frame_sequence(
    image: PIL.Image.Image,
    frame_dir: Path,
    index: int,
    digits: int,
    image_format: str,
) -> Path:
    """Persist a frame in a numbered sequence inside ``frame_dir``."""

    pil_format = _pil_format_name(image_format)
    frame_path = frame_dir / f"frame{index:0{digits}d}.{image_format}"
    frame_dir.mkdir(parents=True, exist_ok=True)
    image.save(str(frame_path), format=pil_format)
    return frame_path


class OutputWriters:
    def __init__(self, config: OutputConfig, frame_digits: int) -> None:
        self.config = config
        self.frame_digits = frame_digits
        self._gif_writer: Any = None
        if "gif" in config.modes and config.gif_path is not None:
            config.gif_path.parent.mkdir(parents=True, exist_ok=True)
            self._gif_writer = imageio.get_writer(str(config.gif_path), mode='I', duration=0.5, loop=0)

    def write(self, index: int, frame_array: np.ndarray) -> None:
        if self._gif_writer is not None:
            self._gif_writer.append_data(frame_array)
        if "frames" in self.config.modes and self.config.frame_dir is not None:
            write_frame_sequence(
                PIL.Image.fromarray(frame_array),
                self.config.frame_dir,
                index,
                self.frame_digits,
                self.config.image_format,
            )

    def finalize(self, frame_array: np.ndarray | None) -> None:
        if "image" in self.config.modes and self.config.image_path is not None and frame_array is not None:
            write_single_image(PIL.Image.fromarray(frame_array), self.config.image_path, self.config.image_format)

    def close(self) -> None:
        if self._gif_writer is not None:
            self._gif_writer.close()
            self._gif_writer = None


def apply_action(session: ViewerSession, action: Action) -> None:
    """Feed one scripted command into the session the way the window would."""

    if action.kind == 'reset':
        session.reset()
    elif action.kind == 'zoom-in':
        session.zoom_in(action.cursor)
    elif action.kind == 'zoom-out':
        session.zoom_out(action.cursor)
    elif action.kind == 'hold':
        session.key_down(action.direction)
        step = 1.0 / session.config.fps
        steps = int(round(action.seconds * session.config.fps))
        for _ in range(steps):
            session.tick(step)
        session.key_up(action.direction)


def replay(session: ViewerSession, actions: list[Action], writers: OutputWriters) -> np.ndarray:
    """Render the start-up frame and one frame after each action."""

    total = len(actions) + 1
    frame_array = None
    for i in range(total):
        if i > 0:
            apply_action(session, actions[i - 1])
        print("frame {0} out of {1}".format(i, total), end='\r')
        if not session.render_if_dirty() and session.last_error is not None:
            log("\nFrame {0} skipped, keeping the previous one: {1}".format(i, session.last_error))
        frame_array = session.frame_array()
        writers.write(i, frame_array)
        log("\npan_offset={0} magnification={1}".format(session.state.pan_offset, session.state.magnification))
    print()
    return frame_array


def main():
    parser = build_parser()
    opt = parser.parse_args()

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    config = build_config(opt, parser)
    if config.backend == 'tensorflow':
        _quiet_tensorflow()

    if opt.interactive:
        if opt.actions:
            parser.error("--action cannot be combined with --interactive.")
        from mandelview.window import run

        with ViewerSession(config) as session:
            run(session, log=log)
        return

    actions = [parse_action(text, parser) for text in (opt.actions or [])]
    output_config = resolve_output_config(opt, parser)
    if output_config.frame_dir is not None:
        output_config.frame_dir.mkdir(parents=True, exist_ok=True)

    frame_digits = max(3, len(str(len(actions))))
    writers = OutputWriters(output_config, frame_digits=frame_digits)

    final_frame = None
    try:
        with ViewerSession(config) as session:
            final_frame = replay(session, actions, writers)
            if session.skipped_frames:
                log("{0} frame(s) skipped".format(session.skipped_frames))
    finally:
        writers.close()

    writers.finalize(final_frame)


if __name__ == '__main__':
    main()
