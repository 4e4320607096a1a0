from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--mode", "image", "--width", "96", "--height", "96", "--workers", "4"]


@dataclass
class Expected:
    path: Path
    is_dir: bool = False


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Expected]
    clean: list[Path] | None = None

    def full_args(self) -> list[str]:
        return ["python", "viewer.py", *self.args]


EXAMPLES: list[Example] = [
    Example(
        name="max-iterations",
        args=[*BASE_ARGS, "--max-iterations", "250", "--output", str(EXAMPLES_ROOT / "max-iterations" / "high-iterations.png")],
        expected=[Expected(EXAMPLES_ROOT / "max-iterations" / "high-iterations.png")],
        clean=[EXAMPLES_ROOT / "max-iterations"],
    ),
    Example(
        name="stability-threshold",
        args=[*BASE_ARGS, "--stability-threshold", "4", "--output", str(EXAMPLES_ROOT / "stability-threshold" / "wide-radius.png")],
        expected=[Expected(EXAMPLES_ROOT / "stability-threshold" / "wide-radius.png")],
        clean=[EXAMPLES_ROOT / "stability-threshold"],
    ),
    Example(
        name="size",
        args=[*BASE_ARGS, "--width", "160", "--height", "80", "--output", str(EXAMPLES_ROOT / "size" / "wide-screen.png")],
        expected=[Expected(EXAMPLES_ROOT / "size" / "wide-screen.png")],
        clean=[EXAMPLES_ROOT / "size"],
    ),
    Example(
        name="workers",
        args=[*BASE_ARGS, "--workers", "7", "--output", str(EXAMPLES_ROOT / "workers" / "seven-workers.png")],
        expected=[Expected(EXAMPLES_ROOT / "workers" / "seven-workers.png")],
        clean=[EXAMPLES_ROOT / "workers"],
    ),
    Example(
        name="executor",
        args=[*BASE_ARGS, "--executor", "process", "--output", str(EXAMPLES_ROOT / "executor" / "process-pool.png")],
        expected=[Expected(EXAMPLES_ROOT / "executor" / "process-pool.png")],
        clean=[EXAMPLES_ROOT / "executor"],
    ),
    Example(
        name="backend",
        args=[*BASE_ARGS, "--backend", "tensorflow", "--output", str(EXAMPLES_ROOT / "backend" / "tensorflow.png")],
        expected=[Expected(EXAMPLES_ROOT / "backend" / "tensorflow.png")],
        clean=[EXAMPLES_ROOT / "backend"],
    ),
    Example(
        name="zoom-in",
        args=[
            *BASE_ARGS,
            "--action",
            "zoom-in:30,48",
            "--action",
            "zoom-in:40,48",
            "--output",
            str(EXAMPLES_ROOT / "zoom-in" / "double-zoom.png"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "zoom-in" / "double-zoom.png")],
        clean=[EXAMPLES_ROOT / "zoom-in"],
    ),
    Example(
        name="zoom-anchor",
        args=[
            *BASE_ARGS,
            "--zoom-anchor",
            "center",
            "--action",
            "zoom-in:30,48",
            "--output",
            str(EXAMPLES_ROOT / "zoom-anchor" / "recentred.png"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "zoom-anchor" / "recentred.png")],
        clean=[EXAMPLES_ROOT / "zoom-anchor"],
    ),
    Example(
        name="hold",
        args=[
            *BASE_ARGS,
            "--fps",
            "30",
            "--pan-speed",
            "3",
            "--action",
            "hold:right:1.5",
            "--action",
            "hold:up:0.5",
            "--output",
            str(EXAMPLES_ROOT / "hold" / "panned.png"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "hold" / "panned.png")],
        clean=[EXAMPLES_ROOT / "hold"],
    ),
    Example(
        name="gif",
        args=[
            "--mode",
            "gif",
            "--width",
            "96",
            "--height",
            "96",
            "--action",
            "zoom-in:40,40",
            "--action",
            "zoom-out:40,40",
            "--action",
            "reset",
            "--output",
            str(EXAMPLES_ROOT / "gif" / "session.gif"),
        ],
        expected=[Expected(EXAMPLES_ROOT / "gif" / "session.gif")],
        clean=[EXAMPLES_ROOT / "gif"],
    ),
    Example(
        name="mode",
        args=[
            "--mode",
            "image",
            "--mode",
            "frames",
            "--frame-dir",
            str(EXAMPLES_ROOT / "mode" / "frames"),
            "--width",
            "96",
            "--height",
            "96",
            "--action",
            "zoom-in:48,48",
            "--output",
            str(EXAMPLES_ROOT / "mode" / "single-frame.png"),
        ],
        expected=[
            Expected(EXAMPLES_ROOT / "mode" / "single-frame.png"),
            Expected(EXAMPLES_ROOT / "mode" / "frames", is_dir=True),
        ],
        clean=[EXAMPLES_ROOT / "mode"],
    ),
    Example(
        name="output",
        args=[
            "--mode",
            "gif",
            "--mode",
            "image",
            "--width",
            "96",
            "--height",
            "96",
            "--output",
            str(EXAMPLES_ROOT / "output"),
        ],
        expected=[
            Expected(EXAMPLES_ROOT / "output" / "session.gif"),
            Expected(EXAMPLES_ROOT / "output" / "frame_final.png"),
        ],
        clean=[EXAMPLES_ROOT / "output"],
    ),
    Example(
        name="format",
        args=[*BASE_ARGS, "--format", "jpg", "--output", str(EXAMPLES_ROOT / "format" / "compressed.jpg")],
        expected=[Expected(EXAMPLES_ROOT / "format" / "compressed.jpg")],
        clean=[EXAMPLES_ROOT / "format"],
    ),
]


def _remove(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()


def _missing(expected: Expected) -> str | None:
    if not expected.is_dir:
        return None if expected.path.is_file() else f"file {expected.path} was not created"
    if not expected.path.is_dir() or not any(expected.path.iterdir()):
        return f"directory {expected.path} is missing or empty"
    return None


def run_example(example: Example) -> None:
    """Render one example from a clean slate and check its outputs."""

    _remove(example.clean or [])
    for expected in example.expected:
        expected.path.parent.mkdir(parents=True, exist_ok=True)

    subprocess.run(example.full_args(), check=True)

    problems = [problem for problem in map(_missing, example.expected) if problem]
    if problems:
        raise RuntimeError(f"Example {example.name}: " + "; ".join(problems))


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        run_example(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
