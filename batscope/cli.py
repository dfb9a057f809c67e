"""Command line front end: render capture spectrograms and record captures."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from .capture import CaptureError, CaptureWriter, next_capture_dir, read_capture
from .pixmap import CHAR_HEIGHT, Color, Pixmap
from .spectrogram import SpectrogramConfig, draw_labels, render_spectrogram

DIR_COUNT_X = 150
FILE_COUNT_X = 200
ELAPSED_X = 50


def _blit(dest: Pixmap, src: Pixmap, x: int, y: int) -> None:
    """Copy ``src`` into ``dest`` with its top-left corner at (x, y), clipped."""
    x0 = max(x, 0)
    x1 = min(x + src.width, dest.width)
    if x1 <= x0:
        return
    span = x1 - x0
    for row in range(src.height):
        dy = y + row
        if not 0 <= dy < dest.height:
            continue
        s = row * src.width + (x0 - x)
        d = dy * dest.width + x0
        dest.buf[d:d + span] = src.buf[s:s + span]


def _draw_int(screen: Pixmap, value: int, xoffset: int) -> None:
    """Draw a right-aligned four digit number on the status line."""
    if value < 0:
        raise ValueError("status values must not be negative")
    text = f"{value:4d}"[:4] + "\0"
    label = Pixmap.from_text(text, Color.WHITE, Color.BLACK, 1, 1)
    _blit(screen, label, xoffset, screen.height - CHAR_HEIGHT)


def _render_screen(
    samples: np.ndarray, config: SpectrogramConfig, dir_count: int, file_count: int
) -> Pixmap:
    screen = Pixmap(config.width, config.height)
    draw_labels(screen, config.display_height, config)
    started = time.perf_counter()
    spectrum = render_spectrogram(samples, config)
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    _draw_int(screen, dir_count, DIR_COUNT_X)
    _draw_int(screen, file_count, FILE_COUNT_X)
    _draw_int(screen, elapsed_ms, ELAPSED_X)
    _blit(screen, spectrum, config.label_size, 0)
    return screen


def _config(args: argparse.Namespace) -> SpectrogramConfig:
    return SpectrogramConfig(
        sample_rate=args.sample_rate, stereo=not args.mono, factor=args.factor
    )


def _cmd_render(args: argparse.Namespace) -> int:
    config = _config(args)
    data = read_capture(args.input)
    samples = data[: config.num_samples]
    screen = _render_screen(samples, config, args.dir, args.file)
    output = Path(args.output) if args.output else Path(args.input).with_suffix(".ppm")
    output.write_bytes(screen.to_ppm())
    print(output)
    return 0


def _cmd_record(args: argparse.Namespace) -> int:
    config = _config(args)
    data = read_capture(args.input)
    chunk = config.num_samples
    full = len(data) // chunk
    if full == 0:
        raise CaptureError(f"input holds fewer than {chunk} samples")
    dir_count = next_capture_dir(args.root)
    with CaptureWriter(args.root, dir_count, args.file_count) as writer:
        for start in range(0, full * chunk, chunk):
            writer.write(data[start:start + chunk])
        path = writer.path
    print(f"{path} {full}")
    return 0


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batscope", description="Ultrasound capture spectrograms."
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--mono", action="store_true", help="input is one channel")
    common.add_argument("--sample-rate", type=int, default=250_000)
    common.add_argument("--factor", type=int, default=300,
                        help="FFT frames worth of samples per capture")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", parents=[common],
                            help="render a capture file as a PPM screen")
    render.add_argument("input")
    render.add_argument("-o", "--output")
    render.add_argument("--dir", type=int, default=0, help="directory number shown")
    render.add_argument("--file", type=int, default=0, help="file number shown")
    render.set_defaults(func=_cmd_render)

    record = sub.add_parser("record", parents=[common],
                            help="store a raw sample stream as a new capture")
    record.add_argument("input")
    record.add_argument("--root", default=".")
    record.add_argument("--file-count", type=int, default=0)
    record.set_defaults(func=_cmd_record)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; return the process exit status."""
    args = _parser().parse_args(list(argv) if argv is not None else None)
    try:
        return args.func(args)
    except (CaptureError, ValueError, OSError) as err:
        print(f"batscope: {err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())