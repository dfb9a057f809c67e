"""Numbered capture directories and raw 16-bit sample files."""

from __future__ import annotations

import os
import re
from fnmatch import fnmatchcase
from pathlib import Path
from types import TracebackType
from typing import BinaryIO, Optional, Sequence, Type, Union

import numpy as np

MAX_CAPTURE_DIRS = 500
SYNC_EVERY = 10
_DIR_PATTERN = "bat???"
_NUMBER = re.compile(r"bat(\d+)")

PathLike = Union[str, "os.PathLike[str]"]


class CaptureError(Exception):
    """Raised when a capture directory or file cannot be created or written."""


def next_capture_dir(root: PathLike) -> int:
    """Create the next free ``batNNN`` directory under ``root``; return its number."""
    root_path = Path(root)
    try:
        names = [entry.name for entry in os.scandir(root_path)]
    except OSError as err:
        raise CaptureError(f"cannot list {root_path}: {err}") from err
    last = 0
    for name in names:
        if not fnmatchcase(name.lower(), _DIR_PATTERN):
            continue
        match = _NUMBER.match(name)
        if match:
            last = max(last, int(match.group(1)))
    last += 1
    if last > MAX_CAPTURE_DIRS:
        raise CaptureError("too many subdirs")
    try:
        (root_path / f"bat{last:03d}").mkdir()
    except OSError as err:
        raise CaptureError(f"cannot create subdir: {err}") from err
    return last


def capture_path(dir_count: int, file_count: int) -> str:
    """Relative path of a capture file."""
    return f"bat{dir_count:03d}/capture{file_count:05d}.raw"


def read_capture(path: PathLike) -> np.ndarray:
    """Read a raw capture file as little-endian unsigned 16-bit samples."""
    data = Path(path).read_bytes()
    if len(data) % 2:
        raise CaptureError(f"{path} has an odd number of bytes")
    return np.frombuffer(data, dtype="<u2").astype(np.uint16)


def _to_bytes(samples: Union[np.ndarray, Sequence[int]]) -> bytes:
    arr = np.asarray(samples)
    if arr.size == 0:
        return b""
    if arr.dtype.kind not in "ui":
        raise ValueError("samples must be integers")
    if arr.min() < 0 or arr.max() > 0xFFFF:
        raise ValueError("samples must fit into 16 bits")
    return arr.astype("<u2").tobytes()


class CaptureWriter:
    """Appends sample buffers to one capture file, opened on first write."""

    def __init__(self, root: PathLike, dir_count: int, file_count: int = 0) -> None:
        self.path = Path(root) / capture_path(dir_count, file_count)
        self._file: Optional[BinaryIO] = None
        self._writes = 0

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def write(self, samples: Union[np.ndarray, Sequence[int]]) -> int:
        """Write samples as 16-bit little-endian words; return bytes written."""
        payload = _to_bytes(samples)
        if self._file is None:
            try:
                self._file = open(self.path, "wb")
            except OSError as err:
                raise CaptureError(f"cannot open {self.path}: {err}") from err
        try:
            written = self._file.write(payload)
        except OSError as err:
            raise CaptureError(f"could not write buffer len {len(payload)}: {err}") from err
        if written != len(payload):
            raise CaptureError(
                f"could not write buffer len {len(payload)}, written {written}"
            )
        self._writes = (self._writes + 1) % SYNC_EVERY
        if self._writes == 0:
            self._file.flush()
            os.fsync(self._file.fileno())
        return written

    def close(self) -> None:
        """Close the capture file if it is open."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "CaptureWriter":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()