"""Checks for a block device: a destructive read/write test and a throughput test."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .diskio import DiskError, DiskStatus, IoctlCommand

MAX_SECTOR_SIZE = 512
MIN_DRIVE_SECTORS = 128
_LFSR_TAPS = 0x80200003
_BARRIER = 0x80000000

Logger = Optional[Callable[[str], Any]]


class DiskCheckError(Exception):
    """A disk check failed; ``code`` tells which step went wrong."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        super().__init__(f"{message} (rc={code})")


@dataclass(frozen=True)
class SpeedReport:
    """Outcome of a raw throughput test."""

    lba: int
    nbytes: int
    chunk_size: int
    write_seconds: float
    read_seconds: float

    @property
    def write_rate(self) -> float:
        """Bytes written per second."""
        return self.nbytes / self.write_seconds if self.write_seconds > 0 else float("inf")

    @property
    def read_rate(self) -> float:
        """Bytes read per second."""
        return self.nbytes / self.read_seconds if self.read_seconds > 0 else float("inf")


def _lfsr_step(state: int) -> int:
    if state & 1:
        return (state >> 1) ^ _LFSR_TAPS
    return state >> 1


def lfsr_bytes(seed: int, count: int) -> bytes:
    """Pseudo random test pattern of ``count`` bytes for a non-zero 32-bit seed."""
    if not 0 < seed <= 0xFFFFFFFF:
        raise ValueError("seed must be a non-zero 32-bit value")
    if count < 0:
        raise ValueError("count must not be negative")
    state = seed
    for _ in range(33):
        state = _lfsr_step(state)
    out = bytearray(count)
    for n in range(count):
        state = _lfsr_step(state)
        out[n] = state & 0xFF
    return bytes(out)


def _call(emit: Callable[[str], Any], text: str, code: int, action: Callable[[], Any]) -> Any:
    try:
        result = action()
    except DiskError as err:
        emit(f"{text} - failed.")
        raise DiskCheckError(code, f"{text} failed: {err}") from err
    emit(f"{text} - ok.")
    return result


def _verify(emit: Callable[[str], Any], code: int, got: bytes, expected: bytes) -> None:
    if got == expected:
        emit(" Read data matched.")
    else:
        emit(" Read data differs from the data written.")
        raise DiskCheckError(code, "read data differs from the data written")


def check_diskio(disk, cycles: int = 3, buffer_size: int = 4 * MAX_SECTOR_SIZE,
                 log: Logger = None) -> None:
    """Run the destructive read/write check on ``disk``; raise DiskCheckError on failure.

    All data on the drive is lost.
    """
    emit = log if log is not None else (lambda _s: None)
    emit(f"check_diskio({cycles}, {buffer_size})")
    if buffer_size < MAX_SECTOR_SIZE + 8:
        emit("Insufficient work area to run the program.")
        raise DiskCheckError(1, "insufficient work area")

    pns = 1
    for cc in range(1, cycles + 1):
        emit(f"**** Test cycle {cc} of {cycles} start ****")

        try:
            status = disk.initialize()
        except DiskError as err:
            emit(" disk_initialize - failed.")
            raise DiskCheckError(2, f"disk_initialize failed: {err}") from err
        if status & DiskStatus.NOINIT:
            emit(" disk_initialize - failed.")
            raise DiskCheckError(2, "disk_initialize failed")
        emit(" disk_initialize - ok.")

        emit("**** Get drive size ****")
        sz_drv = _call(emit, " disk_ioctl(GET_SECTOR_COUNT)", 3,
                       lambda: disk.ioctl(IoctlCommand.GET_SECTOR_COUNT))
        if sz_drv < MIN_DRIVE_SECTORS:
            emit("Failed: Insufficient drive size to test.")
            raise DiskCheckError(4, "insufficient drive size")
        emit(f" Number of sectors on the drive is {sz_drv}.")

        emit("**** Get sector size ****")
        sz_sect = _call(emit, " disk_ioctl(GET_SECTOR_SIZE)", 5,
                        lambda: disk.ioctl(IoctlCommand.GET_SECTOR_SIZE))
        emit(f" Size of sector is {sz_sect} bytes.")

        emit("**** Get block size ****")
        try:
            sz_eblk = disk.ioctl(IoctlCommand.GET_BLOCK_SIZE)
        except DiskError:
            emit(" disk_ioctl(GET_BLOCK_SIZE) - failed.")
            emit(" Size of the erase block is unknown.")
        else:
            emit(" disk_ioctl(GET_BLOCK_SIZE) - ok.")
            emit(f" Size of the erase block is {sz_eblk} sectors.")

        def sync(code: int) -> None:
            _call(emit, " disk_ioctl(CTRL_SYNC)", code,
                  lambda: disk.ioctl(IoctlCommand.CTRL_SYNC))

        emit("**** Single sector write test ****")
        pattern = lfsr_bytes(pns, sz_sect)
        _call(emit, " disk_write(0, 1)", 6, lambda: disk.write(0, pattern))
        sync(7)
        got = _call(emit, " disk_read(0, 1)", 8, lambda: disk.read(0, 1))
        _verify(emit, 10, got, pattern)
        pns += 1

        emit("**** Multiple sector write test ****")
        ns = min(buffer_size // sz_sect, 4)
        if ns > 1:
            pattern = lfsr_bytes(pns, sz_sect * ns)
            _call(emit, f" disk_write(5, {ns})", 11, lambda: disk.write(5, pattern))
            sync(12)
            got = _call(emit, f" disk_read(5, {ns})", 13, lambda: disk.read(5, ns))
            _verify(emit, 14, got, pattern)
        else:
            emit(" Test skipped.")
        pns += 1

        emit("**** Single sector write test (unaligned buffer address) ****")
        work = bytearray(sz_sect + 8)
        work[3:3 + sz_sect] = lfsr_bytes(pns, sz_sect)
        view = memoryview(work)
        _call(emit, " disk_write(5, 1)", 15, lambda: disk.write(5, view[3:3 + sz_sect]))
        sync(16)
        got = _call(emit, " disk_read(5, 1)", 17, lambda: disk.read(5, 1))
        _verify(emit, 18, got, lfsr_bytes(pns, sz_sect))
        pns += 1

        emit("**** 4GB barrier test ****")
        span = _BARRIER // (sz_sect // 2) if sz_sect >= 2 else None
        if span is not None and sz_drv >= MIN_DRIVE_SECTORS + span:
            lba, lba2 = 6, 6 + span
            pattern = lfsr_bytes(pns, sz_sect * 2)
            _call(emit, f" disk_write({lba}, 1)", 19,
                  lambda: disk.write(lba, pattern[:sz_sect]))
            _call(emit, f" disk_write({lba2}, 1)", 20,
                  lambda: disk.write(lba2, pattern[sz_sect:]))
            sync(21)
            first = _call(emit, f" disk_read({lba}, 1)", 22, lambda: disk.read(lba, 1))
            second = _call(emit, f" disk_read({lba2}, 1)", 23, lambda: disk.read(lba2, 1))
            _verify(emit, 24, first + second, pattern)
        else:
            emit(" Test skipped.")
        pns += 1

        emit(f"**** Test cycle {cc} of {cycles} completed ****")
        emit("")


def raw_speed(disk, lba: int, length: int, chunk_size: int,
              log: Logger = None) -> SpeedReport:
    """Write then read ``length`` bytes from ``lba`` in chunks; time both passes."""
    emit = log if log is not None else (lambda _s: None)
    try:
        ss = disk.ioctl(IoctlCommand.GET_SECTOR_SIZE)
    except DiskError as err:
        emit("disk_ioctl() failed.")
        raise DiskCheckError(0, f"disk_ioctl failed: {err}") from err
    if chunk_size <= 0 or chunk_size % ss:
        raise ValueError(f"chunk_size must be a positive multiple of {ss}")
    if length < 0 or length % chunk_size:
        raise ValueError("length must be a multiple of chunk_size")

    step = chunk_size // ss
    offsets = range(0, length // ss, step)
    buffer = lfsr_bytes(1, chunk_size)

    emit(f"Starting raw write test at sector {lba} in {chunk_size} bytes of data chunks...")
    started = time.perf_counter()
    try:
        for ofs in offsets:
            disk.write(lba + ofs, buffer)
    except DiskError as err:
        emit("disk_write() failed.")
        raise DiskCheckError(0, f"disk_write failed: {err}") from err
    try:
        disk.ioctl(IoctlCommand.CTRL_SYNC)
    except DiskError as err:
        emit("disk_ioctl() failed.")
        raise DiskCheckError(0, f"disk_ioctl failed: {err}") from err
    write_seconds = time.perf_counter() - started
    emit(f"{length} bytes written and it took {write_seconds:.6f} seconds.")

    emit(f"Starting raw read test at sector {lba} in {chunk_size} bytes of data chunks...")
    started = time.perf_counter()
    try:
        for ofs in offsets:
            disk.read(lba + ofs, step)
    except DiskError as err:
        emit("disk_read() failed.")
        raise DiskCheckError(0, f"disk_read failed: {err}") from err
    read_seconds = time.perf_counter() - started
    emit(f"{length} bytes read and it took {read_seconds:.6f} seconds.")
    emit("Test completed.")
    return SpeedReport(lba, length, chunk_size, write_seconds, read_seconds)