"""Block device interface: status flags, result codes, ioctl commands and a RAM disk."""

from __future__ import annotations

from enum import IntEnum, IntFlag
from typing import Dict, Optional, Union


class DiskResult(IntEnum):
    """Results of disk functions."""

    OK = 0
    ERROR = 1
    WRPRT = 2
    NOTRDY = 3
    PARERR = 4


class DiskStatus(IntFlag):
    """Drive status bits."""

    NONE = 0
    NOINIT = 0x01
    NODISK = 0x02
    PROTECT = 0x04


class IoctlCommand(IntEnum):
    """Control codes accepted by ``ioctl``."""

    CTRL_SYNC = 0
    GET_SECTOR_COUNT = 1
    GET_SECTOR_SIZE = 2
    GET_BLOCK_SIZE = 3
    CTRL_TRIM = 4
    CTRL_POWER = 5
    CTRL_LOCK = 6
    CTRL_EJECT = 7
    CTRL_FORMAT = 8
    MMC_GET_TYPE = 10
    MMC_GET_CSD = 11
    MMC_GET_CID = 12
    MMC_GET_OCR = 13
    MMC_GET_SDSTAT = 14
    ATA_GET_REV = 20
    ATA_GET_MODEL = 21
    ATA_GET_SN = 22
    ISDIO_READ = 55
    ISDIO_WRITE = 56
    ISDIO_MRITE = 57


class DiskError(Exception):
    """A disk function failed; ``result`` holds the reason."""

    def __init__(self, result: DiskResult, message: Optional[str] = None) -> None:
        self.result = DiskResult(result)
        super().__init__(message or self.result.name)


class RamDisk:
    """A sparse in-memory drive; unwritten sectors read as zeros."""

    def __init__(
        self, sector_count: int, sector_size: int = 512, block_size: int = 1
    ) -> None:
        if sector_count < 1:
            raise ValueError("sector_count must be at least 1")
        if sector_size < 1:
            raise ValueError("sector_size must be at least 1")
        if block_size < 1:
            raise ValueError("block_size must be at least 1")
        self.sector_count = sector_count
        self.sector_size = sector_size
        self.block_size = block_size
        self.write_protected = False
        self._initialized = False
        self._sectors: Dict[int, bytes] = {}

    def initialize(self) -> DiskStatus:
        """Bring the drive up and return its status."""
        self._initialized = True
        return self.status()

    def status(self) -> DiskStatus:
        """Current drive status."""
        flags = DiskStatus.NONE
        if not self._initialized:
            flags |= DiskStatus.NOINIT
        if self.write_protected:
            flags |= DiskStatus.PROTECT
        return flags

    def _check_ready(self) -> None:
        if not self._initialized:
            raise DiskError(DiskResult.NOTRDY, "drive not initialized")

    def _check_range(self, sector: int, count: int) -> None:
        if count < 1:
            raise DiskError(DiskResult.PARERR, "sector count must be at least 1")
        if sector < 0 or sector + count > self.sector_count:
            raise DiskError(
                DiskResult.PARERR,
                f"sectors {sector}..{sector + count - 1} outside drive of "
                f"{self.sector_count}",
            )

    def read(self, sector: int, count: int = 1) -> bytes:
        """Read ``count`` sectors starting at ``sector``."""
        self._check_ready()
        self._check_range(sector, count)
        blank = bytes(self.sector_size)
        return b"".join(
            self._sectors.get(lba, blank) for lba in range(sector, sector + count)
        )

    def write(self, sector: int, data: Union[bytes, bytearray, memoryview]) -> None:
        """Write whole sectors of ``data`` starting at ``sector``."""
        self._check_ready()
        if self.write_protected:
            raise DiskError(DiskResult.WRPRT, "drive is write protected")
        payload = bytes(data)
        if not payload or len(payload) % self.sector_size:
            raise DiskError(
                DiskResult.PARERR,
                f"data length {len(payload)} is not a multiple of {self.sector_size}",
            )
        count = len(payload) // self.sector_size
        self._check_range(sector, count)
        for n in range(count):
            chunk = payload[n * self.sector_size:(n + 1) * self.sector_size]
            self._sectors[sector + n] = chunk

    def ioctl(self, cmd: Union[IoctlCommand, int]) -> Optional[int]:
        """Run a control command; size queries return an integer."""
        self._check_ready()
        try:
            command = IoctlCommand(cmd)
        except ValueError:
            raise DiskError(DiskResult.PARERR, f"unknown command {cmd}") from None
        if command is IoctlCommand.CTRL_SYNC:
            return None
        if command is IoctlCommand.GET_SECTOR_COUNT:
            return self.sector_count
        if command is IoctlCommand.GET_SECTOR_SIZE:
            return self.sector_size
        if command is IoctlCommand.GET_BLOCK_SIZE:
            return self.block_size
        raise DiskError(DiskResult.PARERR, f"command {command.name} not supported")