"""Index arithmetic and bit-field extraction from big-endian registers."""

from __future__ import annotations

from functools import reduce
from operator import xor
from typing import Sequence


def wrap_ix(index: int, n: int) -> int:
    """Wrap an index, negative ones included, into range(n)."""
    return index % n


def mod_floor(a: int, n: int) -> int:
    """Modulo whose result takes the sign of the divisor."""
    return a % n


def calculate_checksum(words: Sequence[int]) -> int:
    """XOR of all 32-bit words except the last, which holds the checksum."""
    if not words:
        raise ValueError("checksum needs at least one word")
    return reduce(xor, (w & 0xFFFFFFFF for w in words[:-1]), 0)


def _check_field(size: int, msb: int, lsb: int) -> None:
    if lsb < 0 or msb < lsb:
        raise ValueError(f"invalid bit range {msb}:{lsb}")
    if msb >= size * 8:
        raise ValueError(f"bit {msb} is outside a {size}-byte register")


def ext_str(data: bytes, msb: int, lsb: int) -> bytes:
    """Return the whole bytes spanning bits msb..lsb, most significant first."""
    _check_field(len(data), msb, lsb)
    size = (1 + msb - lsb) // 8
    start = (len(data) - 1) - msb // 8
    return bytes(data[start:start + size])


def ext_bits(data: bytes, msb: int, lsb: int) -> int:
    """Extract bits msb..lsb; bit 0 is the lowest bit of the last byte."""
    _check_field(len(data), msb, lsb)
    width = 1 + msb - lsb
    return (int.from_bytes(bytes(data), "big") >> lsb) & ((1 << width) - 1)


def ext_bits16(data: bytes, msb: int, lsb: int) -> int:
    """Extract a field from a 16-byte register such as an SD card CSD or CID."""
    if len(data) < 16:
        raise ValueError("a 16-byte register is required")
    return ext_bits(data[:16], msb, lsb)