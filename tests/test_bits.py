import pytest

from batscope.bits import (
    calculate_checksum,
    ext_bits,
    ext_bits16,
    ext_str,
    mod_floor,
    wrap_ix,
)


@pytest.mark.parametrize("index", range(-12, 13))
@pytest.mark.parametrize("n", [1, 3, 5, 8])
def test_wrap_ix_in_range_and_congruent(index, n):
    r = wrap_ix(index, n)
    assert 0 <= r < n
    assert (r - index) // n * n == r - index


def test_wrap_ix_negative_pins():
    assert wrap_ix(-1, 5) == 4
    assert wrap_ix(5, 5) == 0


@pytest.mark.parametrize("a", [-7, -1, 0, 3, 11])
def test_mod_floor_matches_wrap(a):
    assert mod_floor(a, 4) == wrap_ix(a, 4)
    assert 0 <= mod_floor(a, 4) < 4


def test_checksum_ignores_last_word():
    assert calculate_checksum([0x11, 0x22, 0x33]) == calculate_checksum([0x11, 0x22, 0x99])


def test_checksum_single_word_and_pair():
    assert calculate_checksum([0xDEADBEEF]) == 0
    assert calculate_checksum([0xCAFEBABE, 0x12345678]) == 0xCAFEBABE


def test_checksum_self_cancels():
    words = [0x0BADBEEF, 0x0BADBEEF, 0x01020304]
    assert calculate_checksum(words) == calculate_checksum([0x01020304])


def test_checksum_empty():
    with pytest.raises(ValueError):
        calculate_checksum([])


def test_ext_bits_whole_bytes():
    data = b"\xab\xcd"
    assert ext_bits(data, 7, 0) == 0xCD
    assert ext_bits(data, 15, 8) == 0xAB
    assert ext_bits(data, 15, 0) == 0xABCD


def test_ext_bits_fields_reassemble():
    data = bytes(range(1, 17))
    whole = int.from_bytes(data, "big")
    low = ext_bits(data, 63, 0)
    high = ext_bits(data, 127, 64)
    assert (high << 64) | low == whole


def test_ext_bits_single_bits_rebuild_byte():
    data = b"\x5a"
    rebuilt = sum(ext_bits(data, i, i) << i for i in range(8))
    assert rebuilt == 0x5A


def test_ext_bits16_matches_ext_bits():
    data = bytes(range(100, 116))
    assert ext_bits16(data, 127, 120) == data[0]
    assert ext_bits16(data, 7, 0) == data[15]
    assert ext_bits16(data, 99, 30) == ext_bits(data, 99, 30)


def test_ext_bits16_needs_sixteen_bytes():
    with pytest.raises(ValueError):
        ext_bits16(b"\x00" * 8, 7, 0)


@pytest.mark.parametrize("msb, lsb", [(16, 0), (3, 5), (7, -1)])
def test_ext_bits_invalid_range(msb, lsb):
    with pytest.raises(ValueError):
        ext_bits(b"\x00\x00", msb, lsb)


def test_ext_str_slices():
    data = b"ABCDEFGH"
    assert ext_str(data, 63, 0) == data
    assert ext_str(data, 15, 0) == data[-2:]
    assert ext_str(data, 63, 48) == data[:2]
    assert ext_str(data, 39, 24) == data[3:5]


def test_ext_str_out_of_range():
    with pytest.raises(ValueError):
        ext_str(b"ABCD", 40, 32)