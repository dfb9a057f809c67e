import pytest

from batscope.pixmap import (
    CHAR_HEIGHT,
    CHAR_SPACE,
    CHAR_WIDTH,
    Color,
    Pixmap,
    color565,
    hsl_to_rgb565,
    hsv_to_rgb565,
    swap_bytes,
)


@pytest.mark.parametrize("value", [0, 0x1234, 0xABCD, 0xFFFF, 0x00FF])
def test_swap_bytes_round_trip(value):
    assert swap_bytes(swap_bytes(value)) == value


def test_swap_bytes_symmetric_colours():
    assert swap_bytes(Color.WHITE) == Color.WHITE
    assert swap_bytes(Color.BLACK) == Color.BLACK


@pytest.mark.parametrize(
    "rgb, expected",
    [
        ((1.0, 1.0, 1.0), Color.WHITE),
        ((0.0, 0.0, 0.0), Color.BLACK),
        ((1.0, 0.0, 0.0), Color.RED),
        ((0.0, 1.0, 0.0), Color.GREEN),
        ((0.0, 0.0, 1.0), Color.BLUE),
        ((1.0, 1.0, 0.0), Color.YELLOW),
        ((0.0, 1.0, 1.0), Color.CYAN),
        ((1.0, 0.0, 1.0), Color.MAGENTA),
    ],
)
def test_color565_primaries(rgb, expected):
    assert color565(*rgb) == expected


@pytest.mark.parametrize(
    "h, expected",
    [(0.0, Color.RED), (1.0 / 3.0, Color.GREEN), (2.0 / 3.0, Color.BLUE)],
)
def test_hsl_primary_hues(h, expected):
    assert hsl_to_rgb565(h, 1.0, 0.5) == expected


def test_hsl_achromatic():
    assert hsl_to_rgb565(0.3, 0.0, 1.0) == Color.WHITE
    assert hsl_to_rgb565(0.7, 0.0, 0.0) == Color.BLACK


@pytest.mark.parametrize(
    "args", [(1.5, 1.0, 0.5), (-0.1, 1.0, 0.5), (0.5, 2.0, 0.5), (0.5, 1.0, -1.0)]
)
def test_hsl_rejects_out_of_range(args):
    with pytest.raises(ValueError):
        hsl_to_rgb565(*args)


def test_hsv_red_at_both_ends_of_hue_circle():
    assert hsv_to_rgb565(0.0, 1.0, 1.0) == Color.RED
    assert hsv_to_rgb565(1.0, 1.0, 1.0) == Color.RED


def test_hsv_zero_saturation_is_grey():
    assert hsv_to_rgb565(0.4, 0.0, 1.0) == Color.WHITE
    assert hsv_to_rgb565(0.4, 0.0, 0.0) == Color.BLACK


def test_hsv_rejects_negative_and_too_large_hue():
    with pytest.raises(ValueError):
        hsv_to_rgb565(-0.5, 1.0, 1.0)
    with pytest.raises(ValueError):
        hsv_to_rgb565(2.0, 1.0, 1.0)


def test_new_pixmap_is_black():
    pixmap = Pixmap(7, 3)
    assert len(pixmap) == 21
    assert all(value == Color.BLACK for value in pixmap.buf)


def test_set_and_get_pixel():
    pixmap = Pixmap(4, 4)
    pixmap.set_pixel(3, 2, Color.MAGENTA)
    assert pixmap.get_pixel(3, 2) == Color.MAGENTA
    assert pixmap.buf[2 * 4 + 3] == Color.MAGENTA
    assert pixmap.get_pixel(2, 3) == Color.BLACK


@pytest.mark.parametrize("xy", [(4, 0), (0, 4), (-1, 0)])
def test_pixel_out_of_range(xy):
    pixmap = Pixmap(4, 4)
    with pytest.raises(IndexError):
        pixmap.set_pixel(*xy, Color.WHITE)
    with pytest.raises(IndexError):
        pixmap.get_pixel(*xy)


def test_negative_dimensions_rejected():
    with pytest.raises(ValueError):
        Pixmap(-1, 5)


def test_space_is_all_background():
    pixmap = Pixmap.from_text(" ", Color.RED, Color.BLUE)
    for y in range(CHAR_HEIGHT):
        for x in range(CHAR_WIDTH):
            assert pixmap.get_pixel(x, y) == swap_bytes(Color.BLUE)
        assert pixmap.get_pixel(CHAR_WIDTH, y) == Color.BLACK


def test_from_text_dimensions():
    pixmap = Pixmap.from_text("1234", size_x=2, size_y=3)
    assert pixmap.width == 4 * (CHAR_WIDTH + CHAR_SPACE) * 2
    assert pixmap.height == CHAR_HEIGHT * 3


def test_glyph_pixels_are_swapped_colours():
    pixmap = Pixmap.from_text("A", Color.RED, Color.BLUE)
    allowed = {swap_bytes(Color.RED), swap_bytes(Color.BLUE)}
    glyph = {pixmap.get_pixel(x, y) for x in range(CHAR_WIDTH) for y in range(CHAR_HEIGHT)}
    assert glyph == allowed
    assert all(pixmap.get_pixel(CHAR_WIDTH, y) == Color.BLACK for y in range(CHAR_HEIGHT))


def test_different_characters_render_differently():
    a = Pixmap.from_text("A", Color.WHITE, Color.BLACK)
    b = Pixmap.from_text("B", Color.WHITE, Color.BLACK)
    assert len(a) == len(b)
    assert list(a.buf) != list(b.buf)


def test_scaled_text_matches_unscaled():
    small = Pixmap.from_text("8", Color.RED, Color.BLUE, 1, 1)
    big = Pixmap.from_text("8", Color.RED, Color.BLUE, 2, 2)
    for y in range(big.height):
        for x in range(big.width):
            assert big.get_pixel(x, y) == small.get_pixel(x // 2, y // 2)


def test_text_is_concatenation_of_characters():
    pair = Pixmap.from_text("AB", Color.WHITE, Color.BLUE)
    second = Pixmap.from_text("B", Color.WHITE, Color.BLUE)
    advance = CHAR_WIDTH + CHAR_SPACE
    for y in range(CHAR_HEIGHT):
        for x in range(advance):
            assert pair.get_pixel(advance + x, y) == second.get_pixel(x, y)


def test_draw_char_accepts_str_and_int():
    by_str = Pixmap(6, 8)
    by_int = Pixmap(6, 8)
    by_str.draw_char(0, 0, "Q", Color.GREEN, Color.BLACK)
    by_int.draw_char(0, 0, ord("Q"), Color.GREEN, Color.BLACK)
    assert list(by_str.buf) == list(by_int.buf)


def test_draw_char_out_of_bounds():
    pixmap = Pixmap(5, 8)
    with pytest.raises(ValueError):
        pixmap.draw_char(1, 0, "A", Color.WHITE, Color.BLACK)
    with pytest.raises(ValueError):
        pixmap.draw_char(0, 1, "A", Color.WHITE, Color.BLACK)


def test_draw_char_rejects_zero_scale():
    pixmap = Pixmap(12, 16)
    with pytest.raises(ValueError):
        pixmap.draw_char(0, 0, "A", Color.WHITE, Color.BLACK, 0, 1)


def test_from_text_rejects_unencodable():
    with pytest.raises(ValueError):
        Pixmap.from_text("\u20ac")


def test_to_ppm_format():
    pixmap = Pixmap(2, 1)
    pixmap.set_pixel(0, 0, Color.WHITE)
    data = pixmap.to_ppm()
    header = b"P6\n2 1\n255\n"
    assert data.startswith(header)
    body = data[len(header):]
    assert len(body) == 2 * 3
    assert body[:3] == b"\xff\xff\xff"
    assert body[3:] == b"\x00\x00\x00"