"""RGB565 pixmaps, colour conversion and a built-in 5x8 bitmap font."""

from __future__ import annotations

import math
from array import array
from enum import IntEnum
from typing import Union

CHAR_WIDTH = 5
CHAR_SPACE = 1
CHAR_HEIGHT = 8


class Color(IntEnum):
    """Common RGB565 colours."""

    BLACK = 0x0000
    BLUE = 0x001F
    RED = 0xF800
    GREEN = 0x07E0
    CYAN = 0x07FF
    MAGENTA = 0xF81F
    YELLOW = 0xFFE0
    WHITE = 0xFFFF


# Classic 5x8 glyphs, one group of five column bytes per character code,
# eight characters per line. Bit 0 of a column is its top pixel.
_FONT_HEX = """
0000000000 3E5B4F5B3E 3E6B4F6B3E 1C3E7C3E1C 183C7E3C18 1C577D571C 1C5E7F5E1C 00183C1800
FFE7C3E7FF 0018241800 FFE7DBE7FF 30483A060E 2629792926 407F050507 407F05253F 5A3CE73C5A
7F3E1C1C08 081C1C3E7F 14227F2214 5F5F005F5F 06097F017F 006689956A 6060606060 94A2FFA294
08047E0408 10207E2010 08082A1C08 081C2A0808 1E10101010 0C1E0C1E0C 30383E3830 060E3E0E06
0000000000 00005F0000 0007000700 147F147F14 242A7F2A12 2313086462 3649562050 0008070300
001C224100 0041221C00 2A1C7F1C2A 08083E0808 0080703000 0808080808 0000606000 2010080402
3E5149453E 00427F4000 7249494946 2141494D33 1814127F10 2745454539 3C4A494931 4121110907
3649494936 464949291E 0000140000 0040340000 0008142241 1414141414 0041221408 0201590906
3E415D594E 7C1211127C 7F49494936 3E41414122 7F4141413E 7F49494941 7F09090901 3E41415173
7F0808087F 00417F4100 2040413F01 7F08142241 7F40404040 7F021C027F 7F0408107F 3E4141413E
7F09090906 3E4151215E 7F09192946 2649494932 03017F0103 3F4040403F 1F2040201F 3F4038403F
6314081463 0304780403 6159494D43 007F414141 0204081020 004141417F 0402010204 4040404040
0003070800 2054547840 7F28444438 3844444428 384444287F 3854545418 00087E0902 18A4A49C78
7F08040478 00447D4000 2040403D00 7F10284400 00417F4000 7C04780478 7C08040478 3844444438
FC18242418 18242418FC 7C08040408 4854545424 04043F4424 3C4040207C 1C2040201C 3C4030403C
4428102844 4C9090907C 4464544C44 0008364100 0000770000 0041360800 0201020402 3C2623263C
1EA1A16112 3A4040207A 3854545559 2155557941 2254547842 2155547840 2054557940 0C1E527212
3955555559 3954545459 3955545458 0000457C41 0002457D42 0001457C40 7D1211127D F0282528F0
7C54554500 2054547C54 7C0A097F49 3249494932 3A4444443A 324A484830 3A4141217A 3A42402078
009DA0A07D 3D4242423D 3D4040403D 3C24FF2424 487E494366 2B2FFC2F2B FF0929F620 C0887E0903
2054547941 0000447D41 3048484A32 384040227A 007A0A0A72 7D0D19317D 2629292F28 2629292926
30484D4020 3808080808 0808080838 2F10C8ACBA 2F102834FA 00007B0000 08142A1422 22142A1408
5500550055 AA55AA55AA FF55FF55FF 000000FF00 101010FF00 141414FF00 1010FF00FF 1010F010F0
141414FC00 1414F700FF 0000FF00FF 1414F404FC 141417101F 10101F101F 1414141F00 101010F000
0000001F10 1010101F10 1010F01000 000000FF10 1010101010 101010FF10 000000FF14 0000FF00FF
00001F1017 0000FC04F4 1414171017 1414F404F4 0000FF00F7 1414141414 1414F700F7 1414141714
10101F101F 141414F414 1010F010F0 00001F101F 0000001F14 000000FC14 0000F010F0 1010FF10FF
141414FF14 1010101F00 000000F010 FFFFFFFFFF F0F0F0F0F0 FFFFFF0000 000000FFFF 0F0F0F0F0F
3844443844 FC4A4A4A34 7E02020606 027E027E02 6355494163 3844443C04 407E201E20 06027E0202
99A5E7A599 1C2A492A1C 4C7201724C 304A4D4D30 3048784830 BC625A463D 3E49494900 7E0101017E
2A2A2A2A2A 44445F4444 40514A4440 40444A5140 0000FF0103 E080FF0000 08086B6B08 3612362436
060F090F06 0000181800 0000101000 3040FF0101 001F01011E 00191D1712 003C3C3C3C 0000000000
"""

FONT = bytes.fromhex(_FONT_HEX)


def swap_bytes(color: int) -> int:
    """Swap the high and low byte of a 16-bit colour."""
    return ((color >> 8) & 0xFF) | ((color & 0xFF) << 8)


def color565(r: float, g: float, b: float) -> int:
    """Pack red, green and blue components in [0, 1] into RGB565."""
    r8, g8, b8 = (int(v * 255.0) & 0xFF for v in (r, g, b))
    return ((r8 & 0xF8) << 8) | ((g8 & 0xFC) << 3) | ((b8 & 0xF8) >> 3)


def _hue_channel(p: float, q: float, t: float) -> float:
    """One RGB channel of an HSL colour, for hue position ``t``."""
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1.0 / 6:
        return p + (q - p) * 6 * t
    if t < 0.5:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


def hsl_to_rgb565(h: float, s: float, l: float) -> int:  # noqa: E741
    """Convert hue, saturation and lightness, each in [0, 1], to RGB565."""
    for name, value in (("h", h), ("s", s), ("l", l)):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{name}={value} is outside [0, 1]")
    if s == 0:
        return color565(l, l, l)
    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2.0 * l - q
    return color565(*(_hue_channel(p, q, h + shift) for shift in (1.0 / 3.0, 0.0, -1.0 / 3.0)))


def hsv_to_rgb565(h: float, s: float, v: float) -> int:
    """Convert hue (fraction of a turn), saturation and value to RGB565."""
    if h < 0:
        raise ValueError(f"h={h} must not be negative")
    sector_pos = h * 360.0 / 60.0
    sector = math.floor(sector_pos)
    f = sector_pos - sector
    p = v * (1.0 - s)
    q = v * (1.0 - s * f)
    t = v * (1.0 - s * (1.0 - f))
    by_sector = {
        0: (v, t, p),
        1: (q, v, p),
        2: (p, v, t),
        3: (p, q, v),
        4: (t, p, v),
        5: (v, p, q),
        6: (v, t, p),
    }
    try:
        rgb = by_sector[int(sector)]
    except KeyError:
        raise ValueError(f"hue {h} is out of range") from None
    return color565(*rgb)


TextLike = Union[str, bytes, bytearray]


class Pixmap:
    """A width x height grid of 16-bit RGB565 pixels, row major."""

    __slots__ = ("width", "height", "buf")

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError("pixmap dimensions must not be negative")
        self.width = width
        self.height = height
        self.buf = array("H", [0]) * (width * height)

    def __len__(self) -> int:
        return len(self.buf)

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height}")

    def set_pixel(self, x: int, y: int, color: int) -> None:
        """Store a colour at (x, y)."""
        self._check(x, y)
        self.buf[y * self.width + x] = color & 0xFFFF

    def get_pixel(self, x: int, y: int) -> int:
        """Return the colour stored at (x, y)."""
        self._check(x, y)
        return self.buf[y * self.width + x]

    def draw_char(
        self,
        off_x: int,
        off_y: int,
        c: Union[int, str],
        color: int,
        bg: int,
        size_x: int = 1,
        size_y: int = 1,
    ) -> None:
        """Draw one glyph with its top-left corner at (off_x, off_y).

        Foreground and background colours are stored byte swapped, ready
        for a big-endian display.
        """
        code = ord(c) if isinstance(c, str) else c
        if not 0 <= code <= 0xFF:
            raise ValueError(f"character code {code} is not a single byte")
        if size_x < 1 or size_y < 1:
            raise ValueError("glyph scale must be at least 1")
        if off_x < 0 or off_y < 0:
            raise ValueError("glyph offset must not be negative")
        if (
            off_x + (size_x - 1) + CHAR_WIDTH > self.width
            or off_y + (size_y - 1) + CHAR_HEIGHT > self.height
        ):
            raise ValueError("glyph does not fit into the pixmap")
        if code >= 176:
            code += 1  # classic charset layout
        glyph = FONT[code * CHAR_WIDTH:(code + 1) * CHAR_WIDTH]
        if len(glyph) != CHAR_WIDTH:
            raise ValueError(f"no glyph for character code {code}")

        fg = swap_bytes(color & 0xFFFF)
        back = swap_bytes(bg & 0xFFFF)
        limit = len(self.buf)
        for i, column_bits in enumerate(glyph):
            for j in range(CHAR_HEIGHT):
                value = fg if (column_bits >> j) & 1 else back
                for x in range(size_x):
                    col = off_x + i * size_x + x
                    for y in range(size_y):
                        index = (off_y + j * size_y + y) * self.width + col
                        if index < limit:
                            self.buf[index] = value

    @classmethod
    def from_text(
        cls,
        text: TextLike,
        color: int = Color.WHITE,
        bg: int = Color.BLACK,
        size_x: int = 1,
        size_y: int = 1,
    ) -> "Pixmap":
        """Render a line of text into a new pixmap sized to fit it."""
        if isinstance(text, str):
            try:
                codes = text.encode("latin-1")
            except UnicodeEncodeError as err:
                raise ValueError(f"text is not representable in the font: {err}") from err
        else:
            codes = bytes(text)
        advance = (CHAR_WIDTH + CHAR_SPACE) * size_x
        pixmap = cls(len(codes) * advance, CHAR_HEIGHT * size_y)
        for i, code in enumerate(codes):
            pixmap.draw_char(i * advance, 0, code, color, bg, size_x, size_y)
        return pixmap

    def to_ppm(self) -> bytes:
        """Encode the pixmap as a binary PPM (P6) image."""
        header = f"P6\n{self.width} {self.height}\n255\n".encode("ascii")
        body = bytearray()
        for c in self.buf:
            body.append(((c >> 11) & 0x1F) * 255 // 31)
            body.append(((c >> 5) & 0x3F) * 255 // 63)
            body.append((c & 0x1F) * 255 // 31)
        return header + bytes(body)