"""Hamming-windowed FFT spectrograms of ADC captures, rendered to RGB565."""

from __future__ import annotations

import math
from array import array
from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np

from .pixmap import CHAR_HEIGHT, Color, Pixmap, hsl_to_rgb565

NUM_LABELS = 4
LOG_MIN = 4.0
LOG_MAX = 11.0


@dataclass(frozen=True)
class SpectrogramConfig:
    """Screen geometry, sampling and colour scale of the spectrogram view."""

    fft_size: int = 512
    sample_rate: int = 250_000
    width: int = 240
    height: int = 240
    label_size: int = 12
    label_height: int = 8
    ncolors: int = 256
    stereo: bool = True
    factor: int = 300
    adc_offset: float = 2048.0
    log_min: float = LOG_MIN
    log_max: float = LOG_MAX

    def __post_init__(self) -> None:
        if self.fft_size < 2:
            raise ValueError("fft_size must be at least 2")
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be positive")
        if self.display_width <= 0 or self.display_height <= 0:
            raise ValueError("display area is empty")
        if self.display_height > self.fft_size // 2 + 1:
            raise ValueError("display is taller than the number of FFT bins")
        if self.ncolors < 1:
            raise ValueError("ncolors must be at least 1")
        if self.log_max <= self.log_min:
            raise ValueError("log_max must exceed log_min")
        if self.factor < 1:
            raise ValueError("factor must be at least 1")

    @property
    def display_width(self) -> int:
        """Width of the spectrogram area, right of the labels."""
        return self.width - self.label_size

    @property
    def display_height(self) -> int:
        """Height of the spectrogram area, above the status line."""
        return self.height - self.label_height

    @property
    def num_samples(self) -> int:
        """Number of ADC samples in one capture."""
        return self.fft_size * self.factor


def hamming_window(length: int) -> np.ndarray:
    """Hamming window with a0 = 25/46 over ``length`` points."""
    if length < 2:
        raise ValueError("window length must be at least 2")
    a0 = 25.0 / 46.0
    n = np.arange(length, dtype=np.float64)
    return a0 - (1.0 - a0) * np.cos(2.0 * math.pi * n / (length - 1))


def bin_frequency_khz(
    pos: int, num_freq: int, fft_size: int = 512, sample_rate: int = 250_000
) -> int:
    """Frequency in kHz of display row ``pos`` when ``num_freq`` top bins are shown."""
    start = fft_size // 2 - num_freq + pos
    if start < 0:
        raise ValueError("row lies below the first FFT bin")
    return (start * sample_rate // 1000) // fft_size


def color_table(ncolors: int = 256) -> List[int]:
    """Rainbow palette of RGB565 colours, hue running from 0 to just below 1."""
    if ncolors < 1:
        raise ValueError("ncolors must be at least 1")
    return [hsl_to_rgb565(i / ncolors, 1.0, 0.5) for i in range(ncolors)]


def power_to_index(power: float, ncolors: int = 256) -> int:
    """Map a spectral power onto a palette index on a log10 scale from 1e4 to 1e11."""
    if not power > 0:
        return 0
    pix = int((math.log10(power) - LOG_MIN) / (LOG_MAX - LOG_MIN) * ncolors)
    return min(max(pix, 0), ncolors - 1)


def _power_indices(power: np.ndarray, config: SpectrogramConfig) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        scaled = (np.log10(power) - config.log_min) / (
            config.log_max - config.log_min
        ) * config.ncolors
    scaled = np.where(power > 0, scaled, 0.0)
    scaled = np.nan_to_num(scaled, nan=0.0, posinf=config.ncolors, neginf=0.0)
    return np.clip(np.trunc(scaled), 0, config.ncolors - 1).astype(np.int64)


SampleData = Union[np.ndarray, Sequence[int]]


def compute_spectrogram(
    samples: SampleData, config: SpectrogramConfig = SpectrogramConfig()
) -> np.ndarray:
    """Palette indices of the spectrogram, shape (display_height, display_width).

    Row 0 is the highest shown frequency; each column is one FFT frame taken
    evenly spaced across the capture. Stereo captures use the left channel.
    """
    data = np.asarray(samples, dtype=np.float64).ravel()
    fft_size = config.fft_size
    mono = len(data) // 2 if config.stereo else len(data)
    last_valid_start = mono - fft_size
    if last_valid_start < 0:
        raise ValueError(f"capture holds fewer than {fft_size} samples per channel")

    width = config.display_width
    starts = np.array(
        [column * last_valid_start // width for column in range(width)], dtype=np.int64
    )
    indices = starts[:, None] + np.arange(fft_size, dtype=np.int64)[None, :]
    if config.stereo:
        indices *= 2

    frames = (data[indices] - config.adc_offset) * hamming_window(fft_size)
    spectrum = np.fft.rfft(frames, axis=1)[:, : config.display_height]
    power = spectrum.real ** 2 + spectrum.imag ** 2
    grid = _power_indices(power, config)
    return grid.T[::-1].copy()


def render_spectrogram(
    samples: SampleData, config: SpectrogramConfig = SpectrogramConfig()
) -> Pixmap:
    """Render a capture as an RGB565 pixmap of the display area."""
    grid = compute_spectrogram(samples, config)
    palette = np.array(color_table(config.ncolors), dtype=np.uint16)
    pixmap = Pixmap(config.display_width, config.display_height)
    pixmap.buf = array("H", palette[grid].ravel().tolist())
    return pixmap


def _blit(dest: Pixmap, src: Pixmap, x: int, y: int) -> None:
    """Copy ``src`` into ``dest`` at (x, y), clipped to ``dest``."""
    x0 = max(x, 0)
    x1 = min(x + src.width, dest.width)
    if x1 <= x0:
        return
    for row in range(src.height):
        dy = y + row
        if not 0 <= dy < dest.height:
            continue
        s = row * src.width + (x0 - x)
        d = dy * dest.width + x0
        dest.buf[d:d + (x1 - x0)] = src.buf[s:s + (x1 - x0)]


def draw_labels(
    pixmap: Pixmap, num_freq: int, config: SpectrogramConfig = SpectrogramConfig()
) -> int:
    """Draw kHz labels along the left edge; return the width they take."""
    for i in range(NUM_LABELS):
        pos = i * num_freq // NUM_LABELS
        freq = bin_frequency_khz(pos, num_freq, config.fft_size, config.sample_rate)
        text = f"{freq:2d}"[:3].ljust(4, "\0")
        label = Pixmap.from_text(text, Color.WHITE, Color.BLACK, 1, 1)
        _blit(pixmap, label, 0, config.display_height - pos - 1)
    return 2 * CHAR_HEIGHT