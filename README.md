# batscope

Tools for ultrasonic recordings of bat calls: turning raw 16-bit ADC
captures into colour spectrogram screens, keeping numbered capture files on
disk, and drawing small RGB565 images with a built-in 5x8 bitmap font. An
in-memory sector device and a destructive read/write checker for block
devices are included as well.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Command line

The package installs one command, `batscope`, with two subcommands:

```
batscope --help
batscope render capture00000.raw -o screen.ppm
batscope record stream.raw --root captures
```

Options shared by both subcommands:

- `--mono` – the input holds one channel; without it samples are taken as
  alternating left/right and only the left channel is analysed.
- `--sample-rate` – sample rate in Hz (default 250000).
- `--factor` – number of FFT frames' worth of samples in one capture
  (default 300, so one capture is 512 × 300 samples).

`batscope render INPUT` reads a capture file of little-endian 16-bit
samples, uses its first capture's worth of samples and writes a 240×240
screen as a binary PPM image: kHz labels down the left edge, the
spectrogram beside them, and a status line at the bottom showing the
directory number (`--dir`), the file number (`--file`) and the time the
spectrogram took to compute in milliseconds. The image goes to `-o/--output`,
or next to the input with a `.ppm` suffix; its path is printed.

`batscope record INPUT` takes a raw sample stream, creates the next free
`batNNN` directory under `--root` (default: the current directory) and
writes every complete capture block of the stream into
`batNNN/captureNNNNN.raw` (numbered by `--file-count`, default 0). It prints
the file path and the number of blocks written. A stream shorter than one
block is an error.

Errors are printed as `batscope: <message>` and the command exits with
status 1.

## Library overview

### `batscope.pixmap`

- `Pixmap(width, height)` – a row-major grid of 16-bit RGB565 pixels with
  `set_pixel`, `get_pixel` (both raise `IndexError` outside the image),
  `draw_char` and `to_ppm`.
- `Pixmap.from_text(text, color, bg, size_x, size_y)` – render a line of
  Latin-1 text into a pixmap sized to fit it, with optional scaling. Glyph
  colours are stored byte swapped, as `draw_char` does, ready for a
  big-endian display.
- `Color` – the standard RGB565 colours (black, blue, red, green, cyan,
  magenta, yellow, white).
- `color565(r, g, b)`, `hsl_to_rgb565(h, s, l)`, `hsv_to_rgb565(h, s, v)`,
  `swap_bytes(color)` – colour conversion.

```python
from batscope.pixmap import Color, Pixmap

label = Pixmap.from_text("42", Color.WHITE, Color.BLACK, 1, 1)
with open("label.ppm", "wb") as out:
    out.write(label.to_ppm())
```

### `batscope.spectrogram`

- `SpectrogramConfig` – FFT size, sample rate, screen size, label area,
  palette size, stereo flag, capture length and log-power scale; it rejects
  inconsistent settings with `ValueError`.
- `hamming_window(length)`, `color_table(ncolors)`,
  `power_to_index(power, ncolors)`, `bin_frequency_khz(pos, num_freq,
  fft_size, sample_rate)` – the building blocks.
- `compute_spectrogram(samples, config)` – palette indices of shape
  `(display_height, display_width)`, highest frequency in the top row, one
  Hamming-windowed FFT frame per column spread evenly over the capture.
- `render_spectrogram(samples, config)` – the same as a `Pixmap`.
- `draw_labels(pixmap, num_freq, config)` – four kHz labels along the left
  edge.

```python
import numpy as np
from batscope.spectrogram import SpectrogramConfig, render_spectrogram

config = SpectrogramConfig(stereo=False, factor=4)
samples = np.full(config.num_samples, 2048, dtype=np.uint16)
image = render_spectrogram(samples, config)
```

### `batscope.capture`

Captures are stored as `batNNN/captureNNNNN.raw` files of little-endian
16-bit samples.

- `next_capture_dir(root)` – create the next free `batNNN` directory (at
  most 500) and return its number.
- `capture_path(dir_count, file_count)` – the relative path of a capture.
- `CaptureWriter(root, dir_count, file_count)` – a context manager that opens
  the capture file on its first `write` and appends sample blocks to it,
  syncing to disk every tenth write.
- `read_capture(path)` – read a capture back as a NumPy `uint16` array.
- `CaptureError` – raised when a capture directory or file cannot be created,
  written or read.

### `batscope.bits`

`wrap_ix`, `mod_floor`, `calculate_checksum` (XOR of all words but the
last), and `ext_str`, `ext_bits`, `ext_bits16` for pulling bit fields out of
big-endian registers such as an SD card's 16-byte CSD or CID.

### `batscope.diskio` and `batscope.diskcheck`

- `RamDisk(sector_count, sector_size, block_size)` – a sparse in-memory
  sector device with `initialize`, `status`, `read`, `write` and `ioctl`
  (sync and the sector count, sector size and erase block size queries), and
  a `write_protected` switch.
- `DiskResult`, `DiskStatus`, `IoctlCommand` – result codes, status bits and
  control commands; `DiskError` carries a `DiskResult`.
- `check_diskio(disk, cycles, buffer_size, log)` – write, read back and
  compare pseudo-random sector data, including a multi-sector pass and a pass
  across the 4 GB boundary when the drive is large enough. All data on the
  drive is lost. Raises `DiskCheckError`, whose `code` names the failing
  step.
- `raw_speed(disk, lba, length, chunk_size, log)` – time a raw write and read
  pass and return a `SpeedReport` with rates in bytes per second.
- `lfsr_bytes(seed, count)` – the pseudo-random test pattern.

Both checks accept any object with the `RamDisk` methods; `log` is an
optional callable that receives each progress line.

## What it does not do

batscope works on files. It does not sample an ADC, drive a display or talk
to an SD card: `record` stores a sample stream that already exists as a
file, and `render` writes PPM images instead of showing them on a screen.
There is no FAT filesystem layer; the disk tools operate on raw sectors of a
`RamDisk` or a device object you supply.