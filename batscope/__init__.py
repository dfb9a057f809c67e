"""Bat-call capture spectrograms, capture files, RGB565 pixmaps and block-device checks."""

__version__ = "0.1.0"