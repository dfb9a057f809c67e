[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "batscope"
version = "0.1.0"
description = "Spectrograms of ultrasonic bat-call captures, numbered capture files, RGB565 pixmaps and block-device checks"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "bat detector",
    "ultrasound",
    "spectrogram",
    "fft",
    "rgb565",
    "pixmap",
    "ram disk",
    "disk check",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
batscope = "batscope.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["batscope"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
