"""
Fixed parameters of the CD-DA format and of this tool.

Nothing in here is mutated at runtime. Everything that is configurable comes from the command line.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

import platform

APP_NAME = "discrip"
APP_VERSION = __version__
APP_CONTACT = "josh@bloch.us"

# --- CD-DA geometry ---
SAMPLE_RATE = 44100
BITS_PER_SAMPLE = 16
SECTOR_BYTES = 2352
SECTORS_PER_SECOND = 75
FRAME_WORDS_PER_SECTOR = SECTOR_BYTES // 2  # 16-bit interleaved words in one sector

# array typecodes for the native and widened sample buffers
NATIVE_SAMPLE_TYPECODE = "h"
WIDE_SAMPLE_TYPECODE = "i"

CONTAINER_EXTENSION = ".flac"

# How often (in sectors) the progress line is refreshed while ripping
PROGRESS_INTERVAL_SECTORS = SECTORS_PER_SECOND


def _default_device() -> str:
    system = platform.system()
    if system == "Linux":
        return "/dev/cdrom"
    if system == "Darwin":
        return "/dev/disk1"
    if system == "Windows":
        return "D:"
    return "/dev/cd0"  # The BSDs


DEFAULT_DEVICE = _default_device()
