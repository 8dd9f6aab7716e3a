"""
Locates the external programs that do the heavy lifting: cdparanoia reads the disc, flac encodes it.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

import shutil
from pathlib import Path

import logger
from errors import DeviceError, EncoderError

__all__ = ['Toolset']


class Toolset:
    """The collection of programs that this tool depends on."""

    def __init__(self) -> None:
        """Locates the executables. Call validate before relying on them."""
        # libcdio ships the same program under a different name
        self.PARANOIA = (self._find("cdparanoia", ["/usr/bin/cdparanoia", "/usr/local/bin/cdparanoia",
                                                   "/opt/homebrew/bin/cdparanoia"])
                         or self._find("cd-paranoia", ["/usr/local/bin/cd-paranoia",
                                                       "/opt/homebrew/bin/cd-paranoia"]))
        self.FLAC = self._find("flac", ["/usr/bin/flac", "/usr/local/bin/flac", "/opt/homebrew/bin/flac"])

    def validate(self) -> None:
        """Raises DeviceError if there is no read engine, or EncoderError if there is no encoder."""
        logger.emit("[*] Validating toolset dependencies...")
        if not self.PARANOIA:
            raise DeviceError("Missing required dependency: cdparanoia (or cd-paranoia). Please ensure it is installed.")
        if not self.FLAC:
            raise EncoderError("Missing required dependency: flac. Please ensure it is installed.")
        logger.emit("[*] Toolset validation complete.")

    @staticmethod
    def _find(name: str, prospects: list[str] | None = None) -> str | None:
        found = shutil.which(name)
        if found: return found

        if prospects is None: prospects = []
        for p in prospects:
            if Path(p).exists(): return str(Path(p))

        return None
