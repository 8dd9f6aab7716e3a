"""
The SampleSink used for ripping: a flac subprocess fed raw PCM on its standard input.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

import subprocess
import sys
import tempfile
from array import array
from pathlib import Path

from errors import EncoderError
from tools import Toolset

__all__ = ['FlacEncoder']

# Typecode used on the wire to flac for each supported sample width
_WIRE_TYPECODES = {16: "h"}


class FlacEncoder:
    """
    Streams interleaved samples into a FLAC file. Samples arrive widened to 32 bits; they are packed back to the
    configured sample width on their way into the pipe, and any sample that doesn't fit is an error rather than
    being clipped.
    """

    def __init__(self, tools: Toolset, path: Path, channels: int, sample_rate: int, bits_per_sample: int,
                 tags: dict[str, str] | None = None) -> None:
        if bits_per_sample not in _WIRE_TYPECODES:
            raise EncoderError(f"Unsupported sample width: {bits_per_sample} bits")
        self._tools = tools
        self.path = Path(path)
        self.channels = channels
        self.sample_rate = sample_rate
        self.bits_per_sample = bits_per_sample
        self.tags = tags or {}
        self._process: subprocess.Popen[bytes] | None = None
        self._stderr = tempfile.TemporaryFile()

    @classmethod
    def open(cls, tools: Toolset, path: Path, channels: int, sample_rate: int, bits_per_sample: int,
             tags: dict[str, str] | None = None) -> "FlacEncoder":
        """Starts an encoder writing to the given path. Raises EncoderError if it can't be started."""
        encoder = cls(tools, path, channels, sample_rate, bits_per_sample, tags)
        try:
            encoder._process = subprocess.Popen(encoder.command(), stdin=subprocess.PIPE,
                                                stdout=subprocess.DEVNULL, stderr=encoder._stderr)
        except OSError as e:
            encoder._stderr.close()
            raise EncoderError(f"Could not start {tools.FLAC} for {path}: {e}") from e
        return encoder

    def command(self) -> list[str]:
        cmd = [self._tools.FLAC, "--silent", "--force", "--force-raw-format", f"--endian={sys.byteorder}",
               "--sign=signed", f"--channels={self.channels}", f"--bps={self.bits_per_sample}",
               f"--sample-rate={self.sample_rate}"]
        cmd += [f"--tag={name}={value}" for name, value in self.tags.items()]
        return cmd + ["-o", str(self.path), "-"]

    def write_interleaved(self, samples: array, frame_count: int) -> None:
        if len(samples) != frame_count * self.channels:
            raise EncoderError(f"Expected {frame_count} frames of {self.channels} channels, got {len(samples)} samples")
        try:
            wire = array(_WIRE_TYPECODES[self.bits_per_sample], samples)
        except OverflowError as e:
            raise EncoderError(f"Sample does not fit in {self.bits_per_sample} bits: {e}") from e

        try:
            self._process.stdin.write(wire.tobytes())
        except OSError as e:  # Typically BrokenPipeError: flac died
            raise EncoderError(f"Write to encoder failed for {self.path}: {e}\n{self._stderr_text()}") from e

    def finish(self) -> None:
        """Flushes and closes the file. Raises EncoderError if flac did not produce a complete file."""
        try:
            self._process.stdin.close()
        except OSError as e:
            raise EncoderError(f"Could not flush encoder for {self.path}: {e}") from e
        code = self._process.wait()
        stderr = self._stderr_text()
        self._stderr.close()
        if code != 0:
            raise EncoderError(f"Encoder failed (Code {code}) for {self.path}:\n{stderr}")

    def abort(self) -> None:
        """Kills flac before it can finalize a truncated file, and deletes the partial output."""
        if self._process is not None:
            if self._process.poll() is None:
                self._process.kill()
            self._process.wait()
        if not self._stderr.closed:
            self._stderr.close()
        self.path.unlink(missing_ok=True)

    def _stderr_text(self) -> str:
        self._stderr.seek(0)
        return self._stderr.read().decode("utf-8", errors="replace").strip()
