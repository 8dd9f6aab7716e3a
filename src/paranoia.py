"""
The drive, as seen through cdparanoia.

read_disc identifies the disc (libdiscid computes the MusicBrainz disc id; cdparanoia's query mode tells us which
tracks are audio and where they live). ParanoiaDrive is the SectorSource used for ripping: it runs cdparanoia in raw
mode with its output on a pipe, hands out one corrected sector at a time, and turns cdparanoia's machine-readable
progress events into diagnostic text.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

import os
import re
import subprocess
import tempfile
from array import array

import logger
from constants import FRAME_WORDS_PER_SECTOR, NATIVE_SAMPLE_TYPECODE, SECTOR_BYTES, SECTORS_PER_SECOND
from engines import DiscToc, TrackExtent
from errors import DeviceError
from tools import Toolset

__all__ = ['read_disc', 'query_toc', 'parse_query_output', 'ParanoiaDrive', 'classify_event', 'span_time']

# "  3.    16503 [03:40.03]    32187 [07:09.12]    no   no  2"
_TOC_LINE = re.compile(r"^\s*(\d+)\.\s+(\d+)\s+\[[\d:.]+\]\s+(\d+)\s+\[[\d:.]+\]\s+\S+\s+\S+\s+(\d+)\s*$")
_TOC_CHROME = re.compile(r"^\s*(track\s+length|=+|TOTAL\b|Table of contents)")

# "##: 12 [skip] @ 1234567", emitted once per read engine event with -e
_EVENT_LINE = re.compile(r"^##: (-?\d+) \[([^\]]*)\] @ (-?\d+)")

_ROUTINE_EVENTS = {"wrote", "finished", "read", "verify"}
_ERROR_EVENTS = {"scratch", "skip", "dropped", "duped", "transport error"}


def parse_query_output(text: str) -> tuple[dict[int, TrackExtent], str]:
    """
    Parses the output of 'cdparanoia -Q'. Returns the audio tracks it lists (data tracks are never listed), keyed by
    track number, and the remaining informational lines (banner, drive identification).
    """
    tracks: dict[int, TrackExtent] = {}
    other = []
    for line in text.splitlines():
        m = _TOC_LINE.match(line)
        if m:
            number, length, begin, channels = (int(g) for g in m.groups())
            tracks[number] = TrackExtent(begin, begin + length - 1, channels)
        elif line.strip() and not _TOC_CHROME.match(line):
            other.append(line.rstrip())
    return tracks, "\n".join(other)


def query_toc(tools: Toolset, device: str) -> tuple[dict[int, TrackExtent], str]:
    """Runs cdparanoia's query mode on the device. Raises DeviceError if the drive can't be read."""
    cmd = [tools.PARANOIA, "-d", device, "-Q"]
    try:
        res = subprocess.run(cmd, capture_output=True, text=True, stdin=subprocess.DEVNULL)
    except OSError as e:
        raise DeviceError(f"Could not run {tools.PARANOIA}: {e}") from e

    # The table goes to stderr
    output = res.stdout + res.stderr
    if res.returncode != 0:
        raise DeviceError(f"Could not read the table of contents of {device} (Code {res.returncode}):\n{output.strip()}")
    return parse_query_output(output)


def read_disc(tools: Toolset, device: str) -> DiscToc:
    """Identifies the disc in the given drive. Raises DeviceError if there is no readable audio disc."""
    try:
        import discid  # Loads libdiscid, which the rest of the program (and its tests) can live without
    except (ImportError, OSError) as e:
        raise DeviceError(f"Missing required dependency: libdiscid ({e}). Please ensure it is installed.") from e

    try:
        disc = discid.read(device)
    except discid.DiscError as e:
        raise DeviceError(f"Could not read disc id from {device}: {e}") from e

    audio_tracks, _ = query_toc(tools, device)
    if not audio_tracks:
        raise DeviceError(f"The disc in {device} has no audio tracks")

    # libdiscid ignores a trailing data session, cdparanoia ignores data tracks; together they see everything
    track_count = max(disc.last_track_num, max(audio_tracks))
    return DiscToc(disc.id, disc.toc_string, track_count, audio_tracks, disc.submission_url)


def span_time(offset: int) -> str:
    """Formats a sector offset in cdparanoia's [hh:mm:ss.ff] span notation, where ff counts sectors."""
    seconds, frames = divmod(offset, SECTORS_PER_SECOND)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"[{hours}:{minutes:02d}:{seconds:02d}.{frames:02d}]"


def classify_event(line: str) -> tuple[str, str] | None:
    """
    Classifies one line of cdparanoia's stderr. Returns ("error", text) or ("message", text), or None for routine
    progress that isn't worth reporting.
    """
    m = _EVENT_LINE.match(line)
    if not m:
        return ("message", line) if line.strip() else None

    name, position = m.group(2), int(m.group(3))
    if name in _ROUTINE_EVENTS:
        return None
    text = f"{name} near sector {position // FRAME_WORDS_PER_SECTOR}"
    return ("error", text) if name in _ERROR_EVENTS else ("message", text)


class ParanoiaDrive:
    """
    A SectorSource backed by a cdparanoia subprocess. Each seek starts a fresh cdparanoia reading from the given
    sector to the end of the disc; reads consume its output one sector at a time. Its stderr goes to an unnamed
    temporary file, which drain_diagnostics reads from where it left off, so draining never blocks.
    """

    def __init__(self, tools: Toolset, device: str, toc: DiscToc) -> None:
        self._tools = tools
        self.device = device
        self._first_audio_sector = min(e.first_sector for e in toc.audio_tracks.values())
        self._mode_args: list[str] = []
        self._process: subprocess.Popen[bytes] | None = None
        self._stderr = tempfile.TemporaryFile()
        self._stderr_pos = 0
        self._partial = ""
        self._errors: list[str] = []
        self._messages: list[str] = []

    @classmethod
    def open(cls, tools: Toolset, device: str, toc: DiscToc) -> "ParanoiaDrive":
        """Opens the drive, verifying that cdparanoia can talk to it. Raises DeviceError if it can't."""
        _, report = query_toc(tools, device)
        drive = cls(tools, device, toc)
        if report:
            drive._messages.append(report)
        return drive

    def set_mode(self, full_error_correction: bool) -> None:
        """Full mode is cdparanoia's default; otherwise all verification and correction is disabled."""
        self._mode_args = [] if full_error_correction else ["-Z"]

    def command(self, sector: int) -> list[str]:
        span = f"{span_time(sector - self._first_audio_sector)}-"
        return [self._tools.PARANOIA, "-d", self.device, "-e", *self._mode_args, "-r", "--", span, "-"]

    def seek(self, sector: int) -> None:
        self._stop()
        cmd = self.command(sector)
        logger.emit(f"[*] Command: {cmd}")
        try:
            self._process = subprocess.Popen(cmd, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE,
                                             stderr=self._stderr)
        except OSError as e:
            raise DeviceError(f"Could not start {self._tools.PARANOIA}: {e}") from e

    def read_sector(self) -> array:
        if self._process is None:
            raise DeviceError("Read before seek")

        data = self._process.stdout.read(SECTOR_BYTES)
        if len(data) < SECTOR_BYTES:
            code = self._process.wait()
            raise DeviceError(f"Read engine stopped after a partial sector ({len(data)} bytes, code {code})")

        samples = array(NATIVE_SAMPLE_TYPECODE)
        samples.frombytes(data)  # cdparanoia -r writes host byte order
        return samples

    def drain_diagnostics(self) -> tuple[str | None, str | None]:
        self._collect_stderr()
        errors = "\n".join(self._errors) or None
        messages = "\n".join(self._messages) or None
        self._errors.clear()
        self._messages.clear()
        return errors, messages

    def close(self) -> None:
        self._stop()
        self._stderr.close()

    def _collect_stderr(self) -> None:
        fd = self._stderr.fileno()
        size = os.fstat(fd).st_size
        if size <= self._stderr_pos:
            return

        # pread leaves the file offset, which the child process shares, alone
        data = os.pread(fd, size - self._stderr_pos, self._stderr_pos)
        self._stderr_pos += len(data)
        lines = re.split(r"[\r\n]", self._partial + data.decode("utf-8", errors="replace"))
        self._partial = lines.pop()  # Incomplete until its newline arrives
        for line in lines:
            classified = classify_event(line)
            if classified:
                kind, text = classified
                (self._errors if kind == "error" else self._messages).append(text)

    def _stop(self) -> None:
        if self._process is None:
            return
        process, self._process = self._process, None
        if process.poll() is None:
            process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
        process.stdout.close()
