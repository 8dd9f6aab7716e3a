"""
The capabilities the rip loop needs from the outside world: a disc's table of contents, a source of corrected
sectors, and a sink for samples. The real ones live in paranoia.py and flac_encoder.py; the tests substitute their own.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

from array import array
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from errors import DeviceError

__all__ = ['TrackExtent', 'DiscToc', 'SectorSource', 'SampleSink', 'SinkFactory']


@dataclass(frozen=True)
class TrackExtent:
    first_sector: int
    last_sector: int  # inclusive
    channels: int = 2


@dataclass(frozen=True)
class DiscToc:
    """
    Identity and geometry of the disc in the drive. audio_tracks holds only the audio tracks; any other track number
    up to track_count is a data track.
    """
    disc_id: str
    toc_string: str
    track_count: int
    audio_tracks: dict[int, TrackExtent] = field(default_factory=dict)
    submission_url: str | None = None

    def is_audio(self, track_number: int) -> bool:
        return track_number in self.audio_tracks

    def _extent(self, track_number: int) -> TrackExtent:
        try:
            return self.audio_tracks[track_number]
        except KeyError:
            raise DeviceError(f"Track {track_number} is not an audio track") from None

    def first_sector(self, track_number: int) -> int:
        return self._extent(track_number).first_sector

    def last_sector(self, track_number: int) -> int:
        return self._extent(track_number).last_sector

    def channel_count(self, track_number: int) -> int:
        return self._extent(track_number).channels


class SectorSource(Protocol):
    """A drive behind a jitter-correcting read engine. Every read returns one full, corrected sector."""

    def set_mode(self, full_error_correction: bool) -> None:
        ...

    def seek(self, sector: int) -> None:
        ...

    def read_sector(self) -> array:
        """Returns the next sector as FRAME_WORDS_PER_SECTOR native 16-bit interleaved words."""
        ...

    def drain_diagnostics(self) -> tuple[str | None, str | None]:
        """Returns (error text, message text) buffered since the last call, and forgets them."""
        ...

    def close(self) -> None:
        ...


class SampleSink(Protocol):
    """A streaming lossless encoder writing one file."""

    def write_interleaved(self, samples: array, frame_count: int) -> None:
        ...

    def finish(self) -> None:
        ...

    def abort(self) -> None:
        """Stops encoding and removes whatever was written, so no truncated file survives a failed rip."""
        ...


class SinkFactory(Protocol):
    def __call__(self, path: Path, channels: int, sample_rate: int, bits_per_sample: int,
                 tags: dict[str, str]) -> SampleSink:
        ...
