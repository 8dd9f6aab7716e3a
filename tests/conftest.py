"""Test doubles and fixtures shared by the discrip tests."""

from __future__ import annotations

from array import array
from pathlib import Path

import pytest

import logger
from constants import FRAME_WORDS_PER_SECTOR
from errors import DeviceError
from release import ArtistCredit, Disc, MatchedMedium, Medium, Release, Track

DISC_ID = "xA2k.zFbv8mDn1JmVh3hfh0ZSmA-"


class FakeSource:
    """
    A SectorSource with canned sectors. Each sector is filled with its own sector number (mod 30000). Reading the
    sector fail_at raises DeviceError, as when cdparanoia dies mid-track.
    """

    def __init__(self, diagnostics: dict[int, tuple[str | None, str | None]] | None = None,
                 fail_at: int | None = None) -> None:
        self.diagnostics = diagnostics or {}
        self.fail_at = fail_at
        self.full_error_correction: bool | None = None
        self.seeks: list[int] = []
        self.reads: list[int] = []
        self.drains = 0
        self.closed = False
        self._position: int | None = None
        self._errors: list[str] = []
        self._messages: list[str] = []

    def set_mode(self, full_error_correction: bool) -> None:
        self.full_error_correction = full_error_correction

    def seek(self, sector: int) -> None:
        self.seeks.append(sector)
        self._position = sector

    def read_sector(self) -> array:
        sector = self._position
        if sector == self.fail_at:
            raise DeviceError(f"cdparanoia exited while reading sector {sector}")
        self.reads.append(sector)
        self._position += 1
        error, message = self.diagnostics.get(sector, (None, None))
        if error:
            self._errors.append(error)
        if message:
            self._messages.append(message)
        return array("h", [sector % 30000]) * FRAME_WORDS_PER_SECTOR

    def drain_diagnostics(self) -> tuple[str | None, str | None]:
        self.drains += 1
        errors = "\n".join(self._errors) or None
        messages = "\n".join(self._messages) or None
        self._errors.clear()
        self._messages.clear()
        return errors, messages

    def close(self) -> None:
        self.closed = True


class FakeSink:
    def __init__(self, path: Path, channels: int, sample_rate: int, bits_per_sample: int,
                 tags: dict[str, str]) -> None:
        self.path = path
        self.channels = channels
        self.sample_rate = sample_rate
        self.bits_per_sample = bits_per_sample
        self.tags = tags
        self.writes: list[tuple[list[int], int]] = []
        self.finished = False
        self.aborted = False

    def write_interleaved(self, samples: array, frame_count: int) -> None:
        self.writes.append((list(samples), frame_count))

    def finish(self) -> None:
        self.path.write_bytes(b"fLaC")
        self.finished = True

    def abort(self) -> None:
        self.path.unlink(missing_ok=True)
        self.aborted = True


class FakeSinkFactory:
    def __init__(self) -> None:
        self.sinks: list[FakeSink] = []

    def __call__(self, path, channels, sample_rate, bits_per_sample, tags) -> FakeSink:
        sink = FakeSink(path, channels, sample_rate, bits_per_sample, tags)
        self.sinks.append(sink)
        return sink


def make_medium(position: int, titles: list[str], disc_ids: tuple[str, ...] = ()) -> Medium:
    tracks = tuple(Track(id=f"t{position}-{i}", position=i, title=title, recording_id=f"r{position}-{i}")
                   for i, title in enumerate(titles, 1))
    return Medium(position=position, discs=tuple(Disc(d) for d in disc_ids), tracks=tracks)


def make_release(*media: Medium, title: str = "Moon Safari") -> Release:
    return Release(
        id="6f5b1d2a-0b0f-4a4e-9d3b-5c1e2f3a4b5c",
        title=title,
        artist_credit=(ArtistCredit("Air", " & "), ArtistCredit("Varda")),
        date="1998-01-16",
        barcode="724384497829",
        catalog_numbers=("7243 8 44978 2 9",),
        media=media,
    )


@pytest.fixture
def single_medium() -> MatchedMedium:
    medium = make_medium(1, [f"Song {i}" for i in range(1, 7)] + ["Interlude"], (DISC_ID,))
    return MatchedMedium(make_release(medium), medium)


@pytest.fixture
def double_medium() -> MatchedMedium:
    first = make_medium(1, ["Intro", "Theme"], ("otherdisc",))
    second = make_medium(2, ["Reprise", "Outro", "Coda"], (DISC_ID,))
    return MatchedMedium(make_release(first, second), second)


@pytest.fixture
def log_lines():
    """Captures everything emitted through the logger."""
    lines: list[str] = []
    logger.init(lambda line, is_progress: None if is_progress else lines.append(line))
    yield lines
    logger.init(None)
