"""Tests for the rip loop: sector arithmetic, sample widening, diagnostics and the per-track pipeline."""

from array import array
from pathlib import Path

import pytest

import discrip
from constants import FRAME_WORDS_PER_SECTOR, SAMPLE_RATE
from engines import DiscToc, TrackExtent
from errors import DeviceError, InvalidTrackRange, TrackCountMismatch

from conftest import DISC_ID, FakeSinkFactory, FakeSource


def _toc(audio: dict[int, TrackExtent], track_count: int) -> DiscToc:
    return DiscToc(DISC_ID, "1 2 1000 150", track_count, audio)


def test_duration_truncates() -> None:
    assert discrip.track_duration_seconds(1000, 2, frame_words=588) == 1000 * 588 // (44100 * 2) == 6


def test_duration_of_real_sectors() -> None:
    # 75 sectors per second of stereo audio
    assert discrip.track_duration_seconds(75 * 60, 2) == 60
    assert discrip.track_duration_seconds(74, 2) == 0


def test_widening_preserves_sign_and_magnitude() -> None:
    native = array("h", [-32768, -1, 0, 1, 32767])
    wide = array("i", [0]) * len(native)

    result = discrip.widen_samples(native, wide)

    assert result is wide
    assert wide.itemsize == 4
    assert list(wide) == [-32768, -1, 0, 1, 32767]


def test_widening_short_sector_is_device_error() -> None:
    wide = array("i", [0]) * 4
    with pytest.raises(DeviceError):
        discrip.widen_samples(array("h", [1, 2]), wide)
    assert len(wide) == 4


def test_empty_track_is_invalid_range(tmp_path: Path, single_medium) -> None:
    toc = _toc({1: TrackExtent(500, 499)}, 1)
    with pytest.raises(InvalidTrackRange):
        discrip.plan_track(toc, single_medium, tmp_path, 1)


def test_plan_track(tmp_path: Path, single_medium) -> None:
    toc = _toc({7: TrackExtent(1000, 1000 + 75 * 10 - 1)}, 7)
    plan = discrip.plan_track(toc, single_medium, tmp_path, 7)

    assert plan.total_sectors == 750
    assert plan.duration_seconds == 10
    assert plan.path == tmp_path / "07 Interlude.flac"


def test_drain_forwards_each_line(log_lines) -> None:
    source = FakeSource({0: ("scratch near sector 0\nskip near sector 0", "jitter near sector 0")})
    source.seek(0)
    source.read_sector()

    discrip.drain_diagnostics(source)

    assert log_lines == ["    [!] scratch near sector 0", "    [!] skip near sector 0",
                         "    [*] jitter near sector 0"]


def test_second_drain_returns_nothing() -> None:
    source = FakeSource({0: ("skip", "drift")})
    source.seek(0)
    source.read_sector()

    assert source.drain_diagnostics() == ("skip", "drift")
    assert source.drain_diagnostics() == (None, None)


def test_rip_track_streams_every_sector(tmp_path: Path, single_medium, log_lines) -> None:
    toc = _toc({1: TrackExtent(100, 109)}, 1)
    source = FakeSource({104: ("skip near sector 104", None)})
    sinks = FakeSinkFactory()

    path = discrip.rip_track(toc, source, sinks, single_medium, tmp_path, 1)

    assert path == tmp_path / "01 Song 1.flac"
    assert path.exists()
    assert source.seeks == [100]
    assert source.reads == list(range(100, 110))
    assert source.drains == 10

    (sink,) = sinks.sinks
    assert (sink.channels, sink.sample_rate, sink.bits_per_sample) == (2, SAMPLE_RATE, 16)
    assert sink.tags["TITLE"] == "Song 1"
    assert sink.finished
    assert len(sink.writes) == 10
    samples, frames = sink.writes[3]
    assert frames == FRAME_WORDS_PER_SECTOR // 2
    assert samples == [103] * FRAME_WORDS_PER_SECTOR
    assert "    [!] skip near sector 104" in log_lines


def test_failed_read_aborts_sink_and_leaves_no_file(tmp_path: Path, single_medium) -> None:
    toc = _toc({1: TrackExtent(100, 109)}, 1)
    source = FakeSource(fail_at=103)
    sinks = FakeSinkFactory()

    with pytest.raises(DeviceError):
        discrip.rip_track(toc, source, sinks, single_medium, tmp_path, 1)

    (sink,) = sinks.sinks
    assert len(sink.writes) == 3
    assert sink.aborted
    assert not sink.finished
    assert not (tmp_path / "01 Song 1.flac").exists()


def test_four_channel_track_writes_fewer_frames(tmp_path: Path, single_medium) -> None:
    toc = _toc({1: TrackExtent(0, 0, channels=4)}, 1)
    sinks = FakeSinkFactory()

    discrip.rip_track(toc, FakeSource(), sinks, single_medium, tmp_path, 1)

    assert sinks.sinks[0].writes[0][1] == FRAME_WORDS_PER_SECTOR // 4


def test_disc_with_data_track(tmp_path: Path, single_medium, log_lines) -> None:
    toc = _toc({1: TrackExtent(0, 74)}, 2)
    source = FakeSource()
    sinks = FakeSinkFactory()

    ripped = discrip.rip_disc(toc, source, sinks, single_medium, tmp_path)

    assert ripped == [tmp_path / "01 Song 1.flac"]
    assert len(sinks.sinks) == 1
    assert sorted(p.name for p in tmp_path.glob("*.flac")) == ["01 Song 1.flac"]
    assert "[!] Track 2 is not an audio track, skipping." in log_lines


def test_more_disc_tracks_than_release_tracks(tmp_path: Path, double_medium) -> None:
    toc = _toc({n: TrackExtent(n * 10, n * 10 + 9) for n in range(1, 5)}, 4)
    sinks = FakeSinkFactory()

    with pytest.raises(TrackCountMismatch):
        discrip.rip_disc(toc, FakeSource(), sinks, double_medium, tmp_path)

    # The tracks before the mismatch were ripped and named for the second medium
    assert [s.path.name for s in sinks.sinks] == ["2-01 Reprise.flac", "2-02 Outro.flac", "2-03 Coda.flac"]


def test_existing_directory_declined_rip_proceeds(tmp_path: Path, single_medium) -> None:
    import layout

    existing = tmp_path / "Air & Varda - Moon Safari"
    existing.mkdir()
    (existing / "notes.txt").write_text("keep me")

    album_dir = layout.plan(single_medium, tmp_path, False, lambda prompt: False)
    ripped = discrip.rip_disc(_toc({1: TrackExtent(0, 2)}, 1), FakeSource(), FakeSinkFactory(), single_medium,
                              album_dir)

    assert (existing / "notes.txt").read_text() == "keep me"
    assert ripped == [existing / "01 Song 1.flac"]


def test_rip_disc_to_library(mocker, tmp_path: Path, single_medium) -> None:
    from release import ReleaseGraph

    toc = DiscToc(DISC_ID, "1 2 300 150 200", 2, {1: TrackExtent(150, 154), 2: TrackExtent(155, 160)},
                  "https://musicbrainz.org/cdtoc/attach?id=x")
    source = FakeSource()
    sinks = FakeSinkFactory()
    mocker.patch.object(discrip.Toolset, "validate")
    mocker.patch.object(discrip.paranoia, "read_disc", return_value=toc)
    mocker.patch.object(discrip.metadata, "lookup", return_value=ReleaseGraph(DISC_ID, (single_medium.release,)))
    mocker.patch.object(discrip.paranoia.ParanoiaDrive, "open", return_value=source)
    mocker.patch.object(discrip.FlacEncoder, "open", new=lambda tools, *args: sinks(*args))

    ripped = discrip.rip_disc_to_library(str(tmp_path), "/dev/sr0", cover_art=False, full_error_correction=False)

    album_dir = tmp_path / "Air & Varda - Moon Safari"
    assert ripped == [album_dir / "01 Song 1.flac", album_dir / "02 Song 2.flac"]
    assert source.full_error_correction is False
    assert source.seeks == [150, 155]
    assert source.drains == 1 + 5 + 6
    assert source.closed
    assert [s.tags["MUSICBRAINZ_DISCID"] for s in sinks.sinks] == [DISC_ID, DISC_ID]


def test_drive_is_closed_when_rip_fails(mocker, tmp_path: Path, single_medium) -> None:
    from errors import EncoderError
    from release import ReleaseGraph

    toc = DiscToc(DISC_ID, "1 1 300 150", 1, {1: TrackExtent(150, 299)})
    source = FakeSource()
    mocker.patch.object(discrip.Toolset, "validate")
    mocker.patch.object(discrip.paranoia, "read_disc", return_value=toc)
    mocker.patch.object(discrip.metadata, "lookup", return_value=ReleaseGraph(DISC_ID, (single_medium.release,)))
    mocker.patch.object(discrip.paranoia.ParanoiaDrive, "open", return_value=source)
    mocker.patch.object(discrip.FlacEncoder, "open", side_effect=EncoderError("no flac"))

    with pytest.raises(EncoderError):
        discrip.rip_disc_to_library(str(tmp_path), cover_art=False)
    assert source.closed
