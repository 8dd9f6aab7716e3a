"""
Discrip - rips audio CDs into FLAC files named after their MusicBrainz release.

A command line tool and library. It identifies the disc in the drive, asks MusicBrainz which release it belongs to,
lets the operator pick when there is more than one candidate, and then reads every audio track through cdparanoia's
jitter correction straight into a FLAC encoder, one sector at a time. Anything the drive has to say about the quality
of the read is passed on to the operator as it happens.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

import argparse
import functools
import sys
import time
from array import array
from dataclasses import dataclass
from pathlib import Path

import get_cover_art
import layout
import logger
import metadata
import paranoia
from constants import (BITS_PER_SAMPLE, DEFAULT_DEVICE, FRAME_WORDS_PER_SECTOR, PROGRESS_INTERVAL_SECTORS,
                       SAMPLE_RATE, WIDE_SAMPLE_TYPECODE)
from engines import DiscToc, SectorSource, SinkFactory
from errors import DeviceError, InvalidTrackRange, RipError
from flac_encoder import FlacEncoder
from release import MatchedMedium
from tags import track_tags
from tools import Toolset

__all__ = ['rip_disc_to_library', 'rip_disc', 'rip_track', 'plan_track', 'track_duration_seconds',
           'widen_samples', 'drain_diagnostics']


# --- (1) Sector arithmetic & sample conversion ---

@dataclass(frozen=True)
class TrackPlan:
    track_number: int
    first_sector: int
    last_sector: int  # inclusive
    channels: int
    duration_seconds: int
    path: Path

    @property
    def total_sectors(self) -> int:
        return self.last_sector - self.first_sector + 1


def track_duration_seconds(total_sectors: int, channels: int, frame_words: int = FRAME_WORDS_PER_SECTOR) -> int:
    """Returns the playing time of the given number of sectors in whole seconds (truncated)."""
    return total_sectors * frame_words // (SAMPLE_RATE * channels)


def plan_track(toc: DiscToc, matched: MatchedMedium, album_dir: Path, track_number: int,
               strict: bool = False) -> TrackPlan:
    """
    Works out what to read for the given audio track and where to put it. Raises InvalidTrackRange if the drive
    reports an empty track, or TrackCountMismatch if the release has no such track.
    """
    first, last = toc.first_sector(track_number), toc.last_sector(track_number)
    total_sectors = last - first + 1
    if total_sectors < 1:
        raise InvalidTrackRange(f"Track {track_number} spans sectors {first}-{last}")

    channels = toc.channel_count(track_number)
    return TrackPlan(track_number, first, last, channels, track_duration_seconds(total_sectors, channels),
                     album_dir / layout.track_file_name(matched, track_number, strict))


def widen_samples(native: array, wide: array) -> array:
    """
    Copies 16-bit samples into the (reused) 32-bit buffer by sign extension. No scaling, no dither. The buffer is
    written in place, so a sector of the wrong size is a DeviceError rather than a resized buffer.
    """
    if len(native) != len(wide):
        raise DeviceError(f"Drive returned {len(native)} samples for a {len(wide)}-sample sector")
    for i, sample in enumerate(native):
        wide[i] = sample
    return wide


def drain_diagnostics(source: SectorSource) -> None:
    """Passes along whatever the drive has reported since the last call. Never affects the rip itself."""
    errors, messages = source.drain_diagnostics()
    if errors:
        logger.emit_lines(errors, "    [!] ")
    if messages:
        logger.emit_lines(messages, "    [*] ")


# --- (2) The rip loop ---

def rip_track(toc: DiscToc, source: SectorSource, open_sink: SinkFactory, matched: MatchedMedium, album_dir: Path,
              track_number: int, strict: bool = False) -> Path | None:
    """
    Rips the given physical track into its file in album_dir and returns the file's path, or returns None if the track
    isn't audio. Any failure is fatal for the whole rip, and the
    encoder is aborted so that no truncated file is left behind.
    """
    if not toc.is_audio(track_number):
        logger.emit(f"[!] Track {track_number} is not an audio track, skipping.")
        return None

    plan = plan_track(toc, matched, album_dir, track_number, strict)
    logger.emit(f"[*] Ripping track {track_number}: sectors {plan.first_sector}-{plan.last_sector}, "
                f"{plan.channels} channels, {plan.duration_seconds}s -> {plan.path.name}")

    start_time = time.time()
    sink = open_sink(plan.path, plan.channels, SAMPLE_RATE, BITS_PER_SAMPLE,
                     track_tags(matched, track_number, toc.disc_id))
    frames_per_sector = FRAME_WORDS_PER_SECTOR // plan.channels
    wide = array(WIDE_SAMPLE_TYPECODE, [0]) * FRAME_WORDS_PER_SECTOR

    try:
        source.seek(plan.first_sector)
        for i in range(plan.total_sectors):
            widen_samples(source.read_sector(), wide)
            sink.write_interleaved(wide, frames_per_sector)
            drain_diagnostics(source)

            done = i + 1
            if done % PROGRESS_INTERVAL_SECTORS == 0 or done == plan.total_sectors:
                logger.emit(f"    Track {track_number}: {done / plan.total_sectors * 100:.1f}%", is_progress=True)

        sink.finish()
    except BaseException:
        sink.abort()
        raise

    elapsed = time.time() - start_time
    speed = plan.duration_seconds / elapsed if elapsed > 0 else float("inf")
    logger.emit(f"[+] Track {track_number} finished in {elapsed:.1f}s ({speed:.1f}x)")
    return plan.path


def rip_disc(toc: DiscToc, source: SectorSource, open_sink: SinkFactory, matched: MatchedMedium, album_dir: Path,
             strict: bool = False) -> list[Path]:
    """Rips every audio track of the disc, in order, and returns the paths of the files produced."""
    ripped = []
    for track_number in range(1, toc.track_count + 1):
        path = rip_track(toc, source, open_sink, matched, album_dir, track_number, strict)
        if path:
            ripped.append(path)
    return ripped


# --- (3) Talking to the operator ---

def _ask(prompt: str) -> str:
    try:
        return input(prompt).strip()
    except EOFError:
        raise RipError("No answer: standard input was closed") from None


def choose_one(prompt: str, options: list[str]) -> int:
    """Lists the options and returns the index of the one the operator picks. A single option is picked silently."""
    for i, option in enumerate(options, 1):
        logger.emit(f"  {i:2d}. {option}")
    if len(options) == 1:
        return 0

    while True:
        v = _ask(f"{prompt} [1-{len(options)}]: ")
        if v.isdigit() and 1 <= int(v) <= len(options):
            return int(v) - 1
        print(f"Please enter a number between 1 and {len(options)}.", file=sys.stderr)


def confirm(prompt: str) -> bool:
    while True:
        v = _ask(f"{prompt} (y/n): ").lower()
        if v in ("y", "n"):
            return v == "y"
        print("Please answer y or n.", file=sys.stderr)


# --- (4) Main ---

def rip_disc_to_library(output_root: str, device: str = DEFAULT_DEVICE, strict: bool = False,
                        cover_art: bool = True, full_error_correction: bool = True) -> list[Path]:
    """
    Rips the audio CD in the given device into a directory named after its MusicBrainz release under output_root,
    one FLAC file per audio track. Returns the paths of the files produced.

    The pipeline is strictly sequential:
      1. The disc is identified and looked up on MusicBrainz; the operator picks the release if there is a choice
      2. The album directory is prepared (the operator decides whether an existing one is wiped)
      3. The drive is opened, and each audio track is read through cdparanoia into flac, sector by sector
    Raises RipError (or one of its subclasses) on any failure.
    """
    tools = Toolset()
    tools.validate()

    toc = paranoia.read_disc(tools, device)
    logger.emit(f"Disc ID: {toc.disc_id}")
    logger.emit(f"TOC: {toc.toc_string}")

    graph = metadata.lookup(toc.disc_id)
    release_index = metadata.select_release(graph, choose_one, toc.submission_url)
    matched = metadata.match(toc.disc_id, graph, release_index)

    album_dir = layout.plan(matched, Path(output_root), strict, confirm)
    logger.emit(f"[*] Ripping to {album_dir}")
    if cover_art:
        get_cover_art.download_cover_art(matched.release.id, album_dir)

    drive = paranoia.ParanoiaDrive.open(tools, device, toc)
    try:
        drive.set_mode(full_error_correction)
        drain_diagnostics(drive)
        ripped = rip_disc(toc, drive, functools.partial(FlacEncoder.open, tools), matched, album_dir, strict)
    finally:
        drive.close()

    logger.emit(f"\n[+] Library Entry Complete: {matched.release.title} ({len(ripped)} tracks)")
    return ripped


def _clean_path_arg(arg: str) -> str:
    """Strips rogue literal quotes caused by Windows shell path escaping (e.g., \\")."""
    return arg.strip('"')


def main(argv: list[str] | None = None) -> None:
    """Simple command line tool for discrip"""
    parser = argparse.ArgumentParser(description="Rip an audio CD to FLAC, named from MusicBrainz.")
    parser.add_argument("output_dir", help="directory under which the album directory is created")
    parser.add_argument("-d", "--device", default=DEFAULT_DEVICE, help=f"CD device (default: {DEFAULT_DEVICE})")
    parser.add_argument("--strict", action="store_true",
                        help="also replace : ? \" | and * in file names (for FAT/NTFS/SMB)")
    parser.add_argument("--no-cover-art", action="store_true", help="don't download cover.jpg")
    parser.add_argument("--no-paranoia", action="store_true", help="disable jitter correction (faster, riskier)")
    args = parser.parse_args(argv)

    try:
        rip_disc_to_library(_clean_path_arg(args.output_dir), args.device, args.strict,
                            cover_art=not args.no_cover_art, full_error_correction=not args.no_paranoia)
    except RipError as e:
        logger.emit(f"[!] FATAL ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
