"""
Decides where the rip goes: the album directory and the name of each track's file.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

import shutil
from collections.abc import Callable
from pathlib import Path

import logger
from constants import CONTAINER_EXTENSION
from errors import FilesystemError, TrackCountMismatch
from release import MatchedMedium, Release, Track
from sanitize import sanitize

__all__ = ['album_directory_name', 'plan', 'track_for', 'track_file_name']


def album_directory_name(release: Release, strict: bool = False) -> str:
    return sanitize(f"{release.artist} - {release.title}", strict)


def plan(matched: MatchedMedium, output_root: Path, strict: bool, confirm: Callable[[str], bool]) -> Path:
    """
    Returns the album directory for the matched release, creating it (and its parents) if necessary. If it already
    exists, confirm decides its fate: True wipes it and starts over, False leaves everything in it where it is and
    the rip writes into it.
    """
    album_dir = Path(output_root) / album_directory_name(matched.release, strict)

    if album_dir.exists():
        if confirm(f"{album_dir} already exists. Delete it and start over?"):
            logger.emit(f"[*] Deleting {album_dir}")
            try:
                shutil.rmtree(album_dir)
            except OSError as e:
                raise FilesystemError(f"Could not delete {album_dir}: {e}") from e
        else:
            logger.emit(f"[*] Keeping existing directory {album_dir}")

    try:
        album_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Could not create {album_dir}: {e}") from e
    return album_dir


def track_for(matched: MatchedMedium, track_number: int) -> Track:
    """Returns the release track for the given 1-based physical track number."""
    tracks = matched.medium.tracks
    if not 1 <= track_number <= len(tracks):
        raise TrackCountMismatch(
            f"Disc track {track_number} has no counterpart on medium {matched.medium.position} of "
            f"'{matched.release.title}', which has {len(tracks)} tracks")
    return tracks[track_number - 1]


def track_file_name(matched: MatchedMedium, track_number: int, strict: bool = False) -> str:
    """
    Returns e.g. "07 Interlude.flac", or "2-03 Coda.flac" when the release spans more than one medium.
    """
    title = sanitize(track_for(matched, track_number).title, strict)
    number = f"{track_number:02d}"
    if matched.is_multi_disc:
        number = f"{matched.medium.position}-{number}"
    return f"{number} {title}{CONTAINER_EXTENSION}"
