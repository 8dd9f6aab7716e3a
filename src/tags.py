"""
Vorbis comments written into each ripped file, following the tag names MusicBrainz Picard uses.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

from layout import track_for
from release import MatchedMedium, artist_string

__all__ = ['track_tags']


def track_tags(matched: MatchedMedium, track_number: int, disc_id: str) -> dict[str, str]:
    """Returns the tags for the given physical track. Tags with no value are left out."""
    release, medium = matched.release, matched.medium
    track = track_for(matched, track_number)
    album_artist = release.artist

    tags = {
        "ARTIST": artist_string(track.artist_credit) or album_artist,
        "ALBUMARTIST": album_artist,
        "ALBUM": release.title,
        "TITLE": track.title,
        "TRACKNUMBER": str(track_number),
        "TRACKTOTAL": str(len(medium.tracks)),
        "DISCNUMBER": str(medium.position),
        "DISCTOTAL": str(len(release.media)),
        "DATE": release.date,
        "BARCODE": release.barcode or "",
        "CATALOGNUMBER": release.catalog_numbers[0] if release.catalog_numbers else "",
        "MUSICBRAINZ_ALBUMID": release.id,
        "MUSICBRAINZ_RELEASETRACKID": track.id,
        "MUSICBRAINZ_TRACKID": track.recording_id,
        "MUSICBRAINZ_DISCID": disc_id,
    }
    return {k: v for k, v in tags.items() if v}
