"""
Typed view of the MusicBrainz release graph for a disc id.

musicbrainzngs hands us nested dicts (keys such as 'medium-list' and 'track-list', numbers as strings, join phrases
interleaved with the credits). from_mb_disc_result turns them into the small, immutable structures the rest of
discrip works with, so that nothing downstream needs to know the web service's conventions.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

from dataclasses import dataclass, field

__all__ = ['ArtistCredit', 'Disc', 'Track', 'Medium', 'Release', 'ReleaseGraph', 'MatchedMedium', 'artist_string',
           'from_mb_disc_result']


@dataclass(frozen=True)
class ArtistCredit:
    name: str
    joinphrase: str = ""


@dataclass(frozen=True)
class Disc:
    id: str


@dataclass(frozen=True)
class Track:
    id: str
    position: int
    title: str
    recording_id: str = ""
    artist_credit: tuple[ArtistCredit, ...] = ()


@dataclass(frozen=True)
class Medium:
    position: int
    discs: tuple[Disc, ...] = ()
    tracks: tuple[Track, ...] = ()

    def has_disc(self, disc_id: str) -> bool:
        return any(d.id == disc_id for d in self.discs)


@dataclass(frozen=True)
class Release:
    id: str
    title: str
    artist_credit: tuple[ArtistCredit, ...]
    date: str = ""
    barcode: str | None = None
    catalog_numbers: tuple[str, ...] = ()
    media: tuple[Medium, ...] = ()

    @property
    def artist(self) -> str:
        return artist_string(self.artist_credit)


@dataclass(frozen=True)
class ReleaseGraph:
    disc_id: str
    releases: tuple[Release, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MatchedMedium:
    """The medium of the chosen release that is physically in the drive."""
    release: Release
    medium: Medium

    @property
    def is_multi_disc(self) -> bool:
        return len(self.release.media) > 1


def artist_string(credits: tuple[ArtistCredit, ...] | list[ArtistCredit]) -> str:
    """
    Returns the credited artist names, each followed by its join phrase. The join phrases come from MusicBrainz with
    whatever spacing and punctuation they need, so nothing is added between them.
    """
    return "".join(c.name + c.joinphrase for c in credits)


# --- Decoding of musicbrainzngs results ---

def _parse_artist_credit(raw: list) -> tuple[ArtistCredit, ...]:
    """musicbrainzngs interleaves credit dicts with plain join-phrase strings; fold each phrase into its credit."""
    credits: list[ArtistCredit] = []
    for item in raw or []:
        if isinstance(item, str):
            if credits:
                last = credits[-1]
                credits[-1] = ArtistCredit(last.name, last.joinphrase + item)
        else:
            # 'name' is only present when the credited name differs from the artist's name
            name = item.get('name') or item.get('artist', {}).get('name', '')
            credits.append(ArtistCredit(name, item.get('joinphrase', '')))
    return tuple(credits)


def _parse_track(raw: dict) -> Track:
    recording = raw.get('recording', {})
    return Track(
        id=raw.get('id', ''),
        position=int(raw['position']),
        title=raw.get('title') or recording.get('title', ''),
        recording_id=recording.get('id', ''),
        artist_credit=_parse_artist_credit(raw.get('artist-credit', [])),
    )


def _parse_medium(raw: dict) -> Medium:
    return Medium(
        position=int(raw.get('position', 1)),
        discs=tuple(Disc(d['id']) for d in raw.get('disc-list', [])),
        tracks=tuple(sorted((_parse_track(t) for t in raw.get('track-list', [])), key=lambda t: t.position)),
    )


def _parse_release(raw: dict) -> Release:
    catalog_numbers = tuple(li['catalog-number'] for li in raw.get('label-info-list', []) if li.get('catalog-number'))
    return Release(
        id=raw['id'],
        title=raw.get('title', ''),
        artist_credit=_parse_artist_credit(raw.get('artist-credit', [])),
        date=raw.get('date', ''),
        barcode=raw.get('barcode') or None,
        catalog_numbers=catalog_numbers,
        media=tuple(sorted((_parse_medium(m) for m in raw.get('medium-list', [])), key=lambda m: m.position)),
    )


def from_mb_disc_result(disc_id: str, result: dict) -> ReleaseGraph:
    """
    Converts the result of musicbrainzngs.get_releases_by_discid into a ReleaseGraph. A CD stub (an unverified
    listing with no releases) yields an empty graph. Raises KeyError or ValueError if a release is malformed.
    """
    if 'disc' in result:
        raw_releases = result['disc'].get('release-list', [])
    else:
        raw_releases = result.get('release-list', [])
    return ReleaseGraph(disc_id, tuple(_parse_release(r) for r in raw_releases))
