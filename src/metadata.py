"""
MusicBrainz lookup and release matching.

Turns a disc id into the one medium, of the one release the operator picked, that is actually in the drive.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

from collections.abc import Callable

import musicbrainzngs as mb

import logger
from constants import APP_CONTACT, APP_NAME, APP_VERSION
from errors import MetadataLookupError, NoMatchingMedium, NoReleaseFound
from release import MatchedMedium, Release, ReleaseGraph, from_mb_disc_result

__all__ = ['lookup', 'release_summary', 'select_release', 'match', 'INCLUDES']

# Sub-resources inlined in the disc id lookup. 'discids' gives us each medium's disc list for matching.
INCLUDES = ["artist-credits", "recordings", "labels", "discids"]

mb.set_useragent(APP_NAME, APP_VERSION, APP_CONTACT)


def lookup(disc_id: str) -> ReleaseGraph:
    """
    Returns the releases MusicBrainz associates with the given disc id. An unknown disc id is not an error; it yields a
    graph with no releases. Network and decoding failures raise MetadataLookupError.
    """
    logger.emit(f"[*] Looking up disc id {disc_id} on MusicBrainz...")
    try:
        result = mb.get_releases_by_discid(disc_id, includes=INCLUDES)
    except mb.ResponseError as e:
        if getattr(e.cause, 'code', None) == 404:
            return ReleaseGraph(disc_id)
        raise MetadataLookupError(f"MusicBrainz lookup failed for disc id {disc_id}: {e}") from e
    except mb.MusicBrainzError as e:
        raise MetadataLookupError(f"MusicBrainz lookup failed for disc id {disc_id}: {e}") from e

    try:
        return from_mb_disc_result(disc_id, result)
    except (KeyError, TypeError, ValueError) as e:
        raise MetadataLookupError(f"Unexpected MusicBrainz response for disc id {disc_id}: {e!r}") from e


def release_summary(release: Release) -> str:
    """Returns a one-line description of the release that lets a human tell it apart from its siblings."""
    summary = f"{release.artist} - {release.title}"
    if release.catalog_numbers:
        summary += f" [catalog {release.catalog_numbers[0]}]"
    if release.barcode:
        summary += f" [barcode {release.barcode}]"
    return summary


def select_release(graph: ReleaseGraph, choose_one: Callable[[str, list[str]], int],
                   submission_url: str | None = None) -> int:
    """
    Asks the operator (via choose_one) which candidate release is the disc in the drive, and returns its index.
    Raises NoReleaseFound, without asking anything, if there are no candidates.
    """
    if not graph.releases:
        raise NoReleaseFound(graph.disc_id, submission_url)

    options = [release_summary(r) for r in graph.releases]
    index = choose_one("Which release is this disc?", options)
    if not 0 <= index < len(options):
        raise ValueError(f"Release index out of range: {index}")
    return index


def match(disc_id: str, graph: ReleaseGraph, release_index: int) -> MatchedMedium:
    """
    Returns the medium of the indexed release whose disc list contains the given disc id. Raises NoMatchingMedium if
    there is none, or ValueError if the index is out of range.
    """
    if not 0 <= release_index < len(graph.releases):
        raise ValueError(f"Release index out of range: {release_index}")
    release = graph.releases[release_index]
    for medium in release.media:
        if medium.has_disc(disc_id):
            logger.emit(f"[+] Matched medium {medium.position} of {len(release.media)}: {release_summary(release)}")
            return MatchedMedium(release, medium)
    raise NoMatchingMedium(f"No medium of '{release_summary(release)}' has disc id {disc_id}")
