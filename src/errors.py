"""
Exceptions raised by discrip. Every one of them is fatal for the current rip.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"


class RipError(Exception):
    """Base class for all fatal discrip errors."""


class DeviceError(RipError):
    """The drive could not be opened, queried or read."""


class MetadataLookupError(RipError):
    """The MusicBrainz request failed or returned something we can't decode."""


class NoReleaseFound(RipError):
    """MusicBrainz knows no release for this disc id."""

    def __init__(self, disc_id: str, submission_url: str | None = None) -> None:
        self.disc_id = disc_id
        self.submission_url = submission_url
        msg = f"No MusicBrainz release found for disc id {disc_id}."
        if submission_url:
            msg += f" Please add it to MusicBrainz: {submission_url}"
        super().__init__(msg)


class NoMatchingMedium(RipError):
    """None of the media of the chosen release carries this disc id."""


class TrackCountMismatch(RipError):
    """The physical disc has a track that the chosen release does not."""


class InvalidTrackRange(RipError):
    """The drive reported a track with no sectors in it."""


class EncoderError(RipError):
    """The FLAC encoder could not be opened, written or finalized."""


class FilesystemError(RipError):
    """The album directory could not be removed or created."""
