"""
Cover art retrieval component of discrip.

Fetches the front cover of a MusicBrainz release from the Cover Art Archive and saves it as cover.jpg next to the
ripped tracks. This is a nicety, not part of the rip: every failure is logged and otherwise ignored.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

import sys
from io import BytesIO
from pathlib import Path

import requests
from PIL import Image

import logger
from constants import APP_CONTACT, APP_NAME, APP_VERSION

__all__ = ['download_cover_art', 'get_caa_front_url']

CAA_ROOT_URL = "https://coverartarchive.org/release"
USER_AGENT = f"{APP_NAME}/{APP_VERSION} ( {APP_CONTACT} )"

MAX_FILE_SIZE = 15 * 1024 * 1024  # 15 MB Cap
PREFERRED_THUMBNAIL = "1200"


def get_caa_front_url(release_id: str) -> str | None:
    """Returns the URL of the front cover of the given release, or None if the archive has none."""
    try:
        resp = requests.get(f"{CAA_ROOT_URL}/{release_id}", headers={"User-Agent": USER_AGENT}, timeout=10)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        for img_entry in resp.json().get('images', []):
            if img_entry.get('front'):
                return img_entry.get('thumbnails', {}).get(PREFERRED_THUMBNAIL) or img_entry['image']
    except (requests.RequestException, KeyError, ValueError) as e:
        logger.emit(f"  [!] Error checking Cover Art Archive for {release_id}: {e}")
    return None


def download_cover_art(release_id: str, target_dir: Path) -> Path | None:
    """
    Downloads the front cover of the given release into target_dir/cover.jpg. Returns the path of the saved image, or
    None if no acceptable art was found.
    """
    image_url = get_caa_front_url(release_id)
    if not image_url:
        logger.emit("[!] No cover art found.")
        return None

    logger.emit(f"[*] Downloading: {image_url}")
    try:
        resp = requests.get(image_url, headers={"User-Agent": USER_AGENT}, timeout=30)
        resp.raise_for_status()
        if len(resp.content) > MAX_FILE_SIZE:
            logger.emit(f"[!] Cover art is too large ({len(resp.content)} bytes), skipping.")
            return None
        img = Image.open(BytesIO(resp.content))

        # Strip transparency layer if present, as it would cause Pillow to crash on jpeg conversion
        if img.mode in ("RGBA", "P", "LA"):
            img = img.convert("RGB")

        save_path = Path(target_dir) / "cover.jpg"
        img.save(save_path, "JPEG", quality=95)
    except (requests.RequestException, OSError) as e:
        logger.emit(f"[!] Cover art download failed: {e}")
        return None

    logger.emit(f"[+] Success: Saved {img.width}x{img.height} cover to {save_path}")
    return save_path


def main():
    """ Simple command line tool to get the cover art for the specified MusicBrainz release """
    if len(sys.argv) < 3:
        logger.emit('Usage: python get_cover_art.py RELEASE_MBID "/Target/Dir"')
        sys.exit(1)

    target_dir = Path(sys.argv[2])
    target_dir.mkdir(parents=True, exist_ok=True)
    download_cover_art(sys.argv[1], target_dir)


if __name__ == "__main__":
    main()
