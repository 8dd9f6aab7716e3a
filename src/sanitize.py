"""
Maps release and track names into strings that are safe to use as file names.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

import re

__all__ = ['sanitize', 'DEFAULT_SUBSTITUTES', 'STRICT_SUBSTITUTES']

# The path separator is the only character that no filesystem we write to will accept
DEFAULT_SUBSTITUTES: dict[str, str] = {
    "/": "∕",  # DIVISION SLASH
}

# For filesystems (FAT, NTFS, SMB shares) that also reject these
STRICT_SUBSTITUTES: dict[str, str] = {
    "/": "∕",  # DIVISION SLASH
    ":": "꞉",  # MODIFIER LETTER COLON
    "?": "？",  # FULLWIDTH QUESTION MARK
    '"': "＂",  # FULLWIDTH QUOTATION MARK
    "|": "｜",  # FULLWIDTH VERTICAL LINE
    "*": "∗",  # ASTERISK OPERATOR
}


def _compile(substitutes: dict[str, str]) -> re.Pattern[str]:
    return re.compile("|".join(re.escape(c) for c in substitutes))


_DEFAULT_PATTERN = _compile(DEFAULT_SUBSTITUTES)
_STRICT_PATTERN = _compile(STRICT_SUBSTITUTES)


def sanitize(text: str, strict: bool = False) -> str:
    """
    Replaces the characters that are illegal in file names with look-alikes. The default policy replaces only '/';
    the strict policy also replaces : ? " | and *. All replacements happen in a single pass, so a substitute is never
    itself substituted.
    """
    if strict:
        return _STRICT_PATTERN.sub(lambda m: STRICT_SUBSTITUTES[m.group()], text)
    return _DEFAULT_PATTERN.sub(lambda m: DEFAULT_SUBSTITUTES[m.group()], text)
