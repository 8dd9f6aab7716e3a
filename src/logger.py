"""
Simple logging utility for the discrip command line tool.

This module is a singleton with global state. It provides progress-line clearing so that per-sector progress and
the drive's diagnostic text can interleave on one console. Other frontends can capture the output by providing a
callback.
"""

# Copyright (c) 2026 Joshua Bloch
# SPDX-License-Identifier: MIT

__author__ = "Joshua Bloch"
__copyright__ = "Copyright 2026, Joshua Bloch"
__license__ = "MIT"
__version__ = "1.0B"

import sys
from collections.abc import Callable

__all__ = ['init', 'emit', 'emit_lines']

# Whether we are currently in a sequence of progress messages. Used only if _log_callback is None
_in_progress: bool = False

# Called to emit log messages. If it has not been set, we log to stdout.
_log_callback: Callable[[str, bool], None] | None = None


def init(log_callback: Callable[[str, bool], None] | None) -> None:
    """
    Initializes the logger to use the specified callback. If this method is not called, or None is passed in,
    emit will log to stdout. The two arguments to log callback are the string to be logged, and whether it represents
    "progress," and should hence overwrite the previously logged string.
    """
    global _log_callback, _in_progress
    _log_callback = log_callback
    _in_progress = False


def emit(line: str, is_progress: bool = False) -> None:
    """
    Emits the given line to the log_callback, if provided, or to stdout if it is not. If is_progress is true, then
    line represents progress, and should overwrite the previously logged string.
    """
    global _in_progress
    if _log_callback:
        _log_callback(line, is_progress)
        return

    if is_progress:
        # \033[K erases the rest of the previous line
        sys.stdout.write(f"\r{line.strip()}\033[K")
        sys.stdout.flush()
        _in_progress = True
    else:
        if _in_progress:
            print()  # Move to the next line so we don't overwrite the progress line
        print(line.rstrip('\n'))
        _in_progress = False


def emit_lines(text: str, prefix: str = "") -> None:
    """Emits each non-blank line of the given (possibly multi-line) text as a separate log record."""
    for line in text.splitlines():
        if line.strip():
            emit(f"{prefix}{line.rstrip()}")
