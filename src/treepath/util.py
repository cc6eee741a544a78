# treepath - filesystem path values and tree operations
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Utility functions for treepath.

This module contains general-purpose utilities used throughout treepath,
including debug tracing and glob pattern compilation.
"""

from __future__ import annotations

import fnmatch
import functools
import re
import sys

VERSION = "0.4.0"

# Debug level and test mode are module-level state
_debug_level = 0
_test_mode = False


def set_debug_level(level: int) -> None:
    """Set verbosity level for debug()."""
    global _debug_level
    _debug_level = level


def get_debug_level() -> int:
    """Get current debug level."""
    return _debug_level


def set_test_mode(on_or_off: bool) -> None:
    """Set test mode on or off."""
    global _test_mode
    _test_mode = bool(on_or_off)


def get_test_mode() -> bool:
    """Get current test mode."""
    return _test_mode


def debug(level: int, *args) -> None:
    """
    Log to STDERR based on debug_level setting.

    Verbosity rules:
        0: errors only
        >= 1: print operations: COPY/MKDIR/UNLINK/RMTREE/MV/LINK
        >= 2: print operation decisions (skipping, nesting, cycle guards)
        >= 3: print traversal trace
        >= 4: debug helper routines

    Supports two calling conventions:
        debug(level, msg)
        debug(level, indent_level, msg)
    """
    if len(args) >= 2 and isinstance(args[0], int):
        indent_level = args[0]
        msg = args[1]
    elif len(args) >= 1:
        indent_level = 0
        msg = args[0]
    else:
        return

    if _debug_level >= level:
        indent = "    " * indent_level
        if _test_mode:
            print(f"# {indent}{msg}")
        else:
            print(f"{indent}{msg}", file=sys.stderr)


def expand_braces(pattern: str) -> list[str]:
    """
    Expand {a,b} alternatives into separate patterns.

    Nested groups are expanded recursively. An unbalanced brace is kept
    as a literal character.
    """
    depth = 0
    start = -1
    for i, char in enumerate(pattern):
        if char == "{":
            if depth == 0:
                start = i
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                head, body, tail = pattern[:start], pattern[start + 1 : i], pattern[i + 1 :]
                results = []
                for option in _split_alternatives(body):
                    results.extend(expand_braces(head + option + tail))
                return results
    return [pattern]


def _split_alternatives(body: str) -> list[str]:
    """Split brace body on top-level commas."""
    options = []
    depth = 0
    current = ""
    for char in body:
        if char == "," and depth == 0:
            options.append(current)
            current = ""
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        current += char
    options.append(current)
    return options


@functools.lru_cache(maxsize=256)
def compile_glob(pattern: str, case_sensitive: bool = True) -> re.Pattern:
    """Compile a glob pattern (with brace alternatives) into a regexp (cached)."""
    alternatives = [fnmatch.translate(p) for p in expand_braces(pattern)]
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile("|".join(f"(?:{a})" for a in alternatives), flags)
