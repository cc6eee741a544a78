# treepath - filesystem path values and tree operations
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
OS-specific path syntax rules.

A flavour bundles everything that differs between POSIX-style and
drive-letter-style namespaces: separators, anchor (drive and root)
parsing, validity, root detection and the comparison rule. Path values
consult exactly one flavour, selected once per platform by
current_flavour().
"""

from __future__ import annotations

import functools
import os
import re
from typing import Optional

from treepath.util import compile_glob


class Flavour:
    """Common lexical algorithms, parameterized by split_anchor()."""

    name = ""
    sep = "/"
    altsep: Optional[str] = None
    case_sensitive = True

    def is_sep(self, char: str) -> bool:
        return char == self.sep or (self.altsep is not None and char == self.altsep)

    def split_anchor(self, text: str) -> tuple[str, str, str]:
        """Split text into (drive, root, rest)."""
        raise NotImplementedError

    def split_parts(self, rest: str) -> list[str]:
        """Split the part after the anchor on separators, dropping empties."""
        if self.altsep:
            rest = rest.replace(self.altsep, self.sep)
        return [part for part in rest.split(self.sep) if part]

    def format(self, drive: str, root: str, parts: list[str]) -> str:
        text = drive + root + self.sep.join(parts)
        return text or "."

    # -------------------------------------------------------------------------
    # Syntactic tests
    # -------------------------------------------------------------------------

    def is_valid(self, text: str) -> bool:
        raise NotImplementedError

    def is_absolute(self, text: str) -> bool:
        raise NotImplementedError

    def is_rooted(self, text: str) -> bool:
        _drive, root, _rest = self.split_anchor(text)
        return bool(root)

    def is_root(self, text: str) -> bool:
        if not text:
            return False
        drive, root, rest = self.split_anchor(text)
        return bool(root) and not self.split_parts(rest)

    # -------------------------------------------------------------------------
    # Transformations
    # -------------------------------------------------------------------------

    def join(self, *segments: str) -> str:
        """
        Concatenate segments, collapsing redundant separators and '.'.

        '..' is kept as-is. A rooted segment discards everything before it.
        """
        drive, root, parts = "", "", []
        for segment in segments:
            if not segment:
                continue
            seg_drive, seg_root, seg_rest = self.split_anchor(segment)
            if seg_root:
                if seg_drive or not drive:
                    drive = seg_drive
                root, parts = seg_root, []
            elif seg_drive:
                # Drive-relative segment such as 'C:foo'
                if seg_drive != drive:
                    drive, root, parts = seg_drive, "", []
            parts.extend(p for p in self.split_parts(seg_rest) if p != ".")
        if not (drive or root or parts):
            return "." if any(segments) else ""
        return self.format(drive, root, parts)

    def normalize(self, text: str) -> str:
        """Collapse '.' and separators, and resolve '..' lexically."""
        if not text:
            return text
        drive, root, rest = self.split_anchor(text)
        stack: list[str] = []
        for part in self.split_parts(rest):
            if part == ".":
                continue
            if part == "..":
                if stack and stack[-1] != "..":
                    stack.pop()
                    continue
                if root:
                    # Nothing above the root
                    continue
            stack.append(part)
        return self.format(drive, root, stack)

    def dirname(self, text: str) -> str:
        """Strip the last segment; root stays root, nothing left gives '.'."""
        drive, root, rest = self.split_anchor(text)
        parts = self.split_parts(rest)
        if parts:
            parts.pop()
        if not (drive or root or parts):
            return "."
        return self.format(drive, root, parts)

    def basename(self, text: str) -> str:
        _drive, _root, rest = self.split_anchor(text)
        parts = self.split_parts(rest)
        return parts[-1] if parts else ""

    def segments(self, text: str):
        """Yield the anchor (if any) and then each component."""
        drive, root, rest = self.split_anchor(text)
        if drive or root:
            yield drive + root
        yield from self.split_parts(rest)

    def make_absolute(self, text: str, cwd: str) -> str:
        """Resolve text against cwd; the result is normalized."""
        if self.is_absolute(text):
            return self.normalize(text)
        return self.normalize(self.join(cwd, text))

    def relative(self, text: str, base: str) -> str:
        """Lexical path from absolute base to absolute text."""
        text, base = self.normalize(text), self.normalize(base)
        drive, _root, rest = self.split_anchor(text)
        base_drive, _base_root, base_rest = self.split_anchor(base)
        if self.compare_key(drive) != self.compare_key(base_drive):
            return text
        parts = self.split_parts(rest)
        base_parts = self.split_parts(base_rest)
        common = 0
        for part, base_part in zip(parts, base_parts):
            if self.compare_key(part) != self.compare_key(base_part):
                break
            common += 1
        relative = [".."] * (len(base_parts) - common) + parts[common:]
        return self.sep.join(relative) or "."

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def compare_key(self, text: str) -> str:
        return text

    def match_glob(self, text: str, pattern: str) -> bool:
        return bool(compile_glob(pattern, self.case_sensitive).match(text))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class PosixFlavour(Flavour):
    """POSIX rules: single root '/', case-sensitive, only NUL is invalid."""

    name = "posix"

    def split_anchor(self, text: str) -> tuple[str, str, str]:
        if text.startswith("/"):
            return "", "/", text.lstrip("/")
        return "", "", text

    def is_valid(self, text: str) -> bool:
        return bool(text) and "\0" not in text

    def is_absolute(self, text: str) -> bool:
        return text.startswith("/")


_DRIVE_RE = re.compile(r"^[A-Za-z]:")
_WINDOWS_INVALID_RE = re.compile(r'[\x00-\x1f<>:"|?*]')


class WindowsFlavour(Flavour):
    """Drive-letter rules: 'C:', UNC shares, both separators, case-insensitive."""

    name = "windows"
    sep = "\\"
    altsep = "/"
    case_sensitive = False

    def split_anchor(self, text: str) -> tuple[str, str, str]:
        if len(text) >= 2 and self.is_sep(text[0]) and self.is_sep(text[1]):
            # UNC: \\server\share is the drive, and a root with or
            # without a trailing separator
            normal = text.replace(self.altsep, self.sep)
            pieces = normal[2:].split(self.sep, 2)
            if len(pieces) >= 2 and pieces[0] and pieces[1]:
                drive = self.sep * 2 + pieces[0] + self.sep + pieces[1]
                rest = pieces[2] if len(pieces) > 2 else ""
                return drive, self.sep, rest
            return "", self.sep, normal.lstrip(self.sep)
        if _DRIVE_RE.match(text):
            drive, rest = text[:2], text[2:]
            if rest and self.is_sep(rest[0]):
                return drive, self.sep, rest.lstrip(self.sep + self.altsep)
            return drive, "", rest
        if text and self.is_sep(text[0]):
            return "", self.sep, text.lstrip(self.sep + self.altsep)
        return "", "", text

    def is_valid(self, text: str) -> bool:
        if not text:
            return False
        normal = text.replace(self.altsep, self.sep)
        if normal.startswith(self.sep * 2):
            drive, _root, _rest = self.split_anchor(normal)
            if not drive:
                return False
        drive, _root, rest = self.split_anchor(text)
        remainder = rest if drive.startswith(self.sep) else text[len(drive):]
        for part in self.split_parts(remainder):
            if _WINDOWS_INVALID_RE.search(part):
                return False
            if part not in (".", "..") and part[-1] in ". ":
                return False
        return True

    def is_absolute(self, text: str) -> bool:
        drive, root, _rest = self.split_anchor(text)
        return bool(drive) and bool(root)

    def make_absolute(self, text: str, cwd: str) -> str:
        if self.is_absolute(text):
            return self.normalize(text)
        drive, root, rest = self.split_anchor(text)
        cwd_drive, _cwd_root, _cwd_rest = self.split_anchor(cwd)
        if root:
            # Rooted but without drive: take the drive of cwd
            return self.normalize(cwd_drive + root + rest)
        if drive and self.compare_key(drive) != self.compare_key(cwd_drive):
            return self.normalize(drive + self.sep + rest)
        return self.normalize(self.join(cwd, rest))

    def compare_key(self, text: str) -> str:
        return text.replace(self.altsep, self.sep).lower()

    def match_glob(self, text: str, pattern: str) -> bool:
        return super().match_glob(
            text.replace(self.sep, "/"), pattern.replace(self.sep, "/")
        )


POSIX = PosixFlavour()
WINDOWS = WindowsFlavour()


@functools.lru_cache(maxsize=1)
def current_flavour() -> Flavour:
    """Return the flavour of the running platform (selected once)."""
    return WINDOWS if os.name == "nt" else POSIX
