# treepath - filesystem path values and tree operations
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Immutable path values.

A path value wraps a single text string and offers pure transformations
on it. Nothing in this module touches the filesystem: tilde expansion and
resolution against the working directory only happen when asked for, and
read process state through a PathContext.
"""

from __future__ import annotations

import os
import tempfile
from typing import Iterator, Optional, Union

from treepath.flavour import POSIX, WINDOWS, Flavour, current_flavour
from treepath.types import DEFAULT_CONTEXT, InvalidPathError, PathContext


def _segment_text(segment) -> str:
    """Return the text of a str or os.PathLike segment."""
    text = os.fspath(segment)
    if not isinstance(text, str):
        raise TypeError(
            f"path segment must be str or os.PathLike[str], not {type(segment).__name__}"
        )
    return text


class PathSegments:
    """Restartable, lazy view on the components of a path."""

    __slots__ = ("_flavour", "_text")

    def __init__(self, flavour: Flavour, text: str):
        self._flavour = flavour
        self._text = text

    def __iter__(self) -> Iterator[str]:
        return iter(self._flavour.segments(self._text))

    def __eq__(self, other):
        if isinstance(other, PathSegments):
            return list(self) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"PathSegments({list(self)!r})"


class PathValue:
    """
    An immutable handle to a location in a filesystem namespace.

    Path("some/text") keeps the text exactly as given, while
    Path("a", "b", "c") joins segments with the OS separator and collapses
    redundant separators and '.' components. Path() is the uninitialized
    value: it is not valid, not absolute and not a root.

    Equality, ordering and hashing follow the case rule of the flavour.
    """

    __slots__ = ("_text",)

    flavour: Flavour = POSIX

    def __init__(self, *segments: Union[str, os.PathLike]):
        texts = [_segment_text(s) for s in segments]
        if not texts:
            text = None
        elif len(texts) == 1:
            text = texts[0]
        else:
            text = self.flavour.join(*texts)
        object.__setattr__(self, "_text", text)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        return (type(self), () if self._text is None else (self._text,))

    def _new(self, text: str) -> PathValue:
        return type(self)(text)

    @property
    def text(self) -> str:
        """Path text ('' for the uninitialized value)."""
        return self._text or ""

    def __str__(self) -> str:
        return self.text

    def __fspath__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        if self._text is None:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}({self._text!r})"

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def _key(self) -> tuple[int, str]:
        if self._text is None:
            return (0, "")
        return (1, self.flavour.compare_key(self._text))

    def _comparable(self, other) -> bool:
        return isinstance(other, PathValue) and other.flavour is self.flavour

    def __eq__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self._key() == other._key()

    def __ne__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self._key() != other._key()

    def __lt__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other):
        if not self._comparable(other):
            return NotImplemented
        return self._key() >= other._key()

    def __hash__(self) -> int:
        return hash((self.flavour.name, self._key()))

    # -------------------------------------------------------------------------
    # Syntactic properties
    # -------------------------------------------------------------------------

    def is_null(self) -> bool:
        """Return True for the uninitialized value Path()."""
        return self._text is None

    def is_valid(self) -> bool:
        return self._text is not None and self.flavour.is_valid(self._text)

    def is_absolute(self) -> bool:
        return bool(self._text) and self.flavour.is_absolute(self._text)

    def is_rooted(self) -> bool:
        """Return True if the path starts at a root (or drive root)."""
        return bool(self._text) and self.flavour.is_rooted(self._text)

    def is_root(self) -> bool:
        """Return True only for the top-level node of the namespace."""
        return bool(self._text) and self.flavour.is_root(self._text)

    def segments(self) -> PathSegments:
        return PathSegments(self.flavour, self.text)

    @property
    def base_name(self) -> str:
        return self.flavour.basename(self.text)

    def extension(self) -> str:
        """
        Return the extension of the last segment, including the dot.

        A leading dot does not start an extension: '.bashrc' has none.
        """
        name = self.base_name
        index = name.rfind(".")
        if index <= 0 or name in (".", ".."):
            return ""
        return name[index:]

    def strip_ext(self) -> PathValue:
        ext = self.extension()
        if not ext:
            return self
        return self._new(self._strip_seps()[: -len(ext)])

    def _strip_seps(self) -> str:
        return self.text.rstrip(self.flavour.sep + (self.flavour.altsep or ""))

    def with_ext(self, ext: str) -> PathValue:
        """
        Append an extension to the last segment.

        Unlike the strip-then-append behaviour of os.path based helpers,
        an existing extension is kept: Path('a.tar').with_ext('gz')
        gives 'a.tar.gz'. A path without a last segment, such as the root
        or Path(), is returned unchanged.
        """
        if not ext or not self.base_name:
            return self
        if not ext.startswith("."):
            ext = "." + ext
        return self._new(self._strip_seps() + ext)

    def matches_glob(self, pattern: str) -> bool:
        """Check if the whole path text matches a glob pattern."""
        return self.flavour.match_glob(self.text, pattern)

    # -------------------------------------------------------------------------
    # Transformations
    # -------------------------------------------------------------------------

    def normalize(self) -> PathValue:
        return self._new(self.flavour.normalize(self.text))

    def join(self, *segments: Union[str, os.PathLike]) -> PathValue:
        """Append segments to this path and re-join them."""
        texts = [_segment_text(s) for s in segments]
        return self._new(self.flavour.join(self.text, *texts))

    def __truediv__(self, other):
        if isinstance(other, (str, os.PathLike)):
            return self.join(other)
        return NotImplemented

    def expand_home(self, context: Optional[PathContext] = None) -> PathValue:
        """Replace a leading '~' or '~user' segment with a home directory."""
        text = self.text
        if not text.startswith("~"):
            return self
        end = len(text)
        for i, char in enumerate(text):
            if self.flavour.is_sep(char):
                end = i
                break
        home = (context or DEFAULT_CONTEXT).home(text[1:end])
        if home is None:
            return self
        return self._new(home + text[end:])

    def to_absolute(self, context: Optional[PathContext] = None) -> PathValue:
        """
        Return this path expanded, resolved against the working directory,
        and normalized.

        Raises OSError if the working directory cannot be determined.
        """
        context = context or DEFAULT_CONTEXT
        expanded = self.expand_home(context).text
        if self.flavour.is_absolute(expanded):
            return self._new(self.flavour.normalize(expanded))
        return self._new(self.flavour.make_absolute(expanded, context.getcwd()))

    def parent(
        self, make_absolute: bool = True, context: Optional[PathContext] = None
    ) -> PathValue:
        """
        Return the parent of this path.

        The parent of a root is the root itself. A relative path is first
        made absolute unless make_absolute is False, in which case the last
        segment is stripped lexically ('.' when nothing remains).
        """
        if self.is_absolute():
            return self._new(self.flavour.dirname(self.text))
        if make_absolute:
            return self.to_absolute(context).parent()
        return self._new(self.flavour.dirname(self.text))

    def relative_to(self, base: Union[str, PathValue]) -> PathValue:
        """
        Return this path relative to base.

        Base must be valid and absolute. A relative path is returned
        unchanged.

        Raises:
            InvalidPathError: if base is not valid or not absolute
        """
        if not isinstance(base, PathValue):
            base = self._new(base)
        if not (base.is_valid() and base.is_absolute()):
            raise InvalidPathError(f"Base path must be valid and absolute: {base.text!r}")
        if not self.is_absolute():
            return self
        return self._new(self.flavour.relative(self.text, base.text))

    def is_inside(
        self, other: Union[str, PathValue], context: Optional[PathContext] = None
    ) -> bool:
        """Return True if this path is other or lies below it."""
        if not isinstance(other, PathValue):
            other = self._new(other)
        mine = list(self.to_absolute(context).segments())
        theirs = list(other.to_absolute(context).segments())
        if len(theirs) > len(mine):
            return False
        key = self.flavour.compare_key
        return all(key(a) == key(b) for a, b in zip(mine, theirs))

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def current(cls, context: Optional[PathContext] = None) -> PathValue:
        """Return the working directory as an absolute path."""
        return cls(".").to_absolute(context)

    @classmethod
    def temp_dir(cls) -> PathValue:
        """Return the system's temp directory."""
        return cls(tempfile.gettempdir())


class PosixPath(PathValue):
    """Path value with POSIX rules."""

    __slots__ = ()
    flavour = POSIX


class WindowsPath(PathValue):
    """Path value with drive-letter rules."""

    __slots__ = ()
    flavour = WINDOWS


Path = WindowsPath if current_flavour() is WINDOWS else PosixPath


def as_path(value: Union[str, PathValue]) -> PathValue:
    """Coerce text to a Path, leaving path values untouched."""
    if isinstance(value, PathValue):
        return value
    return Path(value)
