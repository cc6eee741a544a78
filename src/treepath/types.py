# treepath - filesystem path values and tree operations
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Type definitions for treepath.

This module contains enums, dataclasses and exceptions that define the
core data structures used throughout treepath.
"""

from __future__ import annotations

import errno as errno_module
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from treepath.path import PathValue


class WalkMode(Enum):
    """Ways to traverse a directory tree."""

    SHALLOW = "shallow"
    DEPTH = "depth"
    BREADTH = "breadth"


class SymlinkPolicy(Enum):
    """What copy_to() does with symlinks found inside a source tree."""

    DEREFERENCE = "dereference"
    PRESERVE = "preserve"
    SKIP = "skip"


def _default_home(user: str) -> Optional[str]:
    """Resolve home directory of user ('' for the current user)."""
    shorthand = "~" + user
    expanded = os.path.expanduser(shorthand)
    if expanded == shorthand:
        return None
    return expanded


@dataclass(frozen=True)
class PathContext:
    """
    Process state consulted by the path algebra.

    Attributes:
        getcwd: Returns the current working directory
        chdir: Changes the current working directory
        home: Maps a user name ('' for current user) to a home directory,
              or None when it cannot be resolved
    """

    getcwd: Callable[[], str] = os.getcwd
    chdir: Callable[[str], None] = os.chdir
    home: Callable[[str], Optional[str]] = _default_home


DEFAULT_CONTEXT = PathContext()


def _default_verbosity() -> int:
    try:
        return int(os.environ.get("TREEPATH_VERBOSE", "0"))
    except ValueError:
        return 0


@dataclass(frozen=True)
class TreeConfig:
    """
    Configuration for a TreeEngine.

    Attributes:
        verbose: Verbosity level (0-5)
        symlink_policy: How copy_to() treats symlinks inside a source tree
        follow_symlinks: Default for walk() and glob()
    """

    verbose: int = field(default_factory=_default_verbosity)
    symlink_policy: SymlinkPolicy = SymlinkPolicy.DEREFERENCE
    follow_symlinks: bool = True


@dataclass(frozen=True)
class SearchResult:
    """
    Result of search_file_up().

    Either holds the path of the file that was found, or nothing.
    """

    path: Optional[PathValue] = None

    @property
    def is_found(self) -> bool:
        """Return True if a file was found."""
        return self.path is not None

    def get(self) -> PathValue:
        """Return the found path, raising PathNotFoundError when absent."""
        if self.path is None:
            raise PathNotFoundError("search result is empty")
        return self.path

    def __bool__(self) -> bool:
        return self.is_found


# =============================================================================
# Exceptions
# =============================================================================


class PathError(Exception):
    """Base exception for path and tree operations."""

    default_errno = errno_module.EIO

    def __init__(self, message: str, errno: int | None = None):
        super().__init__(message)
        self.message = message
        self.errno = self.default_errno if errno is None else errno


class InvalidPathError(PathError):
    """Empty or syntactically invalid path used where a valid one is required."""

    default_errno = errno_module.EINVAL


class PathNotFoundError(PathError):
    """Target of an operation does not exist."""

    default_errno = errno_module.ENOENT


class SourceNotFoundError(PathNotFoundError):
    """Source of a copy or rename does not exist."""


class DestinationExistsError(PathError):
    """Copy or rename refused to clobber an existing destination."""

    default_errno = errno_module.EEXIST


class NotADirectoryPathError(PathError):
    """Copy destination exists and is not a directory."""

    default_errno = errno_module.ENOTDIR
