# treepath - filesystem path values and tree operations
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
treepath - immutable filesystem paths and recursive tree operations

This package provides an immutable path value with a pure path algebra,
and tree operations (walk, glob, copy, remove, upward search) that run
against a pluggable filesystem.

Basic usage::

    from treepath import Path, copy_to, search_file_up, walk_breadth

    root = Path("~", "projects", "demo")
    print(root.join("src", "main.py").parent(make_absolute=False))

    # Copy a tree; an existing destination directory receives demo/ inside it
    copy_to(root, "/tmp/backup")

    # Find the closest configuration file above the working directory
    result = search_file_up(Path.current(), "setup.cfg")
    if result:
        print("Config:", result.path)

    for p in walk_breadth(root, pattern="*.py"):
        print(p)

With an in-memory filesystem::

    from treepath import TreeEngine
    from treepath.memfs import MemoryFilesystem

    fs = MemoryFilesystem()
    engine = TreeEngine(fs)
    engine.mkdir("/data/raw", recursive=True)
    print(list(engine.walk("/data", "breadth")))
"""

from treepath.path import Path, PathValue, PosixPath, WindowsPath, PathSegments, as_path
from treepath.flavour import Flavour, PosixFlavour, WindowsFlavour, current_flavour
from treepath.filesystem import FilesystemAccess, OSFilesystem
from treepath.tree import (
    TreeEngine,
    walk,
    walk_depth,
    walk_breadth,
    glob,
    copy_file_to,
    copy_to,
    remove,
    rename,
    search_file_up,
    exists,
    is_file,
    is_dir,
    is_symlink,
    size,
    read_link,
    real_path,
    mkdir,
    symlink,
    chdir,
)
from treepath.types import (
    WalkMode,
    SymlinkPolicy,
    PathContext,
    TreeConfig,
    SearchResult,
    PathError,
    InvalidPathError,
    PathNotFoundError,
    SourceNotFoundError,
    DestinationExistsError,
    NotADirectoryPathError,
)
from treepath.util import VERSION as __version__

__all__ = [
    "Path",
    "PathValue",
    "PosixPath",
    "WindowsPath",
    "PathSegments",
    "as_path",
    "Flavour",
    "PosixFlavour",
    "WindowsFlavour",
    "current_flavour",
    "FilesystemAccess",
    "OSFilesystem",
    "TreeEngine",
    "walk",
    "walk_depth",
    "walk_breadth",
    "glob",
    "copy_file_to",
    "copy_to",
    "remove",
    "rename",
    "search_file_up",
    "exists",
    "is_file",
    "is_dir",
    "is_symlink",
    "size",
    "read_link",
    "real_path",
    "mkdir",
    "symlink",
    "chdir",
    "WalkMode",
    "SymlinkPolicy",
    "PathContext",
    "TreeConfig",
    "SearchResult",
    "PathError",
    "InvalidPathError",
    "PathNotFoundError",
    "SourceNotFoundError",
    "DestinationExistsError",
    "NotADirectoryPathError",
    "__version__",
]
