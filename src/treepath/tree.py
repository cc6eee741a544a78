# treepath - filesystem path values and tree operations
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Tree operations - walk, glob, copy, remove, rename and upward search.

This module provides the public API for operations that combine the path
algebra with a live filesystem, as well as the TreeEngine class that
carries the filesystem, process context and configuration they run with.

None of the operations is transactional. When a copy or removal fails
halfway, the error of the failing step is raised and whatever was already
copied or removed stays that way.
"""

from __future__ import annotations

import dataclasses
from collections import deque
from typing import Iterator, Optional, Union

from treepath.filesystem import FilesystemAccess, OSFilesystem
from treepath.path import Path, PathValue, as_path
from treepath.types import (
    DestinationExistsError,
    InvalidPathError,
    NotADirectoryPathError,
    PathContext,
    PathError,
    PathNotFoundError,
    SearchResult,
    SourceNotFoundError,
    SymlinkPolicy,
    TreeConfig,
    WalkMode,
)
from treepath.util import debug, set_debug_level

PathLike = Union[str, PathValue]


# =============================================================================
# Public API
# =============================================================================


def walk(
    root: PathLike,
    mode: WalkMode = WalkMode.SHALLOW,
    follow_symlinks: Optional[bool] = None,
    pattern: Optional[str] = None,
    config: TreeConfig | None = None,
    **kwargs,
) -> Iterator[PathValue]:
    """Iterate over absolute paths found below root.

    Args:
        root: Directory to traverse
        mode: SHALLOW (direct children), DEPTH (children before their
              directory) or BREADTH (level by level)
        follow_symlinks: Descend into symlinked directories
                         (default from config)
        pattern: Glob applied to each path relative to root
        config: Optional TreeConfig
        **kwargs: Override config fields

    Returns:
        Lazy iterator of absolute paths; root itself is not included
    """
    return _engine(config, **kwargs).walk(root, mode, follow_symlinks, pattern)


def walk_depth(root: PathLike, follow_symlinks: Optional[bool] = None, **kwargs):
    """Shortcut for walk(root, WalkMode.DEPTH)."""
    return walk(root, WalkMode.DEPTH, follow_symlinks, **kwargs)


def walk_breadth(root: PathLike, follow_symlinks: Optional[bool] = None, **kwargs):
    """Shortcut for walk(root, WalkMode.BREADTH)."""
    return walk(root, WalkMode.BREADTH, follow_symlinks, **kwargs)


def glob(
    root: PathLike,
    pattern: str,
    mode: WalkMode = WalkMode.SHALLOW,
    follow_symlinks: Optional[bool] = None,
    config: TreeConfig | None = None,
    **kwargs,
) -> Iterator[PathValue]:
    """Iterate over paths below root whose path relative to root matches pattern."""
    return _engine(config, **kwargs).glob(root, pattern, mode, follow_symlinks)


def copy_file_to(
    src: PathLike,
    dest: PathLike,
    rewrite: bool = False,
    config: TreeConfig | None = None,
    **kwargs,
) -> None:
    """Copy a single file to dest (a new file path or an existing directory)."""
    _engine(config, **kwargs).copy_file_to(src, dest, rewrite)


def copy_to(
    src: PathLike, dest: PathLike, config: TreeConfig | None = None, **kwargs
) -> None:
    """Copy a file or a whole directory tree to dest."""
    _engine(config, **kwargs).copy_to(src, dest)


def remove(path: PathLike, config: TreeConfig | None = None, **kwargs) -> None:
    """Remove a file, a symlink, or a directory with everything inside."""
    _engine(config, **kwargs).remove(path)


def rename(
    src: PathLike, to: PathLike, config: TreeConfig | None = None, **kwargs
) -> None:
    """Rename src to a path that does not exist yet."""
    _engine(config, **kwargs).rename(src, to)


def search_file_up(
    start: PathLike, name: PathLike, config: TreeConfig | None = None, **kwargs
) -> SearchResult:
    """Search name in start and each of its parents."""
    return _engine(config, **kwargs).search_file_up(start, name)


def exists(path: PathLike) -> bool:
    return _engine(None).exists(path)


def is_file(path: PathLike) -> bool:
    return _engine(None).is_file(path)


def is_dir(path: PathLike) -> bool:
    return _engine(None).is_dir(path)


def is_symlink(path: PathLike) -> bool:
    return _engine(None).is_symlink(path)


def size(path: PathLike) -> int:
    return _engine(None).size(path)


def read_link(path: PathLike) -> PathValue:
    return _engine(None).read_link(path)


def real_path(path: PathLike) -> PathValue:
    return _engine(None).real_path(path)


def mkdir(path: PathLike, recursive: bool = False, **kwargs) -> None:
    _engine(None, **kwargs).mkdir(path, recursive)


def symlink(target: PathLike, link: PathLike, **kwargs) -> None:
    _engine(None, **kwargs).symlink(target, link)


def chdir(path: PathLike, *sub_path: PathLike) -> None:
    _engine(None).chdir(path, *sub_path)


def _make_config(config: TreeConfig | None, **kwargs) -> TreeConfig:
    """Create a TreeConfig from optional base config and overrides."""
    if config is None:
        return TreeConfig(**kwargs)
    elif kwargs:
        return dataclasses.replace(config, **kwargs)
    else:
        return config


def _engine(config: TreeConfig | None, **kwargs) -> TreeEngine:
    return TreeEngine(config=_make_config(config, **kwargs))


# =============================================================================
# Engine
# =============================================================================


class TreeEngine:
    """
    Runs tree operations against a FilesystemAccess.

    Every path argument may be text or a path value. It is home-expanded
    (and made absolute where the operation needs it) before the filesystem
    is consulted.
    """

    def __init__(
        self,
        fs: FilesystemAccess | None = None,
        context: PathContext | None = None,
        config: TreeConfig | None = None,
    ):
        self.fs = fs if fs is not None else OSFilesystem()
        self.c = config if config is not None else TreeConfig()
        if context is None:
            context = PathContext(getcwd=self.fs.getcwd, chdir=self.fs.chdir)
        self.context = context

        set_debug_level(self.c.verbose)

    # -------------------------------------------------------------------------
    # Argument preparation
    # -------------------------------------------------------------------------

    def _prepare(self, path: PathLike) -> PathValue:
        """Coerce to a path, expand home and check validity."""
        expanded = as_path(path).expand_home(self.context)
        if not expanded.is_valid():
            raise InvalidPathError(f"Invalid path: {str(path)!r}")
        return expanded

    def _absolute(self, path: PathLike) -> PathValue:
        return self._prepare(path).to_absolute(self.context)

    # -------------------------------------------------------------------------
    # Probes
    # -------------------------------------------------------------------------

    def exists(self, path: PathLike) -> bool:
        return self.fs.exists(str(self._prepare(path)))

    def is_file(self, path: PathLike) -> bool:
        return self.fs.is_file(str(self._prepare(path)))

    def is_dir(self, path: PathLike) -> bool:
        return self.fs.is_dir(str(self._prepare(path)))

    def is_symlink(self, path: PathLike) -> bool:
        return self.fs.is_symlink(str(self._prepare(path)))

    def read_link(self, path: PathLike) -> PathValue:
        """Return the target of a symlink, or the path itself if it is not one."""
        link = self._prepare(path)
        if not self.fs.is_symlink(str(link)):
            return link
        return as_path(self.fs.read_symlink(str(link)))

    def real_path(self, path: PathLike) -> PathValue:
        """Return the absolute path with all symlinks resolved."""
        return as_path(self.fs.real_path(str(self._absolute(path))))

    def size(self, path: PathLike) -> int:
        """Return the size of a file in bytes, following symlinks."""
        return self.fs.size(str(self._prepare(path)))

    def current(self) -> PathValue:
        return Path.current(self.context)

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def walk(
        self,
        root: PathLike,
        mode: WalkMode = WalkMode.SHALLOW,
        follow_symlinks: Optional[bool] = None,
        pattern: Optional[str] = None,
    ) -> Iterator[PathValue]:
        """Iterate over absolute paths found below root.

        Symlinks are yielded as themselves. They are descended into only
        when following symlinks, and never when they lead back to a
        directory already on the way down from root.
        """
        base = self._absolute(root)
        mode = WalkMode(mode)
        follow = self.c.follow_symlinks if follow_symlinks is None else follow_symlinks
        debug(3, 0, f"Walking {base} (mode={mode.value}, follow_symlinks={follow})")

        entries = self._walk_tree(base, mode, follow)
        if pattern is None:
            return entries
        debug(4, 1, f"filtering with pattern {pattern}")
        return (p for p in entries if p.relative_to(base).matches_glob(pattern))

    def glob(
        self,
        root: PathLike,
        pattern: str,
        mode: WalkMode = WalkMode.SHALLOW,
        follow_symlinks: Optional[bool] = None,
    ) -> Iterator[PathValue]:
        return self.walk(root, mode, follow_symlinks, pattern)

    def _walk_tree(
        self, base: PathValue, mode: WalkMode, follow: bool
    ) -> Iterator[PathValue]:
        match mode:
            case WalkMode.SHALLOW:
                yield from self._children(base)
            case WalkMode.DEPTH:
                yield from self._walk_depth(base, follow, self._chain_start(base, follow))
            case WalkMode.BREADTH:
                yield from self._walk_breadth(base, follow)

    def _walk_depth(
        self, directory: PathValue, follow: bool, ancestors: frozenset
    ) -> Iterator[PathValue]:
        for entry in self._children(directory):
            key = self._descend_key(entry, follow, ancestors)
            if key is not None:
                yield from self._walk_depth(entry, follow, ancestors | {key})
            yield entry

    def _walk_breadth(self, base: PathValue, follow: bool) -> Iterator[PathValue]:
        queue = deque([(base, self._chain_start(base, follow))])
        while queue:
            directory, ancestors = queue.popleft()
            for entry in self._children(directory):
                yield entry
                key = self._descend_key(entry, follow, ancestors)
                if key is not None:
                    queue.append((entry, ancestors | {key}))

    def _children(self, directory: PathValue) -> list[PathValue]:
        debug(3, 1, f"listing {directory}")
        return [directory.join(name) for name in self.fs.list_dir(str(directory))]

    def _chain_start(self, base: PathValue, follow: bool) -> frozenset:
        return frozenset({self.fs.real_path(str(base)) if follow else str(base)})

    def _descend_key(
        self, entry: PathValue, follow: bool, ancestors: frozenset
    ) -> Optional[str]:
        """Return the key to record for entry if the walk should enter it."""
        text = str(entry)
        if not self.fs.is_dir(text):
            return None
        if not follow:
            if self.fs.is_symlink(text):
                return None
            return text
        key = self.fs.real_path(text)
        if key in ancestors:
            debug(2, 1, f"Not descending into {entry}: leads back to {key}")
            return None
        return key

    # -------------------------------------------------------------------------
    # Copy
    # -------------------------------------------------------------------------

    def copy_file_to(self, src: PathLike, dest: PathLike, rewrite: bool = False) -> None:
        """Copy a single file.

        If dest is an existing directory, the file is copied inside it under
        its own name. If dest is an existing file it is overwritten only when
        rewrite is set.

        Raises:
            SourceNotFoundError: src does not exist
            DestinationExistsError: dest exists, is not a directory, and
                                    rewrite is not set
        """
        source = self._prepare(src)
        target = self._prepare(dest)

        if not self.fs.exists(str(source)):
            raise SourceNotFoundError(f"Cannot copy! Source file {source} does not exist!")

        if self.fs.exists(str(target)):
            if self.fs.is_dir(str(target)):
                if not source.base_name:
                    raise InvalidPathError(f"Cannot copy {source} into {target}: no base name")
                nested = target.join(source.base_name)
                debug(2, 1, f"--- {target} is a directory; copying to {nested}")
                self.copy_file_to(source, nested, rewrite)
                return
            if not rewrite:
                raise DestinationExistsError(
                    f"Cannot copy! Destination file {target} already exists!"
                )
            debug(2, 1, f"--- Overwriting {target}")

        debug(1, 0, f"COPY: {source} => {target}")
        self.fs.copy_file(str(source), str(target))

    def copy_to(self, src: PathLike, dest: PathLike) -> None:
        """Copy a file or directory tree.

        A file is handed to copy_file_to() without rewrite. For a directory:

        - dest exists and is not a directory: NotADirectoryPathError
        - dest exists and is a directory: the tree is copied to
          dest/<name of src>, which must not exist yet
        - dest does not exist: it is created and receives the tree

        Symlinks inside the tree are handled according to
        config.symlink_policy. There is no rollback: on failure the
        destination keeps whatever was copied before the failing step.
        """
        source = self._prepare(src)
        if not self.fs.is_dir(str(source)):
            self.copy_file_to(source, dest, rewrite=False)
            return

        src_root = source.to_absolute(self.context)
        dst_root = self._absolute(dest)
        if self.fs.exists(str(dst_root)):
            if not self.fs.is_dir(str(dst_root)):
                raise NotADirectoryPathError(
                    f"Cannot copy! Destination {dst_root} already exists "
                    "and it is not a directory!"
                )
            dst_root = dst_root.join(src_root.base_name)
            debug(2, 1, f"--- Destination exists; copying to {dst_root}")
            if self.fs.exists(str(dst_root)) or self.fs.is_symlink(str(dst_root)):
                raise DestinationExistsError(
                    f"Cannot copy! Destination {dst_root} already exists!"
                )

        resolved_src = as_path(self.fs.real_path(str(src_root)))
        resolved_dst = self._resolve_pending(dst_root)
        if resolved_dst.is_inside(resolved_src, self.context):
            raise InvalidPathError(f"Cannot copy {src_root} into itself: {dst_root}")

        debug(1, 0, f"MKDIR: {dst_root}")
        self.fs.create_dir(str(dst_root), recursive=True)

        policy = self.c.symlink_policy
        follow = policy is SymlinkPolicy.DEREFERENCE
        for entry in self.walk(src_root, WalkMode.BREADTH, follow_symlinks=follow):
            self._copy_entry(entry, dst_root.join(entry.relative_to(src_root)), policy)

    def _resolve_pending(self, path: PathValue) -> PathValue:
        """Resolve symlinks of the nearest existing ancestor of an absolute path."""
        missing = []
        current = path
        while not self.fs.exists(str(current)) and not current.is_root():
            missing.append(current.base_name)
            current = current.parent()
        resolved = as_path(self.fs.real_path(str(current)))
        debug(4, 1, f"{path} resolves to {resolved} + {list(reversed(missing))}")
        return resolved.join(*reversed(missing))

    def _copy_entry(self, entry: PathValue, target: PathValue, policy: SymlinkPolicy) -> None:
        text = str(entry)

        if self.fs.is_symlink(text):
            match policy:
                case SymlinkPolicy.SKIP:
                    debug(2, 1, f"--- Skipping symlink {entry}")
                    return
                case SymlinkPolicy.PRESERVE:
                    link_dest = self.fs.read_symlink(text)
                    debug(1, 0, f"LINK: {target} => {link_dest}")
                    self.fs.symlink(link_dest, str(target))
                    return
                case SymlinkPolicy.DEREFERENCE:
                    if not self.fs.exists(text):
                        raise SourceNotFoundError(
                            f"Cannot copy {entry}: symlink target "
                            f"{self.fs.read_symlink(text)} does not exist"
                        )

        if self.fs.is_dir(text):
            debug(1, 0, f"MKDIR: {target}")
            self.fs.create_dir(str(target), recursive=True)
        elif self.fs.is_file(text):
            debug(1, 0, f"COPY: {entry} => {target}")
            self.fs.copy_file(text, str(target))
        else:
            raise PathError(f"Cannot copy {entry}: it is not file nor directory")

    # -------------------------------------------------------------------------
    # Remove, rename, create
    # -------------------------------------------------------------------------

    def remove(self, path: PathLike) -> None:
        """Remove a file or symlink directly, or a directory recursively.

        A symlink is removed even when its target no longer exists. A
        symlink to a directory is removed without touching the directory.

        Raises:
            PathNotFoundError: path does not exist
        """
        target = self._prepare(path)
        text = str(target)

        if self.fs.is_symlink(text) or (
            self.fs.exists(text) and not self.fs.is_dir(text)
        ):
            debug(1, 0, f"UNLINK: {target}")
            self.fs.remove_file(text)
        elif self.fs.is_dir(text):
            if target.to_absolute(self.context).is_root():
                raise InvalidPathError(f"Refusing to remove root directory {target}")
            debug(1, 0, f"RMTREE: {target}")
            self.fs.remove_tree(text)
        else:
            raise PathNotFoundError(f"Cannot remove {target}: it does not exist")

    def rename(self, src: PathLike, to: PathLike) -> None:
        """Rename src; the destination must not exist.

        Moving across filesystems is not handled specially; the OS error
        propagates.
        """
        source = self._prepare(src)
        target = self._prepare(to)
        if not (self.fs.exists(str(source)) or self.fs.is_symlink(str(source))):
            raise SourceNotFoundError(f"Cannot rename! Source {source} does not exist!")
        if self.fs.exists(str(target)) or self.fs.is_symlink(str(target)):
            raise DestinationExistsError(f"Destination {target} already exists!")
        debug(1, 0, f"MV: {source} -> {target}")
        self.fs.rename(str(source), str(target))

    def mkdir(self, path: PathLike, recursive: bool = False) -> None:
        target = self._prepare(path)
        debug(1, 0, f"MKDIR: {target}")
        self.fs.create_dir(str(target), recursive)

    def symlink(self, target: PathLike, link: PathLike) -> None:
        """Create link pointing at target."""
        link_dest = self._prepare(target)
        link_path = self._prepare(link)
        debug(1, 0, f"LINK: {link_path} => {link_dest}")
        self.fs.symlink(str(link_dest), str(link_path))

    def chdir(self, path: PathLike, *sub_path: PathLike) -> None:
        """Change the working directory to path, or to sub_path inside it."""
        for sub in sub_path:
            sub = as_path(sub)
            if sub.is_absolute() or sub.text.startswith("~"):
                raise InvalidPathError(
                    f"sub_path must be relative and not start with '~': {sub}"
                )
        directory = self._prepare(path)
        if sub_path:
            directory = directory.join(*sub_path)
        self.context.chdir(str(directory))

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search_file_up(self, start: PathLike, name: PathLike) -> SearchResult:
        """Search name in start and each of its parents, up to the root.

        name may contain several segments ('conf/app.ini'). Returns an empty
        SearchResult when no such file exists on the way up.
        """
        current = self._absolute(start)
        debug(3, 0, f"Searching {name} upwards from {current}")

        while True:
            candidate = current.join(name)
            if self.fs.exists(str(candidate)) and self.fs.is_file(str(candidate)):
                debug(3, 1, f"found {candidate}")
                return SearchResult(candidate)
            if current.is_root():
                break
            parent = current.parent(context=self.context)
            if parent == current:
                break
            current = parent

        debug(3, 1, f"{name} not found")
        return SearchResult()
