# treepath - filesystem path values and tree operations
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Filesystem access used by the tree engine.

The tree engine never calls os functions directly; it goes through a
FilesystemAccess object. OSFilesystem talks to the real operating system,
and treepath.memfs.MemoryFilesystem keeps a tree in memory.

All methods take plain text paths that have already been home-expanded.
Errors are raised as OSError (or a subclass) and are not translated here.
"""

from __future__ import annotations

import errno
import os
import shutil
import stat
from abc import ABC, abstractmethod

from treepath.util import debug


class FilesystemAccess(ABC):
    """Capabilities the tree engine needs from a filesystem."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if path exists, following symlinks."""

    @abstractmethod
    def is_file(self, path: str) -> bool:
        """Check if path is a regular file, following symlinks."""

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        """Check if path is a directory, following symlinks."""

    @abstractmethod
    def is_symlink(self, path: str) -> bool:
        """Check if path itself is a symlink. Must not fail on broken links."""

    @abstractmethod
    def read_symlink(self, path: str) -> str:
        """Return the target text of a symlink."""

    @abstractmethod
    def size(self, path: str) -> int:
        """Return the size in bytes of a file, following symlinks."""

    @abstractmethod
    def list_dir(self, path: str) -> list[str]:
        """Return names of direct children, in no particular order."""

    @abstractmethod
    def create_dir(self, path: str, recursive: bool = False) -> None:
        pass

    @abstractmethod
    def copy_file(self, src: str, dst: str) -> None:
        """Copy file content of src (following symlinks) to dst."""

    @abstractmethod
    def remove_file(self, path: str) -> None:
        """Remove a file or symlink (not its target)."""

    @abstractmethod
    def remove_tree(self, path: str) -> None:
        """Remove a directory and everything below it."""

    @abstractmethod
    def rename(self, src: str, dst: str) -> None:
        pass

    @abstractmethod
    def symlink(self, target: str, link: str) -> None:
        """Create link pointing to target."""

    @abstractmethod
    def real_path(self, path: str) -> str:
        """Return path with every symlink resolved."""

    @abstractmethod
    def getcwd(self) -> str:
        pass

    @abstractmethod
    def chdir(self, path: str) -> None:
        pass


class OSFilesystem(FilesystemAccess):
    """FilesystemAccess backed by the os module."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_symlink(self, path: str) -> bool:
        # lstat only, so a dangling link is still reported as a link
        try:
            st = os.lstat(path)
        except OSError:
            return False
        return stat.S_ISLNK(st.st_mode)

    def read_symlink(self, path: str) -> str:
        return os.readlink(path)

    def size(self, path: str) -> int:
        return os.path.getsize(path)

    def list_dir(self, path: str) -> list[str]:
        with os.scandir(path) as entries:
            return [entry.name for entry in entries]

    def create_dir(self, path: str, recursive: bool = False) -> None:
        if recursive:
            os.makedirs(path, exist_ok=True)
        else:
            os.mkdir(path, 0o777)

    def copy_file(self, src: str, dst: str) -> None:
        shutil.copyfile(src, dst)
        shutil.copymode(src, dst)

    def remove_file(self, path: str) -> None:
        # lstat before unlink so a real directory is not mistaken for a file
        st = os.lstat(path)
        if stat.S_ISDIR(st.st_mode):
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), path)
        os.unlink(path)

    def remove_tree(self, path: str) -> None:
        shutil.rmtree(path)

    def rename(self, src: str, dst: str) -> None:
        os.rename(src, dst)

    def symlink(self, target: str, link: str) -> None:
        os.symlink(target, link)

    def real_path(self, path: str) -> str:
        return os.path.realpath(path)

    def getcwd(self) -> str:
        return os.getcwd()

    def chdir(self, path: str) -> None:
        os.chdir(path)
        debug(3, 0, f"cwd now {path}")
