# treepath - filesystem path values and tree operations
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
In-memory filesystem.

MemoryFilesystem implements FilesystemAccess over a tree of nodes kept in
memory, with POSIX semantics: '/' separators, symlinks resolved component
by component, '..' taken physically after a followed link. It is meant
for tests and dry runs; it is not thread-safe.
"""

from __future__ import annotations

import errno
import os
from typing import Union

from treepath.filesystem import FilesystemAccess

MAX_SYMLINK_HOPS = 40


class _Dir:
    __slots__ = ("children",)

    def __init__(self):
        self.children: dict[str, _Node] = {}


class _File:
    __slots__ = ("data", "mode")

    def __init__(self, data: bytes = b"", mode: int = 0o644):
        self.data = data
        self.mode = mode


class _Link:
    __slots__ = ("target",)

    def __init__(self, target: str):
        self.target = target


_Node = Union[_Dir, _File, _Link]

# A chain is the list of (name, directory) pairs from the root down
_Chain = list[tuple[str, _Dir]]


def _error(cls, code: int, path: str) -> OSError:
    return cls(code, os.strerror(code), path)


class MemoryFilesystem(FilesystemAccess):
    """FilesystemAccess keeping every node in memory."""

    def __init__(self, cwd: str = "/"):
        self._root = _Dir()
        self._cwd = "/"
        if cwd != "/":
            self.create_dir(cwd, recursive=True)
            self.chdir(cwd)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    @staticmethod
    def _chain_text(chain: _Chain) -> str:
        return "/" + "/".join(name for name, _node in chain[1:])

    def _resolve(self, path: str, follow_last: bool = True, hops: int = 0):
        """
        Walk path and return (chain, name, node).

        chain holds the directories leading to the entry, name is the
        entry's name in chain[-1] ('' for the root) and node is None when
        the entry does not exist. Missing or non-directory intermediate
        components raise OSError.
        """
        if not path:
            raise _error(FileNotFoundError, errno.ENOENT, path)
        if path.startswith("/"):
            chain: _Chain = [("", self._root)]
        else:
            chain, name, node = self._resolve(self._cwd)
            chain = chain + ([(name, node)] if name else [])

        parts = [p for p in path.split("/") if p and p != "."]
        for i, part in enumerate(parts):
            last = i == len(parts) - 1
            if part == "..":
                if len(chain) > 1:
                    chain = chain[:-1]
                continue

            child = chain[-1][1].children.get(part)
            if child is None:
                if last:
                    return chain, part, None
                raise _error(FileNotFoundError, errno.ENOENT, path)

            if isinstance(child, _Link) and (follow_last or not last):
                if hops >= MAX_SYMLINK_HOPS:
                    raise _error(OSError, errno.ELOOP, path)
                target = child.target
                if not target.startswith("/"):
                    target = self._chain_text(chain).rstrip("/") + "/" + target
                link_chain, link_name, link_node = self._resolve(target, True, hops + 1)
                if last:
                    return link_chain, link_name, link_node
                if link_node is None:
                    raise _error(FileNotFoundError, errno.ENOENT, path)
                if not isinstance(link_node, _Dir):
                    raise _error(NotADirectoryError, errno.ENOTDIR, path)
                chain = link_chain + ([(link_name, link_node)] if link_name else [])
                continue

            if last:
                return chain, part, child
            if not isinstance(child, _Dir):
                raise _error(NotADirectoryError, errno.ENOTDIR, path)
            chain = chain + [(part, child)]

        # Path ended on the root, '.' or '..': the entry is chain[-1]
        if len(chain) == 1:
            return chain, "", self._root
        return chain[:-1], chain[-1][0], chain[-1][1]

    def _node(self, path: str, follow_last: bool = True):
        try:
            return self._resolve(path, follow_last)[2]
        except OSError:
            return None

    def _existing(self, path: str, follow_last: bool = True):
        chain, name, node = self._resolve(path, follow_last)
        if node is None:
            raise _error(FileNotFoundError, errno.ENOENT, path)
        return chain, name, node

    # -------------------------------------------------------------------------
    # Probes
    # -------------------------------------------------------------------------

    def exists(self, path: str) -> bool:
        return self._node(path) is not None

    def is_file(self, path: str) -> bool:
        return isinstance(self._node(path), _File)

    def is_dir(self, path: str) -> bool:
        return isinstance(self._node(path), _Dir)

    def is_symlink(self, path: str) -> bool:
        return isinstance(self._node(path, follow_last=False), _Link)

    def read_symlink(self, path: str) -> str:
        _chain, _name, node = self._existing(path, follow_last=False)
        if not isinstance(node, _Link):
            raise _error(OSError, errno.EINVAL, path)
        return node.target

    def size(self, path: str) -> int:
        _chain, _name, node = self._existing(path)
        if isinstance(node, _Dir):
            return 0
        return len(node.data)

    def list_dir(self, path: str) -> list[str]:
        _chain, _name, node = self._existing(path)
        if not isinstance(node, _Dir):
            raise _error(NotADirectoryError, errno.ENOTDIR, path)
        return list(node.children)

    def real_path(self, path: str) -> str:
        chain, name, _node = self._resolve(path)
        text = self._chain_text(chain)
        if not name:
            return text
        return text.rstrip("/") + "/" + name

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_dir(self, path: str, recursive: bool = False) -> None:
        if not recursive:
            chain, name, node = self._resolve(path, follow_last=False)
            if node is not None:
                raise _error(FileExistsError, errno.EEXIST, path)
            chain[-1][1].children[name] = _Dir()
            return

        prefix = "/" if path.startswith("/") else ""
        for part in (p for p in path.split("/") if p):
            prefix = f"{prefix}{part}" if prefix in ("", "/") else f"{prefix}/{part}"
            node = self._node(prefix)
            if node is None:
                self.create_dir(prefix)
            elif not isinstance(node, _Dir):
                raise _error(FileExistsError, errno.EEXIST, prefix)

    def copy_file(self, src: str, dst: str) -> None:
        _chain, _name, node = self._existing(src)
        if isinstance(node, _Dir):
            raise _error(IsADirectoryError, errno.EISDIR, src)
        chain, name, target = self._resolve(dst)
        if isinstance(target, _Dir):
            raise _error(IsADirectoryError, errno.EISDIR, dst)
        if isinstance(target, _File):
            target.data = node.data
        else:
            chain[-1][1].children[name] = _File(node.data, node.mode)

    def remove_file(self, path: str) -> None:
        chain, name, node = self._existing(path, follow_last=False)
        if isinstance(node, _Dir):
            raise _error(IsADirectoryError, errno.EISDIR, path)
        del chain[-1][1].children[name]

    def remove_tree(self, path: str) -> None:
        chain, name, node = self._existing(path, follow_last=False)
        if not isinstance(node, _Dir):
            raise _error(NotADirectoryError, errno.ENOTDIR, path)
        if not name:
            raise _error(OSError, errno.EBUSY, path)
        del chain[-1][1].children[name]

    def rename(self, src: str, dst: str) -> None:
        src_chain, src_name, node = self._existing(src, follow_last=False)
        if not src_name:
            raise _error(OSError, errno.EBUSY, src)
        dst_chain, dst_name, existing = self._resolve(dst, follow_last=False)
        if isinstance(node, _Dir) and any(d is node for _n, d in dst_chain):
            raise _error(OSError, errno.EINVAL, dst)
        if isinstance(existing, _Dir):
            if not isinstance(node, _Dir):
                raise _error(IsADirectoryError, errno.EISDIR, dst)
            if existing.children:
                raise _error(OSError, errno.ENOTEMPTY, dst)
        elif existing is not None and isinstance(node, _Dir):
            raise _error(NotADirectoryError, errno.ENOTDIR, dst)
        del src_chain[-1][1].children[src_name]
        dst_chain[-1][1].children[dst_name] = node

    def symlink(self, target: str, link: str) -> None:
        chain, name, node = self._resolve(link, follow_last=False)
        if node is not None:
            raise _error(FileExistsError, errno.EEXIST, link)
        chain[-1][1].children[name] = _Link(target)

    def getcwd(self) -> str:
        return self._cwd

    def chdir(self, path: str) -> None:
        _chain, _name, node = self._existing(path)
        if not isinstance(node, _Dir):
            raise _error(NotADirectoryError, errno.ENOTDIR, path)
        self._cwd = self.real_path(path)

    # -------------------------------------------------------------------------
    # Content helpers (not part of FilesystemAccess)
    # -------------------------------------------------------------------------

    def write_file(self, path: str, data: Union[bytes, str]) -> None:
        """Create or overwrite a file."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        chain, name, node = self._resolve(path)
        if isinstance(node, _Dir):
            raise _error(IsADirectoryError, errno.EISDIR, path)
        if isinstance(node, _File):
            node.data = data
        else:
            chain[-1][1].children[name] = _File(data)

    def read_file(self, path: str) -> bytes:
        _chain, _name, node = self._existing(path)
        if isinstance(node, _Dir):
            raise _error(IsADirectoryError, errno.EISDIR, path)
        return node.data
