"""
Pytest configuration for treepath tests.

Tree engine tests run against two sandboxes: a temporary directory on the
real filesystem, and an in-memory filesystem. Both expose the same helpers
for building trees and inspecting them afterwards.
"""

import os

import pytest

from treepath import Path, TreeEngine
from treepath.memfs import MemoryFilesystem
from treepath.util import set_debug_level, set_test_mode


class TreeTestEnv:
    """Test environment on the real filesystem."""

    kind = "os"

    def __init__(self, tmpdir):
        self.tmpdir = str(tmpdir)
        self.root = Path(self.tmpdir, "root")
        os.makedirs(str(self.root))
        self.engine = TreeEngine()

    def path(self, *parts):
        return self.root.join(*parts)

    def create_tree(self, files):
        """
        Create files below root.

        files: dict mapping relative paths to content (or None for directories)
        """
        for rel, content in files.items():
            if content is None:
                self.make_dir(rel)
            else:
                self.make_file(rel, content)

    def make_dir(self, rel):
        os.makedirs(str(self.path(rel)), exist_ok=True)

    def make_file(self, rel, content):
        full_path = str(self.path(rel))
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "w") as f:
            f.write(content)

    def make_link(self, rel, dest):
        os.symlink(dest, str(self.path(rel)))

    def read(self, rel):
        with open(str(self.path(rel)), "r") as f:
            return f.read()

    def get_state(self, rel="."):
        """
        Snapshot of a subtree as a dict of relative path to
        ('dir',), ('file', content) or ('link', target).
        """
        top = str(self.path(rel))
        state = {}
        for dir_path, dirs, files in os.walk(top, followlinks=False):
            for name in dirs + files:
                full_path = os.path.join(dir_path, name)
                key = os.path.relpath(full_path, top)
                if os.path.islink(full_path):
                    state[key] = ("link", os.readlink(full_path))
                elif os.path.isdir(full_path):
                    state[key] = ("dir",)
                else:
                    with open(full_path, "r") as fh:
                        state[key] = ("file", fh.read())
        return state


class MemoryTestEnv:
    """Test environment on an in-memory filesystem."""

    kind = "memory"

    def __init__(self):
        self.fs = MemoryFilesystem()
        self.root = Path("/sandbox/root")
        self.fs.create_dir(str(self.root), recursive=True)
        self.engine = TreeEngine(self.fs)

    def path(self, *parts):
        return self.root.join(*parts)

    def create_tree(self, files):
        for rel, content in files.items():
            if content is None:
                self.make_dir(rel)
            else:
                self.make_file(rel, content)

    def make_dir(self, rel):
        self.fs.create_dir(str(self.path(rel)), recursive=True)

    def make_file(self, rel, content):
        full_path = self.path(rel)
        self.fs.create_dir(str(full_path.parent()), recursive=True)
        self.fs.write_file(str(full_path), content)

    def make_link(self, rel, dest):
        self.fs.symlink(dest, str(self.path(rel)))

    def read(self, rel):
        return self.fs.read_file(str(self.path(rel))).decode("utf-8")

    def get_state(self, rel="."):
        top = self.path(rel).normalize()
        state = {}
        pending = [top]
        while pending:
            directory = pending.pop()
            for name in self.fs.list_dir(str(directory)):
                entry = directory.join(name)
                key = str(entry.relative_to(top))
                text = str(entry)
                if self.fs.is_symlink(text):
                    state[key] = ("link", self.fs.read_symlink(text))
                elif self.fs.is_dir(text):
                    state[key] = ("dir",)
                    pending.append(entry)
                else:
                    state[key] = ("file", self.fs.read_file(text).decode("utf-8"))
        return state


@pytest.fixture(autouse=True)
def quiet_debug():
    """Reset debug state between tests."""
    set_debug_level(0)
    set_test_mode(False)
    yield
    set_debug_level(0)
    set_test_mode(False)


@pytest.fixture(params=["os", "memory"])
def env(request, tmp_path, monkeypatch):
    """Sandbox on the real filesystem and on the in-memory one."""
    # Isolate from the user's home directory
    monkeypatch.setenv("HOME", str(tmp_path))
    if request.param == "os":
        return TreeTestEnv(tmp_path)
    return MemoryTestEnv()


@pytest.fixture
def os_env(tmp_path, monkeypatch):
    """Sandbox on the real filesystem only."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return TreeTestEnv(tmp_path)


def relative_names(paths, base):
    """Return sorted text of paths relative to base."""
    return sorted(str(p.relative_to(base)) for p in paths)
