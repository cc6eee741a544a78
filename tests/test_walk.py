"""
Tests for walk() and glob() on both filesystems.

Listing order inside a directory is unspecified, so results are compared
as sorted relative names, with ordering checks per traversal mode.
"""

import pytest

from treepath import InvalidPathError, WalkMode
from treepath.util import set_debug_level, set_test_mode

from conftest import relative_names

TREE = {
    "test1.py": "1",
    "test2.txt": "2",
    "d1/test3.py": "3",
    "d1/readme.md": "r",
    "d2/test4.py": "4",
    "d2/sub/test5.py": "5",
    "empty": None,
}

ALL = [
    "d1",
    "d1/readme.md",
    "d1/test3.py",
    "d2",
    "d2/sub",
    "d2/sub/test5.py",
    "d2/test4.py",
    "empty",
    "test1.py",
    "test2.txt",
]


@pytest.fixture
def tree(env):
    env.create_tree(TREE)
    return env


def depth(rel):
    return len(rel.split("/"))


class TestModes:
    def test_shallow(self, tree):
        found = list(tree.engine.walk(tree.root))
        assert relative_names(found, tree.root) == ["d1", "d2", "empty", "test1.py", "test2.txt"]

    def test_results_are_absolute(self, tree):
        for p in tree.engine.walk(tree.root, WalkMode.BREADTH):
            assert p.is_absolute()

    def test_root_not_included(self, tree):
        found = list(tree.engine.walk(tree.root, WalkMode.DEPTH))
        assert tree.root not in found

    def test_depth_is_post_order(self, tree):
        found = [str(p.relative_to(tree.root)) for p in tree.engine.walk(tree.root, WalkMode.DEPTH)]
        assert sorted(found) == ALL
        for i, rel in enumerate(found):
            for later in found[i + 1 :]:
                assert not later.startswith(rel + "/"), f"{later} listed after {rel}"

    def test_breadth_is_level_order(self, tree):
        found = [
            str(p.relative_to(tree.root)) for p in tree.engine.walk(tree.root, WalkMode.BREADTH)
        ]
        assert sorted(found) == ALL
        depths = [depth(rel) for rel in found]
        assert depths == sorted(depths)

    def test_mode_by_value(self, tree):
        found = list(tree.engine.walk(tree.root, "breadth"))
        assert relative_names(found, tree.root) == ALL

    def test_empty_directory(self, tree):
        assert list(tree.engine.walk(tree.path("empty"), WalkMode.DEPTH)) == []

    def test_restartable_by_calling_again(self, tree):
        first = relative_names(tree.engine.walk(tree.root, WalkMode.DEPTH), tree.root)
        second = relative_names(tree.engine.walk(tree.root, WalkMode.DEPTH), tree.root)
        assert first == second == ALL


class TestErrors:
    def test_invalid_root(self, env):
        with pytest.raises(InvalidPathError):
            env.engine.walk("")

    def test_missing_root_raises_os_error(self, env):
        with pytest.raises(FileNotFoundError):
            list(env.engine.walk(env.path("missing")))

    def test_walking_a_file(self, tree):
        with pytest.raises(NotADirectoryError):
            list(tree.engine.walk(tree.path("test1.py")))


class TestGlob:
    def test_shallow_glob(self, tree):
        found = tree.engine.glob(tree.root, "*.py")
        assert relative_names(found, tree.root) == ["test1.py"]

    def test_breadth_glob(self, tree):
        found = tree.engine.glob(tree.root, "*.py", WalkMode.BREADTH)
        assert relative_names(found, tree.root) == [
            "d1/test3.py",
            "d2/sub/test5.py",
            "d2/test4.py",
            "test1.py",
        ]

    def test_glob_on_relative_path(self, tree):
        found = tree.engine.glob(tree.root, "d*/*.py", WalkMode.BREADTH)
        assert relative_names(found, tree.root) == [
            "d1/test3.py",
            "d2/sub/test5.py",
            "d2/test4.py",
        ]

    def test_brace_alternatives(self, tree):
        found = tree.engine.glob(tree.root, "*.{txt,md}", WalkMode.DEPTH)
        assert relative_names(found, tree.root) == ["d1/readme.md", "test2.txt"]

    def test_walk_with_pattern(self, tree):
        found = tree.engine.walk(tree.root, WalkMode.DEPTH, pattern="d2*")
        assert relative_names(found, tree.root) == ["d2", "d2/sub", "d2/sub/test5.py", "d2/test4.py"]

    def test_no_match(self, tree):
        assert list(tree.engine.glob(tree.root, "*.rs", WalkMode.BREADTH)) == []


class TestSymlinks:
    @pytest.fixture
    def linked(self, tree):
        tree.make_link("d1/to-d2", "../d2")
        return tree

    def test_link_yielded_as_itself(self, linked):
        found = relative_names(linked.engine.walk(linked.path("d1")), linked.path("d1"))
        assert found == ["readme.md", "test3.py", "to-d2"]

    def test_follow(self, linked):
        found = linked.engine.walk(linked.path("d1"), WalkMode.BREADTH, follow_symlinks=True)
        assert relative_names(found, linked.path("d1")) == [
            "readme.md",
            "test3.py",
            "to-d2",
            "to-d2/sub",
            "to-d2/sub/test5.py",
            "to-d2/test4.py",
        ]

    def test_no_follow(self, linked):
        found = linked.engine.walk(linked.path("d1"), WalkMode.DEPTH, follow_symlinks=False)
        assert relative_names(found, linked.path("d1")) == ["readme.md", "test3.py", "to-d2"]

    @pytest.mark.parametrize("mode", [WalkMode.DEPTH, WalkMode.BREADTH])
    def test_cycle_is_not_reentered(self, tree, mode):
        tree.make_link("d1/back", str(tree.root))
        found = relative_names(tree.engine.walk(tree.root, mode), tree.root)
        assert found == sorted(ALL + ["d1/back"])

    def test_cycle_guard_is_traced(self, tree, capsys):
        tree.make_link("d1/back", str(tree.root))
        set_test_mode(True)
        set_debug_level(2)
        list(tree.engine.walk(tree.root, WalkMode.DEPTH))
        out = capsys.readouterr().out
        assert "Not descending into" in out
        assert "back" in out

    def test_broken_link_is_listed(self, tree):
        tree.make_link("dangling", "nowhere")
        found = relative_names(tree.engine.walk(tree.root, WalkMode.BREADTH), tree.root)
        assert "dangling" in found
