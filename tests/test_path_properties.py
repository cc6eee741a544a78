"""
Property-based tests for the path algebra.

Random paths are built from a small alphabet so that collisions between
segments (and therefore common prefixes) are frequent.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from treepath import PosixPath, WindowsPath

NAMES = st.text(alphabet="abAB_-", min_size=1, max_size=4)
SEGMENTS = st.one_of(NAMES, NAMES, NAMES, st.just("."), st.just(".."))


@st.composite
def posix_texts(draw, allow_dots=True):
    parts = draw(st.lists(SEGMENTS if allow_dots else NAMES, max_size=6))
    separators = draw(
        st.lists(st.sampled_from(["/", "//"]), min_size=len(parts), max_size=len(parts))
    )
    lead = "/" if draw(st.booleans()) else ""
    text = lead + "".join(p + s for p, s in zip(parts, separators))
    if draw(st.booleans()):
        text = text.rstrip("/")
    return text or "."


@st.composite
def clean_absolute(draw):
    parts = draw(st.lists(NAMES, max_size=5))
    return PosixPath("/", *parts) if parts else PosixPath("/")


@settings(max_examples=200)
@given(posix_texts())
def test_normalize_is_idempotent(text):
    once = PosixPath(text).normalize()
    assert once.normalize() == once


@settings(max_examples=200)
@given(posix_texts())
def test_normalize_keeps_absoluteness(text):
    assert PosixPath(text).normalize().is_absolute() == PosixPath(text).is_absolute()


@settings(max_examples=200)
@given(clean_absolute(), st.lists(NAMES, max_size=4))
def test_relative_to_prefix_round_trips(base, tail):
    path = base.join(*tail)
    rel = path.relative_to(base)
    assert not rel.is_absolute()
    assert base.join(rel) == path


@settings(max_examples=200)
@given(clean_absolute(), clean_absolute())
def test_relative_to_any_base_round_trips(path, base):
    rel = path.relative_to(base)
    assert base.join(rel).normalize() == path


@given(st.lists(NAMES, min_size=1, max_size=5))
def test_join_of_clean_segments(parts):
    assert PosixPath(*parts).text == "/".join(parts)


@given(clean_absolute())
def test_parent_reaches_root(path):
    current = path
    for _ in range(len(list(path.segments()))):
        current = current.parent()
    assert current.is_root()
    assert current.parent() == current


@given(st.sampled_from(["C:\\", "z:/", "\\\\srv\\share\\"]))
def test_windows_root_is_parent_fixed_point(text):
    root = WindowsPath(text)
    assert root.parent() == root


@given(posix_texts(), posix_texts(), posix_texts())
def test_ordering_is_total_and_transitive(a, b, c):
    x, y, z = PosixPath(a), PosixPath(b), PosixPath(c)
    assert sum([x < y, x == y, x > y]) == 1
    if x <= y and y <= z:
        assert x <= z


WINDOWS_TEXTS = st.text(alphabet="aAbB\\/", max_size=8)


@given(WINDOWS_TEXTS, WINDOWS_TEXTS)
def test_windows_hash_consistent_with_equality(a, b):
    x, y = WindowsPath(a), WindowsPath(b)
    if x == y:
        assert hash(x) == hash(y)
    assert (x == y) == (x.text.lower().replace("/", "\\") == y.text.lower().replace("/", "\\"))


@given(WINDOWS_TEXTS, WINDOWS_TEXTS)
def test_windows_ordering_antisymmetric(a, b):
    x, y = WindowsPath(a), WindowsPath(b)
    if x <= y and y <= x:
        assert x == y
