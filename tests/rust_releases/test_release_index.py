"""Ordering, deduplication and query behaviour of ``ReleaseIndex``."""

from __future__ import annotations

import random

import pytest
import semver
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from RustReleases.release import Release, ReleaseIndex

versions = st.builds(
    semver.Version,
    major=st.integers(min_value=0, max_value=3),
    minor=st.integers(min_value=0, max_value=60),
    patch=st.integers(min_value=0, max_value=3),
    prerelease=st.sampled_from([None, "alpha", "alpha.1", "beta", "beta.2", "rc.1"]),
)
releases = st.builds(Release, versions)


def _r(text: str) -> Release:
    return Release.parse(text)


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(st.lists(releases, max_size=40))
def test_from_releases_is_strictly_ascending(items):
    index = ReleaseIndex.from_releases(items)

    for lower, higher in zip(index.releases, index.releases[1:]):
        assert lower.version < higher.version
    assert set(index) == set(items)


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(st.lists(releases, min_size=1, max_size=20), st.integers(min_value=1, max_value=4))
def test_input_order_and_duplicates_do_not_matter(items, copies):
    shuffled = items * copies
    random.Random(0).shuffle(shuffled)

    assert ReleaseIndex.from_releases(shuffled) == ReleaseIndex.from_releases(items)


def test_prerelease_precedence():
    index = ReleaseIndex.from_releases(
        [_r("1.0.0"), _r("1.0.0-beta"), _r("1.0.0-alpha.1"), _r("1.0.0-alpha"), _r("0.12.0")]
    )

    assert [str(release) for release in index] == [
        "0.12.0",
        "1.0.0-alpha",
        "1.0.0-alpha.1",
        "1.0.0-beta",
        "1.0.0",
    ]


def test_numeric_not_lexicographic_ordering():
    index = ReleaseIndex([_r("1.9.0"), _r("1.10.0"), _r("1.2.0")])

    assert [str(release) for release in index] == ["1.2.0", "1.9.0", "1.10.0"]
    assert str(index.most_recent()) == "1.10.0"
    assert str(index.least_recent()) == "1.2.0"


def test_queries():
    index = ReleaseIndex.from_releases([_r("1.50.0"), _r("1.49.0"), _r("1.50.0")])

    assert len(index) == 2
    assert index[0] == _r("1.49.0")
    assert index[-1] == _r("1.50.0")
    assert index[:1] == (_r("1.49.0"),)
    assert "1.50.0" in index
    assert semver.Version.parse("1.49.0") in index
    assert _r("1.48.0") not in index
    assert index.contains_version("1.49.0")
    assert not index.contains_version("1.51.0")
    assert not index.contains_version("not-a-version")
    assert 1 not in index


def test_empty_index():
    index = ReleaseIndex.from_releases([])

    assert len(index) == 0
    assert index.most_recent() is None
    assert index.least_recent() is None
    with pytest.raises(IndexError):
        index[0]


def test_from_source_delegates_to_build_index():
    expected = ReleaseIndex([_r("1.0.0")])

    class StaticSource:
        def build_index(self) -> ReleaseIndex:
            return expected

    assert ReleaseIndex.from_source(StaticSource()) is expected


def test_release_parse_rejects_non_semver():
    with pytest.raises(ValueError):
        Release.parse("1.50")
