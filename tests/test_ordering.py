"""Tests for version ordering strategies."""

import pytest

from gallery.ordering import SemverOrdering, ServerOrdering, get_ordering
from resolution.models import VersionEntry


class TestServerOrdering:
    """ServerOrdering keeps the gallery's order."""

    def test_keeps_order(self):
        versions = [VersionEntry("1.0.0"), VersionEntry("3.0.0"), VersionEntry("2.0.0")]
        assert ServerOrdering().order(versions) == versions


class TestSemverOrdering:
    """SemverOrdering sorts newest first."""

    def test_sorts_descending(self):
        versions = [VersionEntry("1.2.0"), VersionEntry("1.10.0"), VersionEntry("1.9.3")]
        ordered = SemverOrdering().order(versions)
        assert [v.version for v in ordered] == ["1.10.0", "1.9.3", "1.2.0"]

    def test_stable_for_shared_versions(self):
        versions = [
            VersionEntry("1.0.0", "linux-x64"),
            VersionEntry("2.0.0", "win32-x64"),
            VersionEntry("1.0.0", "darwin-arm64"),
            VersionEntry("2.0.0", "linux-x64"),
        ]
        ordered = SemverOrdering().order(versions)
        assert ordered == [
            VersionEntry("2.0.0", "win32-x64"),
            VersionEntry("2.0.0", "linux-x64"),
            VersionEntry("1.0.0", "linux-x64"),
            VersionEntry("1.0.0", "darwin-arm64"),
        ]

    def test_unparseable_versions_last(self):
        versions = [VersionEntry("nightly"), VersionEntry("0.1.0"), VersionEntry("2")]
        ordered = SemverOrdering().order(versions)
        assert [v.version for v in ordered] == ["2", "0.1.0", "nightly"]


class TestGetOrdering:
    """Lookup by CLI name."""

    def test_known_names(self):
        assert isinstance(get_ordering("server"), ServerOrdering)
        assert isinstance(get_ordering("semver"), SemverOrdering)

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            get_ordering("random")
