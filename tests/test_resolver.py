"""Tests for target resolution."""

from unittest.mock import MagicMock

import pytest

from common.errors import NotFoundError, QueryError
from resolution.models import ExtensionRequest, QueryResult, Target, VersionEntry
from resolution.policy import FallbackPolicy
from resolution.resolver import resolve, resolve_targets


def make_result(*entries, identifier="pub.ext"):
    """Build a QueryResult from (version, platform) pairs."""
    return QueryResult(
        identifier=identifier,
        versions=[VersionEntry(version=v, target_platform=p) for v, p in entries],
    )


class TestResolvePinned:
    """Case A: pinned requests."""

    def test_single_universal_entry(self):
        req = ExtensionRequest("pub.ext", version="1.2.0")
        result = make_result(("1.3.0", None), ("1.2.0", None), ("1.1.0", None))

        targets = resolve(req, result)

        assert targets == [Target("pub.ext", "1.2.0")]
        assert targets[0].platform is None

    def test_requested_platforms_among_unrelated_entries(self):
        req = ExtensionRequest("pub.ext", version="2.0.0", platforms=("linux-x64", "darwin-arm64"))
        result = make_result(
            ("2.1.0", "linux-x64"),
            ("2.0.0", "win32-x64"),
            ("2.0.0", "linux-x64"),
            ("2.0.0", "darwin-arm64"),
            ("2.0.0", "alpine-x64"),
            ("1.9.0", "darwin-arm64"),
        )

        targets = resolve(req, result)

        assert len(targets) == 2
        assert {t.platform for t in targets} == {"linux-x64", "darwin-arm64"}
        assert all(t.version == "2.0.0" for t in targets)

    def test_universal_fallback_when_only_universal_build(self):
        req = ExtensionRequest("pub.ext", version="1.0.0", platforms=("linux-x64",))
        result = make_result(("1.0.0", None))

        targets = resolve(req, result)

        assert targets == [Target("pub.ext", "1.0.0")]

    def test_ignores_platform_builds_without_requested_platforms(self):
        req = ExtensionRequest("pub.ext", version="1.0.0")
        result = make_result(("1.0.0", "linux-x64"), ("1.0.0", None))

        assert resolve(req, result) == [Target("pub.ext", "1.0.0")]

    def test_unlisted_pin_attempts_direct_download(self):
        req = ExtensionRequest("pub.ext", version="0.0.1")
        result = make_result(("1.0.0", None))

        targets = resolve(req, result)

        assert targets == [Target("pub.ext", "0.0.1")]
        assert targets[0].request is req

    def test_unlisted_pin_against_empty_result(self):
        req = ExtensionRequest("pub.ext", version="0.0.1")
        assert resolve(req, make_result()) == [Target("pub.ext", "0.0.1")]

    def test_strict_platforms_produces_nothing(self):
        req = ExtensionRequest("pub.ext", version="1.0.0", platforms=("linux-x64",))
        result = make_result(("1.0.0", None))
        policy = FallbackPolicy(assume_universal=False)

        assert resolve(req, result, policy) == []

    def test_require_listed_skips_unlisted_pin(self):
        req = ExtensionRequest("pub.ext", version="0.0.1")
        policy = FallbackPolicy(attempt_unlisted=False)

        assert resolve(req, make_result(("1.0.0", None)), policy) == []


class TestResolveLatest:
    """Case B: unpinned requests."""

    def test_takes_first_entry_without_platforms(self):
        req = ExtensionRequest("pub.ext")
        result = make_result(("3.0.0", "linux-x64"), ("3.0.0", None), ("2.0.0", None))

        targets = resolve(req, result)

        assert targets == [Target("pub.ext", "3.0.0", "linux-x64")]

    def test_first_match_per_requested_platform(self):
        req = ExtensionRequest("pub.ext", platforms=("darwin-arm64", "linux-x64"))
        result = make_result(
            ("3.0.0", "linux-x64"),
            ("3.0.0", "win32-x64"),
            ("2.9.0", "darwin-arm64"),
            ("2.8.0", "darwin-arm64"),
            ("2.8.0", "linux-x64"),
        )

        targets = resolve(req, result)

        assert targets == [
            Target("pub.ext", "2.9.0", "darwin-arm64"),
            Target("pub.ext", "3.0.0", "linux-x64"),
        ]

    def test_unmatched_platform_is_skipped(self):
        req = ExtensionRequest("pub.ext", platforms=("linux-x64", "web"))
        result = make_result(("1.0.0", "linux-x64"))

        assert resolve(req, result) == [Target("pub.ext", "1.0.0", "linux-x64")]

    def test_universal_fallback_uses_newest_version(self):
        req = ExtensionRequest("pub.ext", platforms=("linux-arm64", "darwin-x64"))
        result = make_result(("5.0.0", None), ("4.0.0", "win32-x64"))

        targets = resolve(req, result)

        assert targets == [Target("pub.ext", "5.0.0")]
        assert targets[0].platform is None

    def test_empty_result_produces_no_targets(self):
        req = ExtensionRequest("pub.ext", platforms=("linux-x64",))
        assert resolve(req, make_result()) == []
        assert resolve(ExtensionRequest("pub.ext"), make_result()) == []

    def test_strict_platforms_disables_latest_fallback(self):
        req = ExtensionRequest("pub.ext", platforms=("linux-x64",))
        policy = FallbackPolicy(assume_universal=False)

        assert resolve(req, make_result(("1.0.0", None)), policy) == []

    def test_duplicate_requested_platforms_resolve_once(self):
        req = ExtensionRequest("pub.ext", platforms=("linux-x64", " linux-x64"))
        result = make_result(("1.0.0", "linux-x64"))

        assert resolve(req, result) == [Target("pub.ext", "1.0.0", "linux-x64")]


class TestResolveTargets:
    """Tests for the query-then-resolve loop."""

    def test_queries_each_request_with_history_flag(self):
        client = MagicMock()
        client.query.side_effect = [
            make_result(("2.0.0", None), identifier="a.one"),
            make_result(("1.0.0", None), ("0.9.0", None), identifier="b.two"),
        ]
        requests = [ExtensionRequest("a.one"), ExtensionRequest("b.two", version="0.9.0")]

        targets = resolve_targets(client, requests)

        assert [t.filename for t in targets] == ["a.one-2.0.0.vsix", "b.two-0.9.0.vsix"]
        client.query.assert_any_call("a.one", want_all_versions=False)
        client.query.assert_any_call("b.two", want_all_versions=True)

    def test_failure_aborts_without_partial_result(self):
        client = MagicMock()
        client.query.side_effect = [
            make_result(("2.0.0", None), identifier="a.one"),
            NotFoundError("b.two"),
            make_result(("1.0.0", None), identifier="c.three"),
        ]
        requests = [ExtensionRequest("a.one"), ExtensionRequest("b.two"), ExtensionRequest("c.three")]

        with pytest.raises(NotFoundError):
            resolve_targets(client, requests)
        assert client.query.call_count == 2

    def test_query_error_propagates(self):
        client = MagicMock()
        client.query.side_effect = QueryError("a.one", "HTTP 503: busy", attempts=3)

        with pytest.raises(QueryError) as excinfo:
            resolve_targets(client, [ExtensionRequest("a.one")])
        assert excinfo.value.attempts == 3
