"""Tests for shared HTTP helpers."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from common.http_client import (
    HTTPStatusError,
    RetryError,
    backoff_delay,
    post_json,
    robust_post_json,
    truncate,
)


class TestHelpers:
    """Pure helper functions."""

    def test_truncate(self):
        assert truncate("short") == "short"
        assert truncate("a" * 201) == "a" * 200 + "..."
        assert truncate("abcdef", 3) == "abc..."

    def test_backoff_doubles(self):
        assert [backoff_delay(n, 2.0) for n in range(3)] == [2.0, 4.0, 8.0]


class TestPostJson:
    """Single-attempt POST."""

    @patch("common.http_client.requests.post")
    def test_non_2xx_raises_status_error(self, mock_post):
        res = MagicMock(status_code=302, text="moved")
        mock_post.return_value = res

        with pytest.raises(HTTPStatusError) as excinfo:
            post_json("https://example.test/q", {"a": 1})

        assert excinfo.value.status_code == 302
        assert isinstance(excinfo.value, requests.RequestException)


class TestRobustPostJson:
    """Retrying POST."""

    @patch("common.http_client.time.sleep")
    @patch("common.http_client.requests.post")
    def test_single_attempt_no_sleep(self, mock_post, mock_sleep):
        mock_post.side_effect = requests.ConnectionError("down")

        with pytest.raises(RetryError) as excinfo:
            robust_post_json("https://example.test/q", {}, context="t", max_attempts=1)

        assert excinfo.value.attempts == 1
        mock_sleep.assert_not_called()

    @patch("common.http_client.time.sleep")
    @patch("common.http_client.requests.post")
    def test_only_last_failure_surfaced(self, mock_post, mock_sleep):
        mock_post.side_effect = [
            requests.ConnectionError("first"),
            requests.Timeout("second"),
        ]

        with pytest.raises(RetryError) as excinfo:
            robust_post_json("https://example.test/q", {}, context="t", max_attempts=2, base_delay=0)

        assert isinstance(excinfo.value.last_error, requests.Timeout)
        assert "second" in str(excinfo.value)
