"""Shared HTTP helpers used by the gallery client.

Encapsulates request/timeout/retry handling so the client itself only deals
with payloads. Every failure class (transport error, non-2xx status, JSON
decode error) is retried with exponential backoff; only the final failure is
raised to the caller.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

# Client errors that are still worth retrying when 4xx retries are disabled.
_RETRYABLE_CLIENT_STATUSES = {408, 429}


class HTTPStatusError(requests.HTTPError):
    """Non-2xx response, carrying the status code and a truncated body."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"HTTP {status_code}: {truncate(body)}")
        self.status_code = status_code


class RetryError(Exception):
    """All attempts failed; ``last_error`` is the final underlying failure."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(f"request failed after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def truncate(text: str, limit: Optional[int] = None) -> str:
    """Shorten ``text`` to ``limit`` characters, marking the cut with '...'."""
    limit = Constants.ERROR_BODY_LIMIT if limit is None else limit
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before the retry following zero-based ``attempt``."""
    return base_delay * (2 ** attempt)


def _is_retryable(exc: Exception, retry_client_errors: bool) -> bool:
    if retry_client_errors:
        return True
    if isinstance(exc, HTTPStatusError):
        status = exc.status_code
        return not (400 <= status < 500) or status in _RETRYABLE_CLIENT_STATUSES
    return True


def post_json(
    url: str,
    payload: Dict[str, Any],
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
) -> Any:
    """Single POST attempt returning the decoded JSON body.

    Raises:
        requests.RequestException: transport failure or non-2xx status.
        ValueError: body is not valid JSON.
    """
    res = requests.post(
        url,
        json=payload,
        headers=headers,
        timeout=Constants.REQUEST_TIMEOUT if timeout is None else timeout,
    )
    if not 200 <= res.status_code < 300:
        raise HTTPStatusError(res.status_code, res.text or "")
    return res.json()


def robust_post_json(
    url: str,
    payload: Dict[str, Any],
    *,
    context: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
    max_attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    retry_client_errors: Optional[bool] = None,
) -> Any:
    """POST with timeout and retries, returning decoded JSON.

    Args:
        url: Target URL.
        payload: JSON-serialisable request body.
        context: Human-readable tag for logs (e.g. the extension id).
        headers: Optional request headers.
        timeout: Per-attempt timeout; defaults to Constants.REQUEST_TIMEOUT.
        max_attempts: Defaults to Constants.HTTP_RETRY_MAX.
        base_delay: First backoff delay; doubles each attempt.
        retry_client_errors: Retry 4xx responses other than 408/429; defaults
            to Constants.HTTP_RETRY_CLIENT_ERRORS.

    Raises:
        RetryError: every attempt failed.
    """
    attempts = Constants.HTTP_RETRY_MAX if max_attempts is None else max(1, max_attempts)
    base = Constants.HTTP_RETRY_BASE_DELAY_SEC if base_delay is None else base_delay
    if retry_client_errors is None:
        retry_client_errors = Constants.HTTP_RETRY_CLIENT_ERRORS
    safe_target = safe_url(url)

    for attempt in range(attempts):
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="POST",
                            target=safe_target,
                            context=context,
                            attempt=attempt + 1,
                        ),
                    )
                data = post_json(url, payload, headers=headers, timeout=timeout)
            except (requests.RequestException, ValueError) as exc:
                final = attempt >= attempts - 1 or not _is_retryable(exc, retry_client_errors)
                if final:
                    logger.debug(
                        "HTTP request failed",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="POST",
                            outcome="exhausted",
                            target=safe_target,
                            attempt=attempt + 1,
                        ),
                    )
                    raise RetryError(attempt + 1, exc) from exc
                wait = backoff_delay(attempt, base)
                logger.debug(
                    "retry %d/%d for POST %s (%s): %s (waiting %.1fs)",
                    attempt + 1,
                    attempts,
                    safe_target,
                    context,
                    exc,
                    wait,
                )
                time.sleep(wait)
                continue

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response ok",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="POST",
                    outcome="success",
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context,
                ),
            )
        return data

    # attempts >= 1, so the loop always returns or raises
    raise AssertionError("unreachable")
