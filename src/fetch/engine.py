"""Concurrent fetch engine for resolved targets.

Each target is one GET streamed straight to ``destination/filename``. At most
``concurrency`` fetches are in flight; after the first failure no queued
target is started, running fetches drain, and that first failure is raised.
"""
from __future__ import annotations

import asyncio
import logging
import os
from typing import List, Optional, Sequence

import aiohttp

from constants import Constants
from common.errors import FetchError
from common.http_client import truncate
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from resolution.models import Target

logger = logging.getLogger(__name__)


def create_session(concurrency: int, timeout: Optional[float] = None) -> aiohttp.ClientSession:
    """Session sized to the worker pool.

    Only connect/read stalls time out; large artifacts may take longer than
    the per-request timeout overall.
    """
    seconds = Constants.REQUEST_TIMEOUT if timeout is None else timeout
    connector = aiohttp.TCPConnector(limit=concurrency, limit_per_host=concurrency)
    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=None, sock_connect=seconds, sock_read=seconds),
    )


def _discard_partial(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove partial file %s: %s", path, exc)


async def _read_error_body(response) -> str:
    try:
        return await response.text(errors="replace")
    except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError):
        return ""


async def fetch_target(session, target: Target, destination: str) -> int:
    """Download one target into ``destination``.

    Returns:
        Number of bytes written.

    Raises:
        FetchError: non-2xx status, transport failure or write failure. No
            file is left behind in any of these cases.
    """
    url = target.url
    dest = os.path.join(destination, target.filename)
    if is_debug_enabled(logger):
        logger.debug(
            "downloading %s -> %s",
            safe_url(url),
            dest,
            extra=extra_context(event="http_request", component="fetch", action="GET", target=safe_url(url)),
        )

    written = 0
    with Timer() as t:
        try:
            async with session.get(url) as response:
                status = response.status
                if not 200 <= status < 300:
                    body = await _read_error_body(response)
                    raise FetchError(target, f"HTTP {status}: {truncate(body)}", status=status)
                try:
                    with open(dest, "wb") as fh:
                        async for chunk in response.content.iter_chunked(Constants.DOWNLOAD_CHUNK_SIZE):
                            fh.write(chunk)
                            written += len(chunk)
                except (OSError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
                    _discard_partial(dest)
                    raise FetchError(target, f"writing {dest}: {exc}", status=status) from exc
                except asyncio.CancelledError:
                    _discard_partial(dest)
                    raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(target, str(exc) or exc.__class__.__name__) from exc

    logger.info(
        "downloaded %s (%d bytes)",
        target.filename,
        written,
        extra=extra_context(
            event="download",
            component="fetch",
            outcome="success",
            target=target.filename,
            duration_ms=t.duration_ms(),
        ),
    )
    return written


async def _fetch_pool(session, targets: Sequence[Target], destination: str, concurrency: int) -> None:
    semaphore = asyncio.Semaphore(concurrency)
    failures: List[FetchError] = []

    async def bounded_fetch(target: Target) -> None:
        async with semaphore:
            if failures:
                logger.debug("skipping %s after earlier failure", target.filename)
                return
            try:
                await fetch_target(session, target, destination)
            except FetchError as exc:
                logger.error("%s", exc)
                failures.append(exc)

    await asyncio.gather(*(bounded_fetch(t) for t in targets))
    if failures:
        raise failures[0]


async def fetch_all(
    targets: Sequence[Target],
    destination: str,
    concurrency: int = Constants.DEFAULT_CONCURRENCY,
    session=None,
) -> None:
    """Download every target with bounded parallelism.

    Args:
        targets: Resolved targets, each fetched exactly once.
        destination: Output directory; created if missing.
        concurrency: Maximum simultaneous fetches.
        session: Optional aiohttp-compatible session; one sized to
            ``concurrency`` is created and closed when omitted.

    Raises:
        ValueError: concurrency below 1.
        FetchError: the first target failure, after running fetches finish.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")
    try:
        os.makedirs(destination, exist_ok=True)
    except OSError as exc:
        raise FetchError(None, f"creating output dir {destination}: {exc}") from exc

    if not targets:
        return

    logger.info("Fetching %d file(s) into %s (concurrency %d)", len(targets), destination, concurrency)
    if session is not None:
        await _fetch_pool(session, targets, destination, concurrency)
        return
    async with create_session(concurrency) as owned:
        await _fetch_pool(owned, targets, destination, concurrency)
