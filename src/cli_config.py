"""CLI configuration overrides for runtime tunables.

Applies CLI values onto Constants with highest precedence, and builds the
resolver policy and gallery client the CLI options describe.
"""

from __future__ import annotations

import logging

from constants import Constants
from gallery import GalleryClient, get_ordering
from resolution import FallbackPolicy

logger = logging.getLogger(__name__)


def apply_cli_overrides(args) -> None:
    """Apply CLI overrides for gallery endpoints and HTTP tunables."""
    gallery_url = getattr(args, "GALLERY_URL", None)
    if gallery_url:
        host = gallery_url.rstrip("/")
        Constants.GALLERY_HOST = host
        Constants.GALLERY_QUERY_URL = host + "/_apis/public/gallery/extensionquery"
        logger.debug("Gallery host overridden: %s", host)
    if getattr(args, "TIMEOUT", None) is not None:
        Constants.REQUEST_TIMEOUT = float(args.TIMEOUT)
    if getattr(args, "RETRIES", None) is not None:
        Constants.HTTP_RETRY_MAX = int(args.RETRIES)
    if getattr(args, "NO_RETRY_CLIENT_ERRORS", False):
        Constants.HTTP_RETRY_CLIENT_ERRORS = False


def build_policy(args) -> FallbackPolicy:
    """Fallback policy selected by --strict-platforms / --require-listed."""
    return FallbackPolicy(
        assume_universal=not getattr(args, "STRICT_PLATFORMS", False),
        attempt_unlisted=not getattr(args, "REQUIRE_LISTED", False),
    )


def build_client(args) -> GalleryClient:
    """Gallery client honoring --order and the retry settings on Constants."""
    return GalleryClient(
        ordering=get_ordering(getattr(args, "ORDER", None) or "server"),
        timeout=Constants.REQUEST_TIMEOUT,
        max_attempts=Constants.HTTP_RETRY_MAX,
        base_delay=Constants.HTTP_RETRY_BASE_DELAY_SEC,
        retry_client_errors=Constants.HTTP_RETRY_CLIENT_ERRORS,
    )
