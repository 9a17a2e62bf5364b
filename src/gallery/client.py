"""Gallery query client: look up an extension's published versions."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from constants import Constants, QueryFlags
from common.errors import NotFoundError, QueryError
from common.http_client import RetryError, robust_post_json
from common.logging_utils import extra_context, is_debug_enabled
from resolution.models import QueryResult, VersionEntry
from .ordering import ServerOrdering

logger = logging.getLogger(__name__)

HEADERS_JSON = {"Content-Type": "application/json"}
_UNSAFE_VERSION_CHARS = {"/", "\\", "\x00", os.sep}


def build_query(identifier: str, want_all_versions: bool) -> Dict[str, Any]:
    """Build the extension query body for one identifier."""
    flags = QueryFlags.ALL_VERSIONS if want_all_versions else QueryFlags.LATEST
    return {
        "filters": [
            {
                "criteria": [
                    {
                        "filterType": Constants.FILTER_TYPE_EXTENSION_NAME,
                        "value": identifier,
                    }
                ]
            }
        ],
        "flags": flags.value,
    }


def _first_extension(payload: Any) -> Optional[Dict[str, Any]]:
    """Return results[0].extensions[0], or None when absent."""
    if not isinstance(payload, dict):
        return None
    results = payload.get("results") or []
    if not results or not isinstance(results[0], dict):
        return None
    extensions = results[0].get("extensions") or []
    if not extensions or not isinstance(extensions[0], dict):
        return None
    return extensions[0]


def _is_safe_segment(value: str) -> bool:
    """Versions and platforms become part of a file name; reject path separators and NUL."""
    return not any(ch in value for ch in _UNSAFE_VERSION_CHARS)


def _parse_versions(extension: Dict[str, Any]) -> List[VersionEntry]:
    versions: List[VersionEntry] = []
    for item in extension.get("versions") or []:
        if not isinstance(item, dict):
            continue
        version = item.get("version")
        if not version:
            continue
        version = str(version)
        platform = str(item.get("targetPlatform") or "") or None
        if not _is_safe_segment(version) or (platform and not _is_safe_segment(platform)):
            logger.warning("Ignoring gallery build with unsafe characters: %r %r", version, platform)
            continue
        versions.append(VersionEntry(version=version, target_platform=platform))
    return versions


class GalleryClient:
    """Client for the marketplace extension query endpoint."""

    def __init__(
        self,
        query_url: Optional[str] = None,
        *,
        ordering=None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        retry_client_errors: Optional[bool] = None,
    ):
        """Initialize the gallery client.

        Args:
            query_url: Override for Constants.GALLERY_QUERY_URL.
            ordering: Strategy deciding result order; defaults to ServerOrdering.
            timeout: Per-request timeout in seconds.
            max_attempts: Attempts per query, including the first.
            base_delay: Initial retry backoff in seconds.
            retry_client_errors: Retry 4xx responses other than 408/429.
        """
        self.query_url = query_url or Constants.GALLERY_QUERY_URL
        self.ordering = ordering or ServerOrdering()
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.retry_client_errors = retry_client_errors

    def _headers(self) -> Dict[str, str]:
        headers = dict(HEADERS_JSON)
        headers["Accept"] = f"application/json;api-version={Constants.GALLERY_API_VERSION}"
        return headers

    def query(self, identifier: str, want_all_versions: bool) -> QueryResult:
        """Fetch version metadata for ``identifier``.

        Args:
            identifier: Extension id in publisher.name form.
            want_all_versions: Ask for full history (pinned requests) rather
                than only the newest build per platform.

        Raises:
            QueryError: transport, HTTP or decode failure after all retries.
            NotFoundError: the gallery returned no matching extension.
        """
        logger.info("Querying gallery for %s", identifier)
        try:
            payload = robust_post_json(
                self.query_url,
                build_query(identifier, want_all_versions),
                context=identifier,
                headers=self._headers(),
                timeout=self.timeout,
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                retry_client_errors=self.retry_client_errors,
            )
        except RetryError as exc:
            raise QueryError(identifier, str(exc.last_error), attempts=exc.attempts) from exc.last_error

        extension = _first_extension(payload)
        if extension is None:
            logger.warning(
                "Extension not found in gallery",
                extra=extra_context(
                    event="http_response",
                    component="gallery_client",
                    outcome="not_found",
                    target=identifier,
                ),
            )
            raise NotFoundError(identifier)

        publisher = extension.get("publisher") or {}
        result = QueryResult(
            identifier=identifier,
            versions=self.ordering.order(_parse_versions(extension)),
            publisher=str(publisher.get("publisherName") or publisher.get("name") or ""),
            name=str(extension.get("extensionName") or ""),
        )

        if is_debug_enabled(logger):
            logger.debug(
                "Gallery metadata fetched",
                extra=extra_context(
                    event="package_found",
                    component="gallery_client",
                    action="query",
                    outcome="success",
                    target=identifier,
                    publisher=result.publisher,
                    extension_name=result.name,
                    version_count=len(result.versions),
                    all_versions=want_all_versions,
                ),
            )
        return result
