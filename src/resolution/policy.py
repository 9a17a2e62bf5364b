"""Fallback heuristics used when a request has no exact match.

Both rules are guesses rather than facts reported by the gallery:

* ``assume_universal``: if no build exists for any requested platform, the
  extension is assumed to ship a single universal build instead.
* ``attempt_unlisted``: a pinned version missing from the query result is
  still attempted directly; the download may 404.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from common.logging_utils import extra_context
from .models import ExtensionRequest, QueryResult, Target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FallbackPolicy:
    """Switches for the resolver's fallback rules."""
    assume_universal: bool = True
    attempt_unlisted: bool = True

    def universal_pinned(self, request: ExtensionRequest) -> List[Target]:
        """Platform-absent target for a pin with no platform-specific builds."""
        if not self.assume_universal:
            logger.warning(
                "%s@%s: no build for requested platforms %s",
                request.identifier,
                request.version,
                ", ".join(request.platforms),
            )
            return []
        logger.info(
            "%s@%s: no platform-specific builds found, downloading universal",
            request.identifier,
            request.version,
            extra=extra_context(event="decision", component="resolver", outcome="universal_fallback"),
        )
        return [Target.for_request(request, request.version or "")]

    def universal_latest(self, request: ExtensionRequest, result: QueryResult) -> List[Target]:
        """Platform-absent target at the newest version when no platform matched."""
        if not result.versions:
            return []
        if not self.assume_universal:
            logger.warning(
                "%s: no build for requested platforms %s",
                request.identifier,
                ", ".join(request.platforms),
            )
            return []
        newest = result.versions[0].version
        logger.info(
            "%s: no platform-specific builds, downloading universal %s",
            request.identifier,
            newest,
            extra=extra_context(event="decision", component="resolver", outcome="universal_fallback"),
        )
        return [Target.for_request(request, newest)]

    def unlisted_pinned(self, request: ExtensionRequest) -> Optional[Target]:
        """Direct attempt at a pinned version absent from the query result."""
        if not self.attempt_unlisted:
            logger.warning(
                "%s version %s has no listed universal build, skipping",
                request.identifier,
                request.version,
            )
            return None
        logger.warning(
            "%s version %s has no listed universal build, attempting direct download",
            request.identifier,
            request.version,
            extra=extra_context(event="decision", component="resolver", outcome="unlisted_attempt"),
        )
        return Target.for_request(request, request.version or "")
