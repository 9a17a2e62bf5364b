"""Target resolution: turn extension requests into concrete download targets.

``resolve`` is a pure function of a request and its query result. It trusts
the result's ordering (newest first); ordering is decided by the gallery
client, never here.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set

from common.logging_utils import extra_context, is_debug_enabled
from .models import ExtensionRequest, QueryResult, Target
from .policy import FallbackPolicy

logger = logging.getLogger(__name__)

DEFAULT_POLICY = FallbackPolicy()


def _platform_set(platforms: Iterable[str]) -> Set[str]:
    return {p.strip() for p in platforms if p and p.strip()}


def _ordered_platforms(platforms: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    ordered = []
    for p in platforms:
        p = (p or "").strip()
        if p and p not in seen:
            seen.add(p)
            ordered.append(p)
    return ordered


def resolve_pinned(
    request: ExtensionRequest, result: QueryResult, policy: FallbackPolicy = DEFAULT_POLICY
) -> List[Target]:
    """Targets for a request pinned to an exact version."""
    wanted = _platform_set(request.platforms)
    targets: List[Target] = []

    for entry in result.versions:
        if entry.version != request.version:
            continue
        if wanted:
            if entry.target_platform and entry.target_platform in wanted:
                targets.append(Target.for_request(request, entry.version, entry.target_platform))
        elif not entry.target_platform:
            targets.append(Target.for_request(request, entry.version))

    if not targets and wanted:
        targets = policy.universal_pinned(request)

    if not targets and not wanted:
        direct = policy.unlisted_pinned(request)
        if direct is not None:
            targets.append(direct)

    return targets


def resolve_latest(
    request: ExtensionRequest, result: QueryResult, policy: FallbackPolicy = DEFAULT_POLICY
) -> List[Target]:
    """Targets for an unpinned request: the newest build per requested platform."""
    if not result.versions:
        return []

    wanted = _ordered_platforms(request.platforms)
    if not wanted:
        newest = result.versions[0]
        return [Target.for_request(request, newest.version, newest.target_platform)]

    targets: List[Target] = []
    for platform in wanted:
        match: Optional[Target] = None
        for entry in result.versions:
            if entry.target_platform == platform:
                match = Target.for_request(request, entry.version, platform)
                break
        if match is None:
            logger.debug("%s: no build listed for %s", request.identifier, platform)
            continue
        targets.append(match)

    if not targets:
        targets = policy.universal_latest(request, result)
    return targets


def resolve(
    request: ExtensionRequest, result: QueryResult, policy: FallbackPolicy = DEFAULT_POLICY
) -> List[Target]:
    """Resolve one request against its query result.

    Args:
        request: The validated extension request.
        result: Gallery versions for the request's identifier, newest first.
        policy: Fallback heuristics to apply when no exact match exists.

    Returns:
        Ordered list of targets; may be empty when nothing can be resolved.
    """
    if request.pinned:
        targets = resolve_pinned(request, result, policy)
    else:
        targets = resolve_latest(request, result, policy)

    if is_debug_enabled(logger):
        logger.debug(
            "Resolved %s to %d target(s): %s",
            request.identifier,
            len(targets),
            ", ".join(t.filename for t in targets) or "-",
            extra=extra_context(
                event="decision",
                component="resolver",
                action="resolve",
                outcome="pinned" if request.pinned else "latest",
                target=request.identifier,
            ),
        )
    return targets


def resolve_targets(
    client, requests: Iterable[ExtensionRequest], policy: FallbackPolicy = DEFAULT_POLICY
) -> List[Target]:
    """Query and resolve every request in order.

    Queries run one at a time. The first QueryError or NotFoundError aborts
    the whole call; no partial target list is returned.
    """
    targets: List[Target] = []
    for request in requests:
        result = client.query(request.identifier, want_all_versions=request.pinned)
        targets.extend(resolve(request, result, policy))
    return targets
