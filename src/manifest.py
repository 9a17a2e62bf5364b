"""Extension manifest loading and validation.

The manifest is a YAML (or JSON) document::

    extensions:
      - id: ms-python.python
        version: 2024.2.1
        platforms: [linux-x64, darwin-arm64]
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Set

import yaml

from constants import Constants
from common.errors import ManifestError
from resolution.models import ExtensionRequest, split_identifier

logger = logging.getLogger(__name__)

_PATH_CHARS = ("/", "\\", "\x00")


def _has_path_chars(value: str) -> bool:
    return any(ch in value for ch in _PATH_CHARS)


def _coerce_version(raw: Any, ext_id: str) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise ManifestError(f"manifest: extension {ext_id!r} has invalid version {raw!r}")
    version = str(raw).strip()
    if _has_path_chars(version):
        raise ManifestError(f"manifest: extension {ext_id!r} has invalid version {version!r}")
    return version or None


def _coerce_platforms(raw: Any, ext_id: str) -> tuple:
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise ManifestError(f"manifest: extension {ext_id!r} platforms must be a list")
    platforms = []
    for item in raw:
        platform = str(item).strip()
        if platform not in Constants.VALID_PLATFORMS:
            raise ManifestError(f"manifest: extension {ext_id!r} has invalid platform {platform!r}")
        if platform not in platforms:
            platforms.append(platform)
    return tuple(platforms)


def parse_manifest(data: Any) -> List[ExtensionRequest]:
    """Validate a decoded manifest document and build requests from it."""
    if not isinstance(data, dict):
        raise ManifestError("manifest: top level must be a mapping with an 'extensions' list")
    entries = data.get("extensions")
    if not entries:
        raise ManifestError("manifest: no extensions defined")
    if not isinstance(entries, list):
        raise ManifestError("manifest: 'extensions' must be a list")

    seen: Set[str] = set()
    requests: List[ExtensionRequest] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ManifestError(f"manifest: extension {i} must be a mapping")
        ext_id = str(entry.get("id") or "").strip()
        if not ext_id:
            raise ManifestError(f"manifest: extension {i} has no id")
        publisher, name = split_identifier(ext_id)
        if not publisher or not name or _has_path_chars(ext_id):
            raise ManifestError(f"manifest: extension {ext_id!r} must be in publisher.name format")
        if ext_id in seen:
            raise ManifestError(f"manifest: duplicate extension {ext_id!r}")
        seen.add(ext_id)

        requests.append(
            ExtensionRequest(
                identifier=ext_id,
                version=_coerce_version(entry.get("version"), ext_id),
                platforms=_coerce_platforms(entry.get("platforms"), ext_id),
            )
        )
    return requests


def load_manifest(path: str) -> List[ExtensionRequest]:
    """Read and validate the manifest at ``path``.

    Raises:
        ManifestError: unreadable file, parse error or invalid content.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ManifestError(f"reading manifest {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ManifestError(f"parsing manifest {path}: {exc}") from exc

    requests = parse_manifest(data)
    logger.info("loaded %d extension(s) from %s", len(requests), path)
    return requests
