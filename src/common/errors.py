"""Exception taxonomy shared by the manifest, query, resolve and fetch stages."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from resolution.models import Target


class VsixFetchError(Exception):
    """Base class for all errors surfaced to the CLI."""


class ManifestError(VsixFetchError):
    """The extension manifest is missing, unreadable or invalid."""


class QueryError(VsixFetchError):
    """A gallery query failed after all retry attempts."""

    def __init__(self, identifier: str, message: str, attempts: int = 1):
        super().__init__(f"querying {identifier}: {message}")
        self.identifier = identifier
        self.attempts = attempts


class NotFoundError(VsixFetchError):
    """The gallery answered but returned no matching extension."""

    def __init__(self, identifier: str):
        super().__init__(f"extension {identifier!r} not found")
        self.identifier = identifier


class FetchError(VsixFetchError):
    """Downloading a single target (or preparing its destination) failed."""

    def __init__(self, target: Optional["Target"], message: str, status: Optional[int] = None):
        if target is not None:
            message = f"downloading {target.filename}: {message}"
        super().__init__(message)
        self.target = target
        self.status = status
