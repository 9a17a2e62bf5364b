"""Data models for extension requests, gallery results and download targets."""

import urllib.parse
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from constants import Constants


def split_identifier(identifier: str) -> Tuple[str, str]:
    """Split ``publisher.name`` at the first dot; missing parts come back empty."""
    publisher, _, name = identifier.partition(".")
    if not name:
        return "", ""
    return publisher, name


@dataclass(frozen=True)
class ExtensionRequest:
    """One validated manifest entry."""
    identifier: str  # publisher.name
    version: Optional[str] = None  # None means latest
    platforms: Tuple[str, ...] = ()  # empty means universal

    @property
    def publisher(self) -> str:
        return split_identifier(self.identifier)[0]

    @property
    def name(self) -> str:
        return split_identifier(self.identifier)[1]

    @property
    def pinned(self) -> bool:
        return bool(self.version)


@dataclass(frozen=True)
class VersionEntry:
    """A single published build; ``target_platform`` None means universal."""
    version: str
    target_platform: Optional[str] = None


@dataclass
class QueryResult:
    """Versions known to the gallery for one extension, newest first."""
    identifier: str
    versions: List[VersionEntry] = field(default_factory=list)
    publisher: str = ""
    name: str = ""


@dataclass(frozen=True)
class Target:
    """A resolved (identifier, version, platform) unit of work.

    Equality ignores the originating request so two targets for the same
    artifact always compare equal.
    """
    identifier: str
    version: str
    platform: Optional[str] = None
    request: Optional[ExtensionRequest] = field(default=None, compare=False, repr=False)

    @classmethod
    def for_request(
        cls, request: ExtensionRequest, version: str, platform: Optional[str] = None
    ) -> "Target":
        return cls(
            identifier=request.identifier,
            version=version,
            platform=platform or None,
            request=request,
        )

    @property
    def filename(self) -> str:
        name = f"{self.identifier}-{self.version}"
        if self.platform:
            name += "@" + self.platform
        return name + Constants.ARTIFACT_EXTENSION

    @property
    def url(self) -> str:
        publisher, name = split_identifier(self.identifier)
        url = Constants.GALLERY_DOWNLOAD_URL.format(
            host=Constants.GALLERY_HOST.rstrip("/"),
            publisher=urllib.parse.quote(publisher, safe=""),
            name=urllib.parse.quote(name, safe=""),
            version=urllib.parse.quote(self.version, safe=""),
        )
        if self.platform:
            url += "?" + urllib.parse.urlencode({"targetPlatform": self.platform})
        return url
