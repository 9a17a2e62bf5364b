"""Version ordering strategies for gallery query results.

The resolver treats the first entry of a result as the newest. Whether that
holds is decided here: ``ServerOrdering`` trusts the gallery as-is, while
``SemverOrdering`` re-sorts by semantic version.
"""

from typing import List, Optional

import semantic_version

from resolution.models import VersionEntry


class ServerOrdering:
    """Keep the order returned by the gallery (newest first)."""

    name = "server"

    def order(self, versions: List[VersionEntry]) -> List[VersionEntry]:
        return list(versions)


class SemverOrdering:
    """Sort newest first by semantic version.

    The sort is stable, so builds sharing a version keep the server's
    platform order. Unparseable versions follow all parseable ones.
    """

    name = "semver"

    def _version_from_str(self, v: str) -> Optional[semantic_version.Version]:
        """Safely coerce a version string."""
        try:
            return semantic_version.Version.coerce(v)
        except ValueError:
            return None

    def order(self, versions: List[VersionEntry]) -> List[VersionEntry]:
        parsed = []
        unparsed = []
        for entry in versions:
            ver = self._version_from_str(entry.version)
            if ver is None:
                unparsed.append(entry)
            else:
                parsed.append((ver, entry))
        parsed.sort(key=lambda item: item[0], reverse=True)
        return [entry for _, entry in parsed] + unparsed


ORDERINGS = {
    ServerOrdering.name: ServerOrdering,
    SemverOrdering.name: SemverOrdering,
}


def get_ordering(name: str):
    """Return an ordering instance by CLI name."""
    try:
        return ORDERINGS[name]()
    except KeyError:
        raise ValueError(f"unknown version ordering: {name}") from None
