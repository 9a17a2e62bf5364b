"""Target resolution package.

- models.py: requests, gallery versions and download targets
- policy.py: named fallback heuristics (universal inference, unlisted pins)
- resolver.py: pure resolution of a request against a query result
"""

from .models import ExtensionRequest, QueryResult, Target, VersionEntry
from .policy import FallbackPolicy
from .resolver import resolve, resolve_targets

__all__ = [
    "ExtensionRequest",
    "QueryResult",
    "Target",
    "VersionEntry",
    "FallbackPolicy",
    "resolve",
    "resolve_targets",
]
