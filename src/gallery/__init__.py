"""Marketplace gallery package.

- client.py: extension query with bounded retry
- ordering.py: strategies deciding which returned version counts as newest
"""

from .client import GalleryClient, build_query
from .ordering import SemverOrdering, ServerOrdering, get_ordering

__all__ = [
    "GalleryClient",
    "build_query",
    "SemverOrdering",
    "ServerOrdering",
    "get_ordering",
]
