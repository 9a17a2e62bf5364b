"""Concurrent artifact fetching."""

from .engine import create_session, fetch_all, fetch_target

__all__ = ["create_session", "fetch_all", "fetch_target"]
