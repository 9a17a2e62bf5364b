"""Shared helpers: logging, errors and HTTP with retries."""
