"""Exceptions raised by habitcore."""

from __future__ import annotations


class InvalidArgumentError(ValueError):
    """Raised when input has the wrong shape (e.g. a string where a list of goals belongs)."""
