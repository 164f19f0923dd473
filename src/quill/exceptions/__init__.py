"""Quill exception hierarchy.

All exceptions can be imported from this package:
    from quill.exceptions import ConfigError, QuillError

Expression-specific errors live in ``quill.expressions.errors`` and derive
from :class:`QuillError`.
"""

from __future__ import annotations

from quill.exceptions.base import QuillError
from quill.exceptions.config import ConfigError

__all__ = [
    "QuillError",
    "ConfigError",
]
