"""Shared Rich Console instances for Quill CLI output.

Rich detects whether it writes to a terminal: styled output there, plain
text when piped.
"""

from __future__ import annotations

from rich.console import Console

__all__ = ["console", "err_console"]

console = Console()
err_console = Console(stderr=True)
