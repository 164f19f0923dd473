"""CLI utilities for Quill.

This module provides CLI-specific utilities including context management
and output formatting.
"""

from __future__ import annotations

from quill.cli.context import CLIContext, ExitCode
from quill.cli.output import OutputFormat

__all__ = [
    "CLIContext",
    "ExitCode",
    "OutputFormat",
]
