"""CLI context and exit codes for Quill."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from quill.config import QuillConfig

__all__ = [
    "ExitCode",
    "CLIContext",
]


class ExitCode(IntEnum):
    """Standard exit codes for Quill CLI.

    - 0 for success
    - 1 for failure (bad expression, bad config, bad input file)
    - 2 for usage errors (reported by Click itself)
    """

    SUCCESS = 0
    FAILURE = 1
    USAGE = 2


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Type-safe CLI context shared with subcommands.

    Attributes:
        config: Loaded Quill configuration.
    """

    config: QuillConfig
