"""Quill CLI commands."""

from __future__ import annotations

from quill.cli.commands.config import config
from quill.cli.commands.eval import eval_command
from quill.cli.commands.inspect import parse, tokens

__all__ = ["config", "eval_command", "parse", "tokens"]
