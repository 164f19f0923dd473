"""Quill constants.

Single source of truth for the numeric limits and defaults shared by the
expression engine, the expression cache and the configuration layer.
"""

from __future__ import annotations

# =============================================================================
# Template Block Delimiters
# =============================================================================

#: Opening marker of an expression block.
BLOCK_START: str = "<%"

#: Closing marker of an expression block.
BLOCK_END: str = "%>"

# =============================================================================
# Integer Limits
# =============================================================================

#: Smallest representable Integer value (signed 64-bit).
INT_MIN: int = -(2**63)

#: Largest representable Integer value (signed 64-bit).
INT_MAX: int = 2**63 - 1

# =============================================================================
# Expression Cache
# =============================================================================

#: Default number of parsed expressions kept in the expression cache.
DEFAULT_CACHE_SIZE: int = 256

#: Upper bound accepted for the configured cache size.
MAX_CACHE_SIZE: int = 100_000

# =============================================================================
# Parser Limits
# =============================================================================

#: Deepest parenthesis nesting the parser accepts.
MAX_NESTING_DEPTH: int = 64
