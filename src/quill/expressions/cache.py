"""Cache of parsed expressions keyed by block source text.

Template renders evaluate the same blocks over and over with different
contexts. Parsed trees are immutable, so a tree parsed once can be handed to
every render that needs it. The cache is shared between threads and guarded
by a lock; evaluation of the returned trees needs no locking.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass

from quill.config import load_config
from quill.constants import DEFAULT_CACHE_SIZE
from quill.expressions.parser import Expression, parse_source
from quill.logging import get_logger

__all__ = ["CacheStats", "ExpressionCache", "default_cache", "reset_default_cache"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Snapshot of cache counters.

    Attributes:
        hits: Lookups answered from the cache.
        misses: Lookups that had to parse.
        size: Entries currently stored.
        max_size: Capacity before least recently used entries are evicted.
    """

    hits: int
    misses: int
    size: int
    max_size: int


class ExpressionCache:
    """LRU cache from source text to parsed expression tree.

    Parse failures propagate to the caller and are never stored. With
    ``enabled=False`` every lookup parses afresh and nothing is kept.

    Example:
        ```python
        cache = ExpressionCache(max_size=128)
        expr = cache.get_or_parse("<% user_id == owner_id %>")
        evaluate(expr, Context({"user_id": 1, "owner_id": 1}))
        ```
    """

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE, enabled: bool = True) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self._max_size = max_size
        self._enabled = enabled
        self._entries: OrderedDict[str, Expression] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    def get_or_parse(self, source: str) -> Expression:
        """Return the tree for ``source``, parsing and storing it on a miss.

        Raises:
            ExpressionLexError: If ``source`` cannot be tokenized.
            ExpressionSyntaxError: If ``source`` cannot be parsed.
        """
        if not self._enabled:
            return parse_source(source)

        with self._lock:
            cached = self._entries.get(source)
            if cached is not None:
                self._entries.move_to_end(source)
                self._hits += 1
                logger.debug("expression_cache_hit", source=source)
                return cached
            self._misses += 1

        # Parse outside the lock; two threads racing on one source both parse
        # and store equal trees.
        expr = parse_source(source)
        logger.debug("expression_cache_miss", source=source)

        with self._lock:
            self._entries[source] = expr
            self._entries.move_to_end(source)
            while len(self._entries) > self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("expression_cache_evict", source=evicted)
        return expr

    def clear(self) -> None:
        """Drop every entry and reset the counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._entries),
                max_size=self._max_size,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, source: object) -> bool:
        with self._lock:
            return source in self._entries


_default_cache: ExpressionCache | None = None
_default_cache_lock = threading.Lock()


def default_cache() -> ExpressionCache:
    """Return the process-wide cache, creating it from settings on first use.

    Honors ``cache_expressions`` and ``cache_size`` from :class:`QuillConfig`.
    """
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            config = load_config()
            _default_cache = ExpressionCache(
                max_size=config.cache_size,
                enabled=config.cache_expressions,
            )
            logger.info(
                "expression_cache_created",
                enabled=config.cache_expressions,
                max_size=config.cache_size,
            )
        return _default_cache


def reset_default_cache() -> None:
    """Forget the process-wide cache so the next call re-reads settings."""
    global _default_cache
    with _default_cache_lock:
        _default_cache = None
