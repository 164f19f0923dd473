"""Unit tests for the parsed-expression cache."""

from __future__ import annotations

import os
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from quill.expressions.cache import (
    CacheStats,
    ExpressionCache,
    default_cache,
    reset_default_cache,
)
from quill.expressions.context import Context
from quill.expressions.errors import ExpressionLexError, ExpressionSyntaxError
from quill.expressions.evaluator import evaluate
from quill.expressions.parser import parse_source
from quill.expressions.values import Integer


@pytest.fixture
def fresh_default_cache() -> Iterator[None]:
    """Reset the process-wide cache around a test."""
    reset_default_cache()
    yield
    reset_default_cache()


class TestGetOrParse:
    def test_miss_then_hit(self) -> None:
        cache = ExpressionCache(max_size=4)
        first = cache.get_or_parse("<% a + 1 %>")
        second = cache.get_or_parse("<% a + 1 %>")

        assert second is first
        assert first == parse_source("<% a + 1 %>")
        assert cache.stats() == CacheStats(hits=1, misses=1, size=1, max_size=4)

    def test_keys_are_exact_source_text(self) -> None:
        """Sources that differ only in spacing are separate entries."""
        cache = ExpressionCache()
        cache.get_or_parse("<% 1+1 %>")
        cache.get_or_parse("<% 1 + 1 %>")
        assert len(cache) == 2

    def test_contains(self) -> None:
        cache = ExpressionCache()
        cache.get_or_parse("<% x %>")
        assert "<% x %>" in cache
        assert "<% y %>" not in cache

    def test_cached_tree_evaluates_per_context(self) -> None:
        cache = ExpressionCache()
        for n in range(3):
            expr = cache.get_or_parse("<% n * 10 %>")
            assert evaluate(expr, Context({"n": n})) == Integer(n * 10)
        assert cache.stats().hits == 2


class TestEviction:
    def test_least_recently_used_is_evicted(self) -> None:
        cache = ExpressionCache(max_size=2)
        cache.get_or_parse("<% a %>")
        cache.get_or_parse("<% b %>")
        cache.get_or_parse("<% a %>")  # a is now most recent
        cache.get_or_parse("<% c %>")

        assert "<% a %>" in cache
        assert "<% b %>" not in cache
        assert "<% c %>" in cache
        assert len(cache) == 2

    def test_size_never_exceeds_max(self) -> None:
        cache = ExpressionCache(max_size=3)
        for i in range(10):
            cache.get_or_parse(f"<% {i} %>")
        assert cache.stats().size == 3

    def test_invalid_max_size(self) -> None:
        with pytest.raises(ValueError, match="max_size"):
            ExpressionCache(max_size=0)


class TestFailures:
    def test_syntax_errors_are_not_cached(self) -> None:
        cache = ExpressionCache()
        for _ in range(2):
            with pytest.raises(ExpressionSyntaxError):
                cache.get_or_parse("<% 1 + %>")

        assert len(cache) == 0
        assert cache.stats().misses == 2

    def test_lex_errors_are_not_cached(self) -> None:
        cache = ExpressionCache()
        with pytest.raises(ExpressionLexError):
            cache.get_or_parse("<% $ %>")
        assert "<% $ %>" not in cache


class TestDisabledAndClear:
    def test_disabled_cache_stores_nothing(self) -> None:
        cache = ExpressionCache(enabled=False)
        first = cache.get_or_parse("<% 1 %>")
        second = cache.get_or_parse("<% 1 %>")

        assert first == second
        assert not cache.enabled
        assert len(cache) == 0
        assert cache.stats() == CacheStats(hits=0, misses=0, size=0, max_size=256)

    def test_clear_resets_everything(self) -> None:
        cache = ExpressionCache()
        cache.get_or_parse("<% 1 %>")
        cache.get_or_parse("<% 1 %>")
        cache.clear()
        assert cache.stats() == CacheStats(hits=0, misses=0, size=0, max_size=256)


class TestConcurrency:
    def test_shared_between_threads(self) -> None:
        cache = ExpressionCache(max_size=8)
        sources = [f"<% x + {i} %>" for i in range(4)]

        def render(i: int) -> Integer:
            expr = cache.get_or_parse(sources[i % len(sources)])
            return evaluate(expr, Context({"x": i}))  # type: ignore[return-value]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(render, range(200)))

        assert results == [Integer(i + i % 4) for i in range(200)]
        stats = cache.stats()
        assert stats.size == 4
        assert stats.hits + stats.misses == 200


class TestDefaultCache:
    def test_configured_from_settings(
        self,
        clean_env: None,
        isolated_home: Path,
        fresh_default_cache: None,
    ) -> None:
        os.environ["QUILL_CACHE_SIZE"] = "8"
        cache = default_cache()
        assert cache.stats().max_size == 8
        assert cache.enabled
        assert default_cache() is cache

    def test_disabled_by_settings(
        self,
        clean_env: None,
        isolated_home: Path,
        fresh_default_cache: None,
    ) -> None:
        os.environ["QUILL_CACHE_EXPRESSIONS"] = "false"
        assert not default_cache().enabled

    def test_reset_rereads_settings(
        self,
        clean_env: None,
        isolated_home: Path,
        fresh_default_cache: None,
    ) -> None:
        first = default_cache()
        reset_default_cache()
        assert default_cache() is not first
