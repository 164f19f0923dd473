"""Read-only variable environment for expression evaluation."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from quill.expressions.values import Value

__all__ = ["Context"]


class Context(Mapping[str, Value]):
    """Immutable mapping from variable name to value, supplied per render.

    Python values are converted with :meth:`Value.from_python` on the way in.
    The evaluator only reads from a context; :meth:`with_variables` returns a
    new context instead of changing this one.

    Example:
        >>> ctx = Context({"logged_in": True, "ids": [1, 2]})
        >>> ctx.get("logged_in")
        Boolean(value=True)
        >>> ctx.get("missing") is None
        True
    """

    __slots__ = ("_variables",)

    def __init__(self, variables: Mapping[str, Any] | None = None) -> None:
        converted = {
            str(name): Value.from_python(value)
            for name, value in (variables or {}).items()
        }
        self._variables: Mapping[str, Value] = MappingProxyType(converted)

    @classmethod
    def default(cls) -> Context:
        """An empty context, for expressions that reference no variables."""
        return cls()

    def get(self, name: str, default: Value | None = None) -> Value | None:  # type: ignore[override]
        return self._variables.get(name, default)

    def names(self) -> tuple[str, ...]:
        return tuple(self._variables)

    def with_variables(self, **values: Any) -> Context:
        """Return a new context with ``values`` added or replaced."""
        return Context({**self._variables, **values})

    def __getitem__(self, name: str) -> Value:
        return self._variables[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"Context({dict(self._variables)!r})"
