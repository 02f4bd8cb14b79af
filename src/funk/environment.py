"""Funk scope chain — shared by the checker (types) and the runtime (values)."""

from __future__ import annotations

from typing import Generic, TypeVar

from .errors import FunkRuntimeError, UndefinedVariable

T = TypeVar("T")


class Environment(Generic[T]):
    """One lexical scope: a name table plus an optional enclosing scope."""

    def __init__(self, enclosing: Environment[T] | None = None):
        self.values: dict[str, T] = {}
        self.enclosing: Environment[T] | None = enclosing

    @classmethod
    def enclose(cls, parent: Environment[T]) -> Environment[T]:
        """Fresh child scope whose lookups fall through to `parent`."""
        return cls(parent)

    def get_enclosing(self) -> Environment[T]:
        if self.enclosing is None:
            raise FunkRuntimeError("global environment has no enclosing scope")
        return self.enclosing

    def get(self, name: str, line: int | None = None) -> T:
        env: Environment[T] | None = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.enclosing
        raise UndefinedVariable(name, line)

    def contains(self, name: str) -> bool:
        env: Environment[T] | None = self
        while env is not None:
            if name in env.values:
                return True
            env = env.enclosing
        return False

    def declare(self, name: str, value: T) -> None:
        """Bind in this scope only. Shadows any outer binding."""
        self.values[name] = value

    def declare_global(self, name: str, value: T) -> None:
        """Bind in this scope and every enclosing one up to the root."""
        env: Environment[T] | None = self
        while env is not None:
            env.values[name] = value
            env = env.enclosing

    def assign(self, name: str, value: T, line: int | None = None) -> None:
        """Overwrite the nearest existing binding. Never creates one."""
        env: Environment[T] | None = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return
            env = env.enclosing
        raise UndefinedVariable(name, line)
