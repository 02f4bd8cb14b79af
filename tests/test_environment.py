"""Scope chain tests."""

import pytest

from funk.environment import Environment
from funk.errors import FunkRuntimeError, UndefinedVariable


def test_get_falls_through_to_enclosing():
    root: Environment[int] = Environment()
    root.declare("x", 1)
    child = Environment.enclose(root)
    assert child.get("x") == 1


def test_declare_shadows_without_touching_parent():
    root: Environment[int] = Environment()
    root.declare("x", 1)
    child = Environment.enclose(root)
    child.declare("x", 2)
    assert child.get("x") == 2
    assert root.get("x") == 1


def test_assign_updates_nearest_binding():
    root: Environment[int] = Environment()
    root.declare("x", 1)
    child = Environment.enclose(Environment.enclose(root))
    child.assign("x", 5)
    assert root.get("x") == 5
    assert "x" not in child.values


def test_assign_never_creates():
    env: Environment[int] = Environment()
    with pytest.raises(UndefinedVariable) as exc:
        env.assign("y", 1, 3)
    assert exc.value.name == "y"
    assert exc.value.line == 3
    assert not env.contains("y")


def test_get_undefined():
    env: Environment[int] = Environment.enclose(Environment())
    with pytest.raises(UndefinedVariable) as exc:
        env.get("missing")
    assert "undefined variable 'missing'" in str(exc.value)


def test_declare_global_reaches_every_ancestor():
    root: Environment[str] = Environment()
    mid = Environment.enclose(root)
    leaf = Environment.enclose(mid)
    leaf.declare_global("clock", "builtin")
    assert root.values["clock"] == "builtin"
    assert mid.values["clock"] == "builtin"
    assert leaf.values["clock"] == "builtin"


def test_get_enclosing():
    root: Environment[int] = Environment()
    child = Environment.enclose(root)
    assert child.get_enclosing() is root
    with pytest.raises(FunkRuntimeError):
        root.get_enclosing()


def test_contains():
    root: Environment[int] = Environment()
    root.declare("a", 1)
    child = Environment.enclose(root)
    assert child.contains("a")
    assert not child.contains("b")
