"""Type checker tests."""

import logging

import pytest

from funk import check, parse
from funk.check import (
    BOOLEAN_T,
    FUNCTION_T,
    LIST_T,
    NUMBER_T,
    RECORD_T,
    STRING_T,
    UNKNOWN_T,
    TypeChecker,
)
from funk.errors import FunkTypeError


def type_of(source: str):
    """Type of the initializer of the last declaration in `source`."""
    checker = TypeChecker()
    checker.check_statements(parse(source))
    return checker.env.get("it")


@pytest.mark.parametrize(
    "source,expected",
    [
        ("make it = 1;", NUMBER_T),
        ("make it = 'a' + 'b';", STRING_T),
        ("make it = 1 < 2;", BOOLEAN_T),
        ("make it = !true;", BOOLEAN_T),
        ("make it = true and false;", BOOLEAN_T),
        ("make it = [1, 'a'];", LIST_T),
        ("make it = {a: 1};", RECORD_T),
        ("make it = [1][0];", UNKNOWN_T),
        ("make it = {a: 1}.a;", UNKNOWN_T),
        ("make it = len([1]);", UNKNOWN_T),
        ("make it = clock;", FUNCTION_T),
        ("make it = 1 if true else 2;", NUMBER_T),
        ("make it = 1 if true else 'a';", UNKNOWN_T),
        ("make it = len([]) + 1;", UNKNOWN_T),
    ],
)
def test_expression_types(source, expected):
    assert type_of(source) == expected


def test_declaration_without_initializer_is_nil():
    checker = TypeChecker()
    checker.check_statements(parse("make it;"))
    assert str(checker.env.get("it")) == "nil"


def test_assignment_stores_value_type():
    assert type_of("make it; it = 'now a string';") == STRING_T


@pytest.mark.parametrize(
    "source,fragment",
    [
        ("print 1 + 'a';", "cannot be applied to number and string"),
        ("print 'a' - 'b';", "string and string"),
        ("print 1 == 'a';", "'=='"),
        ("print 'a' < 'b';", "'<'"),
        ("print 1 and true;", "expects booleans"),
        ("print -'a';", "expects a number"),
        ("print !1;", "expects a boolean"),
        ("if 1 print 1;", "condition must be boolean"),
        ("while 'x' print 1;", "condition must be boolean"),
        ("print 1 if 2 else 3;", "condition must be boolean"),
        ("print 1();", "cannot call"),
        ("print 1[0];", "cannot index"),
        ("print [1]['a'];", "index must be a number"),
        ("print (1).a;", "cannot read field"),
        ("make r = 1; r.a = 2;", "cannot assign field"),
        ("make l = 'ab'; l[0] = 'c';", "cannot assign by index"),
        ("for x in [1, 2] print x;", "for expects an iter"),
        ("print nope;", "undefined variable 'nope'"),
        ("nope = 1;", "undefined variable 'nope'"),
    ],
)
def test_type_errors(source, fragment):
    with pytest.raises(FunkTypeError) as exc:
        check(source)
    assert fragment in exc.value.msg


def test_error_reports_line():
    with pytest.raises(FunkTypeError) as exc:
        check("make a = 1;\nprint a + 'x';")
    assert exc.value.line == 2


def test_unknown_is_tolerated():
    check(
        """
        funk f(a, b) {
            if a print b + 1;
            while a and b print -a;
            return a[0] + b.c;
        }
        """
    )


def test_block_scope_ends():
    with pytest.raises(FunkTypeError):
        check("{ make inner = 1; } print inner;")


def test_shadowing_is_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="funk"):
        check("make a = 1; { make a = 2; } make b = 3;")
    shadows = [r.getMessage() for r in caplog.records if "shadows" in r.getMessage()]
    assert shadows == ["'a' at line 1 shadows an existing binding"]


def test_parameters_do_not_leak():
    with pytest.raises(FunkTypeError):
        check("funk f(p) { return p; } print p;")


def test_recursion_and_mutual_recursion():
    check(
        """
        funk even(n) { if n == 0 return true; return odd(n - 1); }
        funk odd(n) { if n == 0 return false; return even(n - 1); }
        funk fact(n) { if n <= 1 return 1; return n * fact(n - 1); }
        print even(4);
        """
    )


def test_with_binds_value_type():
    with pytest.raises(FunkTypeError):
        check("with 'a' as s print s - 1;")
    check("with 2 as n print n - 1;")


def test_for_over_builtin_iter():
    check("for i in range_to(3) print i + 1;")
    check("for c in iter('abc') print c;")


def test_builtins_are_functions():
    for name in ("clock", "println", "input", "iter", "range_to", "range",
                 "range_skip", "len", "push", "to_number", "type_of"):
        check("print " + name + ";")


def test_check_returns_statements():
    stmts = check("print 1;")
    assert len(stmts) == 1
