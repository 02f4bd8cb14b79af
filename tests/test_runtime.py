"""Interpreter tests."""

import io

import pytest

from funk import parse
from funk.environment import Environment
from funk.errors import (
    ArityMismatch,
    FunkRuntimeError,
    IndexOutOfRange,
    InvalidArgument,
    InvalidKey,
    TypeMismatch,
    UndefinedVariable,
)
from funk.runtime import Interpreter
from funk.values import NIL, VBool, VList, VNumber, VRecord, VString, format_number, value_eq


def test_print_sum(run_source):
    assert run_source("make x = 3; make y = 4; print x + y;") == "7\n"


def test_factorial(run_source):
    source = """
    funk fact(n) {
        if n <= 1 return 1;
        return n * fact(n - 1);
    }
    print fact(5);
    """
    assert run_source(source) == "120\n"


def test_push_mutates_in_place(run_source):
    assert run_source("make l = [1, 2, 3]; push(l, 4); print l;") == "[1, 2, 3, 4]\n"


def test_record_field_assignment(run_source):
    assert run_source("make r = {a: 1}; r.a = 2; print r.a;") == "2\n"


def test_for_over_range(run_source):
    assert run_source("for i in range_to(3) print i;") == "0\n1\n2\n"


def test_uninitialized_is_nil(run_source):
    assert run_source("make x; print x;") == "nil\n"


def test_undefined_variable_read():
    with pytest.raises(UndefinedVariable) as exc:
        Interpreter(io.StringIO()).evaluate(parse("print nope;"))
    assert exc.value.name == "nope"
    assert exc.value.line == 1


# ── Scoping ──────────────────────────────────────────────────


def test_block_declarations_disappear():
    interp = Interpreter(io.StringIO())
    with pytest.raises(UndefinedVariable):
        interp.evaluate(parse("{ make inner = 1; } print inner;"))


def test_outer_assignment_persists(run_source):
    source = """
    make count = 0;
    { count = count + 1; }
    while count < 3 count = count + 1;
    with 10 as ten { count = count + ten; }
    for i in range_to(2) { count = count + 1; }
    print count;
    """
    assert run_source(source) == "15\n"


def test_shadowing(run_source):
    assert run_source("make a = 1; { make a = 2; print a; } print a;") == "2\n1\n"


def test_closure_sees_defining_scope(run_source):
    source = """
    funk counter() {
        make n = 0;
        funk inc() { n = n + 1; return n; }
        return inc;
    }
    make c = counter();
    c();
    c();
    print c();
    make n = 100;
    print c();
    """
    assert run_source(source, typecheck=False) == "3\n4\n"


def test_environment_restored_after_error():
    interp = Interpreter(io.StringIO())
    entry = interp.env
    with pytest.raises(IndexOutOfRange):
        interp.evaluate(parse("funk f() { { make l = []; print l[1]; } } f();"))
    assert interp.env is entry


# ── Return propagation ───────────────────────────────────────


def test_return_through_nested_statements(run_source):
    source = """
    funk find(l, target) {
        for i in range_to(len(l)) {
            with l[i] as v {
                if v == target {
                    while true { return i; }
                }
            }
        }
        return -1;
    }
    print find([5, 6, 7], 7);
    print find([5], 9);
    """
    assert run_source(source) == "2\n-1\n"


def test_function_without_return_yields_nil(run_source):
    assert run_source("funk f() { make x = 1; } print f();") == "nil\n"


def test_bare_return_yields_nil(run_source):
    assert run_source("funk f() { return; print 1; } print f();") == "nil\n"


def test_top_level_return_rejected():
    with pytest.raises(FunkRuntimeError) as exc:
        Interpreter(io.StringIO()).evaluate(parse("return 1;"))
    assert "top-level" in exc.value.msg


def test_top_level_return_in_block_rejected():
    with pytest.raises(FunkRuntimeError):
        Interpreter(io.StringIO()).evaluate(parse("{ if true return 1; }"))


def test_deep_recursion_succeeds(run_source):
    source = """
    funk count(n) {
        if n == 0 { return 0; }
        return 1 + count(n - 1);
    }
    print count(500);
    """
    assert run_source(source) == "500\n"


def test_unbounded_recursion_hits_call_limit():
    interp = Interpreter(io.StringIO())
    with pytest.raises(FunkRuntimeError) as exc:
        interp.evaluate(parse("funk spin(n) { return spin(n + 1); } spin(0);"))
    assert "maximum call depth exceeded in spin" in exc.value.msg
    assert interp.depth == 0
    interp.evaluate(parse("funk one() { return 1; } print one();"))
    assert interp.out.getvalue() == "1\n"


# ── Operators ────────────────────────────────────────────────


def test_short_circuit(run_source):
    source = """
    funk boom() { print "evaluated"; return true; }
    print false and boom();
    print true or boom();
    print true and boom();
    """
    assert run_source(source) == "false\ntrue\nevaluated\ntrue\n"


def test_string_concatenation(run_source):
    assert run_source("print 'funk' + \"y\";") == "funky\n"


def test_number_rendering(run_source):
    assert run_source("print 7 / 2; print 6 / 2; print 1 / 0; print 0 / 0; print -1 / 0;") == (
        "3.5\n3\ninf\nNaN\n-inf\n"
    )
    assert run_source("print 1 / 10000000; print 0 * -1;") == "0.0000001\n-0\n"


def test_structural_equality(run_source):
    source = """
    print [1, [2]] == [1, [2]];
    print {a: 1} == {a: 1};
    print {a: 1} != {a: 2};
    print nil == nil;
    print 'a' == 'a';
    """
    assert run_source(source) == "true\ntrue\ntrue\ntrue\ntrue\n"


def test_mixed_variants_are_unequal(run_source):
    assert run_source("print 1 == '1';", typecheck=False) == "false\n"


def test_ternary(run_source):
    assert run_source("print 'yes' if 1 < 2 else 'no';") == "yes\n"


def test_ternary_chain_wraps_left(run_source):
    # (a if c1 else b) if c2 else c
    assert run_source("print 'a' if false else 'b' if true else 'c';") == "b\n"
    assert run_source("print 'a' if true else 'b' if false else 'c';") == "c\n"


@pytest.mark.parametrize(
    "source",
    [
        "print 1 + 'a';",
        "print 'a' * 2;",
        "print 1 < 'a';",
        "print -'a';",
        "if 1 print 1;",
        "print 1 and true;",
        "print !nil;",
        "print 1();",
    ],
)
def test_type_mismatch_at_runtime(run_source, source):
    with pytest.raises(TypeMismatch):
        run_source(source, typecheck=False)


# ── Collections ──────────────────────────────────────────────


def test_list_aliasing(run_source):
    source = """
    make a = [1, 2];
    make b = a;
    b[0] = 9;
    push(b, 3);
    print a;
    """
    assert run_source(source) == "[9, 2, 3]\n"


def test_record_aliasing_through_call(run_source):
    source = """
    funk rename(r) { r.name = 'new'; }
    make rec = {name: 'old', size: 1};
    rename(rec);
    print rec;
    rec.extra = true;
    print rec.extra;
    """
    assert run_source(source) == "{name:new, size:1}\ntrue\n"


def test_string_indexing(run_source):
    assert run_source("print 'abc'[1];") == "b\n"


@pytest.mark.parametrize("source", ["print [1][1];", "print [1][-1];", "print [1][0.5];", "print 'ab'[2];"])
def test_index_out_of_range(run_source, source):
    with pytest.raises(IndexOutOfRange):
        run_source(source)


def test_index_assignment_out_of_range(run_source):
    with pytest.raises(IndexOutOfRange):
        run_source("make l = []; l[0] = 1;")


def test_missing_field(run_source):
    with pytest.raises(InvalidKey) as exc:
        run_source("make r = {a: 1}; print r.b;")
    assert "'b'" in exc.value.msg


def test_for_requires_iter(run_source):
    with pytest.raises(TypeMismatch):
        run_source("for x in [1] print x;", typecheck=False)


def test_for_iteration_scope_is_fresh(run_source):
    source = """
    make fs = [];
    for i in range_to(3) {
        funk get() { return i; }
        push(fs, get);
    }
    print fs[0]();
    print fs[2]();
    """
    assert run_source(source, typecheck=False) == "0\n2\n"


# ── Calls ────────────────────────────────────────────────────


def test_arity_mismatch(run_source):
    with pytest.raises(ArityMismatch):
        run_source("funk f(a) { return a; } f(1, 2);")
    with pytest.raises(ArityMismatch):
        run_source("len();")


def test_println_is_variadic(run_source):
    assert run_source("println('a', 1, true); println();") == "a1true\n\n"


def test_function_rendering(run_source):
    assert run_source("funk f() {} print f; print len;") == "<funk f>\n<builtin len>\n"


# ── Built-ins ────────────────────────────────────────────────


def test_ranges(run_source):
    source = """
    print range(2, 5);
    print range_skip(0, 10, 3);
    print range_to(0);
    print iter('ab');
    print iter([1, 2]);
    """
    assert run_source(source) == "iter[2, 3, 4]\niter[0, 3, 6, 9]\niter[]\niter[a, b]\niter[1, 2]\n"


@pytest.mark.parametrize(
    "source",
    [
        "range_to(-1);",
        "range_to(1.5);",
        "range(3, 1);",
        "range_skip(0, 4, 0);",
        "to_number('abc');",
    ],
)
def test_invalid_arguments(run_source, source):
    with pytest.raises(InvalidArgument):
        run_source(source)


@pytest.mark.parametrize(
    "source",
    [
        "range_to('a');",
        "len(1);",
        "push({}, 1);",
        "iter(1);",
        "to_number(true);",
    ],
)
def test_builtin_kind_errors(run_source, source):
    with pytest.raises(TypeMismatch):
        run_source(source)


def test_len(run_source):
    assert run_source("print len([1, 2]); print len('abc'); print len(range_to(4));") == "2\n3\n4\n"


def test_push_returns_same_list(run_source):
    assert run_source("make l = []; print push(l, 1) == l; print l;") == "true\n[1]\n"


def test_to_number(run_source):
    assert run_source("print to_number(' 42 ') + 1; print to_number('-2.5');") == "43\n-2.5\n"


def test_type_of(run_source):
    source = """
    print type_of(1);
    print type_of('s');
    print type_of(nil);
    print type_of([]);
    print type_of({});
    print type_of(range_to(1));
    print type_of(len);
    print type_of(type_of);
    """
    assert run_source(source) == "number\nstring\nnil\nlist\nrecord\niter\nbuiltin\nbuiltin\n"


def test_input_reads_one_line(run_source):
    assert run_source("print input() + '!'; print input();", stdin="first\nsecond\n") == (
        "first!\nsecond\n"
    )


def test_input_at_end_of_stream(run_source):
    assert run_source("print type_of(input());", stdin="") == "string\n"


def test_clock_is_milliseconds(run_source):
    assert run_source("print clock() > 1000000000000;") == "true\n"


def test_builtins_visible_in_nested_scopes():
    interp = Interpreter(io.StringIO())
    child = Environment.enclose(interp.globals)
    assert child.contains("len")


# ── Values ───────────────────────────────────────────────────


def test_format_number():
    assert format_number(7.0) == "7"
    assert format_number(3.5) == "3.5"
    assert format_number(float("inf")) == "inf"
    assert format_number(float("nan")) == "NaN"
    assert format_number(0.0) == "0"
    assert format_number(-0.0) == "-0"
    assert format_number(1e-07) == "0.0000001"
    assert format_number(-2.5e-10) == "-0.00000000025"


def test_value_eq():
    assert value_eq(VNumber(1.0), VNumber(1.0))
    assert not value_eq(VNumber(1.0), VString("1"))
    assert value_eq(VList([VBool(True)]), VList([VBool(True)]))
    assert not value_eq(VRecord({"a": NIL}), VRecord({"b": NIL}))
