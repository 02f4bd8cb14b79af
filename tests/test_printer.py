"""AST printer tests."""

import pytest

from funk import dump


@pytest.mark.parametrize(
    "source,expected",
    [
        ("print 1 + 2 * 3;", "print ((1 + (2 * 3)))"),
        ("make x = -y;", "make x = (-y)"),
        ("make x;", "make x"),
        ("a = b == c;", "a = (b == c)"),
        ("print a and b or !c;", "print (((a and b) or (!c)))"),
        ("l[0] = r.k;", "l[0] = r.k"),
        ("r.k = f(1, 'two');", 'r.k = f(1, "two")'),
        ("print [1, 2];", "print ([1, 2])"),
        ("print {a: 1, b: nil};", "print ({a: 1, b: nil})"),
        ("print 'a' if c1 else 'b' if c2 else 'c';", 'print ((("a" if c1 else "b") if c2 else "c"))'),
        ("return;", "return"),
    ],
)
def test_single_line(source, expected):
    assert dump(source) == expected + "\n"


def test_string_delimiter_chosen_to_fit():
    assert dump("print \"it's\";") == 'print ("it\'s")\n'


def test_nested_statements():
    source = (
        "funk f(n) { if n < 1 return 0; else { return n; } }\n"
        "while x print 1;\n"
        "for i in range_to(3) { print i; }\n"
        "with 2 as two print two;\n"
    )
    expected = (
        "funk f(n) {\n"
        "  if (n < 1)\n"
        "    return 0\n"
        "  else {\n"
        "    return n\n"
        "  }\n"
        "}\n"
        "while x\n"
        "  print (1)\n"
        "for i in range_to(3) {\n"
        "  print (i)\n"
        "}\n"
        "with 2 as two\n"
        "  print (two)\n"
    )
    assert dump(source) == expected


def test_dump_is_stable_for_equal_sources():
    source = "make a = 1; { make b = a + 1; print b; }"
    assert dump(source) == dump(source)
    assert dump(source) == "make a = 1\n{\n  make b = (a + 1)\n  print (b)\n}\n"
