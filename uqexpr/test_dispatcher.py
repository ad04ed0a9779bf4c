import pytest

from uqexpr.dispatcher import (
    LineHandler,
    LineKind,
    classify,
    count_equals,
    strip_whitespace,
)
from uqexpr.messages import RUN_ERROR_MESSAGE
from uqexpr.store import LoopBinding, ScalarBinding


def run_lines(handler, lines, capsys):
    for line in lines:
        handler.handle_line(line)
    captured = capsys.readouterr()
    return captured.out.splitlines(), captured.err.splitlines()


def test_strip_whitespace_removes_interior_spaces():
    assert strip_whitespace(" x =\t2 + 2 \r") == "x=2+2"


def test_count_equals_skips_first_character():
    assert count_equals("=5") == 0
    assert count_equals("==5") == 1
    assert count_equals("a=b=c") == 2


@pytest.mark.parametrize("line,kind", [
    ("", LineKind.BLANK),
    ("   \t ", LineKind.BLANK),
    ("# comment", LineKind.BLANK),
    ("  #x=1", LineKind.BLANK),
    ("@print", LineKind.PRINT),
    (" @print", LineKind.EXPRESSION),
    ("@print ", LineKind.EXPRESSION),
    ("bad==1", LineKind.TOO_MANY_EQUALS),
    ("a=b=c", LineKind.TOO_MANY_EQUALS),
    ("2 + 2", LineKind.EXPRESSION),
    ("=5", LineKind.EXPRESSION),
    ("x = 2+2", LineKind.ASSIGNMENT),
    ("==5", LineKind.ASSIGNMENT),
])
def test_classify(line, kind):
    assert classify(line) is kind


def test_end_to_end_session(store, capsys):
    handler = LineHandler(store)
    out, err = run_lines(handler, ["x = 2+2", "@print", "y=x*3", "bad==1"], capsys)
    assert out == [
        "x = 4",
        "Variables:",
        "x = 4",
        "No loop variables were found.",
        "y = 12",
    ]
    assert err == [RUN_ERROR_MESSAGE]
    assert store.scalar_values() == {"x": 4.0, "y": 12.0}


def test_comments_and_blank_lines_are_silent(store, capsys):
    handler = LineHandler(store)
    out, err = run_lines(handler, ["# comment", "    ", ""], capsys)
    assert out == [] and err == []
    assert store.scalars == [] and store.loops == []


def test_expression_uses_precision(store, capsys):
    handler = LineHandler(store, precision=5)
    out, _ = run_lines(handler, ["1/3", "10 / 4"], capsys)
    assert out == ["Result = 0.33333", "Result = 2.5"]


def test_expression_infinity_is_printed(store, capsys):
    out, err = run_lines(LineHandler(store), ["1/0"], capsys)
    assert out == ["Result = inf"] and err == []


def test_reassignment_overwrites(store, capsys):
    out, _ = run_lines(LineHandler(store), ["a = 1", "a = a + 1"], capsys)
    assert out == ["a = 1", "a = 2"]
    assert store.scalars == [ScalarBinding("a", 2.0)]


def test_assignment_to_loop_is_echoed_but_dropped(store, capsys):
    store.add_loop("i", 1.0, 1.0, 5.0)
    out, err = run_lines(LineHandler(store), ["i = 42"], capsys)
    assert out == ["i = 42"] and err == []
    assert store.loops == [LoopBinding("i", 1.0, 1.0, 5.0)]
    assert store.scalars == []


def test_loop_names_are_not_visible_to_expressions(store, capsys):
    store.add_loop("i", 1.0, 1.0, 5.0)
    out, err = run_lines(LineHandler(store), ["i + 1"], capsys)
    assert out == [] and err == [RUN_ERROR_MESSAGE]


@pytest.mark.parametrize("line", [
    "x1 = 3",      # bad name
    "x_y = 3",
    "x = ",        # nothing to evaluate
    "==",
    "=5",          # evaluated as an expression
    "x = nope",    # undefined variable
    "x = 1 +",
    "3 = 4",
    " @print",
    "2 ** 3",
])
def test_bad_lines_report_error_and_leave_store_alone(store, capsys, line):
    store.add_scalar("keep", 1.0)
    out, err = run_lines(LineHandler(store), [line], capsys)
    assert out == []
    assert err == [RUN_ERROR_MESSAGE]
    assert store.scalars == [ScalarBinding("keep", 1.0)]


def test_name_checked_after_expression(store, capsys):
    calls = []

    def fake_evaluate(text, variables):
        calls.append((text, dict(variables)))
        return 7.0

    store.add_scalar("a", 1.0)
    handler = LineHandler(store, evaluator=fake_evaluate)
    out, err = run_lines(handler, ["9bad = a+1", "ok = a+1"], capsys)
    assert calls == [("a+1", {"a": 1.0}), ("a+1", {"a": 1.0})]
    assert out == ["ok = 7"]
    assert err == [RUN_ERROR_MESSAGE]


def test_handle_line_returns_kind(store, capsys):
    handler = LineHandler(store)
    assert handler.handle_line("@print") is LineKind.PRINT
    assert handler.handle_line("a==b") is LineKind.TOO_MANY_EQUALS
    capsys.readouterr()


def test_deeply_nested_line_does_not_stop_the_run(store, capsys):
    nested = "(" * 2000 + "1" + ")" * 2000
    out, err = run_lines(LineHandler(store), [nested, "x = " + nested, "2+2"], capsys)
    assert out == ["Result = 4"]
    assert err == [RUN_ERROR_MESSAGE, RUN_ERROR_MESSAGE]
    assert store.scalars == []


def test_uppercase_variable_can_be_read_back(store, capsys):
    out, err = run_lines(LineHandler(store), ["X = 5", "X * 2"], capsys)
    assert out == ["X = 5", "Result = 10"]
    assert err == []
