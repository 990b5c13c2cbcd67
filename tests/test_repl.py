import io

from pairlisp.evaluator import EvalError
from pairlisp.repl import dump_tokens, run_stream
from pairlisp.stdlib import make_environment
from pairlisp.values import Procedure


def run(source, env=None):
    out = io.StringIO()
    errors = run_stream(io.BytesIO(source), "t", env, out)
    return out.getvalue().splitlines(), errors


def test_echo_results():
    lines, errors = run(b"(+ 1 2 3)\n'(1 . 2)\n")
    assert lines == [
        "Eval result: ValNumber<6>",
        "Eval result: ValPair<(ValNumber<1> . ValNumber<2>)>",
    ]
    assert errors == 0


def test_eval_error_does_not_stop_loop():
    lines, errors = run(b"(+ 1 2)\nfoo\n(+ 3 4)")
    assert lines == [
        "Eval result: ValNumber<3>",
        "t:2:1: unbound variable: foo",
        "Eval result: ValNumber<7>",
    ]
    assert errors == 1


def test_eval_error_keeps_queued_tokens():
    lines, _ = run(b"foo(+ 1 2)")
    assert lines == [
        "t:1:1: unbound variable: foo",
        "Eval result: ValNumber<3>",
    ]


def test_lex_error_skips_rest_of_expression():
    lines, errors = run(b"(1 \x01 2)\n5\n")
    assert lines == [
        "t:1:4: unexpected byte 0x01",
        "Eval result: ValNumber<5>",
    ]
    assert errors == 1

    lines, errors = run(b"(+ 1 \x01 (+ 2 3))\n(+ 10 10)\n")
    assert lines == [
        "t:1:6: unexpected byte 0x01",
        "Eval result: ValNumber<20>",
    ]
    assert errors == 1


def test_parse_error_skips_rest_of_expression():
    lines, _ = run(b"(1 . 2 3 (4))\n(+ 1 1)")
    assert lines == [
        "t:1:8: unexpected token NUMBER<3>, expected RPAREN<)>",
        "Eval result: ValNumber<2>",
    ]


def test_error_without_position_points_at_expression():
    lines, _ = run(b"\r\n  (quote 1 2)")
    assert lines == ["t:2:3: quote: expected 1 argument(s), got 2"]


def test_unexpected_end_of_input():
    lines, errors = run(b"(+ 1\n")
    assert lines == ["t:2:1: unexpected end of input"]
    assert errors == 1


def test_custom_procedure_table():
    def fail(args, ctx):
        raise EvalError("always fails")

    env = make_environment({"fail": Procedure("fail", fail)})
    lines, _ = run(b"1 (fail)", env)
    assert lines == ["Eval result: ValNumber<1>", "t:1:3: always fails"]


def test_long_list_result():
    lines, errors = run(b"'(" + b"1 " * 5000 + b")\n(+ 1 2)\n")
    assert errors == 0
    assert lines[0].startswith("Eval result: ValPair<(ValNumber<1> . ValPair<(")
    assert lines[0].endswith("<()>" + ")>" * 5000)
    assert lines[1] == "Eval result: ValNumber<3>"


def test_deep_nesting_is_reported():
    lines, errors = run(b"(+ 1 " * 600 + b"0" + b")" * 600 + b"\n(+ 1 2)\n")
    assert lines == [
        "t:1:1001: expression nested too deeply",
        "Eval result: ValNumber<3>",
    ]
    assert errors == 1


def test_nesting_within_limit():
    lines, _ = run(b"(+ 1 " * 150 + b"0" + b")" * 150)
    assert lines == ["Eval result: ValNumber<150>"]


def test_recursion_error_during_eval_is_reported():
    def runaway(args, ctx):
        raise RecursionError("maximum recursion depth exceeded")

    env = make_environment({"runaway": Procedure("runaway", runaway)})
    lines, errors = run(b"(runaway) 4", env)
    assert lines == [
        "t:1:1: expression nested too deeply",
        "Eval result: ValNumber<4>",
    ]
    assert errors == 1


def test_dump_tokens():
    out = io.StringIO()
    count = dump_tokens(io.BytesIO(b"(a 1)\n; note\n2b"), "t", out)
    assert out.getvalue().splitlines() == [
        "[LPAREN<(>, IDENTIFIER<a>, NUMBER<1>, RPAREN<)>]",
        "[IDENTIFIER<2b>]",
    ]
    assert count == 5


def test_dump_tokens_stops_at_lex_error():
    out = io.StringIO()
    dump_tokens(io.BytesIO(b"a\n\x01 b\n"), "t", out)
    assert out.getvalue().splitlines() == ["[IDENTIFIER<a>]", "t:2:1: unexpected byte 0x01"]
