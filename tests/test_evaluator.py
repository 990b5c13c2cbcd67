import pytest

from pairlisp.evaluator import Environment, EvalError, Evaluator
from pairlisp.parser import parse
from pairlisp.stdlib import STDLIB, get_stdlib, make_environment
from pairlisp.values import (
    NULL, Boolean, Number, Pair, Procedure, String, Symbol, from_list,
)


def p(source):
    expressions = parse(source)
    assert len(expressions) == 1
    return expressions[0]


def e(source, env=None):
    """Shortcut for evaluating expressions in tests."""
    return Evaluator(env or make_environment()).eval(p(source))


def test_self_evaluating():
    assert e("42") == Number(42)
    assert e('"s"') == String("s")
    assert e("#f") == Boolean(False)
    assert e("()") is NULL
    assert e("+") is STDLIB["+"]


def test_addition():
    assert e("(+ 1 2 3)") == Number(6)
    assert e("(+)") == Number(0)
    assert e("(+ 1 (+ 2 3) 4)") == Number(10)


def test_addition_wrong_type():
    with pytest.raises(EvalError) as info:
        e('(+ 1 "x")')
    assert info.value.message == "+: wrong type argument String, expected Number"
    assert info.value.offset == 5


def test_addition_malformed_chain():
    with pytest.raises(EvalError) as info:
        e("(+ 1 . 2)")
    assert "expected Pair" in info.value.message


def test_overflow():
    with pytest.raises(EvalError) as info:
        e("(+ 9223372036854775807 1)")
    assert info.value.message == "+: integer overflow"


def test_unbound_variable():
    with pytest.raises(EvalError) as info:
        e("undefined-name")
    assert info.value.message == "unbound variable: undefined-name"
    assert info.value.offset == 0

    with pytest.raises(EvalError) as info:
        e("(+ 1 nope)")
    assert info.value.offset == 5


def test_wrong_type_to_apply():
    with pytest.raises(EvalError) as info:
        e("(1 2)")
    assert info.value.message == "wrong type to apply: ValNumber<1>"
    with pytest.raises(EvalError):
        e("(() 2)")


def test_quote_is_special_form():
    assert e("'x") == Symbol("x")
    assert e("(quote undefined)") == Symbol("undefined")
    assert e("'(1 2)") == from_list([Number(1), Number(2)])
    assert e("''a") == p("(quote a)")
    with pytest.raises(EvalError) as info:
        e("(quote a b)")
    assert info.value.message == "quote: expected 1 argument(s), got 2"


def test_arithmetic():
    assert e("(- 10 3 2)") == Number(5)
    assert e("(- 4)") == Number(-4)
    assert e("(* 2 3 4)") == Number(24)
    assert e("(*)") == Number(1)
    with pytest.raises(EvalError):
        e("(-)")


def test_list_procedures():
    assert e("(list 1 (+ 1 1))") == from_list([Number(1), Number(2)])
    assert e("(list)") is NULL
    assert e("(cons 1 2)") == Pair(Number(1), Number(2))
    assert e("(car '(1 2))") == Number(1)
    assert e("(cdr '(1 2))") == from_list([Number(2)])
    assert e("(eq? 'a 'a)") == Boolean(True)
    assert e("(eq? 1 2)") == Boolean(False)
    assert e("(eq? '(1) '(1))") == Boolean(False)
    assert e("(equal? '(1) '(1))") == Boolean(True)
    assert e("(equal? '(1 (2)) '(1 (3)))") == Boolean(False)
    with pytest.raises(EvalError):
        e("(car 1)")
    with pytest.raises(EvalError):
        e("(cons 1)")


def test_arguments_evaluated_left_to_right():
    order = []

    def tick(args, ctx):
        order.append(len(order) + 1)
        return Number(order[-1])

    env = make_environment({"tick": Procedure("tick", tick)})
    assert e("(list (tick) (tick) (tick))", env) == from_list([Number(1), Number(2), Number(3)])
    assert order == [1, 2, 3]


def test_eval_arguments_keeps_dotted_tail():
    evaluator = Evaluator(make_environment())
    assert evaluator.eval_arguments(p("(1 . 2)")) == Pair(Number(1), Number(2))
    assert evaluator.eval_arguments(p("((+ 1 1) (+ 2 2))")) == from_list([Number(2), Number(4)])
    assert evaluator.eval_arguments(NULL) is NULL


def test_input_tree_not_mutated():
    tree = p("(+ 1 (+ 2 3))")
    before = p("(+ 1 (+ 2 3))")
    e_result = Evaluator(make_environment()).eval(tree)
    assert e_result == Number(6)
    assert tree == before


def test_procedure_receives_evaluator():
    seen = []

    def read_x(args, ctx):
        seen.append(ctx)
        return ctx.eval(Symbol("x"))

    env = make_environment({"read-x": Procedure("read-x", read_x), "x": Number(9)})
    evaluator = Evaluator(env)
    assert evaluator.eval(p("(read-x)")) == Number(9)
    assert seen == [evaluator]


def test_environment_chain():
    child = Environment({"x": Number(1)}, parent=make_environment())
    assert "x" in child
    assert "+" in child
    assert "y" not in child
    assert Evaluator(child).eval(p("(+ x 2)")) == Number(3)

    # an explicit environment overrides the evaluator's own
    evaluator = Evaluator(make_environment())
    assert evaluator.eval(p("(+ x x)"), child) == Number(2)
    with pytest.raises(EvalError):
        evaluator.eval(p("x"))


def test_stdlib_copy():
    table = get_stdlib()
    table["+"] = None
    assert isinstance(STDLIB["+"], Procedure)
    env = make_environment()
    env.define("+", Number(0))
    assert isinstance(STDLIB["+"], Procedure)


def test_eq_compares_pairs_by_identity():
    env = make_environment({"xs": from_list([Number(1)])})
    assert e("(eq? xs xs)", env) == Boolean(True)
    assert e("(eq? xs '(1))", env) == Boolean(False)
    assert e("(equal? xs '(1))", env) == Boolean(True)


def test_equal_on_long_lists():
    items = " ".join(["7"] * 5000)
    assert e(f"(equal? '({items}) '({items}))") == Boolean(True)
    assert e(f"(equal? '({items}) '({items} 8))") == Boolean(False)
