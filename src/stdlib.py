"""
pairlisp - Standard Library
Native procedures and the default procedure table
"""

from typing import Dict, List, Optional

from .evaluator import Environment, EvalError
from .values import (
    NULL, Boolean, Number, Pair, Procedure, Value, INT_MIN, INT_MAX, format_value,
)


def arguments(name: str, args: Value) -> List[Value]:
    """Collect a proper argument list, rejecting malformed chains"""
    items = []
    while args is not NULL:
        if not isinstance(args, Pair):
            raise EvalError(f"{name}: malformed argument list, got {args.kind}",
                            offset_of(args))
        items.append(args.car)
        args = args.cdr
    return items

def arity(name: str, items: List[Value], count: int):
    if len(items) != count:
        raise EvalError(f"{name}: expected {count} argument(s), got {len(items)}")

def offset_of(value: Value) -> Optional[int]:
    return getattr(value, 'offset', None)

def number(name: str, value: Value) -> int:
    if not isinstance(value, Number):
        raise EvalError(f"{name}: wrong type argument {value.kind}, expected Number",
                        offset_of(value))
    return value.value

def checked(name: str, result: int) -> Number:
    if not INT_MIN <= result <= INT_MAX:
        raise EvalError(f"{name}: integer overflow")
    return Number(result)


# Arithmetic
def add(args, ctx):
    total = 0
    node = args
    while node is not NULL:
        if not isinstance(node, Pair):
            raise EvalError(f"+: wrong type argument list {node.kind}, expected Pair",
                            offset_of(node))
        total = checked("+", total + number("+", node.car)).value
        node = node.cdr
    return Number(total)

def subtract(args, ctx):
    items = [number("-", item) for item in arguments("-", args)]
    if not items:
        raise EvalError("-: expected at least 1 argument, got 0")
    if len(items) == 1:
        return checked("-", -items[0])
    result = items[0]
    for item in items[1:]:
        result = checked("-", result - item).value
    return Number(result)

def multiply(args, ctx):
    result = 1
    for item in arguments("*", args):
        result = checked("*", result * number("*", item)).value
    return Number(result)


# Lists
def quote(args, ctx):
    items = arguments("quote", args)
    arity("quote", items, 1)
    return items[0]

def list_fn(args, ctx):
    arguments("list", args)
    return args

def cons(args, ctx):
    items = arguments("cons", args)
    arity("cons", items, 2)
    return Pair(items[0], items[1])

def car(args, ctx):
    items = arguments("car", args)
    arity("car", items, 1)
    if not isinstance(items[0], Pair):
        raise EvalError(f"car: wrong type argument {format_value(items[0])}, expected Pair",
                        offset_of(items[0]))
    return items[0].car

def cdr(args, ctx):
    items = arguments("cdr", args)
    arity("cdr", items, 1)
    if not isinstance(items[0], Pair):
        raise EvalError(f"cdr: wrong type argument {format_value(items[0])}, expected Pair",
                        offset_of(items[0]))
    return items[0].cdr

def eq(args, ctx):
    items = arguments("eq?", args)
    arity("eq?", items, 2)
    a, b = items
    # atoms compare by value, pairs only by identity
    if isinstance(a, Pair) or isinstance(b, Pair):
        return Boolean(a is b)
    return Boolean(a is b or (type(a) is type(b) and a == b))

def equal(args, ctx):
    items = arguments("equal?", args)
    arity("equal?", items, 2)
    a, b = items
    return Boolean(a is b or (type(a) is type(b) and a == b))


STDLIB: Dict[str, Procedure] = {
    "+": Procedure("+", add),
    "-": Procedure("-", subtract),
    "*": Procedure("*", multiply),
    "quote": Procedure("quote", quote, special=True),
    "list": Procedure("list", list_fn),
    "cons": Procedure("cons", cons),
    "car": Procedure("car", car),
    "cdr": Procedure("cdr", cdr),
    "eq?": Procedure("eq?", eq),
    "equal?": Procedure("equal?", equal),
}

def make_environment(extra: Optional[Dict[str, Value]] = None) -> Environment:
    """Fresh global environment holding the builtins plus ``extra``"""
    env = Environment(STDLIB)
    if extra:
        for name, value in extra.items():
            env.define(name, value)
    return env

def get_stdlib() -> Dict[str, Procedure]:
    """Get copy of standard library"""
    return STDLIB.copy()
