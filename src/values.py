"""
pairlisp - Values
Runtime node types shared by the parser and the evaluator
"""

from dataclasses import dataclass, field
from typing import Callable, Union

# Numbers are fixed-width
INT_MIN = -(1 << 63)
INT_MAX = (1 << 63) - 1


class Null:
    """The empty list"""
    __slots__ = ()
    kind = "Null"

    def __repr__(self):
        return "NULL"

    def __bool__(self):
        return False

NULL = Null()


@dataclass(slots=True)
class Boolean:
    value: bool
    offset: int = field(default=-1, compare=False, repr=False)
    kind = "Boolean"

@dataclass(slots=True, eq=False, repr=False)
class Pair:
    """A cons cell.

    Cells are only assigned by whoever is building the chain; once handed
    out they are treated as read-only. Comparison and printing walk the
    cdr spine in a loop, so long lists cost no stack.
    """
    car: 'Value'
    cdr: 'Value'
    offset: int = field(default=-1)
    kind = "Pair"

    def __eq__(self, other):
        if not isinstance(other, Pair):
            return NotImplemented
        a, b = self, other
        while isinstance(a, Pair) and isinstance(b, Pair):
            if a is b:
                return True
            if a.car != b.car:
                return False
            a, b = a.cdr, b.cdr
        return a is b or a == b

    __hash__ = None

    def __repr__(self):
        return format_value(self)

@dataclass(slots=True)
class Symbol:
    name: str
    offset: int = field(default=-1, compare=False, repr=False)
    kind = "Symbol"

@dataclass(slots=True)
class Number:
    value: int
    offset: int = field(default=-1, compare=False, repr=False)
    kind = "Number"

@dataclass(slots=True)
class Character:
    value: str
    offset: int = field(default=-1, compare=False, repr=False)
    kind = "Character"

@dataclass(slots=True)
class String:
    value: str
    offset: int = field(default=-1, compare=False, repr=False)
    kind = "String"

@dataclass(slots=True, eq=False)
class Procedure:
    """Native procedure called as ``fn(args, evaluator)``.

    Special forms receive their argument list unevaluated.
    """
    name: str
    fn: Callable
    special: bool = False
    kind = "Procedure"

    def __call__(self, args, evaluator):
        return self.fn(args, evaluator)


Value = Union[Null, Boolean, Pair, Symbol, Number, Character, String, Procedure]


def from_list(items, tail: Value = NULL) -> Value:
    """Build a pair chain from a Python sequence"""
    result = tail
    for item in reversed(items):
        result = Pair(item, result)
    return result


def to_list(value: Value) -> list:
    """Collect the cars of a proper list; raises ValueError on a dotted tail"""
    items = []
    while isinstance(value, Pair):
        items.append(value.car)
        value = value.cdr
    if value is not NULL:
        raise ValueError(f"not a proper list, tail is {format_value(value)}")
    return items


def format_value(value: Value) -> str:
    """Debug rendering: ``Val<Kind><payload>``, NULL as ``<()>``"""
    if value is NULL:
        return "<()>"
    if isinstance(value, Pair):
        parts = []
        count = 0
        while isinstance(value, Pair):
            parts.append("ValPair<(" + format_value(value.car) + " . ")
            count += 1
            value = value.cdr
        parts.append(format_value(value))
        parts.append(")>" * count)
        return "".join(parts)
    if isinstance(value, Boolean):
        payload = "#t" if value.value else "#f"
    elif isinstance(value, Symbol):
        payload = value.name
    elif isinstance(value, String):
        payload = '"' + value.value.replace('\\', '\\\\').replace('"', '\\"') + '"'
    elif isinstance(value, Procedure):
        payload = value.name
    else:
        payload = str(value.value)
    return f"Val{value.kind}<{payload}>"
