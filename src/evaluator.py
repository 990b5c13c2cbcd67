"""
pairlisp - Evaluator
Tree-walking evaluation of pair trees against a procedure table
"""

from typing import Dict, Optional
import logging

from .errors import SourceError
from .values import NULL, Pair, Procedure, Symbol, Value, format_value

logger = logging.getLogger(__name__)


class EvalError(SourceError):
    """Evaluation failure; offset may be None when no node position applies"""


class Environment:
    """Name to Value bindings with an optional enclosing environment"""

    __slots__ = ('bindings', 'parent')

    def __init__(self, bindings: Optional[Dict[str, Value]] = None,
                 parent: Optional['Environment'] = None):
        self.bindings = dict(bindings) if bindings else {}
        self.parent = parent

    def lookup(self, name: str) -> Optional[Value]:
        env = self
        while env is not None:
            if name in env.bindings:
                return env.bindings[name]
            env = env.parent
        return None

    def define(self, name: str, value: Value):
        self.bindings[name] = value

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def __repr__(self):
        return f"Environment({sorted(self.bindings)})"


class Evaluator:
    """Evaluates values in an explicit environment.

    The evaluator is also the context handed to native procedures, which
    can call back into ``eval`` for their own arguments.
    """

    __slots__ = ('env',)

    def __init__(self, env: Environment):
        self.env = env

    def eval(self, value: Value, env: Optional[Environment] = None) -> Value:
        if env is None:
            env = self.env

        if isinstance(value, Symbol):
            result = env.lookup(value.name)
            if result is None:
                raise EvalError(f"unbound variable: {value.name}", value.offset)
            return result

        if isinstance(value, Pair):
            head = self.eval(value.car, env)
            if not isinstance(head, Procedure):
                raise EvalError(f"wrong type to apply: {format_value(head)}", value.offset)
            if head.special:
                args = value.cdr
            else:
                args = self.eval_arguments(value.cdr, env)
            logger.debug("applying %s", head.name)
            return head(args, self)

        return value

    def eval_arguments(self, value: Value, env: Optional[Environment] = None) -> Value:
        """Evaluate each car of a pair chain, left to right, into a new chain"""
        root = Pair(NULL, NULL)
        last = root
        while isinstance(value, Pair):
            cell = Pair(self.eval(value.car, env), NULL, value.offset)
            last.cdr = cell
            last = cell
            value = value.cdr
        if value is not NULL:
            last.cdr = self.eval(value, env)
        return root.cdr
