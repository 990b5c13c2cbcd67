"""
pairlisp - a small S-expression reader and evaluator
"""

from .errors import locate, SourceError, InternalError
from .values import (
    NULL, Null, Boolean, Pair, Symbol, Number, Character, String, Procedure,
    Value, format_value, from_list, to_list,
)
from .lexer import tokenize, format_tokens, Lexer, LexError, LexState, Token, TokenType
from .parser import parse, Parser, ParseError, EndOfInput
from .evaluator import Environment, Evaluator, EvalError
from .stdlib import STDLIB, get_stdlib, make_environment
from .repl import run_stream, dump_tokens

__version__ = "0.1.0"
__all__ = [
    "locate", "SourceError", "InternalError",
    "NULL", "Null", "Boolean", "Pair", "Symbol", "Number", "Character", "String",
    "Procedure", "Value", "format_value", "from_list", "to_list",
    "tokenize", "format_tokens", "Lexer", "LexError", "LexState", "Token", "TokenType",
    "parse", "Parser", "ParseError", "EndOfInput",
    "Environment", "Evaluator", "EvalError",
    "STDLIB", "get_stdlib", "make_environment",
    "run_stream", "dump_tokens",
]
