"""
pairlisp - Parser
Recursive descent over tokens pulled from the lexer on demand
"""

from collections import deque
from typing import List, Optional
import io
import logging

from .errors import SourceError, InternalError
from .lexer import Lexer, LexError, Token, TokenType, format_tokens
from .values import (
    NULL, Boolean, Number, Pair, String, Symbol, Value, INT_MIN, INT_MAX, format_value,
)

logger = logging.getLogger(__name__)

# lists and quotes nested deeper than this are rejected before the
# interpreter stack runs out
MAX_NESTING = 200

ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '\\': '\\', '"': '"'}


class ParseError(SourceError):
    pass

class EndOfInput(Exception):
    """Raised when the byte source runs dry between expressions"""


def unescape(body: str) -> str:
    chars = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == '\\' and i + 1 < len(body):
            i += 1
            ch = ESCAPES.get(body[i], body[i])
        chars.append(ch)
        i += 1
    return ''.join(chars)


class Parser:
    """Builds pair trees from a byte source, one expression per call"""

    __slots__ = ('lexer', 'stream', 'name', 'pending', 'exhausted', 'depth', 'nesting', 'start')

    def __init__(self, stream, name: str = "<input>"):
        if isinstance(stream, str):
            stream = io.BytesIO(stream.encode('latin-1'))
        elif isinstance(stream, (bytes, bytearray)):
            stream = io.BytesIO(bytes(stream))
        self.lexer = Lexer()
        self.stream = stream
        self.name = name
        self.pending = deque()
        self.exhausted = False
        self.depth = 0  # open parentheses of the current top-level expression
        self.nesting = 0
        self.start = 0

    @property
    def source(self) -> str:
        return self.lexer.source

    def __iter__(self):
        while True:
            try:
                yield self.parse_expression()
            except EndOfInput:
                return

    # === Token stream ===

    def read_byte(self) -> Optional[int]:
        chunk = self.stream.read(1)
        if not chunk:
            return None
        if isinstance(chunk, str):
            chunk = chunk.encode('latin-1')
        return chunk[0]

    def next_token(self) -> Token:
        """Pop the next token, feeding bytes to the lexer until one is ready"""
        while not self.pending:
            if self.exhausted:
                raise EndOfInput()
            byte = self.read_byte()
            if byte is None:
                self.exhausted = True
                self.pending.extend(self.lexer.finish())
            else:
                try:
                    self.pending.extend(self.lexer.consume(byte))
                except LexError:
                    self.lexer.reset()
                    raise
        token = self.pending.popleft()
        if token.type == TokenType.LPAREN:
            self.depth += 1
        elif token.type == TokenType.RPAREN and self.depth > 0:
            self.depth -= 1
        return token

    def expect_token(self) -> Token:
        """Like next_token, but running out of input is a parse error"""
        try:
            return self.next_token()
        except EndOfInput:
            raise ParseError("unexpected end of input", len(self.lexer.buffer)) from None

    def recover(self):
        """Skip the rest of a broken top-level expression.

        Tokens are discarded until every parenthesis it opened is closed;
        further lex errors met on the way are skipped too.
        """
        skipped = 0
        while self.depth > 0:
            try:
                self.next_token()
            except LexError:
                continue
            except EndOfInput:
                break
            skipped += 1
        self.depth = 0
        self.nesting = 0
        logger.debug("recovered after skipping %d tokens", skipped)

    # === Expressions ===

    def atom(self, token: Token) -> Value:
        text = self.lexer.text(token)

        if token.type == TokenType.NUMBER:
            try:
                value = int(text)
            except ValueError:
                raise ParseError(f"invalid integer literal {text}", token.offset) from None
            if not INT_MIN <= value <= INT_MAX:
                raise ParseError(f"integer literal out of range: {text}", token.offset)
            return Number(value, token.offset)

        if token.type == TokenType.STRING:
            return String(unescape(text[1:-1]), token.offset)

        if text == '#t':
            return Boolean(True, token.offset)
        if text == '#f':
            return Boolean(False, token.offset)
        return Symbol(text, token.offset)

    def parse_list(self, open_token: Token) -> Value:
        """Parse the rest of a list after its opening parenthesis"""
        token = self.expect_token()
        if token.type == TokenType.RPAREN:
            return NULL

        root = Pair(NULL, NULL)  # sentinel; the list hangs off root.cdr
        last = root
        while True:
            cell = Pair(self.parse_expression(token), NULL, token.offset)
            last.cdr = cell
            last = cell

            token = self.expect_token()
            if token.type == TokenType.RPAREN:
                break
            if token.type == TokenType.DOT:
                last.cdr = self.parse_operand()
                token = self.expect_token()
                if token.type != TokenType.RPAREN:
                    raise ParseError(
                        f"unexpected token {self.describe(token)}, expected RPAREN<)>",
                        token.offset)
                break

        first = root.cdr
        first.offset = open_token.offset
        return first

    def parse_quote(self, quote_token: Token) -> Value:
        quoted = self.parse_operand()
        head = Symbol("quote", quote_token.offset)
        return Pair(head, Pair(quoted, NULL, quote_token.offset), quote_token.offset)

    def describe(self, token: Token) -> str:
        return format_tokens(self.lexer.source, [token])[1:-1]

    def dispatch(self, token: Token) -> Value:
        if token.type in (TokenType.NUMBER, TokenType.IDENTIFIER, TokenType.STRING):
            return self.atom(token)
        if token.type in (TokenType.LPAREN, TokenType.QUOTE):
            if self.nesting >= MAX_NESTING:
                raise ParseError("expression nested too deeply", token.offset)
            self.nesting += 1
            try:
                if token.type == TokenType.LPAREN:
                    return self.parse_list(token)
                return self.parse_quote(token)
            finally:
                self.nesting -= 1
        raise ParseError(f"unsupported token {self.describe(token)}", token.offset)

    def parse_operand(self) -> Value:
        """Read and parse the single expression required after '.' or quote"""
        return self.dispatch(self.expect_token())

    def parse_expression(self, token: Optional[Token] = None) -> Value:
        """Parse one expression, starting from ``token`` when already read.

        Raises EndOfInput when the source ends before the expression starts.
        """
        if token is not None:
            if token.type == TokenType.RPAREN:
                raise InternalError(f"closing parenthesis delegated at offset {token.offset}")
            return self.dispatch(token)

        self.depth = 0
        self.nesting = 0
        token = self.next_token()
        self.start = token.offset
        value = self.dispatch(token)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("parsed %s", format_value(value))
        return value


def parse(source: str) -> List[Value]:
    """Convenience function to parse every expression in a string"""
    return list(Parser(source))
