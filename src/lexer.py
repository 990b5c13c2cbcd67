"""
pairlisp - Lexer
Incremental byte-at-a-time tokenizer over a growing source buffer
"""

from enum import IntEnum, auto
from dataclasses import dataclass
from typing import List, Optional
import logging

from .errors import SourceError

logger = logging.getLogger(__name__)


class TokenType(IntEnum):
    NUMBER = auto()
    IDENTIFIER = auto()
    STRING = auto()
    LPAREN = auto()
    RPAREN = auto()
    DOT = auto()
    QUOTE = auto()

class LexState(IntEnum):
    IDLE = auto()
    NUMBER = auto()
    IDENTIFIER = auto()
    COMMENT = auto()
    STRING = auto()
    STRING_ESCAPE = auto()

SINGLE_CHAR_TOKENS = {
    ord('('): TokenType.LPAREN,
    ord(')'): TokenType.RPAREN,
    ord('.'): TokenType.DOT,
    ord("'"): TokenType.QUOTE,
}

WHITESPACE = frozenset(b' \t\r\n')
DIGITS = frozenset(b'0123456789')
# '.' is listed but never reaches an identifier: it is a single-char token first
IDENTIFIER_CHARS = frozenset(
    b'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ'
    b'-!$%*+?&.\\/~`:=<>^#'
) | DIGITS
COMMENT_CHARS = frozenset(range(0x20, 0x7f)) | {0x09}
STRING_CHARS = COMMENT_CHARS | {0x0a, 0x0d}


@dataclass(slots=True)
class Token:
    """A token is a span of the lexer's source buffer.

    ``length`` and ``type`` change while the token is still being scanned.
    """
    offset: int
    length: int
    type: TokenType

    def __repr__(self):
        return f"Token({self.type.name}, {self.offset}+{self.length})"


def describe_byte(byte: int) -> str:
    if 0x20 <= byte < 0x7f:
        return repr(chr(byte))
    return f"0x{byte:02x}"


class LexError(SourceError):
    def __init__(self, message: str, offset: int, byte: Optional[int] = None):
        super().__init__(message, offset)
        self.byte = byte


def format_tokens(source: str, tokens: List[Token]) -> str:
    """Render tokens with their literal text, e.g. ``[NUMBER<1>, RPAREN<)>]``"""
    parts = [f"{t.type.name}<{source[t.offset:t.offset + t.length]}>" for t in tokens]
    return "[" + ", ".join(parts) + "]"


class Lexer:
    """Finite-state lexer fed one byte at a time.

    Each call to ``consume`` returns the tokens completed by that byte:
    none, the flushed in-progress token, a new single-character token, or
    both of those in source order.
    """

    __slots__ = ('buffer', 'state', 'token')

    def __init__(self):
        self.buffer = bytearray()
        self.state = LexState.IDLE
        self.token: Optional[Token] = None

    @property
    def source(self) -> str:
        return self.buffer.decode('latin-1')

    def text(self, token: Token) -> str:
        return self.buffer[token.offset:token.offset + token.length].decode('latin-1')

    # === Token bookkeeping ===

    def begin(self, type: TokenType, state: LexState):
        self.token = Token(len(self.buffer), 1, type)
        self.state = state

    def extend(self):
        self.token.length += 1

    def flush(self) -> List[Token]:
        """Close the in-progress token, if any"""
        if self.state == LexState.IDLE or self.token is None:
            self.state = LexState.IDLE
            return []
        token = self.token
        self.token = None
        self.state = LexState.IDLE
        return [token]

    def add_single(self, byte: int) -> List[Token]:
        tokens = self.flush()
        tokens.append(Token(len(self.buffer), 1, SINGLE_CHAR_TOKENS[byte]))
        return tokens

    def error(self, byte: int) -> LexError:
        return LexError(f"unexpected byte {describe_byte(byte)}", len(self.buffer), byte)

    # === State machine ===

    def step(self, byte: int) -> List[Token]:
        state = self.state

        if state == LexState.IDLE:
            if byte in SINGLE_CHAR_TOKENS:
                return self.add_single(byte)
            if byte in WHITESPACE:
                return []
            if byte in DIGITS:
                self.begin(TokenType.NUMBER, LexState.NUMBER)
                return []
            if byte in IDENTIFIER_CHARS:
                self.begin(TokenType.IDENTIFIER, LexState.IDENTIFIER)
                return []
            if byte == ord('"'):
                self.begin(TokenType.STRING, LexState.STRING)
                return []
            if byte == ord(';'):
                self.state = LexState.COMMENT
                return []
            raise self.error(byte)

        if state == LexState.NUMBER or state == LexState.IDENTIFIER:
            if byte in SINGLE_CHAR_TOKENS:
                return self.add_single(byte)
            if byte in WHITESPACE:
                return self.flush()
            if byte in DIGITS:
                self.extend()
                return []
            if byte in IDENTIFIER_CHARS:
                # numbers and identifiers share a lexical class
                self.token.type = TokenType.IDENTIFIER
                self.state = LexState.IDENTIFIER
                self.extend()
                return []
            if byte == ord('"'):
                tokens = self.flush()
                self.begin(TokenType.STRING, LexState.STRING)
                return tokens
            if byte == ord(';'):
                tokens = self.flush()
                self.state = LexState.COMMENT
                return tokens
            raise self.error(byte)

        if state == LexState.COMMENT:
            if byte == 0x0a or byte == 0x0d:
                self.state = LexState.IDLE
                return []
            if byte in COMMENT_CHARS:
                return []
            raise self.error(byte)

        if state == LexState.STRING:
            if byte == ord('"'):
                self.extend()
                return self.flush()
            if byte == ord('\\'):
                self.extend()
                self.state = LexState.STRING_ESCAPE
                return []
            if byte in STRING_CHARS:
                self.extend()
                return []
            raise self.error(byte)

        # LexState.STRING_ESCAPE
        if byte in STRING_CHARS:
            self.extend()
            self.state = LexState.STRING
            return []
        raise self.error(byte)

    def consume(self, byte: int) -> List[Token]:
        """Feed one byte; the byte is buffered even when it is rejected"""
        try:
            tokens = self.step(byte)
        except LexError as e:
            logger.debug("lex error at %d: %s", e.offset, e.message)
            raise
        finally:
            self.buffer.append(byte)
        if tokens and logger.isEnabledFor(logging.DEBUG):
            logger.debug("emitted %s", format_tokens(self.source, tokens))
        return tokens

    def feed(self, data: bytes) -> List[Token]:
        tokens = []
        for byte in data:
            tokens.extend(self.consume(byte))
        return tokens

    def finish(self) -> List[Token]:
        """Signal end of input and flush whatever token is still open"""
        if self.state in (LexState.STRING, LexState.STRING_ESCAPE):
            raise LexError("unterminated string", self.token.offset)
        return self.flush()

    def reset(self):
        """Drop any in-progress token and return to idle"""
        self.token = None
        self.state = LexState.IDLE


def tokenize(source: str) -> List[Token]:
    """Convenience function to tokenize a complete source string"""
    lexer = Lexer()
    tokens = lexer.feed(source.encode('latin-1'))
    tokens.extend(lexer.finish())
    return tokens
