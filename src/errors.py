"""
pairlisp - Errors
Source positions and the error hierarchy shared by lexer, parser and evaluator
"""

from typing import Optional, Tuple


def locate(source: str, offset: int) -> Tuple[int, int]:
    """Convert a byte offset into a 1-based (line, column) pair.

    CR, LF and CR LF each count as a single line break.
    """
    line = 1
    column = 1
    prev = ''
    for ch in source[:offset]:
        if ch == '\n' and prev == '\r':
            pass  # already counted at '\r'
        elif ch == '\r' or ch == '\n':
            line += 1
            column = 1
        else:
            column += 1
        prev = ch
    return line, column


class SourceError(Exception):
    """Base for every error reported to the user with a source position"""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        # nodes built outside the parser carry offset -1
        self.offset = offset if offset is not None and offset >= 0 else None

    def format(self, source: str, name: str = "<input>", offset: Optional[int] = None) -> str:
        """Render as ``name:line:column: message``"""
        if offset is None or offset < 0:
            offset = self.offset if self.offset is not None else 0
        line, column = locate(source, offset)
        return f"{name}:{line}:{column}: {self.message}"


class InternalError(Exception):
    """A caller broke an internal contract; never shown as an input error"""
