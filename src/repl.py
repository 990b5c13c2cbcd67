"""
pairlisp - Host Loop
Reads expressions from a byte stream, evaluates them and echoes the outcome
"""

from typing import Optional, TextIO
import logging
import sys

from .errors import SourceError
from .evaluator import Environment, EvalError, Evaluator
from .lexer import LexError, Lexer, format_tokens
from .parser import EndOfInput, ParseError, Parser
from .stdlib import make_environment
from .values import format_value

logger = logging.getLogger(__name__)


def report(message: str, out: TextIO):
    logger.info("reported %s", message)
    print(message, file=out)


def run_stream(stream, name: str = "<stdin>", env: Optional[Environment] = None,
               out: TextIO = None) -> int:
    """Evaluate every expression in ``stream``, one output line each.

    A lex or parse error abandons the rest of the broken expression; eval
    errors only abandon the expression itself. Either way reading resumes
    with the next expression. Returns the number of errors reported.
    """
    if out is None:
        out = sys.stdout
    parser = Parser(stream, name)
    evaluator = Evaluator(env if env is not None else make_environment())
    errors = 0

    while True:
        try:
            try:
                expression = parser.parse_expression()
            except RecursionError:
                raise ParseError("expression nested too deeply", parser.start) from None
        except EndOfInput:
            break
        except SourceError as e:
            errors += 1
            report(e.format(parser.source, name), out)
            parser.recover()
            continue

        try:
            try:
                printed = format_value(evaluator.eval(expression))
            except RecursionError:
                raise EvalError("expression nested too deeply") from None
        except SourceError as e:
            errors += 1
            # eval errors without a node position point at the expression
            offset = e.offset if e.offset is not None else getattr(expression, "offset", None)
            report(e.format(parser.source, name, offset), out)
            continue
        print(f"Eval result: {printed}", file=out)

    return errors


def dump_tokens(stream, name: str = "<stdin>", out: TextIO = None) -> int:
    """Debug aid: print the tokens completed on each input line.

    Stops at the first lex error, which is reported like any other.
    Returns the number of tokens seen.
    """
    if out is None:
        out = sys.stdout
    lexer = Lexer()
    pending = []
    count = 0
    while True:
        chunk = stream.read(1)
        if not chunk:
            break
        byte = chunk[0] if isinstance(chunk, bytes) else ord(chunk)
        try:
            pending.extend(lexer.consume(byte))
        except LexError as e:
            report(e.format(lexer.source, name), out)
            return count
        if byte == 0x0a and pending:
            print(format_tokens(lexer.source, pending), file=out)
            count += len(pending)
            pending = []
    try:
        pending.extend(lexer.finish())
    except LexError as e:
        report(e.format(lexer.source, name), out)
        return count
    if pending:
        print(format_tokens(lexer.source, pending), file=out)
        count += len(pending)
    return count


def main():
    logging.basicConfig()
    stream = getattr(sys.stdin, 'buffer', sys.stdin)
    errors = run_stream(stream, "<stdin>")
    sys.exit(1 if errors else 0)

if __name__ == "__main__":
    main()
