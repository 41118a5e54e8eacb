"""
FILE: repost/repl/dispatcher.py
PURPOSE: Parse a full REPL line into a command and hand it to an executor
EXPORTS:
  - parse_line(line) -> Command | None
  - dispatch(line, executor) -> result of executor, or None for a blank line
DEPENDENCIES:
  - repost.repl.tokenizer (tokenize)
  - repost.repl.grammar (resolve)
  - repost.repl.builder (Builder)
NOTES:
  - Pipeline: tokenize -> resolve -> Builder.consume -> finalize
  - Every failure is a ParseError subclass carrying an offset
"""

from typing import Callable, Optional, TypeVar

from .builder import Builder
from .command_types import Command
from .grammar import resolve
from .tokenizer import tokenize

T = TypeVar("T")


def parse_line(line: str) -> Optional[Command]:
    """
    Parse one full line.

    Examples:
        >>> parse_line("create req foo http://x -m GET")
        CreateRequest(name='foo', url='http://x', method='GET', headers=(), body=None)
        >>> parse_line("   ") is None
        True

    Returns:
        The finalized command, or None if the line is blank

    Raises:
        LexError, ResolutionError, BuilderError, ValidationError
    """
    tokens = tokenize(line)
    if not tokens:
        return None
    node, remaining = resolve(tokens, end=len(line.rstrip()))
    consumed = len(tokens) - len(remaining)
    builder = Builder(node, offset=tokens[consumed - 1].end)
    builder.consume(remaining)
    return builder.finalize()


def dispatch(line: str, executor: Callable[[Command], T]) -> Optional[T]:
    """
    Parse a line and run the command through executor.

    Args:
        line: Full input line
        executor: Called with the finalized command

    Returns:
        Whatever executor returns, or None for a blank line
    """
    command = parse_line(line)
    if command is None:
        return None
    return executor(command)
