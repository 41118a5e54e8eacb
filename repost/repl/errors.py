"""
FILE: repost/repl/errors.py
PURPOSE: Typed errors raised while parsing a REPL line
EXPORTS:
  - ParseError (base, derives from RepostError)
  - LexError: UnterminatedQuoteError, TrailingCharactersError
  - ResolutionError: UnknownCommandError, UnknownSubcommandError, MissingSubcommandError
  - BuilderError: UnknownOptionError, MissingOptionValueError, TooManyValuesError,
    UnexpectedArgumentError
  - ValidationError: MissingRequiredArgError, MissingRequiredOptionError, InvalidValueError
DEPENDENCIES:
  - repost.core.exceptions (RepostError)
NOTES:
  - Every error carries the offending token (if any) and a character offset
    so the REPL can point a caret at it
  - None of these are fatal; the REPL prints them and reads the next line
"""

from typing import Iterable, Optional

from ..core.exceptions import RepostError


class ParseError(RepostError):
    """
    Base class for input-language errors.

    Attributes:
        token: Offending Token, or None when the problem is a missing token
        offset: Character offset the error points at
        end: Offset one past the offending span (equals offset for a point)
    """

    def __init__(self, message: str, token=None, offset: Optional[int] = None):
        self.token = token
        if offset is None:
            offset = token.start if token is not None else 0
        self.offset = offset
        self.end = token.end if token is not None else offset
        super().__init__(message)


# --- Lexing ---


class LexError(ParseError):
    """Malformed quoting."""
    pass


class UnterminatedQuoteError(LexError):
    def __init__(self, offset: int):
        super().__init__("Unterminated quote", offset=offset)


class TrailingCharactersError(LexError):
    def __init__(self, offset: int):
        super().__init__(
            "Unexpected characters after closing quote (add a space)", offset=offset
        )


# --- Resolution ---


class ResolutionError(ParseError):
    """The leading tokens don't name a command."""

    def __init__(self, message: str, valid: Iterable[str], token=None, offset=None):
        self.valid = list(valid)
        super().__init__(f"{message}. Expected one of: {', '.join(self.valid)}", token, offset)


class UnknownCommandError(ResolutionError):
    def __init__(self, token, valid: Iterable[str]):
        super().__init__(f"Unknown command '{token.text}'", valid, token)


class UnknownSubcommandError(ResolutionError):
    def __init__(self, token, path: str, valid: Iterable[str]):
        self.path = path
        super().__init__(f"Unknown subcommand '{token.text}' for '{path}'", valid, token)


class MissingSubcommandError(ResolutionError):
    def __init__(self, path: str, valid: Iterable[str], offset: int):
        self.path = path
        super().__init__(f"'{path}' needs a subcommand", valid, offset=offset)


# --- Building ---


class BuilderError(ParseError):
    """The tokens after the command name break its grammar."""
    pass


class UnknownOptionError(BuilderError):
    def __init__(self, token):
        super().__init__(f"Unknown option '{token.text}'", token)


class MissingOptionValueError(BuilderError):
    """
    An option that takes a value was given none.

    Attributes:
        option: The spelling that was typed, e.g. "-m"
    """

    def __init__(self, option: str, token=None):
        self.option = option
        super().__init__(f"Option '{option}' requires a value", token)


class TooManyValuesError(BuilderError):
    def __init__(self, option: str, token=None):
        self.option = option
        super().__init__(f"Option '{option}' can only be given once", token)


class UnexpectedArgumentError(BuilderError):
    def __init__(self, token):
        super().__init__(f"Unexpected argument '{token.text}'", token)


# --- Validation ---


class ValidationError(ParseError):
    """The command is incomplete or holds an invalid value."""
    pass


class MissingRequiredArgError(ValidationError):
    """
    A required positional argument was not given.

    Attributes:
        arg: ArgKey of the missing slot
    """

    def __init__(self, arg, metavar: str, offset: int):
        self.arg = arg
        self.metavar = metavar
        super().__init__(f"Missing required argument <{metavar}>", offset=offset)


class MissingRequiredOptionError(ValidationError):
    def __init__(self, option, spelling: str, offset: int):
        self.option = option
        self.spelling = spelling
        super().__init__(f"Missing required option '{spelling}'", offset=offset)


class InvalidValueError(ValidationError):
    def __init__(self, token, message: str):
        super().__init__(message, token)
