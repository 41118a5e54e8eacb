"""
FILE: repost/repl/tokenizer.py
PURPOSE: Split REPL input into quoting-aware tokens with character spans
EXPORTS:
  - TokenKind (enum)
  - Token (dataclass)
  - PartialTail (dataclass)
  - tokenize(line) -> List[Token]
  - tokenize_prefix(line) -> (List[Token], PartialTail | None)
  - ends_with_escape(text) -> bool
  - needs_quoting(text) -> bool
  - quote(text, quote_char) -> str
DEPENDENCIES:
  - repost.repl.errors (UnterminatedQuoteError, TrailingCharactersError)
NOTES:
  - Three lexical forms: 'single quoted', "double quoted", bare words
  - Backslash never unescapes: \\' stays \\' inside quotes, and in bare
    words "foo\\ bar" is the single lexeme "foo\\ bar"
  - A bare "--" is the option break marker; a quoted '--' is a value
  - Offsets are string indices (code points), matching prompt_toolkit
  - tokenize_prefix() never raises: an open quote becomes the partial tail
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .errors import UnterminatedQuoteError, TrailingCharactersError


WHITESPACE = " \t"
QUOTES = "'\""
BACKSLASH = "\\"
OPTION_BREAK = "--"


class TokenKind(Enum):
    BARE = "bare"
    SINGLE_QUOTED = "single"
    DOUBLE_QUOTED = "double"
    OPTION_BREAK = "break"


QUOTE_KINDS = {"'": TokenKind.SINGLE_QUOTED, '"': TokenKind.DOUBLE_QUOTED}


@dataclass(frozen=True)
class Token:
    """
    One lexeme of the input line.

    Attributes:
        text: Lexeme with surrounding quotes removed
        start: Offset of the first character (opening quote included)
        end: Offset one past the last character (closing quote included)
        kind: How the lexeme was written
    """
    text: str
    start: int
    end: int
    kind: TokenKind = TokenKind.BARE

    def source(self) -> str:
        """Render the token back into input form."""
        if self.kind == TokenKind.SINGLE_QUOTED:
            return f"'{self.text}'"
        if self.kind == TokenKind.DOUBLE_QUOTED:
            return f'"{self.text}"'
        return self.text


@dataclass(frozen=True)
class PartialTail:
    """
    The last, possibly unfinished token of a line being typed.

    Attributes:
        text: What has been typed so far, quotes removed
        start: Offset where the token begins (its opening quote, if any)
        quote: Opening quote character, or None for a bare word
        closed: True when the quote has already been closed
    """
    text: str
    start: int
    quote: Optional[str] = None
    closed: bool = False


def _scan_quoted(line: str, start: int) -> Tuple[str, int, bool]:
    """
    Read a quoted lexeme starting at the opening quote.

    Returns:
        (lexeme, index after the closing quote or end of line, closed)
    """
    quote_char = line[start]
    i = start + 1
    chars = []
    while i < len(line):
        ch = line[i]
        if ch == BACKSLASH and i + 1 < len(line):
            # Escaped character is kept together with its backslash
            chars.append(line[i:i + 2])
            i += 2
            continue
        if ch == quote_char:
            return "".join(chars), i + 1, True
        chars.append(ch)
        i += 1
    return "".join(chars), i, False


def _scan_bare(line: str, start: int) -> Tuple[str, int]:
    """Read a bare word. Returns (lexeme, index after it)."""
    i = start
    chars = []
    while i < len(line) and line[i] not in WHITESPACE:
        ch = line[i]
        if ch == BACKSLASH and i + 1 < len(line) and line[i + 1] in WHITESPACE + BACKSLASH:
            chars.append(line[i:i + 2])
            i += 2
            continue
        chars.append(ch)
        i += 1
    return "".join(chars), i


def _skip_whitespace(line: str, i: int) -> int:
    while i < len(line) and line[i] in WHITESPACE:
        i += 1
    return i


def _bare_token(text: str, start: int, end: int) -> Token:
    kind = TokenKind.OPTION_BREAK if text == OPTION_BREAK else TokenKind.BARE
    return Token(text, start, end, kind)


def tokenize(line: str) -> List[Token]:
    """
    Split a complete line into tokens.

    Examples:
        >>> [t.text for t in tokenize("create req 'my name' http://x")]
        ['create', 'req', 'my name', 'http://x']

    Args:
        line: Full input line

    Returns:
        Tokens in order, spans strictly increasing

    Raises:
        UnterminatedQuoteError: A quote is never closed
        TrailingCharactersError: A closing quote is followed by a non-space
    """
    tokens = []
    i = _skip_whitespace(line, 0)
    while i < len(line):
        start = i
        if line[i] in QUOTES:
            text, i, closed = _scan_quoted(line, start)
            if not closed:
                raise UnterminatedQuoteError(start)
            if i < len(line) and line[i] not in WHITESPACE:
                raise TrailingCharactersError(i)
            tokens.append(Token(text, start, i, QUOTE_KINDS[line[start]]))
        else:
            text, i = _scan_bare(line, start)
            tokens.append(_bare_token(text, start, i))
        i = _skip_whitespace(line, i)
    return tokens


def tokenize_prefix(line: str) -> Tuple[List[Token], Optional[PartialTail]]:
    """
    Split a line prefix for completion.

    The last token is returned as a PartialTail whenever the prefix does not
    end in whitespace, or when it ends inside an open quote. Malformed input
    never raises: characters glued to a closing quote start a new token.

    Returns:
        (complete tokens, partial tail or None)
    """
    tokens: List[Token] = []
    i = _skip_whitespace(line, 0)
    while i < len(line):
        start = i
        if line[i] in QUOTES:
            quote_char = line[i]
            text, i, closed = _scan_quoted(line, start)
            if i >= len(line):
                return tokens, PartialTail(text, start, quote_char, closed)
            tokens.append(Token(text, start, i, QUOTE_KINDS[quote_char]))
        else:
            text, i = _scan_bare(line, start)
            if i >= len(line):
                return tokens, PartialTail(text, start)
            tokens.append(_bare_token(text, start, i))
        i = _skip_whitespace(line, i)
    return tokens, None


def ends_with_escape(text: str) -> bool:
    """
    True when text ends in an odd run of backslashes.

    Such a lexeme can only be written bare at the end of a line: quoted,
    its last backslash would escape the closing quote, and followed by a
    space it would escape the space.
    """
    trailing = len(text) - len(text.rstrip(BACKSLASH))
    return trailing % 2 == 1


def needs_quoting(text: str) -> bool:
    """True when text would not survive as a single bare word."""
    if not text or text == OPTION_BREAK or text[0] in QUOTES:
        return True
    return any(ch in WHITESPACE for ch in text)


def quote(text: str, quote_char: Optional[str] = None) -> str:
    """
    Render a lexeme so that tokenize() reads it back as one token.

    Args:
        text: Lexeme to render
        quote_char: Force this quote character; by default text is left
            bare when possible, else wrapped in a quote it doesn't contain

    Examples:
        >>> quote("foo")
        'foo'
        >>> quote("foo bar")
        "'foo bar'"

    Notes:
        - A lexeme for which ends_with_escape() is true is returned bare;
          it reads back as one token only at the end of a line
    """
    if quote_char is None:
        if not needs_quoting(text):
            return text
        quote_char = '"' if "'" in text and '"' not in text else "'"
    return f"{quote_char}{text}{quote_char}"
