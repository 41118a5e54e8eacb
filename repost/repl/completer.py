"""
FILE: repost/repl/completer.py
PURPOSE: Tab completion driven by the same grammar as the parser
EXPORTS:
  - Candidate, CompletionResult (dataclasses)
  - complete(line, cursor, provider) -> CompletionResult
  - RepostCompleter (prompt_toolkit Completer)
  - create_completer() -> RepostCompleter
DEPENDENCIES:
  - prompt_toolkit.completion (Completer, Completion)
  - repost.repl.tokenizer (tokenize_prefix, quote)
  - repost.repl.grammar (walk)
  - repost.repl.builder (Builder and expectations)
  - repost.repl.candidates (StoreCandidateProvider)
NOTES:
  - complete() is pure apart from calling the provider
  - Candidates are filtered by case-sensitive prefix match on the partial tail
  - Completed values get a trailing space; option names that still need a
    value and open-ended values ('create-', 'dev=', 'Accept:') don't
  - Any failure (including the provider's) gives an empty list
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .builder import Builder, NextPositionalArg, OptionNameChoice, OptionValue
from .candidates import StoreCandidateProvider
from .grammar import walk
from .tokenizer import PartialTail, ends_with_escape, needs_quoting, quote, tokenize_prefix

logger = logging.getLogger(__name__)

OPEN_ENDED = ("-", "=", ":")

Provider = Callable[..., List[str]]


@dataclass(frozen=True)
class Candidate:
    """
    One completion.

    Attributes:
        display: Text shown in the menu
        replacement: Text that replaces the replacement range
        meta: Short description (option help), may be empty
    """
    display: str
    replacement: str
    meta: str = ""


@dataclass(frozen=True)
class CompletionResult:
    replacement_range: Tuple[int, int]
    candidates: List[Candidate] = field(default_factory=list)


def _render(value: str, tail: Optional[PartialTail], space: bool) -> str:
    """
    Source text for a candidate value.

    The value keeps the tail's quote when it can be written inside it,
    otherwise quote() picks the form. A value ending in an escaping
    backslash stays bare and gets no trailing space.
    """
    open_ended = value.endswith(OPEN_ENDED)
    escaped_end = ends_with_escape(value)
    if (
        tail is not None
        and tail.quote is not None
        and tail.quote not in value
        and not escaped_end
    ):
        text = tail.quote + value
        if not open_ended:
            text += tail.quote
    elif needs_quoting(value) and not escaped_end:
        text = quote(value)
        if open_ended:
            text = text[:-1]
    else:
        text = value
    if space and not open_ended and not escaped_end:
        text += " "
    return text


def _candidates(
    values: Iterable[str],
    tail: Optional[PartialTail],
    prefix: str = "",
    space: bool = True,
    meta: Optional[dict] = None,
) -> List[Candidate]:
    typed = tail.text if tail is not None else ""
    result = []
    seen = set()
    for value in values:
        full = prefix + value
        if full in seen or not full.startswith(typed):
            continue
        seen.add(full)
        result.append(
            Candidate(value, _render(full, tail, space), (meta or {}).get(value, ""))
        )
    return result


def _option_candidates(options, tail: Optional[PartialTail]) -> List[Candidate]:
    result = []
    for opt in options:
        for spelling in opt.spellings:
            result.extend(
                _candidates([spelling], tail, space=not opt.takes_value, meta={spelling: opt.help})
            )
    return result


def _dynamic(provider: Optional[Provider], kind, key, builder: Builder) -> List[str]:
    if provider is None:
        return []
    return list(provider(kind, key, builder.snapshot()))


def _complete(tokens, tail: Optional[PartialTail], provider: Optional[Provider]) -> List[Candidate]:
    node, remaining, matched = walk(tokens)
    if not matched:
        return []
    if not node.is_leaf:
        return _candidates(node.child_names(), tail)

    builder = Builder(node)
    for token in remaining:
        builder.feed(token)
    expected = builder.expect(tail)
    kind = node.spec.kind

    if isinstance(expected, OptionNameChoice):
        return _option_candidates(expected.options, tail)
    if isinstance(expected, NextPositionalArg):
        arg = expected.arg
        values = arg.choices or _dynamic(provider, kind, arg.key, builder)
        return _candidates(values, tail)
    if isinstance(expected, OptionValue):
        opt = expected.option
        values = opt.suggestions or _dynamic(provider, kind, opt.key, builder)
        return _candidates(values, tail, prefix=expected.prefix)
    return []


def complete(line: str, cursor: Optional[int] = None, provider: Optional[Provider] = None) -> CompletionResult:
    """
    Compute completions for the text before the cursor.

    Examples:
        >>> [c.replacement for c in complete("cr").candidates]
        ['create ']
        >>> complete("create req foo http://x --me").candidates[0].replacement
        '--method'

    Args:
        line: Current input line
        cursor: Cursor offset (defaults to the end of line)
        provider: Dynamic candidate source, called as
            provider(kind, field, snapshot) -> List[str]

    Returns:
        CompletionResult whose range [start, cursor) is the partial tail
        (or the empty range at the cursor)
    """
    if cursor is None:
        cursor = len(line)
    cursor = max(0, min(cursor, len(line)))
    tokens, tail = tokenize_prefix(line[:cursor])
    start = tail.start if tail is not None else cursor
    try:
        candidates = _complete(tokens, tail, provider)
    except Exception:
        logger.debug("Completion failed for %r", line[:cursor], exc_info=True)
        candidates = []
    return CompletionResult((start, cursor), candidates)


class RepostCompleter(Completer):
    """
    prompt_toolkit adapter around complete().

    Args:
        provider: Dynamic candidate source (see complete())
    """

    def __init__(self, provider: Optional[Provider] = None):
        self.provider = provider

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        """
        Generate completions based on current input.

        Args:
            document: Current document with cursor position
            complete_event: Event that triggered completion

        Yields:
            Completion objects replacing the token under the cursor
        """
        cursor = document.cursor_position
        result = complete(document.text, cursor, self.provider)
        start, _ = result.replacement_range
        for candidate in result.candidates:
            yield Completion(
                candidate.replacement,
                start_position=start - cursor,
                display=candidate.display,
                display_meta=candidate.meta or None,
            )


def create_completer(context=None) -> RepostCompleter:
    """
    Factory for the REPL's completer.

    Args:
        context: REPLContext used for environment/request aware candidates
    """
    return RepostCompleter(StoreCandidateProvider(context))
