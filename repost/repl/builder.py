"""
FILE: repost/repl/builder.py
PURPOSE: Turn the tokens after a command name into a typed command
EXPORTS:
  - Builder (per-command accumulator: feed/consume/expect/finalize/snapshot)
  - BuilderSnapshot (frozen copy of a builder's state)
  - NextPositionalArg, OptionNameChoice, OptionValue, NothingExpected
    (what expect() reports)
DEPENDENCIES:
  - repost.repl.grammar (CommandNode, ArgSpec, OptSpec, ArgKey, OptKey)
  - repost.repl.tokenizer (Token, TokenKind, PartialTail)
  - repost.repl.errors (builder and validation errors)
  - repost.repl.command_types (HelpCommand)
NOTES:
  - Positional values fill the declared args in order, then the catch-all
  - Options may appear anywhere until the break marker "--"; after it every
    token is positional
  - Only bare tokens can be options, so a quoted '-1' is always a value
  - "--method=GET" and "-m=GET" give the value inline
  - feed() commits a token; expect() only looks and never changes state,
    which is what tab completion relies on
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .command_types import HelpCommand
from .errors import (
    InvalidValueError,
    MissingOptionValueError,
    MissingRequiredArgError,
    MissingRequiredOptionError,
    TooManyValuesError,
    UnexpectedArgumentError,
    UnknownOptionError,
)
from .grammar import ArgKey, ArgSpec, CommandNode, OptKey, OptSpec
from .tokenizer import PartialTail, Token, TokenKind


# --- Expectations (what the next token should be) ---


@dataclass(frozen=True)
class NextPositionalArg:
    arg: ArgSpec


@dataclass(frozen=True)
class OptionNameChoice:
    options: Tuple[OptSpec, ...]


@dataclass(frozen=True)
class OptionValue:
    """
    The next token is the value of an option.

    Attributes:
        option: The option waiting for a value
        prefix: Text in front of the value inside the same token
            ("--method=" for the inline form, else "")
    """
    option: OptSpec
    prefix: str = ""


@dataclass(frozen=True)
class NothingExpected:
    pass


Expectation = Union[NextPositionalArg, OptionNameChoice, OptionValue, NothingExpected]


@dataclass(frozen=True)
class BuilderSnapshot:
    """
    Read-only view of what has been typed for a command so far.

    Attributes:
        path: Command path, e.g. ("create", "request")
        args: Filled positional slots by key (catch-all excluded)
        rest: Catch-all values
        options: Values given per option (flags hold "" per occurrence)
        sealed: Whether the break marker has been seen
    """
    path: Tuple[str, ...]
    args: Dict[ArgKey, str] = field(default_factory=dict)
    rest: Tuple[str, ...] = ()
    options: Dict[OptKey, Tuple[str, ...]] = field(default_factory=dict)
    sealed: bool = False


def looks_like_option(token: Token) -> bool:
    """A bare token starting with '-' that isn't just '-'."""
    return token.kind == TokenKind.BARE and token.text.startswith("-") and token.text != "-"


class Builder:
    """
    Accumulates the arguments of one leaf command.

    Usage:
        builder = Builder(node)
        builder.consume(tokens)
        command = builder.finalize()
    """

    def __init__(self, node: CommandNode, offset: int = 0):
        if not node.is_leaf:
            raise ValueError(f"'{node.path_text}' is not a leaf command")
        self.node = node
        self.spec = node.spec
        self.args: List[Token] = []
        self.rest: List[Token] = []
        self.opts: Dict[OptKey, List[Token]] = {}
        self.sealed = False
        self.pending: Optional[Tuple[OptSpec, Token]] = None
        # Offset reported for errors about missing things
        self.offset = offset

    # --- Committing tokens ---

    def feed(self, token: Token) -> None:
        """
        Commit one token.

        Raises:
            MissingOptionValueError: An option's value slot got another option
            TooManyValuesError: A non-repeatable option was given twice
            UnknownOptionError: Dash-prefixed token matching no option
            UnexpectedArgumentError: More positional values than slots
            InvalidValueError: A flag was given an inline value
        """
        self.offset = token.end

        if self.pending is not None:
            opt, opt_token = self.pending
            if token.kind == TokenKind.OPTION_BREAK or looks_like_option(token):
                raise MissingOptionValueError(opt_token.text, opt_token)
            self._store(opt, token)
            self.pending = None
            return

        if token.kind == TokenKind.OPTION_BREAK and not self.sealed:
            self.sealed = True
            return

        if not self.sealed and looks_like_option(token):
            name, eq, inline = token.text.partition("=")
            opt = self.spec.find_option(name)
            if opt is not None:
                self._feed_option(opt, token, name, inline if eq else None)
                return
            if not self.spec.unknown_dash_is_literal:
                raise UnknownOptionError(token)

        self._feed_positional(token)

    def _feed_option(self, opt: OptSpec, token: Token, name: str, inline: Optional[str]) -> None:
        if not opt.repeatable and self.opts.get(opt.key):
            raise TooManyValuesError(name, token)
        if not opt.takes_value:
            if inline is not None:
                raise InvalidValueError(token, f"Option '{name}' does not take a value")
            self._store(opt, Token("", token.start, token.end, token.kind))
        elif inline is not None:
            start = token.start + len(name) + 1
            self._store(opt, Token(inline, start, token.end, token.kind))
        else:
            self.pending = (opt, token)

    def _feed_positional(self, token: Token) -> None:
        if len(self.args) < len(self.spec.args):
            self.args.append(token)
        elif self.spec.rest is not None:
            self.rest.append(token)
        else:
            raise UnexpectedArgumentError(token)

    def _store(self, opt: OptSpec, token: Token) -> None:
        self.opts.setdefault(opt.key, []).append(token)

    def consume(self, tokens) -> "Builder":
        """
        Commit every token, then check no option is left waiting for a value.

        Raises:
            MissingOptionValueError: Line ends right after a value option
            (and everything feed() raises)
        """
        for token in tokens:
            self.feed(token)
        if self.pending is not None:
            opt_token = self.pending[1]
            raise MissingOptionValueError(opt_token.text, opt_token)
        return self

    # --- Looking ahead (never mutates) ---

    def available_options(self, include_help: bool = True) -> Tuple[OptSpec, ...]:
        """Options that may still be given."""
        available = []
        for opt in self.spec.all_opts:
            if opt.key == OptKey.HELP and not include_help:
                continue
            if opt.repeatable or not self.opts.get(opt.key):
                available.append(opt)
        return tuple(available)

    def expect(self, partial: Optional[PartialTail] = None) -> Expectation:
        """
        Report what the next token (or the partial tail) should be.

        Args:
            partial: Token being typed at the cursor, if any

        Returns:
            NextPositionalArg, OptionNameChoice, OptionValue or NothingExpected
        """
        if self.pending is not None:
            return OptionValue(self.pending[0])

        typing_option = (
            partial is not None
            and partial.quote is None
            and not self.sealed
            and partial.text.startswith("-")
        )
        if typing_option:
            name, eq, _ = partial.text.partition("=")
            if eq:
                opt = self.spec.find_option(name)
                if opt is not None and opt.takes_value:
                    return OptionValue(opt, prefix=name + "=")
                return NothingExpected()
            options = self.available_options()
            if options or not self.spec.unknown_dash_is_literal:
                return OptionNameChoice(options)

        if len(self.args) < len(self.spec.args):
            return NextPositionalArg(self.spec.args[len(self.args)])
        if self.spec.rest is not None:
            return NextPositionalArg(self.spec.rest)
        if partial is None:
            options = self.available_options(include_help=False)
            if options:
                return OptionNameChoice(options)
        return NothingExpected()

    def snapshot(self) -> BuilderSnapshot:
        return BuilderSnapshot(
            path=self.node.path,
            args={arg.key: tok.text for arg, tok in zip(self.spec.args, self.args)},
            rest=tuple(tok.text for tok in self.rest),
            options={key: tuple(tok.text for tok in toks) for key, toks in self.opts.items()},
            sealed=self.sealed,
        )

    # --- Finishing ---

    def _validate(self, token: Token, spec: Union[ArgSpec, OptSpec]) -> None:
        choices = getattr(spec, "choices", ())
        if choices and token.text not in choices:
            message = spec.invalid_message or f"Expected one of: {', '.join(choices)}"
            raise InvalidValueError(token, f"{message} (got '{token.text}')")
        if spec.validator is not None and not spec.validator(token.text):
            raise InvalidValueError(token, f"{spec.invalid_message} (got '{token.text}')")

    def finalize(self):
        """
        Build the command.

        Returns:
            The command dataclass for this leaf, or HelpCommand when
            -h/--help was given

        Raises:
            MissingOptionValueError: An option is still waiting for its value
            MissingRequiredArgError: A required positional slot is empty
            MissingRequiredOptionError: A required option wasn't given
            InvalidValueError: A value fails its slot's choices or validator
        """
        if self.pending is not None:
            opt_token = self.pending[1]
            raise MissingOptionValueError(opt_token.text, opt_token)

        if self.opts.get(OptKey.HELP):
            return HelpCommand(topic=self.node.path)

        for arg in self.spec.args[len(self.args):]:
            if arg.required:
                raise MissingRequiredArgError(arg.key, arg.metavar, self.offset)
        rest = self.spec.rest
        if rest is not None and len(self.rest) < rest.min_count:
            raise MissingRequiredArgError(rest.key, rest.metavar, self.offset)
        for opt in self.spec.opts:
            if opt.required and not self.opts.get(opt.key):
                raise MissingRequiredOptionError(opt.key, opt.long, self.offset)

        kwargs = {}
        for arg, token in zip(self.spec.args, self.args):
            self._validate(token, arg)
            kwargs[arg.dest] = token.text
        for arg in self.spec.args[len(self.args):]:
            kwargs[arg.dest] = None
        if rest is not None:
            for token in self.rest:
                self._validate(token, rest)
            kwargs[rest.dest] = tuple(token.text for token in self.rest)

        for opt in self.spec.opts:
            tokens = self.opts.get(opt.key, [])
            for token in tokens:
                if opt.takes_value:
                    self._validate(token, opt)
            if not opt.takes_value:
                kwargs[opt.dest] = bool(tokens)
            elif opt.repeatable:
                kwargs[opt.dest] = tuple(token.text for token in tokens)
            else:
                kwargs[opt.dest] = tokens[0].text if tokens else None

        return self.spec.command_type(**kwargs)
