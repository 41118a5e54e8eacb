"""
FILE: repost/repl/grammar.py
PURPOSE: Declarative command grammar and alias-aware command tree
EXPORTS:
  - ArgKey, OptKey (enums naming positional slots and options)
  - ArgSpec, OptSpec, CommandSpec (frozen grammar descriptors)
  - CommandNode (tree node wrapping a CommandSpec)
  - COMMANDS (top-level CommandSpec table)
  - ROOT (CommandNode holding every top-level command)
  - resolve(tokens) -> (CommandNode, remaining tokens)
  - walk(tokens) -> (CommandNode, remaining tokens, matched)
DEPENDENCIES:
  - repost.repl.command_types (CommandKind and command dataclasses)
  - repost.repl.errors (resolution errors)
  - repost.core.constants (HTTP_METHODS, EXTRACTION_SOURCES)
NOTES:
  - ROOT is built once at import and never mutated
  - The same table drives full-line parsing and tab completion
  - Names and aliases must be unique among siblings (checked at build)
  - Every leaf accepts -h/--help, which turns the line into a HelpCommand
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..core.constants import HTTP_METHODS, EXTRACTION_SOURCES
from . import command_types as ct
from .command_types import CommandKind
from .errors import UnknownCommandError, UnknownSubcommandError, MissingSubcommandError


class ArgKey(Enum):
    NAME = "name"
    URL = "url"
    SOURCE = "source"
    KEY = "key"
    UNKNOWN = "unknown"


class OptKey(Enum):
    METHOD = "method"
    HEADER = "header"
    DATA = "data"
    TO_VAR = "to_var"
    QUIET = "quiet"
    HELP = "help"


@dataclass(frozen=True)
class ArgSpec:
    """
    A positional slot.

    Attributes:
        key: Semantic name used by the completion provider
        dest: Field of the command dataclass receiving the value
        metavar: Name shown in usage and error messages
        required: Whether finalize() insists on a value
        choices: Accepted values (enforced); also offered by completion
        validator: Extra check on the value; invalid_message explains a failure
        min_count: Minimum number of values (catch-all slot only)
    """
    key: ArgKey
    dest: str
    metavar: str
    required: bool = True
    choices: Tuple[str, ...] = ()
    validator: Optional[Callable[[str], bool]] = None
    invalid_message: str = ""
    min_count: int = 0


@dataclass(frozen=True)
class OptSpec:
    """
    A named option.

    Attributes:
        key: Semantic name used by the completion provider
        dest: Field of the command dataclass receiving the value
        long: Long spelling, e.g. "--method"
        short: Short spelling, e.g. "-m"
        takes_value: False for boolean flags
        repeatable: Whether the option may be given more than once
        required: Whether finalize() insists on it
        suggestions: Values offered by completion (not enforced)
        validator: Check on each value; invalid_message explains a failure
    """
    key: OptKey
    dest: str
    long: str
    short: Optional[str] = None
    takes_value: bool = True
    repeatable: bool = False
    required: bool = False
    metavar: str = "value"
    suggestions: Tuple[str, ...] = ()
    validator: Optional[Callable[[str], bool]] = None
    invalid_message: str = ""
    help: str = ""

    @property
    def spellings(self) -> Tuple[str, ...]:
        return (self.long, self.short) if self.short else (self.long,)

    def usage(self) -> str:
        names = "|".join(s for s in (self.short, self.long) if s)
        text = f"{names} <{self.metavar}>" if self.takes_value else names
        if self.repeatable:
            text += "..."
        return text if self.required else f"[{text}]"


HELP_OPT = OptSpec(
    OptKey.HELP, "help", "--help", "-h", takes_value=False, help="show help for this command"
)


@dataclass(frozen=True)
class CommandSpec:
    """
    Static description of one command (leaf) or command group (non-leaf).

    Attributes:
        name: Primary name
        aliases: Other accepted spellings
        help: One line description
        args: Positional slots, filled in order
        rest: Catch-all slot receiving extra positional values
        opts: Options (-h/--help is added to every leaf automatically)
        children: Subcommands; a spec with children is never a leaf
        unknown_dash_is_literal: Treat unknown dash-prefixed tokens as values
        kind: CommandKind of a leaf
        command_type: Dataclass built by a leaf
    """
    name: str
    aliases: Tuple[str, ...] = ()
    help: str = ""
    args: Tuple[ArgSpec, ...] = ()
    rest: Optional[ArgSpec] = None
    opts: Tuple[OptSpec, ...] = ()
    children: Tuple["CommandSpec", ...] = ()
    unknown_dash_is_literal: bool = False
    kind: Optional[CommandKind] = None
    command_type: Optional[type] = None

    @property
    def names(self) -> Tuple[str, ...]:
        return (self.name,) + self.aliases

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def all_opts(self) -> Tuple[OptSpec, ...]:
        return self.opts + (HELP_OPT,) if self.is_leaf else self.opts

    def find_option(self, spelling: str) -> Optional[OptSpec]:
        """Option declared with this long or short spelling, if any."""
        for opt in self.all_opts:
            if spelling in opt.spellings:
                return opt
        return None


class CommandNode:
    """
    Position of a CommandSpec in the resolution tree.

    Attributes:
        spec: The command's grammar
        path: Primary names from the root, e.g. ("create", "request")
        children: Child nodes keyed by every name and alias
    """

    def __init__(self, spec: CommandSpec, path: Tuple[str, ...] = ()):
        self.spec = spec
        self.path = path
        self.children: Dict[str, "CommandNode"] = {}
        self.ordered: List["CommandNode"] = []
        for child_spec in spec.children:
            child = CommandNode(child_spec, path + (child_spec.name,))
            for name in child_spec.names:
                if name in self.children:
                    raise ValueError(f"Duplicate command name '{name}' under '{self.path_text}'")
                self.children[name] = child
            self.ordered.append(child)

    @property
    def is_leaf(self) -> bool:
        return self.spec.is_leaf

    @property
    def path_text(self) -> str:
        return " ".join(self.path)

    def child(self, name: str) -> Optional["CommandNode"]:
        return self.children.get(name)

    def child_names(self) -> List[str]:
        """Names and aliases of every child, in declaration order."""
        names = []
        for child in self.ordered:
            names.extend(child.spec.names)
        return names

    def usage(self) -> str:
        """One line usage, e.g. 'create request <name> <url> [-m|--method <method>]'."""
        if not self.is_leaf:
            return f"{self.path_text} {{{'|'.join(c.spec.name for c in self.ordered)}}}"
        parts = [self.path_text]
        for arg in self.spec.args:
            parts.append(f"<{arg.metavar}>" if arg.required else f"[{arg.metavar}]")
        rest = self.spec.rest
        if rest is not None:
            parts.append(f"<{rest.metavar}>..." if rest.min_count else f"[{rest.metavar}]...")
        parts.extend(opt.usage() for opt in self.spec.opts)
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"CommandNode({self.path_text!r})"


# --- Value validators ---


def _is_header(value: str) -> bool:
    key, sep, _ = value.partition(":")
    return bool(sep and key.strip())


def _is_env_value(value: str) -> bool:
    env, sep, _ = value.partition("=")
    return bool(sep and env)


# --- Command table ---


def _filters() -> ArgSpec:
    return ArgSpec(ArgKey.UNKNOWN, "filters", "filter", required=False)


REQUESTS_NAMES = ("request", "reqs", "req", "r")
VARIABLES_NAMES = ("variable", "vars", "var", "v")
OPTIONS_NAMES = ("option", "opts", "opt", "o")

COMMANDS: Tuple[CommandSpec, ...] = (
    CommandSpec(
        "print", ("get", "show", "p"), "Print stored objects",
        children=(
            CommandSpec(
                "requests", REQUESTS_NAMES, "List requests, optionally filtered by name",
                rest=_filters(),
                kind=CommandKind.PRINT_REQUESTS, command_type=ct.PrintRequests,
            ),
            CommandSpec(
                "variables", VARIABLES_NAMES, "List variables, optionally filtered by name",
                rest=_filters(),
                kind=CommandKind.PRINT_VARIABLES, command_type=ct.PrintVariables,
            ),
            CommandSpec(
                "environments", ("environment", "envs", "env", "e"), "List environments",
                kind=CommandKind.PRINT_ENVIRONMENTS, command_type=ct.PrintEnvironments,
            ),
            CommandSpec(
                "workspaces", ("workspace", "ws", "w"), "List workspaces",
                kind=CommandKind.PRINT_WORKSPACES, command_type=ct.PrintWorkspaces,
            ),
            CommandSpec(
                "options", OPTIONS_NAMES, "List request options, optionally filtered by name",
                rest=_filters(),
                kind=CommandKind.PRINT_OPTIONS, command_type=ct.PrintOptions,
            ),
        ),
    ),
    CommandSpec(
        "create", ("new", "add", "c"), "Create a request or variable",
        children=(
            CommandSpec(
                "request", ("req", "r"), "Create a request; {placeholders} become options",
                args=(
                    ArgSpec(ArgKey.NAME, "name", "name"),
                    ArgSpec(ArgKey.URL, "url", "url"),
                ),
                opts=(
                    OptSpec(
                        OptKey.METHOD, "method", "--method", "-m",
                        metavar="method", suggestions=HTTP_METHODS,
                        help="HTTP method (inferred from the name by default)",
                    ),
                    OptSpec(
                        OptKey.HEADER, "headers", "--header", "-H",
                        repeatable=True, metavar="key:value",
                        validator=_is_header,
                        invalid_message="Headers must look like 'Key: Value'",
                        help="request header",
                    ),
                    OptSpec(
                        OptKey.DATA, "body", "--data", "-d",
                        metavar="body", help="request body, or @file to read it from a file",
                    ),
                ),
                kind=CommandKind.CREATE_REQUEST, command_type=ct.CreateRequest,
            ),
            CommandSpec(
                "variable", ("var", "v"), "Create a variable in one or more environments",
                args=(ArgSpec(ArgKey.NAME, "name", "name"),),
                rest=ArgSpec(
                    ArgKey.UNKNOWN, "env_vals", "env=value", min_count=1,
                    validator=_is_env_value,
                    invalid_message="Environment values must look like 'env=value'",
                ),
                kind=CommandKind.CREATE_VARIABLE, command_type=ct.CreateVariable,
            ),
        ),
    ),
    CommandSpec(
        "delete", ("remove", "del", "rm"), "Delete stored objects",
        children=(
            CommandSpec(
                "requests", REQUESTS_NAMES, "Delete requests by name",
                rest=ArgSpec(ArgKey.UNKNOWN, "names", "name", min_count=1),
                kind=CommandKind.DELETE_REQUESTS, command_type=ct.DeleteRequests,
            ),
            CommandSpec(
                "variables", VARIABLES_NAMES, "Delete variables by name or id",
                rest=ArgSpec(ArgKey.UNKNOWN, "names", "name|id", min_count=1),
                kind=CommandKind.DELETE_VARIABLES, command_type=ct.DeleteVariables,
            ),
            CommandSpec(
                "options", OPTIONS_NAMES, "Delete request options by name",
                rest=ArgSpec(ArgKey.UNKNOWN, "names", "name", min_count=1),
                kind=CommandKind.DELETE_OPTIONS, command_type=ct.DeleteOptions,
            ),
        ),
    ),
    CommandSpec(
        "set", ("use", "u"), "Change the current context",
        children=(
            CommandSpec(
                "environment", ("env", "e"), "Select an environment (none to clear)",
                args=(ArgSpec(ArgKey.NAME, "name", "name", required=False),),
                kind=CommandKind.SET_ENVIRONMENT, command_type=ct.SetEnvironment,
            ),
            CommandSpec(
                "workspace", ("ws", "w"), "Switch workspace (created on first use)",
                args=(ArgSpec(ArgKey.NAME, "name", "name"),),
                kind=CommandKind.SET_WORKSPACE, command_type=ct.SetWorkspace,
            ),
            CommandSpec(
                "request", ("req", "r"), "Select a request (none to clear)",
                args=(ArgSpec(ArgKey.NAME, "name", "name", required=False),),
                kind=CommandKind.SET_REQUEST, command_type=ct.SetRequest,
            ),
            CommandSpec(
                "option", ("opt", "o"), "Set the value(s) of an option of the current request",
                args=(ArgSpec(ArgKey.NAME, "name", "name"),),
                rest=ArgSpec(ArgKey.UNKNOWN, "values", "value", required=False),
                unknown_dash_is_literal=True,
                kind=CommandKind.SET_OPTION, command_type=ct.SetOption,
            ),
        ),
    ),
    CommandSpec(
        "run", ("r",), "Send a request (the current one by default)",
        args=(ArgSpec(ArgKey.NAME, "name", "request-name", required=False),),
        opts=(
            OptSpec(
                OptKey.QUIET, "quiet", "--quiet", "-q", takes_value=False,
                help="only print the status line",
            ),
        ),
        kind=CommandKind.RUN, command_type=ct.Run,
    ),
    CommandSpec(
        "extract", ("ex",), "Save part of the current request's response into a variable",
        args=(
            ArgSpec(
                ArgKey.SOURCE, "source", "header|body", choices=EXTRACTION_SOURCES,
                invalid_message="Extraction source must be 'header' or 'body'",
            ),
            ArgSpec(ArgKey.KEY, "key", "key"),
        ),
        opts=(
            OptSpec(
                OptKey.TO_VAR, "to_var", "--to-var", "-t", required=True,
                metavar="variable", help="variable receiving the value",
            ),
        ),
        kind=CommandKind.EXTRACT, command_type=ct.Extract,
    ),
    CommandSpec(
        "info", ("i",), "Show the current request with its options and extractions",
        kind=CommandKind.INFO, command_type=ct.Info,
    ),
    CommandSpec(
        "help", ("h", "?"), "Show help, optionally for one command",
        rest=ArgSpec(ArgKey.UNKNOWN, "topic", "command", required=False),
        unknown_dash_is_literal=True,
        kind=CommandKind.HELP, command_type=ct.HelpCommand,
    ),
    CommandSpec(
        "clear", (), "Clear the screen",
        kind=CommandKind.CLEAR, command_type=ct.Clear,
    ),
    CommandSpec(
        "exit", ("quit",), "Leave the shell",
        kind=CommandKind.EXIT, command_type=ct.Exit,
    ),
)

ROOT = CommandNode(CommandSpec("", help="repost", children=COMMANDS))


def leaves(node: CommandNode = ROOT) -> List[CommandNode]:
    """Every leaf below node, in declaration order."""
    if node.is_leaf:
        return [node]
    found = []
    for child in node.ordered:
        found.extend(leaves(child))
    return found


def walk(tokens) -> Tuple[CommandNode, list, bool]:
    """
    Descend the tree as far as the tokens allow, without raising.

    Returns:
        (deepest node reached, tokens after it, matched) where matched is
        False when a token failed to name a child of a non-leaf node
    """
    node = ROOT
    for i, token in enumerate(tokens):
        if node.is_leaf:
            return node, list(tokens[i:]), True
        child = node.child(token.text)
        if child is None:
            return node, list(tokens[i:]), False
        node = child
    return node, [], True


def resolve(tokens, end: int = 0) -> Tuple[CommandNode, list]:
    """
    Find the leaf command addressed by the leading tokens.

    Args:
        tokens: Tokens of a full line
        end: Offset reported when the line stops before a leaf

    Returns:
        (leaf node, tokens left for its builder)

    Raises:
        UnknownCommandError: First token names no command
        UnknownSubcommandError: A later token names no subcommand
        MissingSubcommandError: The line ends at a command group
    """
    node, remaining, matched = walk(tokens)
    if not matched:
        token = remaining[0]
        if node is ROOT:
            raise UnknownCommandError(token, node.child_names())
        raise UnknownSubcommandError(token, node.path_text, node.child_names())
    if not node.is_leaf:
        raise MissingSubcommandError(node.path_text, node.child_names(), end)
    return node, remaining
