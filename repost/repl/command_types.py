"""
FILE: repost/repl/command_types.py
PURPOSE: Finalized, immutable command values produced by the parser
EXPORTS:
  - CommandKind (enum, one member per leaf command)
  - One frozen dataclass per leaf command (PrintRequests, CreateRequest, ...)
  - HelpCommand
  - Command (Union of all command types)
DEPENDENCIES:
  - dataclasses, enum, typing (stdlib)
NOTES:
  - Each dataclass carries its CommandKind as a class attribute, so
    handlers can be looked up with HANDLERS[command.kind]
  - Field names match the 'dest' of the grammar's ArgSpec/OptSpec
  - Catch-all and repeatable values are tuples
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union


class CommandKind(Enum):
    PRINT_REQUESTS = "print requests"
    PRINT_VARIABLES = "print variables"
    PRINT_ENVIRONMENTS = "print environments"
    PRINT_WORKSPACES = "print workspaces"
    PRINT_OPTIONS = "print options"
    CREATE_REQUEST = "create request"
    CREATE_VARIABLE = "create variable"
    DELETE_REQUESTS = "delete requests"
    DELETE_VARIABLES = "delete variables"
    DELETE_OPTIONS = "delete options"
    SET_ENVIRONMENT = "set environment"
    SET_WORKSPACE = "set workspace"
    SET_REQUEST = "set request"
    SET_OPTION = "set option"
    RUN = "run"
    EXTRACT = "extract"
    INFO = "info"
    HELP = "help"
    CLEAR = "clear"
    EXIT = "exit"


# --- print ---


@dataclass(frozen=True)
class PrintRequests:
    kind: ClassVar[CommandKind] = CommandKind.PRINT_REQUESTS
    filters: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PrintVariables:
    kind: ClassVar[CommandKind] = CommandKind.PRINT_VARIABLES
    filters: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PrintEnvironments:
    kind: ClassVar[CommandKind] = CommandKind.PRINT_ENVIRONMENTS


@dataclass(frozen=True)
class PrintWorkspaces:
    kind: ClassVar[CommandKind] = CommandKind.PRINT_WORKSPACES


@dataclass(frozen=True)
class PrintOptions:
    kind: ClassVar[CommandKind] = CommandKind.PRINT_OPTIONS
    filters: Tuple[str, ...] = ()


# --- create ---


@dataclass(frozen=True)
class CreateRequest:
    kind: ClassVar[CommandKind] = CommandKind.CREATE_REQUEST
    name: str
    url: str
    method: Optional[str] = None
    headers: Tuple[str, ...] = ()
    body: Optional[str] = None


@dataclass(frozen=True)
class CreateVariable:
    kind: ClassVar[CommandKind] = CommandKind.CREATE_VARIABLE
    name: str
    env_vals: Tuple[str, ...] = ()


# --- delete ---


@dataclass(frozen=True)
class DeleteRequests:
    kind: ClassVar[CommandKind] = CommandKind.DELETE_REQUESTS
    names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DeleteVariables:
    kind: ClassVar[CommandKind] = CommandKind.DELETE_VARIABLES
    names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DeleteOptions:
    kind: ClassVar[CommandKind] = CommandKind.DELETE_OPTIONS
    names: Tuple[str, ...] = ()


# --- set ---


@dataclass(frozen=True)
class SetEnvironment:
    kind: ClassVar[CommandKind] = CommandKind.SET_ENVIRONMENT
    name: Optional[str] = None


@dataclass(frozen=True)
class SetWorkspace:
    kind: ClassVar[CommandKind] = CommandKind.SET_WORKSPACE
    name: str


@dataclass(frozen=True)
class SetRequest:
    kind: ClassVar[CommandKind] = CommandKind.SET_REQUEST
    name: Optional[str] = None


@dataclass(frozen=True)
class SetOption:
    kind: ClassVar[CommandKind] = CommandKind.SET_OPTION
    name: str
    values: Tuple[str, ...] = ()


# --- contextual ---


@dataclass(frozen=True)
class Run:
    kind: ClassVar[CommandKind] = CommandKind.RUN
    name: Optional[str] = None
    quiet: bool = False


@dataclass(frozen=True)
class Extract:
    kind: ClassVar[CommandKind] = CommandKind.EXTRACT
    source: str
    key: str
    to_var: str


@dataclass(frozen=True)
class Info:
    kind: ClassVar[CommandKind] = CommandKind.INFO


# --- system ---


@dataclass(frozen=True)
class HelpCommand:
    """Show help for a command path, e.g. ('create', 'request'); () for the overview."""
    kind: ClassVar[CommandKind] = CommandKind.HELP
    topic: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Clear:
    kind: ClassVar[CommandKind] = CommandKind.CLEAR


@dataclass(frozen=True)
class Exit:
    kind: ClassVar[CommandKind] = CommandKind.EXIT


Command = Union[
    PrintRequests, PrintVariables, PrintEnvironments, PrintWorkspaces, PrintOptions,
    CreateRequest, CreateVariable,
    DeleteRequests, DeleteVariables, DeleteOptions,
    SetEnvironment, SetWorkspace, SetRequest, SetOption,
    Run, Extract, Info,
    HelpCommand, Clear, Exit,
]
