"""
FILE: repost/repl/commands/__init__.py
PURPOSE: REPL command handler modules
EXPORTS:
  - HANDLERS: CommandKind -> handler(command) for every leaf command
NOTES:
  - A handler returns False only to end the session (exit)
  - Handlers raise RepostError subclasses; the REPL loop prints them
"""

from ..command_types import CommandKind
from .show import (
    handle_print_requests,
    handle_print_variables,
    handle_print_environments,
    handle_print_workspaces,
    handle_print_options,
)
from .create import handle_create_request, handle_create_variable
from .delete import handle_delete_requests, handle_delete_variables, handle_delete_options
from .selection import (
    handle_set_environment,
    handle_set_workspace,
    handle_set_request,
    handle_set_option,
)
from .run import handle_run, handle_extract, handle_info
from .system import handle_help, handle_clear, handle_exit

HANDLERS = {
    CommandKind.PRINT_REQUESTS: handle_print_requests,
    CommandKind.PRINT_VARIABLES: handle_print_variables,
    CommandKind.PRINT_ENVIRONMENTS: handle_print_environments,
    CommandKind.PRINT_WORKSPACES: handle_print_workspaces,
    CommandKind.PRINT_OPTIONS: handle_print_options,
    CommandKind.CREATE_REQUEST: handle_create_request,
    CommandKind.CREATE_VARIABLE: handle_create_variable,
    CommandKind.DELETE_REQUESTS: handle_delete_requests,
    CommandKind.DELETE_VARIABLES: handle_delete_variables,
    CommandKind.DELETE_OPTIONS: handle_delete_options,
    CommandKind.SET_ENVIRONMENT: handle_set_environment,
    CommandKind.SET_WORKSPACE: handle_set_workspace,
    CommandKind.SET_REQUEST: handle_set_request,
    CommandKind.SET_OPTION: handle_set_option,
    CommandKind.RUN: handle_run,
    CommandKind.EXTRACT: handle_extract,
    CommandKind.INFO: handle_info,
    CommandKind.HELP: handle_help,
    CommandKind.CLEAR: handle_clear,
    CommandKind.EXIT: handle_exit,
}

missing = set(CommandKind) - set(HANDLERS)
if missing:
    raise RuntimeError(f"No handler for: {', '.join(sorted(k.value for k in missing))}")
del missing

__all__ = ["HANDLERS"]
