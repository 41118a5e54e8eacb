"""
FILE: repost/repl/commands/show.py
PURPOSE: 'print' command handlers for REPL
"""

from ...core import service
from ...core.constants import PLAYGROUND
from ..command_types import (
    PrintEnvironments,
    PrintOptions,
    PrintRequests,
    PrintVariables,
    PrintWorkspaces,
)
from ..context import console, repl_context
from ..display import display_names, display_options, display_requests, display_variables


def handle_print_requests(command: PrintRequests) -> None:
    """
    Handle 'print requests' - list requests whose name contains any filter.

    Usage:
        print requests
        p r user
    """
    display_requests(service.list_requests(command.filters), console)


def handle_print_variables(command: PrintVariables) -> None:
    """
    Handle 'print variables' - list variables of the current environment
    (all environments when none is selected).
    """
    variables = service.list_variables(command.filters, env=repl_context.environment)
    display_variables(variables, console)


def handle_print_environments(command: PrintEnvironments) -> None:
    display_names("Environments", service.list_environments(), repl_context.environment, console)


def handle_print_workspaces(command: PrintWorkspaces) -> None:
    names = [PLAYGROUND] + service.list_workspaces()
    display_names("Workspaces", names, repl_context.workspace, console)


def handle_print_options(command: PrintOptions) -> None:
    """Handle 'print options' - options of the current request, or of all requests."""
    display_options(service.list_options(repl_context.request, command.filters), console)
