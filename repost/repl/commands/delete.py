"""
FILE: repost/repl/commands/delete.py
PURPOSE: 'delete' command handlers for REPL
"""

from rich.markup import escape

from ...core import service
from ..command_types import DeleteOptions, DeleteRequests, DeleteVariables
from ..context import console, repl_context


def _report_missing(kind: str, missing) -> None:
    for name in missing:
        console.print(f"[yellow]No {kind} named '{escape(name)}'[/yellow]")


def handle_delete_requests(command: DeleteRequests) -> None:
    """
    Handle 'delete requests' - delete requests with their options and extractions.

    Usage:
        delete requests get-user create-user
    """
    deleted, missing = service.delete_requests(command.names)
    if repl_context.request in deleted:
        repl_context.request = None
    if deleted:
        console.print(f"[green]✓ Deleted {len(deleted)} request(s)[/green]")
    _report_missing("request", missing)


def handle_delete_variables(command: DeleteVariables) -> None:
    """
    Handle 'delete variables' - delete by name or id.

    Names only match the current environment when one is selected.
    """
    count, missing = service.delete_variables(command.names, env=repl_context.environment)
    if count:
        console.print(f"[green]✓ Deleted {count} variable(s)[/green]")
    _report_missing("variable", missing)


def handle_delete_options(command: DeleteOptions) -> None:
    """Handle 'delete options' - for the current request, or every request."""
    count, missing = service.delete_options(command.names, repl_context.request)
    if count:
        console.print(f"[green]✓ Deleted {count} option(s)[/green]")
    _report_missing("option", missing)
