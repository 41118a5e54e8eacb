"""
FILE: repost/repl/commands/run.py
PURPOSE: Request context command handlers for REPL (run, extract, info)
"""

from rich.markup import escape

from ...core import service
from ...core.exceptions import NoRequestSelectedError
from ..command_types import Extract, Info, Run
from ..context import console, repl_context
from ..display import display_exchange, display_request_info, display_run_summary


def handle_run(command: Run) -> None:
    """
    Handle 'run' - send a request and apply its extractions.

    Usage:
        run get-user
        run                  # Current request
        run -q               # Status line only
    """
    name = command.name or repl_context.request
    if name is None:
        raise NoRequestSelectedError("run")

    result = service.run_request(name, env=repl_context.environment)
    for exchange in result.exchanges:
        display_exchange(exchange, command.quiet, console)
    for variable in result.extracted:
        console.print(
            f"[dim]Extracted[/dim] {escape(variable.name)} = {escape(variable.value or '')}"
        )
    for message in result.failed_extractions:
        console.print(f"[yellow]Warning:[/yellow] {escape(message)}")
    if len(result.exchanges) > 1:
        display_run_summary(result.responses, console)


def handle_extract(command: Extract) -> None:
    """
    Handle 'extract' - save part of the current request's response on each run.

    Usage:
        extract header Location --to-var user_url
        extract body data.id -t user_id
    """
    if repl_context.request is None:
        raise NoRequestSelectedError("extract")

    extraction = service.add_extraction(
        repl_context.request, command.source, command.key, command.to_var
    )
    console.print(
        f"✓ {escape(extraction.request_name)} will save {extraction.source} "
        f"'{escape(extraction.path)}' into [cyan]{escape(extraction.variable)}[/cyan]"
    )


def handle_info(command: Info) -> None:
    """Handle 'info' - show the current request with its options and extractions."""
    if repl_context.request is None:
        raise NoRequestSelectedError("info")

    request = service.get_request(repl_context.request)
    display_request_info(
        request,
        service.list_options(request.name),
        service.list_extractions(request.name),
        console,
    )
