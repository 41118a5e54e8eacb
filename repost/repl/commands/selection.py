"""
FILE: repost/repl/commands/selection.py
PURPOSE: 'set' command handlers for REPL (environment, workspace, request, option)
"""

from rich.markup import escape

from ...core import repository, service
from ...core.exceptions import NoRequestSelectedError
from ..command_types import SetEnvironment, SetOption, SetRequest, SetWorkspace
from ..context import console, repl_context


def handle_set_environment(command: SetEnvironment) -> None:
    """
    Handle 'set environment' - select the environment used by run and extract.

    Usage:
        set environment dev
        set env              # Clear environment
    """
    if command.name is None:
        repl_context.environment = None
        console.print("✓ Cleared environment")
        return

    repl_context.environment = command.name
    console.print(f"✓ Using environment [cyan]{escape(command.name)}[/cyan]")
    if command.name not in service.list_environments():
        console.print("[dim]This environment has no variables yet[/dim]")


def handle_set_workspace(command: SetWorkspace) -> None:
    """
    Handle 'set workspace' - switch to another workspace database.

    Usage:
        set workspace work
        set ws playground    # In-memory scratch workspace
    """
    repository.use_workspace(command.name)
    repl_context.reset()
    console.print(f"✓ Switched to workspace [yellow]{escape(command.name)}[/yellow]")


def handle_set_request(command: SetRequest) -> None:
    """
    Handle 'set request' - select the request used by run, extract and info.

    Usage:
        set request get-user
        set req              # Clear request
    """
    if command.name is None:
        repl_context.request = None
        console.print("✓ Cleared request")
        return

    request = service.get_request(command.name)
    repl_context.request = request.name
    console.print(f"✓ Using request [green]{escape(request.name)}[/green]")


def handle_set_option(command: SetOption) -> None:
    """
    Handle 'set option' - give a placeholder of the current request its value(s).

    Usage:
        set option id 42
        set option id 1 2 3  # Run once per value
        set option id        # Clear (use the environment variable)
    """
    if repl_context.request is None:
        raise NoRequestSelectedError("set option")

    option = service.set_option(repl_context.request, command.name, command.values)
    if option.value is None:
        console.print(f"✓ Cleared option [cyan]{escape(option.option_name)}[/cyan]")
    else:
        values = ", ".join(escape(v) for v in command.values)
        console.print(f"✓ Set option [cyan]{escape(option.option_name)}[/cyan] to {values}")
