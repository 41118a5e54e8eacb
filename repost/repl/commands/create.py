"""
FILE: repost/repl/commands/create.py
PURPOSE: 'create' command handlers for REPL
"""

from rich.markup import escape

from ...core import service
from ..command_types import CreateRequest, CreateVariable
from ..context import console


def handle_create_request(command: CreateRequest) -> None:
    """
    Handle 'create request' - store a new request.

    Usage:
        create request get-user https://example.com/users/{id}
        create req create-user https://example.com/users -H 'Content-Type: application/json' -d '{"name": "{name}"}'

    Notes:
        - Method is inferred from the name when -m is omitted
        - Every {placeholder} becomes an option of the request
    """
    request = service.create_request(
        command.name,
        command.url,
        method=command.method,
        headers=command.headers,
        body=command.body,
    )
    console.print(
        f"[green]✓ Created request:[/green] [green]{escape(request.name)}[/green] "
        f"[magenta]{request.method}[/magenta] {escape(request.url)}"
    )
    options = service.list_options(request.name)
    if options:
        names = ", ".join(escape(o.option_name) for o in options)
        console.print(f"[dim]Options: {names}[/dim]")


def handle_create_variable(command: CreateVariable) -> None:
    """
    Handle 'create variable' - set a variable in one or more environments.

    Usage:
        create variable host dev=localhost:8000 prod=example.com
    """
    variables = service.create_variable(command.name, command.env_vals)
    for variable in variables:
        console.print(
            f"[green]✓ Set[/green] {escape(variable.name)} "
            f"[dim]in[/dim] [cyan]{escape(variable.env)}[/cyan]"
        )
