"""
FILE: repost/repl/display.py
PURPOSE: Rich rendering of requests, variables, options and responses
EXPORTS:
  - display_requests(requests, console) -> None
  - display_variables(variables, console) -> None
  - display_names(title, names, current, console) -> None
  - display_options(options, console) -> None
  - display_request_info(request, options, extractions, console) -> None
  - display_exchange(exchange, quiet, console) -> None
  - display_run_summary(responses, console) -> None
DEPENDENCIES:
  - rich (Table, Panel, Syntax, markup escaping)
  - repost.core.models, repost.core.service (Exchange)
NOTES:
  - Accepts the console as a parameter so handlers and tests can pass their own
  - User data is escaped before being placed in rich markup
"""

import json
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ..core.models import Extraction, Request, RequestOption, Response, Variable
from ..core.service import Exchange


def _status_style(status: int) -> str:
    if status < 300:
        return "green"
    if status < 400:
        return "yellow"
    return "red"


def display_requests(requests: List[Request], console: Console) -> None:
    """
    Display requests in a formatted table.

    Args:
        requests: Requests to show
        console: Rich console to print to
    """
    if not requests:
        console.print("[dim]No requests found[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green")
    table.add_column("Method", style="magenta", width=8)
    table.add_column("URL", style="white")
    table.add_column("Headers", style="dim")
    table.add_column("Body", style="dim")

    for request in requests:
        body = ""
        if request.body:
            body = request.body.decode("utf-8", errors="replace")
            if len(body) > 40:
                body = body[:37] + "..."
        table.add_row(
            escape(request.name),
            request.method,
            escape(request.url),
            escape("\n".join(request.headers)),
            escape(body),
        )

    console.print(table)


def display_variables(variables: List[Variable], console: Console) -> None:
    """Display variables grouped by name, one row per environment."""
    if not variables:
        console.print("[dim]No variables found[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan", width=5)
    table.add_column("Name", style="white")
    table.add_column("Environment", style="cyan")
    table.add_column("Value", style="white")
    table.add_column("Source", style="dim")

    for variable in variables:
        table.add_row(
            str(variable.id),
            escape(variable.name),
            escape(variable.env),
            escape(variable.value or ""),
            escape(variable.source or ""),
        )

    console.print(table)


def display_names(title: str, names: List[str], current: Optional[str], console: Console) -> None:
    """Display a list of names, marking the current one."""
    if not names:
        console.print(f"[dim]No {title.lower()} found[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column(title)
    for name in names:
        if name == current:
            table.add_row(f"[bold green]{escape(name)}[/bold green] [dim](current)[/dim]")
        else:
            table.add_row(escape(name))
    console.print(table)


def display_options(options: List[RequestOption], console: Console) -> None:
    """Display request options; an unset option falls back to the environment."""
    if not options:
        console.print("[dim]No options found[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Request", style="green")
    table.add_column("Option", style="white")
    table.add_column("Value(s)", style="white")

    for option in options:
        value = escape(option.value) if option.value is not None else "[dim](from environment)[/dim]"
        table.add_row(escape(option.request_name), escape(option.option_name), value)

    console.print(table)


def display_request_info(
    request: Request,
    options: List[RequestOption],
    extractions: List[Extraction],
    console: Console,
) -> None:
    """Show one request with its input options and output extractions."""
    lines = [f"[magenta]{request.method}[/magenta] {escape(request.url)}"]
    for header in request.headers:
        lines.append(f"[dim]{escape(header)}[/dim]")
    if request.body:
        lines.append("")
        lines.append(escape(request.body.decode("utf-8", errors="replace")))
    console.print(Panel("\n".join(lines), title=escape(request.name), border_style="green"))

    if options:
        table = Table(title="Input options", show_header=True, header_style="bold cyan")
        table.add_column("Option")
        table.add_column("Value(s)")
        for option in options:
            value = escape(option.value) if option.value is not None else "[dim](from environment)[/dim]"
            table.add_row(escape(option.option_name), value)
        console.print(table)

    if extractions:
        table = Table(title="Output options", show_header=True, header_style="bold cyan")
        table.add_column("Variable")
        table.add_column("Source")
        table.add_column("Key")
        for extraction in extractions:
            table.add_row(escape(extraction.variable), extraction.source, escape(extraction.path))
        console.print(table)


def display_exchange(exchange: Exchange, quiet: bool, console: Console) -> None:
    """
    Print a request and its response.

    Args:
        exchange: Sent request and received response
        quiet: Only print the request line and status
        console: Rich console to print to
    """
    sent = exchange.request
    style = _status_style(exchange.status_code)
    console.print(
        f"[magenta]{sent.method}[/magenta] {escape(sent.url)} "
        f"[{style}]{exchange.status_code} {escape(exchange.reason)}[/{style}]"
    )
    if quiet:
        return

    for key, value in exchange.headers.items():
        console.print(f"[dim]{escape(key)}: {escape(value)}[/dim]")
    if not exchange.text:
        return
    console.print()
    try:
        pretty = json.dumps(json.loads(exchange.text), indent=2)
    except ValueError:
        console.print(exchange.text, markup=False, highlight=False)
        return
    console.print(Syntax(pretty, "json", word_wrap=True))


def display_run_summary(responses: List[Response], console: Console) -> None:
    """One row per recorded response of a run that sent several requests."""
    table = Table(title="Summary", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan", width=5)
    table.add_column("Request", style="white")
    table.add_column("Status")
    table.add_column("Extracted", style="dim")

    for response in responses:
        style = _status_style(response.status_code)
        extracted = "\n".join(
            f"{escape(name)} = {escape(value)}" for name, value in response.extractions.items()
        )
        table.add_row(
            str(response.id),
            f"[magenta]{response.method}[/magenta] {escape(response.url)}",
            f"[{style}]{response.status_code} {escape(response.reason)}[/{style}]",
            extracted,
        )

    console.print()
    console.print(table)
