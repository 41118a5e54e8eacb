"""
FILE: repost/repl/commands/system.py
PURPOSE: System command handlers for REPL (help, clear, exit)
"""

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ...core.exceptions import InvalidInputError
from ..command_types import Clear, Exit, HelpCommand
from ..context import console
from ..grammar import CommandNode, ROOT, leaves, walk
from ..tokenizer import Token


EXAMPLES = """\
create request get-user https://example.com/users/{id}
create variable id dev=1 prod=42
set environment dev
run get-user
set request get-user
set option id 1 2 3
extract body name --to-var user_name
info"""


def _overview() -> str:
    lines = ["[bold cyan]Available Commands:[/bold cyan]", ""]
    for node in leaves(ROOT):
        lines.append(f"  [cyan]{escape(node.usage())}[/cyan]")
        lines.append(f"      [dim]{escape(node.spec.help)}[/dim]")
    lines += [
        "",
        "[bold cyan]Examples:[/bold cyan]",
        "",
        f"[dim]{escape(EXAMPLES)}[/dim]",
        "",
        "[dim]Add -h to any command for details. Tab completes names and values.[/dim]",
    ]
    return "\n".join(lines)


def _command_help(node: CommandNode) -> None:
    spec = node.spec
    aliases = ", ".join(spec.aliases)
    console.print(f"[bold cyan]{escape(node.usage())}[/bold cyan]")
    if spec.help:
        console.print(escape(spec.help))
    if aliases:
        console.print(f"[dim]Aliases: {escape(aliases)}[/dim]")

    if not node.is_leaf:
        table = Table(show_header=False, box=None)
        for child in node.ordered:
            table.add_row(f"[cyan]{escape(child.usage())}[/cyan]", escape(child.spec.help))
        console.print(table)
        return

    table = Table(show_header=False, box=None)
    for opt in spec.all_opts:
        table.add_row(f"[cyan]{escape(opt.usage())}[/cyan]", escape(opt.help))
    console.print(table)


def handle_help(command: HelpCommand) -> None:
    """
    Handle 'help' - show all commands, or details for one.

    Usage:
        help
        help create request
        create request -h
    """
    if not command.topic:
        console.print(Panel(_overview(), title="repost Help", border_style="cyan"))
        return

    node, _, matched = walk([Token(text, 0, 0) for text in command.topic])
    if not matched:
        raise InvalidInputError(f"No help for '{' '.join(command.topic)}'")
    _command_help(node)


def handle_clear(command: Clear) -> None:
    """Clear the screen."""
    console.clear()


def handle_exit(command: Exit) -> bool:
    """Leave the REPL. Returns False to stop the loop."""
    console.print("[dim]Goodbye![/dim]")
    return False
