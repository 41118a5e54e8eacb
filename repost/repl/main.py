"""
FILE: repost/repl/main.py
PURPOSE: Interactive REPL for HTTP requests with prompt-toolkit
EXPORTS:
  - main() - Entry point for REPL mode
  - run_repl() - Main REPL loop
  - execute_line(line) -> bool - Parse and run one line
  - execute_command(command) -> bool - Run one parsed command
  - show_parse_error(line, error) - Print an error with a caret under it
DEPENDENCIES:
  - prompt_toolkit (REPL interface, history, completion)
  - rich (formatted output)
  - repost.repl.dispatcher (parsing)
  - repost.repl.completer (autocomplete)
  - repost.repl.commands (HANDLERS)
NOTES:
  - History is kept in <data_dir>/repost_history for persistent workspaces
    and falls back to memory when the file can't be used
  - Prompt shows [workspace][environment][request]
  - Ctrl+D or "exit"/"quit" to exit
  - Errors never end the session
"""

import logging
import sys
import traceback

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory

from ..core import repository
from ..core.constants import HISTORY_FILE
from ..core.exceptions import RepostError
from .command_types import Command
from .commands import HANDLERS
from .completer import create_completer
from .context import console, repl_context
from .dispatcher import dispatch
from .errors import ParseError

logger = logging.getLogger(__name__)


def execute_command(command: Command) -> bool:
    """
    Execute a parsed command.

    Args:
        command: Finalized command from the dispatcher

    Returns:
        True to continue REPL loop, False to exit
    """
    handler = HANDLERS[command.kind]
    logger.debug("Running %s", command)
    return handler(command) is not False


def show_parse_error(line: str, error: ParseError) -> None:
    """Print a parse error with a caret under the offending part of the line."""
    offset = min(error.offset, len(line))
    width = max(1, min(error.end, len(line)) - offset)
    console.print(f"[red]Error:[/red] {error}", highlight=False)
    console.print(f"  {line}", markup=False, highlight=False)
    console.print(f"  {' ' * offset}[red]{'^' * width}[/red]")


def execute_line(line: str) -> bool:
    """
    Parse and execute one line, printing any error.

    Returns:
        True to continue REPL loop, False to exit
    """
    try:
        result = dispatch(line, execute_command)
    except ParseError as e:
        show_parse_error(line, e)
        return True
    except RepostError as e:
        console.print(f"[red]Error:[/red] {e}", highlight=False)
        return True
    return result is not False


def _create_history():
    """File history in the data directory, or in-memory history if that fails."""
    try:
        repository.DATA_DIR.mkdir(parents=True, exist_ok=True)
        return FileHistory(str(repository.DATA_DIR / HISTORY_FILE))
    except OSError as e:
        logger.debug("Using in-memory history: %s", e)
        return InMemoryHistory()


def run_repl() -> None:
    """
    Main REPL loop.

    Sets up prompt_toolkit session with:
    - Command history (persisted in the data directory)
    - Autocomplete (commands, options, stored names)
    - Prompt showing the current context

    Exits on:
    - Ctrl+D (EOFError)
    - "exit" or "quit" commands
    """
    # In piped/test environments, skip prompt_toolkit entirely
    has_tty = sys.stdin.isatty() and sys.stdout.isatty()

    session = None
    use_simple_input = not has_tty

    if has_tty:
        try:
            session = PromptSession(
                history=_create_history(),
                completer=create_completer(repl_context),
                complete_while_typing=False,
            )
        except Exception as e:
            # Fallback to simple input if prompt_toolkit fails
            console.print(f"[yellow]Warning:[/yellow] Running in simple input mode: {e}")
            use_simple_input = True

    console.print("[bold cyan]repost[/bold cyan] - Type 'help' for commands, 'exit' to quit")
    if use_simple_input:
        console.print("[dim](Running in simple mode - no autocomplete)[/dim]")
    console.print()

    while True:
        try:
            if use_simple_input or session is None:
                line = input(repl_context.get_prompt())
            else:
                line = session.prompt(repl_context.format_prompt())

            if not execute_line(line):
                break

        except KeyboardInterrupt:
            # Ctrl+C - show message and continue
            console.print("[dim]^C (Press Ctrl+D or type 'exit' to quit)[/dim]")
            continue
        except EOFError:
            # Ctrl+D or end of input - exit cleanly
            console.print()
            console.print("[dim]Goodbye![/dim]")
            break
        except Exception as e:
            # Unexpected error - show but don't crash
            console.print(f"[red]Unexpected error:[/red] {e}")
            console.print("[dim]" + traceback.format_exc() + "[/dim]", markup=False)


def main(workspace: str = None) -> None:
    """
    Entry point for REPL mode.

    Args:
        workspace: Workspace to open instead of the in-memory playground

    Called when user runs: repost or repost repl
    """
    try:
        if workspace:
            repository.use_workspace(workspace)
        run_repl()
    except RepostError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    finally:
        repository.close_all()


if __name__ == "__main__":
    main()
