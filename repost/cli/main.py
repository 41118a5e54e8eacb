"""
FILE: repost/cli/main.py
PURPOSE: Typer-based CLI entry point
EXPORTS:
  - app (Typer application)
  - main() (entry point)
  - version() - Show version
  - repl() - Launch interactive REPL
  - exec_line() - Run one REPL line and exit
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output, RichHandler logging)
  - repost.repl (interactive mode, line execution)
  - repost.core.repository (data directory, workspaces)
NOTES:
  - Running 'repost' with no command launches the REPL
  - --data-dir (or $REPOST_DATA_DIR) chooses where workspaces are stored
  - --verbose turns on debug logging through rich
  - Exit codes: 0=success, 1=error
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..core import repository
from ..core.exceptions import RepostError

# Typer app setup
app = typer.Typer(
    name="repost",
    help="Interactive shell for building and replaying HTTP requests",
    add_completion=False,
)

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)

# Version
__version__ = "0.1.0"


def setup_logging(verbose: bool) -> None:
    """Send log records through rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


@app.callback(invoke_without_command=True)
def default_command(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None, "--data-dir", envvar="REPOST_DATA_DIR",
        help="Directory holding workspace databases and history",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """
    Default callback - applies global options, then launches the REPL when
    no command is specified.
    """
    setup_logging(verbose)
    if data_dir is not None:
        repository.DATA_DIR = data_dir.expanduser()

    if ctx.invoked_subcommand is None:
        from ..repl import main as repl_main
        repl_main()


@app.command()
def version():
    """Show repost version."""
    console.print(f"repost v{__version__}")


@app.command()
def repl(
    workspace: Optional[str] = typer.Option(
        None, "--workspace", "-w", help="Workspace to open (default: in-memory playground)"
    ),
):
    """Launch the interactive REPL."""
    from ..repl import main as repl_main
    repl_main(workspace)


@app.command("exec")
def exec_line(
    line: str = typer.Argument(..., help="A REPL command line, e.g. 'print requests'"),
    workspace: Optional[str] = typer.Option(
        None, "--workspace", "-w", help="Workspace to run the line in"
    ),
):
    """Run one REPL command line and exit."""
    from ..repl.dispatcher import dispatch
    from ..repl.errors import ParseError
    from ..repl.main import execute_command, show_parse_error

    try:
        if workspace:
            repository.use_workspace(workspace)
        dispatch(line, execute_command)
    except ParseError as e:
        show_parse_error(line, e)
        raise typer.Exit(1)
    except RepostError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        repository.close_all()


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
