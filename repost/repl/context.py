"""
FILE: repost/repl/context.py
PURPOSE: Session state shared by the REPL loop, handlers and completer
EXPORTS:
  - console (rich Console used for all REPL output)
  - REPLContext (dataclass: current environment and request)
  - repl_context (the session's REPLContext)
DEPENDENCIES:
  - rich (Console)
  - prompt_toolkit (HTML prompt)
  - repost.core.repository (current workspace)
NOTES:
  - Lives apart from main.py so handlers can import it without cycles
  - The workspace is owned by the repository layer; the context only
    remembers what was selected inside it
"""

from dataclasses import dataclass
from html import escape
from typing import Optional

from prompt_toolkit.formatted_text import HTML
from rich.console import Console

from ..core import repository


# Rich console for formatted output
console = Console()


@dataclass
class REPLContext:
    """
    Persistent context for the REPL session.

    Attributes:
        environment: Selected environment (variables and extraction target)
        request: Selected request (target of run/extract/info)
    """
    environment: Optional[str] = None
    request: Optional[str] = None

    @property
    def workspace(self) -> str:
        return repository.current_workspace()

    def reset(self) -> None:
        """Forget selections; used when switching workspace."""
        self.environment = None
        self.request = None

    def get_prompt(self) -> str:
        """
        Plain prompt string for simple input mode.

        Returns:
            Prompt like "[playground] > " or "[work][dev][get-user] > "
        """
        parts = [self.workspace]
        if self.environment:
            parts.append(self.environment)
        if self.request:
            parts.append(self.request)
        return "".join(f"[{p}]" for p in parts) + " > "

    def format_prompt(self) -> HTML:
        """Colored prompt: yellow workspace, cyan environment, green request."""
        text = f"[<ansiyellow>{escape(self.workspace)}</ansiyellow>]"
        if self.environment:
            text += f"[<b><ansicyan>{escape(self.environment)}</ansicyan></b>]"
        if self.request:
            text += f"[<b><ansigreen>{escape(self.request)}</ansigreen></b>]"
        return HTML(text + " &gt; ")


# Global REPL context (persists during session, resets on restart)
repl_context = REPLContext()
