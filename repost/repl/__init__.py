"""
FILE: repost/repl/__init__.py
PURPOSE: REPL package for interactive request management
EXPORTS:
  - main() (from repl.main)
DEPENDENCIES:
  - prompt_toolkit (REPL interface)
  - rich (formatted output)
  - repost.core.service (business logic)
NOTES:
  - Entry point for interactive mode
  - The parsing core (tokenizer, grammar, builder, completer, dispatcher)
    does no I/O; only candidates.py and the handlers touch storage
"""

from .main import main

__all__ = ["main"]
