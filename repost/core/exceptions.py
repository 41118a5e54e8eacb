"""
FILE: repost/core/exceptions.py
PURPOSE: Custom exception classes for error handling
EXPORTS:
  - RepostError (base exception)
  - RequestNotFoundError
  - VariableNotFoundError
  - WorkspaceError
  - InvalidInputError
  - MissingVariableError
  - NoRequestSelectedError
  - RequestFailedError
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - All exceptions inherit from RepostError for easy catching
  - Exceptions include context (names, environments) for helpful error messages
  - Service layer raises these, UI layers catch and display
  - Input-language errors (lexing, resolution, builder, validation) live in
    repost.repl.errors and also derive from RepostError
"""

from typing import Iterable


class RepostError(Exception):
    """Base exception for all repost errors."""
    pass


class RequestNotFoundError(RepostError):
    """Request with given name doesn't exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Request '{name}' not found")


class VariableNotFoundError(RepostError):
    """Variable with given name or id doesn't exist."""

    def __init__(self, name_or_id: str):
        self.name_or_id = name_or_id
        super().__init__(f"Variable '{name_or_id}' not found")


class WorkspaceError(RepostError):
    """Workspace name is invalid or its database can't be opened."""

    def __init__(self, workspace: str, reason: str):
        self.workspace = workspace
        self.reason = reason
        super().__init__(f"Workspace '{workspace}': {reason}")


class InvalidInputError(RepostError):
    """Input validation failed."""

    def __init__(self, message: str):
        super().__init__(message)


class MissingVariableError(RepostError):
    """A request references placeholders with no value in the current environment."""

    def __init__(self, request_name: str, names: Iterable[str]):
        self.request_name = request_name
        self.names = sorted(names)
        super().__init__(
            f"Request '{request_name}' is missing values for: {', '.join(self.names)}"
        )


class NoRequestSelectedError(RepostError):
    """Command needs a current request but none is set."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(
            f"'{command}' is only available in a request context. "
            "Try 'set request <name>' first."
        )


class RequestFailedError(RepostError):
    """The HTTP request could not be sent."""

    def __init__(self, request_name: str, reason: str):
        self.request_name = request_name
        self.reason = reason
        super().__init__(f"Request '{request_name}' failed: {reason}")
