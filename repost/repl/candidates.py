"""
FILE: repost/repl/candidates.py
PURPOSE: Data-driven completion candidates backed by the workspace store
EXPORTS:
  - StoreCandidateProvider (callable provider for repost.repl.completer)
  - request_name_suggestions(existing) -> List[str]
DEPENDENCIES:
  - repost.core.repository (requests, variables, options, workspaces)
  - repost.core.constants (NAME_PREFIXES, COMMON_HEADERS, PLAYGROUND)
  - repost.repl.grammar (ArgKey, OptKey, ROOT, walk)
NOTES:
  - Called as provider(kind, field, snapshot) -> List[str]
  - Values ending in '-', '=' or ':' are open-ended: the completer adds no
    trailing space so the user keeps typing
  - Errors propagate; the completer turns them into "no candidates"
"""

from typing import Callable, Dict, List, Optional, Tuple

from ..core import repository
from ..core.constants import COMMON_HEADERS, NAME_PREFIXES, PLAYGROUND
from .builder import BuilderSnapshot
from .command_types import CommandKind
from .grammar import ArgKey, OptKey, walk
from .tokenizer import Token


def request_name_suggestions(existing: List[str]) -> List[str]:
    """
    Suggest names for a new request.

    Every known suffix (the part after the first '-') is combined with each
    verb prefix, skipping names that already exist.

    Examples:
        >>> request_name_suggestions([])
        ['create-', 'update-', 'get-', 'delete-']
        >>> request_name_suggestions(["create-user"])
        ['update-user', 'get-user', 'delete-user']
    """
    suffixes = []
    for name in existing:
        _, sep, suffix = name.partition("-")
        if sep and suffix and suffix not in suffixes:
            suffixes.append(suffix)
    if not suffixes:
        return [f"{prefix}-" for prefix in NAME_PREFIXES]

    taken = set(existing)
    return [
        f"{prefix}-{suffix}"
        for suffix in suffixes
        for prefix in NAME_PREFIXES
        if f"{prefix}-{suffix}" not in taken
    ]


def _normalize_header(header: str) -> str:
    """'Key:Value' as stored ('Key: Value'); text without ':' is only stripped."""
    key, sep, value = header.partition(":")
    if not sep:
        return header.strip()
    return f"{key.strip()}: {value.strip()}"


def _unique(values) -> List[str]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


class StoreCandidateProvider:
    """
    Completion provider reading the current workspace.

    Args:
        context: Object with 'environment' and 'request' attributes
            (the REPL's REPLContext), or None
    """

    def __init__(self, context=None):
        self.context = context
        self._lookup: Dict[Tuple[CommandKind, object], Callable[[BuilderSnapshot], List[str]]] = {
            (CommandKind.CREATE_REQUEST, ArgKey.NAME): self._new_request_names,
            (CommandKind.CREATE_REQUEST, ArgKey.URL): self._related_urls,
            (CommandKind.CREATE_REQUEST, OptKey.HEADER): self._related_headers,
            (CommandKind.CREATE_VARIABLE, ArgKey.NAME): self._variable_names,
            (CommandKind.CREATE_VARIABLE, ArgKey.UNKNOWN): self._unused_env_keys,
            (CommandKind.PRINT_REQUESTS, ArgKey.UNKNOWN): self._request_names,
            (CommandKind.PRINT_VARIABLES, ArgKey.UNKNOWN): self._variable_names,
            (CommandKind.PRINT_OPTIONS, ArgKey.UNKNOWN): self._option_names,
            (CommandKind.DELETE_REQUESTS, ArgKey.UNKNOWN): self._request_names,
            (CommandKind.DELETE_VARIABLES, ArgKey.UNKNOWN): self._variable_names,
            (CommandKind.DELETE_OPTIONS, ArgKey.UNKNOWN): self._option_names,
            (CommandKind.SET_ENVIRONMENT, ArgKey.NAME): self._other_environments,
            (CommandKind.SET_WORKSPACE, ArgKey.NAME): self._other_workspaces,
            (CommandKind.SET_REQUEST, ArgKey.NAME): self._request_names,
            (CommandKind.SET_OPTION, ArgKey.NAME): self._option_names,
            (CommandKind.RUN, ArgKey.NAME): self._request_names,
            (CommandKind.EXTRACT, ArgKey.KEY): self._extraction_keys,
            (CommandKind.EXTRACT, OptKey.TO_VAR): self._variable_names,
            (CommandKind.HELP, ArgKey.UNKNOWN): self._help_topics,
        }

    def __call__(self, kind: CommandKind, field, snapshot: BuilderSnapshot) -> List[str]:
        lookup = self._lookup.get((kind, field))
        if lookup is None:
            return []
        return lookup(snapshot)

    @property
    def _environment(self) -> Optional[str]:
        return getattr(self.context, "environment", None)

    @property
    def _request(self) -> Optional[str]:
        return getattr(self.context, "request", None)

    # --- Requests ---

    def _request_names(self, snapshot: BuilderSnapshot) -> List[str]:
        given = set(snapshot.rest)
        return [r.name for r in repository.list_requests() if r.name not in given]

    def _new_request_names(self, snapshot: BuilderSnapshot) -> List[str]:
        return request_name_suggestions([r.name for r in repository.list_requests()])

    def _related(self, snapshot: BuilderSnapshot):
        """Requests sharing the name suffix of the request being created."""
        name = snapshot.args.get(ArgKey.NAME, "")
        _, sep, suffix = name.partition("-")
        if not sep or not suffix:
            return []
        return repository.list_requests_like(f"%-{suffix}")

    def _related_urls(self, snapshot: BuilderSnapshot) -> List[str]:
        return _unique(r.url for r in self._related(snapshot))

    def _related_headers(self, snapshot: BuilderSnapshot) -> List[str]:
        given = {_normalize_header(h) for h in snapshot.options.get(OptKey.HEADER, ())}
        related = [
            h for r in self._related(snapshot) for h in r.headers
            if _normalize_header(h) not in given
        ]
        return _unique(related + [f"{header}:" for header in COMMON_HEADERS])

    # --- Variables and environments ---

    def _variable_names(self, snapshot: BuilderSnapshot) -> List[str]:
        given = set(snapshot.rest)
        names = (v.name for v in repository.list_variables())
        return [n for n in _unique(names) if n not in given]

    def _unused_env_keys(self, snapshot: BuilderSnapshot) -> List[str]:
        used = {value.partition("=")[0] for value in snapshot.rest}
        return [f"{env}=" for env in repository.list_environments() if env not in used]

    def _other_environments(self, snapshot: BuilderSnapshot) -> List[str]:
        return [env for env in repository.list_environments() if env != self._environment]

    def _other_workspaces(self, snapshot: BuilderSnapshot) -> List[str]:
        current = repository.current_workspace()
        names = [PLAYGROUND] + repository.list_workspaces()
        return [ws for ws in _unique(names) if ws != current]

    # --- Options ---

    def _option_names(self, snapshot: BuilderSnapshot) -> List[str]:
        given = set(snapshot.rest)
        names = (o.option_name for o in repository.list_options(self._request))
        return [n for n in _unique(names) if n not in given]

    def _extraction_keys(self, snapshot: BuilderSnapshot) -> List[str]:
        if snapshot.args.get(ArgKey.SOURCE) == "header":
            return list(COMMON_HEADERS)
        return []

    # --- Help ---

    def _help_topics(self, snapshot: BuilderSnapshot) -> List[str]:
        tokens = [Token(text, 0, 0) for text in snapshot.rest]
        node, _, matched = walk(tokens)
        if not matched or node.is_leaf:
            return []
        return node.child_names()
