"""
FILE: repost/core/service.py
PURPOSE: Business logic layer for requests, variables, options, and runs
EXPORTS:
  - infer_method(name) -> str
  - find_placeholders(text) -> Set[str]
  - create_request(name, url, method, headers, body) -> Request
  - get_request(name) -> Request
  - list_requests(filters) -> List[Request]
  - delete_requests(names) -> (deleted, missing)
  - create_variable(name, env_vals, source) -> List[Variable]
  - list_variables(filters, env) -> List[Variable]
  - delete_variables(names_or_ids, env) -> (deleted, missing)
  - list_environments() -> List[str]
  - list_workspaces() -> List[str]
  - set_option(request_name, option_name, values) -> RequestOption
  - list_options(request_name, filters) -> List[RequestOption]
  - delete_options(names, request_name) -> (deleted, missing)
  - add_extraction(request_name, source, key, variable) -> Extraction
  - list_extractions(request_name) -> List[Extraction]
  - prepare_requests(request, env) -> List[PreparedRequest]
  - run_request(name, env) -> RunResult
  - list_responses(request_name) -> List[Response]
DEPENDENCIES:
  - requests (HTTP client)
  - repost.core.repository (all CRUD functions)
  - repost.core.models (Request, Variable, RequestOption, Extraction, Response)
  - repost.core.exceptions (error types)
NOTES:
  - All functions validate input and raise descriptive errors
  - No direct database access (use repository layer)
  - Placeholders are written {name} in url, headers and body
  - Placeholder values come from request options first, then from
    variables of the current environment
  - An option holding several values (one per line) expands into one
    request per combination
"""

import itertools
import json
import logging
import re
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

import requests

from . import repository
from .constants import (
    HTTP_METHODS,
    DEFAULT_METHOD,
    METHOD_PREFIXES,
    EXTRACTION_SOURCES,
    SOURCE_HEADER,
    SOURCE_USER,
)
from .exceptions import (
    InvalidInputError,
    MissingVariableError,
    RequestFailedError,
    RequestNotFoundError,
    VariableNotFoundError,
)
from .models import Extraction, Request, RequestOption, Response, Variable

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_-]*)\}")

# Seconds before an HTTP request is abandoned
REQUEST_TIMEOUT = 30


# --- Requests ---


def infer_method(name: str) -> str:
    """
    Guess the HTTP method from a request name.

    Examples:
        >>> infer_method("create-user")
        'POST'
        >>> infer_method("user-info")
        'GET'
    """
    lowered = name.lower()
    for prefixes, method in METHOD_PREFIXES:
        if lowered.startswith(prefixes):
            return method
    return DEFAULT_METHOD


def find_placeholders(text: str) -> Set[str]:
    """Names of all {placeholders} in text."""
    return set(PLACEHOLDER.findall(text))


def normalize_header(header: str) -> str:
    """
    Turn 'Key:Value' into 'Key: Value'.

    Raises:
        InvalidInputError: If the header has no ':' or an empty key
    """
    key, sep, value = header.partition(":")
    if not sep or not key.strip():
        raise InvalidInputError(f"Invalid header '{header}'. Expected 'Key: Value'")
    return f"{key.strip()}: {value.strip()}"


def read_body(data: Optional[str]) -> Optional[bytes]:
    """Request body from a --data value; '@path' reads the file at path."""
    if data is None:
        return None
    if data.startswith("@"):
        path = Path(data[1:]).expanduser()
        try:
            return path.read_bytes()
        except OSError as e:
            raise InvalidInputError(f"Cannot read body from '{path}': {e.strerror}") from e
    return data.encode("utf-8")


def create_request(
    name: str,
    url: str,
    method: Optional[str] = None,
    headers: Iterable[str] = (),
    body: Optional[str] = None,
) -> Request:
    """
    Create a new request with validation.

    Args:
        name: Unique request name (e.g. "create-user")
        url: Request URL, may contain {placeholders}
        method: HTTP method; inferred from the name when omitted
        headers: "Key: Value" strings
        body: Request body, or "@file" to read it from a file

    Returns:
        Newly created Request object

    Raises:
        InvalidInputError: If name/url is empty, the method is unknown,
            a header is malformed or the name is taken

    Notes:
        - Every {placeholder} found becomes an option of the request
    """
    name = name.strip()
    if not name:
        raise InvalidInputError("Request name cannot be empty")
    if not url.strip():
        raise InvalidInputError("Request URL cannot be empty")

    method = (method or infer_method(name)).upper()
    if method not in HTTP_METHODS:
        raise InvalidInputError(
            f"Invalid method '{method}'. Must be one of: {', '.join(HTTP_METHODS)}"
        )

    request = Request(
        name=name,
        method=method,
        url=url,
        headers=[normalize_header(h) for h in headers],
        body=read_body(body),
    )

    try:
        created = repository.create_request(request)
    except sqlite3.IntegrityError as e:
        raise InvalidInputError(f"Request '{name}' already exists") from e

    for option_name in sorted(request_placeholders(created)):
        repository.ensure_option(created.name, option_name)

    return created


def request_placeholders(request: Request) -> Set[str]:
    """All placeholders referenced by a request."""
    names = find_placeholders(request.url)
    for header in request.headers:
        names |= find_placeholders(header)
    if request.body:
        names |= find_placeholders(request.body.decode("utf-8", errors="replace"))
    return names


def get_request(name: str) -> Request:
    """
    Fetch a request by name.

    Raises:
        RequestNotFoundError: If it doesn't exist
    """
    request = repository.get_request(name)
    if request is None:
        raise RequestNotFoundError(name)
    return request


def list_requests(filters: Iterable[str] = ()) -> List[Request]:
    """List requests whose name contains any of the filters (all when no filters)."""
    filters = list(filters)
    requests_ = repository.list_requests()
    if not filters:
        return requests_
    return [r for r in requests_ if any(f in r.name for f in filters)]


def delete_requests(names: Iterable[str]) -> Tuple[List[str], List[str]]:
    """
    Delete requests by name.

    Returns:
        (deleted names, names that were not found)
    """
    deleted, missing = [], []
    for name in names:
        try:
            repository.delete_request(name)
            deleted.append(name)
        except RequestNotFoundError:
            missing.append(name)
    return deleted, missing


# --- Variables ---


def parse_env_value(pair: str) -> Tuple[str, str]:
    """
    Split 'env=value'.

    Raises:
        InvalidInputError: If there is no '=' or the environment is empty
    """
    env, sep, value = pair.partition("=")
    if not sep or not env:
        raise InvalidInputError(f"Invalid environment value pair '{pair}'. Expected env=value")
    return env, value


def create_variable(
    name: str,
    env_vals: Iterable[str],
    source: str = SOURCE_USER,
) -> List[Variable]:
    """
    Create (or update) a variable in one or more environments.

    Args:
        name: Variable name
        env_vals: "env=value" strings, at most one per environment
        source: Who set the value ("user" or a request name)

    Returns:
        The stored variables, one per environment

    Raises:
        InvalidInputError: If the name is empty, a pair is malformed or an
            environment is given twice
    """
    name = name.strip()
    if not name:
        raise InvalidInputError("Variable name cannot be empty")

    pairs: Dict[str, str] = {}
    for pair in env_vals:
        env, value = parse_env_value(pair)
        if env in pairs:
            raise InvalidInputError(f"Multiple values provided for environment '{env}'")
        pairs[env] = value
    if not pairs:
        raise InvalidInputError("Expected at least one env=value argument")

    return [repository.upsert_variable(name, env, value, source) for env, value in pairs.items()]


def list_variables(filters: Iterable[str] = (), env: Optional[str] = None) -> List[Variable]:
    """List variables (in env, if given) whose name contains any of the filters."""
    filters = list(filters)
    variables = repository.list_variables(env=env)
    if not filters:
        return variables
    return [v for v in variables if any(f in v.name for f in filters)]


def delete_variables(
    names_or_ids: Iterable[str],
    env: Optional[str] = None,
) -> Tuple[int, List[str]]:
    """
    Delete variables by name or integer id.

    Args:
        names_or_ids: Variable names, or ids as printed by 'print variables'
        env: When set, names only match variables in this environment

    Returns:
        (number of variables deleted, arguments that matched nothing)
    """
    deleted = 0
    missing = []
    for item in names_or_ids:
        if item.isdigit():
            try:
                repository.delete_variable(int(item))
                deleted += 1
                continue
            except VariableNotFoundError:
                pass
        count = repository.delete_variables_by_name(item, env)
        if count:
            deleted += count
        else:
            missing.append(item)
    return deleted, missing


def list_environments() -> List[str]:
    """All environment names."""
    return repository.list_environments()


def list_workspaces() -> List[str]:
    """All persistent workspace names."""
    return repository.list_workspaces()


# --- Options ---


def set_option(request_name: str, option_name: str, values: Iterable[str]) -> RequestOption:
    """
    Set the value(s) substituted for {option_name} when running a request.

    No values clears the option so the environment variable is used instead.
    """
    get_request(request_name)
    values = list(values)
    value = "\n".join(values) if values else None
    return repository.set_option(request_name, option_name, value)


def list_options(
    request_name: Optional[str] = None,
    filters: Iterable[str] = (),
) -> List[RequestOption]:
    """List options (of one request, if given) whose name contains any filter."""
    filters = list(filters)
    options = repository.list_options(request_name)
    if not filters:
        return options
    return [o for o in options if any(f in o.option_name for f in filters)]


def delete_options(
    names: Iterable[str],
    request_name: Optional[str] = None,
) -> Tuple[int, List[str]]:
    """
    Delete options by name.

    Returns:
        (number of options deleted, names that matched nothing)
    """
    deleted = 0
    missing = []
    for name in names:
        count = repository.delete_options_by_name(name, request_name)
        if count:
            deleted += count
        else:
            missing.append(name)
    return deleted, missing


# --- Extractions ---


def add_extraction(request_name: str, source: str, key: str, variable: str) -> Extraction:
    """
    Copy a response header or a JSON body value into a variable after each run.

    Args:
        request_name: Request whose response is read
        source: "header" or "body"
        key: Header name, or dotted JSON path such as "data.items.0.id"
        variable: Variable to write in the current environment

    Raises:
        InvalidInputError: If the source is unknown
        RequestNotFoundError: If the request doesn't exist
    """
    if source not in EXTRACTION_SOURCES:
        raise InvalidInputError(
            f"Invalid source '{source}'. Must be one of: {', '.join(EXTRACTION_SOURCES)}"
        )
    get_request(request_name)
    return repository.upsert_extraction(request_name, variable, source, key)


def list_extractions(request_name: str) -> List[Extraction]:
    """Extractions configured for a request."""
    return repository.list_extractions(request_name)


# --- Running ---


@dataclass
class PreparedRequest:
    """A request with every placeholder substituted."""

    method: str
    url: str
    headers: List[Tuple[str, str]]
    body: Optional[bytes] = None


@dataclass
class Exchange:
    """One sent request and its response."""

    request: PreparedRequest
    status_code: int
    reason: str
    headers: Dict[str, str]
    text: str


@dataclass
class RunResult:
    """Everything that happened while running a request."""

    exchanges: List[Exchange] = field(default_factory=list)
    extracted: List[Variable] = field(default_factory=list)
    failed_extractions: List[str] = field(default_factory=list)
    responses: List[Response] = field(default_factory=list)


def _substitute(text: str, values: Dict[str, str]) -> str:
    return PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), text)


def prepare_requests(request: Request, env: Optional[str] = None) -> List[PreparedRequest]:
    """
    Expand a stored request into concrete requests.

    Raises:
        MissingVariableError: If a placeholder has neither an option value
            nor a variable in env
    """
    needed = request_placeholders(request)

    option_values: Dict[str, List[str]] = {}
    for option in repository.list_options(request.name):
        if option.value is not None and option.option_name in needed:
            option_values[option.option_name] = option.value.split("\n")

    variable_values: Dict[str, str] = {}
    if env is not None:
        for variable in repository.list_variables(env=env):
            if variable.value is not None:
                variable_values[variable.name] = variable.value

    missing = needed - set(option_values) - set(variable_values)
    if missing:
        raise MissingVariableError(request.name, missing)

    names = sorted(option_values)
    prepared = []
    for combination in itertools.product(*(option_values[n] for n in names)):
        values = dict(variable_values)
        values.update(zip(names, combination))
        body = None
        if request.body is not None:
            body = _substitute(request.body.decode("utf-8", errors="replace"), values).encode("utf-8")
        prepared.append(
            PreparedRequest(
                method=request.method,
                url=_substitute(request.url, values),
                headers=[(k, _substitute(v, values)) for k, v in request.header_pairs],
                body=body,
            )
        )
    return prepared


def extract_value(source: str, path: str, exchange: Exchange) -> Optional[str]:
    """
    Read one value out of a response.

    Returns:
        The header value or JSON value (non-strings re-encoded as JSON),
        or None when the header/path doesn't exist
    """
    if source == SOURCE_HEADER:
        wanted = path.lower()
        for key, value in exchange.headers.items():
            if key.lower() == wanted:
                return value
        return None

    try:
        node = json.loads(exchange.text)
    except ValueError:
        return None
    for part in path.split("."):
        if isinstance(node, list) and part.lstrip("-").isdigit():
            index = int(part)
            if not -len(node) <= index < len(node):
                return None
            node = node[index]
        elif isinstance(node, dict) and part in node:
            node = node[part]
        else:
            return None
    return node if isinstance(node, str) else json.dumps(node)


def send(prepared: PreparedRequest, request_name: str) -> Exchange:
    """
    Send one prepared request.

    Raises:
        RequestFailedError: On connection errors or timeouts
    """
    logger.debug("Sending %s %s", prepared.method, prepared.url)
    try:
        response = requests.request(
            prepared.method,
            prepared.url,
            headers=dict(prepared.headers),
            data=prepared.body,
            timeout=REQUEST_TIMEOUT,
        )
    except requests.RequestException as e:
        raise RequestFailedError(request_name, str(e)) from e
    return Exchange(
        request=prepared,
        status_code=response.status_code,
        reason=response.reason or "",
        headers=dict(response.headers),
        text=response.text,
    )


def _record(name: str, exchange: Exchange, extracted: Dict[str, str]) -> Response:
    sent = exchange.request
    return repository.add_response(
        Response(
            request_name=name,
            method=sent.method,
            url=sent.url,
            status_code=exchange.status_code,
            reason=exchange.reason,
            request_headers=[f"{k}: {v}" for k, v in sent.headers],
            request_body=sent.body,
            headers=[f"{k}: {v}" for k, v in exchange.headers.items()],
            body=exchange.text,
            extractions=extracted,
        )
    )


def run_request(name: str, env: Optional[str] = None) -> RunResult:
    """
    Send a stored request, apply its extractions and record each exchange.

    Args:
        name: Request name
        env: Current environment (variables and extraction target)

    Returns:
        RunResult with every exchange, extracted variable and recorded response

    Raises:
        RequestNotFoundError: If the request doesn't exist
        InvalidInputError: If the request has extractions but no environment is set
        MissingVariableError: If a placeholder can't be filled
        RequestFailedError: If sending fails

    Notes:
        - Responses recorded by the previous run of this request are replaced
    """
    request = get_request(name)
    extractions = repository.list_extractions(name)
    if extractions and env is None:
        raise InvalidInputError(
            "The request contains extractions and must be run from an environment. "
            "Try 'set environment <name>' first."
        )

    prepared_requests = prepare_requests(request, env)
    repository.delete_responses(name)

    result = RunResult()
    for prepared in prepared_requests:
        exchange = send(prepared, name)
        result.exchanges.append(exchange)

        extracted: Dict[str, str] = {}
        for extraction in extractions:
            value = extract_value(extraction.source, extraction.path, exchange)
            if value is None:
                result.failed_extractions.append(
                    f"{extraction.source} '{extraction.path}' not found for {extraction.variable}"
                )
                continue
            extracted[extraction.variable] = value
            result.extracted.append(
                repository.upsert_variable(extraction.variable, env, value, source=name)
            )

        result.responses.append(_record(name, exchange, extracted))

    return result


def list_responses(request_name: str) -> List[Response]:
    """
    Responses recorded by the latest run of a request.

    Raises:
        RequestNotFoundError: If the request doesn't exist
    """
    get_request(request_name)
    return repository.list_responses(request_name)
