"""
FILE: repost/core/repository.py
PURPOSE: Database operations and SQLite connection management
EXPORTS:
  - use_workspace(name) -> None
  - current_workspace() -> str
  - list_workspaces() -> List[str]
  - get_connection() -> Connection
  - close_all() -> None
  - init_database(conn) -> None
  - create_request(request) -> Request
  - get_request(name) -> Request | None
  - list_requests() -> List[Request]
  - list_requests_like(pattern) -> List[Request]
  - delete_request(name) -> None
  - upsert_variable(name, env, value, source) -> Variable
  - list_variables(name, env) -> List[Variable]
  - delete_variable(variable_id) -> None
  - delete_variables_by_name(name, env) -> int
  - list_environments() -> List[str]
  - ensure_option(request_name, option_name) -> None
  - set_option(request_name, option_name, value) -> RequestOption
  - list_options(request_name) -> List[RequestOption]
  - delete_options_by_name(option_name, request_name) -> int
  - upsert_extraction(request_name, variable, source, path) -> Extraction
  - list_extractions(request_name) -> List[Extraction]
  - add_response(response) -> Response
  - list_responses(request_name) -> List[Response]
  - delete_responses(request_name) -> int
DEPENDENCIES:
  - sqlite3 (stdlib)
  - json (stdlib)
  - pathlib (stdlib)
  - datetime (stdlib)
  - repost.core.models (Request, Variable, RequestOption, Extraction, Response)
  - repost.core.exceptions (RequestNotFoundError, VariableNotFoundError, WorkspaceError)
NOTES:
  - Each workspace is stored at <DATA_DIR>/<workspace>.db
  - The 'playground' workspace lives in memory and is lost on exit
  - DATA_DIR defaults to $REPOST_DATA_DIR or ~/.repost
  - Connections are cached per workspace (required for the in-memory playground)
  - Returns domain objects (Request, etc.), never raw rows
"""

import json
import os
import re
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .constants import PLAYGROUND, DB_SUFFIX
from .models import Request, Variable, RequestOption, Extraction, Response
from .exceptions import RequestNotFoundError, VariableNotFoundError, WorkspaceError


# Data directory (cross-platform), overridable via environment
DATA_DIR = Path(os.environ.get("REPOST_DATA_DIR", Path.home() / ".repost"))

# Schema file location (relative to this file)
SCHEMA_PATH = Path(__file__).parent / "schema.sql"

WORKSPACE_NAME = re.compile(r"^[A-Za-z0-9_.-]+$")

_workspace = PLAYGROUND
_connections: Dict[str, sqlite3.Connection] = {}


# --- Workspaces ---


def validate_workspace_name(name: str) -> str:
    """Return name unchanged, or raise WorkspaceError if it can't be a file stem."""
    if not WORKSPACE_NAME.match(name) or name.startswith("."):
        raise WorkspaceError(name, "names may only contain letters, digits, '.', '_' and '-'")
    return name


def use_workspace(name: str) -> None:
    """
    Switch the current workspace.

    The database is opened (and created on first use) immediately so that
    a bad data directory is reported when switching, not on the next query.
    """
    global _workspace
    validate_workspace_name(name)
    previous = _workspace
    _workspace = name
    try:
        get_connection()
    except (sqlite3.Error, OSError) as e:
        _workspace = previous
        raise WorkspaceError(name, str(e)) from e


def current_workspace() -> str:
    """Name of the workspace all queries run against."""
    return _workspace


def workspace_path(name: str) -> Path:
    """Database file backing a persistent workspace."""
    return DATA_DIR / f"{name}{DB_SUFFIX}"


def list_workspaces() -> List[str]:
    """
    List workspaces stored in DATA_DIR.

    Returns:
        Sorted workspace names (database file stems). The in-memory
        playground is not included.
    """
    if not DATA_DIR.is_dir():
        return []
    return sorted(path.stem for path in DATA_DIR.glob(f"*{DB_SUFFIX}") if path.is_file())


# --- Connections ---


def get_connection() -> sqlite3.Connection:
    """
    Get SQLite connection to the current workspace database.

    Creates DATA_DIR if it doesn't exist.
    Enables row_factory for dict-like row access.
    Enables foreign key constraints.
    Initializes database schema on first connection.
    """
    if _workspace == PLAYGROUND:
        key = PLAYGROUND
        target = ":memory:"
    else:
        path = workspace_path(_workspace)
        key = str(path)
        target = key

    conn = _connections.get(key)
    if conn is not None:
        return conn

    if target != ":memory:":
        DATA_DIR.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(target)
    conn.row_factory = sqlite3.Row

    # Enable foreign key constraints (required for ON DELETE CASCADE)
    conn.execute("PRAGMA foreign_keys = ON")

    init_database(conn)
    _connections[key] = conn
    return conn


def close_all() -> None:
    """Close every cached connection and reset to the playground workspace."""
    global _workspace
    for conn in _connections.values():
        conn.close()
    _connections.clear()
    _workspace = PLAYGROUND


def init_database(conn: sqlite3.Connection) -> None:
    """
    Create any missing tables.

    Safe to call multiple times (uses CREATE TABLE IF NOT EXISTS), so
    workspaces created by older versions gain new tables on connect.
    """
    with open(SCHEMA_PATH, "r") as f:
        schema_sql = f.read()
    conn.executescript(schema_sql)
    conn.commit()


# --- Requests ---


def create_request(request: Request) -> Request:
    """
    Insert a new request.

    Raises:
        sqlite3.IntegrityError: If a request with this name already exists
    """
    conn = get_connection()
    now = datetime.now().isoformat()
    conn.execute(
        """
        INSERT INTO requests (name, method, url, headers, body, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (request.name, request.method, request.url, "\n".join(request.headers), request.body, now),
    )
    conn.commit()

    created = get_request(request.name)
    if not created:
        raise RequestNotFoundError(request.name)
    return created


def get_request(name: str) -> Optional[Request]:
    """Fetch single request by name, or None."""
    conn = get_connection()
    row = conn.execute("SELECT * FROM requests WHERE name = ?", (name,)).fetchone()
    return Request.from_row(row) if row else None


def list_requests() -> List[Request]:
    """List all requests ordered by name."""
    conn = get_connection()
    rows = conn.execute("SELECT * FROM requests ORDER BY name").fetchall()
    return [Request.from_row(row) for row in rows]


def list_requests_like(pattern: str) -> List[Request]:
    """List requests whose name matches a SQL LIKE pattern (e.g. '%-user')."""
    conn = get_connection()
    rows = conn.execute(
        "SELECT * FROM requests WHERE name LIKE ? ORDER BY name", (pattern,)
    ).fetchall()
    return [Request.from_row(row) for row in rows]


def delete_request(name: str) -> None:
    """
    Delete a request along with its options and extractions.

    Raises:
        RequestNotFoundError: If no request has this name
    """
    conn = get_connection()
    cursor = conn.execute("DELETE FROM requests WHERE name = ?", (name,))
    conn.commit()
    if cursor.rowcount == 0:
        raise RequestNotFoundError(name)


# --- Variables ---


def upsert_variable(
    name: str,
    env: str,
    value: Optional[str],
    source: Optional[str] = None,
) -> Variable:
    """
    Create a variable, or replace the value of an existing (name, env) pair.

    Returns:
        The stored Variable
    """
    conn = get_connection()
    now = datetime.now().isoformat()
    conn.execute(
        """
        INSERT INTO variables (name, env, value, source, timestamp)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(name, env) DO UPDATE SET
            value = excluded.value,
            source = excluded.source,
            timestamp = excluded.timestamp
        """,
        (name, env, value, source, now),
    )
    conn.commit()
    row = conn.execute(
        "SELECT * FROM variables WHERE name = ? AND env = ?", (name, env)
    ).fetchone()
    return Variable.from_row(row)


def list_variables(name: Optional[str] = None, env: Optional[str] = None) -> List[Variable]:
    """
    List variables, optionally filtered by exact name and/or environment.

    Returns:
        Variables ordered by name then environment
    """
    conn = get_connection()
    query = "SELECT * FROM variables"
    clauses = []
    params: list = []
    if name is not None:
        clauses.append("name = ?")
        params.append(name)
    if env is not None:
        clauses.append("env = ?")
        params.append(env)
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    query += " ORDER BY name, env"
    rows = conn.execute(query, params).fetchall()
    return [Variable.from_row(row) for row in rows]


def delete_variable(variable_id: int) -> None:
    """
    Delete a variable by id.

    Raises:
        VariableNotFoundError: If no variable has this id
    """
    conn = get_connection()
    cursor = conn.execute("DELETE FROM variables WHERE id = ?", (variable_id,))
    conn.commit()
    if cursor.rowcount == 0:
        raise VariableNotFoundError(str(variable_id))


def delete_variables_by_name(name: str, env: Optional[str] = None) -> int:
    """Delete every variable with this name (in env, if given). Returns rows deleted."""
    conn = get_connection()
    if env is None:
        cursor = conn.execute("DELETE FROM variables WHERE name = ?", (name,))
    else:
        cursor = conn.execute("DELETE FROM variables WHERE name = ? AND env = ?", (name, env))
    conn.commit()
    return cursor.rowcount


def list_environments() -> List[str]:
    """Distinct environment names that have at least one variable."""
    conn = get_connection()
    rows = conn.execute("SELECT DISTINCT env FROM variables ORDER BY env").fetchall()
    return [row["env"] for row in rows]


# --- Options ---


def ensure_option(request_name: str, option_name: str) -> None:
    """Register a placeholder of a request without touching an existing value."""
    conn = get_connection()
    conn.execute(
        "INSERT OR IGNORE INTO options (request_name, option_name, value) VALUES (?, ?, NULL)",
        (request_name, option_name),
    )
    conn.commit()


def set_option(request_name: str, option_name: str, value: Optional[str]) -> RequestOption:
    """Create or overwrite the value of a request option."""
    conn = get_connection()
    conn.execute(
        """
        INSERT INTO options (request_name, option_name, value) VALUES (?, ?, ?)
        ON CONFLICT(request_name, option_name) DO UPDATE SET value = excluded.value
        """,
        (request_name, option_name, value),
    )
    conn.commit()
    return RequestOption(request_name=request_name, option_name=option_name, value=value)


def list_options(request_name: Optional[str] = None) -> List[RequestOption]:
    """List options, for one request or all of them."""
    conn = get_connection()
    if request_name is None:
        rows = conn.execute(
            "SELECT * FROM options ORDER BY request_name, option_name"
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM options WHERE request_name = ? ORDER BY option_name",
            (request_name,),
        ).fetchall()
    return [RequestOption.from_row(row) for row in rows]


def delete_options_by_name(option_name: str, request_name: Optional[str] = None) -> int:
    """Delete options with this name (for one request, if given). Returns rows deleted."""
    conn = get_connection()
    if request_name is None:
        cursor = conn.execute("DELETE FROM options WHERE option_name = ?", (option_name,))
    else:
        cursor = conn.execute(
            "DELETE FROM options WHERE option_name = ? AND request_name = ?",
            (option_name, request_name),
        )
    conn.commit()
    return cursor.rowcount


# --- Extractions ---


def upsert_extraction(request_name: str, variable: str, source: str, path: str) -> Extraction:
    """Create or replace the extraction feeding a variable from a request's response."""
    conn = get_connection()
    conn.execute(
        """
        INSERT INTO extractions (request_name, variable, source, path) VALUES (?, ?, ?, ?)
        ON CONFLICT(request_name, variable) DO UPDATE SET
            source = excluded.source,
            path = excluded.path
        """,
        (request_name, variable, source, path),
    )
    conn.commit()
    return Extraction(request_name=request_name, variable=variable, source=source, path=path)


def list_extractions(request_name: str) -> List[Extraction]:
    """List extractions configured for a request."""
    conn = get_connection()
    rows = conn.execute(
        "SELECT * FROM extractions WHERE request_name = ? ORDER BY variable",
        (request_name,),
    ).fetchall()
    return [Extraction.from_row(row) for row in rows]


# --- Responses ---


def add_response(response: Response) -> Response:
    """Record one exchange of a run. Returns it with id and timestamp set."""
    conn = get_connection()
    now = datetime.now().isoformat()
    cursor = conn.execute(
        """
        INSERT INTO responses (
            request_name, method, url, request_headers, request_body,
            status_code, reason, headers, body, extractions, timestamp
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            response.request_name,
            response.method,
            response.url,
            "\n".join(response.request_headers),
            response.request_body,
            response.status_code,
            response.reason,
            "\n".join(response.headers),
            response.body,
            json.dumps(response.extractions),
            now,
        ),
    )
    conn.commit()
    row = conn.execute("SELECT * FROM responses WHERE id = ?", (cursor.lastrowid,)).fetchone()
    return Response.from_row(row)


def list_responses(request_name: Optional[str] = None) -> List[Response]:
    """List recorded responses in the order they were received."""
    conn = get_connection()
    if request_name is None:
        rows = conn.execute("SELECT * FROM responses ORDER BY id").fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM responses WHERE request_name = ? ORDER BY id",
            (request_name,),
        ).fetchall()
    return [Response.from_row(row) for row in rows]


def delete_responses(request_name: str) -> int:
    """Forget the recorded responses of a request. Returns rows deleted."""
    conn = get_connection()
    cursor = conn.execute("DELETE FROM responses WHERE request_name = ?", (request_name,))
    conn.commit()
    return cursor.rowcount
