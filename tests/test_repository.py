"""
Tests for workspace storage: connections, schema and CRUD round trips.
"""

# Path setup handled by conftest.py
import sqlite3

import pytest

from repost.core import repository
from repost.core.constants import PLAYGROUND
from repost.core.exceptions import RequestNotFoundError, VariableNotFoundError, WorkspaceError
from repost.core.models import Request, Response


def test_playground_is_in_memory(temp_data_dir):
    assert repository.current_workspace() == PLAYGROUND
    repository.create_request(Request("get-x", "GET", "http://x"))
    assert not temp_data_dir.exists()
    assert repository.list_workspaces() == []


def test_persistent_workspace_file(temp_data_dir):
    repository.use_workspace("work")
    repository.create_request(Request("get-x", "GET", "http://x"))
    assert (temp_data_dir / "work.db").is_file()
    assert repository.list_workspaces() == ["work"]

    # Data survives reconnecting
    repository.close_all()
    repository.use_workspace("work")
    assert repository.get_request("get-x").url == "http://x"


def test_workspaces_are_isolated():
    repository.use_workspace("a")
    repository.create_request(Request("get-x", "GET", "http://a"))
    repository.use_workspace("b")
    assert repository.list_requests() == []
    repository.use_workspace("a")
    assert [r.url for r in repository.list_requests()] == ["http://a"]


@pytest.mark.parametrize("name", ["../evil", "", ".hidden", "with space"])
def test_invalid_workspace_names(name):
    with pytest.raises(WorkspaceError):
        repository.use_workspace(name)
    assert repository.current_workspace() == PLAYGROUND


def test_unusable_data_dir(monkeypatch, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    monkeypatch.setattr(repository, "DATA_DIR", blocker / "sub")
    with pytest.raises(WorkspaceError):
        repository.use_workspace("work")
    assert repository.current_workspace() == PLAYGROUND


def test_request_round_trip():
    request = Request(
        name="create-user",
        method="POST",
        url="http://x/users",
        headers=["Content-Type: application/json", "Accept: */*"],
        body=b'{"a": 1}',
    )
    created = repository.create_request(request)
    assert created.headers == request.headers
    assert created.body == request.body
    assert created.created_at is not None
    assert created.header_pairs == [("Content-Type", "application/json"), ("Accept", "*/*")]


def test_duplicate_request_name():
    repository.create_request(Request("get-x", "GET", "http://x"))
    with pytest.raises(sqlite3.IntegrityError):
        repository.create_request(Request("get-x", "GET", "http://y"))


def test_list_requests_like():
    for name in ("get-user", "create-user", "get-post"):
        repository.create_request(Request(name, "GET", "http://x"))
    assert [r.name for r in repository.list_requests_like("%-user")] == ["create-user", "get-user"]


def test_delete_request_cascades():
    repository.create_request(Request("get-x", "GET", "http://x/{id}"))
    repository.ensure_option("get-x", "id")
    repository.upsert_extraction("get-x", "token", "header", "X-Token")

    repository.delete_request("get-x")
    assert repository.list_options() == []
    assert repository.list_extractions("get-x") == []

    with pytest.raises(RequestNotFoundError):
        repository.delete_request("get-x")


def test_variable_upsert_and_delete():
    first = repository.upsert_variable("host", "dev", "localhost", "user")
    second = repository.upsert_variable("host", "dev", "127.0.0.1", "get-x")
    assert first.id == second.id
    assert second.value == "127.0.0.1"
    assert second.source == "get-x"

    repository.upsert_variable("host", "prod", "example.com")
    assert repository.list_environments() == ["dev", "prod"]
    assert [v.env for v in repository.list_variables(name="host")] == ["dev", "prod"]
    assert len(repository.list_variables(env="prod")) == 1

    assert repository.delete_variables_by_name("host", env="dev") == 1
    repository.delete_variable(repository.list_variables()[0].id)
    assert repository.list_variables() == []

    with pytest.raises(VariableNotFoundError):
        repository.delete_variable(999)


def test_options():
    repository.create_request(Request("get-x", "GET", "http://x/{id}"))
    repository.ensure_option("get-x", "id")
    assert repository.list_options("get-x")[0].value is None

    repository.set_option("get-x", "id", "1\n2")
    repository.ensure_option("get-x", "id")
    assert repository.list_options("get-x")[0].value == "1\n2"

    assert repository.delete_options_by_name("id", "other") == 0
    assert repository.delete_options_by_name("id") == 1


def test_extractions_replace_by_variable():
    repository.create_request(Request("get-x", "GET", "http://x"))
    repository.upsert_extraction("get-x", "token", "header", "X-Token")
    repository.upsert_extraction("get-x", "token", "body", "data.token")
    (extraction,) = repository.list_extractions("get-x")
    assert extraction.source == "body"
    assert extraction.path == "data.token"


def test_responses_round_trip_and_cascade():
    repository.create_request(Request("get-x", "GET", "http://x/{id}"))
    stored = repository.add_response(Response(
        request_name="get-x",
        method="GET",
        url="http://x/1",
        status_code=200,
        reason="OK",
        request_headers=["Accept: */*"],
        headers=["Content-Type: application/json"],
        body='{"id": 1}',
        extractions={"user_id": "1"},
    ))
    assert stored.id is not None
    assert stored.timestamp is not None
    assert stored.extractions == {"user_id": "1"}
    assert stored.headers == ["Content-Type: application/json"]
    assert repository.list_responses("get-x") == [stored]

    assert repository.delete_responses("get-x") == 1
    repository.add_response(Response("get-x", "GET", "http://x/2", 404))
    repository.delete_request("get-x")
    assert repository.list_responses() == []


def test_init_database_adds_missing_tables():
    conn = repository.get_connection()
    conn.execute("DROP TABLE responses")
    repository.init_database(conn)
    repository.init_database(conn)
    tables = {
        row["name"]
        for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    }
    assert {"requests", "variables", "options", "extractions", "responses"} <= tables
