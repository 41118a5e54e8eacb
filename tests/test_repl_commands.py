"""
Tests for REPL commands end to end: a line goes through the dispatcher,
the handler runs against the playground workspace, and the printed
output is checked.
"""

# Path setup handled by conftest.py
import pytest

from repost.core import repository, service
from repost.repl.command_types import CommandKind, Exit, HelpCommand
from repost.repl.commands import HANDLERS
from repost.repl.dispatcher import dispatch, parse_line
from repost.repl.errors import UnknownOptionError
from repost.repl.main import execute_command, execute_line, show_parse_error


@pytest.fixture
def run(repl_ctx, capsys):
    """Execute a line and return what it printed."""

    def _run(line):
        assert execute_line(line) is True
        return capsys.readouterr().out

    return _run


class FakeResponse:
    status_code = 201
    reason = "Created"
    headers = {"Location": "/users/7"}
    text = '{"id": 7}'


def test_every_kind_has_a_handler():
    assert set(HANDLERS) == set(CommandKind)


def test_dispatch_passes_command_to_executor():
    seen = []
    assert dispatch("run get-user -q", seen.append) is None
    assert seen[0].name == "get-user" and seen[0].quiet

    assert dispatch("   ", seen.append) is None
    assert len(seen) == 1


def test_blank_line_keeps_going(run):
    assert run("") == ""


def test_exit_stops_the_loop(repl_ctx, capsys):
    assert execute_line("exit") is False
    assert execute_line("quit") is False
    assert execute_command(Exit()) is False


def test_parse_error_shows_caret(run):
    out = run("create req foo bar --bogus")
    assert "Unknown option" in out
    assert "create req foo bar --bogus" in out
    assert " " * 21 + "^^^^^^^" in out


def test_show_parse_error_points_at_token(capsys):
    line = "run x --nope"
    try:
        parse_line(line)
    except UnknownOptionError as e:
        show_parse_error(line, e)
    out = capsys.readouterr().out
    assert " " * 8 + "^^^^^^" in out


def test_create_and_print_requests(run):
    out = run("create request get-user 'http://x/users/{id}'")
    assert "Created request" in out
    assert "Options: id" in out

    out = run("p r user")
    assert "get-user" in out
    assert "GET" in out

    assert "No requests found" in run("print requests nothing")


def test_create_request_errors_are_printed(run):
    run("create req get-x http://x")
    assert "already exists" in run("create req get-x http://y")
    assert "Invalid method" in run("create req get-y http://y -m FETCH")


def test_variables_follow_the_environment(run):
    run("create variable host dev=localhost prod=example.com")
    out = run("print variables")
    assert "localhost" in out and "example.com" in out

    run("set env dev")
    out = run("print vars")
    assert "localhost" in out and "example.com" not in out

    run("delete variables host")
    assert [v.env for v in service.list_variables()] == ["prod"]


def test_set_environment(run, repl_ctx):
    out = run("set env staging")
    assert repl_ctx.environment == "staging"
    assert "no variables yet" in out
    run("set env")
    assert repl_ctx.environment is None


def test_print_environments_marks_current(run):
    run("create var host dev=a prod=b")
    run("set env dev")
    out = run("print environments")
    assert "dev" in out and "(current)" in out and "prod" in out


def test_set_request_and_info(run, repl_ctx):
    assert "not found" in run("set request nope")
    assert repl_ctx.request is None

    run("create req create-user http://x/users -d '{\"name\": \"{name}\"}'")
    run("set request create-user")
    assert repl_ctx.request == "create-user"
    assert repl_ctx.get_prompt() == "[playground][create-user] > "

    run("set option name ann bob")
    run("extract header Location -t user_url")
    out = run("info")
    assert "POST" in out
    assert "ann" in out
    assert "user_url" in out


@pytest.mark.parametrize("line", ["info", "extract body id -t x", "set option id 1", "run"])
def test_request_context_required(run, line):
    assert "only available in a request context" in run(line)


def test_delete_current_request_clears_context(run, repl_ctx):
    run("create req get-x http://x")
    run("set req get-x")
    out = run("delete requests get-x other")
    assert "Deleted 1 request" in out
    assert "No request named 'other'" in out
    assert repl_ctx.request is None


def test_delete_options_of_current_request(run):
    run("create req get-a http://x/{id}")
    run("create req get-b http://x/{id}")
    run("set req get-a")
    assert "Deleted 1 option" in run("delete options id")
    assert [o.request_name for o in service.list_options()] == ["get-b"]


def test_switch_workspace(run, repl_ctx, temp_data_dir):
    run("create req get-x http://x")
    run("set env dev")
    run("set workspace work")
    assert repository.current_workspace() == "work"
    assert repl_ctx.environment is None
    assert "No requests found" in run("print requests")

    out = run("print workspaces")
    assert "playground" in out and "work" in out

    assert "Workspace" in run("set ws ../bad")
    assert repository.current_workspace() == "work"


def test_run_prints_response(run, monkeypatch):
    calls = []

    def fake_request(method, url, **kwargs):
        calls.append((method, url))
        return FakeResponse()

    monkeypatch.setattr(service.requests, "request", fake_request)
    run("create req create-user http://x/users")
    run("set env dev")
    run("set req create-user")
    run("extract body id --to-var user_id")

    out = run("run")
    assert calls == [("POST", "http://x/users")]
    assert "201 Created" in out
    assert "Location: /users/7" in out
    assert "Extracted user_id = 7" in out

    out = run("run create-user -q")
    assert "201 Created" in out
    assert "Location" not in out


def test_run_missing_variable(run):
    run("create req get-x http://{host}/x")
    assert "missing values for: host" in run("run get-x")


def test_help(run):
    out = run("help")
    assert "Available Commands" in out
    assert "create request" in out

    out = run("help create request")
    assert "--method" in out
    assert "Aliases" in out

    out = run("create var -h")
    assert "create variable" in out

    assert "No help for" in run("help nosuch")


def test_help_option_parses_to_topic():
    assert parse_line("delete options --help") == HelpCommand(topic=("delete", "options"))


def test_run_with_several_values_prints_summary(run, monkeypatch):
    monkeypatch.setattr(service.requests, "request", lambda method, url, **kwargs: FakeResponse())
    run("create req get-user http://x/users/{id}")
    run("set req get-user")

    run("set option id 7")
    assert "Summary" not in run("run -q")

    run("set option id 7 8")
    out = run("run -q")
    assert "Summary" in out
    assert "http://x/users/8" in out
