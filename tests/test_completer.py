"""
Tests for tab completion: the pure complete() function, the store-backed
candidate provider and the prompt_toolkit adapter.
"""

# Path setup handled by conftest.py
import pytest
from prompt_toolkit.document import Document

from repost.core import repository, service
from repost.repl.candidates import StoreCandidateProvider, request_name_suggestions
from repost.repl.command_types import CommandKind
from repost.repl.completer import RepostCompleter, complete, create_completer
from repost.repl.context import REPLContext
from repost.repl.grammar import ArgKey, OptKey
from repost.repl.tokenizer import tokenize


def replacements(line, provider=None, cursor=None):
    return [c.replacement for c in complete(line, cursor, provider).candidates]


class RecordingProvider:
    """Returns fixed values and remembers what it was asked for."""

    def __init__(self, values):
        self.values = values
        self.calls = []

    def __call__(self, kind, field, snapshot):
        self.calls.append((kind, field, snapshot))
        return list(self.values)


def test_create_request_name_on_empty_store():
    """'create r ' offers exactly the verb prefixes when nothing is stored."""
    result = complete("create r ", 9, StoreCandidateProvider())
    assert {c.replacement for c in result.candidates} == {"create-", "update-", "get-", "delete-"}
    assert result.replacement_range == (9, 9)


def test_root_commands():
    assert replacements("cr") == ["create "]
    assert replacements("ex") == ["extract ", "ex ", "exit "]
    result = complete("", 0)
    assert "print " in [c.replacement for c in result.candidates]
    assert result.replacement_range == (0, 0)


def test_subcommands():
    assert replacements("create ") == [
        "request ", "req ", "r ", "variable ", "var ", "v ",
    ]
    assert replacements("print e") == ["environments ", "environment ", "envs ", "env ", "e "]
    result = complete("set wo", 6)
    assert result.replacement_range == (4, 6)
    assert [c.replacement for c in result.candidates] == ["workspace "]


def test_filtering_is_case_sensitive():
    assert replacements("CR") == []


def test_option_names():
    names = replacements("create req foo bar ")
    assert names == ["--method", "-m", "--header", "-H", "--data", "-d"]

    assert replacements("create req foo bar --h") == ["--header", "--help "]
    assert replacements("run x -") == ["--quiet ", "-q ", "--help ", "-h "]


def test_used_option_not_offered_again():
    assert "--method" not in replacements("create req foo bar -m GET ")
    assert "--header" in replacements("create req foo bar -H 'a: b' ")


def test_static_method_values():
    assert replacements("create req foo bar -m P") == ["POST ", "PUT ", "PATCH "]
    assert replacements("create req foo bar --method=D") == ["--method=DELETE "]


def test_static_source_values():
    assert replacements("extract ") == ["header ", "body "]
    assert replacements("ex b") == ["body "]


def test_dynamic_values_go_to_provider():
    provider = RecordingProvider(["get-user", "get-users"])
    assert replacements("run get-", provider) == ["get-user ", "get-users "]
    kind, field, snapshot = provider.calls[0]
    assert kind == CommandKind.RUN
    assert field == ArgKey.NAME
    assert snapshot.path == ("run",)


def test_provider_receives_builder_snapshot():
    provider = RecordingProvider(["Accept:"])
    assert replacements("create req get-user http://x -H ", provider) == ["Accept:"]
    kind, field, snapshot = provider.calls[0]
    assert (kind, field) == (CommandKind.CREATE_REQUEST, OptKey.HEADER)
    assert snapshot.args[ArgKey.NAME] == "get-user"


def test_open_ended_values_get_no_space():
    provider = RecordingProvider(["dev=", "create-", "Accept:", "done"])
    assert replacements("create var x ", provider) == ["dev=", "create-", "Accept:", "done "]


def test_values_with_spaces_are_quoted():
    provider = RecordingProvider(["my request"])
    assert replacements("run ", provider) == ["'my request' "]


def test_quoted_tail_is_requoted():
    provider = RecordingProvider(["my request", "other"])
    result = complete('run "my', None, provider)
    assert [c.replacement for c in result.candidates] == ['"my request" ']
    assert result.replacement_range == (4, 7)


@pytest.mark.parametrize("value,expected", [
    ("it's", "it's "),
    ("it's here", "\"it's here\" "),
])
def test_value_containing_tail_quote_is_requoted(value, expected):
    """The opening quote is replaced by a form that can hold the value."""
    result = complete("run 'it", 7, RecordingProvider([value]))
    (candidate,) = result.candidates
    assert candidate.replacement == expected
    assert result.replacement_range == (4, 7)

    line = "run " + candidate.replacement
    assert [t.text for t in tokenize(line)] == ["run", value]


@pytest.mark.parametrize("line", ["run C:", "run 'C:"])
def test_value_ending_in_backslash_stays_bare(line):
    result = complete(line, None, RecordingProvider(["C:\\dir\\"]))
    (candidate,) = result.candidates
    assert candidate.replacement == "C:\\dir\\"
    assert [t.text for t in tokenize("run " + candidate.replacement)] == ["run", "C:\\dir\\"]


def test_provider_failure_gives_no_candidates():
    def broken(kind, field, snapshot):
        raise RuntimeError("database is locked")

    assert replacements("run ", broken) == []


def test_builder_errors_give_no_candidates():
    assert replacements("create req foo bar baz ") == []
    assert replacements("create req --bogus ") == []
    assert replacements("nosuch ") == []


def test_nothing_after_complete_command():
    assert replacements("info ") == []


def test_cursor_in_middle_uses_prefix_only():
    result = complete("create req foo", 3)
    assert result.replacement_range == (0, 3)
    assert [c.replacement for c in result.candidates] == ["create "]


VALID_LINES = [
    "create request get-user 'http://x/{id}' -m GET -H 'Accept: */*'",
    "create var host dev=localhost prod=\"example com\"",
    "set option page -1 -- --2",
    "extract body data.id --to-var=user_id",
    "p r user",
    "help create request",
]


@pytest.mark.parametrize("line", VALID_LINES)
def test_prefix_safety(line):
    """Every prefix completes without raising and with a range inside the prefix."""
    provider = StoreCandidateProvider(REPLContext())
    for end in range(len(line) + 1):
        prefix = line[:end]
        result = complete(prefix, len(prefix), provider)
        start, stop = result.replacement_range
        assert 0 <= start <= stop == len(prefix)


@pytest.mark.parametrize("line", VALID_LINES)
def test_purity(line):
    provider = RecordingProvider(["a", "b c", "d="])
    for end in range(len(line) + 1):
        assert complete(line, end, provider) == complete(line, end, provider)


# --- Store-backed provider ---


def test_request_name_suggestions():
    assert request_name_suggestions([]) == ["create-", "update-", "get-", "delete-"]
    assert request_name_suggestions(["create-user", "get-user", "nodash"]) == [
        "update-user", "delete-user",
    ]


def test_store_request_names():
    service.create_request("create-user", "http://x/users")
    service.create_request("get-user", "http://x/users/{id}", headers=["Accept: */*"])
    provider = StoreCandidateProvider()

    assert replacements("create req ", provider) == ["update-user ", "delete-user "]
    assert replacements("run ", provider) == ["create-user ", "get-user "]
    assert replacements("delete requests get-user ", provider) == ["create-user "]


def test_store_related_urls_and_headers():
    service.create_request("get-user", "http://x/users/{id}", headers=["Accept: */*"])
    provider = StoreCandidateProvider()

    assert replacements("create req delete-user ", provider) == ["http://x/users/{id} "]
    headers = replacements("create req delete-user u -H ", provider)
    assert headers[0] == "'Accept: */*' "
    assert "Content-Type:" in headers


@pytest.mark.parametrize("given", ["'Accept: */*'", "'Accept:*/*'", "' Accept :  */*'"])
def test_store_headers_already_given_are_skipped(given):
    service.create_request("get-user", "http://x/users", headers=["Accept: */*"])
    headers = replacements(f"create req delete-user u -H {given} -H ", StoreCandidateProvider())
    assert "'Accept: */*' " not in headers
    assert "Accept:" in headers


def test_store_env_values_skip_used_environments():
    service.create_variable("host", ["dev=localhost", "prod=example.com"])
    provider = StoreCandidateProvider()

    assert replacements("create var token ", provider) == ["dev=", "prod="]
    assert replacements("create var token dev=abc ", provider) == ["prod="]


def test_store_environments_skip_current():
    service.create_variable("host", ["dev=localhost", "prod=example.com"])
    ctx = REPLContext(environment="dev")
    assert replacements("set env ", StoreCandidateProvider(ctx)) == ["prod "]


def test_store_workspaces(temp_data_dir):
    repository.use_workspace("work")
    repository.use_workspace("playground")
    provider = StoreCandidateProvider()
    assert replacements("set ws ", provider) == ["work "]

    repository.use_workspace("work")
    assert replacements("set ws ", provider) == ["playground "]


def test_store_options_of_current_request():
    service.create_request("get-user", "http://x/users/{id}?v={version}")
    service.create_request("get-post", "http://x/posts/{post}")
    ctx = REPLContext(request="get-user")
    assert replacements("set option ", StoreCandidateProvider(ctx)) == ["id ", "version "]
    assert replacements("print options ", StoreCandidateProvider()) == ["post ", "id ", "version "]


def test_store_help_topics():
    provider = StoreCandidateProvider()
    assert "create " in replacements("help ", provider)
    assert replacements("help create v", provider) == ["variable ", "var ", "v "]


# --- prompt_toolkit adapter ---


def test_prompt_toolkit_completions():
    completer = RepostCompleter()
    doc = Document("set wo", cursor_position=6)
    completions = list(completer.get_completions(doc, None))
    assert [c.text for c in completions] == ["workspace "]
    assert completions[0].start_position == -2


def test_create_completer_uses_store():
    completer = create_completer(REPLContext())
    doc = Document("create r ", cursor_position=9)
    texts = {c.text for c in completer.get_completions(doc, None)}
    assert texts == {"create-", "update-", "get-", "delete-"}
