"""
Tests for the command builder: positional filling, options, the break
marker, validation and the non-mutating expect() query.
"""

# Path setup handled by conftest.py
import pytest

from repost.repl.builder import (
    Builder,
    NextPositionalArg,
    NothingExpected,
    OptionNameChoice,
    OptionValue,
)
from repost.repl.command_types import (
    CreateRequest,
    CreateVariable,
    Extract,
    HelpCommand,
    Run,
    SetOption,
)
from repost.repl.dispatcher import parse_line
from repost.repl.errors import (
    InvalidValueError,
    MissingOptionValueError,
    MissingRequiredArgError,
    MissingRequiredOptionError,
    TooManyValuesError,
    UnexpectedArgumentError,
    UnknownOptionError,
)
from repost.repl.grammar import ArgKey, OptKey, resolve
from repost.repl.tokenizer import PartialTail, tokenize


def builder_for(line):
    node, remaining = resolve(tokenize(line))
    builder = Builder(node)
    for token in remaining:
        builder.feed(token)
    return builder


@pytest.mark.parametrize("line", [
    "create req foo bar -m yay",
    "create req -m yay foo bar",
    "create req foo -m yay bar",
    "create req foo bar --method yay",
    "create req foo bar --method=yay",
    "create req -m=yay foo bar",
])
def test_order_independence(line):
    assert parse_line(line) == CreateRequest(name="foo", url="bar", method="yay")


def test_repeatable_header_and_body():
    command = parse_line(
        "create request create-user http://x/users -H 'Accept: */*' "
        "--header 'Content-Type: application/json' -d '{\"name\": \"{name}\"}'"
    )
    assert command.headers == ("Accept: */*", "Content-Type: application/json")
    assert command.body == '{"name": "{name}"}'
    assert command.method is None


def test_flag_with_no_value_at_end():
    with pytest.raises(MissingOptionValueError) as exc:
        parse_line("create req foo bar -m")
    assert exc.value.option == "-m"
    assert exc.value.offset == 19


def test_flag_followed_by_option():
    with pytest.raises(MissingOptionValueError) as exc:
        parse_line("create req foo bar --method -H 'a: b'")
    assert exc.value.option == "--method"


def test_flag_followed_by_break_marker():
    with pytest.raises(MissingOptionValueError):
        parse_line("create req foo bar -m -- x")


def test_quoted_dash_value_is_accepted():
    command = parse_line("create req foo bar -d '-1'")
    assert command.body == "-1"


def test_missing_url():
    with pytest.raises(MissingRequiredArgError) as exc:
        parse_line("create req foo")
    assert exc.value.arg == ArgKey.URL
    assert exc.value.offset == 14


def test_missing_name_and_url():
    with pytest.raises(MissingRequiredArgError) as exc:
        parse_line("create req")
    assert exc.value.arg == ArgKey.NAME


def test_too_many_values():
    with pytest.raises(TooManyValuesError) as exc:
        parse_line("create req foo bar -m GET --method POST")
    assert exc.value.option == "--method"

    with pytest.raises(TooManyValuesError):
        parse_line("run -q -q")


def test_unknown_option_is_an_error_by_default():
    with pytest.raises(UnknownOptionError) as exc:
        parse_line("create req foo bar --verbose")
    assert exc.value.token.text == "--verbose"
    assert exc.value.offset == 19


def test_unknown_dash_is_literal_for_set_option():
    assert parse_line("set option page -1 -2") == SetOption(name="page", values=("-1", "-2"))


def test_break_marker_makes_dashes_positional():
    assert parse_line("create req -- -foo -bar") == CreateRequest(name="-foo", url="-bar")
    # Options are still accepted before the marker
    assert parse_line("create req -m PUT -- -foo x") == CreateRequest(name="-foo", url="x", method="PUT")


def test_second_break_marker_is_positional():
    assert parse_line("set option x -- -- a") == SetOption(name="x", values=("--", "a"))


def test_single_dash_is_positional():
    assert parse_line("create req - x") == CreateRequest(name="-", url="x")


def test_unexpected_argument():
    with pytest.raises(UnexpectedArgumentError) as exc:
        parse_line("create req foo bar baz")
    assert exc.value.token.text == "baz"


def test_catch_all_minimum():
    with pytest.raises(MissingRequiredArgError) as exc:
        parse_line("create variable host")
    assert exc.value.arg == ArgKey.UNKNOWN

    with pytest.raises(MissingRequiredArgError):
        parse_line("delete requests")


def test_env_value_validation():
    assert parse_line("create var host dev=localhost prod=a=b") == CreateVariable(
        name="host", env_vals=("dev=localhost", "prod=a=b")
    )
    with pytest.raises(InvalidValueError) as exc:
        parse_line("create var host dev")
    assert exc.value.token.text == "dev"


def test_header_validation():
    with pytest.raises(InvalidValueError):
        parse_line("create req foo bar -H NoColon")


def test_extract_choices_and_required_option():
    assert parse_line("extract body data.id -t user_id") == Extract(
        source="body", key="data.id", to_var="user_id"
    )
    with pytest.raises(InvalidValueError):
        parse_line("extract cookie x -t y")
    with pytest.raises(MissingRequiredOptionError) as exc:
        parse_line("extract header Location")
    assert exc.value.option == OptKey.TO_VAR


def test_boolean_flag():
    assert parse_line("run get-user -q") == Run(name="get-user", quiet=True)
    assert parse_line("run") == Run()
    with pytest.raises(InvalidValueError):
        parse_line("run --quiet=yes")


def test_help_option_on_any_leaf():
    assert parse_line("create req -h") == HelpCommand(topic=("create", "request"))
    assert parse_line("p r --help") == HelpCommand(topic=("print", "requests"))


def test_help_topics():
    assert parse_line("help") == HelpCommand()
    assert parse_line("help create request") == HelpCommand(topic=("create", "request"))


def test_blank_line():
    assert parse_line("") is None
    assert parse_line("   \t") is None


# --- expect() ---


def test_expect_next_positional():
    builder = builder_for("create req ")
    expected = builder.expect()
    assert isinstance(expected, NextPositionalArg)
    assert expected.arg.key == ArgKey.NAME

    builder = builder_for("create req foo")
    assert builder.expect().arg.key == ArgKey.URL


def test_expect_option_names_after_positionals():
    expected = builder_for("create req foo bar").expect()
    assert isinstance(expected, OptionNameChoice)
    assert [o.key for o in expected.options] == [OptKey.METHOD, OptKey.HEADER, OptKey.DATA]


def test_expect_option_names_while_typing_dash():
    expected = builder_for("create req foo bar -m GET").expect(PartialTail("-", 30))
    keys = [o.key for o in expected.options]
    # --method is used up; --header is repeatable; help is offered when typing '-'
    assert keys == [OptKey.HEADER, OptKey.DATA, OptKey.HELP]


def test_expect_option_value():
    expected = builder_for("create req foo bar -m").expect()
    assert isinstance(expected, OptionValue)
    assert expected.option.key == OptKey.METHOD
    assert expected.prefix == ""


def test_expect_inline_option_value():
    expected = builder_for("create req foo bar").expect(PartialTail("--method=P", 19))
    assert isinstance(expected, OptionValue)
    assert expected.prefix == "--method="


def test_expect_nothing():
    assert isinstance(builder_for("info").expect(), NothingExpected)
    assert isinstance(builder_for("run x -q").expect(), NothingExpected)


def test_expect_does_not_mutate():
    builder = builder_for("create req foo")
    before = builder.snapshot()
    builder.expect(PartialTail("-", 15))
    builder.expect(PartialTail("--method=", 15))
    builder.expect()
    assert builder.snapshot() == before


def test_snapshot_contents():
    snapshot = builder_for("create req get-user http://x -H 'a: b'").snapshot()
    assert snapshot.path == ("create", "request")
    assert snapshot.args == {ArgKey.NAME: "get-user", ArgKey.URL: "http://x"}
    assert snapshot.options == {OptKey.HEADER: ("a: b",)}
    assert snapshot.rest == ()
