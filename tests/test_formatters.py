import sys

import pytest

from rewrap.errors import FormatterConfigurationError, FormatterError, FormatterSyntaxError
from rewrap.formatters import (
    CallableFormatter,
    CommandFormatter,
    IdentityFormatter,
    build_formatter,
)

UPPER = "import sys; sys.stdout.write(sys.stdin.read().upper())"
FAIL = "import sys; sys.stderr.write('1: error: ; expected'); sys.exit(1)"
SLOW = "import time; time.sleep(5)"


def test_identity_formatter_returns_input():
    assert IdentityFormatter().format("class T {}\n") == "class T {}\n"


def test_callable_formatter_logs_when_debugging(capsys):
    formatter = CallableFormatter(str.upper, debug=True)

    assert formatter.format("abc") == "ABC"
    err = capsys.readouterr().err
    assert "[rewrap][formatter-debug] formatter.request:\nabc" in err
    assert "formatter.response:\nABC" in err


def test_command_formatter_pipes_through_process():
    formatter = CommandFormatter([sys.executable, "-c", UPPER])

    assert formatter.format("class t {}\n") == "CLASS T {}\n"


def test_command_formatter_failure_is_a_syntax_error():
    formatter = CommandFormatter([sys.executable, "-c", FAIL])

    with pytest.raises(FormatterSyntaxError, match="; expected"):
        formatter.format("class T {")


def test_command_formatter_missing_executable():
    formatter = CommandFormatter(["definitely-not-a-formatter-binary"])

    with pytest.raises(FormatterConfigurationError):
        formatter.format("class T {}")


def test_command_formatter_timeout():
    formatter = CommandFormatter([sys.executable, "-c", SLOW], timeout=0.5)

    with pytest.raises(FormatterError) as info:
        formatter.format("")
    assert not isinstance(info.value, FormatterSyntaxError)


def test_command_string_is_split():
    assert CommandFormatter("google-java-format --aosp -").command == [
        "google-java-format",
        "--aosp",
        "-",
    ]


def test_empty_command_is_rejected():
    with pytest.raises(FormatterConfigurationError):
        CommandFormatter([])


def test_build_formatter():
    assert isinstance(build_formatter("identity"), IdentityFormatter)
    assert isinstance(build_formatter("NOOP"), IdentityFormatter)
    command = build_formatter(None, command="fmt -", timeout=5)
    assert isinstance(command, CommandFormatter)
    assert command.command == ["fmt", "-"]
    assert command.timeout == 5
    with pytest.raises(FormatterConfigurationError):
        build_formatter("gofmt")
