"""Integration tests for the command-protocol CLI."""

import json
import logging

import pytest
from click.testing import CliRunner

from command_protocol.cli import DEFAULT_HANDLER, load_command, main
from command_protocol.demo import EchoCommand, upper
from command_protocol.errors import HandlerLoadError


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logging():
    """The CLI reconfigures root logging; undo it after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestDemoCommand:
    """Test `command-protocol demo`."""

    def test_default_demo(self, runner):
        result = runner.invoke(main, ["demo"])

        assert result.exit_code == 0, result.output
        assert "Input: echo hello universe" in result.output
        assert "Protocol accepts: True" in result.output
        assert "ECHO: hello universe" in result.output
        assert "History length: 1" in result.output

    def test_demo_with_custom_value(self, runner):
        result = runner.invoke(main, ["demo", "echo custom words"])

        assert result.exit_code == 0, result.output
        assert "ECHO: custom words" in result.output


class TestRunCommand:
    """Test `command-protocol run`."""

    def test_default_handler_over_stdio(self, runner):
        result = runner.invoke(main, ["run"], input="echo hi there\n")

        assert result.exit_code == 0, result.output
        line = next(line for line in result.output.splitlines() if line.startswith("{"))
        assert json.loads(line)["content"] == ["ECHO: hi there"]

    def test_custom_handler(self, runner):
        result = runner.invoke(
            main, ["run", "--handler", "command_protocol.demo:upper"], input="upper a b\n"
        )

        assert result.exit_code == 0, result.output
        assert '"content":["A","B"]' in result.output

    def test_handler_from_environment(self, runner):
        result = runner.invoke(
            main,
            ["run"],
            input="upper x\n",
            env={"COMMAND_PROTOCOL_HANDLER": "command_protocol.demo:upper"},
        )

        assert result.exit_code == 0, result.output
        assert '"content":["X"]' in result.output

    def test_bad_handler_spec(self, runner):
        result = runner.invoke(main, ["run", "--handler", "no-colon"])

        assert result.exit_code != 0
        assert "module:attr" in result.output


class TestConfigCommand:
    """Test `command-protocol config`."""

    def test_json_output(self, runner):
        result = runner.invoke(main, ["--log-level", "info", "config", "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["log_level"] == "INFO"
        assert data["handler"] == DEFAULT_HANDLER

    def test_table_output(self, runner):
        result = runner.invoke(main, ["config"])

        assert result.exit_code == 0, result.output
        assert "log_level" in result.output

    def test_invalid_log_level(self, runner):
        result = runner.invoke(main, ["--log-level", "loud", "config"])

        assert result.exit_code != 0
        assert "Unknown log level" in result.output


class TestLoadCommand:
    """Test handler spec loading."""

    def test_class_is_instantiated(self):
        assert isinstance(load_command(DEFAULT_HANDLER), EchoCommand)

    def test_function_is_returned(self):
        assert load_command("command_protocol.demo:upper") is upper

    @pytest.mark.parametrize(
        "spec", ["missing", ":attr", "module:", "no_such_module_xyz:thing", "json:nope"]
    )
    def test_errors(self, spec):
        with pytest.raises(HandlerLoadError):
            load_command(spec)
