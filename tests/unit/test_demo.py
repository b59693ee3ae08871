"""Unit tests for the playground demo."""

import pytest

from command_protocol.demo import EchoCommand, run_command_demo
from command_protocol.messages import CommandMessage


class TestEchoCommand:
    """Test EchoCommand."""

    @pytest.mark.asyncio
    async def test_echoes_arguments(self):
        result = await EchoCommand().run(CommandMessage.parse(["echo", "a", "b"]), {"db": {}})

        assert result == "ECHO: a b"

    def test_name(self):
        assert EchoCommand.name == "echo"


class TestRunCommandDemo:
    """Test the demo runner."""

    @pytest.mark.asyncio
    async def test_reports_each_step(self):
        lines: list[str] = []

        output = await run_command_demo(lines.append)

        assert output.content == ["ECHO: hello universe"]
        assert output.meta == {"source": "echo"}
        assert lines[0] == "Input: echo hello universe"
        assert lines[1] == "Protocol accepts: True"
        assert lines[-1] == "History length: 1"

    @pytest.mark.asyncio
    async def test_unaccepted_value_still_processes(self):
        lines: list[str] = []

        output = await run_command_demo(lines.append, "other thing")

        assert "Protocol accepts: False" in lines
        assert output.content == ["ECHO: thing"]
