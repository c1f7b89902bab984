"""Tests for the interactive chat CLI."""

import json
from io import StringIO
from unittest.mock import Mock, patch

import pytest
from rich.console import Console

from contactcmd_ai.cli import ChatCLI, main
from contactcmd_ai.errors import TransportError
from contactcmd_ai.models.chat import FeedbackAction
from contactcmd_ai.models.messages import ProviderResponse, ToolCall
from contactcmd_ai.services.session import AiChatSession


def suggest(call_id: str, name: str, args: dict) -> ProviderResponse:
    return ProviderResponse.with_tool_calls([ToolCall.function_call(call_id, name, json.dumps(args))])


@pytest.fixture
def console():
    return Console(file=StringIO(), width=120)


def output_of(console: Console) -> str:
    return console.file.getvalue()


class TestHandleMessage:
    """Tests for one request and the review of its suggestions."""

    @pytest.mark.asyncio
    async def test_accepted_command_runs(self, scripted_provider, console):
        provider = scripted_provider(
            [suggest("call_1", "suggest_search", {"name": "john", "location": "texas"}), ProviderResponse.text("Done")]
        )
        runner = Mock()
        cli = ChatCLI(AiChatSession(provider), runner=runner, console=console)

        with patch("contactcmd_ai.cli.Prompt.ask", return_value="a"):
            decisions = await cli.handle_message("find john in texas")

        runner.assert_called_once_with("/search --name john --location texas")
        assert [d.action for d in decisions] == [FeedbackAction.ACCEPT]

    @pytest.mark.asyncio
    async def test_rejected_command_does_not_run(self, scripted_provider, console):
        provider = scripted_provider([suggest("call_1", "suggest_list", {}), ProviderResponse.text("Done")])
        runner = Mock()
        cli = ChatCLI(AiChatSession(provider), runner=runner, console=console)

        with patch("contactcmd_ai.cli.Prompt.ask", return_value="r"):
            decisions = await cli.handle_message("everyone")

        runner.assert_not_called()
        assert decisions[0].final_command() is None

    @pytest.mark.asyncio
    async def test_edited_command_runs(self, scripted_provider, console):
        """Test that the edited text, not the suggestion, reaches the runner."""
        provider = scripted_provider([suggest("call_1", "suggest_show", {"name": "jon"}), ProviderResponse.text("ok")])
        runner = Mock()
        cli = ChatCLI(AiChatSession(provider), runner=runner, console=console)

        with patch("contactcmd_ai.cli.Prompt.ask", side_effect=["e", "/show --name john"]):
            decisions = await cli.handle_message("show jon")

        runner.assert_called_once_with("/show --name john")
        assert decisions[0].action == FeedbackAction.EDIT
        assert decisions[0].command == "/show --name jon"

    @pytest.mark.asyncio
    async def test_blank_edit_rejects(self, scripted_provider, console):
        provider = scripted_provider([suggest("call_1", "suggest_list", {}), ProviderResponse.text("ok")])
        runner = Mock()
        cli = ChatCLI(AiChatSession(provider), runner=runner, console=console)

        with patch("contactcmd_ai.cli.Prompt.ask", side_effect=["e", "   "]):
            decisions = await cli.handle_message("everyone")

        runner.assert_not_called()
        assert decisions[0].action == FeedbackAction.REJECT

    @pytest.mark.asyncio
    async def test_feedback_not_sent_to_session(self, scripted_provider, console):
        """Test that reviewing suggestions leaves the session transcript untouched."""
        provider = scripted_provider([suggest("call_1", "suggest_list", {}), ProviderResponse.text("ok")])
        session = AiChatSession(provider)
        cli = ChatCLI(session, runner=Mock(), console=console)

        with patch("contactcmd_ai.cli.Prompt.ask", return_value="a"):
            await cli.handle_message("everyone")

        assert session.message_count == 4
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_no_suggestions(self, scripted_provider, console):
        provider = scripted_provider([ProviderResponse.text("I can't help with that.")])
        cli = ChatCLI(AiChatSession(provider), console=console)

        with patch("contactcmd_ai.cli.Prompt.ask") as ask:
            decisions = await cli.handle_message("weather?")

        ask.assert_not_called()
        assert decisions == []
        assert "No command suggested" in output_of(console)

    @pytest.mark.asyncio
    async def test_provider_error_is_reported(self, scripted_provider, console):
        provider = scripted_provider([TransportError("API error 502: bad gateway", status_code=502)])
        cli = ChatCLI(AiChatSession(provider), console=console)

        decisions = await cli.handle_message("everyone")

        assert decisions == []
        assert "API error 502" in output_of(console)


class TestChatLoop:
    """Tests for the REPL commands."""

    @pytest.mark.asyncio
    async def test_help_clear_and_quit(self, scripted_provider, console):
        provider = scripted_provider([ProviderResponse.text("hello")])
        session = AiChatSession(provider)
        cli = ChatCLI(session, console=console)

        with patch("contactcmd_ai.cli.Prompt.ask", side_effect=["hi", "/help", "/clear", "/quit"]):
            await cli.start()

        output = output_of(console)
        assert "Available Commands" in output
        assert "Session cleared" in output
        assert "Goodbye" in output
        assert session.message_count == 0

    @pytest.mark.asyncio
    async def test_default_runner_prints(self, scripted_provider, console):
        provider = scripted_provider([suggest("call_1", "suggest_browse", {}), ProviderResponse.text("ok")])
        cli = ChatCLI(AiChatSession(provider), console=console)

        with patch("contactcmd_ai.cli.Prompt.ask", side_effect=["browse my results", "a", "/quit"]):
            await cli.start()

        assert "Run: /browse" in output_of(console)


class TestMain:
    """Tests for the entry point."""

    def test_unconfigured_exits(self, monkeypatch):
        monkeypatch.delenv("AI_PROVIDER", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1

    def test_out_of_range_setting_exits(self, monkeypatch, capsys):
        """Test that an invalid limit is reported as plain text instead of a traceback."""
        monkeypatch.setenv("AI_PROVIDER", "remote")
        monkeypatch.setenv("AI_API_KEY", "sk-test")
        monkeypatch.setenv("AI_MAX_ITERATIONS", "0")

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "max_iterations" in capsys.readouterr().out
