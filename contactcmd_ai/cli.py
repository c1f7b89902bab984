"""Interactive chat REPL for command suggestions.

Suggestions are shown to the user, who accepts, rejects or edits each one.
Accepted commands go to the injected runner; nothing about them is sent back
to the AI session.
"""

import asyncio
from collections.abc import Callable

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt

from contactcmd_ai.config import AiConfig
from contactcmd_ai.errors import AiError, ConfigError
from contactcmd_ai.models.chat import AiChatResult, CommandFeedback, FeedbackAction
from contactcmd_ai.services.factory import create_session
from contactcmd_ai.services.session import AiChatSession
from contactcmd_ai.utils.logging import LogConfig, setup_logging

CommandRunner = Callable[[str], None]

_FEEDBACK_CHOICES = {"a": FeedbackAction.ACCEPT, "r": FeedbackAction.REJECT, "e": FeedbackAction.EDIT}


class ChatCLI:
    """Interactive chat interface for the command-suggestion engine."""

    def __init__(self, session: AiChatSession, runner: CommandRunner | None = None, console: Console | None = None):
        """Initialize chat CLI.

        Args:
            session: AI session to send user requests to
            runner: Receives each accepted command (defaults to printing it)
            console: Rich console for output
        """
        self.session = session
        self.console = console or Console()
        self.runner = runner or self._print_command

    async def start(self) -> None:
        """Start the interactive chat loop."""
        self.console.print(
            Panel.fit(
                f"[bold blue]ContactCMD Assistant[/bold blue] ({self.session.provider_name})\n"
                "Describe what you want to do; suggested commands need your approval.\n"
                "Commands: /help, /clear, /quit",
                border_style="blue",
            )
        )

        if not self.session.is_ready():
            self.console.print("[red]AI provider is not ready. Check your AI_* settings.[/red]")
            return

        try:
            while True:
                user_input = await asyncio.to_thread(Prompt.ask, "\n[bold cyan]You[/bold cyan]", console=self.console)
                command = user_input.strip().lower()

                if command in ("/quit", "/exit", "quit", "exit"):
                    break
                if command == "/help":
                    self._show_help()
                    continue
                if command == "/clear":
                    self.session.clear_history()
                    self.console.print("[yellow]Session cleared[/yellow]")
                    continue
                if not command:
                    continue

                await self.handle_message(user_input)

        except (KeyboardInterrupt, EOFError):
            pass
        finally:
            self.console.print("\n[yellow]Goodbye![/yellow]")

    async def handle_message(self, message: str) -> list[CommandFeedback]:
        """Run one chat turn and collect the user's decision on each suggestion."""
        try:
            with self.console.status("[dim]Thinking...[/dim]"):
                result = await self.session.chat(message)
        except AiError as e:
            self.console.print(f"[red]Error: {e}[/red]")
            return []

        self._display_result(result)

        decisions: list[CommandFeedback] = []
        for suggested in result.commands:
            feedback = await asyncio.to_thread(self.review_suggestion, suggested)
            decisions.append(feedback)

            final_command = feedback.final_command()
            if final_command:
                self.runner(final_command)
        return decisions

    def review_suggestion(self, command: str) -> CommandFeedback:
        """Ask the user to accept, reject or edit a suggested command."""
        choice = Prompt.ask(
            f"Run [bold]{command}[/bold]? [a]ccept / [r]eject / [e]dit",
            choices=list(_FEEDBACK_CHOICES),
            default="a",
            console=self.console,
        )
        action = _FEEDBACK_CHOICES[choice]

        if action == FeedbackAction.EDIT:
            edited = Prompt.ask("Command", default=command, console=self.console)
            if not edited.strip():
                return CommandFeedback(command=command, action=FeedbackAction.REJECT)
            return CommandFeedback(command=command, action=action, edited_command=edited)

        return CommandFeedback(command=command, action=action)

    def _display_result(self, result: AiChatResult) -> None:
        if result.text:
            self.console.print(
                Panel(
                    Markdown(result.text),
                    title="[bold green]Assistant[/bold green]",
                    border_style="green",
                    padding=(1, 2),
                )
            )
        if not result.commands:
            self.console.print("[dim]No command suggested.[/dim]")

    def _print_command(self, command: str) -> None:
        self.console.print(f"[green]Run:[/green] {command}")

    def _show_help(self) -> None:
        help_text = """
[bold]Available Commands:[/bold]
• /help - Show this help message
• /clear - Clear the conversation and start over
• /quit or /exit - Exit the chat

[bold]Examples:[/bold]
• "find john in texas"
• "who works at google?"
• "show my messages with Sarah"
• "who did I text in the last two weeks?"

The assistant never sees your contacts; it only suggests commands.
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]Help[/cyan]", border_style="cyan"))


async def _run(config: AiConfig) -> None:
    session = create_session(config)
    try:
        await ChatCLI(session).start()
    finally:
        close = getattr(session.provider, "aclose", None)
        if close:
            await close()


def main() -> None:
    """Main entry point for the chat CLI."""
    setup_logging(LogConfig(level="WARNING"))
    console = Console()

    try:
        config = AiConfig.from_env()
        asyncio.run(_run(config))
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
