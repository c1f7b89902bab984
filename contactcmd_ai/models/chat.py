"""Chat outcome and post-session feedback models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator

from contactcmd_ai.models.messages import ChatMessage


class AiChatResult(BaseModel):
    """Externally observable outcome of one chat() call."""

    model_config = ConfigDict(frozen=True)

    text: str
    commands: tuple[str, ...] = ()
    transcript: tuple[ChatMessage, ...] = ()
    iterations: int = 0
    session_id: str | None = None

    @property
    def command(self) -> str | None:
        """Most recently suggested command, if any."""
        return self.commands[-1] if self.commands else None


class FeedbackAction(StrEnum):
    """What the user decided to do with a suggested command."""

    ACCEPT = "accept"
    REJECT = "reject"
    EDIT = "edit"


class CommandFeedback(BaseModel):
    """User decision about one suggestion, consumed by the CLI only."""

    model_config = ConfigDict(frozen=True)

    command: str
    action: FeedbackAction
    edited_command: str | None = None

    @model_validator(mode="after")
    def check_edit_text(self) -> "CommandFeedback":
        if self.action == FeedbackAction.EDIT and not (self.edited_command or "").strip():
            raise ValueError("Edit feedback requires the edited command text")
        return self

    def final_command(self) -> str | None:
        """Command the CLI should run, or None when rejected."""
        match self.action:
            case FeedbackAction.ACCEPT:
                return self.command
            case FeedbackAction.EDIT:
                return (self.edited_command or "").strip()
            case _:
                return None
