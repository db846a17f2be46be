"""Uniform result type returned by every playback operation."""

from __future__ import annotations

from dataclasses import dataclass

from discord_music_assistant.domain.shared.content import MessageContent


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a user command.

    ``message`` is either plain text or structured content the front-end
    renders as an embed.
    """

    success: bool
    message: str | MessageContent

    @classmethod
    def ok(cls, message: str | MessageContent) -> CommandResult:
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, message: str | MessageContent) -> CommandResult:
        return cls(success=False, message=message)

    @property
    def text(self) -> str:
        if isinstance(self.message, MessageContent):
            return self.message.to_text()
        return self.message
