"""Structured message content returned by the engines to the chat front-end."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from discord_music_assistant.domain.shared.types import NonEmptyStr


class ContentField(BaseModel):
    """A named value shown alongside the main description."""

    model_config = ConfigDict(frozen=True, strict=True)

    name: NonEmptyStr
    value: NonEmptyStr
    inline: bool = True


class MessageContent(BaseModel):
    """Presentation-neutral rich message.

    The front-end decides how to render it (Discord embeds); ``to_text`` gives
    the plain string the content carries.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    title: NonEmptyStr
    description: str = ""
    fields: tuple[ContentField, ...] = Field(default_factory=tuple)
    footer: str | None = None
    thumbnail: str | None = None
    color: int | None = None

    def field_value(self, name: str) -> str | None:
        for item in self.fields:
            if item.name == name:
                return item.value
        return None

    def to_text(self) -> str:
        lines = [self.title]
        if self.description:
            lines.append(self.description)
        lines.extend(f"{item.name}: {item.value}" for item in self.fields)
        if self.footer:
            lines.append(self.footer)
        return "\n".join(lines)
