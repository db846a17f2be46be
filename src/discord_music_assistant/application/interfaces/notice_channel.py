"""Port interface for the text channel that receives playback notices."""

from __future__ import annotations

from abc import ABC, abstractmethod

from discord_music_assistant.domain.shared.content import MessageContent


class NoticeChannel(ABC):
    """Destination for now-playing, error and departure notices."""

    @abstractmethod
    async def send(self, content: str | MessageContent) -> None:
        ...
