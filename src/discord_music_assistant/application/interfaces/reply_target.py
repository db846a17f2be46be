"""Port interface for the chat message an answer is streamed into."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ReplyTarget(ABC):
    """A reply that can be edited in place and continued in new messages.

    Both methods raise ``RateLimitedError`` when the platform throttles the
    call; the streaming reply retries those.
    """

    @abstractmethod
    async def edit(self, content: str) -> None:
        """Replace the text of the current message."""
        ...

    @abstractmethod
    async def follow_up(self, content: str) -> None:
        """Post a new message; later edits apply to it."""
        ...
