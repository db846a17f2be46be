"""Message-size chunking for streamed answers.

Chat platforms cap the length of a single message. When accumulated text
would exceed the cap, the current message is finalized at the best break
point and the remainder continues in a new message. Break points are tried
in order:

1. just after the latest sentence-ending mark (``.``, ``?``, ``!``) within the limit;
2. the latest space within the limit;
3. a hard cut at the limit.

A candidate that would leave the finalized segment shorter than
``min_ratio * limit`` is rejected, so segments are never pathologically short.
"""

from __future__ import annotations

from collections.abc import Sequence

from discord_music_assistant.domain.shared.constants import ChatLimits


def find_break_point(
    text: str,
    limit: int = ChatLimits.MESSAGE_LIMIT,
    min_ratio: float = ChatLimits.MIN_BREAK_RATIO,
    sentence_endings: Sequence[str] = ChatLimits.SENTENCE_ENDINGS,
) -> int:
    """Return the index at which ``text`` should be cut (exclusive end of the first part)."""
    if len(text) <= limit:
        return len(text)

    minimum = limit * min_ratio

    window = text[:limit]
    sentence_end = max(window.rfind(mark) for mark in sentence_endings)
    if sentence_end != -1 and sentence_end + 1 >= minimum:
        return sentence_end + 1

    space = text.rfind(" ", 0, limit + 1)
    if space != -1 and space >= minimum:
        return space

    return limit


def split_message(
    text: str,
    limit: int = ChatLimits.MESSAGE_LIMIT,
    min_ratio: float = ChatLimits.MIN_BREAK_RATIO,
) -> list[str]:
    """Split ``text`` into stripped segments that each fit within ``limit``."""
    chunks: list[str] = []
    remaining = text.strip()

    while len(remaining) > limit:
        cut = find_break_point(remaining, limit, min_ratio)
        head = remaining[:cut].strip()
        remaining = remaining[cut:].strip()
        if head:
            chunks.append(head)

    if remaining:
        chunks.append(remaining)
    return chunks
