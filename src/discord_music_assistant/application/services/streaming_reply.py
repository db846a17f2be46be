"""Incremental rendering of a streamed answer into size-limited chat messages."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from ...domain.generation.chunking import find_break_point
from ...domain.shared.constants import ChatLimits
from ...domain.shared.exceptions import RateLimitedError
from ...domain.shared.messages import DiscordUIMessages, LogTemplates

if TYPE_CHECKING:
    from collections.abc import AsyncIterable

    from ..interfaces.reply_target import ReplyTarget

logger = logging.getLogger(__name__)


class StreamingReply:
    """Feeds fragments into a :class:`ReplyTarget`.

    The current message is edited at most once per ``update_interval``. When
    its text would exceed ``limit`` it is finalized at the best break point
    and the remainder continues in a follow-up message.
    """

    def __init__(
        self,
        target: ReplyTarget,
        *,
        limit: int = ChatLimits.MESSAGE_LIMIT,
        update_interval: float = 0.1,
        min_break_ratio: float = ChatLimits.MIN_BREAK_RATIO,
        rate_limit_attempts: int = ChatLimits.RATE_LIMIT_ATTEMPTS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._target = target
        self._limit = limit
        self._update_interval = update_interval
        self._min_break_ratio = min_break_ratio
        self._rate_limit_attempts = rate_limit_attempts
        self._clock = clock
        self._sleep = sleep

        self._current = ""
        self._total_chars = 0
        self._message_count = 1
        self._last_update = clock()

    @property
    def message_count(self) -> int:
        return self._message_count

    async def run(self, fragments: AsyncIterable[str]) -> None:
        async for fragment in fragments:
            await self.feed(fragment)
        await self.finish()

    async def feed(self, fragment: str) -> None:
        self._current += fragment
        self._total_chars += len(fragment.strip())

        while len(self._current) > self._limit:
            await self._roll_over()

        if self._clock() - self._last_update < self._update_interval:
            return

        try:
            await self._call(self._target.edit, self._current or self._placeholder)
        except Exception as exc:
            logger.warning(LogTemplates.REPLY_UPDATE_FAILED, exc)
        self._last_update = self._clock()

    async def finish(self) -> None:
        text = self._current.strip()
        try:
            if self._total_chars == 0:
                await self._call(self._target.edit, DiscordUIMessages.ASK_NO_RESPONSE)
            elif not text:
                await self._call(self._target.edit, DiscordUIMessages.ASK_DONE_MARKER)
            else:
                await self._call(
                    self._target.edit, f"{text}\n\n{DiscordUIMessages.ASK_DONE_MARKER}"
                )
        except Exception:
            logger.exception(LogTemplates.REPLY_FINAL_UPDATE_FAILED)
            await self._call(self._target.follow_up, DiscordUIMessages.ASK_DONE_FALLBACK)

    @property
    def _placeholder(self) -> str:
        if self._message_count == 1:
            return DiscordUIMessages.ASK_THINKING
        return DiscordUIMessages.ASK_CONTINUING

    async def _roll_over(self) -> None:
        cut = find_break_point(self._current, self._limit, self._min_break_ratio)
        head = self._current[:cut].strip()
        # Leading whitespace only; a trailing space still separates the next fragment.
        self._current = self._current[cut:].lstrip()

        if head:
            await self._call(self._target.edit, head)
        # A remainder still over the limit is split by the next pass through feed().
        opening = self._current.strip()
        if not opening or len(opening) > self._limit:
            opening = DiscordUIMessages.ASK_CONTINUING
        await self._call(self._target.follow_up, opening)
        self._message_count += 1
        self._last_update = self._clock()

    async def _call(self, method: Callable[[str], Awaitable[None]], content: str) -> None:
        """Invoke a platform call, backing off while it is rate limited."""
        for attempt in range(1, self._rate_limit_attempts + 1):
            try:
                await method(content)
                return
            except RateLimitedError as exc:
                if attempt == self._rate_limit_attempts:
                    raise
                delay = exc.retry_after
                if delay is None:
                    delay = min(
                        ChatLimits.RATE_LIMIT_BASE_DELAY * (2 ** (attempt - 1)),
                        ChatLimits.RATE_LIMIT_MAX_DELAY,
                    )
                logger.warning(
                    LogTemplates.REPLY_RATE_LIMITED, attempt, self._rate_limit_attempts, delay
                )
                await self._sleep(delay)
