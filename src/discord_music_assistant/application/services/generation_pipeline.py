"""Generation Pipeline - serialized, cached access to the generation backend.

Requests are queued FIFO and executed by a single worker, so exactly one
backend stream is open at a time. The worker owns each stream and pumps
its fragments into a per-request :class:`FragmentChannel`; the caller only
ever reads from that channel, so a slow or abandoned reader cannot cut a
request short or let the next one start early.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
from collections import deque
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.generation_backend import GenerationBackend
    from .response_cache import ResponseCache

logger = logging.getLogger(__name__)

# Split after whitespace so each piece is a word with its trailing whitespace.
_WORD_PIECES = re.compile(r"(?<=\s)(?=\S)")


@dataclass(frozen=True)
class _EndOfStream:
    error: BaseException | None = None


class FragmentChannel:
    """Single-consumer async sequence of text fragments."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | _EndOfStream] = asyncio.Queue()

    def put(self, fragment: str) -> None:
        self._queue.put_nowait(fragment)

    def close(self, error: BaseException | None = None) -> None:
        self._queue.put_nowait(_EndOfStream(error))

    def __aiter__(self) -> FragmentChannel:
        return self

    async def __anext__(self) -> str:
        item = await self._queue.get()
        if isinstance(item, _EndOfStream):
            # Stay closed for any further reads.
            self._queue.put_nowait(item)
            if item.error is not None:
                raise item.error
            raise StopAsyncIteration
        return item


@dataclass
class QueuedGenerationRequest:
    prompt: str
    future: asyncio.Future[FragmentChannel] = field(
        default_factory=lambda: asyncio.get_running_loop().create_future()
    )


def _resolve(future: asyncio.Future[FragmentChannel], channel: FragmentChannel) -> None:
    if not future.done():
        future.set_result(channel)


def _reject(future: asyncio.Future[FragmentChannel], error: BaseException) -> None:
    if not future.done():
        future.set_exception(error)


class GenerationPipeline:
    """Single-worker FIFO request queue in front of a :class:`GenerationBackend`."""

    def __init__(
        self,
        *,
        backend: GenerationBackend,
        cache: ResponseCache,
        success_delay: float = 2.0,
        failure_delay: float = 5.0,
        replay_delay: float = 0.05,
    ) -> None:
        self._backend = backend
        self._cache = cache
        self._success_delay = success_delay
        self._failure_delay = failure_delay
        self._replay_delay = replay_delay

        self._pending: deque[QueuedGenerationRequest] = deque()
        self._processing = False
        self._worker: asyncio.Task[None] | None = None

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def is_processing(self) -> bool:
        return self._processing

    async def ask_stream(self, prompt: str) -> AsyncIterator[str]:
        """Yield the answer to ``prompt`` fragment by fragment.

        Cached answers are replayed word by word; everything else waits its
        turn in the request queue.

        Raises:
            GenerationBackendError: If the backend request fails.
        """
        cached = self._cache.get(self._backend.model, prompt)
        if cached is not None:
            for piece in _WORD_PIECES.split(cached):
                if piece:
                    yield piece
                    await asyncio.sleep(self._replay_delay)
            return

        channel = await self._submit(prompt)
        async for fragment in channel:
            yield fragment

    async def ask(self, prompt: str) -> str:
        return "".join([fragment async for fragment in self.ask_stream(prompt)])

    async def wait_idle(self) -> None:
        """Wait for the worker to drain the queue."""
        if self._worker is not None:
            await asyncio.shield(self._worker)

    async def _submit(self, prompt: str) -> FragmentChannel:
        request = QueuedGenerationRequest(prompt=prompt)
        self._pending.append(request)
        logger.debug(LogTemplates.GENERATION_QUEUED, len(self._pending))

        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._drain())
        return await request.future

    async def _drain(self) -> None:
        if self._processing:
            return

        self._processing = True
        try:
            while self._pending:
                request = self._pending.popleft()
                logger.debug(LogTemplates.GENERATION_PROCESSING, len(self._pending))
                succeeded = await self._execute(request)

                if self._pending:
                    delay = self._success_delay if succeeded else self._failure_delay
                    logger.debug(LogTemplates.GENERATION_DELAY, delay)
                    await asyncio.sleep(delay)
        finally:
            self._processing = False
        logger.debug(LogTemplates.GENERATION_QUEUE_DRAINED)

    async def _execute(self, request: QueuedGenerationRequest) -> bool:
        """Run one request to completion. Returns True when it succeeded."""
        channel = FragmentChannel()
        parts: list[str] = []
        model = self._backend.model

        async with contextlib.aclosing(self._backend.open_stream(request.prompt)) as stream:
            try:
                first = await anext(stream)
            except StopAsyncIteration:
                channel.close()
                _resolve(request.future, channel)
                return True
            except Exception as exc:
                logger.warning(LogTemplates.GENERATION_FAILED, exc_info=True)
                _reject(request.future, exc)
                return False

            parts.append(first)
            channel.put(first)
            _resolve(request.future, channel)

            try:
                async for fragment in stream:
                    parts.append(fragment)
                    channel.put(fragment)
            except Exception as exc:
                logger.warning(LogTemplates.GENERATION_FAILED, exc_info=True)
                channel.close(exc)
                return False

        text = "".join(parts)
        if text.strip():
            self._cache.put(model, request.prompt, text)
        channel.close()
        return True
