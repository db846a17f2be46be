"""Per-guild playback session owned by the playback engine."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Any

from ...domain.music.entities import Song
from ...domain.music.value_objects import PlaybackState
from ...domain.shared.exceptions import InvalidOperationError
from ..interfaces.notice_channel import NoticeChannel
from ..interfaces.voice_transport import AudioPlayer, Subscription, VoiceConnection


@dataclass(eq=False)
class PlaybackSession:
    """Queue, voice handles and timers for one guild.

    ``songs[0]`` is the song being played. The connection and player belong
    to the session and are destroyed with it.
    """

    guild_id: int
    connection: VoiceConnection
    player: AudioPlayer
    text_channel: NoticeChannel | None = None
    songs: list[Song] = field(default_factory=list)
    volume: float = 1.0
    playing: bool = False
    loop: bool = False
    state: PlaybackState = PlaybackState.IDLE

    # Listener token of the current playback start.
    subscription: Subscription | None = None
    status_subscription: Subscription | None = None
    pending_disconnect: asyncio.Task[None] | None = None
    playback_error: Exception | None = None

    _tasks: set[asyncio.Task[Any]] = field(default_factory=set, repr=False)

    @property
    def current_song(self) -> Song | None:
        return self.songs[0] if self.songs else None

    @property
    def queue_length(self) -> int:
        return len(self.songs)

    @property
    def is_destroyed(self) -> bool:
        return self.state.is_terminal

    def transition_to(self, target: PlaybackState) -> None:
        if not self.state.can_transition_to(target):
            raise InvalidOperationError(f"transition to {target.value}", self.state.value)
        self.state = target

    def spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        """Run ``coro`` as a task kept alive by the session until it finishes."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def cancel_pending_disconnect(self) -> bool:
        task, self.pending_disconnect = self.pending_disconnect, None
        if task is None or task.done():
            return False
        if task is not asyncio.current_task():
            task.cancel()
        return True

    def dispose_subscriptions(self) -> None:
        if self.subscription is not None:
            self.subscription.dispose()
            self.subscription = None
        if self.status_subscription is not None:
            self.status_subscription.dispose()
            self.status_subscription = None
