"""Port interfaces for the real-time voice transport.

A :class:`VoiceTransport` joins voice channels and hands out
:class:`VoiceConnection` handles and :class:`AudioPlayer` instances. Both
report status changes to subscribers; each subscription returns a
:class:`Subscription` token that is disposed to detach exactly the listeners
it registered.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Generic, TypeVar

from discord_music_assistant.domain.shared.exceptions import VoiceConnectionError
from discord_music_assistant.domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

ListenerT = TypeVar("ListenerT", bound=Callable[..., object])


class VoiceConnectionStatus(Enum):
    SIGNALLING = "signalling"
    CONNECTING = "connecting"
    READY = "ready"
    DISCONNECTED = "disconnected"
    DESTROYED = "destroyed"


class AudioPlayerStatus(Enum):
    IDLE = "idle"
    BUFFERING = "buffering"
    PLAYING = "playing"
    PAUSED = "paused"
    AUTO_PAUSED = "autopaused"

    @property
    def is_rendering(self) -> bool:
        return self in {AudioPlayerStatus.PLAYING, AudioPlayerStatus.BUFFERING}


@dataclass(frozen=True)
class AudioResource:
    """A local audio file ready to be streamed, with its playback volume."""

    path: Path
    volume: float
    title: str


class Subscription:
    """Token for a group of listeners; ``dispose`` detaches them exactly once."""

    def __init__(self, dispose: Callable[[], None]) -> None:
        self._dispose: Callable[[], None] | None = dispose

    @property
    def active(self) -> bool:
        return self._dispose is not None

    def dispose(self) -> None:
        if self._dispose is not None:
            dispose, self._dispose = self._dispose, None
            dispose()


class ListenerSet(Generic[ListenerT]):
    """Ordered set of callbacks keyed by subscription."""

    def __init__(self) -> None:
        self._listeners: dict[int, ListenerT] = {}
        self._next_key = 0

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, listener: ListenerT) -> Subscription:
        key = self._next_key
        self._next_key += 1
        self._listeners[key] = listener
        return Subscription(lambda: self._listeners.pop(key, None))

    def emit(self, *args: object) -> None:
        for listener in list(self._listeners.values()):
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener %r failed", listener)


StatusListener = Callable[[VoiceConnectionStatus, VoiceConnectionStatus], None]
PlayerStateListener = Callable[[AudioPlayerStatus, AudioPlayerStatus], None]
PlayerErrorListener = Callable[[Exception], None]


class VoiceConnection(ABC):
    """Handle to one guild's voice connection."""

    def __init__(
        self,
        guild_id: int,
        channel_id: int,
        status: VoiceConnectionStatus = VoiceConnectionStatus.SIGNALLING,
    ) -> None:
        self.guild_id = guild_id
        self.channel_id = channel_id
        self._status = status
        self._changed = asyncio.Event()
        self._status_listeners: ListenerSet[StatusListener] = ListenerSet()

    @property
    def status(self) -> VoiceConnectionStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status == VoiceConnectionStatus.READY

    def on_status_change(self, listener: StatusListener) -> Subscription:
        return self._status_listeners.add(listener)

    def _set_status(self, status: VoiceConnectionStatus) -> None:
        if status == self._status or self._status == VoiceConnectionStatus.DESTROYED:
            return

        old, self._status = self._status, status
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()
        logger.debug("Voice connection for guild %s: %s -> %s", self.guild_id, old.value, status.value)
        self._status_listeners.emit(old, status)

    async def wait_for(
        self, *statuses: VoiceConnectionStatus, timeout: float | None = None
    ) -> VoiceConnectionStatus:
        """Wait until the connection reaches one of ``statuses``.

        Raises:
            TimeoutError: If none is reached within ``timeout`` seconds.
            VoiceConnectionError: If the connection is destroyed while waiting.
        """
        async with asyncio.timeout(timeout):
            while self._status not in statuses:
                if self._status == VoiceConnectionStatus.DESTROYED:
                    raise VoiceConnectionError(
                        self.guild_id, ErrorMessages.VOICE_CONNECTION_DESTROYED
                    )
                await self._changed.wait()
        return self._status

    @abstractmethod
    def subscribe(self, player: AudioPlayer) -> None:
        """Route the player's audio into this connection."""
        ...

    @abstractmethod
    async def rejoin(self) -> None:
        """Re-establish a dropped connection to the same channel."""
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Leave the channel and release the connection for good."""
        ...

    @abstractmethod
    def count_listeners(self) -> int:
        """Number of non-bot members currently in the connected channel."""
        ...


class AudioPlayer(ABC):
    """Renders one audio resource at a time into a subscribed connection.

    Every error reported to error listeners is followed by a transition to
    ``IDLE``, so state listeners alone decide when a song has ended.
    """

    def __init__(self) -> None:
        self._status = AudioPlayerStatus.IDLE
        self._state_listeners: ListenerSet[PlayerStateListener] = ListenerSet()
        self._error_listeners: ListenerSet[PlayerErrorListener] = ListenerSet()

    @property
    def status(self) -> AudioPlayerStatus:
        return self._status

    def subscribe(
        self, on_state_change: PlayerStateListener, on_error: PlayerErrorListener
    ) -> Subscription:
        state_sub = self._state_listeners.add(on_state_change)
        error_sub = self._error_listeners.add(on_error)

        def dispose() -> None:
            state_sub.dispose()
            error_sub.dispose()

        return Subscription(dispose)

    @property
    def listener_count(self) -> int:
        return len(self._state_listeners) + len(self._error_listeners)

    def _set_status(self, status: AudioPlayerStatus) -> None:
        if status == self._status:
            return
        old, self._status = self._status, status
        self._state_listeners.emit(old, status)

    def _emit_error(self, error: Exception) -> None:
        self._error_listeners.emit(error)

    @abstractmethod
    def play(self, resource: AudioResource) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    @abstractmethod
    def pause(self) -> bool:
        ...

    @abstractmethod
    def unpause(self) -> bool:
        ...


class VoiceTransport(ABC):
    """Factory for voice connections and audio players."""

    @abstractmethod
    async def join(
        self,
        guild_id: int,
        channel_id: int,
        *,
        self_deaf: bool = True,
        self_mute: bool = False,
    ) -> VoiceConnection:
        """Start joining a channel; the returned handle reports its own progress."""
        ...

    @abstractmethod
    def get_connection(self, guild_id: int) -> VoiceConnection | None:
        ...

    @abstractmethod
    def create_player(self, guild_id: int) -> AudioPlayer:
        ...
