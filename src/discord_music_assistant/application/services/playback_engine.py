"""Playback Engine - per-guild music queues over a voice transport."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from ...domain.music.value_objects import PlaybackState
from ...domain.shared.constants import UIConstants
from ...domain.shared.exceptions import VoiceConnectionError
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from ..commands.results import CommandResult
from ..interfaces.voice_transport import (
    AudioPlayerStatus,
    AudioResource,
    VoiceConnection,
    VoiceConnectionStatus,
)
from . import playback_content
from .playback_session import PlaybackSession

if TYPE_CHECKING:
    from ...domain.music.entities import Song
    from ...domain.shared.content import MessageContent
    from ..commands.enqueue import EnqueueRequest, VoiceChannelSnapshot
    from ..interfaces.voice_transport import VoiceTransport
    from .audio_pipeline import AudioPipeline
    from .song_resolver import SongResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectPolicy:
    """Timing of voice-connection acquisition and recovery."""

    attempts: int = 3
    ready_timeout: float = 15.0
    rejoin_timeout: float = 5.0
    connecting_timeout: float = 5.0
    backoff_base: float = 1.0
    backoff_cap: float = 5.0
    reconnect_window: float = 10.0

    def backoff(self, attempt: int) -> float:
        return min(self.backoff_base * (2 ** (attempt - 1)), self.backoff_cap)


class PlaybackEngine:
    """Owns one :class:`PlaybackSession` per guild and drives its playback loop.

    Every user operation returns a :class:`CommandResult`; failures that
    concern the user are reported in the result rather than raised.
    """

    def __init__(
        self,
        *,
        transport: VoiceTransport,
        resolver: SongResolver,
        pipeline: AudioPipeline,
        connect_policy: ConnectPolicy | None = None,
        empty_channel_timeout: float = 60.0,
        default_volume: float = 1.0,
        queue_preview_size: int = UIConstants.QUEUE_PREVIEW_SIZE,
    ) -> None:
        self._transport = transport
        self._resolver = resolver
        self._pipeline = pipeline
        self._policy = connect_policy or ConnectPolicy()
        self._empty_channel_timeout = empty_channel_timeout
        self._default_volume = default_volume
        self._queue_preview_size = queue_preview_size

        self._sessions: dict[int, PlaybackSession] = {}

    # ── Queries ────────────────────────────────────────────────────────

    def get_session(self, guild_id: int) -> PlaybackSession | None:
        return self._sessions.get(guild_id)

    def is_playing(self, guild_id: int) -> bool:
        session = self._sessions.get(guild_id)
        return session is not None and session.playing

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    # ── Commands ───────────────────────────────────────────────────────

    async def enqueue(self, request: EnqueueRequest) -> CommandResult:
        channel = request.voice_channel
        rejection = self._check_voice_channel(channel)
        if rejection is not None:
            return rejection
        assert channel is not None

        try:
            song = await self._resolver.resolve(request.query, request.requested_by)
            if song is None:
                return CommandResult.fail(DiscordUIMessages.ERROR_SONG_NOT_FOUND)

            # No lock: two concurrent first enqueues can both create a session.
            session = self._sessions.get(request.guild_id)
            if session is None:
                try:
                    session = await self._create_session(request, channel)
                except VoiceConnectionError as exc:
                    logger.warning(LogTemplates.VOICE_CONNECT_GAVE_UP, request.guild_id, exc)
                    return CommandResult.fail(DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE)

            session.songs.append(song)
            position = session.queue_length
            logger.info(LogTemplates.SONG_ENQUEUED, song.title, request.guild_id, position)

            if not session.playing:
                await self._play_next(session)

            return CommandResult.ok(playback_content.added_to_queue(song, position))
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_SONG_FAILED, request.query, request.guild_id)
            return CommandResult.fail(DiscordUIMessages.ERROR_PLAY_FAILED)

    def skip(self, guild_id: int) -> CommandResult:
        session = self._sessions.get(guild_id)
        if (
            session is None
            or not session.songs
            or not session.player.status.is_rendering
        ):
            if session is not None:
                session.playing = False
            return CommandResult.fail(DiscordUIMessages.STATE_NOTHING_PLAYING)

        logger.info(LogTemplates.SONG_SKIPPED, session.songs[0].title, guild_id)
        try:
            session.player.stop()
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_PLAYER_ERROR, guild_id, "stop failed")
            return CommandResult.fail(DiscordUIMessages.STATE_NOTHING_PLAYING)
        return CommandResult.ok(DiscordUIMessages.SUCCESS_SKIPPED)

    async def stop(self, guild_id: int) -> CommandResult:
        session = self._sessions.get(guild_id)
        if session is None:
            return CommandResult.fail(DiscordUIMessages.STATE_NOTHING_PLAYING)

        await self._teardown(session, reason="stopped")
        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        return CommandResult.ok(DiscordUIMessages.SUCCESS_STOPPED)

    def pause(self, guild_id: int) -> CommandResult:
        session = self._sessions.get(guild_id)
        if session is None or not session.playing:
            return CommandResult.fail(DiscordUIMessages.STATE_NOTHING_PLAYING)

        session.player.pause()
        if session.state == PlaybackState.PLAYING:
            session.transition_to(PlaybackState.PAUSED)
        logger.info(LogTemplates.PLAYBACK_PAUSED, guild_id)
        return CommandResult.ok(DiscordUIMessages.SUCCESS_PAUSED)

    def resume(self, guild_id: int) -> CommandResult:
        session = self._sessions.get(guild_id)
        if session is None or not session.playing:
            return CommandResult.fail(DiscordUIMessages.STATE_NOTHING_PLAYING)

        session.player.unpause()
        if session.state == PlaybackState.PAUSED:
            session.transition_to(PlaybackState.PLAYING)
        logger.info(LogTemplates.PLAYBACK_RESUMED, guild_id)
        return CommandResult.ok(DiscordUIMessages.SUCCESS_RESUMED)

    def set_volume(self, guild_id: int, level: int) -> CommandResult:
        session = self._sessions.get(guild_id)
        if session is None:
            return CommandResult.fail(DiscordUIMessages.STATE_NOTHING_PLAYING)
        if not 0 <= level <= 100:
            return CommandResult.fail(DiscordUIMessages.ERROR_INVALID_VOLUME)

        # Takes effect when the next song's audio resource is created.
        session.volume = level / 100
        logger.info(LogTemplates.VOLUME_SET, guild_id, level)
        return CommandResult.ok(DiscordUIMessages.SUCCESS_VOLUME_SET.format(volume=level))

    def toggle_loop(self, guild_id: int) -> CommandResult:
        session = self._sessions.get(guild_id)
        if session is None:
            return CommandResult.fail(DiscordUIMessages.STATE_NOTHING_PLAYING)

        session.loop = not session.loop
        logger.info(LogTemplates.LOOP_TOGGLED, "enabled" if session.loop else "disabled", guild_id)
        if session.loop:
            return CommandResult.ok(DiscordUIMessages.SUCCESS_LOOP_ENABLED)
        return CommandResult.ok(DiscordUIMessages.SUCCESS_LOOP_DISABLED)

    def queue(self, guild_id: int) -> CommandResult:
        session = self._sessions.get(guild_id)
        if session is None or not session.songs:
            return CommandResult.fail(DiscordUIMessages.STATE_QUEUE_EMPTY)
        return CommandResult.ok(
            playback_content.queue_listing(session.songs, self._queue_preview_size)
        )

    async def shutdown(self) -> None:
        for session in list(self._sessions.values()):
            await self._teardown(session, reason="shutdown")

    # ── Voice channel occupancy ────────────────────────────────────────

    def handle_member_left(self, guild_id: int, channel_id: int) -> None:
        """A human left ``channel_id``; schedule a departure if the bot is now alone."""
        session = self._sessions.get(guild_id)
        if session is None or session.connection.channel_id != channel_id:
            return
        if session.connection.count_listeners() > 0:
            return

        session.cancel_pending_disconnect()
        session.pending_disconnect = asyncio.create_task(self._disconnect_if_empty(session))
        logger.info(LogTemplates.EMPTY_CHANNEL_SCHEDULED, guild_id, self._empty_channel_timeout)

    def handle_member_joined(self, guild_id: int, channel_id: int) -> None:
        session = self._sessions.get(guild_id)
        if session is None or session.connection.channel_id != channel_id:
            return
        if session.cancel_pending_disconnect():
            logger.info(LogTemplates.EMPTY_CHANNEL_CANCELLED, guild_id)

    async def _disconnect_if_empty(self, session: PlaybackSession) -> None:
        await asyncio.sleep(self._empty_channel_timeout)

        if session.pending_disconnect is asyncio.current_task():
            session.pending_disconnect = None
        if self._sessions.get(session.guild_id) is not session:
            return
        if session.connection.count_listeners() > 0:
            logger.debug(LogTemplates.EMPTY_CHANNEL_OCCUPIED, session.guild_id)
            return

        logger.info(LogTemplates.EMPTY_CHANNEL_LEAVING, session.guild_id)
        await self._notify(session, playback_content.left_empty_channel())
        await self._teardown(session, reason="empty channel")

    # ── Session lifecycle ──────────────────────────────────────────────

    def _check_voice_channel(self, channel: VoiceChannelSnapshot | None) -> CommandResult | None:
        if channel is None:
            return CommandResult.fail(DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
        if not channel.member_can_connect:
            return CommandResult.fail(DiscordUIMessages.ERROR_MEMBER_CANNOT_CONNECT)
        if not channel.bot_can_connect:
            return CommandResult.fail(DiscordUIMessages.ERROR_BOT_CANNOT_CONNECT)
        if not channel.bot_can_speak:
            return CommandResult.fail(DiscordUIMessages.ERROR_BOT_CANNOT_SPEAK)
        if channel.is_full:
            return CommandResult.fail(DiscordUIMessages.ERROR_CHANNEL_FULL)
        return None

    async def _create_session(
        self, request: EnqueueRequest, channel: VoiceChannelSnapshot
    ) -> PlaybackSession:
        guild_id = request.guild_id
        connection = self._transport.get_connection(guild_id)

        if (
            connection is not None
            and connection.channel_id == channel.id
            and connection.status != VoiceConnectionStatus.DESTROYED
        ):
            logger.info(LogTemplates.SESSION_REUSED_CONNECTION, guild_id)
        else:
            if connection is not None:
                await self._destroy_connection(connection)
            connection = await self._connect(guild_id, channel.id)

        session = PlaybackSession(
            guild_id=guild_id,
            connection=connection,
            player=self._transport.create_player(guild_id),
            text_channel=request.notice_channel,
            volume=self._default_volume,
        )
        session.status_subscription = connection.on_status_change(
            partial(self._on_connection_status, session)
        )
        self._sessions[guild_id] = session
        logger.info(LogTemplates.SESSION_CREATED, guild_id, channel.id)
        return session

    async def _connect(self, guild_id: int, channel_id: int) -> VoiceConnection:
        policy = self._policy
        last_error: Exception | None = None

        for attempt in range(1, policy.attempts + 1):
            logger.info(LogTemplates.VOICE_CONNECT_ATTEMPT, attempt, policy.attempts, guild_id)
            connection: VoiceConnection | None = None
            try:
                connection = await self._transport.join(
                    guild_id, channel_id, self_deaf=True, self_mute=False
                )
                async with asyncio.timeout(policy.ready_timeout):
                    try:
                        await connection.wait_for(
                            VoiceConnectionStatus.CONNECTING,
                            VoiceConnectionStatus.READY,
                            timeout=policy.connecting_timeout,
                        )
                    except TimeoutError:
                        logger.info(LogTemplates.VOICE_STILL_SIGNALLING, guild_id)
                    await connection.wait_for(VoiceConnectionStatus.READY)

                logger.info(LogTemplates.VOICE_CONNECTED, guild_id)
                return connection
            except Exception as exc:
                last_error = exc
                logger.warning(
                    LogTemplates.VOICE_CONNECT_FAILED_ATTEMPT,
                    attempt,
                    policy.attempts,
                    guild_id,
                    str(exc) or type(exc).__name__,
                )
                if connection is not None:
                    await self._destroy_connection(connection)

            if attempt < policy.attempts:
                delay = policy.backoff(attempt)
                logger.info(LogTemplates.VOICE_CONNECT_BACKOFF, guild_id, delay)
                await asyncio.sleep(delay)

        raise VoiceConnectionError(
            guild_id, ErrorMessages.VOICE_CONNECT_EXHAUSTED.format(attempts=policy.attempts)
        ) from last_error

    def _on_connection_status(
        self,
        session: PlaybackSession,
        old: VoiceConnectionStatus,
        new: VoiceConnectionStatus,
    ) -> None:
        logger.debug(LogTemplates.VOICE_STATUS_CHANGED, session.guild_id, old.value, new.value)
        if new != VoiceConnectionStatus.DISCONNECTED:
            return
        if self._sessions.get(session.guild_id) is not session:
            return

        logger.warning(
            LogTemplates.VOICE_DISCONNECTED, session.guild_id, self._policy.reconnect_window
        )
        session.spawn(self._await_reconnect(session))

    async def _await_reconnect(self, session: PlaybackSession) -> None:
        try:
            await session.connection.wait_for(
                VoiceConnectionStatus.SIGNALLING,
                VoiceConnectionStatus.CONNECTING,
                VoiceConnectionStatus.READY,
                timeout=self._policy.reconnect_window,
            )
            logger.info(LogTemplates.VOICE_RECONNECTING, session.guild_id)
            return
        except (TimeoutError, VoiceConnectionError):
            pass

        # A manual stop during the window already removed the session.
        if self._sessions.get(session.guild_id) is not session:
            return

        logger.warning(LogTemplates.VOICE_RECONNECT_FAILED, session.guild_id)
        await self._teardown(session, reason="connection lost")
        await self._notify(session, DiscordUIMessages.NOTICE_CONNECTION_LOST)

    async def _teardown(self, session: PlaybackSession, *, reason: str) -> None:
        """Destroy ``session`` and everything it owns. Safe to call twice."""
        if self._sessions.get(session.guild_id) is session:
            del self._sessions[session.guild_id]

        if session.is_destroyed:
            logger.debug(LogTemplates.SESSION_ALREADY_GONE, session.guild_id)
            return

        session.songs.clear()
        session.playing = False
        session.cancel_pending_disconnect()
        # Listeners go first so the destroy below cannot trigger reconnection or playback.
        session.dispose_subscriptions()
        session.transition_to(PlaybackState.DESTROYED)

        try:
            session.player.stop()
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_PLAYER_ERROR, session.guild_id, "stop failed")
        await self._destroy_connection(session.connection)

        logger.info(LogTemplates.SESSION_DESTROYED, session.guild_id, reason)

    async def _destroy_connection(self, connection: VoiceConnection) -> None:
        try:
            await connection.destroy()
        except Exception as exc:
            logger.warning(LogTemplates.VOICE_DESTROY_FAILED, connection.guild_id, exc)

    # ── Playback loop ──────────────────────────────────────────────────

    async def _play_next(self, session: PlaybackSession) -> None:
        """Start the head song, dropping heads that fail until one plays or the queue empties."""
        while not session.is_destroyed:
            song = session.current_song
            if song is None:
                session.playing = False
                if session.state != PlaybackState.IDLE:
                    session.transition_to(PlaybackState.IDLE)
                logger.info(LogTemplates.QUEUE_FINISHED, session.guild_id)
                return

            session.playing = True
            session.transition_to(PlaybackState.LOADING)
            logger.info(LogTemplates.PLAYBACK_LOADING, song.title, session.guild_id)

            try:
                await self._start_song(session, song)
                return
            except Exception:
                if session.is_destroyed:
                    return
                logger.exception(LogTemplates.PLAYBACK_SONG_FAILED, song.title, session.guild_id)
                await self._notify(session, playback_content.play_failed(song))
                if session.songs and session.songs[0] is song:
                    session.songs.pop(0)

    async def _start_song(self, session: PlaybackSession, song: Song) -> None:
        path = await self._pipeline.acquire(song)
        if session.is_destroyed:
            return

        await self._ensure_ready(session)
        if session.is_destroyed:
            return

        if session.subscription is not None:
            session.subscription.dispose()
        session.subscription = session.player.subscribe(
            partial(self._on_player_state, session),
            partial(self._on_player_error, session),
        )
        session.playback_error = None

        session.connection.subscribe(session.player)
        session.player.play(AudioResource(path=path, volume=session.volume, title=song.title))
        session.transition_to(PlaybackState.PLAYING)
        logger.info(LogTemplates.PLAYBACK_STARTED, song.title, session.guild_id)

        await self._notify(session, playback_content.now_playing(song))

    async def _ensure_ready(self, session: PlaybackSession) -> None:
        connection = session.connection
        if connection.is_ready:
            return

        logger.info(LogTemplates.VOICE_REJOINING, session.guild_id)
        await connection.rejoin()
        await connection.wait_for(VoiceConnectionStatus.READY, timeout=self._policy.rejoin_timeout)

    def _on_player_error(self, session: PlaybackSession, error: Exception) -> None:
        logger.error(LogTemplates.PLAYBACK_PLAYER_ERROR, session.guild_id, error)
        session.playback_error = error

    def _on_player_state(
        self,
        session: PlaybackSession,
        old: AudioPlayerStatus,
        new: AudioPlayerStatus,
    ) -> None:
        if new != AudioPlayerStatus.IDLE or old == AudioPlayerStatus.IDLE:
            return
        if session.is_destroyed or self._sessions.get(session.guild_id) is not session:
            logger.debug(LogTemplates.PLAYBACK_STALE_EVENT, session.guild_id)
            return
        session.spawn(self._handle_song_end(session))

    async def _handle_song_end(self, session: PlaybackSession) -> None:
        if session.is_destroyed:
            return

        song = session.current_song
        error, session.playback_error = session.playback_error, None

        if song is not None:
            logger.info(LogTemplates.PLAYBACK_SONG_ENDED, song.title, session.guild_id, session.loop)
            if error is not None:
                await self._notify(session, playback_content.play_failed(song))
            # A song that failed mid-stream is dropped even in loop mode.
            if error is not None or not session.loop:
                session.songs.pop(0)

        await self._play_next(session)

    async def _notify(self, session: PlaybackSession, content: str | MessageContent) -> None:
        if session.text_channel is None:
            return
        try:
            await session.text_channel.send(content)
        except Exception as exc:
            logger.warning(LogTemplates.NOTICE_SEND_FAILED, session.guild_id, exc)
