"""Discord voice transport implementing the VoiceTransport port with discord.py."""

from __future__ import annotations

import asyncio
import logging

import discord

from discord_music_assistant.application.interfaces.voice_transport import (
    AudioPlayer,
    AudioPlayerStatus,
    AudioResource,
    VoiceConnection,
    VoiceConnectionStatus,
    VoiceTransport,
)
from discord_music_assistant.domain.shared.exceptions import VoiceConnectionError
from discord_music_assistant.domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

VoiceChannelLike = discord.VoiceChannel | discord.StageChannel


class DiscordAudioPlayer(AudioPlayer):
    """Plays local files through the voice client of the subscribed connection.

    discord.py reports the end of a source from its audio thread; the
    ``after`` callback hops back onto the event loop before touching state.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__()
        self._loop = loop
        self._connection: DiscordVoiceConnection | None = None
        self._generation = 0

    def attach(self, connection: DiscordVoiceConnection) -> None:
        self._connection = connection

    def _voice_client(self) -> discord.VoiceClient:
        if self._connection is None:
            raise RuntimeError(ErrorMessages.PLAYER_NOT_SUBSCRIBED)
        vc = self._connection.voice_client
        if vc is None:
            raise RuntimeError(
                ErrorMessages.VOICE_CLIENT_MISSING.format(guild_id=self._connection.guild_id)
            )
        return vc

    def create_source(self, resource: AudioResource) -> discord.PCMVolumeTransformer:
        source = discord.FFmpegPCMAudio(str(resource.path), options="-vn")
        return discord.PCMVolumeTransformer(source, volume=resource.volume)

    # TODO(integ): Test playing a short clip on a live voice connection. Verify the
    # after-callback marshals onto the loop and the player returns to IDLE.
    def play(self, resource: AudioResource) -> None:
        vc = self._voice_client()
        if vc.is_playing() or vc.is_paused():
            # Retire the old source without reporting its end.
            self._generation += 1
            vc.stop()

        self._generation += 1
        generation = self._generation
        source = self.create_source(resource)

        def after_callback(error: Exception | None = None) -> None:
            self._loop.call_soon_threadsafe(self._on_source_finished, generation, error)

        self._set_status(AudioPlayerStatus.BUFFERING)
        vc.play(source, after=after_callback)
        self._set_status(AudioPlayerStatus.PLAYING)

    def _on_source_finished(self, generation: int, error: Exception | None) -> None:
        if generation != self._generation:
            return
        if error is not None:
            self._emit_error(error)
        self._set_status(AudioPlayerStatus.IDLE)

    def stop(self) -> None:
        if self._connection is None or self._connection.voice_client is None:
            self._set_status(AudioPlayerStatus.IDLE)
            return
        vc = self._connection.voice_client
        if vc.is_playing() or vc.is_paused():
            # The after-callback reports IDLE.
            vc.stop()
        else:
            self._set_status(AudioPlayerStatus.IDLE)

    def pause(self) -> bool:
        vc = self._connection.voice_client if self._connection else None
        if vc is None or not vc.is_playing():
            return False
        vc.pause()
        self._set_status(AudioPlayerStatus.PAUSED)
        return True

    def unpause(self) -> bool:
        vc = self._connection.voice_client if self._connection else None
        if vc is None or not vc.is_paused():
            return False
        vc.resume()
        self._set_status(AudioPlayerStatus.PLAYING)
        return True


class DiscordVoiceConnection(VoiceConnection):
    """Tracks one guild's ``discord.VoiceClient`` as a status-reporting connection."""

    def __init__(self, transport: DiscordVoiceTransport, guild_id: int, channel_id: int) -> None:
        super().__init__(guild_id, channel_id)
        self._transport = transport
        self._connect_task: asyncio.Task[None] | None = None
        self.voice_client: discord.VoiceClient | None = None
        self.self_deaf = True
        self.self_mute = False

    def start(self) -> None:
        self._connect_task = asyncio.create_task(self._connect())

    # TODO(integ): Test real voice connect with a test bot in a test guild.
    # Verify: successful connect, self-deaf, permission denied (Forbidden).
    async def _connect(self) -> None:
        channel = self._transport.resolve_channel(self.guild_id, self.channel_id)
        self._set_status(VoiceConnectionStatus.CONNECTING)
        try:
            vc = await channel.connect(
                self_deaf=self.self_deaf, self_mute=self.self_mute, reconnect=True
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Voice connect failed for guild %s: %s", self.guild_id, exc)
            self._set_status(VoiceConnectionStatus.DISCONNECTED)
            return

        if not isinstance(vc, discord.VoiceClient):
            self._set_status(VoiceConnectionStatus.DISCONNECTED)
            return
        self.voice_client = vc
        self._set_status(VoiceConnectionStatus.READY)

    def handle_voice_state(self, channel_id: int | None) -> None:
        """Apply a voice-state update for the bot user in this guild."""
        if self.status == VoiceConnectionStatus.DESTROYED:
            return
        if channel_id is None:
            self._set_status(VoiceConnectionStatus.DISCONNECTED)
            return

        self.channel_id = channel_id
        if self.status == VoiceConnectionStatus.DISCONNECTED:
            self._set_status(VoiceConnectionStatus.SIGNALLING)
        vc = self.voice_client
        if vc is not None and vc.is_connected():
            self._set_status(VoiceConnectionStatus.READY)

    def subscribe(self, player: AudioPlayer) -> None:
        if isinstance(player, DiscordAudioPlayer):
            player.attach(self)

    async def rejoin(self) -> None:
        if self.status == VoiceConnectionStatus.DESTROYED:
            raise VoiceConnectionError(self.guild_id, ErrorMessages.VOICE_CONNECTION_DESTROYED)
        if self._connect_task is not None and not self._connect_task.done():
            return

        if self.voice_client is not None:
            try:
                await self.voice_client.disconnect(force=True)
            except Exception as exc:
                logger.debug("Dropping stale voice client for guild %s: %s", self.guild_id, exc)
            self.voice_client = None

        self._set_status(VoiceConnectionStatus.SIGNALLING)
        self.start()

    # TODO(integ): Test real disconnect after a live connect. Verify voice_client is cleaned up.
    async def destroy(self) -> None:
        if self.status == VoiceConnectionStatus.DESTROYED:
            return
        self._set_status(VoiceConnectionStatus.DESTROYED)
        self._transport.forget(self)

        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()

        vc = self.voice_client
        self.voice_client = None
        if vc is None:
            vc = self._transport.guild_voice_client(self.guild_id)
        if vc is not None:
            await vc.disconnect(force=True)

    def count_listeners(self) -> int:
        channel = self._transport.get_voice_channel(self.guild_id, self.channel_id)
        if channel is None:
            return 0
        return sum(1 for member in channel.members if not member.bot)


class DiscordVoiceTransport(VoiceTransport):
    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot
        self._connections: dict[int, DiscordVoiceConnection] = {}

    def get_voice_channel(self, guild_id: int, channel_id: int) -> VoiceChannelLike | None:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            return None
        channel = guild.get_channel(channel_id)
        return channel if isinstance(channel, VoiceChannelLike) else None

    def resolve_channel(self, guild_id: int, channel_id: int) -> VoiceChannelLike:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            raise VoiceConnectionError(guild_id, ErrorMessages.GUILD_NOT_FOUND.format(guild_id=guild_id))
        channel = guild.get_channel(channel_id)
        if not isinstance(channel, VoiceChannelLike):
            raise VoiceConnectionError(
                guild_id, ErrorMessages.CHANNEL_NOT_VOICE.format(channel_id=channel_id)
            )
        return channel

    def guild_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        vc = guild.voice_client if guild else None
        return vc if isinstance(vc, discord.VoiceClient) else None

    async def join(
        self,
        guild_id: int,
        channel_id: int,
        *,
        self_deaf: bool = True,
        self_mute: bool = False,
    ) -> VoiceConnection:
        self.resolve_channel(guild_id, channel_id)

        connection = DiscordVoiceConnection(self, guild_id, channel_id)
        connection.self_deaf = self_deaf
        connection.self_mute = self_mute
        self._connections[guild_id] = connection
        connection.start()
        return connection

    def get_connection(self, guild_id: int) -> VoiceConnection | None:
        connection = self._connections.get(guild_id)
        if connection is not None:
            return connection

        # Adopt a voice client left over from before this transport saw it.
        vc = self.guild_voice_client(guild_id)
        if vc is None or vc.channel is None or not vc.is_connected():
            return None
        connection = DiscordVoiceConnection(self, guild_id, vc.channel.id)
        connection.voice_client = vc
        connection._set_status(VoiceConnectionStatus.READY)
        self._connections[guild_id] = connection
        return connection

    def create_player(self, guild_id: int) -> AudioPlayer:
        return DiscordAudioPlayer(asyncio.get_running_loop())

    def forget(self, connection: DiscordVoiceConnection) -> None:
        if self._connections.get(connection.guild_id) is connection:
            del self._connections[connection.guild_id]

    def handle_bot_voice_update(self, guild_id: int, channel_id: int | None) -> None:
        """Forward the bot user's own voice-state change to its connection."""
        connection = self._connections.get(guild_id)
        if connection is not None:
            connection.handle_voice_state(channel_id)
