"""Discord adapters implementing the application ports."""

from discord_music_assistant.infrastructure.discord.adapters.embeds import (
    content_to_embed,
    render_kwargs,
)
from discord_music_assistant.infrastructure.discord.adapters.notice_channel import (
    DiscordNoticeChannel,
)
from discord_music_assistant.infrastructure.discord.adapters.reply_target import (
    DiscordReplyTarget,
)
from discord_music_assistant.infrastructure.discord.adapters.voice_transport import (
    DiscordAudioPlayer,
    DiscordVoiceConnection,
    DiscordVoiceTransport,
)

__all__ = [
    "DiscordAudioPlayer",
    "DiscordNoticeChannel",
    "DiscordReplyTarget",
    "DiscordVoiceConnection",
    "DiscordVoiceTransport",
    "content_to_embed",
    "render_kwargs",
]
