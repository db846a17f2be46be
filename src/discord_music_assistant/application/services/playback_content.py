"""Builders for the structured messages the playback engine produces."""

from __future__ import annotations

from collections.abc import Sequence

from ...domain.music.entities import Song
from ...domain.shared.constants import UIConstants
from ...domain.shared.content import ContentField, MessageContent
from ...domain.shared.messages import DiscordUIMessages


def added_to_queue(song: Song, position: int) -> MessageContent:
    return MessageContent(
        title=DiscordUIMessages.TITLE_ADDED_TO_QUEUE,
        description=f"**{song.title}**",
        fields=(
            ContentField(name=DiscordUIMessages.FIELD_DURATION, value=song.duration_formatted),
            ContentField(name=DiscordUIMessages.FIELD_REQUESTED_BY, value=song.requested_by),
            ContentField(name=DiscordUIMessages.FIELD_POSITION, value=str(position)),
        ),
        thumbnail=song.thumbnail,
        color=UIConstants.COLOR_SUCCESS,
    )


def now_playing(song: Song) -> MessageContent:
    return MessageContent(
        title=DiscordUIMessages.TITLE_NOW_PLAYING,
        description=f"**{song.title}**",
        fields=(
            ContentField(name=DiscordUIMessages.FIELD_DURATION, value=song.duration_formatted),
            ContentField(name=DiscordUIMessages.FIELD_REQUESTED_BY, value=song.requested_by),
        ),
        thumbnail=song.thumbnail,
        color=UIConstants.COLOR_INFO,
    )


def play_failed(song: Song) -> MessageContent:
    return MessageContent(
        title=DiscordUIMessages.TITLE_PLAY_ERROR,
        description=DiscordUIMessages.NOTICE_PLAY_FAILED_DESCRIPTION.format(title=song.title),
        fields=(
            ContentField(
                name=DiscordUIMessages.FIELD_ERROR,
                value=DiscordUIMessages.NOTICE_PLAY_FAILED_DETAIL,
                inline=False,
            ),
        ),
        color=UIConstants.COLOR_ERROR,
    )


def left_empty_channel() -> MessageContent:
    return MessageContent(
        title=DiscordUIMessages.TITLE_LEFT_CHANNEL,
        description=DiscordUIMessages.NOTICE_LEFT_EMPTY_CHANNEL,
        fields=(
            ContentField(
                name=DiscordUIMessages.FIELD_INFO,
                value=DiscordUIMessages.NOTICE_REJOIN_HINT,
                inline=False,
            ),
        ),
        color=UIConstants.COLOR_WARNING,
    )


def queue_listing(songs: Sequence[Song], preview_size: int = UIConstants.QUEUE_PREVIEW_SIZE) -> MessageContent:
    """Queue overview: the first ``preview_size`` songs, then a count of the rest."""
    lines = [
        DiscordUIMessages.QUEUE_ENTRY.format(
            index=index,
            title=song.title,
            duration=song.duration_formatted,
            requested_by=song.requested_by,
        )
        for index, song in enumerate(songs[:preview_size], start=1)
    ]

    remaining = len(songs) - preview_size
    return MessageContent(
        title=DiscordUIMessages.TITLE_MUSIC_QUEUE,
        description=DiscordUIMessages.QUEUE_DESCRIPTION.format(count=len(songs)),
        fields=(
            ContentField(
                name=DiscordUIMessages.FIELD_CURRENT_QUEUE,
                value="\n".join(lines),
                inline=False,
            ),
        ),
        footer=DiscordUIMessages.QUEUE_MORE.format(remaining=remaining) if remaining > 0 else None,
        color=UIConstants.COLOR_INFO,
    )
