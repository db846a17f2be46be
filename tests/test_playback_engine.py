"""
Unit Tests for PlaybackEngine

Drives the engine over in-memory voice, search and audio fakes:
- Enqueue checks, resolution failures and voice connect retries
- Playback loop: advance, loop mode, failed songs
- Transport controls: skip, stop, pause, resume, volume, queue
- Connection loss recovery and the empty-channel timer
"""

import asyncio

import pytest

from discord_music_assistant.application.commands.enqueue import VoiceChannelSnapshot
from discord_music_assistant.application.interfaces.voice_transport import (
    AudioPlayerStatus,
    VoiceConnectionStatus,
)
from discord_music_assistant.application.services.playback_engine import ConnectPolicy
from discord_music_assistant.domain.music.value_objects import PlaybackState
from discord_music_assistant.domain.shared.content import MessageContent
from discord_music_assistant.domain.shared.messages import DiscordUIMessages

GUILD_ID = 111111111
CHANNEL_ID = 555555555
FIRST = "https://www.youtube.com/watch?v=aaa"
SECOND = "https://www.youtube.com/watch?v=bbb"
THIRD = "https://www.youtube.com/watch?v=ccc"


def _titles(notices, title):
    return [n for n in notices if isinstance(n, MessageContent) and n.title == title]


# =============================================================================
# ConnectPolicy
# =============================================================================


class TestConnectPolicy:
    """Tests for the exponential connect backoff."""

    def test_backoff_doubles_until_cap(self):
        policy = ConnectPolicy(backoff_base=1.0, backoff_cap=5.0)

        assert [policy.backoff(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]


# =============================================================================
# Enqueue
# =============================================================================


class TestEnqueue:
    """Tests for queueing songs and starting playback."""

    @pytest.mark.asyncio
    async def test_first_song_joins_and_starts_playing(
        self, playback_engine, fake_transport, make_request, notice_channel
    ):
        result = await playback_engine.enqueue(make_request(FIRST))

        assert result.success is True
        assert result.message.title == DiscordUIMessages.TITLE_ADDED_TO_QUEUE
        assert result.message.field_value(DiscordUIMessages.FIELD_POSITION) == "1"
        assert result.message.field_value(DiscordUIMessages.FIELD_DURATION) == "3:20"

        assert fake_transport.joins == [(GUILD_ID, CHANNEL_ID, True, False)]
        session = playback_engine.get_session(GUILD_ID)
        assert session.state == PlaybackState.PLAYING
        assert playback_engine.is_playing(GUILD_ID) is True

        player = fake_transport.players[0]
        assert player.status == AudioPlayerStatus.PLAYING
        assert player.played[0].title == "First Song"
        assert player.played[0].volume == 1.0
        assert session.connection.subscribed_player is player
        assert len(_titles(notice_channel.sent, DiscordUIMessages.TITLE_NOW_PLAYING)) == 1

    @pytest.mark.asyncio
    async def test_second_song_is_queued_behind_current(
        self, playback_engine, fake_transport, make_request
    ):
        await playback_engine.enqueue(make_request(FIRST))
        result = await playback_engine.enqueue(make_request(SECOND))

        assert result.success is True
        assert result.message.field_value(DiscordUIMessages.FIELD_POSITION) == "2"
        assert len(fake_transport.joins) == 1
        assert len(fake_transport.players[0].played) == 1
        assert [s.title for s in playback_engine.get_session(GUILD_ID).songs] == [
            "First Song",
            "Second Song",
        ]

    @pytest.mark.asyncio
    async def test_search_query_resolves_top_result(self, playback_engine, make_request, fake_searcher):
        result = await playback_engine.enqueue(make_request("first song"))

        assert result.success is True
        assert fake_searcher.searches == [("first song", 1)]
        # Duration comes from re-resolving the search hit by URL.
        assert result.message.field_value(DiscordUIMessages.FIELD_DURATION) == "3:20"

    @pytest.mark.asyncio
    async def test_unknown_query_reports_not_found(self, playback_engine, fake_transport, make_request):
        result = await playback_engine.enqueue(make_request("nothing matches this"))

        assert result.success is False
        assert result.message == DiscordUIMessages.ERROR_SONG_NOT_FOUND
        assert fake_transport.joins == []
        assert playback_engine.session_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("channel", "expected"),
        [
            (None, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE),
            (
                VoiceChannelSnapshot(id=CHANNEL_ID, member_can_connect=False),
                DiscordUIMessages.ERROR_MEMBER_CANNOT_CONNECT,
            ),
            (
                VoiceChannelSnapshot(id=CHANNEL_ID, bot_can_connect=False),
                DiscordUIMessages.ERROR_BOT_CANNOT_CONNECT,
            ),
            (
                VoiceChannelSnapshot(id=CHANNEL_ID, bot_can_speak=False),
                DiscordUIMessages.ERROR_BOT_CANNOT_SPEAK,
            ),
            (
                VoiceChannelSnapshot(id=CHANNEL_ID, member_count=5, user_limit=5),
                DiscordUIMessages.ERROR_CHANNEL_FULL,
            ),
        ],
    )
    async def test_voice_channel_checks(
        self, playback_engine, fake_transport, fake_searcher, make_request, channel, expected
    ):
        result = await playback_engine.enqueue(make_request(FIRST, channel=channel))

        assert result.success is False
        assert result.message == expected
        assert fake_searcher.lookups == []
        assert fake_transport.joins == []

    @pytest.mark.asyncio
    async def test_connect_retries_then_gives_up(self, playback_engine, fake_transport, make_request):
        fake_transport.outcomes = ["stuck", "stuck", "stuck"]

        result = await playback_engine.enqueue(make_request(FIRST))

        assert result.success is False
        assert result.message == DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE
        assert len(fake_transport.joins) == 3
        assert fake_transport.connections[GUILD_ID].status == VoiceConnectionStatus.DESTROYED
        assert playback_engine.session_count == 0

    @pytest.mark.asyncio
    async def test_connect_succeeds_after_failed_attempts(
        self, playback_engine, fake_transport, make_request
    ):
        fake_transport.outcomes = ["error", "stuck", "ready"]

        result = await playback_engine.enqueue(make_request(FIRST))

        assert result.success is True
        assert len(fake_transport.joins) == 3
        assert playback_engine.get_session(GUILD_ID).connection.is_ready

    @pytest.mark.asyncio
    async def test_reuses_live_connection_in_same_channel(
        self, playback_engine, fake_transport, make_request
    ):
        existing = fake_transport.connect_existing(GUILD_ID, CHANNEL_ID)

        await playback_engine.enqueue(make_request(FIRST))

        assert fake_transport.joins == []
        assert playback_engine.get_session(GUILD_ID).connection is existing

    @pytest.mark.asyncio
    async def test_replaces_connection_in_other_channel(
        self, playback_engine, fake_transport, make_request
    ):
        stale = fake_transport.connect_existing(GUILD_ID, 999)

        await playback_engine.enqueue(make_request(FIRST))

        assert stale.destroy_calls == 1
        assert len(fake_transport.joins) == 1

    @pytest.mark.asyncio
    async def test_failed_acquisition_drops_song(
        self, playback_engine, fake_pipeline, fake_transport, make_request, notice_channel
    ):
        fake_pipeline.failing.add("aaa")

        result = await playback_engine.enqueue(make_request(FIRST))

        assert result.success is True
        session = playback_engine.get_session(GUILD_ID)
        assert session.songs == []
        assert session.playing is False
        assert session.state == PlaybackState.IDLE
        assert len(_titles(notice_channel.sent, DiscordUIMessages.TITLE_PLAY_ERROR)) == 1

        await playback_engine.enqueue(make_request(SECOND))
        assert fake_transport.players[0].played[-1].title == "Second Song"


# =============================================================================
# Playback Loop
# =============================================================================


class TestPlaybackLoop:
    """Tests for advancing through the queue when songs end."""

    @pytest.mark.asyncio
    async def test_song_end_advances_queue(
        self, playback_engine, fake_transport, make_request, settle_tasks
    ):
        await playback_engine.enqueue(make_request(FIRST))
        await playback_engine.enqueue(make_request(SECOND))
        player = fake_transport.players[0]

        player.finish()
        await settle_tasks()

        session = playback_engine.get_session(GUILD_ID)
        assert [s.title for s in session.songs] == ["Second Song"]
        assert [r.title for r in player.played] == ["First Song", "Second Song"]
        assert session.state == PlaybackState.PLAYING

    @pytest.mark.asyncio
    async def test_last_song_end_leaves_session_idle(
        self, playback_engine, fake_transport, make_request, settle_tasks
    ):
        await playback_engine.enqueue(make_request(FIRST))

        fake_transport.players[0].finish()
        await settle_tasks()

        session = playback_engine.get_session(GUILD_ID)
        assert session.songs == []
        assert session.playing is False
        assert session.state == PlaybackState.IDLE
        assert playback_engine.session_count == 1

    @pytest.mark.asyncio
    async def test_loop_replays_current_song(
        self, playback_engine, fake_transport, make_request, settle_tasks
    ):
        await playback_engine.enqueue(make_request(FIRST))
        await playback_engine.enqueue(make_request(SECOND))
        playback_engine.toggle_loop(GUILD_ID)
        player = fake_transport.players[0]

        player.finish()
        await settle_tasks()

        assert [r.title for r in player.played] == ["First Song", "First Song"]
        assert playback_engine.get_session(GUILD_ID).queue_length == 2

    @pytest.mark.asyncio
    async def test_player_error_drops_song_even_when_looping(
        self, playback_engine, fake_transport, make_request, notice_channel, settle_tasks
    ):
        await playback_engine.enqueue(make_request(FIRST))
        await playback_engine.enqueue(make_request(SECOND))
        playback_engine.toggle_loop(GUILD_ID)
        player = fake_transport.players[0]

        player.fail(RuntimeError("ffmpeg crashed"))
        await settle_tasks()

        assert [s.title for s in playback_engine.get_session(GUILD_ID).songs] == ["Second Song"]
        assert player.played[-1].title == "Second Song"
        assert len(_titles(notice_channel.sent, DiscordUIMessages.TITLE_PLAY_ERROR)) == 1

    @pytest.mark.asyncio
    async def test_rejoins_connection_that_is_not_ready(
        self, playback_engine, fake_transport, make_request, settle_tasks
    ):
        await playback_engine.enqueue(make_request(FIRST))
        await playback_engine.enqueue(make_request(SECOND))
        connection = playback_engine.get_session(GUILD_ID).connection
        connection.set_status(VoiceConnectionStatus.CONNECTING)

        fake_transport.players[0].finish()
        await settle_tasks()

        assert connection.rejoin_calls == 1
        assert fake_transport.players[0].played[-1].title == "Second Song"

    @pytest.mark.asyncio
    async def test_rejoin_waits_with_its_own_timeout(
        self, playback_engine, make_request, connect_policy
    ):
        await playback_engine.enqueue(make_request(FIRST))
        session = playback_engine.get_session(GUILD_ID)
        connection = session.connection
        connection.set_status(VoiceConnectionStatus.CONNECTING)
        timeouts = []
        wait_for = connection.wait_for

        async def recording_wait_for(*statuses, timeout=None):
            timeouts.append(timeout)
            return await wait_for(*statuses, timeout=timeout)

        connection.wait_for = recording_wait_for

        await playback_engine._ensure_ready(session)

        assert connection.rejoin_calls == 1
        assert timeouts == [connect_policy.rejoin_timeout]
        assert connect_policy.rejoin_timeout != connect_policy.ready_timeout

    @pytest.mark.asyncio
    async def test_notice_failures_do_not_stop_playback(
        self, playback_engine, fake_transport, make_request, notice_channel
    ):
        notice_channel.fail_with = RuntimeError("missing permissions")

        result = await playback_engine.enqueue(make_request(FIRST))

        assert result.success is True
        assert fake_transport.players[0].status == AudioPlayerStatus.PLAYING


# =============================================================================
# Transport Controls
# =============================================================================


class TestControls:
    """Tests for skip, stop, pause, resume, volume, loop and queue."""

    @pytest.mark.asyncio
    async def test_skip_plays_next_song(
        self, playback_engine, fake_transport, make_request, settle_tasks
    ):
        await playback_engine.enqueue(make_request(FIRST))
        await playback_engine.enqueue(make_request(SECOND))

        result = playback_engine.skip(GUILD_ID)
        await settle_tasks()

        assert result.success is True
        assert result.message == DiscordUIMessages.SUCCESS_SKIPPED
        assert fake_transport.players[0].played[-1].title == "Second Song"

    @pytest.mark.asyncio
    async def test_skip_without_session_fails(self, playback_engine):
        result = playback_engine.skip(GUILD_ID)

        assert result.success is False
        assert result.message == DiscordUIMessages.STATE_NOTHING_PLAYING

    @pytest.mark.asyncio
    async def test_skip_after_queue_finished_fails(
        self, playback_engine, fake_transport, make_request, settle_tasks
    ):
        await playback_engine.enqueue(make_request(FIRST))
        fake_transport.players[0].finish()
        await settle_tasks()

        assert playback_engine.skip(GUILD_ID).success is False

    @pytest.mark.asyncio
    async def test_stop_tears_down_session(self, playback_engine, fake_transport, make_request):
        await playback_engine.enqueue(make_request(FIRST))
        session = playback_engine.get_session(GUILD_ID)

        result = await playback_engine.stop(GUILD_ID)

        assert result.success is True
        assert result.message == DiscordUIMessages.SUCCESS_STOPPED
        assert playback_engine.session_count == 0
        assert session.is_destroyed
        assert session.songs == []
        assert session.connection.status == VoiceConnectionStatus.DESTROYED
        assert fake_transport.players[0].stop_calls == 1
        assert fake_transport.players[0].listener_count == 0

    @pytest.mark.asyncio
    async def test_stop_without_session_fails(self, playback_engine):
        result = await playback_engine.stop(GUILD_ID)

        assert result.success is False

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, playback_engine, fake_transport, make_request):
        await playback_engine.enqueue(make_request(FIRST))
        session = playback_engine.get_session(GUILD_ID)

        paused = playback_engine.pause(GUILD_ID)
        assert paused.message == DiscordUIMessages.SUCCESS_PAUSED
        assert session.state == PlaybackState.PAUSED
        assert fake_transport.players[0].status == AudioPlayerStatus.PAUSED

        resumed = playback_engine.resume(GUILD_ID)
        assert resumed.message == DiscordUIMessages.SUCCESS_RESUMED
        assert session.state == PlaybackState.PLAYING
        assert fake_transport.players[0].status == AudioPlayerStatus.PLAYING

    @pytest.mark.asyncio
    async def test_pause_and_resume_need_playback(self, playback_engine):
        assert playback_engine.pause(GUILD_ID).success is False
        assert playback_engine.resume(GUILD_ID).success is False

    @pytest.mark.asyncio
    async def test_volume_applies_to_next_song(
        self, playback_engine, fake_transport, make_request, settle_tasks
    ):
        await playback_engine.enqueue(make_request(FIRST))
        await playback_engine.enqueue(make_request(SECOND))

        result = playback_engine.set_volume(GUILD_ID, 50)
        assert result.message == DiscordUIMessages.SUCCESS_VOLUME_SET.format(volume=50)
        assert fake_transport.players[0].played[0].volume == 1.0

        fake_transport.players[0].finish()
        await settle_tasks()
        assert fake_transport.players[0].played[1].volume == 0.5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("level", [-1, 101, 150])
    async def test_volume_out_of_range(self, playback_engine, make_request, level):
        await playback_engine.enqueue(make_request(FIRST))

        result = playback_engine.set_volume(GUILD_ID, level)

        assert result.success is False
        assert result.message == DiscordUIMessages.ERROR_INVALID_VOLUME
        assert playback_engine.get_session(GUILD_ID).volume == 1.0

    def test_volume_without_session(self, playback_engine):
        assert playback_engine.set_volume(GUILD_ID, 50).message == DiscordUIMessages.STATE_NOTHING_PLAYING

    @pytest.mark.asyncio
    async def test_toggle_loop(self, playback_engine, make_request):
        await playback_engine.enqueue(make_request(FIRST))

        assert playback_engine.toggle_loop(GUILD_ID).message == DiscordUIMessages.SUCCESS_LOOP_ENABLED
        assert playback_engine.toggle_loop(GUILD_ID).message == DiscordUIMessages.SUCCESS_LOOP_DISABLED

    @pytest.mark.asyncio
    async def test_queue_listing(self, playback_engine, make_request):
        for query in (FIRST, SECOND, THIRD):
            await playback_engine.enqueue(make_request(query))

        result = playback_engine.queue(GUILD_ID)

        assert result.success is True
        assert result.message.description == DiscordUIMessages.QUEUE_DESCRIPTION.format(count=3)
        listing = result.message.field_value(DiscordUIMessages.FIELD_CURRENT_QUEUE)
        assert listing.splitlines()[0] == "1. **First Song** - 3:20 (Tester)"
        assert result.message.footer is None

    def test_queue_empty(self, playback_engine):
        result = playback_engine.queue(GUILD_ID)

        assert result.success is False
        assert result.message == DiscordUIMessages.STATE_QUEUE_EMPTY

    @pytest.mark.asyncio
    async def test_shutdown_destroys_every_session(self, playback_engine, make_request):
        await playback_engine.enqueue(make_request(FIRST))
        await playback_engine.enqueue(make_request(SECOND, guild_id=222222222))

        await playback_engine.shutdown()

        assert playback_engine.session_count == 0


# =============================================================================
# Connection Loss
# =============================================================================


class TestConnectionLoss:
    """Tests for the reconnect window after a voice disconnect."""

    @pytest.mark.asyncio
    async def test_unrecovered_disconnect_tears_down(
        self, playback_engine, make_request, notice_channel
    ):
        await playback_engine.enqueue(make_request(FIRST))
        connection = playback_engine.get_session(GUILD_ID).connection

        connection.set_status(VoiceConnectionStatus.DISCONNECTED)
        await asyncio.sleep(0.25)

        assert playback_engine.session_count == 0
        assert connection.status == VoiceConnectionStatus.DESTROYED
        assert notice_channel.sent[-1] == DiscordUIMessages.NOTICE_CONNECTION_LOST

    @pytest.mark.asyncio
    async def test_reconnect_within_window_keeps_session(self, playback_engine, make_request):
        await playback_engine.enqueue(make_request(FIRST))
        session = playback_engine.get_session(GUILD_ID)

        session.connection.set_status(VoiceConnectionStatus.DISCONNECTED)
        await asyncio.sleep(0)
        session.connection.set_status(VoiceConnectionStatus.CONNECTING)
        session.connection.set_status(VoiceConnectionStatus.READY)
        await asyncio.sleep(0.25)

        assert playback_engine.get_session(GUILD_ID) is session
        assert not session.is_destroyed

    @pytest.mark.asyncio
    async def test_stop_during_window_is_not_reported(
        self, playback_engine, make_request, notice_channel
    ):
        await playback_engine.enqueue(make_request(FIRST))
        session = playback_engine.get_session(GUILD_ID)

        session.connection.set_status(VoiceConnectionStatus.DISCONNECTED)
        await playback_engine.stop(GUILD_ID)
        await asyncio.sleep(0.25)

        assert DiscordUIMessages.NOTICE_CONNECTION_LOST not in notice_channel.sent


# =============================================================================
# Empty Channel
# =============================================================================


class TestEmptyChannel:
    """Tests for leaving a voice channel nobody is listening in."""

    @pytest.mark.asyncio
    async def test_leaves_after_timeout(self, playback_engine, make_request, notice_channel):
        await playback_engine.enqueue(make_request(FIRST))
        session = playback_engine.get_session(GUILD_ID)
        session.connection.listeners = 0

        playback_engine.handle_member_left(GUILD_ID, CHANNEL_ID)
        assert session.pending_disconnect is not None
        await asyncio.sleep(0.15)

        assert playback_engine.session_count == 0
        assert len(_titles(notice_channel.sent, DiscordUIMessages.TITLE_LEFT_CHANNEL)) == 1

    @pytest.mark.asyncio
    async def test_member_returning_cancels_departure(self, playback_engine, make_request):
        await playback_engine.enqueue(make_request(FIRST))
        session = playback_engine.get_session(GUILD_ID)
        session.connection.listeners = 0

        playback_engine.handle_member_left(GUILD_ID, CHANNEL_ID)
        session.connection.listeners = 1
        playback_engine.handle_member_joined(GUILD_ID, CHANNEL_ID)
        await asyncio.sleep(0.15)

        assert playback_engine.get_session(GUILD_ID) is session
        assert session.pending_disconnect is None

    @pytest.mark.asyncio
    async def test_ignores_departures_while_others_listen(self, playback_engine, make_request):
        await playback_engine.enqueue(make_request(FIRST))
        session = playback_engine.get_session(GUILD_ID)

        playback_engine.handle_member_left(GUILD_ID, CHANNEL_ID)

        assert session.pending_disconnect is None

    @pytest.mark.asyncio
    async def test_ignores_other_channels(self, playback_engine, make_request):
        await playback_engine.enqueue(make_request(FIRST))
        session = playback_engine.get_session(GUILD_ID)
        session.connection.listeners = 0

        playback_engine.handle_member_left(GUILD_ID, 999)

        assert session.pending_disconnect is None

    @pytest.mark.asyncio
    async def test_stays_when_channel_refills_without_join_event(
        self, playback_engine, make_request
    ):
        await playback_engine.enqueue(make_request(FIRST))
        session = playback_engine.get_session(GUILD_ID)
        session.connection.listeners = 0

        playback_engine.handle_member_left(GUILD_ID, CHANNEL_ID)
        session.connection.listeners = 2
        await asyncio.sleep(0.15)

        assert playback_engine.get_session(GUILD_ID) is session
