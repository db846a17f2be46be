import asyncio
from pathlib import Path

import pytest

from discord_music_assistant.application.commands.enqueue import (
    EnqueueRequest,
    VoiceChannelSnapshot,
)
from discord_music_assistant.application.interfaces.generation_backend import GenerationBackend
from discord_music_assistant.application.interfaces.notice_channel import NoticeChannel
from discord_music_assistant.application.interfaces.reply_target import ReplyTarget
from discord_music_assistant.application.interfaces.song_searcher import SongSearcher
from discord_music_assistant.application.interfaces.voice_transport import (
    AudioPlayer,
    AudioPlayerStatus,
    VoiceConnection,
    VoiceConnectionStatus,
    VoiceTransport,
)
from discord_music_assistant.application.services.playback_engine import (
    ConnectPolicy,
    PlaybackEngine,
)
from discord_music_assistant.application.services.song_resolver import SongResolver
from discord_music_assistant.domain.music.entities import Song
from discord_music_assistant.domain.shared.exceptions import AudioAcquisitionError

GUILD_ID = 111111111
CHANNEL_ID = 555555555


# ============================================================================
# Voice Transport Fakes
# ============================================================================


class FakeVoiceConnection(VoiceConnection):
    """In-memory connection whose status is driven by the test."""

    def __init__(self, guild_id, channel_id, *, listeners=1):
        super().__init__(guild_id, channel_id)
        self.listeners = listeners
        self.subscribed_player = None
        self.rejoin_calls = 0
        self.destroy_calls = 0

    def set_status(self, status):
        self._set_status(status)

    def subscribe(self, player):
        self.subscribed_player = player

    async def rejoin(self):
        self.rejoin_calls += 1
        self._set_status(VoiceConnectionStatus.SIGNALLING)
        self._set_status(VoiceConnectionStatus.READY)

    async def destroy(self):
        self.destroy_calls += 1
        self._set_status(VoiceConnectionStatus.DESTROYED)

    def count_listeners(self):
        return self.listeners


class FakeAudioPlayer(AudioPlayer):
    """Player that records resources and lets the test end or fail the current one."""

    def __init__(self):
        super().__init__()
        self.played = []
        self.stop_calls = 0

    def play(self, resource):
        self.played.append(resource)
        self._set_status(AudioPlayerStatus.PLAYING)

    def stop(self):
        self.stop_calls += 1
        self._set_status(AudioPlayerStatus.IDLE)

    def pause(self):
        if self.status != AudioPlayerStatus.PLAYING:
            return False
        self._set_status(AudioPlayerStatus.PAUSED)
        return True

    def unpause(self):
        if self.status != AudioPlayerStatus.PAUSED:
            return False
        self._set_status(AudioPlayerStatus.PLAYING)
        return True

    def finish(self):
        self._set_status(AudioPlayerStatus.IDLE)

    def fail(self, error):
        self._emit_error(error)
        self._set_status(AudioPlayerStatus.IDLE)


class FakeVoiceTransport(VoiceTransport):
    """Transport whose joins follow a script of outcomes.

    ``"ready"`` reaches READY immediately, ``"stuck"`` never leaves
    SIGNALLING and ``"error"`` raises from ``join``.
    """

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.connections = {}
        self.players = []
        self.joins = []

    async def join(self, guild_id, channel_id, *, self_deaf=True, self_mute=False):
        self.joins.append((guild_id, channel_id, self_deaf, self_mute))
        outcome = self.outcomes.pop(0) if self.outcomes else "ready"
        if outcome == "error":
            raise RuntimeError("gateway refused the voice handshake")

        connection = FakeVoiceConnection(guild_id, channel_id)
        self.connections[guild_id] = connection
        if outcome == "ready":
            connection.set_status(VoiceConnectionStatus.CONNECTING)
            connection.set_status(VoiceConnectionStatus.READY)
        return connection

    def connect_existing(self, guild_id, channel_id):
        connection = FakeVoiceConnection(guild_id, channel_id)
        connection.set_status(VoiceConnectionStatus.READY)
        self.connections[guild_id] = connection
        return connection

    def get_connection(self, guild_id):
        return self.connections.get(guild_id)

    def create_player(self, guild_id):
        player = FakeAudioPlayer()
        self.players.append(player)
        return player


# ============================================================================
# Search, Audio and Notice Fakes
# ============================================================================


class FakeSongSearcher(SongSearcher):
    def __init__(self, catalog=None, search_results=None):
        self.catalog = dict(catalog or {})
        self.search_results = dict(search_results or {})
        self.lookup_error = None
        self.lookups = []
        self.searches = []

    def is_url(self, query):
        return query.startswith(("http://", "https://"))

    async def lookup(self, url):
        self.lookups.append(url)
        if self.lookup_error is not None:
            raise self.lookup_error
        metadata = self.catalog.get(url)
        return dict(metadata) if metadata is not None else None

    async def search(self, query, limit=1):
        self.searches.append((query, limit))
        return [dict(item) for item in self.search_results.get(query, [])][:limit]


class FakeAudioPipeline:
    """Stands in for the download pipeline; ``failing`` holds song ids that cannot be acquired."""

    def __init__(self):
        self.failing = set()
        self.acquired = []

    async def acquire(self, song):
        self.acquired.append(song.id)
        if song.id in self.failing:
            raise AudioAcquisitionError(song.id)
        return Path("/tmp/downloads") / f"{song.download_key}_converted.opus"


class FakeNoticeChannel(NoticeChannel):
    def __init__(self):
        self.sent = []
        self.fail_with = None

    async def send(self, content):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(content)


# ============================================================================
# Generation Fakes
# ============================================================================


class FakeGenerationBackend(GenerationBackend):
    """Scripted backend: each prompt maps to fragments, an exception, or a list mixing both."""

    def __init__(self, responses=None, model="test-model"):
        self.responses = dict(responses or {})
        self._model = model
        self.prompts = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    @property
    def model(self):
        return self._model

    async def open_stream(self, prompt):
        self.prompts.append(prompt)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            script = self.responses.get(prompt, ["ok"])
            if isinstance(script, Exception):
                raise script
            for item in script:
                await asyncio.sleep(0)
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            self.active -= 1

    async def aclose(self):
        self.closed = True


class FakeReplyTarget(ReplyTarget):
    """Records the visible text of every message in an answer."""

    def __init__(self):
        self.messages = [""]
        self.edits = []
        self.follow_ups = []
        self.edit_failures = []
        self.follow_up_failures = []

    async def edit(self, content):
        if self.edit_failures:
            raise self.edit_failures.pop(0)
        self.edits.append(content)
        self.messages[-1] = content

    async def follow_up(self, content):
        if self.follow_up_failures:
            raise self.follow_up_failures.pop(0)
        self.follow_ups.append(content)
        self.messages.append(content)


# ============================================================================
# Domain Fixtures
# ============================================================================


def _metadata(song_id, title, duration):
    return {
        "id": song_id,
        "title": title,
        "url": f"https://www.youtube.com/watch?v={song_id}",
        "thumbnail": f"https://i.ytimg.com/vi/{song_id}/hqdefault.jpg",
        "duration_in_sec": duration,
    }


@pytest.fixture
def song_factory():
    """Build songs with sensible defaults."""

    def make(song_id="abc123", title="Test Song", duration=263, requested_by="Tester"):
        return Song(
            id=song_id,
            title=title,
            url=f"https://www.youtube.com/watch?v={song_id}",
            duration=duration,
            requested_by=requested_by,
        )

    return make


@pytest.fixture
def sample_song(song_factory):
    return song_factory()


@pytest.fixture
def song_catalog():
    """Metadata the fake searcher knows, keyed by URL."""
    entries = [
        _metadata("aaa", "First Song", 200),
        _metadata("bbb", "Second Song", 180),
        _metadata("ccc", "Third Song", 240),
    ]
    return {entry["url"]: entry for entry in entries}


# ============================================================================
# Playback Fixtures
# ============================================================================


@pytest.fixture
def fake_transport():
    return FakeVoiceTransport()


@pytest.fixture
def fake_searcher(song_catalog):
    searcher = FakeSongSearcher(catalog=song_catalog)
    searcher.search_results["first song"] = [
        {"id": "aaa", "title": "First Song", "url": "https://www.youtube.com/watch?v=aaa"}
    ]
    return searcher


@pytest.fixture
def fake_pipeline():
    return FakeAudioPipeline()


@pytest.fixture
def notice_channel():
    return FakeNoticeChannel()


@pytest.fixture
def connect_policy():
    return ConnectPolicy(
        attempts=3,
        ready_timeout=0.2,
        rejoin_timeout=0.15,
        connecting_timeout=0.05,
        backoff_base=0.01,
        backoff_cap=0.01,
        reconnect_window=0.1,
    )


@pytest.fixture
def playback_engine(fake_transport, fake_searcher, fake_pipeline, connect_policy):
    return PlaybackEngine(
        transport=fake_transport,
        resolver=SongResolver(fake_searcher),
        pipeline=fake_pipeline,
        connect_policy=connect_policy,
        empty_channel_timeout=0.05,
    )


@pytest.fixture
def voice_channel():
    return VoiceChannelSnapshot(id=CHANNEL_ID, name="Music", member_count=2)


@pytest.fixture
def make_request(voice_channel, notice_channel):
    """Build an enqueue request for the test guild."""

    def make(query="https://www.youtube.com/watch?v=aaa", channel=voice_channel, guild_id=GUILD_ID):
        return EnqueueRequest(
            guild_id=guild_id,
            voice_channel=channel,
            requested_by="Tester",
            query=query,
            notice_channel=notice_channel,
        )

    return make


@pytest.fixture
def fake_backend():
    return FakeGenerationBackend()


@pytest.fixture
def reply_target():
    return FakeReplyTarget()


async def settle(rounds=20):
    """Let spawned session tasks run to completion."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settle_tasks():
    return settle
