"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum


class PlaybackState(Enum):
    """Playback state of a guild session with enforced transitions.

    State transitions:
    - IDLE -> LOADING (head song is being acquired)
    - LOADING -> PLAYING (audio handed to the transport)
    - LOADING -> LOADING (a bad song was dropped, next one is loading)
    - PLAYING <-> PAUSED
    - PLAYING/PAUSED -> LOADING (song ended, next or looped song loads)
    - LOADING/PLAYING/PAUSED -> IDLE (queue exhausted)
    - Any -> DESTROYED (stop, connection loss, empty channel)
    """

    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    DESTROYED = "destroyed"

    def can_transition_to(self, target: PlaybackState) -> bool:
        """Check if transition to target state is valid."""
        valid_transitions = {
            PlaybackState.IDLE: {PlaybackState.LOADING, PlaybackState.DESTROYED},
            PlaybackState.LOADING: {
                PlaybackState.LOADING,
                PlaybackState.PLAYING,
                PlaybackState.IDLE,
                PlaybackState.DESTROYED,
            },
            PlaybackState.PLAYING: {
                PlaybackState.PAUSED,
                PlaybackState.LOADING,
                PlaybackState.IDLE,
                PlaybackState.DESTROYED,
            },
            PlaybackState.PAUSED: {
                PlaybackState.PLAYING,
                PlaybackState.LOADING,
                PlaybackState.IDLE,
                PlaybackState.DESTROYED,
            },
            PlaybackState.DESTROYED: set(),
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_active(self) -> bool:
        return self in {PlaybackState.LOADING, PlaybackState.PLAYING, PlaybackState.PAUSED}

    @property
    def is_terminal(self) -> bool:
        return self == PlaybackState.DESTROYED
