"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class VoiceConnectionError(DomainError):
    """Raised when a voice connection cannot be established or restored."""

    def __init__(self, guild_id: int, message: str | None = None) -> None:
        msg = message or f"Could not establish a voice connection in guild {guild_id}"
        super().__init__(msg, code="VOICE_CONNECTION_FAILED")
        self.guild_id = guild_id


class AudioAcquisitionError(DomainError):
    """Raised when audio for a song cannot be downloaded or verified."""

    def __init__(self, song_id: str, message: str | None = None) -> None:
        msg = message or f"Could not acquire audio for song '{song_id}'"
        super().__init__(msg, code="AUDIO_ACQUISITION_FAILED")
        self.song_id = song_id


class GenerationBackendError(DomainError):
    """Raised when the text-generation backend fails after all retries."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, code="GENERATION_BACKEND_ERROR")
        self.status_code = status_code


class RateLimitedError(DomainError):
    """Raised by chat adapters when the platform asks the caller to slow down."""

    def __init__(self, retry_after: float | None = None, message: str | None = None) -> None:
        msg = message or "Rate limited by the chat platform"
        super().__init__(msg, code="RATE_LIMITED")
        self.retry_after = retry_after
