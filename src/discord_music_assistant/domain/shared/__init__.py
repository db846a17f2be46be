"""
Shared Domain Kernel

Contains exceptions, message catalogs and constrained types shared across all bounded contexts.
"""

from discord_music_assistant.domain.shared.exceptions import (
    AudioAcquisitionError,
    DomainError,
    GenerationBackendError,
    InvalidOperationError,
    RateLimitedError,
    VoiceConnectionError,
)

__all__ = [
    "DomainError",
    "InvalidOperationError",
    "VoiceConnectionError",
    "AudioAcquisitionError",
    "GenerationBackendError",
    "RateLimitedError",
]
