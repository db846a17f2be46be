"""
Generation Bounded Context

Rules for splitting streamed AI answers into chat-sized messages.
"""

from discord_music_assistant.domain.generation.chunking import find_break_point, split_message

__all__ = [
    "find_break_point",
    "split_message",
]
