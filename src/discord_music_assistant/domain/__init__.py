# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Exceptions, message catalogs, constrained types and message content
- music/: Songs, duration normalization and playback state
- generation/: Response chunking rules for streamed AI answers
"""

from discord_music_assistant.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
