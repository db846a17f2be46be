"""Generation backend infrastructure."""

from discord_music_assistant.infrastructure.ai.ollama_client import OllamaClient

__all__ = ["OllamaClient"]
