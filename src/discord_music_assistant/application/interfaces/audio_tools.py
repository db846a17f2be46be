"""Port interfaces for the external download and transcode tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class AudioDownloader(ABC):
    @abstractmethod
    async def download(self, url: str, destination: Path) -> None:
        """Download the audio at ``url`` into ``destination``.

        Implementations raise ``AudioAcquisitionError`` when the tool fails.
        """
        ...


class AudioTranscoder(ABC):
    @abstractmethod
    async def transcode(self, source: Path, destination: Path) -> None:
        """Transcode ``source`` into a voice-ready file at ``destination``."""
        ...
