"""Async helper for running the external audio tools."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

STDERR_TAIL: int = 500


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_process(*args: str) -> ProcessResult:
    """Run a command to completion, capturing stderr and discarding stdout."""
    logger.debug("Running %s", " ".join(args))
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
    )
    _, stderr = await proc.communicate()
    text = stderr.decode("utf-8", errors="ignore").strip()
    return ProcessResult(returncode=proc.returncode or 0, stderr=text[-STDERR_TAIL:])
