"""GenerationBackend implementation streaming from the Ollama HTTP API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

import httpx

from discord_music_assistant.application.interfaces.generation_backend import GenerationBackend
from discord_music_assistant.config.settings import AISettings
from discord_music_assistant.domain.shared.constants import GenerationConstants
from discord_music_assistant.domain.shared.exceptions import GenerationBackendError
from discord_music_assistant.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (httpx.TimeoutException, httpx.TransportError)


def _is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class OllamaClient(GenerationBackend):
    """Streams ``/api/generate`` NDJSON responses.

    Opening the stream is retried with a linear backoff; once the first
    byte arrives, errors are surfaced to the caller as they happen.
    """

    def __init__(
        self,
        settings: AISettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AISettings()
        self._client = client
        self._owns_client = client is None

    @property
    def model(self) -> str:
        return self._settings.model

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.base_url,
                timeout=httpx.Timeout(self._settings.request_timeout),
            )
        return self._client

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self._settings.model,
            "prompt": f"{self._settings.system_prompt}\n\n{prompt}",
            "stream": True,
        }

    async def open_stream(self, prompt: str) -> AsyncGenerator[str, None]:
        response = await self._send_with_retry(self.build_payload(prompt))
        try:
            async for line in response.aiter_lines():
                fragment = self._parse_line(line)
                if fragment:
                    yield fragment
        except httpx.HTTPError as exc:
            raise GenerationBackendError(
                ErrorMessages.GENERATION_REQUEST_FAILED.format(error=exc)
            ) from exc
        finally:
            await response.aclose()

    async def _send_with_retry(self, payload: dict[str, Any]) -> httpx.Response:
        client = self._get_client()
        attempts = self._settings.max_retries + 1
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            request = client.build_request(
                "POST", GenerationConstants.GENERATE_PATH, json=payload
            )
            try:
                async with asyncio.timeout(self._settings.request_timeout):
                    response = await client.send(request, stream=True)
            except (TimeoutError, *RETRYABLE_ERRORS) as exc:
                last_error = exc
            else:
                if response.is_success:
                    return response

                await response.aclose()
                error = GenerationBackendError(
                    ErrorMessages.GENERATION_HTTP_ERROR.format(
                        status=response.status_code, reason=response.reason_phrase
                    ),
                    status_code=response.status_code,
                )
                if not _is_retryable_status(response.status_code):
                    raise error
                last_error = error

            if attempt < attempts:
                delay = self._settings.retry_backoff * attempt
                logger.warning(
                    LogTemplates.GENERATION_RETRY,
                    str(last_error) or type(last_error).__name__,
                    attempt,
                    self._settings.max_retries,
                    delay,
                )
                await asyncio.sleep(delay)

        if isinstance(last_error, GenerationBackendError):
            raise last_error
        raise GenerationBackendError(
            ErrorMessages.GENERATION_REQUEST_FAILED.format(error=last_error)
        ) from last_error

    @staticmethod
    def _parse_line(line: str) -> str:
        line = line.strip()
        if not line:
            return ""
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            logger.debug(LogTemplates.GENERATION_MALFORMED_LINE, line[:100])
            return ""
        if not isinstance(data, dict):
            return ""
        fragment = data.get("response")
        return fragment if isinstance(fragment, str) else ""

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            logger.info(LogTemplates.GENERATION_CLIENT_CLOSED)
