"""Gemini backend: one streamed generate_content call, seen as a sequence of Fragments."""

from __future__ import annotations

from typing import AsyncIterator

from google import genai
from google.genai import types as gt
from loguru import logger

from yochat.config import ChatSettings
from yochat.errors import BackendError
from yochat.stream import Fragment


def chunk_text(chunk) -> str:
    """Text carried by the first candidate of a streamed chunk ("" if none)."""
    if not chunk.candidates:
        return ""
    content = chunk.candidates[0].content
    if not content or getattr(content, "parts", None) is None:
        return ""
    return "".join(part.text for part in content.parts
                   if getattr(part, "text", None) and not getattr(part, "thought", None))


class GeminiBackend:
    def __init__(self, api_key: str, settings: ChatSettings, client=None):
        self._settings = settings
        if client is None:
            client = genai.Client(
                api_key=api_key,
                http_options=gt.HttpOptions(timeout=int(settings.deadline * 1000)),
            )
        self._client = client

    @property
    def model(self) -> str:
        return self._settings.model

    def _generate_config(self) -> gt.GenerateContentConfig:
        return gt.GenerateContentConfig(system_instruction=self._settings.system_instruction)

    async def stream(self, contents: list[gt.Content]) -> AsyncIterator[Fragment]:
        """Yield text fragments in generation order.

        Any failure from the SDK, on the request or mid-stream, is yielded as a
        single error fragment and ends the sequence. Nothing is retried.
        """
        logger.debug("streaming from {}", self.model)
        try:
            response_stream = await self._client.aio.models.generate_content_stream(
                model=self.model,
                contents=contents,
                config=self._generate_config(),
            )
            async for chunk in response_stream:
                text = chunk_text(chunk)
                if text:
                    yield Fragment.delta(text)
        except Exception as e:
            logger.debug("backend failure: {!r}", e)
            yield Fragment.failure(BackendError(str(e) or type(e).__name__))
